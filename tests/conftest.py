import os
import tempfile
from datetime import datetime, timezone

# Keep test logs out of the project tree (read by aesthetic.config at import)
os.environ.setdefault("AESTHETIC_LOG_DIR", tempfile.mkdtemp(prefix="aesthetic-logs-"))

import pytest

from aesthetic.registry import RoomRegistry
from aesthetic.protocol import ModerationProtocol

ROOT = "root_master_2024"

FIXED_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def protocol(registry):
    return ModerationProtocol(registry, ROOT, clock=lambda: FIXED_TIME)
