# ============================================
#     Aesthetic Chat — Application Factory
# ============================================

import os

from flask import Flask, send_from_directory
from flask_socketio import SocketIO
from werkzeug.security import safe_join

from aesthetic.config import BUILD_DIR, CORS_ORIGINS, IS_PROD, ROOT_MASTER_ID
from aesthetic.registry import RoomRegistry
from aesthetic.protocol import ModerationProtocol
from aesthetic.sockets import register_handlers
from aesthetic.logger import log_info, log_warning


def create_app(registry=None, root_id=ROOT_MASTER_ID, async_mode=None,
               serve_build=IS_PROD, build_dir=BUILD_DIR):
    """
    Build the Flask app and its SocketIO server.

    `registry` defaults to a fresh RoomRegistry; pass one in to inspect
    room state from tests. Returns (app, socketio).
    """
    app = Flask(__name__, static_folder=None)

    # None → same-origin only
    socketio = SocketIO(
        app,
        cors_allowed_origins=CORS_ORIGINS or None,
        async_mode=async_mode,
    )

    if registry is None:
        registry = RoomRegistry()

    protocol = ModerationProtocol(registry, root_id)
    register_handlers(socketio, protocol)

    app.extensions["aesthetic.registry"] = registry
    app.extensions["aesthetic.protocol"] = protocol

    if serve_build:
        _register_build_routes(app, build_dir)

    return app, socketio


# =========================================
#   FRONT-END BUILD (production)
# =========================================
def _register_build_routes(app, build_dir):
    if not os.path.isfile(os.path.join(build_dir, "index.html")):
        log_warning("server", f"No front-end build found in {build_dir}")

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def index(path):
        # Single-page app: unknown paths fall back to index.html.
        # safe_join returns None for paths escaping build_dir.
        asset = safe_join(build_dir, path) if path else None
        if asset and os.path.isfile(asset):
            return send_from_directory(build_dir, path)
        return send_from_directory(build_dir, "index.html")

    log_info("server", f"Serving front-end build from {build_dir}")
