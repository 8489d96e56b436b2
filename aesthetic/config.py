# ============================================
#     Aesthetic Chat — Global Configuration
# ============================================

import os

# =========================================
#   ENVIRONMENT
# =========================================
# Expected values: "dev", "prod"
ENV = os.getenv("ENV", "dev").lower()

IS_PROD = ENV == "prod"

# =========================================
#   SERVER
# =========================================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))

# Project root = one level above /aesthetic
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Built front-end, served only in production
BUILD_DIR = os.getenv("BUILD_DIR", os.path.join(PROJECT_ROOT, "build"))

# =========================================
#   CORS (Socket.IO)
# =========================================
# Dev: the front-end dev server runs on :3000.
# Prod: same-origin only (empty list disables cross-origin requests).
_DEFAULT_CORS = "" if IS_PROD else "http://localhost:3000"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", _DEFAULT_CORS).split(",")
    if origin.strip()
]

# =========================================
#   ROOT IDENTITY (shared secret)
# =========================================
# Any member joining with this username is granted the "root" role.
ROOT_MASTER_ID = os.getenv("AESTHETIC_ROOT_ID", "root_master_2024")

# =========================================
#   LOGS
# =========================================
LOG_DIR = os.getenv("AESTHETIC_LOG_DIR", os.path.join(PROJECT_ROOT, "var", "logs"))
DEFAULT_LOG_FILE = os.path.join(LOG_DIR, "aesthetic.log")
LOG_FILE = os.getenv("AESTHETIC_LOG_FILE", DEFAULT_LOG_FILE)

# Chat messages are logged truncated to this many characters
LOG_MESSAGE_PREVIEW = 80
