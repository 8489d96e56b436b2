# ============================================
#     Aesthetic Chat — Main Application
# ============================================

# -------------------------------------------------
#   EVENTLET PATCH (REQUIRED FOR GUNICORN)
# -------------------------------------------------
import eventlet
eventlet.monkey_patch()

# -----------------------------------------
#   ENV VARIABLES (.env)
# -----------------------------------------
from dotenv import load_dotenv
load_dotenv()

from aesthetic.config import HOST, PORT, ROOT_MASTER_ID
from aesthetic.server import create_app
from aesthetic.logger import log_info

# =========================================
#   FLASK + SOCKET.IO
# =========================================
app, socketio = create_app()

# =========================================
#   RUN SERVER (DEV / PROD)
# =========================================
if __name__ == "__main__":
    log_info("app", f"Aesthetic Chat Server running on port {PORT}")
    log_info("app", f"Root Master ID: {ROOT_MASTER_ID}")
    socketio.run(app, host=HOST, port=PORT)
