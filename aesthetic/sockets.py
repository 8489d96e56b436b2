# ============================================
#   Aesthetic Chat — Socket.IO Handlers
#   Transport only: room logic lives in protocol.py
# ============================================

from flask import request

from aesthetic import events
from aesthetic.protocol import Emit, EnterRoom, LeaveRoom
from aesthetic.logger import log_info, log_exception


NAMESPACE = "/"


# =====================================================
#   APPLY PROTOCOL INSTRUCTIONS
# =====================================================

def apply_instructions(socketio, instructions):
    """Deliver protocol instructions in order."""
    server = socketio.server

    for instruction in instructions:
        if isinstance(instruction, Emit):
            socketio.emit(
                instruction.event,
                instruction.payload,
                to=instruction.to,
                skip_sid=instruction.skip_sid,
                namespace=NAMESPACE,
            )
        elif isinstance(instruction, EnterRoom):
            server.enter_room(instruction.sid, instruction.room, namespace=NAMESPACE)
        elif isinstance(instruction, LeaveRoom):
            server.leave_room(instruction.sid, instruction.room, namespace=NAMESPACE)
        else:
            raise TypeError(f"Unknown instruction: {instruction!r}")


# =====================================================
#   HANDLERS
# =====================================================

def register_handlers(socketio, protocol):

    def _handle(event, data=None):
        sid = request.sid
        try:
            apply_instructions(socketio, protocol.dispatch(event, sid, data))
        except Exception as e:
            # Never let one bad event take the connection down
            log_exception("sockets", f"Error handling {event} from sid={sid}: {e}")

    # -----------------------------------------
    # CONNECT
    # -----------------------------------------
    @socketio.on("connect", namespace=NAMESPACE)
    def on_connect(auth=None):
        log_info("sockets", f"User connected: {request.sid}")

    # -----------------------------------------
    # DISCONNECT
    # -----------------------------------------
    @socketio.on("disconnect", namespace=NAMESPACE)
    def on_disconnect(reason=None):
        _handle(events.DISCONNECT)
        log_info("sockets", f"User disconnected: {request.sid}")

    # -----------------------------------------
    # ROOM EVENTS
    # -----------------------------------------
    @socketio.on(events.JOIN_ROOM, namespace=NAMESPACE)
    def on_join_room(data):
        _handle(events.JOIN_ROOM, data)

    @socketio.on(events.CHAT_MESSAGE, namespace=NAMESPACE)
    def on_chat_message(data):
        _handle(events.CHAT_MESSAGE, data)

    @socketio.on(events.LEAVE_ROOM, namespace=NAMESPACE)
    def on_leave_room(data):
        _handle(events.LEAVE_ROOM, data)

    # -----------------------------------------
    # MODERATION (root only, enforced by the protocol)
    # -----------------------------------------
    @socketio.on(events.EXPEL_USER, namespace=NAMESPACE)
    def on_expel_user(data):
        _handle(events.EXPEL_USER, data)

    @socketio.on(events.BAN_USER, namespace=NAMESPACE)
    def on_ban_user(data):
        _handle(events.BAN_USER, data)
