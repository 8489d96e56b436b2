# ============================================
#     Aesthetic Chat — Wire Events & Payloads
# ============================================

from datetime import datetime, timezone


# =====================================================
#   INBOUND EVENTS (client → server)
# =====================================================

JOIN_ROOM = "joinRoom"
CHAT_MESSAGE = "chatMessage"
EXPEL_USER = "expelUser"
BAN_USER = "banUser"
LEAVE_ROOM = "leaveRoom"
DISCONNECT = "disconnect"

# Fields every inbound payload must carry (as strings).
# "role" is optional and normalized by the protocol.
REQUIRED_FIELDS = {
    JOIN_ROOM: ("username", "room"),
    CHAT_MESSAGE: ("username", "room", "message"),
    EXPEL_USER: ("username", "room"),
    BAN_USER: ("username", "room"),
    LEAVE_ROOM: ("username", "room"),
}


# =====================================================
#   OUTBOUND EVENTS (server → client)
# =====================================================

MESSAGE = "message"
USER_JOINED = "userJoined"
USER_LEFT = "userLeft"
USER_EXPELLED = "userExpelled"
USER_BANNED = "userBanned"
USER_LIST = "userList"

# message.type values
TYPE_NORMAL = "normal"
TYPE_SYSTEM = "system"
TYPE_ERROR = "error"

SYSTEM_USERNAME = "System"


class MalformedEvent(ValueError):
    """An inbound payload is missing a required field or is not a mapping."""


def require_fields(event, data):
    """
    Validate an inbound payload and return it.

    Raises MalformedEvent if `data` is not a dict or if any required field
    is missing or not a string.
    """
    if not isinstance(data, dict):
        raise MalformedEvent(f"{event}: payload must be an object, got {type(data).__name__}")

    for field in REQUIRED_FIELDS.get(event, ()):
        value = data.get(field)
        if not isinstance(value, str):
            raise MalformedEvent(f"{event}: missing or invalid field {field!r}")

    return data


def optional_str(data, field, default=""):
    value = data.get(field)
    return value if isinstance(value, str) else default


# =====================================================
#   PAYLOAD BUILDERS
# =====================================================

def utc_now():
    return datetime.now(timezone.utc)


def timestamp(clock=utc_now):
    return clock().isoformat()


def chat_payload(username, message, role, clock=utc_now):
    return {
        "username": username,
        "message": message,
        "timestamp": timestamp(clock),
        "role": role,
        "type": TYPE_NORMAL,
    }


def system_payload(message, clock=utc_now):
    return {
        "username": SYSTEM_USERNAME,
        "message": message,
        "timestamp": timestamp(clock),
        "type": TYPE_SYSTEM,
    }


def error_payload(message, clock=utc_now):
    return {
        "username": SYSTEM_USERNAME,
        "message": message,
        "timestamp": timestamp(clock),
        "type": TYPE_ERROR,
    }


def username_payload(username):
    """Body of userJoined / userLeft / userExpelled / userBanned."""
    return {"username": username}


def user_list_payload(members):
    return [m.to_payload() for m in members]
