# ============================================
#     Aesthetic Chat — Moderation Protocol
#     join / chat / expel / ban / leave / disconnect
# ============================================
#
# Every handler takes the acting connection sid plus the event payload,
# consults and mutates the RoomRegistry under its lock, and returns an
# ordered list of transport instructions. Nothing here talks to Socket.IO.
#
# Authorization failures are silent (empty instruction list). Only the two
# join rejections (banned / username taken) are reported to the client.

from dataclasses import dataclass
from typing import Any, List, Optional

from aesthetic import events
from aesthetic.events import MalformedEvent
from aesthetic.registry import Banned, JoinError, Member, ROLE_ROOT, ROLE_USER
from aesthetic.config import LOG_MESSAGE_PREVIEW
from aesthetic.logger import log_debug, log_info, log_warning


# =====================================================
#   TRANSPORT INSTRUCTIONS
# =====================================================

@dataclass(frozen=True)
class Emit:
    """Send `event` to a connection sid or a room; `skip_sid` excludes one connection."""
    event: str
    payload: Any
    to: str
    skip_sid: Optional[str] = None


@dataclass(frozen=True)
class EnterRoom:
    sid: str
    room: str


@dataclass(frozen=True)
class LeaveRoom:
    sid: str
    room: str


# =====================================================
#   PROTOCOL
# =====================================================

class ModerationProtocol:

    def __init__(self, registry, root_id, clock=events.utc_now):
        self.registry = registry
        self.root_id = root_id
        self.clock = clock

        self._handlers = {
            events.JOIN_ROOM: self._on_join_room,
            events.CHAT_MESSAGE: self._on_chat_message,
            events.EXPEL_USER: self._on_expel_user,
            events.BAN_USER: self._on_ban_user,
            events.LEAVE_ROOM: self._on_leave_room,
        }

    # -----------------------------------------
    # DISPATCH
    # -----------------------------------------
    def dispatch(self, event: str, sid: str, data=None) -> List[Any]:
        """
        Route an inbound event to its handler.
        Unknown events and malformed payloads are dropped (empty list).
        """
        if event == events.DISCONNECT:
            return self.disconnect(sid)

        handler = self._handlers.get(event)
        if handler is None:
            log_warning("protocol", f"Unknown event {event!r} from sid={sid}")
            return []

        try:
            payload = events.require_fields(event, data)
        except MalformedEvent as e:
            log_warning("protocol", f"Dropped malformed event from sid={sid}: {e}")
            return []

        return handler(sid, payload)

    def effective_role(self, username: str, declared_role: str) -> str:
        """The root identity is always root; anyone else keeps the role they declared."""
        if username == self.root_id:
            return ROLE_ROOT
        return declared_role or ROLE_USER

    # -----------------------------------------
    # JOIN
    # -----------------------------------------
    def join_room(self, sid, username, room, role=ROLE_USER):
        registry = self.registry

        with registry.lock:
            try:
                if registry.is_banned(room, username):
                    raise Banned(room, username)

                member = Member(
                    sid=sid,
                    username=username,
                    room=room,
                    role=self.effective_role(username, role),
                )
                registry.try_add_member(room, member)
            except JoinError as e:
                log_info("protocol", f'Join refused: "{username}" in {room} ({e.message})')
                return [Emit(events.MESSAGE, events.error_payload(e.message, self.clock), to=sid)]

            user_list = events.user_list_payload(registry.list_members(room))

        log_info("protocol", f'"{username}" joined room {room} as {member.role}')

        return [
            EnterRoom(sid, room),
            Emit(events.MESSAGE, events.system_payload(f"Welcome to room #{room}!", self.clock), to=sid),
            Emit(events.USER_JOINED, events.username_payload(username), to=room, skip_sid=sid),
            Emit(events.USER_LIST, user_list, to=room),
        ]

    def _on_join_room(self, sid, data):
        return self.join_room(
            sid,
            data["username"],
            data["room"],
            events.optional_str(data, "role", ROLE_USER),
        )

    # -----------------------------------------
    # CHAT MESSAGE
    # -----------------------------------------
    def chat_message(self, sid, username, room, message, role=ROLE_USER):
        # No membership check: any connection may address any room.
        payload = events.chat_payload(
            username,
            message,
            self.effective_role(username, role),
            self.clock,
        )

        log_info("protocol", f'Message in {room} from "{username}": {message[:LOG_MESSAGE_PREVIEW]}')

        return [Emit(events.MESSAGE, payload, to=room)]

    def _on_chat_message(self, sid, data):
        return self.chat_message(
            sid,
            data["username"],
            data["room"],
            data["message"],
            events.optional_str(data, "role", ROLE_USER),
        )

    # -----------------------------------------
    # MODERATION HELPERS
    # -----------------------------------------
    def _authorized_actor(self, sid, target, room):
        """
        Return the acting root member, or None if the action must be ignored:
        actor not in the room, actor not root, or target is the actor / root identity.
        """
        actor = self.registry.get_member(room, sid)

        if actor is None or actor.role != ROLE_ROOT:
            log_debug("protocol", f"Ignored moderation from sid={sid} in {room}: not authorized")
            return None

        if target == actor.username or target == self.root_id:
            log_debug("protocol", f'Ignored moderation of "{target}" in {room}: protected')
            return None

        return actor

    # -----------------------------------------
    # EXPEL
    # -----------------------------------------
    def expel_user(self, sid, target, room):
        registry = self.registry
        instructions = []

        with registry.lock:
            actor = self._authorized_actor(sid, target, room)
            if actor is None:
                return []

            victim = registry.remove_username(room, target)
            if victim is None:
                log_debug("protocol", f'Expel ignored: "{target}" not in {room}')
                return []

            user_list = events.user_list_payload(registry.list_members(room))
            still_member = registry.get_member(room, victim.sid) is not None

        log_info("protocol", f"{target} was expelled from {room} by {actor.username}")

        notice = events.username_payload(target)
        instructions.append(Emit(events.USER_EXPELLED, notice, to=victim.sid))
        if not still_member:
            instructions.append(LeaveRoom(victim.sid, room))
        instructions.append(Emit(events.USER_EXPELLED, notice, to=room))
        instructions.append(Emit(events.USER_LIST, user_list, to=room))
        return instructions

    def _on_expel_user(self, sid, data):
        return self.expel_user(sid, data["username"], data["room"])

    # -----------------------------------------
    # BAN
    # -----------------------------------------
    def ban_user(self, sid, target, room):
        registry = self.registry
        instructions = []

        with registry.lock:
            actor = self._authorized_actor(sid, target, room)
            if actor is None:
                return []

            registry.ban(room, target)

            # Banned target gets no individual notice, only the room-wide one.
            victim = registry.remove_username(room, target)
            if victim is not None and registry.get_member(room, victim.sid) is None:
                instructions.append(LeaveRoom(victim.sid, room))

            user_list = events.user_list_payload(registry.list_members(room))

        log_info("protocol", f"{target} was banned from {room} by {actor.username}")

        instructions.append(Emit(events.USER_BANNED, events.username_payload(target), to=room))
        instructions.append(Emit(events.USER_LIST, user_list, to=room))
        return instructions

    def _on_ban_user(self, sid, data):
        return self.ban_user(sid, data["username"], data["room"])

    # -----------------------------------------
    # LEAVE
    # -----------------------------------------
    def leave_room(self, sid, username, room):
        registry = self.registry

        with registry.lock:
            removed = registry.remove_member(room, sid)
            user_list = events.user_list_payload(registry.list_members(room))

        instructions = [LeaveRoom(sid, room)]

        if not removed:
            log_debug("protocol", f'Leave ignored: sid={sid} ("{username}") not in {room}')
            return instructions

        for member in removed:
            log_info("protocol", f"{member.username} left room {room}")
            instructions.append(Emit(events.USER_LEFT, events.username_payload(member.username), to=room, skip_sid=sid))

        instructions.append(Emit(events.USER_LIST, user_list, to=room))
        return instructions

    def _on_leave_room(self, sid, data):
        return self.leave_room(sid, data["username"], data["room"])

    # -----------------------------------------
    # DISCONNECT
    # -----------------------------------------
    def disconnect(self, sid):
        """Drop every membership held by `sid`. Safe to call twice."""
        registry = self.registry
        departures = []

        with registry.lock:
            found = registry.find_by_connection(sid)
            while found is not None:
                room = found[0]
                removed = registry.remove_member(room, sid)
                departures.append((room, removed, events.user_list_payload(registry.list_members(room))))
                found = registry.find_by_connection(sid)

        instructions = []
        for room, removed, user_list in departures:
            for member in removed:
                log_info("protocol", f"{member.username} disconnected from {room}")
                instructions.append(Emit(events.USER_LEFT, events.username_payload(member.username), to=room, skip_sid=sid))
            instructions.append(Emit(events.USER_LIST, user_list, to=room))

        return instructions
