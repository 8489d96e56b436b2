# ============================================
#     Aesthetic Chat — Room Registry
#     Rooms, members and per-room ban lists
# ============================================

import threading
from dataclasses import dataclass, asdict
from typing import Dict, FrozenSet, Optional, Set, Tuple

from aesthetic.logger import log_info, log_debug


# =====================================================
#   ROLES
# =====================================================

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_ROOT = "root"


# =====================================================
#   JOIN ERRORS
# =====================================================

class JoinError(Exception):
    """A join attempt was refused. `message` is shown to the joining client."""

    message = "Unable to join this room"

    def __init__(self, room: str, username: str):
        super().__init__(f"{username!r} cannot join {room!r}: {self.message}")
        self.room = room
        self.username = username


class UsernameTaken(JoinError):
    message = "Username already taken in this room"


class Banned(JoinError):
    message = "You are banned from this room"


# =====================================================
#   MEMBER
# =====================================================

@dataclass(frozen=True)
class Member:
    sid: str
    username: str
    room: str
    role: str = ROLE_USER

    def to_payload(self) -> dict:
        """Wire shape used in `userList` events."""
        data = asdict(self)
        data["socketId"] = data.pop("sid")
        return data


# =====================================================
#   REGISTRY
# =====================================================

class RoomRegistry:
    """
    In-memory registry of rooms, their members and their ban sets.

    A room exists only while it has at least one member. Removing the last
    member deletes the room and its ban set in the same critical section.

    Every public method takes `self.lock`. The lock is re-entrant, so callers
    can hold it across a check → mutate → snapshot sequence:

        with registry.lock:
            if not registry.is_banned(room, name):
                registry.try_add_member(room, member)
                members = registry.list_members(room)
    """

    def __init__(self):
        self.lock = threading.RLock()
        # room -> {username: Member}; one connection may hold several usernames
        self._rooms: Dict[str, Dict[str, Member]] = {}
        # room -> {username}
        self._banned: Dict[str, Set[str]] = {}

    def __contains__(self, room) -> bool:
        with self.lock:
            return room in self._rooms

    # -----------------------------------------
    # QUERIES (snapshots)
    # -----------------------------------------
    def list_members(self, room: str) -> Tuple[Member, ...]:
        with self.lock:
            return tuple(self._rooms.get(room, {}).values())

    def member_count(self, room: str) -> int:
        with self.lock:
            return len(self._rooms.get(room, {}))

    def room_names(self) -> Tuple[str, ...]:
        with self.lock:
            return tuple(self._rooms)

    def is_banned(self, room: str, username: str) -> bool:
        with self.lock:
            return username in self._banned.get(room, ())

    def banned_usernames(self, room: str) -> FrozenSet[str]:
        with self.lock:
            return frozenset(self._banned.get(room, ()))

    def get_member(self, room: str, sid: str) -> Optional[Member]:
        """First member of `room` bound to `sid`, in join order."""
        with self.lock:
            for member in self._rooms.get(room, {}).values():
                if member.sid == sid:
                    return member
            return None

    def find_by_username(self, room: str, username: str) -> Optional[Member]:
        with self.lock:
            return self._rooms.get(room, {}).get(username)

    def find_by_connection(self, sid: str) -> Optional[Tuple[str, Member]]:
        """Scan every room for a member bound to `sid`."""
        with self.lock:
            for room in self._rooms:
                member = self.get_member(room, sid)
                if member is not None:
                    return room, member
            return None

    # -----------------------------------------
    # MUTATIONS
    # -----------------------------------------
    def try_add_member(self, room: str, member: Member) -> None:
        """
        Insert `member` into `room`, creating the room if needed.

        Raises UsernameTaken if the username is already present.
        Ban checks are the caller's job (see ModerationProtocol).
        """
        with self.lock:
            members = self._rooms.get(room)

            if members is not None and member.username in members:
                raise UsernameTaken(room, member.username)

            if members is None:
                members = self._rooms[room] = {}
                log_debug("registry", f"Room created: {room}")

            members[member.username] = member

    def remove_member(self, room: str, sid: str) -> Tuple[Member, ...]:
        """
        Remove every member bound to `sid` in `room` and return them.
        Returns an empty tuple if the room or the connection is already gone.
        """
        with self.lock:
            members = self._rooms.get(room)
            if not members:
                return ()

            removed = tuple(m for m in members.values() if m.sid == sid)
            for member in removed:
                del members[member.username]

            self._drop_if_empty(room)
            return removed

    def remove_username(self, room: str, username: str) -> Optional[Member]:
        """Remove and return the member called `username` in `room`, if any."""
        with self.lock:
            members = self._rooms.get(room)
            if not members:
                return None

            member = members.pop(username, None)
            self._drop_if_empty(room)
            return member

    def ban(self, room: str, username: str) -> None:
        with self.lock:
            self._banned.setdefault(room, set()).add(username)

    def _drop_if_empty(self, room: str) -> None:
        # Caller holds the lock
        if room in self._rooms and not self._rooms[room]:
            del self._rooms[room]
            self._banned.pop(room, None)
            log_info("registry", f"Room deleted (empty): {room}")
