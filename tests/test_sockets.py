"""End-to-end tests through Flask-SocketIO's test client."""

import pytest

from aesthetic.registry import RoomRegistry
from aesthetic.server import create_app

ROOT = "root_master_2024"


@pytest.fixture
def server(registry: RoomRegistry):
    app, socketio = create_app(registry=registry, root_id=ROOT, async_mode="threading", serve_build=False)
    clients = []

    def connect():
        client = socketio.test_client(app)
        assert client.is_connected()
        clients.append(client)
        return client

    yield connect

    for client in clients:
        if client.is_connected():
            client.disconnect()


def received(client, name=None):
    return [
        packet["args"][0]
        for packet in client.get_received()
        if name is None or packet["name"] == name
    ]


def joined(connect, username, room="lobby", role="user"):
    client = connect()
    client.emit("joinRoom", {"username": username, "room": room, "role": role})
    return client


class TestJoinFlow:
    def test_welcome_and_user_list(self, server) -> None:
        alice = joined(server, "alice")

        packets = alice.get_received()
        names = [p["name"] for p in packets]
        assert names == ["message", "userList"]

        welcome = packets[0]["args"][0]
        assert welcome["type"] == "system"
        assert welcome["message"] == "Welcome to room #lobby!"

        user_list = packets[1]["args"][0]
        assert user_list == [{"socketId": user_list[0]["socketId"], "username": "alice", "room": "lobby", "role": "user"}]

    def test_others_notified(self, server) -> None:
        alice = joined(server, "alice")
        alice.get_received()

        bob = joined(server, "bob")

        assert received(alice, "userJoined") == [{"username": "bob"}]
        assert not received(bob, "userJoined")

    def test_duplicate_username_gets_error(self, server, registry: RoomRegistry) -> None:
        joined(server, "bob")
        impostor = joined(server, "bob")

        messages = received(impostor, "message")
        assert len(messages) == 1
        assert messages[0]["type"] == "error"
        assert messages[0]["message"] == "Username already taken in this room"
        assert registry.member_count("lobby") == 1

    def test_root_role(self, server, registry: RoomRegistry) -> None:
        joined(server, ROOT, role="user")

        assert registry.find_by_username("lobby", ROOT).role == "root"


class TestChat:
    def test_message_reaches_whole_room(self, server) -> None:
        alice = joined(server, "alice")
        bob = joined(server, "bob")
        outsider = joined(server, "carol", room="games")
        for client in (alice, bob, outsider):
            client.get_received()

        alice.emit("chatMessage", {"username": "alice", "room": "lobby", "message": "hi", "role": "user"})

        for client in (alice, bob):
            messages = received(client, "message")
            assert len(messages) == 1
            assert messages[0]["message"] == "hi"
            assert messages[0]["type"] == "normal"
        assert not outsider.get_received()


class TestModeration:
    def test_expel(self, server, registry: RoomRegistry) -> None:
        root = joined(server, ROOT)
        alice = joined(server, "alice")
        bob = joined(server, "bob")
        for client in (root, alice, bob):
            client.get_received()

        root.emit("expelUser", {"username": "bob", "room": "lobby"})

        assert registry.member_count("lobby") == 2
        assert received(bob, "userExpelled") == [{"username": "bob"}]

        for client in (root, alice):
            assert received(client, "userExpelled") == [{"username": "bob"}]

        alice.get_received()
        root.emit("chatMessage", {"username": ROOT, "room": "lobby", "message": "bye"})
        # bob left the delivery group
        assert not bob.get_received()

    def test_expel_refreshes_user_list(self, server) -> None:
        root = joined(server, ROOT)
        alice = joined(server, "alice")
        joined(server, "bob")
        alice.get_received()

        root.emit("expelUser", {"username": "bob", "room": "lobby"})

        lists = received(alice, "userList")
        assert len(lists) == 1
        assert sorted(u["username"] for u in lists[0]) == ["alice", ROOT]

    def test_ban_then_rejoin_refused(self, server, registry: RoomRegistry) -> None:
        root = joined(server, ROOT)
        bob = joined(server, "bob")
        bob.get_received()

        root.emit("banUser", {"username": "bob", "room": "lobby"})

        # Only the room-wide notice, which bob no longer receives
        assert not received(bob, "userBanned")
        assert registry.is_banned("lobby", "bob")

        bob.emit("joinRoom", {"username": "bob", "room": "lobby", "role": "user"})
        messages = received(bob, "message")
        assert messages[-1]["type"] == "error"
        assert messages[-1]["message"] == "You are banned from this room"

    def test_non_root_is_ignored(self, server, registry: RoomRegistry) -> None:
        alice = joined(server, "alice")
        bob = joined(server, "bob")
        bob.get_received()

        alice.emit("expelUser", {"username": "bob", "room": "lobby"})
        alice.emit("banUser", {"username": "bob", "room": "lobby"})

        assert registry.member_count("lobby") == 2
        assert not bob.get_received()


class TestLeaveAndDisconnect:
    def test_leave_room(self, server, registry: RoomRegistry) -> None:
        alice = joined(server, "alice")
        bob = joined(server, "bob")
        alice.get_received()

        bob.emit("leaveRoom", {"username": "bob", "room": "lobby"})

        assert received(alice, "userLeft") == [{"username": "bob"}]
        assert registry.member_count("lobby") == 1

    def test_disconnect_cleans_up(self, server, registry: RoomRegistry) -> None:
        alice = joined(server, "alice")
        bob = joined(server, "bob")
        alice.get_received()

        bob.disconnect()

        assert received(alice, "userLeft") == [{"username": "bob"}]
        assert registry.find_by_username("lobby", "bob") is None

    def test_last_disconnect_deletes_room_and_bans(self, server, registry: RoomRegistry) -> None:
        root = joined(server, ROOT)
        root.emit("banUser", {"username": "bob", "room": "lobby"})
        assert registry.is_banned("lobby", "bob")

        root.disconnect()

        assert "lobby" not in registry
        bob = joined(server, "bob")
        assert registry.find_by_username("lobby", "bob") is not None
        assert received(bob, "message")[0]["type"] == "system"

    def test_malformed_event_is_dropped(self, server, registry: RoomRegistry) -> None:
        client = server()

        client.emit("joinRoom", {"room": "lobby"})
        client.emit("joinRoom", "not-an-object")

        assert client.is_connected()
        assert not client.get_received()
        assert registry.room_names() == ()
