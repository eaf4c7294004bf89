"""Unit tests for the WebSocket collaboration session and the editor on top of it."""

import json
from unittest.mock import AsyncMock

import pytest

from src.notecollab.client import CollaborationSession, CollaborativeEditor


def frame(event, data):
    return json.dumps({"event": event, "data": data})


@pytest.fixture
def session():
    session = CollaborationSession("ws://test/ws", token="abc")
    session.websocket = AsyncMock()
    return session


def sent_frames(session):
    return [json.loads(call.args[0]) for call in session.websocket.send.await_args_list]


def test_token_goes_in_query_string():
    assert CollaborationSession("ws://test/ws", token="abc").url == "ws://test/ws?token=abc"
    assert CollaborationSession("ws://test/ws").url == "ws://test/ws"


async def test_join_and_update_frames(session):
    await session.join("n1", "u1", "Ann")
    await session.send_update("T", "B")
    await session.send_cursor({"line": 1})

    join, update, cursor = sent_frames(session)
    assert join == {"event": "join-note", "data": {"documentId": "n1", "userId": "u1", "userName": "Ann"}}
    assert update["event"] == "note-update"
    assert update["data"]["content"] == "B"
    assert update["data"]["documentId"] == "n1"
    assert cursor["data"]["position"] == {"line": 1}


async def test_send_requires_connection():
    session = CollaborationSession()
    with pytest.raises(RuntimeError):
        await session.join("n1", "u1")


async def test_presence_tracking(session):
    await session.handle_frame(
        frame("active-users", [{"userId": "u2", "userName": "Bob", "connectionId": "c2"}])
    )
    await session.handle_frame(frame("user-joined", {"userId": "u3", "userName": "Cid", "connectionId": "c3"}))
    assert set(session.collaborators) == {"c2", "c3"}

    await session.handle_frame(frame("user-left", {"userId": "u2", "userName": "Bob", "connectionId": "c2"}))
    assert set(session.collaborators) == {"c3"}


async def test_handlers_sync_and_async(session):
    seen = []

    async def async_handler(data):
        seen.append(("async", data["content"]))

    session.on("note-updated", lambda data: seen.append(("sync", data["content"])))
    session.on("note-updated", async_handler)
    await session.handle_frame(frame("note-updated", {"content": "x", "title": "t"}))

    assert seen == [("sync", "x"), ("async", "x")]


@pytest.mark.parametrize("raw", ["not json", json.dumps({"data": {}}), json.dumps([1, 2])])
async def test_malformed_frames_ignored(session, raw):
    called = []
    session.on("note-updated", called.append)
    await session.handle_frame(raw)
    assert called == []


async def test_editor_broadcasts_and_saves_latest(session):
    save = AsyncMock()
    editor = CollaborativeEditor(session, save, interval=10)
    await editor.open({"id": "n1", "title": "T", "content": "B"}, "u1", "Ann")

    await editor.edit(content="B1")
    await editor.edit(content="B2")
    await editor.close()

    updates = [f for f in sent_frames(session) if f["event"] == "note-update"]
    assert [u["data"]["content"] for u in updates] == ["B1", "B2"]
    save.assert_awaited_once_with({"title": "T", "content": "B2"})


async def test_editor_applies_remote_edit_without_saving(session):
    save = AsyncMock()
    remote = []
    editor = CollaborativeEditor(session, save, interval=10, on_remote_change=remote.append)
    await editor.open({"id": "n1", "title": "T", "content": "B"}, "u1", "Ann")

    await session.handle_frame(frame("note-updated", {"title": "T9", "content": "theirs", "userId": "u2"}))
    await editor.close()

    assert (editor.title, editor.content) == ("T9", "theirs")
    assert len(remote) == 1
    save.assert_not_awaited()
