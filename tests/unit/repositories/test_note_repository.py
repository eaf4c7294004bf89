"""Unit tests for NoteRepository against SQLite."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from src.notecollab.core.models import Collaborator, Note
from src.notecollab.core.repositories import NoteRepository, UserRepository


@pytest.fixture
def repo(test_session):
    return NoteRepository(test_session)


async def _note(session, owner, **fields):
    note = Note(title=fields.pop("title", "n"), owner_id=owner.id, **fields)
    session.add(note)
    await session.commit()
    return note


class TestAccess:
    async def test_get_accessible(self, repo, test_session, note, owner, collaborator, stranger):
        note.collaborators.append(Collaborator(user_id=collaborator.id, permission="read"))
        await test_session.commit()

        assert (await repo.get_accessible(note.id, owner.id)).id == note.id
        assert (await repo.get_accessible(note.id, collaborator.id)).id == note.id
        assert await repo.get_accessible(note.id, stranger.id) is None

    async def test_get_by_id_and_owner(self, repo, note, owner, collaborator):
        assert await repo.get_by_id_and_owner(note.id, owner.id) is not None
        assert await repo.get_by_id_and_owner(note.id, collaborator.id) is None
        assert await repo.get_by_id(uuid.uuid4()) is None

    async def test_loaded_note_has_ledger(self, repo, note, owner):
        loaded = await repo.get_by_id(note.id)
        assert loaded.versions == []
        assert loaded.collaborators == []


class TestListing:
    async def test_newest_edit_first_with_total(self, repo, test_session, owner, collaborator):
        now = datetime.now(timezone.utc)
        old = await _note(test_session, owner, title="old", last_edited_at=now - timedelta(hours=2))
        new = await _note(test_session, owner, title="new", last_edited_at=now)
        theirs = await _note(test_session, collaborator, title="theirs", last_edited_at=now - timedelta(hours=1))
        theirs.collaborators.append(Collaborator(user_id=owner.id, permission="write"))
        await test_session.commit()

        notes, total = await repo.list_accessible(owner.id)
        assert total == 3
        assert [n.title for n in notes] == [new.title, theirs.title, old.title]

        page, total = await repo.list_accessible(owner.id, page=2, per_page=2)
        assert total == 3
        assert [n.title for n in page] == ["old"]

    async def test_favorites_only(self, repo, test_session, owner):
        await _note(test_session, owner, title="plain")
        await _note(test_session, owner, title="fav", is_favorite=True)

        notes, total = await repo.list_accessible(owner.id, favorites_only=True)
        assert total == 1
        assert notes[0].title == "fav"


class TestShareCodes:
    async def test_valid_share_code_lookup_skips_expired(self, repo, test_session, owner):
        now = datetime.now(timezone.utc)
        await _note(test_session, owner, title="live", share_code="LIVE0000", share_code_expires_at=now + timedelta(days=1))
        await _note(test_session, owner, title="dead", share_code="DEAD0000", share_code_expires_at=now - timedelta(days=1))

        assert (await repo.get_by_valid_share_code("LIVE0000")).title == "live"
        assert await repo.get_by_valid_share_code("DEAD0000") is None

    async def test_share_code_exists_includes_expired(self, repo, test_session, owner):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        await _note(test_session, owner, share_code="USED0000", share_code_expires_at=past)
        assert await repo.share_code_exists("USED0000") is True
        assert await repo.share_code_exists("FREE0000") is False


class TestDelete:
    async def test_only_owner_deletes(self, repo, note, owner, collaborator):
        assert await repo.delete_note(note.id, collaborator.id) is False
        assert await repo.delete_note(note.id, owner.id) is True
        assert await repo.get_by_id(note.id) is None


class TestUserRepository:
    async def test_get_many_skips_unknown_and_none(self, test_session, owner, collaborator):
        users = await UserRepository(test_session).get_many([owner.id, collaborator.id, None, uuid.uuid4()])
        assert set(users) == {owner.id, collaborator.id}

    async def test_get_many_empty(self, test_session):
        assert await UserRepository(test_session).get_many([]) == {}

