"""Unit tests for VersionService: the ledger persisted through the session."""

import asyncio
from uuid import uuid4

import pytest

from src.notecollab.core.exceptions import ForbiddenError, NoHistoryError, NoteNotFoundError, ValidationError
from src.notecollab.core.ledger import VersionLedger
from src.notecollab.core.models import Collaborator
from src.notecollab.core.schemas.notes import NoteUpdate
from src.notecollab.core.services import NoteService, VersionService


@pytest.fixture
def versions(test_session, note_locks):
    return VersionService(test_session, locks=note_locks)


@pytest.fixture
def notes(test_session, note_locks):
    return NoteService(test_session, locks=note_locks)


async def _share_with(session, note, user, permission="write"):
    note.collaborators.append(Collaborator(user_id=user.id, permission=permission))
    await session.commit()


async def test_record_edit_undo_scenario(versions, notes, owner, note):
    saved = await versions.save_version(note.id, owner.id)
    assert saved.current_version == 0
    assert saved.total_versions == 1

    await notes.update_note(note.id, owner.id, NoteUpdate(title="T2", content="B2"))

    state = await versions.undo(note.id, owner.id)
    assert (state.title, state.content) == ("T", "B")
    assert state.current_version == -1
    assert state.can_undo is False
    assert state.can_redo is True

    with pytest.raises(NoHistoryError):
        await versions.undo(note.id, owner.id)

    stored = await notes.get_note(note.id, owner.id)
    assert (stored.title, stored.content) == ("T", "B")


async def test_redo_restores_recorded_state(versions, owner, note):
    await versions.save_version(note.id, owner.id)
    await versions.checkpoint_and_update(note.id, owner.id, NoteUpdate(content="B2"))
    await versions.save_version(note.id, owner.id)

    await versions.undo(note.id, owner.id)
    await versions.undo(note.id, owner.id)
    state = await versions.redo(note.id, owner.id)
    assert state.content == "B"
    state = await versions.redo(note.id, owner.id)
    assert state.content == "B2"
    assert state.can_redo is False

    with pytest.raises(NoHistoryError):
        await versions.redo(note.id, owner.id)


async def test_checkpoint_records_then_updates(versions, owner, note):
    response = await versions.checkpoint_and_update(note.id, owner.id, NoteUpdate(title="T2", content="B2"))
    assert (response.title, response.content) == ("T2", "B2")
    assert response.current_version == 0
    assert response.total_versions == 1

    state = await versions.undo(note.id, owner.id)
    assert (state.title, state.content) == ("T", "B")


async def test_writer_collaborator_can_checkpoint(versions, test_session, collaborator, note):
    await _share_with(test_session, note, collaborator)
    response = await versions.checkpoint_and_update(note.id, collaborator.id, NoteUpdate(content="theirs"))
    assert response.content == "theirs"
    assert response.last_edited_by_id == collaborator.id


@pytest.mark.parametrize("operation", ["save_version", "undo", "redo"])
async def test_reader_is_forbidden(versions, test_session, collaborator, note, operation):
    await _share_with(test_session, note, collaborator, "read")
    with pytest.raises(ForbiddenError):
        await getattr(versions, operation)(note.id, collaborator.id)


async def test_stranger_is_forbidden(versions, stranger, note):
    with pytest.raises(ForbiddenError):
        await versions.checkpoint_and_update(note.id, stranger.id, NoteUpdate(content="x"))


async def test_missing_note(versions, owner):
    with pytest.raises(NoteNotFoundError):
        await versions.save_version(uuid4(), owner.id)


async def test_undo_on_empty_ledger(versions, owner, note):
    with pytest.raises(NoHistoryError):
        await versions.undo(note.id, owner.id)


async def test_cap_evicts_oldest_rows(test_session, note_locks, owner, note):
    versions = VersionService(test_session, locks=note_locks, ledger=VersionLedger(max_versions=3))
    for i in range(5):
        await versions.checkpoint_and_update(note.id, owner.id, NoteUpdate(content=f"v{i}"))

    saved = await versions.save_version(note.id, owner.id)
    assert saved.total_versions == 3
    assert saved.current_version == 2


async def test_concurrent_saves_serialize(versions, owner, note):
    results = await asyncio.gather(*(versions.save_version(note.id, owner.id) for _ in range(5)))
    assert sorted(r.current_version for r in results) == [0, 1, 2, 3, 4]
    assert max(r.total_versions for r in results) == 5


async def test_concurrent_undos_do_not_double_apply(versions, owner, note):
    await versions.save_version(note.id, owner.id)
    await versions.checkpoint_and_update(note.id, owner.id, NoteUpdate(content="B2"))

    results = await asyncio.gather(
        versions.undo(note.id, owner.id),
        versions.undo(note.id, owner.id),
        return_exceptions=True,
    )
    cursors = sorted(r.current_version for r in results if not isinstance(r, Exception))
    assert cursors == [-1, 0]


async def test_blank_title_checkpoint_records_nothing(versions, owner, note):
    with pytest.raises(ValidationError):
        await versions.checkpoint_and_update(note.id, owner.id, NoteUpdate(title="  "))

    saved = await versions.save_version(note.id, owner.id)
    assert saved.total_versions == 1
