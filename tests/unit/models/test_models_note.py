"""
Unit tests for the Note, Collaborator and NoteVersion models.
"""

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.notecollab.core.models import Collaborator, Note, NoteVersion, User


class TestNoteModel:
    async def test_defaults_after_insert(self, test_session, owner):
        note = Note(title="Test Note", owner_id=owner.id)
        test_session.add(note)
        await test_session.commit()
        await test_session.refresh(note)

        assert isinstance(note.id, uuid.UUID)
        assert note.content == ""
        assert note.current_version == -1
        assert note.is_shared is False
        assert note.is_favorite is False
        assert note.content_type == "plain"
        assert note.collaborators == []
        assert note.versions == []
        assert note.created_at is not None

    def test_new_note_has_loaded_empty_collections(self):
        note = Note(title="x", owner_id=uuid.uuid4())
        assert note.versions == []
        assert note.collaborators == []
        assert note.current_version == -1

    async def test_tags_round_trip(self, test_session, owner):
        note = Note(title="Tagged", owner_id=owner.id, tags=["a", "b"])
        test_session.add(note)
        await test_session.commit()
        result = await test_session.execute(select(Note.tags).where(Note.id == note.id))
        assert result.scalar_one() == ["a", "b"]

    def test_preview_truncates(self):
        note = Note(title="x", owner_id=uuid.uuid4(), content="a" * 250)
        assert len(note.preview) == 200
        assert note.preview.endswith("...")

    def test_mark_edited(self):
        note = Note(title="x", owner_id=uuid.uuid4())
        editor = uuid.uuid4()
        note.mark_edited(editor)
        assert note.last_edited_by_id == editor
        assert note.last_edited_at is not None

    async def test_delete_cascades_to_ledger_and_collaborators(self, test_session, note, collaborator):
        note.collaborators.append(Collaborator(user_id=collaborator.id, permission="write"))
        note.versions.append(NoteVersion(sequence=0, title="T", content="B"))
        await test_session.commit()

        await test_session.delete(note)
        await test_session.commit()

        assert (await test_session.execute(select(Collaborator))).scalars().all() == []
        assert (await test_session.execute(select(NoteVersion))).scalars().all() == []


class TestCollaboratorModel:
    async def test_unique_per_note_and_user(self, test_session, note, collaborator):
        test_session.add_all(
            [
                Collaborator(note_id=note.id, user_id=collaborator.id, permission="write"),
                Collaborator(note_id=note.id, user_id=collaborator.id, permission="read"),
            ]
        )
        with pytest.raises(IntegrityError):
            await test_session.commit()

    @pytest.mark.parametrize("permission,expected", [("read", False), ("write", True), ("owner", True)])
    def test_can_edit(self, permission, expected):
        assert Collaborator(user_id=uuid.uuid4(), permission=permission).can_edit is expected


class TestUserModel:
    def test_display_name_falls_back_to_username(self):
        assert User(username="ann").display_name == "ann"
        assert User(username="ann", full_name="Ann Lee").display_name == "Ann Lee"
