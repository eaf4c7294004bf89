"""Unit tests for permission checks."""

import uuid

import pytest

from src.notecollab.core.access import can_edit, can_view, permission_for
from src.notecollab.core.models.collaborator import Collaborator
from src.notecollab.core.models.note import Note


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def note(owner_id):
    return Note(title="T", owner_id=owner_id)


def add(note, permission):
    user_id = uuid.uuid4()
    note.collaborators.append(Collaborator(user_id=user_id, permission=permission))
    return user_id


def test_owner_can_always_edit(note, owner_id):
    assert can_edit(note, owner_id)
    assert permission_for(note, owner_id) == "owner"


def test_owner_can_edit_regardless_of_collaborators(note, owner_id):
    note.collaborators.append(Collaborator(user_id=owner_id, permission="read"))
    assert can_edit(note, owner_id)


@pytest.mark.parametrize("permission,editable", [("write", True), ("owner", True), ("read", False)])
def test_collaborator_permissions(note, permission, editable):
    user_id = add(note, permission)
    assert can_edit(note, user_id) is editable
    assert can_view(note, user_id)
    assert permission_for(note, user_id) == permission


def test_stranger_has_no_access(note):
    stranger = uuid.uuid4()
    assert permission_for(note, stranger) is None
    assert not can_edit(note, stranger)
    assert not can_view(note, stranger)
