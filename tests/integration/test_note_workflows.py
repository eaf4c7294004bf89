"""Integration tests for the REST workflows: versions, sharing and errors."""

import pytest

from src.notecollab.core.models import Collaborator


class TestVersionWorkflow:
    """Create, record, edit, undo, as a frontend would drive it."""

    async def test_record_edit_undo(self, api_client, owner_headers):
        created = await api_client.post(
            "/api/notes/", json={"title": "T", "content": "B"}, headers=owner_headers
        )
        assert created.status_code == 201
        body = created.json()
        assert body["message"] == "Note created successfully"
        note_id = body["data"]["id"]
        assert body["data"]["current_version"] == -1

        saved = await api_client.post(f"/api/notes/{note_id}/version", headers=owner_headers)
        assert saved.status_code == 200
        assert saved.json()["data"]["current_version"] == 0

        edited = await api_client.put(
            f"/api/notes/{note_id}", json={"title": "T2", "content": "B2"}, headers=owner_headers
        )
        assert edited.json()["data"]["title"] == "T2"

        undone = await api_client.post(f"/api/notes/{note_id}/undo", headers=owner_headers)
        assert undone.status_code == 200
        state = undone.json()["data"]
        assert (state["title"], state["content"], state["current_version"]) == ("T", "B", -1)

        again = await api_client.post(f"/api/notes/{note_id}/undo", headers=owner_headers)
        assert again.status_code == 400
        error = again.json()
        assert error["error"] == "NoHistoryError"
        assert error["message"] == "No version to undo to"
        assert "timestamp" in error

        redone = await api_client.post(f"/api/notes/{note_id}/redo", headers=owner_headers)
        assert redone.json()["data"]["content"] == "B"

    async def test_checkpoint_then_undo(self, api_client, owner_headers, note):
        resp = await api_client.post(
            f"/api/notes/{note.id}/checkpoint", json={"content": "B2"}, headers=owner_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["content"] == "B2"
        assert resp.json()["data"]["total_versions"] == 1

        undone = await api_client.post(f"/api/notes/{note.id}/undo", headers=owner_headers)
        assert undone.json()["data"]["content"] == "B"

    async def test_reader_cannot_undo(self, api_client, test_session, note, collaborator, collaborator_headers):
        note.collaborators.append(Collaborator(user_id=collaborator.id, permission="read"))
        await test_session.commit()

        resp = await api_client.post(f"/api/notes/{note.id}/undo", headers=collaborator_headers)
        assert resp.status_code == 403
        assert resp.json()["error"] == "ForbiddenError"

        # reading still works
        read = await api_client.get(f"/api/notes/{note.id}", headers=collaborator_headers)
        assert read.status_code == 200

    async def test_stranger(self, api_client, note, stranger_headers):
        undo = await api_client.post(f"/api/notes/{note.id}/undo", headers=stranger_headers)
        assert undo.status_code == 403
        read = await api_client.get(f"/api/notes/{note.id}", headers=stranger_headers)
        assert read.status_code == 404
        assert read.json()["error"] == "NoteNotFoundError"


class TestSharingWorkflow:
    async def test_share_join_edit_stop(self, api_client, note, owner_headers, collaborator, collaborator_headers):
        shared = await api_client.post(f"/api/notes/{note.id}/share", headers=owner_headers)
        assert shared.status_code == 200
        code = shared.json()["data"]["share_code"]
        assert len(code) == 8

        joined = await api_client.post(
            "/api/notes/join", json={"share_code": code}, headers=collaborator_headers
        )
        assert joined.status_code == 200
        data = joined.json()["data"]
        assert data["permission"] == "write"
        assert data["can_edit"] is True
        assert data["share_code"] is None

        edited = await api_client.post(
            f"/api/notes/{note.id}/checkpoint", json={"title": "Theirs"}, headers=collaborator_headers
        )
        assert edited.status_code == 200
        assert edited.json()["data"]["last_edited_by_id"] == str(collaborator.id)

        collaborators = await api_client.get(f"/api/notes/{note.id}/collaborators", headers=owner_headers)
        assert [c["user_id"] for c in collaborators.json()["data"]] == [str(collaborator.id)]

        listing = await api_client.get("/api/notes/", headers=collaborator_headers)
        assert [item["id"] for item in listing.json()["data"]["items"]] == [str(note.id)]

        stopped = await api_client.delete(f"/api/notes/{note.id}/share", headers=owner_headers)
        assert stopped.status_code == 200
        assert stopped.json()["message"] == "Note sharing stopped successfully"

        rejoin = await api_client.post(
            "/api/notes/join", json={"share_code": code}, headers=collaborator_headers
        )
        assert rejoin.status_code == 404
        assert rejoin.json()["error"] == "InvalidShareCodeError"

        gone = await api_client.get(f"/api/notes/{note.id}", headers=collaborator_headers)
        assert gone.status_code == 404

    async def test_share_with_custom_expiry(self, api_client, note, owner_headers):
        resp = await api_client.post(
            f"/api/notes/{note.id}/share", json={"expires_in_days": 1}, headers=owner_headers
        )
        assert resp.status_code == 200

        bad = await api_client.post(
            f"/api/notes/{note.id}/share", json={"expires_in_days": 0}, headers=owner_headers
        )
        assert bad.status_code == 422

    async def test_non_owner_cannot_share(self, api_client, note, stranger_headers):
        resp = await api_client.post(f"/api/notes/{note.id}/share", headers=stranger_headers)
        assert resp.status_code == 404


class TestNoteCrud:
    async def test_blank_title_is_400(self, api_client, owner_headers):
        resp = await api_client.post("/api/notes/", json={"title": "   "}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "ValidationError",
            "message": "Title is required",
            "details": None,
            "timestamp": resp.json()["timestamp"],
        }

    async def test_missing_title_is_422(self, api_client, owner_headers):
        resp = await api_client.post("/api/notes/", json={"content": "x"}, headers=owner_headers)
        assert resp.status_code == 422

    async def test_requires_authentication(self, api_client):
        resp = await api_client.get("/api/notes/")
        assert resp.status_code in (401, 403)

    async def test_favorite_and_filter(self, api_client, note, owner_headers):
        fav = await api_client.post(f"/api/notes/{note.id}/favorite", headers=owner_headers)
        assert fav.json()["message"] == "Note added to favorites"

        listing = await api_client.get("/api/notes/?favorites=true", headers=owner_headers)
        assert listing.json()["data"]["total"] == 1

    async def test_delete(self, api_client, note, owner_headers, collaborator_headers):
        denied = await api_client.delete(f"/api/notes/{note.id}", headers=collaborator_headers)
        assert denied.status_code == 404

        resp = await api_client.delete(f"/api/notes/{note.id}", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json()["data"] is None

        gone = await api_client.get(f"/api/notes/{note.id}", headers=owner_headers)
        assert gone.status_code == 404

    @pytest.mark.parametrize("path", ["/", "/api/"])
    async def test_root_endpoints(self, api_client, path):
        resp = await api_client.get(path)
        assert resp.status_code == 200
        assert resp.json()["message"] == "NoteCollab API"
