"""Async REST client for the NoteCollab API."""

from typing import Any, Dict, List, Optional

import httpx

from ..core.logging import get_logger

logger = get_logger("client.api")


class NoteCollabAPIError(Exception):
    """Non-2xx response. ``error`` is the server's error type when it sent one."""

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.error = error


class NoteCollabClient:
    """
    Thin wrapper over ``/api/notes``. Methods return the ``data`` part of the
    success envelope.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/api",
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        response = await self._client.request(method, url, **kwargs)
        if response.is_error:
            raise self._error_from(response)
        return response.json().get("data")

    @staticmethod
    def _error_from(response: httpx.Response) -> NoteCollabAPIError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("detail") or response.reason_phrase
        if not isinstance(message, str):
            # FastAPI 422 bodies carry a list of validation errors
            message = str(message)
        logger.debug(
            "API error", extra={"status_code": response.status_code, "url": str(response.url)}
        )
        return NoteCollabAPIError(response.status_code, message, body.get("error"))

    # notes
    async def create_note(self, title: str, content: str = "", **fields) -> Dict[str, Any]:
        return await self._request("POST", "/notes/", json={"title": title, "content": content, **fields})

    async def list_notes(self, page: int = 1, per_page: int = 50, favorites: bool = False) -> Dict[str, Any]:
        params = {"page": page, "per_page": per_page, "favorites": favorites}
        return await self._request("GET", "/notes/", params=params)

    async def get_note(self, note_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/notes/{note_id}")

    async def update_note(self, note_id: str, **fields) -> Dict[str, Any]:
        return await self._request("PUT", f"/notes/{note_id}", json=fields)

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{note_id}")

    async def toggle_favorite(self, note_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/notes/{note_id}/favorite")

    # sharing
    async def share(self, note_id: str, expires_in_days: int = 7) -> Dict[str, Any]:
        return await self._request(
            "POST", f"/notes/{note_id}/share", json={"expires_in_days": expires_in_days}
        )

    async def stop_sharing(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{note_id}/share")

    async def join(self, share_code: str) -> Dict[str, Any]:
        return await self._request("POST", "/notes/join", json={"share_code": share_code})

    async def collaborators(self, note_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/notes/{note_id}/collaborators")

    # versions
    async def save_version(self, note_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/notes/{note_id}/version")

    async def checkpoint(self, note_id: str, **fields) -> Dict[str, Any]:
        return await self._request("POST", f"/notes/{note_id}/checkpoint", json=fields)

    async def undo(self, note_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/notes/{note_id}/undo")

    async def redo(self, note_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/notes/{note_id}/redo")
