"""
HTTP client for the notes API, as used by the dashboard.

Wraps an ``httpx.Client`` whose base_url points at the API prefix
(e.g. ``http://localhost:8000/api``). The access token returned by
register/login is kept on the client and sent as a bearer header.
"""

import httpx

from notesapp.core.exceptions import UnauthorizedError


def collect_tags(notes: list[dict]) -> list[str]:
    """Sorted unique tags across a list of notes (feeds the tag filter)."""
    tags: set[str] = set()
    for note in notes:
        tags.update(note.get("tags", []))
    return sorted(tags)


class NotesApiClient:
    def __init__(self, http: httpx.Client, token: str | None = None):
        self.http = http
        self.token = token

    # ── Auth ─────────────────────────────────────────────
    def register(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/register", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    def get_profile(self) -> dict:
        return self._request("GET", "/auth/profile")

    # ── Notes ────────────────────────────────────────────
    def get_notes(self, tags: list[str] | None = None) -> list[dict]:
        params = {"tags": ",".join(tags)} if tags else None
        return self._request("GET", "/notes", params=params)

    def get_note(self, note_id: str) -> dict:
        return self._request("GET", f"/notes/{note_id}")

    def create_note(self, title: str, content: str, tags: list[str] | None = None) -> dict:
        return self._request(
            "POST", "/notes", json={"title": title, "content": content, "tags": tags or []}
        )

    def update_note(self, note_id: str, **changes) -> dict:
        return self._request("PATCH", f"/notes/{note_id}", json=changes)

    def delete_note(self, note_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}")

    def _request(self, method: str, path: str, **kwargs):
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = self.http.request(method, path, headers=headers, **kwargs)
        if response.status_code == 401:
            # stale or rejected token: force a fresh login
            self.token = None
            body = response.json()
            raise UnauthorizedError(body.get("error", "Unauthorized"), body.get("detail"))
        response.raise_for_status()
        return response.json()
