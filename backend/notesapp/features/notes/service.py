"""
Notes feature: Service layer for note CRUD with a read-through list cache.

List results are cached per owner and tag filter:
  notes:user:<owner_id>:all
  notes:user:<owner_id>:tags:<tag1,tag2,...>   (tags sorted, comma-joined)

Every successful write wipes all of the owner's cached lists. The cache is
advisory: if it fails, reads go to the database and writes still succeed.
"""

import logging
from datetime import datetime
from typing import Callable

from notesapp.core.cache import Cache
from notesapp.core.exceptions import (
    CacheUnavailableError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from notesapp.features.auth.models import utcnow
from notesapp.features.notes.models import Note
from notesapp.features.notes.repository import NoteRepository
from notesapp.features.notes.schemas import (
    NoteCreate,
    NoteList,
    NoteResponse,
    NoteUpdate,
    normalize_tags,
)

logger = logging.getLogger(__name__)

NOTES_CACHE_TTL_SECONDS = 300


def cache_prefix(owner_id: str) -> str:
    return f"notes:user:{owner_id}:"


def cache_key(owner_id: str, tags: list[str] | None = None) -> str:
    """Cache key for a list view; independent of the order of ``tags``."""
    if not tags:
        return f"{cache_prefix(owner_id)}all"
    return f"{cache_prefix(owner_id)}tags:{','.join(sorted(tags))}"


class NotesService:
    """CRUD operations for notes, scoped to their owner."""

    def __init__(
        self,
        repo: NoteRepository,
        cache: Cache,
        ttl: int = NOTES_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repo = repo
        self.cache = cache
        self.ttl = ttl
        self.clock = clock

    def list_notes(self, owner_id: str, tags: list[str] | None = None) -> list[NoteResponse]:
        """List the owner's notes, newest update first, optionally filtered by tags (any match)."""
        try:
            tags = normalize_tags(tags)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        key = cache_key(owner_id, tags)

        cached = self._cache_get(key)
        if cached is not None:
            return NoteList.validate_json(cached)

        notes = [NoteResponse.model_validate(n) for n in self.repo.list_for_owner(owner_id, tags)]
        self._cache_set(key, NoteList.dump_json(notes).decode())
        return notes

    def get_note(self, note_id: str, owner_id: str) -> NoteResponse:
        return NoteResponse.model_validate(self._get_owned(note_id, owner_id))

    def create_note(self, data: NoteCreate, owner_id: str) -> NoteResponse:
        now = self.clock()
        note = Note(
            title=data.title,
            content=data.content,
            user_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        note.tags = data.tags or []
        note = self.repo.add(note)
        self._invalidate(owner_id)
        return NoteResponse.model_validate(note)

    def update_note(self, note_id: str, patch: NoteUpdate, owner_id: str) -> NoteResponse:
        note = self._get_owned(note_id, owner_id)

        for field, value in patch.changes().items():
            setattr(note, field, value)
        note.updated_at = self.clock()

        note = self.repo.save(note)
        self._invalidate(owner_id)
        return NoteResponse.model_validate(note)

    def delete_note(self, note_id: str, owner_id: str) -> None:
        note = self._get_owned(note_id, owner_id)
        self.repo.delete(note)
        self._invalidate(owner_id)

    # ── internals ────────────────────────────────────────

    def _get_owned(self, note_id: str, owner_id: str) -> Note:
        note = self.repo.get(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        if note.user_id != owner_id:
            raise ForbiddenError("You do not have access to this note")
        return note

    def _cache_get(self, key: str) -> str | None:
        try:
            return self.cache.get(key)
        except CacheUnavailableError as e:
            logger.warning(f"Cache read failed for {key}, falling back to database: {e.detail}")
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self.cache.set(key, value, self.ttl)
        except CacheUnavailableError as e:
            logger.warning(f"Cache write failed for {key}: {e.detail}")

    def _invalidate(self, owner_id: str) -> None:
        prefix = cache_prefix(owner_id)
        try:
            removed = self.cache.delete_prefix(prefix)
        except CacheUnavailableError as e:
            logger.warning(f"Cache invalidation failed for {prefix}*: {e.detail}")
            return
        logger.debug(f"Invalidated {removed} cached list(s) for {prefix}*")
