"""
Notes feature: note store over the notes / note_tags tables.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from notesapp.features.notes.models import Note, NoteTag


class NoteRepository:
    """Owner-scoped queries and persistence for notes."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_owner(self, owner_id: str, tags: list[str] | None = None) -> list[Note]:
        """Notes owned by ``owner_id``, most recently updated first.

        With ``tags``, only notes carrying at least one of them are returned.
        """
        query = select(Note).where(Note.user_id == owner_id)

        if tags:
            tagged = select(NoteTag.note_id).where(NoteTag.tag.in_(tags))
            query = query.where(Note.id.in_(tagged))

        query = query.order_by(Note.updated_at.desc(), Note.created_at.desc(), Note.id)
        return list(self.db.scalars(query).all())

    def get(self, note_id: str) -> Note | None:
        return self.db.get(Note, note_id)

    def add(self, note: Note) -> Note:
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    def save(self, note: Note) -> Note:
        self.db.commit()
        self.db.refresh(note)
        return note

    def delete(self, note: Note) -> None:
        self.db.delete(note)
        self.db.commit()
