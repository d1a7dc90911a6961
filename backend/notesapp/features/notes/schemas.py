"""
Notes feature: Schemas for request/response models.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from notesapp.features.auth.schemas import UtcDatetime
from notesapp.features.notes.models import TAG_MAX_LENGTH, TITLE_MAX_LENGTH


def _require_text(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Strip tags, drop blanks and duplicates, keep first-seen order.

    Raises:
        ValueError: If a tag contains a comma (the list filter separator) or
            is longer than TAG_MAX_LENGTH.
    """
    seen: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if "," in tag:
            raise ValueError(f"tag {tag!r} must not contain a comma")
        if len(tag) > TAG_MAX_LENGTH:
            raise ValueError(f"tags must be at most {TAG_MAX_LENGTH} characters")
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class NoteCreate(BaseModel):
    """Request to create a new note."""
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    content: str
    tags: list[str] | None = None

    @field_validator("title", "content")
    @classmethod
    def check_text(cls, v: str | None) -> str | None:
        return _require_text(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return normalize_tags(v) if v is not None else None


class NoteUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""
    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    content: str | None = None
    tags: list[str] | None = None

    @field_validator("title", "content")
    @classmethod
    def check_text(cls, v: str | None) -> str | None:
        return _require_text(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return normalize_tags(v) if v is not None else None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class NoteResponse(BaseModel):
    """Wire shape of a note: {id, title, content, tags, userId, createdAt, updatedAt}."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    content: str
    tags: list[str] = []
    user_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class MessageResponse(BaseModel):
    message: str


NoteList = TypeAdapter(list[NoteResponse])
