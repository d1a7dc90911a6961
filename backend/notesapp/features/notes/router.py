"""
Notes feature: API routes for note management.
"""

from fastapi import APIRouter, Depends, status

from notesapp.core.dependencies import get_current_user_id, get_notes_service
from notesapp.features.notes.schemas import (
    MessageResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from notesapp.features.notes.service import NotesService

router = APIRouter()


@router.get("", response_model=list[NoteResponse])
async def list_notes(
    tags: str | None = None,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """List the current user's notes; ``tags=a,b`` keeps notes tagged a OR b."""
    tag_filter = tags.split(",") if tags else None
    return service.list_notes(user_id, tag_filter)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    return service.get_note(note_id, user_id)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    data: NoteCreate,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """Create a new note."""
    return service.create_note(data, user_id)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    """Update the fields present in the request body."""
    return service.update_note(note_id, data, user_id)


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotesService = Depends(get_notes_service),
):
    service.delete_note(note_id, user_id)
    return {"message": "Note deleted successfully"}
