"""Tests for note CRUD, ownership checks and the list cache."""

import pytest

from conftest import BrokenCache
from notesapp.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from notesapp.features.notes.repository import NoteRepository
from notesapp.features.notes.schemas import NoteCreate, NoteUpdate
from notesapp.features.notes.service import NotesService, cache_key


@pytest.fixture
def owner(make_user):
    return make_user("owner@x.com")


@pytest.fixture
def other(make_user):
    return make_user("other@x.com")


def titles(notes):
    return [n.title for n in notes]


class TestCacheKey:
    def test_unfiltered(self):
        assert cache_key("u1") == "notes:user:u1:all"
        assert cache_key("u1", []) == "notes:user:u1:all"

    def test_filtered_is_sorted_and_comma_joined(self):
        assert cache_key("u1", ["work", "home"]) == "notes:user:u1:tags:home,work"
        assert cache_key("u1", ["b", "a"]) == cache_key("u1", ["a", "b"])


class TestCreateAndGet:
    def test_create_then_get(self, notes_service, owner):
        created = notes_service.create_note(
            NoteCreate(title="T", content="C", tags=["work", "ideas"]), owner.id
        )
        fetched = notes_service.get_note(created.id, owner.id)

        assert fetched.title == "T"
        assert fetched.content == "C"
        assert fetched.tags == ["work", "ideas"]
        assert fetched.user_id == owner.id

    def test_tags_default_to_empty_and_timestamps_match(self, notes_service, owner):
        created = notes_service.create_note(NoteCreate(title="T", content="C"), owner.id)
        assert created.tags == []
        assert created.id
        assert created.created_at == created.updated_at

    def test_other_owner_is_forbidden(self, notes_service, owner, other):
        created = notes_service.create_note(NoteCreate(title="T", content="C"), owner.id)
        with pytest.raises(ForbiddenError):
            notes_service.get_note(created.id, other.id)

    def test_missing_note(self, notes_service, owner):
        with pytest.raises(NotFoundError):
            notes_service.get_note("does-not-exist", owner.id)


class TestList:
    def test_empty_and_absent_filter_are_equivalent(self, notes_service, owner):
        for t in ("first", "second", "third"):
            notes_service.create_note(NoteCreate(title=t, content="c"), owner.id)

        assert titles(notes_service.list_notes(owner.id)) == ["third", "second", "first"]
        assert titles(notes_service.list_notes(owner.id, [])) == ["third", "second", "first"]

    def test_only_own_notes(self, notes_service, owner, other):
        notes_service.create_note(NoteCreate(title="mine", content="c"), owner.id)
        notes_service.create_note(NoteCreate(title="theirs", content="c"), other.id)
        assert titles(notes_service.list_notes(owner.id)) == ["mine"]

    def test_tag_filter_is_any_match(self, notes_service, owner):
        notes_service.create_note(NoteCreate(title="x", content="c", tags=["x"]), owner.id)
        notes_service.create_note(NoteCreate(title="y", content="c", tags=["y", "z"]), owner.id)
        notes_service.create_note(NoteCreate(title="z", content="c", tags=["z"]), owner.id)
        notes_service.create_note(NoteCreate(title="none", content="c"), owner.id)

        xy = notes_service.list_notes(owner.id, ["x", "y"])
        yx = notes_service.list_notes(owner.id, ["y", "x"])

        assert titles(xy) == ["y", "x"]
        assert xy == yx

    def test_filter_order_shares_one_cache_entry(self, notes_service, owner, cache):
        notes_service.create_note(NoteCreate(title="x", content="c", tags=["x"]), owner.id)
        notes_service.list_notes(owner.id, ["y", "x"])
        assert cache.get(f"notes:user:{owner.id}:tags:x,y") is not None
        assert len(cache) == 1

    def test_work_and_home_filters(self, notes_service, owner):
        notes_service.create_note(NoteCreate(title="T", content="C", tags=["work"]), owner.id)
        assert notes_service.list_notes(owner.id, ["home"]) == []
        assert titles(notes_service.list_notes(owner.id, ["work"])) == ["T"]

    def test_result_is_served_from_cache(self, notes_service, owner, db, cache):
        notes_service.create_note(NoteCreate(title="T", content="C"), owner.id)
        first = notes_service.list_notes(owner.id)

        # write behind the service's back: a cache hit must not see it
        other_service = NotesService(NoteRepository(db), cache=BrokenCache())
        other_service.create_note(NoteCreate(title="hidden", content="C"), owner.id)

        assert notes_service.list_notes(owner.id) == first

    def test_cached_entry_expires_after_ttl(self, notes_service, owner, db, timer):
        notes_service.create_note(NoteCreate(title="T", content="C"), owner.id)
        notes_service.list_notes(owner.id)

        NotesService(NoteRepository(db), cache=BrokenCache()).create_note(
            NoteCreate(title="later", content="C"), owner.id
        )
        timer.advance(301)

        assert "later" in titles(notes_service.list_notes(owner.id))


class TestInvalidation:
    def test_create_invalidates_every_view(self, notes_service, owner):
        notes_service.create_note(NoteCreate(title="a", content="c", tags=["work"]), owner.id)
        notes_service.list_notes(owner.id)
        notes_service.list_notes(owner.id, ["work"])

        notes_service.create_note(NoteCreate(title="b", content="c", tags=["work"]), owner.id)

        assert titles(notes_service.list_notes(owner.id)) == ["b", "a"]
        assert titles(notes_service.list_notes(owner.id, ["work"])) == ["b", "a"]

    def test_update_invalidates(self, notes_service, owner):
        note = notes_service.create_note(NoteCreate(title="old", content="c"), owner.id)
        notes_service.list_notes(owner.id)

        notes_service.update_note(note.id, NoteUpdate(title="new"), owner.id)

        assert titles(notes_service.list_notes(owner.id)) == ["new"]

    def test_delete_invalidates(self, notes_service, owner):
        note = notes_service.create_note(NoteCreate(title="gone", content="c"), owner.id)
        notes_service.list_notes(owner.id)

        notes_service.delete_note(note.id, owner.id)

        assert notes_service.list_notes(owner.id) == []

    def test_other_owners_cache_untouched(self, notes_service, owner, other, cache):
        notes_service.create_note(NoteCreate(title="theirs", content="c"), other.id)
        notes_service.list_notes(other.id)

        notes_service.create_note(NoteCreate(title="mine", content="c"), owner.id)

        assert cache.get(cache_key(other.id)) is not None


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, notes_service, owner):
        note = notes_service.create_note(
            NoteCreate(title="old", content="body", tags=["a"]), owner.id
        )
        updated = notes_service.update_note(note.id, NoteUpdate(title="new"), owner.id)

        assert updated.title == "new"
        assert updated.content == "body"
        assert updated.tags == ["a"]
        assert updated.updated_at > note.updated_at
        assert updated.created_at == note.created_at

    def test_replace_tags(self, notes_service, owner):
        note = notes_service.create_note(NoteCreate(title="t", content="c", tags=["a", "b"]), owner.id)
        updated = notes_service.update_note(note.id, NoteUpdate(tags=["c"]), owner.id)
        assert updated.tags == ["c"]
        assert titles(notes_service.list_notes(owner.id, ["a"])) == []

    def test_updated_note_moves_to_front(self, notes_service, owner):
        first = notes_service.create_note(NoteCreate(title="first", content="c"), owner.id)
        notes_service.create_note(NoteCreate(title="second", content="c"), owner.id)

        notes_service.update_note(first.id, NoteUpdate(content="edited"), owner.id)

        assert titles(notes_service.list_notes(owner.id)) == ["first", "second"]

    def test_update_by_other_owner_forbidden(self, notes_service, owner, other):
        note = notes_service.create_note(NoteCreate(title="t", content="c"), owner.id)
        with pytest.raises(ForbiddenError):
            notes_service.update_note(note.id, NoteUpdate(title="x"), other.id)
        assert notes_service.get_note(note.id, owner.id).title == "t"

    def test_update_missing(self, notes_service, owner):
        with pytest.raises(NotFoundError):
            notes_service.update_note("missing", NoteUpdate(title="x"), owner.id)


class TestDelete:
    def test_delete_then_get_is_not_found(self, notes_service, owner):
        note = notes_service.create_note(NoteCreate(title="t", content="c"), owner.id)
        notes_service.delete_note(note.id, owner.id)
        with pytest.raises(NotFoundError):
            notes_service.get_note(note.id, owner.id)

    def test_delete_by_other_owner_forbidden(self, notes_service, owner, other):
        note = notes_service.create_note(NoteCreate(title="t", content="c"), owner.id)
        with pytest.raises(ForbiddenError):
            notes_service.delete_note(note.id, other.id)
        assert notes_service.get_note(note.id, owner.id).id == note.id


class TestCacheOutage:
    @pytest.fixture
    def service(self, db):
        return NotesService(NoteRepository(db), cache=BrokenCache())

    def test_every_operation_still_works(self, service, owner):
        note = service.create_note(NoteCreate(title="t", content="c", tags=["a"]), owner.id)
        assert titles(service.list_notes(owner.id)) == ["t"]
        assert titles(service.list_notes(owner.id, ["a"])) == ["t"]

        service.update_note(note.id, NoteUpdate(title="u"), owner.id)
        assert titles(service.list_notes(owner.id)) == ["u"]

        service.delete_note(note.id, owner.id)
        assert service.list_notes(owner.id) == []

    def test_failures_are_logged(self, service, owner, caplog):
        with caplog.at_level("WARNING", logger="notesapp.features.notes.service"):
            service.create_note(NoteCreate(title="t", content="c"), owner.id)
            service.list_notes(owner.id)
        messages = " ".join(r.getMessage() for r in caplog.records)
        assert "invalidation failed" in messages
        assert "read failed" in messages
        assert "write failed" in messages


class TestTagValidation:
    def test_comma_in_tag_rejected_at_schema(self):
        with pytest.raises(ValueError):
            NoteCreate(title="t", content="c", tags=["a,b"])

    def test_overlong_filter_tag_is_validation_error(self, notes_service, owner):
        with pytest.raises(ValidationError):
            notes_service.list_notes(owner.id, ["x" * 101])

    def test_comma_filter_tag_is_validation_error(self, notes_service, owner):
        with pytest.raises(ValidationError):
            notes_service.list_notes(owner.id, ["a,b"])
