import pytest
from sqlalchemy import func, select

from app.core.errors import ForbiddenError, NotFoundError
from app.models.note import NoteVisibility
from app.models.note_share import NoteShare
from app.models.note_tag import note_tags
from app.models.public_link import PublicLink
from app.services import identity, notes, public_links, shares


async def test_resolve_user_is_case_insensitive(db, accounts):
    user = await identity.resolve_user(db, "  Alice@EXAMPLE.com")

    assert user.id == accounts.alice.id
    assert await identity.resolve_user_id(db, accounts.bob.email) == accounts.bob.id


async def test_resolve_unknown_user_is_not_found(db, accounts):
    with pytest.raises(NotFoundError):
        await identity.resolve_user(db, "ghost@example.com")


async def test_created_note_is_private_with_normalized_tags(db, accounts):
    note = await notes.create_note(
        db, accounts.alice.email, "Garden", content="Plant tomatoes", tags=[" Home ", "home", "Spring", ""]
    )

    assert note.visibility == NoteVisibility.PRIVATE
    assert note.owner_id == accounts.alice.id
    assert notes.tags_to_labels(note.tags) == ["home", "spring"]


async def test_private_note_is_owner_only(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Passwords hint")

    assert (await notes.get_note(db, note.id, accounts.alice.email)).title == "Passwords hint"
    with pytest.raises(ForbiddenError):
        await notes.get_note(db, note.id, accounts.bob.email)


async def test_missing_note_is_not_found(db, accounts):
    with pytest.raises(NotFoundError):
        await notes.get_note(db, 123456, accounts.alice.email)


async def test_update_changes_fields_and_is_owner_only(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Draft", content="v1", tags=["work"])

    updated = await notes.update_note(
        db, note.id, accounts.alice.email, title="Final", content=None, tags=["Ideas"]
    )

    assert updated.title == "Final"
    assert updated.content is None
    assert notes.tags_to_labels(updated.tags) == ["ideas"]
    with pytest.raises(ForbiddenError):
        await notes.update_note(db, note.id, accounts.bob.email, title="Hijacked")


async def test_explicit_private_update_keeps_existing_shares(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Team goals")
    await shares.create_share(db, note.id, accounts.alice.email, accounts.bob.email)

    updated = await notes.update_note(
        db, note.id, accounts.alice.email, new_visibility=NoteVisibility.PRIVATE
    )

    assert updated.visibility == NoteVisibility.PRIVATE
    assert (await notes.get_note(db, note.id, accounts.bob.email)).id == note.id


async def test_explicit_public_update_opens_note_without_a_link(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Manifesto")

    await notes.update_note(db, note.id, accounts.alice.email, new_visibility=NoteVisibility.PUBLIC)

    assert (await notes.get_note(db, note.id, accounts.carol.email)).id == note.id


async def test_delete_removes_note_with_grants(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Old stuff", tags=["archive"])
    await shares.create_share(db, note.id, accounts.alice.email, accounts.bob.email)
    link = await public_links.create_public_link(db, note.id, accounts.alice.email)

    await notes.delete_note(db, note.id, accounts.alice.email)

    with pytest.raises(NotFoundError):
        await notes.load_note(db, note.id)
    with pytest.raises(NotFoundError):
        await public_links.resolve_public_token(db, link.token)
    for table, column in ((NoteShare, NoteShare.note_id), (PublicLink, PublicLink.note_id)):
        assert await db.scalar(select(func.count()).select_from(table).where(column == note.id)) == 0
    assert await db.scalar(
        select(func.count()).select_from(note_tags).where(note_tags.c.note_id == note.id)
    ) == 0


async def test_only_owner_can_delete(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Keep me")
    await shares.create_share(db, note.id, accounts.alice.email, accounts.bob.email)

    with pytest.raises(ForbiddenError):
        await notes.delete_note(db, note.id, accounts.bob.email)

    assert (await notes.load_note(db, note.id)).id == note.id


async def test_search_filters_own_notes(db, accounts):
    await notes.create_note(db, accounts.alice.email, "Paris trip", content="Louvre", tags=["travel"])
    shared = await notes.create_note(db, accounts.alice.email, "Rome trip", content="Colosseum", tags=["travel"])
    await notes.create_note(db, accounts.alice.email, "Groceries", content="Milk, eggs", tags=["home"])
    await notes.create_note(db, accounts.bob.email, "Bob's trip", tags=["travel"])
    await shares.create_share(db, shared.id, accounts.alice.email, accounts.bob.email)

    found, total = await notes.search_notes(db, accounts.alice.email, query="trip")
    assert total == 2
    assert {n.title for n in found} == {"Paris trip", "Rome trip"}

    found, total = await notes.search_notes(db, accounts.alice.email, query="louvre")
    assert [n.title for n in found] == ["Paris trip"]

    found, total = await notes.search_notes(db, accounts.alice.email, tag="HOME")
    assert [n.title for n in found] == ["Groceries"]

    found, total = await notes.search_notes(
        db, accounts.alice.email, visibility_filter=NoteVisibility.SHARED
    )
    assert [n.title for n in found] == ["Rome trip"]


async def test_search_paginates(db, accounts):
    for index in range(5):
        await notes.create_note(db, accounts.alice.email, f"Note number {index}")

    first_page, total = await notes.search_notes(db, accounts.alice.email, page=0, size=2)
    last_page, _ = await notes.search_notes(db, accounts.alice.email, page=2, size=2)

    assert total == 5
    assert len(first_page) == 2
    assert len(last_page) == 1
    assert {n.id for n in first_page}.isdisjoint({n.id for n in last_page})


async def test_shared_with_me_lists_only_granted_notes(db, accounts):
    granted = await notes.create_note(db, accounts.alice.email, "For Bob")
    await notes.create_note(db, accounts.alice.email, "Not for Bob")
    public = await notes.create_note(db, accounts.alice.email, "For everyone")
    await shares.create_share(db, granted.id, accounts.alice.email, accounts.bob.email)
    await public_links.create_public_link(db, public.id, accounts.alice.email)

    found, total = await notes.list_shared_with_me(db, accounts.bob.email)

    assert total == 1
    assert [n.id for n in found] == [granted.id]
    assert await notes.shared_with_emails(db, granted) == [accounts.bob.email]


async def test_list_tags_covers_own_notes_only(db, accounts):
    await notes.create_note(db, accounts.alice.email, "One", tags=["b", "a"])
    await notes.create_note(db, accounts.alice.email, "Two", tags=["a"])
    await notes.create_note(db, accounts.bob.email, "Three", tags=["z"])

    assert await notes.list_tags(db, accounts.alice.email) == ["a", "b"]
