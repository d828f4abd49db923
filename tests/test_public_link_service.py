from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.core.errors import ConflictError, ExpiredError, ForbiddenError, NotFoundError
from app.models.note import NoteVisibility
from app.models.public_link import PublicLink
from app.services import notes, public_links, shares


async def test_link_makes_note_public_and_resolves(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Conference talk", content="Slides soon")

    link = await public_links.create_public_link(db, note.id, accounts.alice.email)
    resolved = await public_links.resolve_public_token(db, link.token)

    assert resolved.id == note.id
    assert resolved.content == "Slides soon"
    assert resolved.visibility == NoteVisibility.PUBLIC
    assert link.expires_at is None


async def test_link_overwrites_shared_visibility(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Hiring plan")
    await shares.create_share(db, note.id, accounts.alice.email, accounts.bob.email)

    await public_links.create_public_link(db, note.id, accounts.alice.email)

    reloaded = await notes.load_note(db, note.id)
    assert reloaded.visibility == NoteVisibility.PUBLIC
    # The share survives the transition
    assert (await notes.get_note(db, note.id, accounts.bob.email)).id == note.id


async def test_public_note_is_readable_by_any_authenticated_user(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Open letter")
    await public_links.create_public_link(db, note.id, accounts.alice.email)

    assert (await notes.get_note(db, note.id, accounts.carol.email)).id == note.id


async def test_only_owner_can_create_link(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Secret recipe")

    with pytest.raises(ForbiddenError):
        await public_links.create_public_link(db, note.id, accounts.bob.email)

    result = await db.execute(select(PublicLink).where(PublicLink.note_id == note.id))
    assert result.scalars().all() == []
    assert (await notes.load_note(db, note.id)).visibility == NoteVisibility.PRIVATE


async def test_link_for_unknown_note_is_not_found(db, accounts):
    with pytest.raises(NotFoundError):
        await public_links.create_public_link(db, 777, accounts.alice.email)


async def test_unknown_token_is_not_found(db, accounts):
    with pytest.raises(NotFoundError):
        await public_links.resolve_public_token(db, "0" * 32)


async def test_expired_link_is_distinct_from_missing(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Flash sale")
    expired_at = datetime.now(timezone.utc) - timedelta(minutes=5)
    link = await public_links.create_public_link(db, note.id, accounts.alice.email, expires_at=expired_at)

    with pytest.raises(ExpiredError) as excinfo:
        await public_links.resolve_public_token(db, link.token)

    assert excinfo.value.status_code == 410
    assert abs(excinfo.value.expired_at - expired_at) < timedelta(seconds=1)


async def test_link_with_future_expiry_resolves(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Weekend menu")
    expires_at = datetime.now(timezone.utc) + timedelta(days=1)
    link = await public_links.create_public_link(db, note.id, accounts.alice.email, expires_at=expires_at)

    assert (await public_links.resolve_public_token(db, link.token)).id == note.id


async def test_several_links_coexist(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Press kit")

    first = await public_links.create_public_link(db, note.id, accounts.alice.email)
    second = await public_links.create_public_link(db, note.id, accounts.alice.email)

    assert first.token != second.token
    assert (await public_links.resolve_public_token(db, first.token)).id == note.id
    assert (await public_links.resolve_public_token(db, second.token)).id == note.id
    listed = await public_links.list_public_links(db, note.id, accounts.alice.email)
    assert [link.id for link in listed] == [first.id, second.id]


async def test_revoked_token_stops_resolving_but_note_stays_public(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Beta invite")
    link = await public_links.create_public_link(db, note.id, accounts.alice.email)

    await public_links.delete_public_link(db, link.id, accounts.alice.email)

    with pytest.raises(NotFoundError):
        await public_links.resolve_public_token(db, link.token)
    assert (await notes.load_note(db, note.id)).visibility == NoteVisibility.PUBLIC
    # Visibility alone still opens the note to authenticated users
    assert (await notes.get_note(db, note.id, accounts.carol.email)).id == note.id


async def test_only_owner_can_revoke_or_list_links(db, accounts):
    note = await notes.create_note(db, accounts.alice.email, "Beta invite")
    link = await public_links.create_public_link(db, note.id, accounts.alice.email)

    with pytest.raises(ForbiddenError):
        await public_links.delete_public_link(db, link.id, accounts.bob.email)
    with pytest.raises(ForbiddenError):
        await public_links.list_public_links(db, note.id, accounts.bob.email)

    assert (await public_links.resolve_public_token(db, link.token)).id == note.id


async def test_revoking_unknown_link_is_not_found(db, accounts):
    with pytest.raises(NotFoundError):
        await public_links.delete_public_link(db, 31337, accounts.alice.email)


async def test_token_collision_is_a_conflict(db, accounts, monkeypatch):
    note = await notes.create_note(db, accounts.alice.email, "Launch post")
    note_id = note.id
    existing = await public_links.create_public_link(db, note.id, accounts.alice.email)
    token = existing.token
    monkeypatch.setattr(public_links, "generate_token", lambda: token)

    with pytest.raises(ConflictError):
        await public_links.create_public_link(db, note.id, accounts.alice.email)

    result = await db.execute(select(PublicLink).where(PublicLink.note_id == note_id))
    assert [link.token for link in result.scalars().all()] == [token]
