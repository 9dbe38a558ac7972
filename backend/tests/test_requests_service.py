"""
Lifecycle tests for pixel claim requests.

Covers submission validation, the 12-hour visibility window for pending
requests, admin views with the derived "expired" status, and the flat
status transition graph.
"""

from datetime import datetime, timedelta, timezone

import pytest

from pixelboard.core.errors import AuthorizationError, NotFoundError, ValidationError
from pixelboard.services import requests as request_service
from pixelboard.services.requests import normalize_telegram

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


async def _submit(db, now=NOW, **fields):
    fields.setdefault("pixels", {"3,4": True})
    request = await request_service.submit_request(db, fields, now=now)
    await db.commit()
    return request


async def test_submit_then_expire_after_visibility_window(db_session):
    request = await _submit(db_session, email="a@b.com")

    assert request.id
    assert request.status == "pending"
    assert request.pixels == {"3,4": True}

    visible = await request_service.list_visible(db_session, now=NOW)
    assert [r.id for r in visible] == [request.id]

    later = NOW + timedelta(hours=12, seconds=1)
    assert await request_service.list_visible(db_session, now=later) == []

    rows = await request_service.list_all(db_session, now=later)
    assert [(r.id, status) for r, status in rows] == [(request.id, "expired")]


async def test_pending_at_exactly_twelve_hours_is_expired(db_session):
    await _submit(db_session, email="a@b.com")

    just_before = NOW + timedelta(hours=12) - timedelta(microseconds=1)
    assert len(await request_service.list_visible(db_session, now=just_before)) == 1
    assert await request_service.list_visible(db_session, now=NOW + timedelta(hours=12)) == []


async def test_confirmed_always_visible_and_rejected_never(db_session):
    old = NOW - timedelta(days=30)
    confirmed = await _submit(db_session, now=old, email="c@d.com")
    rejected = await _submit(db_session, now=NOW, telegram="fresh_user")
    await request_service.transition(db_session, confirmed.id, "confirmed", now=old)
    await request_service.transition(db_session, rejected.id, "rejected", now=NOW)
    await db_session.commit()

    visible_ids = {r.id for r in await request_service.list_visible(db_session, now=NOW)}
    assert visible_ids == {confirmed.id}

    rows = await request_service.list_all(db_session, now=NOW)
    assert {r.id: status for r, status in rows} == {confirmed.id: "confirmed", rejected.id: "rejected"}


async def test_list_all_is_newest_first(db_session):
    first = await _submit(db_session, now=NOW - timedelta(hours=2), email="a@b.com")
    second = await _submit(db_session, now=NOW - timedelta(hours=1), email="a@b.com")

    rows = await request_service.list_all(db_session, now=NOW)
    assert [r.id for r, _ in rows] == [second.id, first.id]


@pytest.mark.parametrize(
    "fields",
    [
        {},
        {"email": "", "telegram": ""},
        {"email": "   ", "telegram": None},
    ],
)
async def test_submit_requires_a_contact_method(db_session, fields):
    with pytest.raises(ValidationError) as exc_info:
        await _submit(db_session, **fields)
    assert exc_info.value.field == "contact"


@pytest.mark.parametrize(
    "fields, field",
    [
        ({"email": "not-an-email"}, "email"),
        ({"email": "a@@b.com"}, "email"),
        ({"telegram": "abc"}, "telegram"),
        ({"telegram": "bad-handle!"}, "telegram"),
        ({"email": "a@b.com", "link": "example"}, "link"),
        ({"email": "a@b.com", "price": "ten"}, "price"),
        ({"email": "a@b.com", "price": "nan"}, "price"),
        ({"email": "a@b.com", "pixel_count": "4.5"}, "pixel_count"),
    ],
)
async def test_submit_rejects_malformed_fields(db_session, fields, field):
    with pytest.raises(ValidationError) as exc_info:
        await _submit(db_session, **fields)
    assert exc_info.value.field == field


async def test_submit_normalizes_and_trims_fields(db_session):
    request = await _submit(
        db_session,
        email="  a@b.com ",
        telegram=" pixel_fan ",
        link=" https://example.com/page ",
        text="   ",
        price="12.5",
        pixel_count="4",
    )

    assert request.email == "a@b.com"
    assert request.telegram == "@pixel_fan"
    assert request.link == "https://example.com/page"
    assert request.text is None
    assert request.price == 12.5
    assert request.pixel_count == 4


@pytest.mark.parametrize("handle", ["pixel_fan", "@pixel_fan", "  @pixel_fan "])
def test_telegram_normalization_is_idempotent(handle):
    once = normalize_telegram(handle)
    assert once == "@pixel_fan"
    assert normalize_telegram(once) == once


async def test_transition_unknown_request_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        await request_service.transition(db_session, "missing-id", "confirmed")


async def test_transition_rejects_unknown_status(db_session):
    request = await _submit(db_session, email="a@b.com")
    with pytest.raises(ValidationError):
        await request_service.transition(db_session, request.id, "archived")


async def test_transition_allows_any_to_any(db_session):
    request = await _submit(db_session, email="a@b.com")
    for status in ["rejected", "confirmed", "confirmed", "pending", "rejected", "confirmed"]:
        updated = await request_service.transition(db_session, request.id, status)
        assert updated.status == status
    await db_session.commit()

    stored = await request_service.get_request(db_session, request.id)
    assert stored.status == "confirmed"


async def test_owner_can_edit_contact_and_pixels(db_session):
    request = await request_service.submit_request(
        db_session, {"pixels": {"1,1": True}, "email": "a@b.com"}, owner_id="owner-1", now=NOW
    )
    await db_session.commit()

    updated = await request_service.update_owned_request(
        db_session, request.id, "owner-1", {"pixels": {"2,2": True}, "telegram": "new_handle"}
    )
    assert updated.pixels == {"2,2": True}
    assert updated.telegram == "@new_handle"
    assert updated.email == "a@b.com"
    assert updated.status == "pending"


async def test_owner_edit_keeps_contact_rule(db_session):
    request = await request_service.submit_request(
        db_session, {"pixels": {"1,1": True}, "email": "a@b.com"}, owner_id="owner-1", now=NOW
    )
    with pytest.raises(ValidationError):
        await request_service.update_owned_request(db_session, request.id, "owner-1", {"email": ""})


async def test_only_owner_can_edit(db_session):
    anonymous = await _submit(db_session, email="a@b.com")
    with pytest.raises(AuthorizationError):
        await request_service.update_owned_request(db_session, anonymous.id, "someone", {"text": "hi"})


async def test_delete_request(db_session):
    request = await _submit(db_session, email="a@b.com")
    await request_service.delete_request(db_session, request.id)
    await db_session.commit()

    assert await request_service.get_request(db_session, request.id) is None
    with pytest.raises(NotFoundError):
        await request_service.delete_request(db_session, request.id)
