from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeTwitterApi, create_user, link_twitter
from models.status import Status
from services.twitter import (
    NotConnectedError,
    ProviderRequestError,
    extract_post_id,
    publish,
    publish_status,
)


def _future() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


def _past() -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=1)


def test_extract_post_id_prefers_id_str():
    assert extract_post_id({"data": {"id_str": "12345", "id": "999"}}) == "12345"


def test_extract_post_id_falls_back_to_id():
    assert extract_post_id({"data": {"id": "67890"}}) == "67890"


@pytest.mark.parametrize("response", [{}, {"data": {}}, {"data": None}, {"errors": [{"message": "x"}]}])
def test_extract_post_id_rejects_missing_ids(response):
    with pytest.raises(ProviderRequestError):
        extract_post_id(response)


@pytest.mark.asyncio
async def test_publish_returns_primary_id(db_session):
    api = FakeTwitterApi(post_response={"data": {"id_str": "12345"}})
    await create_user(db_session)
    await link_twitter(db_session, "user-1", expires_at=_future())

    post_id = await publish("user-1", "Hello world", db_session, api=api)

    assert post_id == "12345"
    assert api.refresh_calls == []
    assert api.post_calls == [{"access_token": "old", "text": "Hello world"}]


@pytest.mark.asyncio
async def test_publish_falls_back_to_secondary_id(db_session):
    api = FakeTwitterApi(post_response={"data": {"id": "67890"}})
    await create_user(db_session)
    await link_twitter(db_session, "user-1", expires_at=_future())

    assert await publish("user-1", "Hello world", db_session, api=api) == "67890"


@pytest.mark.asyncio
async def test_publish_refreshes_expired_token_first(db_session, fake_twitter):
    await create_user(db_session)
    await link_twitter(db_session, "user-1", expires_at=_past())

    await publish("user-1", "Hello world", db_session, api=fake_twitter)

    assert fake_twitter.refresh_calls == ["r1"]
    assert fake_twitter.post_calls[0]["access_token"] == "new-access"


@pytest.mark.asyncio
async def test_publish_without_refresh_token_fails_before_any_call(db_session, fake_twitter):
    await create_user(db_session)
    await link_twitter(db_session, "user-1", refresh_token=None, expires_at=_future())

    with pytest.raises(NotConnectedError):
        await publish("user-1", "Hello world", db_session, api=fake_twitter)
    assert fake_twitter.call_count == 0


@pytest.mark.asyncio
async def test_publish_provider_error_propagates(db_session):
    api = FakeTwitterApi(post_error=ProviderRequestError("X rate limit exceeded.", 429))
    await create_user(db_session)
    await link_twitter(db_session, "user-1", expires_at=_future())

    with pytest.raises(ProviderRequestError):
        await publish("user-1", "Hello world", db_session, api=api)
    assert len(api.post_calls) == 1


@pytest.mark.asyncio
async def test_publish_status_stores_tweet_id(db_session):
    api = FakeTwitterApi(post_response={"data": {"id_str": "555"}})
    await create_user(db_session)
    await link_twitter(db_session, "user-1", expires_at=_future())
    status = Status(
        id="status-1",
        user_id="user-1",
        body="On my way to Hamburg",
        category="nationalExpress",
        line_name="ICE 73",
        origin_name="Berlin Hbf",
        destination_name="Hamburg Hbf",
        departure_planned=_future(),
        arrival_planned=_future() + timedelta(hours=2),
    )
    db_session.add(status)
    await db_session.commit()

    post_id = await publish_status("status-1", "user-1", db_session, api=api)

    assert post_id == "555"
    await db_session.refresh(status)
    assert status.tweet_id == "555"
    assert api.post_calls[0]["text"] == "On my way to Hamburg"


@pytest.mark.asyncio
async def test_publish_status_unknown_status(db_session, fake_twitter):
    await create_user(db_session)

    with pytest.raises(LookupError):
        await publish_status("missing", "user-1", db_session, api=fake_twitter)


@pytest.mark.asyncio
async def test_publish_status_blank_social_text_falls_back_to_body(db_session):
    api = FakeTwitterApi(post_response={"data": {"id_str": "556"}})
    await create_user(db_session)
    await link_twitter(db_session, "user-1", expires_at=_future())
    db_session.add(
        Status(
            id="status-2",
            user_id="user-1",
            body="  On my way to Hamburg  ",
            category="nationalExpress",
            line_name="ICE 73",
            origin_name="Berlin Hbf",
            destination_name="Hamburg Hbf",
            departure_planned=_future(),
            arrival_planned=_future() + timedelta(hours=2),
        )
    )
    await db_session.commit()

    post_id = await publish_status("status-2", "user-1", db_session, social_text="   ", api=api)

    assert post_id == "556"
    assert api.post_calls[0]["text"] == "On my way to Hamburg"
