import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from models.social_profile import SocialProfile
from models.user import User
from services import quota
from services.crypto import encrypt_token
from services.passwords import hash_password
from services.session_token import create_session_token
from services.twitter.client import TwitterApiClient
from services.twitter.types import RefreshedToken


TEST_PASSWORD = "correct horse battery"


class FakeTwitterApi(TwitterApiClient):
    """Records calls instead of talking to X."""

    def __init__(
        self,
        *,
        refreshed: Optional[RefreshedToken] = None,
        post_response: Optional[Dict[str, Any]] = None,
        refresh_error: Optional[Exception] = None,
        post_error: Optional[Exception] = None,
    ) -> None:
        self.refreshed = refreshed or RefreshedToken(
            token="new-access",
            refresh_token="new-refresh",
            expires=int((datetime.now(timezone.utc) + timedelta(hours=2)).timestamp()),
        )
        self.post_response = post_response if post_response is not None else {"data": {"id": "1000"}}
        self.refresh_error = refresh_error
        self.post_error = post_error
        self.refresh_calls: List[str] = []
        self.post_calls: List[Dict[str, str]] = []

    @property
    def call_count(self) -> int:
        return len(self.refresh_calls) + len(self.post_calls)

    async def refresh_token(self, refresh_token: str) -> RefreshedToken:
        self.refresh_calls.append(refresh_token)
        if self.refresh_error:
            raise self.refresh_error
        return self.refreshed

    async def create_post(self, access_token: str, text: str) -> Dict[str, Any]:
        self.post_calls.append({"access_token": access_token, "text": text})
        if self.post_error:
            raise self.post_error
        return self.post_response


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    quota.reset_local_counters()
    with patch("services.quota.redis.from_url", side_effect=RedisError("offline")):
        yield
    quota.reset_local_counters()
    app.state.disable_rate_limits = previous


@pytest.fixture(autouse=True)
def isolated_profile_pictures(tmp_path):
    with patch("services.profile_settings.settings.PROFILE_PICTURE_DIR", str(tmp_path / "avatars")):
        yield


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    db_path = tmp_path / "trwl_test.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield maker
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def fake_twitter():
    return FakeTwitterApi()


async def create_user(
    session: AsyncSession,
    *,
    user_id: str = "user-1",
    username: str = "gertrud123",
    email: str = "gertrud@example.com",
    password: Optional[str] = TEST_PASSWORD,
) -> User:
    user = User(
        id=user_id,
        username=username,
        display_name=username.capitalize(),
        email=email,
        password_hash=hash_password(password) if password else None,
    )
    session.add(user)
    await session.commit()
    return user


async def link_twitter(
    session: AsyncSession,
    user_id: str,
    *,
    twitter_id: Optional[str] = "abc",
    access_token: Optional[str] = "old",
    refresh_token: Optional[str] = "r1",
    expires_at: Optional[datetime] = None,
) -> SocialProfile:
    profile = SocialProfile(
        user_id=user_id,
        twitter_id=twitter_id,
        twitter_token_encrypted=encrypt_token(access_token) if access_token else None,
        twitter_refresh_token_encrypted=encrypt_token(refresh_token) if refresh_token else None,
        twitter_token_expires_at=expires_at,
    )
    session.add(profile)
    await session.commit()
    return profile


def auth_header(user_id: str = "user-1") -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(user_id)['token']}"}
