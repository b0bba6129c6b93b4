from unittest.mock import patch

import pytest


@pytest.mark.asyncio
async def test_root_and_liveness(api_client):
    root = await api_client.get("/")
    live = await api_client.get("/health/live")

    assert root.json()["status"] == "running"
    assert live.json() == {"alive": True}


@pytest.mark.asyncio
async def test_readiness_reports_missing_twitter_credentials(api_client):
    with patch("routers.health.settings.TWITTER_CLIENT_ID", ""), patch(
        "routers.health.settings.TWITTER_CLIENT_SECRET", ""
    ):
        response = await api_client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"ready": False, "missing": ["TWITTER_CLIENT_ID", "TWITTER_CLIENT_SECRET"]}


@pytest.mark.asyncio
async def test_readiness_with_twitter_credentials(api_client):
    with patch("routers.health.settings.TWITTER_CLIENT_ID", "client"), patch(
        "routers.health.settings.TWITTER_CLIENT_SECRET", "secret"
    ):
        response = await api_client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"ready": True}
