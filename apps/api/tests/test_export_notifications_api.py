import csv
import io
from datetime import date, datetime, timezone

import pytest

from conftest import auth_header, create_user
from models.status import Status
from services.export import build_row, validate_range
from services.notifications import create_notification


def _status(status_id: str, departure: datetime, **overrides) -> Status:
    values = dict(
        id=status_id,
        user_id="user-1",
        body="Trip",
        category="regional",
        line_name="RE 1",
        origin_name="Magdeburg Hbf",
        destination_name="Potsdam Hbf",
        departure_planned=departure,
        arrival_planned=departure.replace(hour=departure.hour + 1),
        distance_meters=123456,
        duration_minutes=60,
        business=2,
    )
    values.update(overrides)
    return Status(**values)


async def _seed_trips(db_session) -> None:
    db_session.add_all(
        [
            _status("early", datetime(2026, 9, 30, 22, 0, tzinfo=timezone.utc)),
            _status(
                "delayed",
                datetime(2026, 10, 1, 7, 0, tzinfo=timezone.utc),
                departure_real=datetime(2026, 10, 1, 7, 10, tzinfo=timezone.utc),
                arrival_real=datetime(2026, 10, 1, 8, 15, tzinfo=timezone.utc),
            ),
            _status("last-day", datetime(2026, 10, 31, 20, 0, tzinfo=timezone.utc), distance_meters=1000),
            _status("late", datetime(2026, 11, 1, 0, 30, tzinfo=timezone.utc)),
        ]
    )
    await db_session.commit()


def test_validate_range():
    validate_range(date(2026, 1, 1), date(2026, 1, 1))
    with pytest.raises(ValueError):
        validate_range(date(2026, 1, 2), date(2026, 1, 1))
    with pytest.raises(ValueError):
        validate_range(date(2025, 1, 1), date(2026, 6, 1))


def test_build_row_marks_delays():
    row = build_row(
        _status(
            "s",
            datetime(2026, 10, 1, 7, 0, tzinfo=timezone.utc),
            arrival_real=datetime(2026, 10, 1, 8, 15, tzinfo=timezone.utc),
        )
    )

    assert row["departure_planned"] == "01.10.2026 07:00"
    assert row["departure_delayed"] is False
    assert row["arrival_delayed"] is True
    assert row["arrival_real"] == "01.10.2026 08:15"
    assert row["distance_km"] == 123.46
    assert row["reason"] == 2


@pytest.mark.asyncio
async def test_export_json_uses_inclusive_range(api_client, db_session):
    await create_user(db_session)
    await _seed_trips(db_session)

    response = await api_client.get(
        "/export",
        params={"from": "2026-10-01", "until": "2026-10-31", "format": "json"},
        headers=auth_header(),
    )

    assert response.status_code == 200
    export = response.json()
    assert [row["status_id"] for row in export["rows"]] == ["delayed", "last-day"]
    assert export["username"] == "gertrud123"
    assert export["total_duration_minutes"] == 120
    assert export["total_distance_km"] == 124.46


@pytest.mark.asyncio
async def test_export_csv(api_client, db_session):
    await create_user(db_session)
    await _seed_trips(db_session)

    response = await api_client.get(
        "/export",
        params={"from": "2026-10-01", "until": "2026-10-31", "format": "csv"},
        headers=auth_header(),
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "export_2026-10-01_2026-10-31.csv" in response.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 2
    assert rows[0]["number"] == "RE 1"
    assert rows[0]["departure_real"] == "01.10.2026 07:10"


@pytest.mark.asyncio
async def test_export_pdf_download(api_client, db_session):
    await create_user(db_session)
    await _seed_trips(db_session)

    response = await api_client.get(
        "/export",
        params={"from": "2026-10-01", "until": "2026-10-31", "format": "pdf"},
        headers=auth_header(),
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "export_2026-10-01_2026-10-31.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_export_html_print_layout(api_client, db_session):
    await create_user(db_session)
    await _seed_trips(db_session)

    response = await api_client.get(
        "/export",
        params={"from": "2026-10-01", "until": "2026-10-31"},
        headers=auth_header(),
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "01.10.2026" in response.text
    assert "31.10.2026" in response.text
    assert "gertrud123" in response.text
    assert "planned-delayed" in response.text
    assert "124.46 km" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"from": "2026-10-31", "until": "2026-10-01"},
        {"from": "2024-01-01", "until": "2026-10-01"},
        {"from": "2026-10-01", "until": "2026-10-31", "format": "xlsx"},
        {"from": "2026-10-01"},
    ],
)
async def test_export_rejects_invalid_requests(api_client, db_session, params):
    await create_user(db_session)

    response = await api_client.get("/export", params=params, headers=auth_header())

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_notification_read_state(api_client, db_session):
    await create_user(db_session)
    await create_user(db_session, user_id="user-2", username="other", email="other@example.com")
    first = await create_notification("user-1", "social_post_failed", db_session, payload={"status_id": "s1"})
    await create_notification("user-1", "social_post_failed", db_session, payload={"status_id": "s2"})
    foreign = await create_notification("user-2", "social_post_failed", db_session)
    await db_session.commit()

    listed = await api_client.get("/notifications", headers=auth_header())
    unread = await api_client.get("/notifications/unread/count", headers=auth_header())
    assert len(listed.json()["data"]) == 2
    assert unread.json() == {"data": 2}

    toggled = await api_client.put(f"/notifications/{first.id}/read", headers=auth_header())
    assert toggled.json()["data"]["read"] is True
    unread = await api_client.get("/notifications/unread/count", headers=auth_header())
    assert unread.json() == {"data": 1}

    toggled_back = await api_client.put(f"/notifications/{first.id}/read", headers=auth_header())
    assert toggled_back.json()["data"]["read"] is False

    read_all = await api_client.put("/notifications/read/all", headers=auth_header())
    unread = await api_client.get("/notifications/unread/count", headers=auth_header())
    assert read_all.json() == {"updated": 2}
    assert unread.json() == {"data": 0}

    other_users = await api_client.put(f"/notifications/{foreign.id}/read", headers=auth_header())
    assert other_users.status_code == 404
