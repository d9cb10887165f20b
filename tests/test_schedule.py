"""Tests for the weekly schedule (raspored) endpoints."""

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import SCHEDULE_FIELDS, ScheduleRow

MONDAY_ROW = {"ponedjeljak": "Matematika", "ponedjeljak_time": "08:00"}
FULL_ROW = {name: f"{name}-value" for name in SCHEDULE_FIELDS}


async def _row_count(db_session: AsyncSession) -> int:
    return (await db_session.execute(select(func.count()).select_from(ScheduleRow))).scalar()


class TestReplaceSchedule:
    """POST /updateRaspored"""

    async def test_replace_inserts_rows(self, client: AsyncClient, db_session: AsyncSession):
        response = await client.post("/updateRaspored", json={"rows": [MONDAY_ROW, FULL_ROW]})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert await _row_count(db_session) == 2

    async def test_missing_sub_fields_are_null(self, client: AsyncClient, db_session: AsyncSession):
        await client.post("/updateRaspored", json={"rows": [{**MONDAY_ROW, "utorak": ""}]})
        row = (await db_session.execute(select(ScheduleRow))).scalar_one()
        assert row.ponedjeljak == "Matematika"
        assert row.ponedjeljak_time == "08:00"
        assert row.utorak is None
        assert row.subota_time is None

    async def test_replace_drops_previous_rows(self, client: AsyncClient, db_session: AsyncSession):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW, FULL_ROW, FULL_ROW]})
        await client.post("/updateRaspored", json={"rows": [MONDAY_ROW]})
        assert await _row_count(db_session) == 1

    async def test_empty_list_empties_table(self, client: AsyncClient, db_session: AsyncSession):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW]})

        response = await client.post("/updateRaspored", json={"rows": []})
        assert response.json() == {"success": True}

        response = await client.get("/getRaspored")
        assert response.json() == {"rows": []}

    async def test_missing_rows_key_empties_table(self, client: AsyncClient, db_session: AsyncSession):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW]})
        response = await client.post("/updateRaspored", json={})
        assert response.json() == {"success": True}
        assert await _row_count(db_session) == 0

    async def test_failure_reported_as_flag_and_rolled_back(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW, FULL_ROW]})

        # second element is not a row object, the insert loop fails midway
        response = await client.post("/updateRaspored", json={"rows": [MONDAY_ROW, "pokvareno"]})
        assert response.status_code == 200
        assert response.json() == {"success": False}

        rows = (await db_session.execute(select(ScheduleRow))).scalars().all()
        assert len(rows) == 2
        assert all(row.ponedjeljak == "ponedjeljak-value" for row in rows)

    async def test_non_object_body_carries_no_rows(self, client: AsyncClient, db_session: AsyncSession):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW]})

        response = await client.post("/updateRaspored", json=[])
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert await _row_count(db_session) == 0

    async def test_broken_json_reported_as_flag(self, client: AsyncClient, db_session: AsyncSession):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW]})

        response = await client.post(
            "/updateRaspored", content=b'{"rows": [', headers={"content-type": "application/json"}
        )
        assert response.status_code == 200
        assert response.json() == {"success": False}
        assert await _row_count(db_session) == 1


class TestGetSchedule:
    """GET /getRaspored"""

    async def test_returns_all_columns(self, client: AsyncClient):
        await client.post("/updateRaspored", json={"rows": [FULL_ROW]})

        response = await client.get("/getRaspored")
        assert response.status_code == 200
        rows = response.json()["rows"]
        assert len(rows) == 1
        assert "id" in rows[0]
        for name in SCHEDULE_FIELDS:
            assert rows[0][name] == f"{name}-value"
