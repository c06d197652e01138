"""Integration: racing helpers on one open task."""

from __future__ import annotations

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from swadrive.database import Database
from swadrive.db.models import TaskAssignment
from tests.conftest import create_task, register_user


class TestConcurrentAccept:
    @pytest.mark.asyncio
    async def test_exactly_one_helper_wins(self, client: AsyncClient, customer: dict, database: Database):
        helpers = [await register_user(client, f"racer{i}@example.com", "helper") for i in range(5)]
        task_id = await create_task(client, customer)

        responses = await asyncio.gather(*(
            client.post(f"/api/tasks/{task_id}/accept", headers=h["headers"]) for h in helpers
        ))

        codes = sorted(r.status_code for r in responses)
        assert codes == [200, 400, 400, 400, 400]
        losers = [r.json()["message"] for r in responses if r.status_code == 400]
        assert losers == ["Task already taken"] * 4

        async with database.session_factory() as db:
            count = (await db.execute(
                select(func.count()).select_from(TaskAssignment).where(TaskAssignment.task_id == task_id)
            )).scalar_one()
        assert count == 1

        winner = next(h for h, r in zip(helpers, responses) if r.status_code == 200)
        assigned = (await client.get("/api/my-assigned-tasks", headers=winner["headers"])).json()
        assert [t["task_id"] for t in assigned] == [task_id]
