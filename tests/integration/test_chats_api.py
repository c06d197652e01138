"""Integration tests: chat endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import create_task, register_user


async def _accepted_task(client: AsyncClient, customer: dict, helper: dict) -> int:
    task_id = await create_task(client, customer, category="Garden", specific_problem="Mowing")
    response = await client.post(f"/api/tasks/{task_id}/accept", headers=helper["headers"])
    assert response.status_code == 200
    return task_id


class TestChatsAPI:
    @pytest.mark.asyncio
    async def test_start_requires_assignment(self, client: AsyncClient, customer: dict):
        task_id = await create_task(client, customer)
        response = await client.post("/api/chats/start", json={"task_id": task_id}, headers=customer["headers"])
        assert response.status_code == 403
        assert response.json() == {"message": "Task has no assigned helper yet"}

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, client: AsyncClient, customer: dict, helper: dict):
        task_id = await _accepted_task(client, customer, helper)

        first = await client.post("/api/chats/start", json={"task_id": task_id}, headers=customer["headers"])
        again = await client.post("/api/chats/start", json={"task_id": task_id}, headers=customer["headers"])
        from_helper = await client.post("/api/chats/start", json={"task_id": task_id}, headers=helper["headers"])

        assert first.status_code == 200
        chat = first.json()
        assert chat["customer_id"] == customer["user_id"]
        assert chat["helper_id"] == helper["user_id"]
        assert again.json()["chat_id"] == chat["chat_id"]
        assert from_helper.json()["chat_id"] == chat["chat_id"]

    @pytest.mark.asyncio
    async def test_outsider_cannot_start(self, client: AsyncClient, customer: dict, helper: dict, second_helper: dict):
        task_id = await _accepted_task(client, customer, helper)
        response = await client.post(
            "/api/chats/start", json={"task_id": task_id}, headers=second_helper["headers"]
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_conversation(self, client: AsyncClient, customer: dict, helper: dict):
        task_id = await _accepted_task(client, customer, helper)
        chat_id = (await client.post(
            "/api/chats/start", json={"task_id": task_id}, headers=customer["headers"]
        )).json()["chat_id"]

        sent = await client.post(
            f"/api/chats/{chat_id}/messages", json={"message": "Can you come at 5?"}, headers=customer["headers"]
        )
        assert sent.status_code == 200
        assert sent.json()["sender_role"] == "customer"
        await client.post(f"/api/chats/{chat_id}/messages", json={"message": "Yes"}, headers=helper["headers"])

        for headers in (customer["headers"], helper["headers"]):
            messages = (await client.get(f"/api/chats/{chat_id}/messages", headers=headers)).json()
            assert [(m["sender_id"], m["message"]) for m in messages] == [
                (customer["user_id"], "Can you come at 5?"),
                (helper["user_id"], "Yes"),
            ]

        types = [n["type"] for n in (await client.get("/api/notifications", headers=customer["headers"])).json()]
        assert types == ["message", "accepted"]

    @pytest.mark.asyncio
    async def test_list_chats_includes_task_title(self, client: AsyncClient, customer: dict, helper: dict):
        task_id = await _accepted_task(client, customer, helper)
        await client.post("/api/chats/start", json={"task_id": task_id}, headers=helper["headers"])

        [chat] = (await client.get("/api/chats", headers=customer["headers"])).json()
        assert chat["task_id"] == task_id
        assert chat["task_title"] == "Garden - Mowing"

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self, client: AsyncClient, customer: dict, helper: dict):
        task_id = await _accepted_task(client, customer, helper)
        chat_id = (await client.post(
            "/api/chats/start", json={"task_id": task_id}, headers=customer["headers"]
        )).json()["chat_id"]

        response = await client.post(
            f"/api/chats/{chat_id}/messages", json={"message": "   "}, headers=customer["headers"]
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Message cannot be empty"}

    @pytest.mark.asyncio
    async def test_unknown_chat(self, client: AsyncClient, customer: dict):
        response = await client.get("/api/chats/4040/messages", headers=customer["headers"])
        assert response.status_code == 404
        assert response.json() == {"message": "Chat not found"}

    @pytest.mark.asyncio
    async def test_out_of_range_ids_rejected(self, client: AsyncClient, customer: dict):
        huge = 2**63
        response = await client.post("/api/chats/start", json={"task_id": huge}, headers=customer["headers"])
        assert response.status_code == 400
        response = await client.get(f"/api/chats/{huge}/messages", headers=customer["headers"])
        assert response.status_code == 400
        response = await client.post(
            f"/api/chats/{huge}/messages", json={"message": "hi"}, headers=customer["headers"]
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_outsider_cannot_read(self, client: AsyncClient, customer: dict, helper: dict):
        task_id = await _accepted_task(client, customer, helper)
        chat_id = (await client.post(
            "/api/chats/start", json={"task_id": task_id}, headers=customer["headers"]
        )).json()["chat_id"]
        stranger = await register_user(client, "stranger@example.com", "customer")

        read = await client.get(f"/api/chats/{chat_id}/messages", headers=stranger["headers"])
        post = await client.post(
            f"/api/chats/{chat_id}/messages", json={"message": "hi"}, headers=stranger["headers"]
        )
        assert read.status_code == 403
        assert post.status_code == 403

    @pytest.mark.asyncio
    async def test_chat_requires_token(self, client: AsyncClient):
        response = await client.get("/api/chats")
        assert response.status_code == 401
