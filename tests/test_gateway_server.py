"""Tests for the gateway hook HTTP server."""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from aiohttp import test_utils

from approval_buttons.channels.base import ChannelStatus
from approval_buttons.coordinator import PASS, SUPPRESS
from approval_buttons.diagnostics import ConfigFlags, HealthCheck
from approval_buttons.gateway.server import GatewayServer


def _coordinator(decision=PASS):
    return SimpleNamespace(handle_outgoing=AsyncMock(return_value=decision))


@asynccontextmanager
async def _client(server: GatewayServer):
    client = test_utils.TestClient(test_utils.TestServer(server.create_app()))
    await client.start_server()
    try:
        yield client
    finally:
        await client.close()


# ── Message hook ────────────────────────────────────────────────────


class TestMessageSendingHook:
    @pytest.mark.asyncio
    async def test_suppress(self):
        coordinator = _coordinator(SUPPRESS)
        async with _client(GatewayServer(coordinator)) as client:
            resp = await client.post(
                "/hooks/message-sending",
                json={"content": "Exec approval required\nID: abc", "channelId": "telegram"},
            )
            assert resp.status == 200
            assert await resp.json() == {"cancel": True}
        coordinator.handle_outgoing.assert_awaited_once_with(
            "Exec approval required\nID: abc", "telegram"
        )

    @pytest.mark.asyncio
    async def test_pass(self):
        async with _client(GatewayServer(_coordinator(PASS))) as client:
            resp = await client.post(
                "/hooks/message-sending", json={"content": "hi", "channelId": "slack"}
            )
            assert await resp.json() == {"cancel": False}

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        coordinator = _coordinator()
        async with _client(GatewayServer(coordinator)) as client:
            resp = await client.post("/hooks/message-sending", data="not json{")
            assert resp.status == 400
            assert (await resp.json())["cancel"] is False
        coordinator.handle_outgoing.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_body_not_utf8(self):
        coordinator = _coordinator()
        async with _client(GatewayServer(coordinator)) as client:
            resp = await client.post(
                "/hooks/message-sending",
                data=b"\xff\xfe{\"content\": 1}",
                headers={"Content-Type": "application/json; charset=utf-8"},
            )
            assert resp.status == 400
            assert (await resp.json())["cancel"] is False
        coordinator.handle_outgoing.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        [],
        {"content": "hi"},
        {"content": 5, "channelId": "telegram"},
        {"content": "hi", "channelId": None},
    ])
    async def test_bad_payload(self, body):
        async with _client(GatewayServer(_coordinator())) as client:
            resp = await client.post("/hooks/message-sending", json=body)
            assert resp.status == 400

    @pytest.mark.asyncio
    async def test_handler_error_does_not_cancel(self):
        coordinator = _coordinator()
        coordinator.handle_outgoing.side_effect = RuntimeError("boom")
        async with _client(GatewayServer(coordinator)) as client:
            resp = await client.post(
                "/hooks/message-sending", json={"content": "hi", "channelId": "telegram"}
            )
            assert resp.status == 500
            data = await resp.json()
            assert data["cancel"] is False
            assert "boom" in data["error"]


# ── Health and status ───────────────────────────────────────────────


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_health_without_checker(self):
        async with _client(GatewayServer(_coordinator())) as client:
            resp = await client.get("/health")
            assert await resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_health_and_status(self):
        health = HealthCheck(
            ok=True,
            config=ConfigFlags(telegram_chat_id=True, telegram_token=True),
            telegram=ChannelStatus(reachable=True, identity="@bot"),
            pending=1,
        )
        server = GatewayServer(_coordinator(), health_check=AsyncMock(return_value=health))
        async with _client(server) as client:
            resp = await client.get("/health")
            data = await resp.json()
            assert data["ok"] is True
            assert data["telegram"]["identity"] == "@bot"
            assert HealthCheck.from_dict(data) == health

            resp = await client.get("/status")
            text = await resp.text()
            assert text.startswith("🟢 Approval Buttons Status")
            assert "Pending: 1" in text
