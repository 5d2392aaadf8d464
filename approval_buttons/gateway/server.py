"""HTTP API server the host gateway calls before sending a message."""

import json
from typing import Awaitable, Callable

from aiohttp import web
from loguru import logger

from approval_buttons.coordinator import ApprovalCoordinator
from approval_buttons.diagnostics import HealthCheck, format_health_check


class GatewayServer:
    """
    HTTP API server for the host gateway's message hook.

    Provides endpoints for:
    - Outgoing message interception (POST /hooks/message-sending)
    - Health check as JSON (GET /health)
    - Human-readable status (GET /status)
    """

    def __init__(
        self,
        coordinator: ApprovalCoordinator,
        host: str = "127.0.0.1",
        port: int = 18791,
        health_check: Callable[[], Awaitable[HealthCheck]] | None = None,
    ):
        """
        Initialize the gateway server.

        Args:
            coordinator: Decides what happens to each outgoing message.
            host: Host to bind to.
            port: Port to listen on.
            health_check: Builds a health snapshot for /health and /status.
        """
        self.coordinator = coordinator
        self.host = host
        self.port = port
        self.health_check = health_check
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    def create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_post("/hooks/message-sending", self._handle_message_sending)
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/status", self._handle_status)
        return app

    async def _handle_message_sending(self, request: web.Request) -> web.Response:
        """
        Handle an outgoing message the host is about to send.

        Expected JSON body:
        {
            "content": "Exec approval required ...",
            "channelId": "telegram"
        }

        Returns:
        {
            "cancel": true   // suppress the original message
        }
        """
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response({"error": "Invalid JSON", "cancel": False}, status=400)

        if not isinstance(data, dict):
            return web.json_response({"error": "Expected a JSON object", "cancel": False}, status=400)

        content = data.get("content")
        channel_id = data.get("channelId")
        if not isinstance(content, str) or not isinstance(channel_id, str):
            return web.json_response(
                {"error": "content and channelId must be strings", "cancel": False},
                status=400,
            )

        try:
            decision = await self.coordinator.handle_outgoing(content, channel_id)
        except Exception as e:
            logger.error(f"Error handling outgoing message on {channel_id}: {e}")
            return web.json_response({"error": str(e), "cancel": False}, status=500)

        return web.json_response({"cancel": decision.cancel})

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        if not self.health_check:
            return web.json_response({"status": "ok"})
        health = await self.health_check()
        return web.json_response(health.to_dict())

    async def _handle_status(self, request: web.Request) -> web.Response:
        """Status text, as shown by the approvalstatus command."""
        if not self.health_check:
            return web.Response(text="Approval Buttons Status unavailable")
        health = await self.health_check()
        return web.Response(text=format_health_check(health))

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self.create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()
        logger.info(f"Approval hook listening on http://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        logger.info("Approval hook server stopped")
