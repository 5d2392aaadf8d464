"""HTTP boundary the host gateway talks to."""

from approval_buttons.gateway.server import GatewayServer

__all__ = ["GatewayServer"]
