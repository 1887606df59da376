"""Protocol client backed by the Node.js WhatsApp bridge."""

from .client import BridgeProtocolClient, create_bridge_client_factory
from .events import parse_bridge_event

__all__ = ["BridgeProtocolClient", "create_bridge_client_factory", "parse_bridge_event"]
