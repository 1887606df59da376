"""
WhatsApp Bridge protocol client.

Drives a Node.js sidecar running the Baileys multi-device library. Each client
instance opens its own WebSocket to the bridge, hands over the stored
credentials, and turns the frames it receives into lifecycle events. Commands
go over plain HTTP.

Architecture:
    SessionCoordinator <-> BridgeProtocolClient <-> Bridge (Node.js) <-> WhatsApp Web

Key Design Decisions:
- Pure dependency injection (the aiohttp session is owned by the app lifespan)
- One WebSocket per client instance; reconnecting builds a new instance
- Exactly one Closed event per instance, unless close() was requested locally
"""

import asyncio
import json
from typing import Any

import aiohttp

from wagate.core.exceptions import ProtocolClientError, ProtocolClosed
from wagate.core.logging.logger import get_logger
from wagate.domain.events.lifecycle_events import (
    Closed,
    CloseReason,
    DisconnectReason,
)
from wagate.domain.interfaces.protocol_client import (
    EventSink,
    IProtocolClient,
    ProtocolClientFactory,
    RegistrationResult,
)
from wagate.domain.models.credentials import CredentialState

from .events import BridgeEventError, parse_bridge_event


class BridgeUrlBuilder:
    """Builds URLs for bridge endpoints."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def get_session_url(self) -> str:
        """WebSocket URL of the session event stream."""
        if self.base_url.startswith("https://"):
            return "wss://" + self.base_url.removeprefix("https://") + "/session"
        return "ws://" + self.base_url.removeprefix("http://") + "/session"

    def get_command_url(self, command: str) -> str:
        return f"{self.base_url}/{command.lstrip('/')}"


class BridgeProtocolClient(IProtocolClient):
    """
    Protocol client backed by the WhatsApp bridge.

    Example:
        client = BridgeProtocolClient(session, credentials, sink, base_url="http://localhost:3000")
        await client.connect()           # events now flow into sink
        result = await client.check_registered("5551234")
        await client.send_text(result.jid, "Hola")
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        credentials: CredentialState,
        sink: EventSink,
        *,
        base_url: str,
        browser_name: str = "MediCitas",
        logger: Any | None = None,
    ):
        self.session = session
        self.credentials = credentials
        self.browser_name = browser_name
        self.url_builder = BridgeUrlBuilder(base_url)
        self.logger = logger or get_logger(__name__)

        self._sink = sink
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task | None = None
        self._closing = False
        self._close_emitted = False

    # =========================================================================
    # SESSION
    # =========================================================================

    async def connect(self) -> None:
        url = self.url_builder.get_session_url()
        try:
            self._ws = await self.session.ws_connect(url, heartbeat=30)
            await self._ws.send_json(
                {
                    "type": "start",
                    "creds": self.credentials.creds,
                    "keys": self.credentials.keys,
                    "browser": [self.browser_name, "Chrome", "1.0.0"],
                }
            )
        except (aiohttp.ClientError, OSError) as e:
            if self._ws is not None:
                await self._ws.close()
                self._ws = None
            raise ProtocolClientError(
                f"Cannot connect to WhatsApp bridge at {url}: {e}"
            ) from e

        self.logger.debug(f"Connected to WhatsApp bridge WebSocket: {url}")
        self._reader = asyncio.create_task(self._read_events(), name="bridge_events")

    async def close(self) -> None:
        self._closing = True

        if self._reader is not None and self._reader is not asyncio.current_task():
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
        self._reader = None

        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        self._ws = None

    async def _read_events(self) -> None:
        reason = CloseReason(
            status_code=DisconnectReason.CONNECTION_LOST,
            message="Bridge connection lost",
        )
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    event = self._parse_frame(msg.data)
                    if isinstance(event, Closed):
                        reason = event.reason
                        break
                    if event is not None:
                        self._sink(event)

                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self.logger.warning(f"Bridge WebSocket error: {self._ws.exception()}")
                    break
        finally:
            self._emit_close(reason)

    def _parse_frame(self, raw: str):
        try:
            return parse_bridge_event(json.loads(raw))
        except (json.JSONDecodeError, BridgeEventError) as e:
            self.logger.warning(f"Ignoring malformed bridge frame: {e}")
            return None

    def _emit_close(self, reason: CloseReason) -> None:
        if self._closing or self._close_emitted:
            return
        self._close_emitted = True
        self._sink(Closed(reason=reason))

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def _post(self, command: str, payload: dict[str, Any] | None = None) -> dict:
        url = self.url_builder.get_command_url(command)
        try:
            async with self.session.post(url, json=payload or {}) as resp:
                if resp.status == 409:
                    body = await resp.json(content_type=None)
                    raise ProtocolClosed(
                        CloseReason(status_code=None, message=body.get("error", ""))
                    )
                resp.raise_for_status()
                return await resp.json(content_type=None)
        except aiohttp.ClientResponseError as e:
            raise ProtocolClientError(f"Bridge rejected {command}: {e.status} {e.message}") from e
        except (aiohttp.ClientError, json.JSONDecodeError) as e:
            raise ProtocolClientError(f"Bridge request {command} failed: {e}") from e

    async def check_registered(self, number: str) -> RegistrationResult:
        data = await self._post("on-whatsapp", {"phone": number})
        results = data.get("results") or []
        if not results:
            return RegistrationResult(exists=False)
        first = results[0]
        return RegistrationResult(exists=bool(first.get("exists")), jid=first.get("jid"))

    async def send_text(self, jid: str, body: str) -> str | None:
        data = await self._post("send", {"jid": jid, "text": body})
        return data.get("messageId")

    async def logout(self) -> None:
        await self._post("logout")
        self.logger.info("Bridge session logged out")


def create_bridge_client_factory(
    session: aiohttp.ClientSession,
    *,
    base_url: str,
    browser_name: str = "MediCitas",
) -> ProtocolClientFactory:
    """Build the factory the coordinator uses to create one client per attempt."""

    def factory(credentials: CredentialState, sink: EventSink) -> IProtocolClient:
        return BridgeProtocolClient(
            session,
            credentials,
            sink,
            base_url=base_url,
            browser_name=browser_name,
        )

    return factory
