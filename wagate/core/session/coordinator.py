"""
Session Coordinator - owns the WhatsApp protocol client and its lifecycle.

Single Responsibility: keep exactly one protocol client alive, turn its
lifecycle events into SessionSnapshot transitions, reconnect according to the
ReconnectPolicy, and expose status/send/logout operations to the API layer.

Serialization model:
    - Every protocol client pushes events into one asyncio.Queue, tagged with
      the generation number of the client that produced them.
    - A single consumer task handles the queue in order.
    - Event handling, start() and logout() all run under one asyncio.Lock,
      so no two transitions interleave.
    - Events from a client that is no longer the current one are dropped.

State machine:
    IDLE --start()--> PAIRING --opened--> CONNECTED
    PAIRING/CONNECTED --closed(recoverable)--> IDLE (+ scheduled start())
    PAIRING/CONNECTED --closed(logged out)--> LOGGED_OUT
    any --logout()--> LOGGED_OUT
    LOGGED_OUT --connect()--> PAIRING
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from wagate.core.exceptions import (
    InvalidRequest,
    LogoutFailure,
    NotConnected,
    RecipientNotRegistered,
    SendFailure,
    SendTimeout,
    StoreUnavailable,
)
from wagate.core.logging.context import clear_log_context, set_log_context
from wagate.core.logging.logger import get_logger
from wagate.core.session.reconnection import ReconnectPolicy
from wagate.domain.events.lifecycle_events import (
    Closed,
    CloseReason,
    CredentialsUpdated,
    LifecycleEvent,
    Opened,
    QrIssued,
)
from wagate.domain.interfaces.credential_store import ICredentialStore
from wagate.domain.interfaces.protocol_client import (
    EventSink,
    IProtocolClient,
    ProtocolClientFactory,
)
from wagate.domain.models.credentials import CredentialState
from wagate.domain.models.session import SessionSnapshot, SessionState
from wagate.messaging.whatsapp.addressing import phone_from_user_id, to_jid
from wagate.messaging.whatsapp.qr import render_ascii, render_data_uri

logger = get_logger(__name__)

_STARTABLE_STATES = (SessionState.IDLE, SessionState.LOGGED_OUT)


@dataclass(frozen=True)
class SendResult:
    """Outcome of a successful send."""

    jid: str
    message_id: str | None = None


class SessionCoordinator:
    """
    Connection lifecycle coordinator for the single WhatsApp session.

    Usage:
        coordinator = SessionCoordinator(store, client_factory)
        await coordinator.start()
        ...
        coordinator.status()            # {"connected": ..., "phone": ..., "hasQR": ...}
        await coordinator.send_message("5551234", "Hola")
        await coordinator.logout()
        await coordinator.close()
    """

    def __init__(
        self,
        store: ICredentialStore,
        client_factory: ProtocolClientFactory,
        *,
        policy: ReconnectPolicy | None = None,
        send_timeout: float = 30,
        qr_renderer: Callable[[str], str] = render_data_uri,
        print_qr_in_terminal: bool = True,
    ):
        self._store = store
        self._client_factory = client_factory
        self._policy = policy or ReconnectPolicy()
        self._send_timeout = send_timeout
        self._render_qr = qr_renderer
        self._print_qr = print_qr_in_terminal

        self._snapshot = SessionSnapshot.idle()
        self._client: IProtocolClient | None = None
        self._credentials: CredentialState | None = None
        self._generation = 0
        self._attempt = 0

        self._events: asyncio.Queue[tuple[int, LifecycleEvent]] = asyncio.Queue()
        self._lock = asyncio.Lock()
        self._event_task: asyncio.Task | None = None
        self._retry_task: asyncio.Task | None = None

    # =========================================================================
    # SNAPSHOT READER
    # =========================================================================

    @property
    def snapshot(self) -> SessionSnapshot:
        """Current immutable snapshot; never blocks."""
        return self._snapshot

    @property
    def state(self) -> SessionState:
        return self._snapshot.state

    @property
    def generation(self) -> int:
        """Number of clients created so far; identifies the live handle."""
        return self._generation

    @property
    def retry_pending(self) -> bool:
        return self._retry_task is not None and not self._retry_task.done()

    def status(self) -> dict:
        return self._snapshot.to_status()

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def start(self) -> None:
        """
        Create a protocol client from the stored credentials and connect it.

        Only acts from IDLE or LOGGED_OUT; otherwise logs and returns. A
        scheduled reconnect is superseded.

        Raises:
            StoreUnavailable: If the stored credentials cannot be read
        """
        async with self._lock:
            self._cancel_retry()
            await self._start_locked()

    async def connect(self) -> SessionSnapshot:
        """Leave LOGGED_OUT (or a stopped IDLE) by starting a new client now."""
        await self.start()
        return self._snapshot

    async def send_message(self, target: str, body: str) -> SendResult:
        """
        Send a text message through the connected session.

        Args:
            target: Phone number or JID of the recipient
            body: Message text

        Returns:
            SendResult with the resolved JID

        Raises:
            NotConnected: Session is not CONNECTED (no remote call is made)
            InvalidRequest: target or body is empty
            RecipientNotRegistered: target has no WhatsApp account
            SendTimeout: registration check + send exceeded send_timeout
            SendFailure: the protocol client failed to send
        """
        snapshot, client = self._snapshot, self._client
        if not snapshot.connected or client is None:
            raise NotConnected()

        target = (target or "").strip()
        if not target or not body:
            raise InvalidRequest()

        jid = to_jid(target)

        try:
            async with asyncio.timeout(self._send_timeout):
                registration = await client.check_registered(target)
                if not registration.exists:
                    raise RecipientNotRegistered(target)

                resolved = registration.jid or jid
                message_id = await client.send_text(resolved, body)
        except RecipientNotRegistered:
            logger.info(f"Recipient {target} is not on WhatsApp")
            raise
        except TimeoutError:
            logger.error(f"Sending to {target} timed out after {self._send_timeout}s")
            raise SendTimeout(self._send_timeout) from None
        except Exception as e:
            logger.error(f"Error sending message to {target}: {e}", exc_info=True)
            raise SendFailure() from e

        logger.info(f"Message sent to {target} (id: {message_id})")
        return SendResult(jid=resolved, message_id=message_id)

    async def logout(self) -> None:
        """
        Log the session out and erase the stored credentials.

        Cancels any scheduled reconnect. With no live client it only resets the
        snapshot. The local session is always torn down; a failed remote
        logout is reported afterwards.

        Raises:
            LogoutFailure: The protocol client could not log out remotely
            StoreUnavailable: The stored credentials could not be erased
        """
        async with self._lock:
            self._cancel_retry()
            self._attempt = 0
            client, self._client = self._client, None
            self._credentials = None
            self._set_snapshot(SessionSnapshot(state=SessionState.LOGGED_OUT))
            clear_log_context()

            if client is None:
                logger.info("Logout requested with no live session")
                return

            remote_error: Exception | None = None
            try:
                async with asyncio.timeout(self._send_timeout):
                    await client.logout()
            except Exception as e:
                remote_error = e
                logger.error(f"Error logging out of WhatsApp: {e}", exc_info=True)

            await self._close_quietly(client)
            await self._store.erase()
            logger.info("Session logged out, credentials erased")

            if remote_error is not None:
                raise LogoutFailure() from remote_error

    async def close(self) -> None:
        """Application shutdown: drop the client without logging out."""
        self._cancel_retry()
        async with self._lock:
            client, self._client = self._client, None
            await self._close_quietly(client)
            self._set_snapshot(SessionSnapshot.idle())

        if self._event_task is not None:
            self._event_task.cancel()
            try:
                await self._event_task
            except asyncio.CancelledError:
                pass
            self._event_task = None

    async def drain(self) -> None:
        """Wait until every queued lifecycle event has been handled."""
        await self._events.join()

    # =========================================================================
    # CLIENT LIFECYCLE (lock held)
    # =========================================================================

    async def _start_locked(self) -> None:
        if self._client is not None or self.state not in _STARTABLE_STATES:
            logger.debug(f"start() ignored in state {self.state.value}")
            return

        self._ensure_event_consumer()

        credentials = await self._store.load()

        self._generation += 1
        generation = self._generation
        self._credentials = credentials
        self._client = self._client_factory(credentials, self._make_sink(generation))
        self._set_snapshot(SessionSnapshot(state=SessionState.PAIRING))

        logger.info(
            f"Connecting to WhatsApp (client #{generation}, "
            f"{'new pairing' if credentials.is_empty else 'stored credentials'})"
        )

        try:
            await self._client.connect()
        except Exception as e:
            # Reported as a close so the retry path stays in one place
            logger.error(f"Client #{generation} failed to connect: {e}")
            self._events.put_nowait(
                (generation, Closed(CloseReason(status_code=None, message=str(e))))
            )

    def _make_sink(self, generation: int) -> EventSink:
        def sink(event: LifecycleEvent) -> None:
            self._events.put_nowait((generation, event))

        return sink

    def _schedule_retry(self, delay: float) -> None:
        self._cancel_retry()
        self._retry_task = asyncio.create_task(
            self._retry_after(delay), name="session_reconnect"
        )

    def _cancel_retry(self) -> None:
        if self._retry_task is not None and not self._retry_task.done():
            logger.debug("Cancelling scheduled reconnect")
            self._retry_task.cancel()
        self._retry_task = None

    async def _retry_after(self, delay: float) -> None:
        logger.info(f"Reconnecting in {delay:g} seconds...")
        await asyncio.sleep(delay)

        async with self._lock:
            self._retry_task = None
            try:
                await self._start_locked()
            except Exception as e:
                # Corrupt storage does not heal on its own
                logger.error(f"Reconnect aborted: {e}", exc_info=True)

    async def _close_quietly(self, client: IProtocolClient | None) -> None:
        if client is None:
            return
        try:
            await client.close()
        except Exception as e:
            logger.warning(f"Error closing protocol client: {e}")

    def _set_snapshot(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot

    # =========================================================================
    # EVENT HANDLING
    # =========================================================================

    def _ensure_event_consumer(self) -> None:
        if self._event_task is None or self._event_task.done():
            self._event_task = asyncio.create_task(
                self._consume_events(), name="session_events"
            )

    async def _consume_events(self) -> None:
        while True:
            generation, event = await self._events.get()
            try:
                async with self._lock:
                    await self._dispatch(generation, event)
            except Exception as e:
                logger.error(
                    f"Error handling {type(event).__name__} event: {e}", exc_info=True
                )
            finally:
                self._events.task_done()

    async def _dispatch(self, generation: int, event: LifecycleEvent) -> None:
        if generation != self._generation or self._client is None:
            logger.debug(
                f"Ignoring {type(event).__name__} from stale client #{generation}"
            )
            return

        if isinstance(event, CredentialsUpdated):
            await self._on_credentials_updated(event)
        elif isinstance(event, QrIssued):
            self._on_qr(event)
        elif isinstance(event, Opened):
            self._on_opened(event)
        elif isinstance(event, Closed):
            await self._on_closed(event)

    async def _on_credentials_updated(self, event: CredentialsUpdated) -> None:
        if self._credentials is not None:
            self._credentials.merge(event.state)
        await self._store.save(event.state)
        logger.debug("Credentials saved")

    def _on_qr(self, event: QrIssued) -> None:
        if self.state is not SessionState.PAIRING:
            logger.debug(f"QR ignored in state {self.state.value}")
            return

        self._set_snapshot(self._snapshot.with_qr(self._render_qr(event.payload)))
        logger.info("QR code generated. Scan it with WhatsApp.")
        if self._print_qr:
            logger.info("\n" + render_ascii(event.payload))

    def _on_opened(self, event: Opened) -> None:
        phone = phone_from_user_id(event.identity)
        self._attempt = 0
        self._set_snapshot(SessionSnapshot(state=SessionState.CONNECTED, phone=phone))
        set_log_context(phone=phone)
        logger.info(f"Connected as: {phone}")

    async def _on_closed(self, event: Closed) -> None:
        client, self._client = self._client, None
        self._set_snapshot(SessionSnapshot.idle())
        clear_log_context()
        await self._close_quietly(client)

        decision = self._policy.decide(event.reason, self._attempt + 1)
        logger.warning(
            f"Connection closed due to {event.reason}, reconnecting: {decision.retry}"
        )

        if decision.retry:
            self._attempt += 1
            self._schedule_retry(decision.delay)
        elif decision.terminal:
            self._credentials = None
            self._set_snapshot(SessionSnapshot(state=SessionState.LOGGED_OUT))
            # A remote logout invalidates the stored bundle
            try:
                await self._store.erase()
            except StoreUnavailable as e:
                logger.error(f"Could not erase credentials after remote logout: {e}")
            logger.warning(
                "Session was logged out remotely; pair again with /api/connect"
            )
