"""
Pytest configuration and common fixtures for wagate tests.

Provides in-memory stand-ins for the two collaborators of the session
coordinator (protocol client and credential store) plus shared fixtures.
"""

import asyncio

import pytest
import pytest_asyncio

from wagate.core.session.coordinator import SessionCoordinator
from wagate.core.session.reconnection import ReconnectionConfig, ReconnectPolicy
from wagate.domain.interfaces.credential_store import ICredentialStore
from wagate.domain.interfaces.protocol_client import (
    EventSink,
    IProtocolClient,
    RegistrationResult,
)
from wagate.domain.models.credentials import CredentialState

FAST_RETRY = 0.01
SLOW_RETRY = 60


class FakeProtocolClient(IProtocolClient):
    """Protocol client that records commands and emits events on demand."""

    def __init__(self, credentials: CredentialState, sink: EventSink):
        self.credentials = credentials
        self.sink = sink

        self.connected = False
        self.closed = False
        self.logged_out = False
        self.checked: list[str] = []
        self.sent: list[tuple[str, str]] = []

        self.unregistered: set[str] = set()
        self.connect_error: Exception | None = None
        self.send_error: Exception | None = None
        self.logout_error: Exception | None = None
        self.send_delay: float = 0

    def emit(self, event) -> None:
        self.sink(event)

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def check_registered(self, number: str) -> RegistrationResult:
        self.checked.append(number)
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if number in self.unregistered:
            return RegistrationResult(exists=False)
        return RegistrationResult(exists=True, jid=f"{number}@s.whatsapp.net")

    async def send_text(self, jid: str, body: str) -> str | None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((jid, body))
        return f"MSG{len(self.sent)}"

    async def logout(self) -> None:
        if self.logout_error is not None:
            raise self.logout_error
        self.logged_out = True

    async def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Builds FakeProtocolClients and keeps every one it built."""

    def __init__(self):
        self.clients: list[FakeProtocolClient] = []
        self.connect_errors: list[Exception] = []

    def __call__(self, credentials: CredentialState, sink: EventSink) -> FakeProtocolClient:
        client = FakeProtocolClient(credentials, sink)
        if self.connect_errors:
            client.connect_error = self.connect_errors.pop(0)
        self.clients.append(client)
        return client

    @property
    def latest(self) -> FakeProtocolClient:
        return self.clients[-1]


class MemoryCredentialStore(ICredentialStore):
    """Credential store kept in memory."""

    def __init__(self, state: CredentialState | None = None):
        self.state = state or CredentialState()
        self.saves: list[CredentialState] = []
        self.erase_count = 0
        self.load_error: Exception | None = None

    async def load(self) -> CredentialState:
        if self.load_error is not None:
            raise self.load_error
        return CredentialState(creds=dict(self.state.creds), keys=dict(self.state.keys))

    async def save(self, state: CredentialState) -> None:
        self.saves.append(state)
        self.state.merge(state)

    async def erase(self) -> None:
        self.erase_count += 1
        self.state = CredentialState()


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def wait_until():
    """Poll until predicate() is true or fail the test."""

    async def _wait_until(predicate, timeout: float = 1.0) -> None:
        async with asyncio.timeout(timeout):
            while not predicate():
                await asyncio.sleep(0.005)

    return _wait_until


@pytest_asyncio.fixture
async def make_coordinator(store, client_factory):
    """Factory for coordinators wired to the fixtures' store and client factory.

    Every coordinator it builds is closed after the test.
    """
    built: list[SessionCoordinator] = []

    def _make(
        *,
        retry_delay: float = FAST_RETRY,
        max_attempts: int | None = None,
        send_timeout: float = 1,
    ) -> SessionCoordinator:
        policy = ReconnectPolicy(
            ReconnectionConfig(
                base_delay=retry_delay, max_delay=retry_delay, max_attempts=max_attempts
            )
        )
        coordinator = SessionCoordinator(
            store,
            client_factory,
            policy=policy,
            send_timeout=send_timeout,
            qr_renderer=lambda payload: f"data:{payload}",
            print_qr_in_terminal=False,
        )
        built.append(coordinator)
        return coordinator

    yield _make

    for coordinator in built:
        await coordinator.close()


@pytest_asyncio.fixture
async def coordinator(make_coordinator):
    """Coordinator with a fast retry."""
    return make_coordinator()


@pytest_asyncio.fixture
async def slow_retry_coordinator(make_coordinator):
    """Coordinator whose reconnect stays pending for the whole test."""
    return make_coordinator(retry_delay=SLOW_RETRY)
