"""
Test suite for SessionCoordinator.

Covers the lifecycle state machine, stale-handle filtering, reconnect
scheduling, logout semantics and send error mapping. Protocol client and
credential store are the in-memory fakes from conftest.
"""

import asyncio

import pytest

from wagate.core.exceptions import (
    InvalidRequest,
    LogoutFailure,
    NotConnected,
    ProtocolClientError,
    RecipientNotRegistered,
    SendFailure,
    SendTimeout,
    StoreUnavailable,
)
from wagate.domain.events.lifecycle_events import (
    Closed,
    CloseReason,
    CredentialsUpdated,
    DisconnectReason,
    Opened,
    QrIssued,
)
from wagate.domain.interfaces.protocol_client import RegistrationResult
from wagate.domain.models.credentials import CredentialState
from wagate.domain.models.session import SessionState

USER_ID = "5551234:7@s.whatsapp.net"
NETWORK_DROP = CloseReason(DisconnectReason.CONNECTION_CLOSED, "Connection Closed")
LOGGED_OUT = CloseReason(DisconnectReason.LOGGED_OUT, "Logged Out")


async def open_session(coordinator, client_factory):
    await coordinator.start()
    client_factory.latest.emit(Opened(identity=USER_ID))
    await coordinator.drain()
    return client_factory.latest


@pytest.mark.asyncio
class TestStartAndEvents:
    """start() and the qr/opened/credential events."""

    async def test_initial_status(self, coordinator):
        assert coordinator.state is SessionState.IDLE
        assert coordinator.status() == {"connected": False, "phone": None, "hasQR": False}

    async def test_start_creates_client_from_stored_credentials(
        self, coordinator, store, client_factory
    ):
        store.state = CredentialState(creds={"me": {"id": USER_ID}})

        await coordinator.start()

        assert coordinator.state is SessionState.PAIRING
        assert coordinator.generation == 1
        assert len(client_factory.clients) == 1
        client = client_factory.latest
        assert client.connected
        assert client.credentials.creds == {"me": {"id": USER_ID}}

    async def test_start_is_ignored_while_a_client_is_live(
        self, coordinator, client_factory
    ):
        await coordinator.start()
        await coordinator.start()

        assert len(client_factory.clients) == 1
        assert coordinator.generation == 1

    async def test_qr_is_rendered_and_exposed(self, coordinator, client_factory):
        await coordinator.start()
        client_factory.latest.emit(QrIssued(payload="2@abc"))
        await coordinator.drain()

        assert coordinator.snapshot.qr == "data:2@abc"
        assert coordinator.status() == {"connected": False, "phone": None, "hasQR": True}

    async def test_opened_sets_phone_and_clears_qr(self, coordinator, client_factory):
        await coordinator.start()
        client = client_factory.latest
        client.emit(QrIssued(payload="2@abc"))
        client.emit(Opened(identity=USER_ID))
        await coordinator.drain()

        assert coordinator.state is SessionState.CONNECTED
        assert coordinator.status() == {
            "connected": True,
            "phone": "5551234",
            "hasQR": False,
        }

    async def test_qr_ignored_once_connected(self, coordinator, client_factory):
        client = await open_session(coordinator, client_factory)

        client.emit(QrIssued(payload="2@late"))
        await coordinator.drain()

        assert coordinator.snapshot.qr is None
        assert coordinator.snapshot.connected

    async def test_credential_updates_are_saved_in_any_state(
        self, coordinator, store, client_factory
    ):
        await coordinator.start()
        client = client_factory.latest

        client.emit(CredentialsUpdated(CredentialState(creds={"a": 1})))
        await coordinator.drain()
        assert coordinator.state is SessionState.PAIRING

        client.emit(Opened(identity=USER_ID))
        client.emit(
            CredentialsUpdated(CredentialState(keys={"pre-key-1": {"k": "v"}}))
        )
        await coordinator.drain()

        assert len(store.saves) == 2
        assert store.state.creds == {"a": 1}
        assert store.state.keys == {"pre-key-1": {"k": "v"}}

    async def test_store_unavailable_on_start_propagates(
        self, coordinator, store, client_factory
    ):
        store.load_error = StoreUnavailable()

        with pytest.raises(StoreUnavailable):
            await coordinator.start()

        assert coordinator.state is SessionState.IDLE
        assert client_factory.clients == []
        assert not coordinator.retry_pending


@pytest.mark.asyncio
class TestReconnect:
    """Close handling and the reconnect policy."""

    async def test_recoverable_close_schedules_exactly_one_retry(
        self, slow_retry_coordinator, client_factory
    ):
        coordinator = slow_retry_coordinator
        client = await open_session(coordinator, client_factory)

        client.emit(Closed(NETWORK_DROP))
        await coordinator.drain()

        assert coordinator.state is SessionState.IDLE
        assert coordinator.status() == {"connected": False, "phone": None, "hasQR": False}
        assert coordinator.retry_pending
        assert client.closed
        assert len(client_factory.clients) == 1

    async def test_retry_builds_a_new_client(
        self, coordinator, client_factory, wait_until
    ):
        first = await open_session(coordinator, client_factory)

        first.emit(Closed(NETWORK_DROP))
        await wait_until(lambda: len(client_factory.clients) == 2)

        assert coordinator.state is SessionState.PAIRING
        assert coordinator.generation == 2
        assert client_factory.latest is not first

    async def test_repeated_closes_never_reach_logged_out(
        self, coordinator, client_factory, wait_until
    ):
        await coordinator.start()

        for expected in range(2, 5):
            client_factory.latest.emit(Closed(NETWORK_DROP))
            await wait_until(lambda: len(client_factory.clients) == expected)

        assert coordinator.state is SessionState.PAIRING
        assert len(client_factory.clients) == 4

    async def test_logged_out_close_is_terminal(self, coordinator, client_factory):
        client = await open_session(coordinator, client_factory)

        client.emit(Closed(LOGGED_OUT))
        await coordinator.drain()
        await asyncio.sleep(0.05)

        assert coordinator.state is SessionState.LOGGED_OUT
        assert not coordinator.retry_pending
        assert len(client_factory.clients) == 1

    async def test_remote_logout_erases_stored_credentials(
        self, coordinator, store, client_factory
    ):
        store.state = CredentialState(creds={"me": {"id": USER_ID}})
        client = await open_session(coordinator, client_factory)

        client.emit(Closed(LOGGED_OUT))
        await coordinator.drain()

        assert store.erase_count == 1
        assert store.state.is_empty

    async def test_remote_logout_then_logout_and_connect_pairs_fresh(
        self, coordinator, store, client_factory
    ):
        store.state = CredentialState(creds={"me": {"id": USER_ID}})
        client = await open_session(coordinator, client_factory)
        client.emit(Closed(LOGGED_OUT))
        await coordinator.drain()

        await coordinator.logout()
        snapshot = await coordinator.connect()

        assert snapshot.state is SessionState.PAIRING
        assert client_factory.latest is not client
        assert client_factory.latest.credentials.is_empty

    async def test_remote_logout_survives_erase_failure(
        self, coordinator, store, client_factory
    ):
        client = await open_session(coordinator, client_factory)

        async def broken_erase():
            raise StoreUnavailable("disk gone")

        store.erase = broken_erase
        client.emit(Closed(LOGGED_OUT))
        await coordinator.drain()

        assert coordinator.state is SessionState.LOGGED_OUT
        assert not coordinator.retry_pending

    async def test_connect_failure_is_retried(
        self, slow_retry_coordinator, client_factory
    ):
        client_factory.connect_errors.append(ProtocolClientError("bridge down"))

        await slow_retry_coordinator.start()
        await slow_retry_coordinator.drain()

        assert slow_retry_coordinator.state is SessionState.IDLE
        assert slow_retry_coordinator.retry_pending

    async def test_max_attempts_stops_without_logging_out(
        self, make_coordinator, client_factory, wait_until
    ):
        coordinator = make_coordinator(max_attempts=1)
        await coordinator.start()

        client_factory.latest.emit(Closed(NETWORK_DROP))
        await wait_until(lambda: len(client_factory.clients) == 2)

        client_factory.latest.emit(Closed(NETWORK_DROP))
        await coordinator.drain()
        await asyncio.sleep(0.05)

        assert len(client_factory.clients) == 2
        assert coordinator.state is SessionState.IDLE
        assert not coordinator.retry_pending

    async def test_successful_open_resets_attempts(
        self, make_coordinator, client_factory, wait_until
    ):
        coordinator = make_coordinator(max_attempts=1)
        await coordinator.start()

        client_factory.latest.emit(Closed(NETWORK_DROP))
        await wait_until(lambda: len(client_factory.clients) == 2)

        client_factory.latest.emit(Opened(identity=USER_ID))
        client_factory.latest.emit(Closed(NETWORK_DROP))
        await wait_until(lambda: len(client_factory.clients) == 3)

        assert coordinator.state is SessionState.PAIRING

    async def test_start_supersedes_pending_retry(
        self, slow_retry_coordinator, client_factory
    ):
        coordinator = slow_retry_coordinator
        client = await open_session(coordinator, client_factory)
        client.emit(Closed(NETWORK_DROP))
        await coordinator.drain()
        assert coordinator.retry_pending

        await coordinator.start()

        assert not coordinator.retry_pending
        assert len(client_factory.clients) == 2


@pytest.mark.asyncio
class TestStaleHandles:
    """Events from replaced clients must not touch the current session."""

    async def test_events_from_replaced_client_are_ignored(
        self, coordinator, store, client_factory, wait_until
    ):
        old = await open_session(coordinator, client_factory)
        old.emit(Closed(NETWORK_DROP))
        await wait_until(lambda: len(client_factory.clients) == 2)

        old.emit(Opened(identity="5559999@s.whatsapp.net"))
        old.emit(QrIssued(payload="2@stale"))
        old.emit(CredentialsUpdated(CredentialState(creds={"stale": True})))
        old.emit(Closed(LOGGED_OUT))
        await coordinator.drain()

        assert coordinator.state is SessionState.PAIRING
        assert coordinator.snapshot.phone is None
        assert coordinator.snapshot.qr is None
        assert store.saves == []

    async def test_credentials_after_logout_are_not_resurrected(
        self, coordinator, store, client_factory
    ):
        client = await open_session(coordinator, client_factory)
        await coordinator.logout()

        client.emit(CredentialsUpdated(CredentialState(creds={"late": True})))
        await coordinator.drain()

        assert store.saves == []
        assert store.state.is_empty


@pytest.mark.asyncio
class TestLogout:
    """logout() semantics."""

    async def test_logout_erases_credentials(self, coordinator, store, client_factory):
        store.state = CredentialState(creds={"me": {"id": USER_ID}})
        client = await open_session(coordinator, client_factory)

        await coordinator.logout()

        assert client.logged_out
        assert client.closed
        assert store.erase_count == 1
        assert coordinator.state is SessionState.LOGGED_OUT
        assert coordinator.status() == {"connected": False, "phone": None, "hasQR": False}

    async def test_logout_is_idempotent(self, coordinator, store, client_factory):
        await open_session(coordinator, client_factory)

        await coordinator.logout()
        await coordinator.logout()

        assert store.erase_count == 1
        assert coordinator.state is SessionState.LOGGED_OUT

    async def test_logout_without_client_only_resets_snapshot(self, coordinator, store):
        await coordinator.logout()

        assert coordinator.state is SessionState.LOGGED_OUT
        assert store.erase_count == 0

    async def test_logout_cancels_pending_retry(
        self, slow_retry_coordinator, client_factory
    ):
        coordinator = slow_retry_coordinator
        client = await open_session(coordinator, client_factory)
        client.emit(Closed(NETWORK_DROP))
        await coordinator.drain()
        assert coordinator.retry_pending

        await coordinator.logout()
        await asyncio.sleep(0.05)

        assert not coordinator.retry_pending
        assert len(client_factory.clients) == 1
        assert coordinator.state is SessionState.LOGGED_OUT

    async def test_remote_logout_failure_still_tears_down(
        self, coordinator, store, client_factory
    ):
        client = await open_session(coordinator, client_factory)
        client.logout_error = RuntimeError("bridge refused")

        with pytest.raises(LogoutFailure):
            await coordinator.logout()

        assert client.closed
        assert store.erase_count == 1
        assert coordinator.state is SessionState.LOGGED_OUT

    async def test_connect_after_logout_pairs_again(self, coordinator, client_factory):
        await open_session(coordinator, client_factory)
        await coordinator.logout()

        snapshot = await coordinator.connect()

        assert snapshot.state is SessionState.PAIRING
        assert coordinator.generation == 2
        assert client_factory.latest.credentials.is_empty


@pytest.mark.asyncio
class TestSendMessage:
    """send_message() and its error mapping."""

    async def test_send_success(self, coordinator, client_factory):
        client = await open_session(coordinator, client_factory)

        result = await coordinator.send_message("+5557777", "Hola")

        assert client.checked == ["+5557777"]
        assert client.sent == [("+5557777@s.whatsapp.net", "Hola")]
        assert result.jid == "+5557777@s.whatsapp.net"
        assert result.message_id == "MSG1"

    async def test_send_falls_back_to_normalized_jid(self, coordinator, client_factory):
        client = await open_session(coordinator, client_factory)

        async def registered_without_jid(number):
            return RegistrationResult(exists=True)

        client.check_registered = registered_without_jid

        result = await coordinator.send_message("+5557777", "Hola")

        assert result.jid == "5557777@s.whatsapp.net"

    async def test_not_connected_makes_no_remote_call(
        self, coordinator, client_factory
    ):
        await coordinator.start()

        with pytest.raises(NotConnected):
            await coordinator.send_message("5557777", "Hola")

        assert client_factory.latest.checked == []
        assert client_factory.latest.sent == []

    async def test_not_connected_before_start(self, coordinator):
        with pytest.raises(NotConnected):
            await coordinator.send_message("5557777", "Hola")

    async def test_unregistered_recipient(self, coordinator, client_factory):
        client = await open_session(coordinator, client_factory)
        client.unregistered.add("5550000")

        with pytest.raises(RecipientNotRegistered) as exc_info:
            await coordinator.send_message("5550000", "Hola")

        assert exc_info.value.status_code == 404
        assert client.sent == []

    async def test_blank_target_is_invalid(self, coordinator, client_factory):
        await open_session(coordinator, client_factory)

        with pytest.raises(InvalidRequest):
            await coordinator.send_message("   ", "Hola")

    async def test_send_timeout(self, make_coordinator, client_factory):
        coordinator = make_coordinator(send_timeout=0.05)
        client = await open_session(coordinator, client_factory)
        client.send_delay = 1

        with pytest.raises(SendTimeout) as exc_info:
            await coordinator.send_message("5557777", "Hola")

        assert exc_info.value.status_code == 504
        assert coordinator.snapshot.connected

    async def test_send_failure(self, coordinator, client_factory):
        client = await open_session(coordinator, client_factory)
        client.send_error = RuntimeError("stream errored")

        with pytest.raises(SendFailure):
            await coordinator.send_message("5557777", "Hola")

        assert coordinator.snapshot.connected


@pytest.mark.asyncio
class TestClose:
    async def test_close_releases_client_without_logout(
        self, coordinator, store, client_factory
    ):
        client = await open_session(coordinator, client_factory)

        await coordinator.close()

        assert client.closed
        assert not client.logged_out
        assert store.erase_count == 0
        assert coordinator.state is SessionState.IDLE
