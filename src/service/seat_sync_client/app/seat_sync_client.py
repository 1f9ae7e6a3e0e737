"""
Seat Sync Client

Keeps one viewer's ClientViewState consistent with the server.

    INITIALIZING -> SYNCED <-> RECONNECTING
    any state -> TERMINATED (aclose / context exit)

Connection sequence (first connect and every reconnect):
1. Fetch the full snapshot
2. Open the update stream (entering means the server accepted it)
3. Fetch the snapshot once more to cover writes made between 1 and 2
4. SYNCED: reconcile frames in arrival order

A transport failure or a stream ended by the server moves the client to
RECONNECTING; the sequence is retried after a fixed delay until the session ends.

Local edits are optimistic: edit() updates `pending` at once and (re)arms a
per-seat debounce timer. When the timer fires the *current* pending value is
sent, so a burst of edits to one seat ends in a single write. The echo of the
write on the update stream clears the pending entry. If the stream drops
before the echo arrives, the next snapshot settles the entry instead; only
seats with a timer armed or a write in flight keep their pending value.
"""

from collections import Counter
from contextlib import AsyncExitStack
from typing import Callable, Dict, Optional, Set

import anyio
from anyio import CancelScope
from anyio.abc import TaskGroup

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import (
    CustomBaseError,
    MalformedEventError,
    TransportError,
)
from src.platform.logging.loguru_io import Logger
from src.service.seat_sync_client.app.interface.i_seat_api import ISeatApi
from src.service.seat_sync_client.domain.entity.client_view_state import ClientViewState
from src.service.seat_sync_client.domain.enum.sync_state import SyncState
from src.service.seat_sync_client.domain.value_object.notification import (
    Notification,
    NotificationSeverity,
)
from src.service.shared_kernel.app.seat_event_codec import SeatEventCodec
from src.service.shared_kernel.domain.value_object.seat_key import SeatKey


Notifier = Callable[[Notification], None]
StateListener = Callable[[SyncState], None]

def log_notification(notification: Notification) -> None:
    if notification.severity is NotificationSeverity.ERROR:
        Logger.base.warning(f'🔔 {notification.message}')
    else:
        Logger.base.info(f'🔔 {notification.message}')


class SeatSyncClient:
    def __init__(
        self,
        *,
        seat_api: ISeatApi,
        notifier: Optional[Notifier] = None,
        on_state_change: Optional[StateListener] = None,
        debounce_delay: Optional[float] = None,
        reconnect_delay: Optional[float] = None,
        view: Optional[ClientViewState] = None,
    ) -> None:
        self.seat_api = seat_api
        self.notifier = notifier or log_notification
        self.on_state_change = on_state_change
        self.debounce_delay = (
            settings.CLIENT_DEBOUNCE_SECONDS if debounce_delay is None else debounce_delay
        )
        self.reconnect_delay = (
            settings.CLIENT_RECONNECT_DELAY_SECONDS if reconnect_delay is None else reconnect_delay
        )
        self.view = view or ClientViewState()

        self._state = SyncState.INITIALIZING
        self._exit_stack: Optional[AsyncExitStack] = None
        self._task_group: Optional[TaskGroup] = None
        self._connection_scope: Optional[CancelScope] = None
        self._debounce_scopes: Dict[SeatKey, CancelScope] = {}
        self._in_flight: Counter[SeatKey] = Counter()
        self._synced: Optional[anyio.Event] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    async def __aenter__(self) -> 'SeatSyncClient':
        if self._state is SyncState.TERMINATED:
            raise RuntimeError('SeatSyncClient cannot be restarted once terminated')
        self._synced = anyio.Event()
        async with AsyncExitStack() as stack:
            self._task_group = await stack.enter_async_context(anyio.create_task_group())
            self._connection_scope = CancelScope()
            self._task_group.start_soon(self._run_connection, self._connection_scope)
            self._exit_stack = stack.pop_all()
        return self

    async def __aexit__(self, *exc_info) -> Optional[bool]:
        self._terminate()
        exit_stack, self._exit_stack = self._exit_stack, None
        if exit_stack is None:
            return None
        # Waits for shielded in-flight writes
        return await exit_stack.__aexit__(*exc_info)

    async def aclose(self) -> None:
        await self.__aexit__(None, None, None)

    async def wait_synced(self) -> None:
        if self._synced is None:
            raise RuntimeError('SeatSyncClient is not running')
        await self._synced.wait()

    def _terminate(self) -> None:
        if self._state is SyncState.TERMINATED:
            return
        self._set_state(SyncState.TERMINATED)
        if self._connection_scope is not None:
            self._connection_scope.cancel()
        for scope in self._debounce_scopes.values():
            scope.cancel()
        self._debounce_scopes.clear()

    def _set_state(self, state: SyncState) -> None:
        if self._state is SyncState.TERMINATED or self._state is state:
            return
        Logger.base.info(f'🔄 [SYNC] {self._state} -> {state}')
        self._state = state
        if self._synced is not None:
            if state is SyncState.SYNCED:
                self._synced.set()
            elif self._synced.is_set():
                self._synced = anyio.Event()
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _notify(self, notification: Notification) -> None:
        if self._state is SyncState.TERMINATED:
            return
        self.notifier(notification)

    # ------------------------------------------------------------------
    # Connection loop
    # ------------------------------------------------------------------

    async def _run_connection(self, scope: CancelScope) -> None:
        with scope:
            while True:
                try:
                    await self._connect_and_listen()
                except CustomBaseError as e:
                    Logger.base.warning(f'⚠️ [SYNC] Connection lost: {e.message}')
                self._set_state(SyncState.RECONNECTING)
                Logger.base.info(f'⏳ [SYNC] Reconnecting in {self.reconnect_delay}s')
                await anyio.sleep(self.reconnect_delay)

    async def _connect_and_listen(self) -> None:
        await self._load_snapshot()

        async with self.seat_api.open_stream() as frames:
            # Writes between the first fetch and the subscription
            await self._load_snapshot()
            self._set_state(SyncState.SYNCED)

            async for frame in frames:
                self.handle_frame(frame)

        raise TransportError('Event stream closed by server')

    async def _load_snapshot(self) -> None:
        # A write that finishes during the fetch may be missing from this snapshot
        unsettled = self._unsettled_keys()
        records = await self.seat_api.fetch_snapshot()
        self.view.load_snapshot(records, keep_pending=unsettled | self._unsettled_keys())

    def _unsettled_keys(self) -> Set[SeatKey]:
        """Seats with a debounce timer armed or a write still waiting for its response."""
        return set(self._debounce_scopes) | {key for key, count in self._in_flight.items() if count}

    def handle_frame(self, frame: str) -> None:
        """Reconcile one raw stream frame; keepalives and bad frames are dropped."""
        try:
            event = SeatEventCodec.decode(frame)
        except MalformedEventError as e:
            Logger.base.warning(f'⚠️ [SYNC] Dropping frame: {e.message}')
            return
        if event is None:
            return
        self._notify(self.view.reconcile(event))

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------

    def edit(self, key: SeatKey, value: str) -> None:
        """Optimistic edit; an empty value frees the seat."""
        task_group = self._require_running()
        self.view.apply_local_edit(key, value)

        if (previous := self._debounce_scopes.get(key)) is not None:
            previous.cancel()
        scope = CancelScope()
        self._debounce_scopes[key] = scope
        task_group.start_soon(self._debounce_commit, key, scope)

    def clear(self, key: SeatKey) -> None:
        """Free a seat right away through the delete call, skipping the debounce."""
        task_group = self._require_running()
        if (previous := self._debounce_scopes.pop(key, None)) is not None:
            previous.cancel()
        self.view.apply_local_edit(key, '')
        self._in_flight[key] += 1
        task_group.start_soon(self._commit_clear, key)

    def display_value(self, key: SeatKey) -> Optional[str]:
        return self.view.display_value(key)

    def _require_running(self) -> TaskGroup:
        if self._task_group is None or self._state is SyncState.TERMINATED:
            raise RuntimeError('SeatSyncClient is not running')
        return self._task_group

    async def _debounce_commit(self, key: SeatKey, scope: CancelScope) -> None:
        try:
            with scope:
                await anyio.sleep(self.debounce_delay)
            if scope.cancel_called:
                return
            with CancelScope(shield=True):
                await self._commit_edit(key)
        finally:
            if self._debounce_scopes.get(key) is scope:
                del self._debounce_scopes[key]

    async def _commit_edit(self, key: SeatKey) -> None:
        if not self.view.is_pending(key):
            Logger.base.info(
                f'ℹ️ [SYNC] Edit for {key.seat_id} superseded by a server update, not sent'
            )
            return
        value = self.view.pending_value(key)
        self._in_flight[key] += 1
        try:
            await self.seat_api.upsert_seat(key=key, occupant_name=value or None)
        except CustomBaseError as e:
            self._fail_write(key, value, e)
        finally:
            self._in_flight[key] -= 1

    async def _commit_clear(self, key: SeatKey) -> None:
        with CancelScope(shield=True):
            try:
                await self.seat_api.clear_seat(key=key)
            except CustomBaseError as e:
                self._fail_write(key, '', e)
            finally:
                self._in_flight[key] -= 1

    def _fail_write(self, key: SeatKey, sent_value: Optional[str], error: Exception) -> None:
        message = getattr(error, 'message', str(error))
        Logger.base.error(f'❌ [SYNC] Write for {key.seat_id} failed: {message}')
        # A newer edit made while the write was in flight keeps its own timer
        if self.view.pending_value(key) == sent_value:
            self.view.drop_pending(key)
        self._notify(Notification.error(f'Failed to update seat {key.label}'))
