"""Change notification over the storage layer.

Repositories publish a change after every committed write. Views subscribe
to the tables they display instead of re-fetching on a timer.
"""

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from loguru import logger

ChangeCallback = Callable[[str, int | None], None]


@dataclass(eq=False)
class Subscription:
    """Handle returned by ChangeBus.subscribe."""
    bus: "ChangeBus"
    tables: frozenset[str]
    callback: ChangeCallback
    active: bool = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.bus._remove(self)


@dataclass
class ChangeBus:
    """In-process publish/subscribe keyed by table name."""
    _subscriptions: list[Subscription] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def subscribe(self, tables: Iterable[str], callback: ChangeCallback) -> Subscription:
        subscription = Subscription(bus=self, tables=frozenset(tables), callback=callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def publish(self, table: str, row_id: int | None = None) -> None:
        """Notify subscribers. The write has already committed, so a failing
        subscriber is logged and the others still run."""
        with self._lock:
            targets = [s for s in self._subscriptions if table in s.tables]
        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.callback(table, row_id)
            except Exception:
                logger.exception(f"Change subscriber for {table} failed")

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


change_bus = ChangeBus()


class LiveQuery:
    """Re-run a fetch whenever one of its tables changes.

    Results are handed to on_result only while the query is active. A fetch
    that finishes after cancel() is dropped.
    """

    def __init__(
        self,
        fetch: Callable[[], object],
        tables: Iterable[str],
        on_result: Callable[[object], None],
        bus: ChangeBus | None = None,
    ):
        self.fetch = fetch
        self.tables = frozenset(tables)
        self.on_result = on_result
        self.bus = bus or change_bus
        self._subscription: Subscription | None = None
        self._cancelled = False

    @property
    def active(self) -> bool:
        return self._subscription is not None and not self._cancelled

    def start(self) -> "LiveQuery":
        if self._cancelled:
            raise RuntimeError("LiveQuery was cancelled and cannot be restarted")
        if self._subscription is None:
            self._subscription = self.bus.subscribe(self.tables, self._on_change)
            self.refresh()
        return self

    def refresh(self) -> None:
        result = self.fetch()
        if not self.active:
            logger.debug(f"Discarding result for cancelled query on {sorted(self.tables)}")
            return
        self.on_result(result)

    def cancel(self) -> None:
        self._cancelled = True
        if self._subscription is not None:
            self._subscription.cancel()

    def _on_change(self, table: str, row_id: int | None) -> None:
        self.refresh()
