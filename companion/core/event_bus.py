from __future__ import annotations

import asyncio
import inspect
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, TypeAlias, Union

from companion.core.errors import HandlerFailure, NoHistory
from companion.core.events.base import Event, inverse_kind
from companion.core.filters import EventFilter, FilterLike, coerce_filter, matches
from companion.core.history import EventStats, HistoryLedger, HistorySnapshot
from companion.utils.clock import Clock, utc_now
from companion.utils.ids import generate_subscription_id
from companion.utils.logging import get_logger

if TYPE_CHECKING:
    from companion.app.config import CompanionConfig

EventHandler: TypeAlias = Callable[[Event], Union[None, Awaitable[None]]]
Unsubscribe: TypeAlias = Callable[[], None]


@dataclass(frozen=True)
class Subscription:
    handle: str
    handler: EventHandler
    filter: Optional[EventFilter] = None


class EventBus:
    """Character event hub: filtered pub/sub plus undo/redo history.

    One bus per session. Pass it explicitly to whatever publishes on it.
    """

    def __init__(
        self,
        history_size: int = 50,
        clock: Clock = utc_now,
        recent_events: int = 10,
    ) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self._history = HistoryLedger(capacity=history_size)
        self._clock = clock
        self._recent_events = recent_events
        self._failures: deque[HandlerFailure] = deque(maxlen=50)
        self._logger = get_logger(__name__)

    @classmethod
    def from_config(cls, config: "CompanionConfig", clock: Clock = utc_now) -> "EventBus":
        return cls(
            history_size=config.history.max_size,
            clock=clock,
            recent_events=config.history.recent_events,
        )

    # ------------------------------------------------------------------
    # Pub/Sub
    # ------------------------------------------------------------------

    def subscribe(self, handler: EventHandler, filter: FilterLike = None) -> Unsubscribe:
        """Register a handler (sync or async) with an optional filter.

        Returns:
            A callable that removes exactly this subscription; calling it
            again is a no-op.
        """
        subscription = Subscription(
            handle=generate_subscription_id(),
            handler=handler,
            filter=coerce_filter(filter),
        )
        self._subscriptions[subscription.handle] = subscription
        self._logger.debug(f"Subscribed '{_handler_name(handler)}' as {subscription.handle}")

        def unsubscribe() -> None:
            if self._subscriptions.pop(subscription.handle, None) is not None:
                self._logger.debug(f"Unsubscribed {subscription.handle}")

        return unsubscribe

    async def publish(self, event: Event) -> Event:
        """Record an event in history, then deliver it to matching handlers.

        The event is stamped with the bus clock if it has no timestamp.
        Handler failures are logged and never reach the caller.

        Returns:
            The event as recorded (with its timestamp)
        """
        if event.timestamp is None:
            event = event.stamped(self._clock())

        self._history.append(event)
        await self._dispatch(event)
        return event

    async def replay(self, event: Event) -> None:
        """Deliver ``event`` to matching handlers without recording it in history."""
        await self._dispatch(event)

    async def _dispatch(self, event: Event) -> None:
        targets = [s for s in self._subscriptions.values() if matches(event, s.filter)]

        if not targets:
            self._logger.debug(f"No subscribers matched {event}")
            return

        self._logger.debug(f"Publishing {event} to {len(targets)} handler(s)")
        # Tasks start in creation order, so handlers are invoked in
        # registration order even though they complete concurrently.
        await asyncio.gather(*(self._safe_dispatch(s, event) for s in targets))

    async def _safe_dispatch(self, subscription: Subscription, event: Event) -> None:
        """Dispatch wrapper to keep one handler failure from stopping the bus."""
        handler_name = _handler_name(subscription.handler)
        try:
            result = subscription.handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            failure = HandlerFailure(handler_name, event.kind, exc)
            self._failures.append(failure)
            self._logger.exception(
                f"Event handler error in '{handler_name}' for {event.kind.value}",
                exc_info=exc,
            )

    # ------------------------------------------------------------------
    # Undo / Redo
    # ------------------------------------------------------------------

    def can_undo(self) -> bool:
        return self._history.can_undo()

    def can_redo(self) -> bool:
        return self._history.can_redo()

    async def undo(self) -> Optional[Event]:
        """Move the history cursor back and re-emit the inverse event.

        Re-emission notifies subscribers only; it is not recorded, so the
        redo branch survives. Returns None when there is nothing to undo.
        """
        try:
            event = self._history.undo()
        except NoHistory as exc:
            self._logger.debug(f"Undo ignored: {exc}")
            return None

        inverse = event.relabelled(inverse_kind(event.kind))
        self._logger.info(f"Undo -> re-emitting {inverse}")
        await self.replay(inverse)
        return inverse

    async def redo(self) -> Optional[Event]:
        """Move the history cursor forward and re-emit that event unchanged."""
        try:
            event = self._history.redo()
        except NoHistory as exc:
            self._logger.debug(f"Redo ignored: {exc}")
            return None

        self._logger.info(f"Redo -> re-emitting {event}")
        await self.replay(event)
        return event

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def history(self) -> HistoryLedger:
        return self._history

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def recent_failures(self) -> tuple[HandlerFailure, ...]:
        return tuple(self._failures)

    def get_history(self) -> HistorySnapshot:
        return self._history.snapshot()

    def get_event_stats(self) -> EventStats:
        return self._history.stats(recent=self._recent_events)


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(handler)
