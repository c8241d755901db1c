"""Closed notification catalog and the synchronous publish/subscribe capability."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from smart_collection.errors import UnknownEventError

Handler = Callable[..., Any]


class CollectionEvent(str, Enum):
    ADD_BEFORE = "add-before"
    ADD = "add"
    ADD_AFTER = "add-after"
    ADD_CANCEL = "add-cancel"
    ADD_RESUME = "add-resume"
    REMOVE_BEFORE = "remove-before"
    REMOVE = "remove"
    REMOVE_AFTER = "remove-after"
    REMOVE_CANCEL = "remove-cancel"
    REMOVE_RESUME = "remove-resume"
    EMPTY = "empty"
    FLUSH = "flush"

    def __str__(self) -> str:
        return self.value


def available_events() -> tuple[str, ...]:
    return tuple(event.value for event in CollectionEvent)


def resolve_event(name: CollectionEvent | str) -> CollectionEvent:
    """Map an enum member or its string value onto the catalog, failing fast otherwise."""

    if isinstance(name, CollectionEvent):
        return name
    if isinstance(name, str):
        key = name.strip()
        try:
            return CollectionEvent(key)
        except ValueError:
            suggestions = tuple(difflib.get_close_matches(key, available_events(), n=3))
            raise UnknownEventError(name, suggestions=suggestions) from None
    raise UnknownEventError(name)


@dataclass(eq=False)
class _Subscription:
    handler: Handler
    once: bool = False
    active: bool = True


class EventEmitter:
    """Synchronous emitter restricted to `CollectionEvent` names.

    Handlers run in registration order and all of them complete before `emit`
    returns. Dispatch iterates over a snapshot, so handlers added while an event
    is being published only see the next publication; handlers removed while it
    is being published are skipped.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[CollectionEvent, list[_Subscription]] = {}

    def on(self, event: CollectionEvent | str, handler: Handler) -> "EventEmitter":
        self._subscribe(event, handler, once=False)
        return self

    def once(self, event: CollectionEvent | str, handler: Handler) -> "EventEmitter":
        self._subscribe(event, handler, once=True)
        return self

    def off(self, event: CollectionEvent | str, handler: Handler) -> "EventEmitter":
        key = resolve_event(event)
        subscriptions = self._subscriptions.get(key, [])
        for subscription in subscriptions:
            if subscription.handler == handler and subscription.active:
                subscription.active = False
                subscriptions.remove(subscription)
                break
        return self

    def listeners(self, event: CollectionEvent | str) -> tuple[Handler, ...]:
        key = resolve_event(event)
        return tuple(s.handler for s in self._subscriptions.get(key, []) if s.active)

    def listener_count(self, event: CollectionEvent | str) -> int:
        return len(self.listeners(event))

    def emit(self, event: CollectionEvent | str, *args: Any) -> bool:
        """Publish `event` to every subscriber; returns True when anyone was listening."""

        key = resolve_event(event)
        snapshot = list(self._subscriptions.get(key, []))
        if not snapshot:
            return False

        for subscription in snapshot:
            if not subscription.active:
                continue
            if subscription.once:
                subscription.active = False
                self._subscriptions[key].remove(subscription)
            subscription.handler(*args)
        return True

    def _subscribe(self, event: CollectionEvent | str, handler: Handler, *, once: bool) -> None:
        key = resolve_event(event)
        if not callable(handler):
            raise TypeError(
                f"Handler for {key.value} must be callable (type={type(handler).__name__})"
            )
        self._subscriptions.setdefault(key, []).append(_Subscription(handler=handler, once=once))


__all__ = [
    "CollectionEvent",
    "EventEmitter",
    "Handler",
    "available_events",
    "resolve_event",
]
