"""Per-item mutation pipeline: before -> commit -> after, or before -> cancel -> resume.

Every add or remove of a single item goes through `begin_mutation`. The
pipeline publishes `<kind>-before` with a `MutationContinuation`; any
subscriber may call `cancel()` on it while that notification is dispatching.
Without a cancel the change is committed right away and `<kind>` and
`<kind>-after` follow (plus `empty` when a removal drains the collection).
With a cancel, `<kind>-cancel` is published together with the continuation's
`resume` callable; calling it later publishes `<kind>-resume` and replays the
commit.

All dispatch is synchronous. Handler exceptions propagate unchanged and leave
the mutation in whatever state it had reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from smart_collection.events import CollectionEvent
from smart_collection.recorder import MutationRecorder


class MutationKind(str, Enum):
    ADD = "add"
    REMOVE = "remove"

    @property
    def before_event(self) -> CollectionEvent:
        return CollectionEvent(f"{self.value}-before")

    @property
    def commit_event(self) -> CollectionEvent:
        return CollectionEvent(self.value)

    @property
    def after_event(self) -> CollectionEvent:
        return CollectionEvent(f"{self.value}-after")

    @property
    def cancel_event(self) -> CollectionEvent:
        return CollectionEvent(f"{self.value}-cancel")

    @property
    def resume_event(self) -> CollectionEvent:
        return CollectionEvent(f"{self.value}-resume")


class MutationState(str, Enum):
    PENDING = "pending"
    CANCELED = "canceled"
    COMMITTED = "committed"


class MutationHost(Protocol):
    logger: logging.Logger
    recorder: MutationRecorder
    _items: list[Any]

    def emit(self, event: CollectionEvent | str, *args: Any) -> bool:
        ...


@dataclass(eq=False)
class Mutation:
    collection: MutationHost
    kind: MutationKind
    item: Any
    position: int | None = None
    state: MutationState = MutationState.PENDING
    _dispatching: bool = field(default=False, init=False, repr=False)
    _announced: bool = field(default=False, init=False, repr=False)

    @property
    def pending(self) -> bool:
        return self.state is MutationState.PENDING

    @property
    def canceled(self) -> bool:
        return self.state is MutationState.CANCELED

    @property
    def committed(self) -> bool:
        return self.state is MutationState.COMMITTED


class MutationContinuation:
    """Cancel/resume capability handed to `<kind>-before` subscribers."""

    __slots__ = ("_mutation",)

    def __init__(self, mutation: Mutation) -> None:
        self._mutation = mutation

    @property
    def mutation(self) -> Mutation:
        return self._mutation

    @property
    def state(self) -> MutationState:
        return self._mutation.state

    def cancel(self) -> bool:
        """Veto the pending change. Only effective during the before-notification."""

        mutation = self._mutation
        if not mutation._dispatching or mutation.state is not MutationState.PENDING:
            return False
        mutation.state = MutationState.CANCELED
        return True

    def resume(self) -> bool:
        """Commit a canceled change. No-op unless its cancel has been published."""

        mutation = self._mutation
        if mutation.state is not MutationState.CANCELED or not mutation._announced:
            return False

        mutation.state = MutationState.COMMITTED
        host = mutation.collection
        host.recorder.on_resume(mutation)
        host.emit(mutation.kind.resume_event, host, mutation.item)
        _commit(mutation)
        return True

    def __repr__(self) -> str:
        return f"MutationContinuation(kind={self._mutation.kind.value}, state={self.state.value})"


def _insertion_index(position: Any, length: int) -> int | None:
    if isinstance(position, bool) or not isinstance(position, int):
        return None
    if 0 <= position <= length:
        return position
    return None


def _locate(items: list[Any], item: Any, position: int | None) -> int | None:
    if position is not None and 0 <= position < len(items) and items[position] == item:
        return position
    try:
        return items.index(item)
    except ValueError:
        return None


def _commit(mutation: Mutation) -> None:
    mutation.state = MutationState.COMMITTED
    host = mutation.collection
    items = host._items

    if mutation.kind is MutationKind.ADD:
        index = _insertion_index(mutation.position, len(items))
        if index is None:
            items.append(mutation.item)
        else:
            items.insert(index, mutation.item)
        host.recorder.on_commit(mutation, length=len(items))
        host.emit(mutation.kind.commit_event, host, mutation.item)
        host.emit(mutation.kind.after_event, host, mutation.item)
        return

    index = _locate(items, mutation.item, mutation.position)
    if index is None:
        host.recorder.on_commit(mutation, length=len(items), skipped=True)
        return

    del items[index]
    became_empty = not items
    host.recorder.on_commit(mutation, length=len(items))
    host.emit(mutation.kind.commit_event, host, mutation.item)
    host.emit(mutation.kind.after_event, host, mutation.item)
    if became_empty:
        host.emit(CollectionEvent.EMPTY, host)


def begin_mutation(
    collection: MutationHost,
    kind: MutationKind | str,
    item: Any,
    position: int | None = None,
) -> Mutation:
    """Run the before/commit/after or before/cancel protocol for one item."""

    mutation = Mutation(collection=collection, kind=MutationKind(kind), item=item, position=position)
    continuation = MutationContinuation(mutation)
    collection.recorder.on_begin(mutation)

    mutation._dispatching = True
    try:
        collection.emit(mutation.kind.before_event, collection, item, continuation)
    finally:
        mutation._dispatching = False

    if mutation.state is MutationState.PENDING:
        _commit(mutation)
        return mutation

    mutation._announced = True
    collection.recorder.on_cancel(mutation)
    collection.emit(mutation.kind.cancel_event, collection, item, continuation.resume)
    return mutation


__all__ = [
    "Mutation",
    "MutationContinuation",
    "MutationHost",
    "MutationKind",
    "MutationState",
    "begin_mutation",
]
