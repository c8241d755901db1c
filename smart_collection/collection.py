"""Ordered in-memory collection with interceptable add/remove operations."""

from __future__ import annotations

import keyword
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterator

from smart_collection.config import CollectionConfig
from smart_collection.errors import ConfigurationError
from smart_collection.events import CollectionEvent, EventEmitter, Handler
from smart_collection.features import FeatureRegistry, default_feature_registry
from smart_collection.mutation import MutationKind, begin_mutation
from smart_collection.recorder import DefaultMutationRecorder, MutationRecorder, validate_recorder

LOGGER = logging.getLogger(__name__)

View = Callable[["Collection"], Any]


class Collection:
    """
    Ordered sequence of items whose mutations are published as events.

    Every single-item add or remove publishes `<kind>-before` with a
    continuation that subscribers may use to cancel it; bulk operations are
    expanded into one single-item mutation per element. Views and features are
    exposed as read-only attributes.

    Example:
        coll = Collection("todo")
        coll.on("add-before", lambda c, item, next_: item == "skip" and next_.cancel())
        coll.add(["a", "skip", "b"])
        coll.items  # ("a", "b")
    """

    def __init__(
        self,
        name: str | Mapping[str, Any] | None = None,
        *,
        emitter: EventEmitter | None = None,
        features: FeatureRegistry | None = None,
        recorder: MutationRecorder | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if isinstance(name, Mapping):
            name = name.get("name")
        if name is not None and not isinstance(name, str):
            raise TypeError(f"Collection name must be a string or None (type={type(name).__name__})")

        self._name = name.strip() if isinstance(name, str) else None
        self._items: list[Any] = []
        self._emitter = emitter if emitter is not None else EventEmitter()
        self._feature_registry = features if features is not None else default_feature_registry()
        self._views: dict[str, View] = {}
        self._features: dict[str, Callable[..., Any]] = {}
        self.logger = logger if logger is not None else LOGGER
        self.recorder = validate_recorder(recorder if recorder is not None else DefaultMutationRecorder())

        self.add_view("all", lambda collection: collection.items)
        self.logger.debug("Collection ready (name=%s)", self._name or "<unnamed>")

    @classmethod
    def from_config(
        cls,
        cfg: CollectionConfig,
        *,
        emitter: EventEmitter | None = None,
        features: FeatureRegistry | None = None,
        recorder: MutationRecorder | None = None,
        logger: logging.Logger | None = None,
    ) -> "Collection":
        if logger is None:
            logger = logging.getLogger(f"{__name__}.{cfg.name or 'unnamed'}")
        logger.setLevel(cfg.log_level_value)
        collection = cls(
            cfg.name, emitter=emitter, features=features, recorder=recorder, logger=logger
        )
        if cfg.all_features:
            collection.add_all_features()
        else:
            collection.add_feature(list(cfg.features))
        return collection

    # Properties

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def items(self) -> tuple[Any, ...]:
        return tuple(self._items)

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    def view_names(self) -> tuple[str, ...]:
        return tuple(self._views.keys())

    def feature_names(self) -> tuple[str, ...]:
        return tuple(self._features.keys())

    # Publish/subscribe

    def on(self, event: CollectionEvent | str, handler: Handler) -> "Collection":
        self._emitter.on(event, handler)
        return self

    def once(self, event: CollectionEvent | str, handler: Handler) -> "Collection":
        self._emitter.once(event, handler)
        return self

    def off(self, event: CollectionEvent | str, handler: Handler) -> "Collection":
        self._emitter.off(event, handler)
        return self

    def emit(self, event: CollectionEvent | str, *args: Any) -> bool:
        return self._emitter.emit(event, *args)

    def listeners(self, event: CollectionEvent | str) -> tuple[Handler, ...]:
        return self._emitter.listeners(event)

    # Adding

    def add_at(self, items: Any, index: int | None = None) -> "Collection":
        """
        Add an item, or each element of a list/tuple, at `index`.

        The index advances after every element whether or not its add was
        canceled. An index that is not a valid insertion point appends.
        """

        if items is None:
            return self
        if isinstance(items, (list, tuple)):
            for item in list(items):
                begin_mutation(self, MutationKind.ADD, item, index)
                if isinstance(index, int) and not isinstance(index, bool):
                    index += 1
            return self

        begin_mutation(self, MutationKind.ADD, items, index)
        return self

    def add_first(self, items: Any) -> "Collection":
        return self.add_at(items, 0)

    def add(self, items: Any) -> "Collection":
        return self.add_at(items, None)

    # Removing

    def remove_at(self, index: int) -> "Collection":
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"index must be an int (type={type(index).__name__})")
        if not 0 <= index < len(self._items):
            self.logger.debug("remove_at(%s) ignored; index out of range (length=%s)", index, len(self._items))
            return self

        begin_mutation(self, MutationKind.REMOVE, self._items[index], index)
        return self

    def remove(self, target: Any) -> "Collection":
        """
        Remove by index (int), by equality (single item) or each element of a list/tuple.

        Elements of a list/tuple are always matched as items, so `remove([3])`
        removes the value 3 while `remove(3)` removes whatever sits at index 3.
        Only `int` targets are indexes; other numbers such as `1.0` are matched
        as items by equality. Missing items and out-of-range indexes are ignored.
        """

        if target is None:
            return self
        if isinstance(target, int) and not isinstance(target, bool):
            return self.remove_at(target)
        if isinstance(target, (list, tuple)):
            for item in list(target):
                self._remove_item(item)
            return self

        self._remove_item(target)
        return self

    def remove_first(self) -> "Collection":
        return self.remove_at(0)

    def remove_last(self) -> "Collection":
        return self.remove_at(len(self._items) - 1)

    def remove_range(self, start: int, length: int) -> "Collection":
        # Each pass re-reads the slot at `start`; a canceled removal is retried
        # on the next pass instead of moving on to the following item.
        if length > 0:
            for _ in range(length):
                self.remove_at(start)
        return self

    def flush(self) -> "Collection":
        """Remove every item from the end, then publish `flush` exactly once."""

        self.logger.debug("flush (name=%s, length=%s)", self._name or "<unnamed>", len(self._items))
        if not self._items:
            self.emit(CollectionEvent.FLUSH, self)
            return self

        flushed = False

        def on_empty(collection: "Collection") -> None:
            nonlocal flushed
            flushed = True
            self.emit(CollectionEvent.FLUSH, self)

        self._emitter.once(CollectionEvent.EMPTY, on_empty)
        try:
            for index in range(len(self._items) - 1, -1, -1):
                if index < len(self._items):
                    self.remove_at(index)
        finally:
            if not flushed:
                self._emitter.off(CollectionEvent.EMPTY, on_empty)

        if not flushed:
            self.logger.debug("flush finished with %s item(s) retained", len(self._items))
            self.emit(CollectionEvent.FLUSH, self)
        return self

    def _remove_item(self, item: Any) -> None:
        try:
            index = self._items.index(item)
        except ValueError:
            self.logger.debug("remove(%r) ignored; item not found", item)
            return
        begin_mutation(self, MutationKind.REMOVE, item, index)

    # Views and features

    def add_view(self, name: str, fn: View) -> "Collection":
        self.logger.debug('add view "%s"', name)
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("View name must be a non-empty string")
        if not callable(fn):
            raise ConfigurationError(f"View {name} requires a callable (type={type(fn).__name__})")
        name = name.strip()
        self._check_accessor_name(name, kind="View")

        self._features.pop(name, None)
        self._views[name] = fn
        return self

    def add_feature(self, features: str | list[str] | tuple[str, ...] | None) -> "Collection":
        if features is None:
            return self
        names = [features] if isinstance(features, str) else list(features)
        for name in names:
            self._add_one_feature(name)
        return self

    def add_all_features(self) -> "Collection":
        for name in self._feature_registry.available():
            self._add_one_feature(name)
        return self

    def _add_one_feature(self, name: str) -> None:
        self.logger.debug("add feature %s", name)
        feature = self._feature_registry.get(name)
        self._check_accessor_name(feature.name, kind="Feature")

        self._views.pop(feature.name, None)
        self._features[feature.name] = feature.bind(lambda: self.items)

    def _check_accessor_name(self, name: str, *, kind: str) -> None:
        if not name.isidentifier() or keyword.iskeyword(name):
            raise ConfigurationError(f"{kind} name must be a valid identifier (got {name!r})")
        if name.startswith("_") or hasattr(type(self), name) or name in self.__dict__:
            raise ConfigurationError(f"{kind} name {name!r} would shadow a Collection attribute")

    def __getattr__(self, name: str) -> Any:
        state = self.__dict__
        views = state.get("_views")
        if views is not None and name in views:
            return views[name](self)
        features = state.get("_features")
        if features is not None and name in features:
            return features[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        state = self.__dict__
        if name in state.get("_views", ()) or name in state.get("_features", ()):
            raise AttributeError(f"{name} is a read-only accessor of this collection")
        object.__setattr__(self, name, value)

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *self._views, *self._features})

    # Python protocols

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __repr__(self) -> str:
        label = f"{self._name!r}, " if self._name else ""
        return f"Collection({label}items={self._items!r})"


__all__ = ["Collection", "View"]
