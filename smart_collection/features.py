from __future__ import annotations

import difflib
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from smart_collection.errors import UnknownFeatureError
from smart_collection.utilities import FEATURE_FUNCTIONS


@dataclass(frozen=True)
class Feature:
    """A named utility with the fixed signature `fn(sequence, *args, **kwargs)`."""

    name: str
    fn: Callable[..., Any]
    doc: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise TypeError("Feature.name must be a non-empty string")
        object.__setattr__(self, "name", self.name.strip())
        if not self.name.isidentifier():
            raise ValueError(f"Feature.name must be a valid identifier (got {self.name!r})")
        if not callable(self.fn):
            raise TypeError(f"Feature.fn must be callable (type={type(self.fn).__name__})")

        if self.doc is None:
            doc = inspect.getdoc(self.fn)
            if doc:
                object.__setattr__(self, "doc", doc.strip().splitlines()[0])
        if self.source is None:
            module = getattr(self.fn, "__module__", None) or "<unknown_module>"
            qualname = getattr(self.fn, "__qualname__", None) or getattr(self.fn, "__name__", "<callable>")
            object.__setattr__(self, "source", f"{module}.{qualname}")

    def bind(self, sequence_provider: Callable[[], Any]) -> Callable[..., Any]:
        """Return a callable that forwards `(sequence_provider(), *args)` to the feature."""

        fn = self.fn

        def forward(*args: Any, **kwargs: Any) -> Any:
            return fn(sequence_provider(), *args, **kwargs)

        forward.__name__ = self.name
        forward.__qualname__ = self.name
        forward.__doc__ = self.doc
        return forward


@dataclass(frozen=True)
class FeatureRegistry:
    _by_name: dict[str, Feature]

    @classmethod
    def from_features(cls, features: Iterable[Feature]) -> "FeatureRegistry":
        entries: dict[str, Feature] = {}
        for feature in features:
            if feature.name in entries:
                raise ValueError(f"Duplicate feature name: {feature.name}")
            entries[feature.name] = feature
        return cls(_by_name=entries)

    @classmethod
    def from_functions(cls, functions: Mapping[str, Callable[..., Any]]) -> "FeatureRegistry":
        return cls.from_features(Feature(name=name, fn=fn) for name, fn in functions.items())

    def available(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_name.keys()))

    def describe(self) -> tuple[dict[str, Any], ...]:
        return tuple(
            {"name": feature.name, "doc": feature.doc, "source": feature.source}
            for feature in sorted(self._by_name.values(), key=lambda f: f.name)
        )

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip() in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def get(self, name: str) -> Feature:
        if not isinstance(name, str) or not name.strip():
            raise TypeError("feature name must be a non-empty string")
        feature = self._by_name.get(name.strip())
        if feature is None:
            raise UnknownFeatureError(name, suggestions=self.suggest(name))
        return feature

    def suggest(self, name: str, *, limit: int = 3) -> tuple[str, ...]:
        key = (name or "").strip()
        if not key:
            return ()
        return tuple(difflib.get_close_matches(key, list(self.available()), n=limit))

    def extend(self, features: Iterable[Feature]) -> "FeatureRegistry":
        return FeatureRegistry.from_features([*self._by_name.values(), *features])


_DEFAULT_REGISTRY: FeatureRegistry | None = None


def default_feature_registry() -> FeatureRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = FeatureRegistry.from_functions(FEATURE_FUNCTIONS)
    return _DEFAULT_REGISTRY


__all__ = ["Feature", "FeatureRegistry", "default_feature_registry"]
