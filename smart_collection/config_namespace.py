"""Strict configuration namespace with consumed-keys enforcement."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable

from smart_collection.errors import ConfigurationError

_MISSING = object()


def _join_path(parent: str, key: str) -> str:
    if not parent:
        return key
    return f"{parent}.{key}"


@dataclass
class ConfigNamespace:
    data: Mapping[str, Any]
    path: str
    _consumed: set[str] = field(default_factory=set, init=False, repr=False)
    _children: dict[str, "ConfigNamespace"] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def empty(cls, *, path: str) -> "ConfigNamespace":
        return cls({}, path=path)

    def consumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._consumed))

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(str(k) for k in self.data.keys() if k not in self._consumed))

    def assert_consumed(self) -> None:
        unknown = list(self.unconsumed_keys())
        if unknown:
            path = self.path or "<root>"
            consumed = ", ".join(self.consumed_keys()) or "<none>"
            raise ConfigurationError(
                f"Unknown config keys under {path}: {', '.join(unknown)} (consumed: {consumed})"
            )
        for child in self._children.values():
            child.assert_consumed()

    def _key(self, key: str) -> str:
        if not isinstance(key, str) or not key.strip():
            raise TypeError("ConfigNamespace key must be a non-empty string")
        return key.strip()

    def _get_raw(self, key: str, *, default: Any) -> Any:
        normalized = self._key(key)
        if normalized in self._children:
            raise ConfigurationError(
                f"{_join_path(self.path, normalized)} already accessed as a nested namespace"
            )
        self._consumed.add(normalized)
        if normalized not in self.data:
            if default is _MISSING:
                raise ConfigurationError(
                    f"Missing required config key: {_join_path(self.path, normalized)}"
                )
            return default
        return self.data.get(normalized)

    def namespace(self, key: str, *, required: bool = True) -> "ConfigNamespace":
        normalized = self._key(key)
        if normalized in self._children:
            return self._children[normalized]

        raw = self.data.get(normalized)
        self._consumed.add(normalized)
        child_path = _join_path(self.path, normalized)
        if raw is None:
            if required:
                raise ConfigurationError(f"Missing required config namespace: {child_path}")
            child = ConfigNamespace.empty(path=child_path)
        elif not isinstance(raw, Mapping):
            raise ConfigurationError(f"{child_path} must be a mapping (type={type(raw).__name__})")
        else:
            child = ConfigNamespace(dict(raw), path=child_path)
        self._children[normalized] = child
        return child

    def get_bool(self, key: str, *, default: bool | object = _MISSING) -> bool:
        value = self._get_raw(key, default=default)
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"{_join_path(self.path, self._key(key))} must be a boolean (type={type(value).__name__})"
            )
        return value

    def get_str(
        self,
        key: str,
        *,
        default: str | None | object = _MISSING,
        choices: Iterable[str] | None = None,
    ) -> str | None:
        raw = self._get_raw(key, default=default)
        if raw is None:
            return None
        label = _join_path(self.path, self._key(key))
        if not isinstance(raw, str):
            raise ConfigurationError(f"{label} must be a string (type={type(raw).__name__})")
        value = raw.strip()
        if not value:
            raise ConfigurationError(f"{label} cannot be empty")
        if choices is not None:
            allowed = tuple(str(item) for item in choices)
            if value not in allowed:
                raise ConfigurationError(
                    f"{label} must be one of: {', '.join(allowed)} (got {value!r})"
                )
        return value

    def get_list_str(
        self,
        key: str,
        *,
        default: list[str] | tuple[str, ...] | object = _MISSING,
    ) -> list[str]:
        raw = self._get_raw(key, default=default)
        label = _join_path(self.path, self._key(key))
        if raw is None:
            return []
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, (list, tuple)):
            raise ConfigurationError(f"{label} must be a list[str] (type={type(raw).__name__})")

        items: list[str] = []
        for idx, item in enumerate(raw):
            if not isinstance(item, str):
                raise ConfigurationError(
                    f"{label}[{idx}] must be a string (type={type(item).__name__})"
                )
            trimmed = item.strip()
            if not trimmed:
                raise ConfigurationError(f"{label}[{idx}] cannot be empty")
            items.append(trimmed)
        return items


__all__ = ["ConfigNamespace"]
