"""Error types raised by `smart_collection`."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Programmer error while configuring a collection (views, features, config files)."""


class UnknownFeatureError(ConfigurationError):
    def __init__(self, name: str, *, suggestions: tuple[str, ...] = ()) -> None:
        self.name = name
        self.suggestions = tuple(suggestions)
        message = f'feature "{name}" not found'
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)})"
        super().__init__(message)


class UnknownEventError(ValueError):
    def __init__(self, name: object, *, suggestions: tuple[str, ...] = ()) -> None:
        self.name = name
        self.suggestions = tuple(suggestions)
        message = f"Unknown collection event: {name!r}"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)})"
        super().__init__(message)


__all__ = ["ConfigurationError", "UnknownEventError", "UnknownFeatureError"]
