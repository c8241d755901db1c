"""Mutation lifecycle recorders (logging hooks for the mutation pipeline)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from smart_collection.mutation import Mutation


class MutationRecorder(Protocol):
    def on_begin(self, mutation: "Mutation") -> None:
        ...

    def on_commit(self, mutation: "Mutation", **details: Any) -> None:
        ...

    def on_cancel(self, mutation: "Mutation") -> None:
        ...

    def on_resume(self, mutation: "Mutation") -> None:
        ...


def _describe(mutation: "Mutation") -> str:
    tokens = [f"kind={mutation.kind.value}", f"item={mutation.item!r}"]
    if mutation.position is not None:
        tokens.append(f"position={mutation.position}")
    collection_name = getattr(mutation.collection, "name", None)
    if isinstance(collection_name, str) and collection_name.strip():
        tokens.append(f"collection={collection_name.strip()}")
    return ", ".join(tokens)


class DefaultMutationRecorder:
    def on_begin(self, mutation: "Mutation") -> None:
        mutation.collection.logger.debug("Mutation pending (%s)", _describe(mutation))

    def on_commit(self, mutation: "Mutation", **details: Any) -> None:
        length = details.get("length")
        if details.get("skipped"):
            mutation.collection.logger.warning(
                "Mutation committed without change; item no longer present (%s)",
                _describe(mutation),
            )
            return
        mutation.collection.logger.debug(
            "Mutation committed (%s, length=%s)", _describe(mutation), length
        )

    def on_cancel(self, mutation: "Mutation") -> None:
        mutation.collection.logger.info("Mutation canceled (%s)", _describe(mutation))

    def on_resume(self, mutation: "Mutation") -> None:
        mutation.collection.logger.info("Mutation resumed (%s)", _describe(mutation))


class NullMutationRecorder:
    def on_begin(self, mutation: "Mutation") -> None:
        return

    def on_commit(self, mutation: "Mutation", **details: Any) -> None:
        return

    def on_cancel(self, mutation: "Mutation") -> None:
        return

    def on_resume(self, mutation: "Mutation") -> None:
        return


def validate_recorder(recorder: Any) -> MutationRecorder:
    required = ("on_begin", "on_commit", "on_cancel", "on_resume")
    for name in required:
        method = getattr(recorder, name, None)
        if method is None or not callable(method):
            raise TypeError(f"Mutation recorder missing required method: {name}")
    return recorder


__all__ = [
    "DefaultMutationRecorder",
    "MutationRecorder",
    "NullMutationRecorder",
    "validate_recorder",
]
