"""Generic collection/array helpers exposed to collections as "features".

Every function takes the sequence as its first argument. Iteratee arguments
accept a callable, a key/attribute name (property shorthand) or None (identity).
"""

from __future__ import annotations

import itertools
import random
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Callable

_MISSING = object()


def _property(name: str) -> Callable[[Any], Any]:
    def getter(item: Any) -> Any:
        if isinstance(item, Mapping):
            return item.get(name)
        return getattr(item, name, None)

    return getter


def _iteratee(fn: Callable[..., Any] | str | None) -> Callable[[Any], Any]:
    if fn is None:
        return lambda item: item
    if isinstance(fn, str):
        return _property(fn)
    if not callable(fn):
        raise TypeError(f"iteratee must be callable, a property name or None (type={type(fn).__name__})")
    return fn


def _matches(properties: Mapping[str, Any]) -> Callable[[Any], bool]:
    getters = {key: _property(key) for key in properties}

    def predicate(item: Any) -> bool:
        return all(getters[key](item) == value for key, value in properties.items())

    return predicate


def _unique(values: Iterable[Any]) -> list[Any]:
    # Items may be unhashable (dicts), so membership is by equality.
    out: list[Any] = []
    for value in values:
        if value not in out:
            out.append(value)
    return out


# Collection functions


def each(sequence: Sequence[Any], iteratee: Callable[[Any], Any]) -> Sequence[Any]:
    fn = _iteratee(iteratee)
    for item in sequence:
        fn(item)
    return sequence


def map_(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> list[Any]:
    fn = _iteratee(iteratee)
    return [fn(item) for item in sequence]


def reduce(
    sequence: Sequence[Any],
    iteratee: Callable[[Any, Any], Any],
    memo: Any = _MISSING,
) -> Any:
    values = list(sequence)
    if memo is _MISSING:
        if not values:
            raise TypeError("reduce of empty sequence with no initial value")
        memo, values = values[0], values[1:]
    for item in values:
        memo = iteratee(memo, item)
    return memo


def reduce_right(
    sequence: Sequence[Any],
    iteratee: Callable[[Any, Any], Any],
    memo: Any = _MISSING,
) -> Any:
    return reduce(list(reversed(list(sequence))), iteratee, memo)


def find(sequence: Sequence[Any], predicate: Callable[[Any], Any] | str | None = None) -> Any:
    fn = _iteratee(predicate)
    for item in sequence:
        if fn(item):
            return item
    return None


def filter_(sequence: Sequence[Any], predicate: Callable[[Any], Any] | str | None = None) -> list[Any]:
    fn = _iteratee(predicate)
    return [item for item in sequence if fn(item)]


def where(sequence: Sequence[Any], properties: Mapping[str, Any]) -> list[Any]:
    return filter_(sequence, _matches(properties))


def find_where(sequence: Sequence[Any], properties: Mapping[str, Any]) -> Any:
    return find(sequence, _matches(properties))


def reject(sequence: Sequence[Any], predicate: Callable[[Any], Any] | str | None = None) -> list[Any]:
    fn = _iteratee(predicate)
    return [item for item in sequence if not fn(item)]


def every(sequence: Sequence[Any], predicate: Callable[[Any], Any] | str | None = None) -> bool:
    fn = _iteratee(predicate)
    return all(fn(item) for item in sequence)


def some(sequence: Sequence[Any], predicate: Callable[[Any], Any] | str | None = None) -> bool:
    fn = _iteratee(predicate)
    return any(fn(item) for item in sequence)


def contains(sequence: Sequence[Any], value: Any) -> bool:
    return value in sequence


def invoke(sequence: Sequence[Any], method: str | Callable[..., Any], *args: Any, **kwargs: Any) -> list[Any]:
    if callable(method):
        return [method(item, *args, **kwargs) for item in sequence]
    return [getattr(item, method)(*args, **kwargs) for item in sequence]


def pluck(sequence: Sequence[Any], key: str) -> list[Any]:
    return map_(sequence, _property(key))


def max_(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> Any:
    if not sequence:
        return None
    return max(sequence, key=_iteratee(iteratee))


def min_(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> Any:
    if not sequence:
        return None
    return min(sequence, key=_iteratee(iteratee))


def sort_by(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> list[Any]:
    return sorted(sequence, key=_iteratee(iteratee))


def group_by(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> dict[Any, list[Any]]:
    fn = _iteratee(iteratee)
    groups: dict[Any, list[Any]] = {}
    for item in sequence:
        groups.setdefault(fn(item), []).append(item)
    return groups


def index_by(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> dict[Any, Any]:
    fn = _iteratee(iteratee)
    return {fn(item): item for item in sequence}


def count_by(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> dict[Any, int]:
    return {key: len(values) for key, values in group_by(sequence, iteratee).items()}


def shuffle(sequence: Sequence[Any], rng: random.Random | None = None) -> list[Any]:
    out = list(sequence)
    (rng or random.Random()).shuffle(out)
    return out


def sample(sequence: Sequence[Any], n: int | None = None, rng: random.Random | None = None) -> Any:
    generator = rng or random.Random()
    if n is None:
        if not sequence:
            return None
        return generator.choice(list(sequence))
    return generator.sample(list(sequence), min(max(n, 0), len(sequence)))


def to_array(sequence: Iterable[Any]) -> list[Any]:
    return list(sequence)


def size(sequence: Sequence[Any]) -> int:
    return len(sequence)


def partition(
    sequence: Sequence[Any], predicate: Callable[[Any], Any] | str | None = None
) -> tuple[list[Any], list[Any]]:
    fn = _iteratee(predicate)
    passed: list[Any] = []
    failed: list[Any] = []
    for item in sequence:
        (passed if fn(item) else failed).append(item)
    return passed, failed


# Array functions


def first(sequence: Sequence[Any], n: int | None = None) -> Any:
    if n is None:
        return sequence[0] if sequence else None
    return list(sequence[: max(n, 0)])


def initial(sequence: Sequence[Any], n: int = 1) -> list[Any]:
    return list(sequence[: max(len(sequence) - n, 0)])


def last(sequence: Sequence[Any], n: int | None = None) -> Any:
    if n is None:
        return sequence[-1] if sequence else None
    if n <= 0:
        return []
    return list(sequence[-n:])


def rest(sequence: Sequence[Any], n: int = 1) -> list[Any]:
    return list(sequence[n:])


def compact(sequence: Sequence[Any]) -> list[Any]:
    return [item for item in sequence if item]


def flatten(sequence: Sequence[Any], shallow: bool = False) -> list[Any]:
    out: list[Any] = []
    for item in sequence:
        if isinstance(item, (list, tuple)):
            if shallow:
                out.extend(item)
            else:
                out.extend(flatten(item))
        else:
            out.append(item)
    return out


def without(sequence: Sequence[Any], *values: Any) -> list[Any]:
    return [item for item in sequence if item not in values]


def union(sequence: Sequence[Any], *others: Sequence[Any]) -> list[Any]:
    return _unique(itertools.chain(sequence, *others))


def intersection(sequence: Sequence[Any], *others: Sequence[Any]) -> list[Any]:
    return [item for item in _unique(sequence) if all(item in other for other in others)]


def difference(sequence: Sequence[Any], *others: Sequence[Any]) -> list[Any]:
    return [item for item in sequence if not any(item in other for other in others)]


def uniq(sequence: Sequence[Any], iteratee: Callable[[Any], Any] | str | None = None) -> list[Any]:
    fn = _iteratee(iteratee)
    seen: list[Any] = []
    out: list[Any] = []
    for item in sequence:
        key = fn(item)
        if key not in seen:
            seen.append(key)
            out.append(item)
    return out


def zip_(sequence: Sequence[Any], *others: Sequence[Any]) -> list[tuple[Any, ...]]:
    return list(itertools.zip_longest(sequence, *others))


def index_of(sequence: Sequence[Any], value: Any) -> int:
    for index, item in enumerate(sequence):
        if item == value:
            return index
    return -1


def last_index_of(sequence: Sequence[Any], value: Any) -> int:
    for index in range(len(sequence) - 1, -1, -1):
        if sequence[index] == value:
            return index
    return -1


FEATURE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "each": each,
    "map": map_,
    "reduce": reduce,
    "reduce_right": reduce_right,
    "find": find,
    "filter": filter_,
    "where": where,
    "find_where": find_where,
    "reject": reject,
    "every": every,
    "some": some,
    "contains": contains,
    "invoke": invoke,
    "pluck": pluck,
    "max": max_,
    "min": min_,
    "sort_by": sort_by,
    "group_by": group_by,
    "index_by": index_by,
    "count_by": count_by,
    "shuffle": shuffle,
    "sample": sample,
    "to_array": to_array,
    "size": size,
    "partition": partition,
    "first": first,
    "initial": initial,
    "last": last,
    "rest": rest,
    "compact": compact,
    "flatten": flatten,
    "without": without,
    "union": union,
    "intersection": intersection,
    "difference": difference,
    "uniq": uniq,
    "zip": zip_,
    "index_of": index_of,
    "last_index_of": last_index_of,
}
