from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

from sumgen.invariants import never

T = TypeVar("T")


def sort_once(
    values: Iterable[T],
    *,
    source: str,
    key: Callable[[T], Any] | None = None,
) -> list[T]:
    """Return values in deterministic order.

    Keys must be distinct: with a tie the result would depend on the order
    the caller happened to produce. `source` names the call site in the
    violation report.
    """
    items = list(values)
    keyed = sorted(
        ((key(item) if key is not None else item, index) for index, item in enumerate(items)),
        key=lambda pair: pair[0],
    )
    for (previous, _), (current, _) in zip(keyed, keyed[1:]):
        if previous == current:
            never("order contract violated: duplicate key", source=source, key=repr(current))
    return [items[index] for _, index in keyed]
