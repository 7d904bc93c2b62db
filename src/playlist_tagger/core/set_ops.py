"""Keyed set helpers shared by the reconciliation steps."""

from operator import attrgetter
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_by_id = attrgetter("id")


def difference_by(
    items: Iterable[T],
    others: Iterable[Any],
    key: Optional[Callable[[Any], Hashable]] = None,
) -> List[T]:
    """Get the elements of ``items`` whose key does not occur in ``others``.

    Args:
        items: Elements to filter, order is preserved
        others: Elements whose keys are excluded
        key: Key function applied to both sides (identity when omitted)

    Returns:
        List of the remaining elements of ``items``
    """
    if key is None:
        excluded = set(others)
        return [item for item in items if item not in excluded]

    excluded = {key(other) for other in others}
    return [item for item in items if key(item) not in excluded]


def difference_by_id(items: Iterable[T], others: Iterable[Any]) -> List[T]:
    """Get the elements of ``items`` whose ``id`` is not found in ``others``."""
    return difference_by(items, others, key=_by_id)


def key_by_id(items: Iterable[T]) -> Dict[str, T]:
    """Index elements by their ``id`` attribute (last one wins)."""
    return {_by_id(item): item for item in items}


def unique(items: Iterable[T]) -> List[T]:
    """De-duplicate hashable elements, keeping the first occurrence."""
    return list(dict.fromkeys(items))


def unique_by_id(items: Iterable[T]) -> List[T]:
    """De-duplicate elements by ``id``, keeping the first occurrence."""
    seen: Dict[str, T] = {}
    for item in items:
        seen.setdefault(_by_id(item), item)
    return list(seen.values())
