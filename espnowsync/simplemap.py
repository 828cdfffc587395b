"""A small map that keeps its keys ordered by a comparison function."""

from __future__ import annotations

from typing import Any, Callable, Optional

Compare = Callable[[Any, Any], int]


def _natural_compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class SortedMap:
    """Map with keys kept in ascending order of ``compare``.

    ``compare(a, b)`` returns a negative number, zero or a positive number
    when ``a`` is smaller than, equal to or larger than ``b``. While the map
    is locked, existing keys may be updated but no keys are added or removed
    by key.
    """

    def __init__(self, compare: Optional[Compare] = None) -> None:
        self._compare = compare or _natural_compare
        self._keys: list = []
        self._values: list = []
        self._locked = False

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: Any) -> bool:
        return self._find(key) is not None

    def clear(self) -> None:
        """Remove every entry and unlock the map."""
        self._locked = False
        self._keys.clear()
        self._values.clear()

    def put(self, key: Any, value: Any) -> None:
        """Store ``value`` under ``key``; new keys are ignored while locked."""
        index = self._find(key)
        if index is not None:
            self._keys[index] = key
            self._values[index] = value
            return
        if self._locked:
            return
        position = next(
            (i for i, existing in enumerate(self._keys) if self._compare(existing, key) > 0),
            len(self._keys),
        )
        self._keys.insert(position, key)
        self._values.insert(position, value)

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` if it is absent."""
        index = self._find(key)
        return default if index is None else self._values[index]

    def remove_key(self, key: Any) -> bool:
        """Remove ``key``; return whether something was removed."""
        if self._locked:
            return False
        index = self._find(key)
        if index is None:
            return False
        del self._keys[index]
        del self._values[index]
        return True

    def remove_at(self, index: int) -> None:
        """Remove the entry at position ``index``, locked or not."""
        self._check_index(index)
        del self._keys[index]
        del self._values[index]

    def key_at(self, index: int) -> Any:
        """Key at position ``index``."""
        self._check_index(index)
        return self._keys[index]

    def value_at(self, index: int) -> Any:
        """Value at position ``index``."""
        self._check_index(index)
        return self._values[index]

    def index_of(self, key: Any) -> int:
        """Position of ``key``; raises ``KeyError`` if absent."""
        index = self._find(key)
        if index is None:
            raise KeyError(key)
        return index

    def items(self) -> list[tuple[Any, Any]]:
        """Snapshot of the entries in key order."""
        return list(zip(self._keys, self._values))

    def lock(self) -> None:
        """Stop keys from being added or removed by key."""
        self._locked = True

    def unlock(self) -> None:
        """Allow keys to be added and removed again."""
        self._locked = False

    def is_locked(self) -> bool:
        """Whether the map is locked."""
        return self._locked

    def _find(self, key: Any) -> Optional[int]:
        return next(
            (i for i, existing in enumerate(self._keys) if self._compare(existing, key) == 0),
            None,
        )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._keys):
            raise IndexError(f"index {index} out of range")