"""SelectionSet: ordered multi-select with select-all/deselect-all pairing."""

from typing import Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


class SelectionSet(Generic[T]):
    """Insertion-ordered set of selected items.

    When allowed is given, items outside it can never be selected (used for
    catalogs with display-only placeholder entries).
    """

    def __init__(
        self,
        items: Iterable[T] = (),
        allowed: Iterable[T] | None = None,
    ) -> None:
        self._allowed: frozenset[T] | None = (
            frozenset(allowed) if allowed is not None else None
        )
        # dict keeps insertion order and rejects duplicates
        self._items: dict[T, None] = {}
        for item in items:
            self.add(item)

    @classmethod
    def seeded(cls, committed: Iterable[T], allowed: Iterable[T] | None = None) -> "SelectionSet[T]":
        """Temporary edit buffer seeded from a committed selection."""
        return cls(committed, allowed)

    def is_allowed(self, item: T) -> bool:
        return self._allowed is None or item in self._allowed

    def add(self, item: T) -> bool:
        """Select item. Returns False when it is not selectable."""
        if not self.is_allowed(item):
            return False
        self._items[item] = None
        return True

    def discard(self, item: T) -> None:
        self._items.pop(item, None)

    def toggle(self, item: T) -> bool:
        """Flip membership. Returns True if item is selected afterwards."""
        if item in self._items:
            del self._items[item]
            return False
        return self.add(item)

    def select_all(self, universe: Iterable[T]) -> None:
        """Select every allowed item of universe, or clear if all are already selected."""
        candidates = [item for item in universe if self.is_allowed(item)]
        if self.is_all_selected(candidates):
            self.clear()
            return
        for item in candidates:
            self._items[item] = None

    def is_all_selected(self, universe: Iterable[T]) -> bool:
        candidates = [item for item in universe if self.is_allowed(item)]
        return bool(candidates) and all(item in self._items for item in candidates)

    def clear(self) -> None:
        self._items.clear()

    def contains(self, item: T) -> bool:
        return item in self._items

    def values(self) -> list[T]:
        return list(self._items)

    def copy(self) -> "SelectionSet[T]":
        return SelectionSet(self._items, self._allowed)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"SelectionSet({self.values()!r})"
