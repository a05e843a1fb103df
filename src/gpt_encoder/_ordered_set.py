"""Insertion-ordered set used to collect adjacent symbol pairs."""

from collections.abc import Iterable, Iterator

from .types import Pair


class OrderedPairSet:
    """
    Set of pairs that remembers first-insertion order.

    Backed by a list for order and a set for O(1) membership checks. The merge
    tie-break scans pairs in reverse insertion order, so iteration order here
    is part of the encoding result.
    """

    __slots__ = ("_items", "_seen")

    def __init__(self, pairs: Iterable[Pair] = ()) -> None:
        self._items: list[Pair] = []
        self._seen: set[Pair] = set()
        for pair in pairs:
            self.add(pair)

    def add(self, pair: Pair) -> None:
        """Append ``pair`` unless it is already present."""
        if pair not in self._seen:
            self._seen.add(pair)
            self._items.append(pair)

    def __contains__(self, pair: object) -> bool:
        return pair in self._seen

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._items)

    def __reversed__(self) -> Iterator[Pair]:
        return reversed(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._items!r})"
