"""
Insertion-ordered set with front pruning.

An AgeSet keeps values in the order they were pushed and answers
membership queries in constant time. Values can only leave from the front
(oldest first), which is what a sliding recency window needs.
"""

from collections import Counter, deque
from typing import Callable, Generic, Hashable, Iterator, TypeVar

T = TypeVar("T", bound=Hashable)


class AgeSet(Generic[T]):
    """
    FIFO of values plus a membership index over the same values.

    The index counts occurrences, so a value pushed twice stays a member
    until both copies have been pruned.
    """

    def __init__(self) -> None:
        self._fifo: deque[T] = deque()
        self._index: Counter = Counter()

    def push(self, value: T) -> None:
        """Append a value at the back (newest end)."""
        self._fifo.append(value)
        self._index[value] += 1

    def contains(self, value: T) -> bool:
        return self._index[value] > 0

    def __contains__(self, value: object) -> bool:
        return self.contains(value)  # type: ignore[arg-type]

    def prune(self, kill: Callable[[T], bool]) -> int:
        """
        Remove values from the front while ``kill`` holds.

        Stops at the first value for which ``kill`` is false; values behind
        it are not inspected even if they would match.

        Returns:
            Number of values removed
        """
        removed = 0
        while self._fifo and kill(self._fifo[0]):
            value = self._fifo.popleft()
            self._index[value] -= 1
            if self._index[value] <= 0:
                del self._index[value]
            removed += 1
        return removed

    def clear(self) -> None:
        self._fifo.clear()
        self._index.clear()

    def __len__(self) -> int:
        return len(self._fifo)

    def __iter__(self) -> Iterator[T]:
        return iter(self._fifo)

    def __repr__(self) -> str:
        return f"AgeSet({list(self._fifo)!r})"
