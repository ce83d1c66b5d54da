from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Iterable, List, Optional, TypeVar

from .errors import PoolEmptyError, PoolNotEnoughElementsError, ValidationError

if TYPE_CHECKING:
    from .rng import RngBase


T = TypeVar("T")


class Pool(Generic[T]):
    """Draw-without-replacement bag of entries.

    Entries are copied on assignment, so the caller's list is never mutated.
    """

    def __init__(self, entries: Iterable[T] = (), rng: Optional["RngBase"] = None) -> None:
        if rng is None:
            from .rng import Rng

            rng = Rng()
        self.rng = rng
        self._entries: List[T] = list(entries)

    @property
    def entries(self) -> List[T]:
        return self._entries

    @entries.setter
    def entries(self, entries: Iterable[T]) -> None:
        self._entries = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, entry: T) -> None:
        self._entries.append(entry)

    def empty(self) -> "Pool[T]":
        self._entries = []
        return self

    def is_empty(self) -> bool:
        return not self._entries

    def draw(self) -> T:
        if not self._entries:
            raise PoolEmptyError("No more elements left to draw from in pool.")
        if len(self._entries) == 1:
            return self._entries.pop(0)
        return self._entries.pop(self.rng.rand_int(0, len(self._entries) - 1))

    def draw_many(self, n: int) -> List[T]:
        if n < 0:
            raise ValidationError(f"Cannot draw < 0 elements from pool, got {n}")
        if not self._entries and n > 0:
            raise PoolEmptyError("No more elements left to draw from in pool.")
        if len(self._entries) < n:
            raise PoolNotEnoughElementsError(
                f"Tried to draw {n} elements from pool with only {len(self._entries)} entries."
            )
        return [self._entries.pop(self.rng.rand_int(0, len(self._entries) - 1)) for _ in range(n)]
