"""
Detection of degenerate uniform sources inside rejection loops.

Rejection samplers (poisson, gamma) keep drawing until a condition holds.
Fed a constant or short-cycle source they would spin forever; the guard
keeps the most recent draws and fails fast once they stop looking random.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Generic, Optional, Sequence, TypeVar

from .config import LOOP_GUARD_CAPACITY_LIMIT
from .errors import LoopDetectedError, ValidationError


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MESSAGE = "Loop detected in input data. Randomness source not random?"


class LoopGuard(Generic[T]):
    """Fixed-capacity ring of recent values with repeat detection.

    Once the window is full, every push checks that the retained values are
    not all identical and that no run longer than ``min_sequence_length``
    appears twice in the window.
    """

    def __init__(
        self,
        capacity: int = 10,
        min_sequence_length: int = 2,
        message: Optional[str] = None,
    ) -> None:
        if capacity > LOOP_GUARD_CAPACITY_LIMIT:
            raise ValidationError(
                f"Cannot detect loops for more than {LOOP_GUARD_CAPACITY_LIMIT} elements, got capacity {capacity}"
            )
        if capacity < 1:
            raise ValidationError(f"Expected capacity to be positive, got {capacity}")
        self.capacity = capacity
        self.min_sequence_length = min_sequence_length
        self.message = message or DEFAULT_MESSAGE
        self._window: Deque[T] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._window)

    @property
    def values(self) -> list[T]:
        return list(self._window)

    def full(self) -> bool:
        return len(self._window) >= self.capacity

    def push(self, value: T) -> Optional[T]:
        """Add a value, returning the evicted oldest one if the ring was full."""
        evicted = self._window[0] if self.full() else None
        self._window.append(value)
        self.detect_loop()
        return evicted

    def all_same(self) -> bool:
        if not self._window:
            return True
        first = self._window[0]
        return all(v == first for v in self._window)

    def detect_loop(self, message: Optional[str] = None) -> None:
        if not self.full():
            return
        if self.all_same() or has_repeating_sequence(self.values, self.min_sequence_length):
            msg = message or self.message
            logger.warning("%s Window: %s", msg, self.values)
            raise LoopDetectedError(msg)


def has_repeating_sequence(values: Sequence[T], min_length: int) -> bool:
    """True if some run longer than ``min_length`` occurs twice in ``values``.

    The two occurrences may overlap.
    """
    size = len(values)
    for i in range(size):
        for j in range(i + 1, size):
            k = 0
            while j + k < size and values[i + k] == values[j + k]:
                k += 1
                if k > min_length:
                    return True
    return False
