from __future__ import annotations
from collections import deque
from typing import Optional


class SampleWindow:
    """
    Fixed-capacity ring of the most recent illuminance samples.

    Once `capacity` samples have been pushed the window is warm and stays
    warm: every later average covers exactly the last `capacity` samples.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Window capacity must be at least 1, got {capacity}")
        self._buf: deque[int] = deque(maxlen=capacity)
        self._pushed = 0

    @property
    def capacity(self) -> int:
        return self._buf.maxlen or 0

    @property
    def is_warm(self) -> bool:
        return self._pushed >= self.capacity

    def push(self, sample: int) -> None:
        self._buf.append(sample)
        self._pushed += 1

    def average(self) -> Optional[float]:
        if not self._buf:
            return None
        return sum(self._buf) / float(len(self._buf))

    def samples(self) -> list[int]:
        return list(self._buf)

    def __len__(self) -> int:
        return len(self._buf)
