"""
Ordering policies for admitting and picking ready processes.

Each key function returns the full comparison tuple for a record. The last
field is always a unique tie-break (pid for arrival order, arrival-order
position otherwise), so two records never compare equal.
"""

from __future__ import annotations

import heapq
from collections import deque
from typing import Callable, Deque, List, Tuple

from .models import Process, ProcessRecord

KeyFunc = Callable[[ProcessRecord], Tuple[int, ...]]


def arrival_key(p: Process) -> Tuple[int, int]:
    """Arrival time, then pid."""
    return (p.arrival_time, p.pid)


def shortest_burst_key(rec: ProcessRecord) -> Tuple[int, int]:
    """Burst time, then arrival-order position."""
    return (rec.burst_time, rec.position)


def shortest_remaining_key(rec: ProcessRecord) -> Tuple[int, int]:
    """Remaining time at the moment of insertion, then arrival-order position."""
    return (rec.remaining_time, rec.position)


def priority_key(rec: ProcessRecord) -> Tuple[int, int, int]:
    """Priority (lower is more urgent), then arrival time, then position."""
    return (rec.priority, rec.arrival_time, rec.position)


class ReadyHeap:
    """
    Min-heap of ready records ordered by ``key``.

    The key is evaluated when a record is pushed. A record whose key fields
    change while it is queued must be popped and pushed again.
    """

    def __init__(self, key: KeyFunc) -> None:
        self._key = key
        self._heap: List[Tuple[Tuple[int, ...], int, ProcessRecord]] = []

    def push(self, rec: ProcessRecord) -> None:
        # position keeps the entry comparable without ever comparing records
        heapq.heappush(self._heap, (self._key(rec), rec.position, rec))

    def pop(self) -> ProcessRecord:
        return heapq.heappop(self._heap)[2]

    def __bool__(self) -> bool:
        return bool(self._heap)


class ReadyQueue:
    """FIFO ready queue: records leave in the order they were added."""

    def __init__(self) -> None:
        self._queue: Deque[ProcessRecord] = deque()

    def push(self, rec: ProcessRecord) -> None:
        self._queue.append(rec)

    def pop(self) -> ProcessRecord:
        return self._queue.popleft()

    def __bool__(self) -> bool:
        return bool(self._queue)
