from __future__ import annotations

from typing import Iterable, List, Optional

from .models import IDLE, ScheduledSlice, Segment


class Timeline:
    """
    Append-only record of who held the CPU, as (occupant, end_time) segments.
    """

    def __init__(self) -> None:
        self._segments: List[Segment] = []

    def record(self, occupant: Optional[int], end_time: int) -> None:
        if end_time < self.end_time:
            raise ValueError(f"Segment ending at {end_time} precedes previous end {self.end_time}")
        self._segments.append(Segment(occupant=occupant, end_time=end_time))

    def record_idle(self, end_time: int) -> None:
        self.record(IDLE, end_time)

    @property
    def end_time(self) -> int:
        return self._segments[-1].end_time if self._segments else 0

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)


def merge_segments(segments: Iterable[Segment]) -> List[Segment]:
    """
    Collapse consecutive segments with the same occupant into one, keeping
    the later end time. Merging an already merged list returns it unchanged.
    """
    merged: List[Segment] = []
    for seg in segments:
        if merged and merged[-1].occupant == seg.occupant:
            merged[-1] = Segment(occupant=seg.occupant, end_time=seg.end_time)
        else:
            merged.append(seg)
    return merged


def to_slices(segments: Iterable[Segment]) -> List[ScheduledSlice]:
    """
    Give every segment an explicit start: the previous segment's end, or 0.
    Zero-length segments are dropped.
    """
    slices: List[ScheduledSlice] = []
    start = 0
    for seg in segments:
        if seg.end_time > start:
            slices.append(ScheduledSlice(occupant=seg.occupant, start_time=start, end_time=seg.end_time))
        start = seg.end_time
    return slices


def busy_time(segments: Iterable[Segment]) -> int:
    return sum(sl.end_time - sl.start_time for sl in to_slices(segments) if not sl.is_idle)
