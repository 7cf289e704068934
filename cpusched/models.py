from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

# Occupant value of a timeline segment during which no process holds the CPU.
IDLE: Optional[int] = None


@dataclass(frozen=True)
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class ProcessRecord:
    """
    Run-scoped copy of a Process plus the outputs the simulation fills in.

    ``position`` is the record's index in arrival order and is the final
    tie-break for every ready-set ordering.
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    position: int
    remaining_time: int = 0
    start_time: Optional[int] = None
    completion_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    waiting_time: Optional[int] = None

    @classmethod
    def from_process(cls, process: Process, position: int) -> "ProcessRecord":
        return cls(
            pid=process.pid,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            priority=process.priority,
            position=position,
            remaining_time=process.burst_time,
        )

    @property
    def finished(self) -> bool:
        return self.remaining_time == 0

    @property
    def response_time(self) -> Optional[int]:
        if self.start_time is None:
            return None
        return self.start_time - self.arrival_time

    def finish(self, time: int) -> None:
        self.completion_time = time
        self.turnaround_time = time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time


@dataclass(frozen=True)
class Segment:
    """
    One entry of the execution timeline: ``occupant`` held the CPU until
    ``end_time``. The segment starts where the previous one ended (or at 0).
    """

    occupant: Optional[int]
    end_time: int

    @property
    def is_idle(self) -> bool:
        return self.occupant is IDLE


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of the Gantt chart with an explicit start time.
    """

    occupant: Optional[int]
    start_time: int
    end_time: int

    @property
    def is_idle(self) -> bool:
        return self.occupant is IDLE

    @property
    def label(self) -> str:
        return "IDLE" if self.is_idle else f"P{self.occupant}"


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessRecord] = field(default_factory=list)
    timeline: List[Segment] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    @property
    def merged_timeline(self) -> List[Segment]:
        from .timeline import merge_segments

        return merge_segments(self.timeline)
