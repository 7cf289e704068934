from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .metrics import compute_system_metrics
from .models import Process, ProcessRecord, ScheduleResult
from .ordering import (
    KeyFunc,
    ReadyHeap,
    ReadyQueue,
    arrival_key,
    priority_key,
    shortest_burst_key,
    shortest_remaining_key,
)
from .timeline import Timeline

logger = logging.getLogger(__name__)


class RunContext:
    """
    Everything one simulation run owns: its own records (sorted by arrival),
    the arrival cursor, the virtual clock and the timeline.

    Nothing here outlives the run, and the input processes are never touched.
    """

    def __init__(self, records: List[ProcessRecord]) -> None:
        self.records = records
        self.timeline = Timeline()
        self.time = 0
        self.completed = 0
        self._cursor = 0

    @classmethod
    def snapshot(cls, processes: Sequence[Process]) -> "RunContext":
        ordered = sorted(processes, key=arrival_key)
        return cls([ProcessRecord.from_process(p, position) for position, p in enumerate(ordered)])

    @property
    def done(self) -> bool:
        return self.completed == len(self.records)

    def admit(self) -> Iterator[ProcessRecord]:
        """Yield every not-yet-admitted record whose arrival is <= now."""
        while self._cursor < len(self.records) and self.records[self._cursor].arrival_time <= self.time:
            rec = self.records[self._cursor]
            self._cursor += 1
            yield rec

    def next_arrival(self) -> Optional[int]:
        if self._cursor < len(self.records):
            return self.records[self._cursor].arrival_time
        return None

    def idle_until(self, time: int) -> None:
        self.time = time
        self.timeline.record_idle(time)

    def idle_tick(self) -> None:
        self.idle_until(self.time + 1)

    def execute(self, rec: ProcessRecord, units: int) -> None:
        """Give ``rec`` the CPU for ``units`` ticks and finalize it if it is done."""
        if rec.start_time is None:
            rec.start_time = self.time
            logger.debug("t=%d: P%d dispatched for the first time", self.time, rec.pid)

        rec.remaining_time -= units
        self.time += units
        self.timeline.record(rec.pid, self.time)

        if rec.finished:
            rec.finish(self.time)
            self.completed += 1
            logger.debug(
                "t=%d: P%d completed (turnaround=%d, waiting=%d)",
                self.time,
                rec.pid,
                rec.turnaround_time,
                rec.waiting_time,
            )

    def result(self, algorithm: str, quantum: Optional[int] = None) -> ScheduleResult:
        result = ScheduleResult(
            algorithm=algorithm,
            quantum=quantum,
            processes=self.records,
            timeline=self.timeline.segments,
        )
        compute_system_metrics(result)
        logger.info("%s finished %d processes at t=%d", algorithm, len(self.records), self.time)
        return result


def _run_non_preemptive(ctx: RunContext, key: KeyFunc) -> None:
    """
    Pick the best ready record by ``key`` each time the CPU frees up and run
    it to completion. An empty ready set jumps the clock to the next arrival.
    """
    ready = ReadyHeap(key)
    while not ctx.done:
        for rec in ctx.admit():
            ready.push(rec)

        if not ready:
            ctx.idle_until(ctx.next_arrival())
            continue

        rec = ready.pop()
        ctx.execute(rec, rec.remaining_time)


def _run_preemptive(ctx: RunContext, key: KeyFunc) -> None:
    """
    Re-decide on every tick: the best ready record by ``key`` runs for one
    unit and goes back into the ready set unless it finished.
    """
    ready = ReadyHeap(key)
    while not ctx.done:
        for rec in ctx.admit():
            ready.push(rec)

        if not ready:
            ctx.idle_tick()
            continue

        rec = ready.pop()
        ctx.execute(rec, 1)
        if not rec.finished:
            ready.push(rec)


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    ctx = RunContext.snapshot(processes)

    for rec in ctx.records:
        if rec.arrival_time > ctx.time:
            ctx.idle_until(rec.arrival_time)
        ctx.execute(rec, rec.burst_time)

    return ctx.result("FCFS", quantum)


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time (tie-breaker:
    earlier position in arrival order).
    """
    ctx = RunContext.snapshot(processes)
    _run_non_preemptive(ctx, shortest_burst_key)
    return ctx.result("SJF (non-preemptive)", quantum)


def schedule_srtf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).

    A running process is interrupted by any arrival with strictly smaller
    remaining time; equal remaining time keeps the earlier arrival.
    """
    ctx = RunContext.snapshot(processes)
    _run_preemptive(ctx, shortest_remaining_key)
    return ctx.result("SRTF", quantum)


def schedule_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties
    by earlier arrival time, then arrival-order position.
    """
    ctx = RunContext.snapshot(processes)
    _run_non_preemptive(ctx, priority_key)
    return ctx.result("Priority (non-preemptive)", quantum)


def schedule_priority_preemptive(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Priority scheduling (preemptive).

    Same ordering as ``schedule_priority``, re-evaluated every tick, so an
    arrival with a strictly lower priority number takes the CPU at the tick
    it arrives.
    """
    ctx = RunContext.snapshot(processes)
    _run_preemptive(ctx, priority_key)
    return ctx.result("Priority (preemptive)", quantum)


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.
    """
    if quantum is None or quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum (use --quantum)")

    ctx = RunContext.snapshot(processes)
    ready = ReadyQueue()

    for rec in ctx.admit():
        ready.push(rec)

    while not ctx.done:
        if not ready:
            ctx.idle_tick()
            for rec in ctx.admit():
                ready.push(rec)
            continue

        current = ready.pop()
        ctx.execute(current, min(quantum, current.remaining_time))

        # Arrivals during the slice queue up ahead of the preempted process.
        for rec in ctx.admit():
            ready.push(rec)

        if not current.finished:
            ready.push(current)

    return ctx.result("Round Robin", quantum)


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "srtf": schedule_srtf,
    "priority": schedule_priority,
    "priority-preemptive": schedule_priority_preemptive,
    "rr": schedule_rr,
}


def run_algorithm(name: str, processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round-robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    func = ALGORITHMS[name]
    logger.info("Running %s on %d processes", name, len(processes))
    return func(processes, quantum=quantum)
