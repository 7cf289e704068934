from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from .metrics import sorted_by_pid, summarize_process_metrics
from .models import Process, ScheduleResult

logger = logging.getLogger(__name__)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a validated list of Process
    objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    validate_processes(processes)
    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry, index) for index, entry in enumerate(raw, start=1)]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for index, row in enumerate(reader, start=1):
            processes.append(_process_from_mapping(row, index))
    return processes


def _process_from_mapping(mapping: Mapping, index: int) -> Process:
    # Missing pids are numbered by file position, like the interactive prompt.
    try:
        pid_val = mapping.get("pid")
        pid = _whole_number(pid_val) if pid_val not in (None, "") else index
        arrival_time = _whole_number(mapping["arrival_time"])
        burst_time = _whole_number(mapping["burst_time"])
        priority_val = mapping.get("priority")
        priority = _whole_number(priority_val) if priority_val not in (None, "") else 0
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def _whole_number(value) -> int:
    # JSON yields int/float/bool, CSV yields str. Only integral values pass.
    if isinstance(value, bool):
        raise TypeError(f"Expected a whole number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Expected a whole number, got {value!r}")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"Expected a whole number, got {value!r}")


def validate_processes(processes: Iterable[Process]) -> None:
    """
    Enforce the simulator's input contract: positive unique pids,
    non-negative arrivals and positive bursts.
    """
    seen = set()
    for p in processes:
        if p.pid <= 0:
            raise ValueError(f"Process pid must be positive, got {p.pid}")
        if p.pid in seen:
            raise ValueError(f"Duplicate pid {p.pid}")
        if p.arrival_time < 0:
            raise ValueError(f"P{p.pid}: arrival time must be >= 0, got {p.arrival_time}")
        if p.burst_time <= 0:
            raise ValueError(f"P{p.pid}: burst time must be > 0, got {p.burst_time}")
        seen.add(p.pid)


def result_to_dict(result: ScheduleResult) -> dict:
    """
    Plain-data view of a finished run: merged timeline, per-process rows
    sorted by pid, averages and system metrics.
    """
    summary = summarize_process_metrics(result.processes)
    system: Optional[dict] = None
    if result.system is not None:
        system = {
            "cpu_busy_time": result.system.cpu_busy_time,
            "idle_time": result.system.idle_time,
            "makespan": result.system.makespan,
            "throughput": result.system.throughput,
            "cpu_utilization": result.system.cpu_utilization,
        }

    return {
        "algorithm": result.algorithm,
        "quantum": result.quantum,
        "processes": [
            {
                "pid": p.pid,
                "arrival_time": p.arrival_time,
                "burst_time": p.burst_time,
                "priority": p.priority,
                "start_time": p.start_time,
                "completion_time": p.completion_time,
                "turnaround_time": p.turnaround_time,
                "waiting_time": p.waiting_time,
                "response_time": p.response_time,
            }
            for p in sorted_by_pid(result.processes)
        ],
        "timeline": [
            {"occupant": "idle" if seg.is_idle else seg.occupant, "end_time": seg.end_time}
            for seg in result.merged_timeline
        ],
        "averages": {
            "turnaround": summary["avg_turnaround"],
            "waiting": summary["avg_waiting"],
            "response": summary["avg_response"],
        },
        "system": system,
    }


def dump_result(result: ScheduleResult, path: str | Path) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)
    logger.info("Wrote %s result to %s", result.algorithm, path)
    return path


def processes_from_rows(rows: Sequence[Sequence[int]]) -> List[Process]:
    """
    Build pids 1..n from (arrival, burst, priority) rows, the way processes are
    entered interactively.
    """
    processes = [
        Process(pid=index, arrival_time=arrival, burst_time=burst, priority=priority)
        for index, (arrival, burst, priority) in enumerate(rows, start=1)
    ]
    validate_processes(processes)
    return processes
