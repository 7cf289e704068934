import pytest

from cpusched.algorithms import schedule_fcfs, schedule_sjf
from cpusched.metrics import compute_system_metrics, sorted_by_pid, summarize_process_metrics
from cpusched.models import Process, ScheduleResult


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5, priority=2),
        Process(2, arrival_time=1, burst_time=3, priority=1),
        Process(3, arrival_time=2, burst_time=8, priority=3),
    ]


def test_fcfs_averages():
    res = schedule_fcfs(_procs())
    summary = summarize_process_metrics(res.processes)
    assert summary["avg_turnaround"] == pytest.approx(26 / 3)
    assert summary["avg_waiting"] == pytest.approx(10 / 3)
    assert summary["avg_response"] == pytest.approx(10 / 3)


def test_system_metrics_without_idle():
    res = schedule_fcfs(_procs())
    assert res.system.makespan == 16
    assert res.system.cpu_busy_time == 16
    assert res.system.idle_time == 0
    assert res.system.cpu_utilization == pytest.approx(1.0)
    assert res.system.throughput == pytest.approx(3 / 16)


def test_system_metrics_count_idle_time():
    res = schedule_sjf([Process(1, 0, 2), Process(2, 5, 3), Process(3, 6, 1)])
    assert res.system.makespan == 9
    assert res.system.cpu_busy_time == 6
    assert res.system.idle_time == 3
    assert res.system.cpu_utilization == pytest.approx(6 / 9)


def test_sorted_by_pid():
    res = schedule_fcfs([Process(3, 0, 1), Process(1, 2, 1), Process(2, 1, 1)])
    assert [p.pid for p in res.processes] == [3, 2, 1]
    assert [p.pid for p in sorted_by_pid(res.processes)] == [1, 2, 3]


def test_empty_summary():
    assert summarize_process_metrics([]) == {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}
    system = compute_system_metrics(ScheduleResult(algorithm="FCFS", quantum=None))
    assert system.makespan == 0
    assert system.throughput == 0.0
