from cpusched.models import Process, ProcessRecord
from cpusched.ordering import (
    ReadyHeap,
    ReadyQueue,
    arrival_key,
    priority_key,
    shortest_burst_key,
    shortest_remaining_key,
)


def _record(pid, arrival, burst, priority=0, position=0):
    return ProcessRecord.from_process(Process(pid, arrival, burst, priority), position)


def _drain(ready):
    out = []
    while ready:
        out.append(ready.pop().pid)
    return out


def test_arrival_key_breaks_ties_by_pid():
    procs = [Process(3, 1, 1), Process(2, 1, 1), Process(1, 4, 1)]
    assert [p.pid for p in sorted(procs, key=arrival_key)] == [2, 3, 1]


def test_shortest_burst_ties_use_position():
    heap = ReadyHeap(shortest_burst_key)
    heap.push(_record(5, 0, 4, position=2))
    heap.push(_record(9, 0, 4, position=0))
    heap.push(_record(1, 0, 6, position=1))
    assert _drain(heap) == [9, 5, 1]


def test_shortest_remaining_uses_key_at_push_time():
    heap = ReadyHeap(shortest_remaining_key)
    a = _record(1, 0, 5, position=0)
    b = _record(2, 1, 3, position=1)
    heap.push(a)
    running = heap.pop()
    running.remaining_time -= 3

    heap.push(b)
    heap.push(running)
    assert _drain(heap) == [1, 2]


def test_priority_order():
    heap = ReadyHeap(priority_key)
    heap.push(_record(1, 0, 1, priority=3, position=0))
    heap.push(_record(2, 2, 1, priority=1, position=2))
    heap.push(_record(3, 1, 1, priority=1, position=1))
    heap.push(_record(4, 1, 1, priority=1, position=3))
    assert _drain(heap) == [3, 4, 2, 1]


def test_fifo_queue_keeps_insertion_order():
    queue = ReadyQueue()
    for pid in (4, 1, 3):
        queue.push(_record(pid, 0, 1))
    assert _drain(queue) == [4, 1, 3]
