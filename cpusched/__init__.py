"""
CPU scheduling simulator package.

Runs FCFS, SJF, SRTF, priority (both variants) and round-robin over a fixed
set of processes and reports per-process metrics and a Gantt timeline.
"""

__all__ = ["cli"]
