from __future__ import annotations

from typing import Dict, List, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Segment
from .timeline import merge_segments, to_slices


def render_gantt(segments: Sequence[Segment]) -> str:
    """
    Plain-text Gantt table: one row per merged segment with its start and
    completion time.
    """
    slices = to_slices(merge_segments(segments))
    if not slices:
        return "(no execution)"

    border = "+---------+------------+-----------------+"
    lines = [
        "Gantt Chart:",
        border,
        "| Process | Start Time | Completion Time |",
        border,
    ]
    for sl in slices:
        lines.append(f"| {sl.label:>7} | {sl.start_time:>10} | {sl.end_time:>15} |")
    lines.append(border)

    return "\n".join(lines)


def build_rich_gantt(segments: Sequence[Segment]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    slices = to_slices(merge_segments(segments))
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks: List[str] = ["0"]

    for sl in slices:
        width = max(len(sl.label), sl.end_time - sl.start_time)
        if sl.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(sl.label[:width].ljust(width), style="dim")
        else:
            timeline.append(" " * width, style=f"on {pid_color(sl.occupant)}")
            labels.append(sl.label[:width].ljust(width), style="bold")
        time_marks.append(f"{sl.end_time:>{width}}")

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, "".join(time_marks)
