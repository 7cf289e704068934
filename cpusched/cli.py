from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm
from .gantt import build_rich_gantt, render_gantt
from .metrics import sorted_by_pid, summarize_process_metrics
from .models import Process, ScheduleResult
from .timeline import to_slices
from .workload_io import dump_result, load_workload, processes_from_rows

logger = logging.getLogger(__name__)

MENU_CHOICES = [
    ("fcfs", "First Come First Serve (FCFS)"),
    ("sjf", "Shortest Job First (Non-preemptive)"),
    ("srtf", "Shortest Job First (Preemptive) / SRTF"),
    ("priority", "Priority Scheduling (Non-preemptive)"),
    ("priority-preemptive", "Priority Scheduling (Preemptive)"),
    ("rr", "Round Robin"),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpusched",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, Priority-preemptive, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling decisions (dispatches and completions).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALGORITHMS)}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by the other algorithms).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Also write the result as JSON to this path.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help=f"Algorithms to compare (default: {' '.join(ALGORITHMS)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for RR when included (default: 2).",
    )

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu: enter processes once, then run algorithms against them.",
    )
    menu_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Workload file to load instead of entering processes by hand.",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Default quantum offered for RR (default: 2).",
    )

    return parser


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()
    console.print(render_gantt(result.timeline), highlight=False)
    console.print()

    headers = ["PID", "Arrival", "Burst", "Priority", "CT", "TAT", "WT", "Start", "RT"]

    proc_table = Table(title="Process Execution Table", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in sorted_by_pid(result.processes):
        proc_table.add_row(
            f"P{p.pid}",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.start_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Average turnaround time", f"{summary['avg_turnaround']:.2f}")
    sys_table.add_row("Average waiting time", f"{summary['avg_waiting']:.2f}")
    sys_table.add_row("Average response time", f"{summary['avg_response']:.2f}")
    if result.system:
        sys = result.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _compare(
    processes: Sequence[Process],
    algorithms: Sequence[str],
    quantum: int,
    console: Console,
    title: str = "Algorithm comparison",
) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for alg in algorithms:
        q = quantum if alg.lower() == "rr" else None
        result = run_algorithm(alg, processes, quantum=q)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    slices = to_slices(result.merged_timeline)
    if not slices:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = slices[-1].end_time
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        current = next(sl for sl in slices if sl.start_time <= t < sl.end_time)
        if current.is_idle:
            msg = f"t={t:2d}: [dim]IDLE[/dim]"
        else:
            bar = "█" * (t - current.start_time + 1)
            msg = f"t={t:2d}: {current.label} [green]{bar}[/green]"
        console.print(msg)
        time.sleep(delay)


def _ask_int(
    prompt: str,
    console: Console,
    input_fn: Callable[[str], str],
    minimum: Optional[int] = None,
    default: Optional[int] = None,
) -> int:
    """Prompt until the user enters an integer (>= minimum when given)."""
    while True:
        raw = input_fn(prompt).strip()
        if not raw and default is not None:
            return default
        try:
            value = int(raw)
        except ValueError:
            console.print("[red]Please enter a whole number.[/red]")
            continue
        if minimum is not None and value < minimum:
            console.print(f"[red]Value must be >= {minimum}.[/red]")
            continue
        return value


def _prompt_processes(console: Console, input_fn: Callable[[str], str]) -> List[Process]:
    n = _ask_int("Enter the number of processes: ", console, input_fn, minimum=1)
    rows = []
    for pid in range(1, n + 1):
        console.print(f"--- Process P{pid} ---")
        arrival = _ask_int("Arrival Time: ", console, input_fn, minimum=0)
        burst = _ask_int("Burst Time:   ", console, input_fn, minimum=1)
        priority = _ask_int("Priority (Lower # = Higher Priority): ", console, input_fn)
        rows.append((arrival, burst, priority))
    return processes_from_rows(rows)


def _interactive_menu(
    workload: Optional[str],
    default_quantum: int,
    console: Optional[Console] = None,
    input_fn: Optional[Callable[[str], str]] = None,
) -> None:
    console = console or Console()
    input_fn = input_fn or input

    console.print("[bold cyan]CPU Scheduling Simulator[/bold cyan]")
    try:
        if workload:
            processes = load_workload(workload)
            console.print(f"[bold]Loaded {len(processes)} processes from[/bold] [green]{workload}[/green]")
        else:
            processes = _prompt_processes(console, input_fn)

        _menu_loop(processes, default_quantum, console, input_fn)
    except (EOFError, KeyboardInterrupt):
        # Ctrl-D / Ctrl-C at any prompt leaves the menu like the exit choice.
        console.print("\nExiting...")


def _menu_loop(
    processes: Sequence[Process],
    default_quantum: int,
    console: Console,
    input_fn: Callable[[str], str],
) -> None:
    exit_idx = len(MENU_CHOICES) + 1
    compare_idx = len(MENU_CHOICES) + 2

    while True:
        console.print(f"\n[bold cyan]Choose Scheduling Algorithm[/bold cyan] [dim]({exit_idx} or q to exit)[/dim]")
        for idx, (_, label) in enumerate(MENU_CHOICES, start=1):
            console.print(f"  [yellow]{idx}[/yellow]. [white]{label}[/white]")
        console.print(f"  [yellow]{exit_idx}[/yellow]. [white]Exit[/white]")
        console.print(f"  [yellow]{compare_idx}[/yellow]. [white]Compare all[/white]")

        choice = input_fn("Enter your choice: ").strip().lower()
        if choice in {"q", "quit", "exit", str(exit_idx)}:
            console.print("Exiting...")
            return

        if choice == str(compare_idx):
            quantum = _ask_int(
                f"Time quantum for rr [{default_quantum}]: ", console, input_fn, minimum=1, default=default_quantum
            )
            _compare(processes, list(ALGORITHMS), quantum, console)
            continue

        try:
            alg_idx = int(choice)
        except ValueError:
            alg_idx = 0
        if not 1 <= alg_idx <= len(MENU_CHOICES):
            console.print("[red]Invalid choice[/red]")
            continue
        alg, _ = MENU_CHOICES[alg_idx - 1]

        quantum = None
        if alg == "rr":
            quantum = _ask_int(
                f"Enter Time Quantum [{default_quantum}]: ", console, input_fn, minimum=1, default=default_quantum
            )

        # Every run gets the same original list; the engine snapshots it.
        result = run_algorithm(alg, processes, quantum=quantum)
        _print_result(result, console)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            result = run_algorithm(args.algorithm, processes, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console)
            if args.output:
                out = dump_result(result, args.output)
                console.print(f"[dim]Result written to {out}[/dim]")
            return 0

        if args.command == "compare":
            processes = load_workload(Path(args.workload))
            _compare(processes, args.algorithms, args.quantum, console)
            return 0

        if args.command == "menu":
            _interactive_menu(args.workload, args.quantum, console=console)
            return 0
    except (ValueError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
