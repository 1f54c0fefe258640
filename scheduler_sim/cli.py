from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import Algorithm, run_algorithm
from .errors import ConfigError, SchedulerError
from .gantt import build_rich_gantt, render_gantt_line
from .metrics import summarize_process_metrics
from .models import ProcessSpec, ScheduleResult, SchedulerConfig
from .workload_io import load_workload

logger = logging.getLogger(__name__)

MENU_CHOICES: Dict[str, Algorithm] = {
    "1": Algorithm.FCFS,
    "2": Algorithm.SRT,
    "3": Algorithm.RR,
}
EXIT_CHOICE = "4"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-sim",
        description="CPU scheduling simulator (FCFS, SRT, Round Robin) with context switch costs.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu; prompts for context switch cost and quantum if not given.",
    )
    menu_parser.add_argument(
        "--workload",
        "-w",
        default="processes.txt",
        help="Path to the process file (default: processes.txt).",
    )
    menu_parser.add_argument(
        "--context-switch",
        "-c",
        type=int,
        default=None,
        help="Context switch cost in ms (prompted when omitted).",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Round Robin time quantum in ms (prompted when omitted).",
    )

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (fcfs, srt, rr).",
    )
    _add_common_arguments(run_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run all algorithms on the same workload and compare average metrics.",
    )
    _add_common_arguments(compare_parser)

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a process file (.txt, .json or .csv).",
    )
    parser.add_argument(
        "--context-switch",
        "-c",
        type=int,
        default=1,
        help="Context switch cost in ms (default: 1).",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=1,
        help="Round Robin time quantum in ms (default: 1).",
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm.display_name}")
    console.print(f"[bold]Context switch:[/bold] {result.config.context_switch} ms")
    if result.algorithm is Algorithm.RR:
        console.print(f"[bold]Quantum:[/bold] {result.config.quantum} ms")

    console.print()
    console.print(render_gantt_line(result.processes), markup=False, highlight=False, soft_wrap=True)
    console.print()
    console.print(build_rich_gantt(result))
    console.print()

    proc_table = Table(title="Detailed Metrics for Each Process", box=box.SIMPLE_HEAVY)
    for h in ["Process", "Arrival", "Burst", "Start", "Finish Time", "Waiting Time", "Turnaround Time"]:
        proc_table.add_column(h, justify="center" if h == "Process" else "right")

    for p in result.processes:
        proc_table.add_row(
            p.label,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.finish_time),
            str(p.waiting_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)

    if result.system:
        sys = result.system
        sys_table = Table(title="Average Metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Average Waiting Time", f"{sys.avg_waiting:.2f} ms")
        sys_table.add_row("Average Turnaround Time", f"{sys.avg_turnaround:.2f} ms")
        sys_table.add_row("Context switches", str(sys.context_switches))
        sys_table.add_row("CPU Utilization", f"{sys.cpu_utilization:.2f}%")
        sys_table.add_row("CPU Utilization (n-1 switches)", f"{sys.legacy_cpu_utilization:.2f}%")

        console.print(sys_table)


def _run_compare(processes: Sequence[ProcessSpec], config: SchedulerConfig, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Switches", justify="right")
    summary_table.add_column("CPU utilization", justify="right")

    for alg in Algorithm:
        result = run_algorithm(alg, config, processes)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm.display_name,
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            str(result.context_switches),
            f"{result.system.cpu_utilization:.2f}%",
        )

    console.print(summary_table)


def _prompt_int(prompt: str, console: Console) -> int:
    while True:
        try:
            raw = input(prompt)
        except EOFError:
            raise ConfigError(f"No value given for '{prompt.strip()}'") from None
        try:
            return int(raw.strip())
        except ValueError:
            console.print("[red]Please enter a whole number.[/red]")


def _read_config(context_switch: Optional[int], quantum: Optional[int], console: Console) -> SchedulerConfig:
    if context_switch is None:
        context_switch = _prompt_int("Enter Context Switch Time (ms): ", console)
    if quantum is None:
        quantum = _prompt_int("Enter Time Quantum for Round Robin (ms): ", console)
    return SchedulerConfig(context_switch=context_switch, quantum=quantum)


def _interactive_menu(processes: List[ProcessSpec], config: SchedulerConfig, console: Console) -> None:
    while True:
        console.print("\n[bold cyan]Choose the scheduling algorithm or exit:[/bold cyan]")
        console.print("  [yellow]1[/yellow]. FCFS (First-Come, First-Served)")
        console.print("  [yellow]2[/yellow]. SRT (Shortest Remaining Time)")
        console.print("  [yellow]3[/yellow]. Round Robin")
        console.print("  [yellow]4[/yellow]. Exit")

        try:
            choice = input("> ").strip()
        except EOFError:
            return

        if choice == EXIT_CHOICE:
            console.print("Exiting program.")
            return

        algorithm = MENU_CHOICES.get(choice)
        if algorithm is None:
            console.print("[red]Invalid option. Please try again.[/red]")
            continue

        logger.debug("Menu selected %s", algorithm.display_name)
        result = run_algorithm(algorithm, config, processes)
        _print_result(result, console)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    console = Console()
    err_console = Console(stderr=True)

    try:
        processes = load_workload(Path(args.workload))

        if args.command == "menu":
            config = _read_config(args.context_switch, args.quantum, console)
            _interactive_menu(processes, config, console)
            return 0

        config = SchedulerConfig(context_switch=args.context_switch, quantum=args.quantum)

        if args.command == "run":
            result = run_algorithm(args.algorithm, config, processes)
            _print_result(result, console)
            return 0

        if args.command == "compare":
            _run_compare(processes, config, console)
            return 0
    except SchedulerError as exc:
        err_console.print(f"Error: {exc}", style="red", markup=False, highlight=False, soft_wrap=True)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
