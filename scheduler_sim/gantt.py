from __future__ import annotations

from typing import List, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Process, ScheduleResult

# Non-process CPU states; process ids are always positive.
IDLE = 0
SWITCH = -1

_PALETTE = ["red", "green", "blue", "magenta", "cyan", "bright_red", "bright_green", "bright_blue"]


def render_gantt_line(processes: Sequence[Process]) -> str:
    """
    Plain-text Gantt chart: first dispatch and completion of each process,
    in collection order.
    """
    entries = " ".join(f"[P{p.pid} ({p.start_time} - {p.finish_time})]" for p in processes)
    return "\n".join(["Gantt Chart:", entries])


def cpu_states(result: ScheduleResult) -> List[int]:
    """
    What the CPU does in each time unit of a schedule: the pid it runs,
    ``SWITCH`` while a context switch is being paid, or ``IDLE``.
    """
    ends = [s.end_time for s in result.timeline] + [c.end_time for c in result.switch_log]
    states = [IDLE] * max(ends, default=0)

    for sw in result.switch_log:
        states[sw.start_time : sw.end_time] = [SWITCH] * (sw.end_time - sw.start_time)
    for sl in result.timeline:
        states[sl.start_time : sl.end_time] = [sl.pid] * (sl.end_time - sl.start_time)
    return states


def time_axis(length: int, step: int = 5) -> str:
    axis = ""
    for t in range(0, length + 1, step):
        axis = axis.ljust(t) + str(t)
    return axis


def build_rich_gantt(result: ScheduleResult) -> Panel:
    """
    One CPU lane showing execution, switch cost and idle time, then one lane
    per process showing when it ran and when it sat ready.
    """
    states = cpu_states(result)
    if not states:
        return Panel("No execution", title="Gantt Chart")

    colors = {p.pid: _PALETTE[i % len(_PALETTE)] for i, p in enumerate(result.processes)}

    cpu = Text()
    for state in states:
        if state == SWITCH:
            cpu.append("s", style="bold black on yellow")
        elif state == IDLE:
            cpu.append(".", style="dim")
        else:
            cpu.append(" ", style=f"on {colors[state]}")

    grid = Table.grid(padding=(0, 1))
    grid.add_column(justify="right", style="bold")
    grid.add_column(no_wrap=True)
    grid.add_row("CPU", cpu)

    for p in result.processes:
        lane = Text()
        for t, state in enumerate(states):
            if state == p.pid:
                lane.append("█", style=colors[p.pid])
            elif p.arrival_time <= t < p.finish_time:
                lane.append("-", style="dim")
            else:
                lane.append(" ")
        grid.add_row(p.label, lane)

    grid.add_row("", Text(time_axis(len(states)), style="dim"))

    return Panel.fit(
        grid,
        title=f"Gantt Chart: {result.algorithm.display_name}",
        subtitle="s = context switch, . = idle, - = waiting",
    )
