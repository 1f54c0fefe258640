from __future__ import annotations

import logging
from typing import List

from .errors import EmptyWorkloadError
from .models import Process, ScheduleResult, SystemMetrics

logger = logging.getLogger(__name__)


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Fill in waiting/turnaround time for every process and compute averages
    and CPU utilization for a finished schedule.

    Utilization subtracts the context switch time the engine actually
    charged from the active span, which starts at the arrival of the first
    process in collection order and ends at the last completion.
    """
    processes = result.processes
    if not processes:
        raise EmptyWorkloadError("Cannot compute metrics for an empty process collection")

    for p in processes:
        p.turnaround_time = p.finish_time - p.arrival_time
        p.waiting_time = p.turnaround_time - p.burst_time

    summary = summarize_process_metrics(processes)

    cs = result.config.context_switch
    active_time = max(p.finish_time for p in processes) - processes[0].arrival_time
    switch_time = cs * result.context_switches
    legacy_switch_time = cs * (len(processes) - 1)

    cpu_utilization = 100.0 * (active_time - switch_time) / active_time
    legacy_cpu_utilization = 100.0 * (active_time - legacy_switch_time) / active_time

    if cs and result.context_switches != len(processes) - 1:
        logger.info(
            "%s charged %d context switches; the per-process estimate of %d would report "
            "%.2f%% utilization instead of %.2f%%",
            result.algorithm.display_name,
            result.context_switches,
            len(processes) - 1,
            legacy_cpu_utilization,
            cpu_utilization,
        )

    system = SystemMetrics(
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        active_time=active_time,
        context_switches=result.context_switches,
        context_switch_time=switch_time,
        cpu_utilization=cpu_utilization,
        legacy_cpu_utilization=legacy_cpu_utilization,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[Process]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        raise EmptyWorkloadError("Cannot average metrics over an empty process collection")

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }
