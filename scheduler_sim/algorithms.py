from __future__ import annotations

import heapq
import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple, Union

from .errors import EmptyWorkloadError, UnknownAlgorithmError
from .metrics import compute_system_metrics
from .models import (
    Algorithm,
    ContextSwitch,
    Process,
    ProcessSpec,
    ScheduleResult,
    ScheduledSlice,
    SchedulerConfig,
)

logger = logging.getLogger(__name__)


def _fresh_records(processes: Sequence[ProcessSpec]) -> List[Process]:
    # Each run gets its own records; the loaded definitions are never touched.
    if not processes:
        raise EmptyWorkloadError("Cannot schedule an empty process collection")
    return [Process.from_spec(p) for p in processes]


def _append_slice(timeline: List[ScheduledSlice], pid: int, start: int, end: int) -> None:
    if timeline and timeline[-1].pid == pid and timeline[-1].end_time == start:
        timeline[-1].end_time = end
    else:
        timeline.append(ScheduledSlice(pid=pid, start_time=start, end_time=end))


def _charge_switch(switch_log: List[ContextSwitch], time: int, cost: int) -> int:
    switch_log.append(ContextSwitch(start_time=time, end_time=time + cost))
    return time + cost


def _build_result(
    algorithm: Algorithm,
    config: SchedulerConfig,
    records: List[Process],
    timeline: List[ScheduledSlice],
    switch_log: List[ContextSwitch],
) -> ScheduleResult:
    result = ScheduleResult(
        algorithm=algorithm,
        config=config,
        processes=records,
        timeline=timeline,
        switch_log=switch_log,
    )
    compute_system_metrics(result)
    return result


def schedule_fcfs(config: SchedulerConfig, processes: Sequence[ProcessSpec]) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Processes sharing an arrival time keep their input order. The context
    switch cost is paid between consecutive processes, never after the last.
    """
    records = sorted(_fresh_records(processes), key=lambda p: p.arrival_time)

    time = 0
    switch_log: List[ContextSwitch] = []
    timeline: List[ScheduledSlice] = []

    for i, p in enumerate(records):
        if time < p.arrival_time:
            time = p.arrival_time

        p.start_time = time
        p.finish_time = p.start_time + p.burst_time
        p.remaining_time = 0
        timeline.append(ScheduledSlice(pid=p.pid, start_time=p.start_time, end_time=p.finish_time))

        time = p.finish_time
        if i < len(records) - 1:
            time = _charge_switch(switch_log, time, config.context_switch)

    return _build_result(Algorithm.FCFS, config, records, timeline, switch_log)


def schedule_srt(config: SchedulerConfig, processes: Sequence[ProcessSpec]) -> ScheduleResult:
    """
    Shortest Remaining Time (preemptive).

    The ready set is a heap of indices into ``records`` keyed by remaining
    time, then arrival time, then arrival rank. A dispatched process runs
    until it finishes or the next process arrives, whichever comes first.
    """
    records = _fresh_records(processes)
    cs = config.context_switch

    arrival_order = sorted(range(len(records)), key=lambda i: records[i].arrival_time)
    rank = {idx: r for r, idx in enumerate(arrival_order)}

    ready: List[Tuple[int, int, int, int]] = []
    cursor = 0
    time = 0
    last: Optional[int] = None
    switch_log: List[ContextSwitch] = []
    timeline: List[ScheduledSlice] = []

    def push(idx: int) -> None:
        p = records[idx]
        heapq.heappush(ready, (p.remaining_time, p.arrival_time, rank[idx], idx))

    while cursor < len(arrival_order) or ready:
        charged = False
        while cursor < len(arrival_order) and records[arrival_order[cursor]].arrival_time <= time:
            idx = arrival_order[cursor]
            push(idx)
            cursor += 1

            # A newcomer that beats the incumbent even after paying the
            # switch cost takes over immediately.
            newcomer = records[idx]
            if last is None or charged:
                continue
            incumbent = records[last]
            if incumbent.remaining_time > 0 and newcomer.burst_time + cs < incumbent.remaining_time:
                time = _charge_switch(switch_log, time, cs)
                charged = True
                logger.debug("t=%d: P%d preempts P%d on arrival", time, newcomer.pid, incumbent.pid)

        if not ready:
            time = records[arrival_order[cursor]].arrival_time
            logger.debug("t=%d: CPU idle until next arrival", time)
            continue

        _, _, _, idx = heapq.heappop(ready)
        p = records[idx]
        if p.start_time == -1:
            p.start_time = time

        next_arrival: Optional[int] = None
        if cursor < len(arrival_order):
            next_arrival = records[arrival_order[cursor]].arrival_time

        if next_arrival is None:
            run_time = p.remaining_time
        else:
            run_time = min(p.remaining_time, next_arrival - time)

        _append_slice(timeline, p.pid, time, time + run_time)
        p.remaining_time -= run_time
        time += run_time

        if p.remaining_time == 0:
            p.finish_time = time
            more_work = bool(ready) or cursor < len(arrival_order)
            if last is not None and last != idx and time != next_arrival and more_work:
                time = _charge_switch(switch_log, time, cs)
                logger.debug("t=%d: P%d finished, switch charged", time, p.pid)
        else:
            push(idx)

        last = idx

    return _build_result(Algorithm.SRT, config, records, timeline, switch_log)


def schedule_rr(config: SchedulerConfig, processes: Sequence[ProcessSpec]) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that become eligible during a slice are queued ahead of the
    process that was just preempted.
    """
    records = _fresh_records(processes)
    quantum = config.quantum

    queued = [False] * len(records)
    ready: Deque[int] = deque()
    time = 0
    last: Optional[int] = None
    switch_log: List[ContextSwitch] = []
    timeline: List[ScheduledSlice] = []

    def enqueue_new_arrivals(current_time: int) -> None:
        for idx, p in enumerate(records):
            if not queued[idx] and p.arrival_time <= current_time:
                queued[idx] = True
                ready.append(idx)

    enqueue_new_arrivals(time)

    while True:
        if not ready:
            pending = [p.arrival_time for idx, p in enumerate(records) if not queued[idx]]
            if not pending:
                break
            time = max(time, min(pending))
            logger.debug("t=%d: ready queue empty, admitting next arrivals", time)
            enqueue_new_arrivals(time)
            continue

        idx = ready.popleft()
        p = records[idx]

        if last is not None and last != idx:
            time = _charge_switch(switch_log, time, config.context_switch)

        if p.start_time == -1:
            p.start_time = time

        run_time = min(p.remaining_time, quantum)
        timeline.append(ScheduledSlice(pid=p.pid, start_time=time, end_time=time + run_time))
        p.remaining_time -= run_time
        time += run_time

        if p.remaining_time > 0:
            enqueue_new_arrivals(time)
            ready.append(idx)
        else:
            p.finish_time = time
            logger.debug("t=%d: P%d finished", time, p.pid)

        last = idx

    return _build_result(Algorithm.RR, config, records, timeline, switch_log)


ALGORITHMS: Dict[Algorithm, Callable[[SchedulerConfig, Sequence[ProcessSpec]], ScheduleResult]] = {
    Algorithm.FCFS: schedule_fcfs,
    Algorithm.SRT: schedule_srt,
    Algorithm.RR: schedule_rr,
}

_ALIASES = {
    "srtf": Algorithm.SRT,
    "round-robin": Algorithm.RR,
    "roundrobin": Algorithm.RR,
}


def resolve_algorithm(name: Union[str, Algorithm]) -> Algorithm:
    if isinstance(name, Algorithm):
        return name
    key = name.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return Algorithm(key)
    except ValueError:
        raise UnknownAlgorithmError(f"Unknown algorithm '{name}'") from None


def run_algorithm(
    algorithm: Union[str, Algorithm],
    config: SchedulerConfig,
    processes: Sequence[ProcessSpec],
) -> ScheduleResult:
    """
    Dispatch to the requested algorithm by enum member or name.
    """
    func = ALGORITHMS[resolve_algorithm(algorithm)]
    return func(config, processes)
