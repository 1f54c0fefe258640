import pytest

from scheduler_sim.algorithms import (
    Algorithm,
    run_algorithm,
    schedule_fcfs,
    schedule_rr,
    schedule_srt,
)
from scheduler_sim.errors import ConfigError, EmptyWorkloadError, InvalidProcessError, UnknownAlgorithmError
from scheduler_sim.models import ProcessSpec, SchedulerConfig


def _procs():
    return [
        ProcessSpec(1, arrival_time=0, burst_time=5),
        ProcessSpec(2, arrival_time=1, burst_time=3),
        ProcessSpec(3, arrival_time=2, burst_time=1),
    ]


def _by_pid(result):
    return {p.pid: p for p in result.processes}


def _slices(result):
    return [(s.pid, s.start_time, s.end_time) for s in result.timeline]


def test_fcfs_order_and_switches():
    res = schedule_fcfs(SchedulerConfig(context_switch=1), _procs())
    assert _slices(res) == [(1, 0, 5), (2, 6, 9), (3, 10, 11)]
    assert [p.waiting_time for p in res.processes] == [0, 5, 8]
    assert res.context_switches == 2


def test_fcfs_equal_arrivals_keep_input_order():
    procs = [ProcessSpec(3, 0, 2), ProcessSpec(1, 0, 1), ProcessSpec(2, 0, 1)]
    res = schedule_fcfs(SchedulerConfig(context_switch=0), procs)
    assert [p.pid for p in res.processes] == [3, 1, 2]


def test_fcfs_elapsed_time_without_gaps():
    res = schedule_fcfs(SchedulerConfig(context_switch=2), _procs())
    total_burst = sum(p.burst_time for p in _procs())
    assert max(p.finish_time for p in res.processes) == total_burst + 2 * (len(_procs()) - 1)


def test_fcfs_idle_gap():
    procs = [ProcessSpec(1, 0, 2), ProcessSpec(2, 10, 3)]
    res = schedule_fcfs(SchedulerConfig(context_switch=1), procs)
    p2 = _by_pid(res)[2]
    assert (p2.start_time, p2.finish_time) == (10, 13)


def test_srt_example_trace():
    res = schedule_srt(SchedulerConfig(context_switch=1), _procs())
    assert _slices(res) == [(1, 0, 1), (2, 1, 2), (3, 2, 3), (2, 4, 6), (1, 7, 11)]
    procs = _by_pid(res)
    assert (procs[1].start_time, procs[1].finish_time) == (0, 11)
    assert (procs[2].start_time, procs[2].finish_time) == (1, 6)
    assert (procs[3].start_time, procs[3].finish_time) == (2, 3)
    # No switch is charged after the final completion.
    assert res.context_switches == 2


def test_srt_arrival_preemption_charges_switch():
    procs = [ProcessSpec(1, 0, 10), ProcessSpec(2, 2, 2)]
    res = schedule_srt(SchedulerConfig(context_switch=1), procs)
    assert _slices(res) == [(1, 0, 2), (2, 3, 5), (1, 6, 14)]
    assert _by_pid(res)[2].start_time == 3
    assert res.context_switches == 2


def test_srt_arrival_without_enough_gain_is_not_charged():
    procs = [ProcessSpec(1, 0, 10), ProcessSpec(2, 2, 7)]
    res = schedule_srt(SchedulerConfig(context_switch=1), procs)
    # 7 + 1 < 8 is false: P2 still wins on remaining time but pays nothing up front.
    assert _slices(res) == [(1, 0, 2), (2, 2, 9), (1, 10, 18)]
    assert res.context_switches == 1


def test_srt_simultaneous_arrivals_charge_one_admission_switch():
    procs = [ProcessSpec(1, 0, 10), ProcessSpec(2, 2, 2), ProcessSpec(3, 2, 3)]
    res = schedule_srt(SchedulerConfig(context_switch=1), procs)
    # Both newcomers beat P1 (8 remaining) by more than the switch cost,
    # but only the first one admitted pays at t=2.
    assert [(c.start_time, c.end_time) for c in res.switch_log] == [(2, 3), (5, 6), (9, 10)]
    assert _slices(res) == [(1, 0, 2), (2, 3, 5), (3, 6, 9), (1, 10, 18)]
    assert _by_pid(res)[2].start_time == 3


def test_srt_classic_workload():
    procs = [
        ProcessSpec(1, 0, 8),
        ProcessSpec(2, 1, 4),
        ProcessSpec(3, 2, 9),
        ProcessSpec(4, 3, 5),
    ]
    res = schedule_srt(SchedulerConfig(context_switch=0), procs)
    finish = {p.pid: p.finish_time for p in res.processes}
    assert finish == {1: 17, 2: 5, 3: 26, 4: 10}
    assert res.system.avg_waiting == pytest.approx(6.5)


def test_srt_always_runs_shortest_remaining():
    specs = [
        ProcessSpec(1, 0, 7),
        ProcessSpec(2, 2, 4),
        ProcessSpec(3, 4, 1),
        ProcessSpec(4, 5, 4),
    ]
    res = schedule_srt(SchedulerConfig(context_switch=0), specs)

    remaining = {p.pid: p.burst_time for p in specs}
    arrival = {p.pid: p.arrival_time for p in specs}
    for sl in sorted(res.timeline, key=lambda s: s.start_time):
        for t in range(sl.start_time, sl.end_time):
            candidates = [pid for pid in remaining if arrival[pid] <= t and remaining[pid] > 0]
            assert remaining[sl.pid] == min(remaining[pid] for pid in candidates)
            remaining[sl.pid] -= 1
    assert all(r == 0 for r in remaining.values())


def test_srt_tie_prefers_earlier_arrival_and_keeps_input_order():
    procs = [ProcessSpec(2, 3, 1), ProcessSpec(1, 0, 4)]
    res = schedule_srt(SchedulerConfig(context_switch=0), procs)
    assert [p.pid for p in res.processes] == [2, 1]
    by_pid = _by_pid(res)
    assert by_pid[1].finish_time == 4
    assert (by_pid[2].start_time, by_pid[2].finish_time) == (4, 5)


def test_srt_idle_gap():
    procs = [ProcessSpec(1, 0, 2), ProcessSpec(2, 5, 3)]
    res = schedule_srt(SchedulerConfig(context_switch=1), procs)
    p2 = _by_pid(res)[2]
    assert (p2.start_time, p2.finish_time) == (5, 8)
    assert res.context_switches == 0


def test_rr_quantum_2_example():
    res = schedule_rr(SchedulerConfig(context_switch=1, quantum=2), _procs())
    assert _slices(res) == [
        (1, 0, 2),
        (2, 3, 5),
        (3, 6, 7),
        (1, 8, 10),
        (2, 11, 12),
        (1, 13, 14),
    ]
    procs = _by_pid(res)
    assert (procs[1].start_time, procs[1].finish_time) == (0, 14)
    assert (procs[2].start_time, procs[2].finish_time) == (3, 12)
    assert (procs[3].start_time, procs[3].finish_time) == (6, 7)
    assert res.context_switches == 5


def test_rr_slices_never_exceed_quantum():
    procs = [ProcessSpec(1, 0, 7), ProcessSpec(2, 0, 2), ProcessSpec(3, 4, 5)]
    res = schedule_rr(SchedulerConfig(context_switch=0, quantum=3), procs)
    assert all(s.end_time - s.start_time <= 3 for s in res.timeline)
    executed = {}
    for s in res.timeline:
        executed[s.pid] = executed.get(s.pid, 0) + s.end_time - s.start_time
    assert executed == {1: 7, 2: 2, 3: 5}


def test_rr_idle_gap_admits_late_arrivals():
    procs = [ProcessSpec(1, 0, 2), ProcessSpec(2, 5, 3)]
    res = schedule_rr(SchedulerConfig(context_switch=1, quantum=2), procs)
    p2 = _by_pid(res)[2]
    assert (p2.start_time, p2.finish_time) == (6, 9)


def test_rr_late_first_arrival():
    res = schedule_rr(SchedulerConfig(context_switch=1, quantum=2), [ProcessSpec(1, 3, 2)])
    p1 = res.processes[0]
    assert (p1.start_time, p1.finish_time) == (3, 5)
    assert res.context_switches == 0


@pytest.mark.parametrize("algorithm", list(Algorithm))
@pytest.mark.parametrize("context_switch", [0, 1, 3])
def test_completed_schedule_invariants(algorithm, context_switch):
    specs = _procs() + [ProcessSpec(4, 9, 6), ProcessSpec(5, 30, 2)]
    res = run_algorithm(algorithm, SchedulerConfig(context_switch=context_switch, quantum=2), specs)
    assert len(res.processes) == len(specs)
    for p in res.processes:
        assert p.remaining_time == 0
        assert p.finish_time >= p.arrival_time + p.burst_time
        assert p.finish_time - p.start_time >= p.burst_time
        assert p.waiting_time == p.turnaround_time - p.burst_time


def test_runs_do_not_share_state():
    specs = _procs()
    config = SchedulerConfig(context_switch=1, quantum=2)
    first = run_algorithm("srt", config, specs)
    run_algorithm("fcfs", config, specs)
    run_algorithm("rr", config, specs)
    again = run_algorithm("srt", config, specs)
    assert _slices(first) == _slices(again)
    assert specs == _procs()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("FCFS", Algorithm.FCFS),
        ("srtf", Algorithm.SRT),
        ("Round-Robin", Algorithm.RR),
        (Algorithm.RR, Algorithm.RR),
    ],
)
def test_run_algorithm_resolves_names(name, expected):
    res = run_algorithm(name, SchedulerConfig(), _procs())
    assert res.algorithm is expected


def test_run_algorithm_unknown_name():
    with pytest.raises(UnknownAlgorithmError):
        run_algorithm("mlfq", SchedulerConfig(), _procs())


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_empty_workload_raises(algorithm):
    with pytest.raises(EmptyWorkloadError):
        run_algorithm(algorithm, SchedulerConfig(), [])


def test_config_validation():
    with pytest.raises(ConfigError):
        SchedulerConfig(quantum=0)
    with pytest.raises(ConfigError):
        SchedulerConfig(context_switch=-1)


def test_process_spec_validation():
    with pytest.raises(InvalidProcessError):
        ProcessSpec(1, arrival_time=0, burst_time=0)
    with pytest.raises(InvalidProcessError):
        ProcessSpec(0, arrival_time=0, burst_time=1)
    with pytest.raises(InvalidProcessError):
        ProcessSpec(1, arrival_time=-2, burst_time=1)
