from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import ConfigError, InvalidProcessError


class Algorithm(Enum):
    FCFS = "fcfs"
    SRT = "srt"
    RR = "rr"

    @property
    def display_name(self) -> str:
        return "Round Robin" if self is Algorithm.RR else self.name


@dataclass(frozen=True)
class ProcessSpec:
    """
    Immutable definition of a process as loaded from the workload file.
    """

    pid: int
    arrival_time: int
    burst_time: int

    def __post_init__(self) -> None:
        if self.pid <= 0:
            raise InvalidProcessError(f"Process id must be a positive integer, got {self.pid}")
        if self.arrival_time < 0:
            raise InvalidProcessError(f"P{self.pid}: arrival time must be >= 0, got {self.arrival_time}")
        if self.burst_time <= 0:
            raise InvalidProcessError(f"P{self.pid}: burst time must be > 0, got {self.burst_time}")


@dataclass
class Process:
    """
    Simulation record for one process within a single scheduling run.
    """

    pid: int
    arrival_time: int
    burst_time: int
    remaining_time: int
    start_time: int = -1
    finish_time: int = 0
    waiting_time: int = 0
    turnaround_time: int = 0

    @classmethod
    def from_spec(cls, spec: ProcessSpec) -> "Process":
        return cls(
            pid=spec.pid,
            arrival_time=spec.arrival_time,
            burst_time=spec.burst_time,
            remaining_time=spec.burst_time,
        )

    @property
    def label(self) -> str:
        return f"P{self.pid}"


@dataclass(frozen=True)
class SchedulerConfig:
    context_switch: int = 1
    quantum: int = 1

    def __post_init__(self) -> None:
        if self.context_switch < 0:
            raise ConfigError(f"Context switch cost must be >= 0, got {self.context_switch}")
        if self.quantum <= 0:
            raise ConfigError(f"Round Robin quantum must be > 0, got {self.quantum}")


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


@dataclass
class ContextSwitch:
    """
    CPU time spent switching between processes; nothing executes in it.
    """

    start_time: int
    end_time: int


@dataclass
class SystemMetrics:
    avg_waiting: float
    avg_turnaround: float
    active_time: int
    context_switches: int
    context_switch_time: int
    cpu_utilization: float
    legacy_cpu_utilization: float


@dataclass
class ScheduleResult:
    algorithm: Algorithm
    config: SchedulerConfig
    processes: List[Process] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    switch_log: List[ContextSwitch] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    @property
    def context_switches(self) -> int:
        return len(self.switch_log)
