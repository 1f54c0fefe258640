from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by the simulator."""


class WorkloadError(SchedulerError, ValueError):
    """The process file is missing, unreadable or malformed."""


class InvalidProcessError(SchedulerError, ValueError):
    pass


class ConfigError(SchedulerError, ValueError):
    pass


class EmptyWorkloadError(SchedulerError, ValueError):
    """Scheduling or measuring an empty process collection."""


class UnknownAlgorithmError(SchedulerError, ValueError):
    pass
