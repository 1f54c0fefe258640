from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List

from .errors import InvalidProcessError, WorkloadError
from .models import ProcessSpec

logger = logging.getLogger(__name__)


def load_workload(path: str | Path) -> List[ProcessSpec]:
    """
    Load a workload into a list of process definitions.

    ``.json`` and ``.csv`` files are read as records; anything else is the
    plain text format: a process count followed by ``pid arrival burst``
    triples separated by whitespace.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            processes = _load_json(path)
        elif suffix == ".csv":
            processes = _load_csv(path)
        else:
            processes = _load_text(path)
    except OSError as exc:
        raise WorkloadError(f"Failed to open workload file {path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise WorkloadError(f"{path}: file is not valid UTF-8") from exc

    _check_unique(processes)
    logger.debug("Loaded %d processes from %s", len(processes), path)
    return processes


def _load_text(path: Path) -> List[ProcessSpec]:
    tokens = path.read_text(encoding="utf-8").split()
    if not tokens:
        raise WorkloadError(f"{path}: file is empty, expected a process count")

    try:
        values = [int(tok) for tok in tokens]
    except ValueError as exc:
        raise WorkloadError(f"{path}: workload must contain only integers") from exc

    count, fields = values[0], values[1:]
    if count < 0:
        raise WorkloadError(f"{path}: process count must be >= 0, got {count}")
    if len(fields) < count * 3:
        raise WorkloadError(f"{path}: expected {count} processes but found {len(fields) // 3}")

    processes: List[ProcessSpec] = []
    for i in range(count):
        pid, arrival_time, burst_time = fields[i * 3 : i * 3 + 3]
        processes.append(_make_spec(pid, arrival_time, burst_time))
    return processes


def _load_json(path: Path) -> List[ProcessSpec]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"{path}: invalid JSON ({exc.msg})") from exc

    if not isinstance(raw, Iterable) or isinstance(raw, (str, dict)):
        raise WorkloadError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[ProcessSpec]:
    processes: List[ProcessSpec] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping) -> ProcessSpec:
    try:
        pid = int(mapping["pid"])
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    return _make_spec(pid, arrival_time, burst_time)


def _make_spec(pid: int, arrival_time: int, burst_time: int) -> ProcessSpec:
    try:
        return ProcessSpec(pid=pid, arrival_time=arrival_time, burst_time=burst_time)
    except InvalidProcessError as exc:
        raise WorkloadError(str(exc)) from exc


def _check_unique(processes: List[ProcessSpec]) -> None:
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise WorkloadError(f"Duplicate process id {p.pid}")
        seen.add(p.pid)
