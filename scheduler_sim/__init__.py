"""
Scheduler simulator package.

Simulates FCFS, Shortest Remaining Time and Round Robin CPU scheduling
with context switch costs and reports per-process and CPU metrics.
"""

__all__ = ["algorithms", "cli", "metrics", "models"]
