"""Timeout Domain - budgets and monotonic deadlines for waits and polling."""

from harness_electron.domains.timeout.value_objects import (
    POLL_INTERVAL,
    Deadline,
    Milliseconds,
)

__all__ = [
    "POLL_INTERVAL",
    "Deadline",
    "Milliseconds",
]
