"""Timeout Domain Value Objects.

Immutable value objects for timeout budgets. Waits are keyed off a
monotonic deadline so slow I/O or wall-clock adjustments cannot stretch
or shrink a budget.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class Milliseconds:
    """Type-safe milliseconds value object.

    Examples:
        >>> Milliseconds(5000).to_seconds()
        5.0
        >>> Milliseconds.seconds(2.5).value
        2500
    """
    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Timeout cannot be negative, got {self.value}")

    @classmethod
    def seconds(cls, seconds: float) -> "Milliseconds":
        return cls(value=int(seconds * 1000))

    def to_seconds(self) -> float:
        return self.value / 1000.0

    def __str__(self) -> str:
        return f"{self.value}ms"

    def __lt__(self, other: "Milliseconds") -> bool:
        if not isinstance(other, Milliseconds):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: "Milliseconds") -> bool:
        if not isinstance(other, Milliseconds):
            return NotImplemented
        return self.value <= other.value


POLL_INTERVAL = Milliseconds(100)


@dataclass(frozen=True)
class Deadline:
    """A point on the monotonic clock after which a wait gives up.

    Examples:
        >>> deadline = Deadline.after(Milliseconds(0))
        >>> deadline.expired()
        True
    """
    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def after(
        cls, budget: Milliseconds, clock: Callable[[], float] = time.monotonic
    ) -> "Deadline":
        return cls(expires_at=clock() + budget.to_seconds(), clock=clock)

    def remaining(self) -> Milliseconds:
        """Budget left, floored at zero."""
        left = self.expires_at - self.clock()
        return Milliseconds(max(0, round(left * 1000)))

    def expired(self) -> bool:
        return self.clock() >= self.expires_at
