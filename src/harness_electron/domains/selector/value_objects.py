"""Value Objects for the Selector Context.

A selector is a tagged value: exactly one strategy and one value. The
``name`` refinement only exists for the role strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from harness_electron.errors import ErrorCode, HarnessError

STRATEGY_FLAGS = "--css, --xpath, --text, --role, --testid"


class SelectorStrategy(Enum):
    """Supported selector strategies, in flag order."""
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    ROLE = "role"
    TESTID = "testid"


@dataclass(frozen=True)
class CanonicalSelector:
    """Normalized, single-strategy description of how to find elements.

    Examples:
        >>> CanonicalSelector.css("#app").to_wire()
        {'css': '#app'}
        >>> CanonicalSelector.role("button", name="Save").to_wire()
        {'role': 'button', 'name': 'Save'}
    """
    strategy: SelectorStrategy
    value: str
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Selector value cannot be empty")
        if self.strategy is not SelectorStrategy.ROLE and self.name is not None:
            object.__setattr__(self, "name", None)

    @classmethod
    def css(cls, value: str) -> "CanonicalSelector":
        return cls(SelectorStrategy.CSS, value)

    @classmethod
    def xpath(cls, value: str) -> "CanonicalSelector":
        return cls(SelectorStrategy.XPATH, value)

    @classmethod
    def text(cls, value: str) -> "CanonicalSelector":
        return cls(SelectorStrategy.TEXT, value)

    @classmethod
    def role(cls, value: str, name: Optional[str] = None) -> "CanonicalSelector":
        return cls(SelectorStrategy.ROLE, value, name or None)

    @classmethod
    def testid(cls, value: str) -> "CanonicalSelector":
        return cls(SelectorStrategy.TESTID, value)

    def to_wire(self) -> Dict[str, str]:
        """Single-strategy dict used by envelopes and session files."""
        wire = {self.strategy.value: self.value}
        if self.name:
            wire["name"] = self.name
        return wire

    @classmethod
    def from_wire(cls, wire: Mapping[str, Any]) -> "CanonicalSelector":
        """Rebuild a selector from its stored form.

        Raises:
            HarnessError: INVALID_SELECTOR unless exactly one strategy is set.
        """
        present = [
            strategy
            for strategy in SelectorStrategy
            if isinstance(wire.get(strategy.value), str) and wire.get(strategy.value)
        ]
        if len(present) != 1:
            raise HarnessError(
                ErrorCode.INVALID_SELECTOR,
                f"Exactly one selector type must be provided: {STRATEGY_FLAGS}",
                details={"selector": dict(wire)},
            )
        strategy = present[0]
        name = wire.get("name") if isinstance(wire.get("name"), str) else None
        return cls(strategy, wire[strategy.value], name or None)

    def describe(self) -> str:
        if self.name:
            return f"{self.strategy.value}={self.value} (name={self.name})"
        return f"{self.strategy.value}={self.value}"

    def __str__(self) -> str:
        return self.describe()
