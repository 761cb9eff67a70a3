"""Value Objects for the Resolver Context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from harness_electron.domains.selector import CanonicalSelector
from harness_electron.errors import ErrorCode, HarnessError


@dataclass(frozen=True)
class ResolutionTarget:
    """What a command wants to act on: a selector or a stored element id.

    Raises:
        HarnessError: INVALID_INPUT for a negative index, a selector combined
            with an element id, or strict-single combined with ``index > 0``.
    """
    selector: Optional[CanonicalSelector] = None
    element_id: Optional[str] = None
    index: int = 0
    strict_single: bool = False

    def __post_init__(self) -> None:
        if self.index < 0:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                "--index must be a non-negative integer",
                details={"index": self.index},
            )
        if self.selector is not None and self.element_id:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                "Use either a selector or --element-id, not both",
                details={"elementId": self.element_id, "selector": self.selector.to_wire()},
            )
        if self.strict_single and self.index > 0:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                "--strict-single cannot be combined with --index greater than 0",
                details={"index": self.index},
            )

    @property
    def is_element_ref(self) -> bool:
        return bool(self.element_id)


@dataclass(frozen=True)
class ResolvedTarget:
    """A live locator plus how it was obtained."""
    locator: Any
    strategy: str
    index: int
    match_count: Optional[int] = None
    element_id: Optional[str] = None

    def describe(self) -> Dict[str, Any]:
        """The ``target`` object reported in command results."""
        described: Dict[str, Any] = {"strategy": self.strategy, "index": self.index}
        if self.match_count is not None:
            described["matchCount"] = self.match_count
        if self.element_id:
            described["elementId"] = self.element_id
        return described
