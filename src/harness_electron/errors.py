"""Error taxonomy for harness-electron.

Every failure that leaves a command is expressed as exactly one
:class:`ErrorCode`. Code raised deep in the store, resolver or adapters uses
:class:`HarnessError` directly; anything else (Playwright errors, timeouts,
validation errors, plain bugs) is classified once at the CLI boundary by
:func:`normalize_error`.
"""

from __future__ import annotations

import json
import logging
import traceback
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

STACK_LINES = 6

DEFAULT_INSPECT_HINT = "harness-electron dom --format summary"


class ErrorCode(str, Enum):
    """Stable error codes consumed by calling automation."""

    INVALID_INPUT = "INVALID_INPUT"
    CONNECT_FAILED = "CONNECT_FAILED"
    TARGET_NOT_FOUND = "TARGET_NOT_FOUND"
    INVALID_SELECTOR = "INVALID_SELECTOR"
    ACTION_FAILED = "ACTION_FAILED"
    TIMEOUT = "TIMEOUT"
    ASSERT_FAIL = "ASSERT_FAIL"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self]

    @property
    def retryable(self) -> bool:
        return self in RETRYABLE_CODES


EXIT_CODES: Dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: 10,
    ErrorCode.CONNECT_FAILED: 20,
    ErrorCode.TARGET_NOT_FOUND: 20,
    ErrorCode.INVALID_SELECTOR: 30,
    ErrorCode.ACTION_FAILED: 30,
    ErrorCode.TIMEOUT: 40,
    ErrorCode.ASSERT_FAIL: 50,
    ErrorCode.INTERNAL_ERROR: 70,
}

RETRYABLE_CODES = frozenset(
    {ErrorCode.CONNECT_FAILED, ErrorCode.TARGET_NOT_FOUND, ErrorCode.TIMEOUT}
)


class HarnessError(Exception):
    """A failure already classified into the error taxonomy.

    Args:
        code: The taxonomy code.
        message: Human readable description.
        retryable: Overrides the default retryability of ``code``.
        suggested_next: Commands or actions the caller can try next.
        details: Structured diagnostics (counts, indexes, selectors...).
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: Optional[bool] = None,
        suggested_next: Iterable[str] = (),
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message
        self.retryable = self.code.retryable if retryable is None else retryable
        self.suggested_next: List[str] = list(suggested_next)
        self.details = details

    @property
    def exit_code(self) -> int:
        return self.code.exit_code

    def to_dict(self) -> Dict[str, Any]:
        """Wire form of the envelope's ``error`` member; empty details are omitted."""
        payload: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
            "suggestedNext": list(self.suggested_next),
        }
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"HarnessError({self.code.value}, {self.message!r})"


def _stack(exc: BaseException) -> str:
    lines = "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    ).splitlines()
    return "\n".join(lines[:STACK_LINES])


def _is_timeout(exc: BaseException) -> bool:
    # Playwright, asyncio and the builtin all call it TimeoutError.
    return any(cls.__name__ == "TimeoutError" for cls in type(exc).__mro__)


def _is_playwright_error(exc: BaseException) -> bool:
    return type(exc).__module__.split(".")[0] == "playwright"


def _is_validation_error(exc: BaseException) -> bool:
    return (
        type(exc).__name__ == "ValidationError"
        and type(exc).__module__.split(".")[0] in ("pydantic", "pydantic_core")
    )


def normalize_error(exc: BaseException) -> HarnessError:
    """Classify any exception into a :class:`HarnessError`.

    Args:
        exc: The exception raised by a command.

    Returns:
        A fully populated HarnessError. Unknown failures collapse to
        ``INTERNAL_ERROR`` carrying a truncated stack trace.
    """
    if isinstance(exc, HarnessError):
        return exc

    if _is_timeout(exc):
        return HarnessError(
            ErrorCode.TIMEOUT,
            str(exc) or "Operation timed out",
            retryable=True,
            suggested_next=[DEFAULT_INSPECT_HINT, "Retry command with a larger timeout"],
            details={"source": type(exc).__name__, "stack": _stack(exc)},
        )

    if _is_validation_error(exc):
        errors = exc.errors() if hasattr(exc, "errors") else []
        return HarnessError(
            ErrorCode.INVALID_INPUT,
            f"Invalid input: {exc}",
            suggested_next=["harness-electron schema"],
            details={"errors": json.loads(json.dumps(errors, default=str))},
        )

    if _is_playwright_error(exc):
        message = getattr(exc, "message", None) or str(exc)
        return HarnessError(
            ErrorCode.ACTION_FAILED,
            message.splitlines()[0] if message else type(exc).__name__,
            suggested_next=[DEFAULT_INSPECT_HINT],
            details={"name": type(exc).__name__, "stack": _stack(exc)},
        )

    logger.debug("Unclassified error", exc_info=exc)
    return HarnessError(
        ErrorCode.INTERNAL_ERROR,
        str(exc) or type(exc).__name__,
        suggested_next=[DEFAULT_INSPECT_HINT],
        details={"name": type(exc).__name__, "stack": _stack(exc)},
    )
