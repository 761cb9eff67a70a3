"""Turn raw CLI selector flags into a CanonicalSelector."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from harness_electron.domains.selector.value_objects import (
    STRATEGY_FLAGS,
    CanonicalSelector,
    SelectorStrategy,
)
from harness_electron.domains.shared import AriaRole
from harness_electron.errors import ErrorCode, HarnessError

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> Optional[str]:
    # Multi-word flag values arrive as lists of words.
    if isinstance(value, (list, tuple)):
        if not value or not all(isinstance(part, str) for part in value):
            return None
        value = " ".join(value)
    if not isinstance(value, str) or not value:
        return None
    return value


def normalize_optional(raw: Mapping[str, Any]) -> Optional[CanonicalSelector]:
    """Normalize selector flags, allowing none to be given.

    Args:
        raw: Mapping with any of ``css, xpath, text, role, testid, name``.

    Returns:
        The selector, or None when no strategy was supplied.

    Raises:
        HarnessError: INVALID_SELECTOR when more than one strategy is supplied.
    """
    chosen = [
        (strategy, _as_text(raw.get(strategy.value)))
        for strategy in SelectorStrategy
    ]
    chosen = [(strategy, value) for strategy, value in chosen if value is not None]
    if len(chosen) > 1:
        raise HarnessError(
            ErrorCode.INVALID_SELECTOR,
            f"Provide at most one of {STRATEGY_FLAGS}",
            details={"strategies": [strategy.value for strategy, _ in chosen]},
        )
    if not chosen:
        return None
    strategy, value = chosen[0]
    if strategy is SelectorStrategy.ROLE and not AriaRole.is_known(value):
        logger.debug("Role %r is not a standard ARIA role", value)
    name = _as_text(raw.get("name")) if strategy is SelectorStrategy.ROLE else None
    return CanonicalSelector(strategy, value, name)


def normalize_required(raw: Mapping[str, Any]) -> CanonicalSelector:
    """Normalize selector flags, requiring exactly one strategy.

    Raises:
        HarnessError: INVALID_SELECTOR unless exactly one strategy is supplied.
    """
    try:
        selector = normalize_optional(raw)
    except HarnessError as exc:
        raise HarnessError(
            ErrorCode.INVALID_SELECTOR,
            f"Provide exactly one of {STRATEGY_FLAGS}",
            details=exc.details,
        ) from exc
    if selector is None:
        raise HarnessError(
            ErrorCode.INVALID_SELECTOR,
            f"Provide exactly one of {STRATEGY_FLAGS}",
        )
    return selector
