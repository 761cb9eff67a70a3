"""Selector Context - canonical selectors and flag normalization."""

from harness_electron.domains.selector.normalization import (
    normalize_optional,
    normalize_required,
)
from harness_electron.domains.selector.value_objects import (
    STRATEGY_FLAGS,
    CanonicalSelector,
    SelectorStrategy,
)

__all__ = [
    "STRATEGY_FLAGS",
    "CanonicalSelector",
    "SelectorStrategy",
    "normalize_optional",
    "normalize_required",
]
