"""Resolver Context - turns selectors and element ids into live locators."""

from harness_electron.domains.resolver.services import TargetResolver
from harness_electron.domains.resolver.value_objects import (
    ResolutionTarget,
    ResolvedTarget,
)

__all__ = [
    "ResolutionTarget",
    "ResolvedTarget",
    "TargetResolver",
]
