"""Shared Kernel - Types shared across the session, selector and resolver contexts."""

from harness_electron.domains.shared.kernel import (
    DEFAULT_SESSION,
    AriaRole,
    ElementId,
    SessionId,
    element_number,
    next_element_id,
)

__all__ = [
    "DEFAULT_SESSION",
    "AriaRole",
    "ElementId",
    "SessionId",
    "element_number",
    "next_element_id",
]
