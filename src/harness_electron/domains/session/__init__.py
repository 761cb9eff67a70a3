"""Session Context - persisted sessions and their element references."""

from harness_electron.domains.session.models import (
    ElementReference,
    SessionRecord,
    now_iso,
)
from harness_electron.domains.session.store import (
    SessionStore,
    connect_hint,
    query_hint,
)

__all__ = [
    "ElementReference",
    "SessionRecord",
    "SessionStore",
    "connect_hint",
    "now_iso",
    "query_hint",
]
