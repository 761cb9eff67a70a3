"""Persisted session records.

Records are stored as camelCase JSON and validated with pydantic on every
read and write.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from harness_electron.domains.selector import CanonicalSelector
from harness_electron.domains.shared import SessionId
from harness_electron.errors import HarnessError


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ElementReference(_CamelModel):
    """A session-scoped pointer (selector + index) to a discovered element."""

    selector: Dict[str, str]
    index: int = Field(0, ge=0)
    hint: str = ""
    created_at: str = Field(default_factory=now_iso, alias="createdAt")

    @field_validator("selector")
    @classmethod
    def _single_strategy(cls, value: Dict[str, str]) -> Dict[str, str]:
        try:
            return CanonicalSelector.from_wire(value).to_wire()
        except HarnessError as exc:
            raise ValueError(exc.message) from exc

    @classmethod
    def for_selector(
        cls, selector: CanonicalSelector, index: int, hint: str = ""
    ) -> "ElementReference":
        return cls(selector=selector.to_wire(), index=index, hint=hint)

    def canonical_selector(self) -> CanonicalSelector:
        return CanonicalSelector.from_wire(self.selector)


class SessionRecord(_CamelModel):
    """A named binding to one DevTools endpoint and one selected page."""

    id: str
    host: str
    port: int = Field(gt=0)
    ws_endpoint: str = Field(alias="wsEndpoint")
    target_id: Optional[str] = Field(None, alias="targetId")
    target_url: Optional[str] = Field(None, alias="targetUrl")
    target_title: Optional[str] = Field(None, alias="targetTitle")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    element_map: Dict[str, ElementReference] = Field(
        default_factory=dict, alias="elementMap"
    )

    @field_validator("id")
    @classmethod
    def _valid_id(cls, value: str) -> str:
        return SessionId(value).value

    @field_validator("ws_endpoint")
    @classmethod
    def _websocket_url(cls, value: str) -> str:
        if not value.startswith(("ws://", "wss://")):
            raise ValueError("wsEndpoint must be a ws:// or wss:// URL")
        return value

    def to_summary(self) -> Dict[str, Any]:
        """Record without its element map, as listed by ``sessions list``."""
        summary = self.to_wire()
        summary.pop("elementMap", None)
        summary["elementCount"] = len(self.element_map)
        return summary
