"""Result envelope written to stdout by every command."""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, Literal, Optional, TextIO, Union

from pydantic import BaseModel, ConfigDict, Field

from harness_electron.errors import HarnessError

PROTOCOL_VERSION = "1.0"


class _EnvelopeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class ErrorPayload(_EnvelopeModel):
    code: str
    message: str
    retryable: bool
    suggested_next: List[str] = Field(default_factory=list, alias="suggestedNext")
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_error(cls, error: HarnessError) -> "ErrorPayload":
        return cls.model_validate(error.to_dict())


class SuccessEnvelope(_EnvelopeModel):
    ok: Literal[True] = True
    protocol_version: Literal["1.0"] = Field(PROTOCOL_VERSION, alias="protocolVersion")
    command: str
    session: str
    data: Any = None
    meta: Optional[Dict[str, Any]] = None


class ErrorEnvelope(_EnvelopeModel):
    ok: Literal[False] = False
    protocol_version: Literal["1.0"] = Field(PROTOCOL_VERSION, alias="protocolVersion")
    command: str
    session: str
    error: ErrorPayload


Envelope = Union[SuccessEnvelope, ErrorEnvelope]


def ok(
    command: str,
    session: str,
    data: Any,
    meta: Optional[Dict[str, Any]] = None,
) -> SuccessEnvelope:
    return SuccessEnvelope(command=command, session=session, data=data, meta=meta)


def fail(command: str, session: str, error: HarnessError) -> ErrorEnvelope:
    return ErrorEnvelope(
        command=command, session=session, error=ErrorPayload.from_error(error)
    )


def to_json(envelope: Envelope) -> str:
    """Serialize an envelope to a single JSON line.

    Optional members (``meta``, ``error.details``) are omitted when unset.
    ``data`` is passed through as-is, including explicit nulls inside it.
    """
    payload = envelope.model_dump(mode="json", by_alias=True)
    if payload.get("meta") is None:
        payload.pop("meta", None)
    error = payload.get("error")
    if isinstance(error, dict) and error.get("details") is None:
        error.pop("details", None)
    return _dumps(payload)


def _dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def emit(envelope: Envelope, stream: Optional[TextIO] = None) -> None:
    """Write the envelope as one line to ``stream`` (stdout by default)."""
    out = stream or sys.stdout
    out.write(to_json(envelope) + "\n")
    out.flush()
