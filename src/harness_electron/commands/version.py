"""``version``: installed package metadata."""

from __future__ import annotations

from importlib import metadata
from typing import Any, Dict

from harness_electron import PACKAGE_NAME
from harness_electron.commands.base import CommandContext
from harness_electron.envelope import PROTOCOL_VERSION
from harness_electron.errors import ErrorCode, HarnessError


def read_package_info(distribution: str = PACKAGE_NAME) -> Dict[str, str]:
    try:
        info = metadata.metadata(distribution)
    except metadata.PackageNotFoundError as exc:
        raise HarnessError(
            ErrorCode.INTERNAL_ERROR,
            f"Failed to read package metadata for {distribution}",
            suggested_next=["harness-electron capabilities"],
            details={"cause": str(exc), "distribution": distribution},
        ) from exc
    return {
        "name": info.get("Name") or distribution,
        "version": info.get("Version") or "unknown",
        "description": info.get("Summary") or "",
    }


async def version(ctx: CommandContext) -> Dict[str, Any]:
    info = read_package_info()
    return {
        "package": info["name"],
        "version": info["version"],
        "description": info["description"],
        "protocolVersion": PROTOCOL_VERSION,
    }
