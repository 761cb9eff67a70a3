"""``assert``: check element existence, visibility, text, or the page URL."""

from __future__ import annotations

from typing import Any, Dict, Optional

from harness_electron.commands.base import CommandContext, poll_text, require_value
from harness_electron.domains.resolver import ResolutionTarget
from harness_electron.errors import ErrorCode, HarnessError

ASSERT_KINDS = ("exists", "visible", "text", "url")

_STATE_FOR_KIND = {"exists": "attached", "visible": "visible"}


async def assert_state(
    ctx: CommandContext,
    kind: str,
    target: ResolutionTarget,
    timeout_ms: int,
    expected: Optional[str] = None,
) -> Dict[str, Any]:
    if kind not in ASSERT_KINDS:
        raise HarnessError(
            ErrorCode.INVALID_INPUT,
            f"--kind must be {'|'.join(ASSERT_KINDS)}",
            details={"kind": kind},
        )
    if kind in ("url", "text"):
        require_value(expected, "--expected", f"--kind {kind}")

    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        if kind == "url":
            current = page.url
            if expected not in current:
                raise HarnessError(
                    ErrorCode.ASSERT_FAIL,
                    f'URL assertion failed. Current URL "{current}" does not include "{expected}"',
                    details={"expected": expected, "actual": current},
                )
            return {"asserted": True, "kind": kind}

        resolved = await ctx.resolve(page, target, timeout_ms)

        if kind in _STATE_FOR_KIND:
            await resolved.locator.wait_for(state=_STATE_FOR_KIND[kind], timeout=timeout_ms)
            return {"asserted": True, "kind": kind, "target": resolved.describe()}

        matched, last_text = await poll_text(resolved.locator, expected, timeout_ms)
        if not matched:
            raise HarnessError(
                ErrorCode.ASSERT_FAIL,
                f'Text assertion failed. Expected to find "{expected}"',
                details={"expected": expected, "actual": last_text, "target": resolved.describe()},
            )
        return {"asserted": True, "kind": kind, "target": resolved.describe()}
