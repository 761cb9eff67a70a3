"""Page actions: ``type``, ``click``, ``wait``, ``screenshot`` and ``evaluate``."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from harness_electron.adapters.playwright_adapter import (
    element_screenshot,
    evaluate_script,
    page_screenshot,
)
from harness_electron.commands.base import CommandContext, poll_text, require_value
from harness_electron.domains.resolver import ResolutionTarget
from harness_electron.errors import DEFAULT_INSPECT_HINT, ErrorCode, HarnessError

logger = logging.getLogger(__name__)

WAIT_MODES = ("visible", "hidden", "url", "text")


async def type_text(
    ctx: CommandContext,
    target: ResolutionTarget,
    value: str,
    timeout_ms: int,
    clear: bool = False,
) -> Dict[str, Any]:
    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        resolved = await ctx.resolve(page, target, timeout_ms)
        await resolved.locator.wait_for(state="visible", timeout=timeout_ms)
        if clear:
            await resolved.locator.fill("", timeout=timeout_ms)
        await resolved.locator.fill(value, timeout=timeout_ms)
        return {"typed": True, "target": resolved.describe()}


async def click(ctx: CommandContext, target: ResolutionTarget, timeout_ms: int) -> Dict[str, Any]:
    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        resolved = await ctx.resolve(page, target, timeout_ms)
        await resolved.locator.click(timeout=timeout_ms)
        return {"clicked": True, "target": resolved.describe()}


async def wait(
    ctx: CommandContext,
    mode: str,
    target: ResolutionTarget,
    timeout_ms: int,
    value: Optional[str] = None,
) -> Dict[str, Any]:
    """Wait for an element state, URL substring or element text substring."""
    if mode not in WAIT_MODES:
        raise HarnessError(
            ErrorCode.INVALID_INPUT,
            f"--for must be {'|'.join(WAIT_MODES)}",
            details={"for": mode},
        )
    if mode in ("url", "text"):
        require_value(value, "--value", f"--for {mode}")

    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        if mode == "url":
            await page.wait_for_url(lambda url: value in url, timeout=timeout_ms)
            return {"matched": page.url}

        resolved = await ctx.resolve(page, target, timeout_ms)
        if mode in ("visible", "hidden"):
            await resolved.locator.wait_for(state=mode, timeout=timeout_ms)
            return {mode: True, "target": resolved.describe()}

        matched, last_text = await poll_text(resolved.locator, value, timeout_ms)
        if not matched:
            raise HarnessError(
                ErrorCode.TIMEOUT,
                f'Timed out waiting for text "{value}"',
                suggested_next=[DEFAULT_INSPECT_HINT, "Retry command with a larger timeout"],
                details={"expected": value, "actual": last_text, "timeoutMs": timeout_ms},
            )
        return {"textContains": value, "target": resolved.describe()}


async def screenshot(
    ctx: CommandContext,
    path: str,
    target: ResolutionTarget,
    timeout_ms: int,
    full_page: bool = False,
) -> Dict[str, Any]:
    has_target = target.selector is not None or target.is_element_ref
    if full_page and has_target:
        raise HarnessError(
            ErrorCode.INVALID_INPUT,
            "--full-page cannot be combined with selector flags",
        )

    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        if has_target:
            resolved = await ctx.resolve(page, target, timeout_ms)
            await element_screenshot(resolved.locator, path, timeout_ms)
            return {"path": path, "scope": "element", "target": resolved.describe()}
        await page_screenshot(page, path, full_page, timeout_ms)
        return {"path": path, "scope": "full-page" if full_page else "viewport"}


async def evaluate(ctx: CommandContext, script: str) -> Dict[str, Any]:
    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        result = await evaluate_script(page, script)
        logger.debug("evaluate returned %s", type(result).__name__)
        return {"result": result}
