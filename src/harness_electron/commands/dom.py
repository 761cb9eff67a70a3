"""``dom``: read the bound page's DOM as a summary, a node tree, or HTML."""

from __future__ import annotations

from typing import Any

from harness_electron.adapters.playwright_adapter import dom_html, dom_summary, dom_tree
from harness_electron.commands.base import CommandContext
from harness_electron.errors import ErrorCode, HarnessError

DOM_FORMATS = ("summary", "tree", "html")
DEFAULT_MAX_NODES = 300


async def dom(ctx: CommandContext, format: str = "summary", max_nodes: int = DEFAULT_MAX_NODES) -> Any:
    if format not in DOM_FORMATS:
        raise HarnessError(
            ErrorCode.INVALID_INPUT,
            f"--format must be {'|'.join(DOM_FORMATS)}",
            details={"format": format},
        )
    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        if format == "summary":
            return await dom_summary(page)
        if format == "tree":
            return await dom_tree(page, max_nodes)
        return {"html": await dom_html(page)}
