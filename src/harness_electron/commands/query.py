"""``query``: list matches for a selector and mint reusable element ids."""

from __future__ import annotations

from typing import Any, Dict

from harness_electron.adapters.playwright_adapter import query_elements
from harness_electron.commands.base import CommandContext
from harness_electron.domains.selector import CanonicalSelector
from harness_electron.domains.session import ElementReference

DEFAULT_LIMIT = 10
HINT_TEXT_CHARS = 40


def build_hint(item: Dict[str, Any]) -> str:
    tag = item.get("tag") or "unknown"
    if item.get("testId"):
        return f"{tag}[data-testid={item['testId']}]"
    if item.get("ariaLabel"):
        return f"{tag}[aria-label={item['ariaLabel']}]"
    if item.get("text"):
        return f"{tag}:{item['text'][:HINT_TEXT_CHARS]}"
    return tag


async def query(
    ctx: CommandContext,
    selector: CanonicalSelector,
    limit: int = DEFAULT_LIMIT,
    visible_only: bool = False,
) -> Dict[str, Any]:
    session = ctx.load_session()
    async with ctx.open_page(session) as page:
        matches = await query_elements(page, selector, limit)

    kept = [item for item in matches if item["visible"]] if visible_only else matches
    references = [
        ElementReference.for_selector(selector, item["index"], build_hint(item))
        for item in kept
    ]
    element_ids = ctx.store.register_elements(ctx.session_id, references)

    return {
        "selector": selector.to_wire(),
        "count": len(kept),
        "totalMatches": len(matches),
        "limit": limit,
        "visibleOnly": visible_only,
        "elements": [
            {
                "elementId": element_id,
                "index": item["index"],
                "tag": item["tag"],
                "text": item["text"],
                "role": item["role"],
                "ariaLabel": item["ariaLabel"],
                "testId": item["testId"],
                "visible": item["visible"],
            }
            for element_id, item in zip(element_ids, kept)
        ],
    }
