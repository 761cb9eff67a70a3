"""Target resolution: selector or element reference -> disambiguated locator.

Three policies share one path:

- strict-single: the selector must match exactly one element
- indexed: accept ambiguity and pick the element at ``index``
- loose: take the first match and let the caller's next wait surface absence

The counted policies wait for the relevant match to attach, then decide from
the live count. A wait that runs out of budget is not itself a failure.
"""

from __future__ import annotations

import logging

from harness_electron.adapters.playwright_adapter import (
    reference_to_locator,
    selector_to_locator,
    wait_attached,
)
from harness_electron.domains.resolver.value_objects import ResolutionTarget, ResolvedTarget
from harness_electron.domains.session import SessionStore
from harness_electron.errors import ErrorCode, HarnessError

logger = logging.getLogger(__name__)


class TargetResolver:
    """Resolves a :class:`ResolutionTarget` against a live page."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    async def resolve(
        self,
        page,
        session_id: str,
        target: ResolutionTarget,
        timeout_ms: int,
    ) -> ResolvedTarget:
        if target.is_element_ref:
            # Stored references are trusted; the match count is not re-checked.
            reference = self.store.load_element(session_id, target.element_id)
            return ResolvedTarget(
                locator=reference_to_locator(page, reference),
                strategy="element-id",
                index=reference.index,
                element_id=target.element_id,
            )

        if target.selector is None:
            raise HarnessError(
                ErrorCode.INVALID_SELECTOR,
                "A selector or --element-id is required",
                suggested_next=["harness-electron schema"],
            )

        selector = target.selector
        locator = selector_to_locator(page, selector)

        if target.strict_single:
            await wait_attached(locator.first, timeout_ms)
            count = await locator.count()
            if count != 1:
                raise HarnessError(
                    ErrorCode.INVALID_SELECTOR,
                    f"Selector matched {count} elements; --strict-single requires exactly 1",
                    suggested_next=[
                        "Refine the selector",
                        "Use --index to pick one match",
                        "harness-electron query with the same selector",
                    ],
                    details={"count": count, "selector": selector.to_wire()},
                )
            return ResolvedTarget(locator=locator.first, strategy="selector", index=0, match_count=count)

        if target.index > 0:
            await wait_attached(locator.nth(target.index), timeout_ms)
            count = await locator.count()
            if count <= target.index:
                raise HarnessError(
                    ErrorCode.INVALID_SELECTOR,
                    f"index out of range: selector matched {count} elements, index {target.index}",
                    suggested_next=["harness-electron query with the same selector"],
                    details={"count": count, "index": target.index, "selector": selector.to_wire()},
                )
            logger.debug("Resolved %s at index %d of %d", selector, target.index, count)
            return ResolvedTarget(
                locator=locator.nth(target.index),
                strategy="selector",
                index=target.index,
                match_count=count,
            )

        return ResolvedTarget(locator=locator.first, strategy="selector", index=0)
