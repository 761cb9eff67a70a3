"""Shared plumbing for command executors."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Callable, Optional, Tuple

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from harness_electron.adapters.cdp_discovery import DevToolsClient
from harness_electron.adapters.playwright_adapter import open_page, read_text
from harness_electron.config import HarnessConfig
from harness_electron.domains.resolver import ResolutionTarget, ResolvedTarget, TargetResolver
from harness_electron.domains.session import SessionRecord, SessionStore
from harness_electron.domains.shared import DEFAULT_SESSION
from harness_electron.domains.timeout import POLL_INTERVAL, Deadline, Milliseconds
from harness_electron.errors import ErrorCode, HarnessError

logger = logging.getLogger(__name__)

PageOpener = Callable[[SessionRecord], AsyncContextManager[Any]]


@dataclass
class CommandContext:
    """Everything a command needs besides its own arguments."""

    config: HarnessConfig
    store: SessionStore
    session_id: str = DEFAULT_SESSION
    page_opener: PageOpener = open_page
    devtools_factory: Callable[..., DevToolsClient] = DevToolsClient
    resolver: TargetResolver = field(init=False)

    def __post_init__(self) -> None:
        self.resolver = TargetResolver(self.store)

    @classmethod
    def from_config(cls, config: HarnessConfig, session_id: str = DEFAULT_SESSION, **kwargs: Any) -> "CommandContext":
        store = SessionStore(config.session_dir, lock_timeout_ms=config.lock_timeout_ms)
        return cls(config=config, store=store, session_id=session_id, **kwargs)

    def load_session(self) -> SessionRecord:
        return self.store.load(self.session_id)

    def open_page(self, session: SessionRecord) -> AsyncContextManager[Any]:
        return self.page_opener(session)

    async def resolve(self, page: Any, target: ResolutionTarget, timeout_ms: int) -> ResolvedTarget:
        return await self.resolver.resolve(page, self.session_id, target, timeout_ms)


def require_value(value: Optional[str], flag: str, mode: str) -> str:
    if not value:
        raise HarnessError(
            ErrorCode.INVALID_INPUT,
            f"{flag} is required for {mode}",
            suggested_next=["harness-electron schema"],
        )
    return value


async def poll_text(locator: Any, expected: str, timeout_ms: int) -> Tuple[bool, Optional[str]]:
    """Re-read ``locator``'s text until it contains ``expected``.

    Returns:
        ``(matched, last_text)``. Reads that time out count as a miss; the
        monotonic deadline decides when to give up.
    """
    deadline = Deadline.after(Milliseconds(timeout_ms))
    last_text: Optional[str] = None
    while True:
        budget = max(deadline.remaining().value, 1)
        try:
            last_text = await read_text(locator, budget)
        except PlaywrightTimeoutError:
            logger.debug("Text read timed out, %s left", deadline.remaining())
        else:
            if expected in last_text:
                return True, last_text
        if deadline.expired():
            return False, last_text
        await asyncio.sleep(min(POLL_INTERVAL, deadline.remaining()).to_seconds())
