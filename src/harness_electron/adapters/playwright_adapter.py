"""Playwright adapter over a DevTools (CDP) endpoint.

Translates sessions and canonical selectors into Playwright objects:

- open_page: scoped attach to the session's browser, always closed on exit
- selector_to_locator / reference_to_locator: selector -> live Locator
- DOM readers (summary, tree, html) and query element info
- page and element screenshots under an operation timeout
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Dict, List, Optional, TypeVar

from playwright.async_api import Browser, Locator, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from harness_electron.domains.selector import CanonicalSelector, SelectorStrategy
from harness_electron.domains.session import ElementReference, SessionRecord
from harness_electron.domains.shared import SessionId
from harness_electron.errors import DEFAULT_INSPECT_HINT, ErrorCode, HarnessError

logger = logging.getLogger(__name__)

T = TypeVar("T")

HTML_MAX_CHARS = 30000
QUERY_TEXT_MAX_CHARS = 180
TREE_TEXT_MAX_CHARS = 80

_SUMMARY_SCRIPT = """() => ({
    title: document.title,
    url: window.location.href,
    buttons: document.querySelectorAll("button").length,
    inputs: document.querySelectorAll("input").length,
    forms: document.querySelectorAll("form").length
})"""

_TREE_SCRIPT = """([limit, textMax]) => {
    let visited = 0;
    const walk = (node) => {
        if (visited >= limit) {
            return null;
        }
        visited += 1;
        const children = Array.from(node.children)
            .map((child) => walk(child))
            .filter((value) => value !== null);
        const out = {tag: node.tagName.toLowerCase(), children};
        if (node.id) out.id = node.id;
        if (typeof node.className === "string" && node.className) out.class = node.className;
        const text = (node.textContent || "").trim().slice(0, textMax);
        if (text) out.text = text;
        return out;
    };
    return walk(document.documentElement);
}"""

_ELEMENT_INFO_SCRIPT = """(el, textMax) => ({
    tag: el.tagName.toLowerCase(),
    text: (el.textContent || "").replace(/\\s+/g, " ").trim().slice(0, textMax),
    role: el.getAttribute("role"),
    ariaLabel: el.getAttribute("aria-label"),
    testId: el.getAttribute("data-testid")
})"""

_EVALUATE_SCRIPT = "(script) => eval(script)"


def reconnect_hint(session: SessionRecord) -> str:
    base = f"harness-electron connect --host {session.host} --port {session.port}"
    if SessionId(session.id).is_default:
        return base
    return f"{base} --session {session.id}"


# ----------------------------------------------------------------------
# Browser / page scope
# ----------------------------------------------------------------------


async def attach_browser(playwright: Any, session: SessionRecord) -> Browser:
    """Connect to the session's browser over CDP.

    Raises:
        HarnessError: CONNECT_FAILED (retryable) when the endpoint refuses.
    """
    try:
        return await playwright.chromium.connect_over_cdp(session.ws_endpoint)
    except Exception as exc:
        raise HarnessError(
            ErrorCode.CONNECT_FAILED,
            f"Failed to connect via CDP endpoint {session.ws_endpoint}: {exc}",
            suggested_next=[reconnect_hint(session)],
            details={"wsEndpoint": session.ws_endpoint},
        ) from exc


def resolve_page(browser: Browser, session: SessionRecord) -> Page:
    """Pick the session's page by stored URL, else the first open page.

    Raises:
        HarnessError: TARGET_NOT_FOUND when the browser has no pages.
    """
    pages = [page for context in browser.contexts for page in context.pages]
    if session.target_url:
        for page in pages:
            if page.url == session.target_url:
                return page
    if not pages:
        raise HarnessError(
            ErrorCode.TARGET_NOT_FOUND,
            "No page found from CDP browser contexts",
            suggested_next=["Open a BrowserWindow and retry", reconnect_hint(session)],
        )
    logger.debug("Stored target URL %r not open, using first page", session.target_url)
    return pages[0]


@contextlib.asynccontextmanager
async def open_page(session: SessionRecord) -> AsyncIterator[Page]:
    """Attach to the session's browser and yield its page.

    The CDP connection is closed when the block exits, on success or error.
    Closing a CDP-attached browser only drops the connection; the
    application keeps running.
    """
    async with async_playwright() as playwright:
        browser = await attach_browser(playwright, session)
        try:
            yield resolve_page(browser, session)
        finally:
            await browser.close()


# ----------------------------------------------------------------------
# Locators
# ----------------------------------------------------------------------


def selector_to_locator(page: Page, selector: CanonicalSelector) -> Locator:
    strategy = selector.strategy
    if strategy is SelectorStrategy.CSS:
        return page.locator(selector.value)
    if strategy is SelectorStrategy.XPATH:
        return page.locator(f"xpath={selector.value}")
    if strategy is SelectorStrategy.TEXT:
        return page.get_by_text(selector.value)
    if strategy is SelectorStrategy.ROLE:
        if selector.name:
            return page.get_by_role(selector.value, name=selector.name)
        return page.get_by_role(selector.value)
    return page.get_by_test_id(selector.value)


def reference_to_locator(page: Page, reference: ElementReference) -> Locator:
    return selector_to_locator(page, reference.canonical_selector()).nth(reference.index)


# ----------------------------------------------------------------------
# Readers
# ----------------------------------------------------------------------


async def dom_summary(page: Page) -> Dict[str, Any]:
    return await page.evaluate(_SUMMARY_SCRIPT)


async def dom_tree(page: Page, max_nodes: int) -> Any:
    return await page.evaluate(_TREE_SCRIPT, [max_nodes, TREE_TEXT_MAX_CHARS])


async def dom_html(page: Page, max_chars: int = HTML_MAX_CHARS) -> str:
    html = await page.evaluate("() => document.documentElement.outerHTML")
    return (html or "")[:max_chars]


async def evaluate_script(page: Page, script: str) -> Any:
    return await page.evaluate(_EVALUATE_SCRIPT, script)


async def element_info(locator: Locator) -> Dict[str, Any]:
    """Tag, collapsed text, role, aria-label, data-testid and visibility.

    An element that detaches between counting and inspection is reported as
    an invisible ``unknown`` element rather than failing the whole query.
    """
    try:
        visible = await locator.is_visible()
    except PlaywrightError as exc:
        logger.debug("Visibility check failed: %s", exc.message)
        visible = False
    try:
        info = await locator.evaluate(_ELEMENT_INFO_SCRIPT, QUERY_TEXT_MAX_CHARS)
    except PlaywrightError as exc:
        logger.debug("Element inspection failed: %s", exc.message)
        info = {}
    return {
        "tag": info.get("tag") or "unknown",
        "text": info.get("text") or "",
        "role": info.get("role"),
        "ariaLabel": info.get("ariaLabel"),
        "testId": info.get("testId"),
        "visible": bool(visible),
    }


async def query_elements(
    page: Page, selector: CanonicalSelector, limit: int
) -> List[Dict[str, Any]]:
    locator = selector_to_locator(page, selector)
    count = await locator.count()
    results: List[Dict[str, Any]] = []
    for index in range(min(count, limit)):
        info = await element_info(locator.nth(index))
        results.append({"index": index, **info})
    return results


async def wait_attached(locator: Locator, timeout_ms: int) -> bool:
    """Wait for ``locator`` to attach; False if it did not within the budget."""
    try:
        await locator.wait_for(state="attached", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        return False
    return True


async def read_text(locator: Locator, timeout_ms: int) -> str:
    return (await locator.text_content(timeout=timeout_ms)) or ""


# ----------------------------------------------------------------------
# Operation timeout and screenshots
# ----------------------------------------------------------------------


def _consume_late_outcome(task: "asyncio.Task[Any]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned operation finished with %r", exc)


async def with_operation_timeout(
    operation: Awaitable[T], timeout_ms: int, phase: str
) -> T:
    """Await ``operation`` for at most ``timeout_ms``.

    On expiry the operation is abandoned rather than cancelled: it keeps
    running, and its late result or exception is consumed and discarded.

    Raises:
        HarnessError: TIMEOUT with ``details.phase``.
    """
    task = asyncio.ensure_future(operation)
    done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000.0)
    if task in done:
        return task.result()
    task.add_done_callback(_consume_late_outcome)
    raise HarnessError(
        ErrorCode.TIMEOUT,
        f"{phase} did not finish within {timeout_ms}ms",
        suggested_next=[DEFAULT_INSPECT_HINT, "Retry command with a larger timeout"],
        details={"phase": phase, "timeoutMs": timeout_ms},
    )


def _ensure_parent(path: str) -> None:
    Path(path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


async def page_screenshot(
    page: Page, path: str, full_page: bool, timeout_ms: int
) -> None:
    _ensure_parent(path)
    await with_operation_timeout(
        page.screenshot(path=path, full_page=full_page, timeout=timeout_ms),
        timeout_ms,
        "page-screenshot",
    )


async def element_screenshot(locator: Locator, path: str, timeout_ms: int) -> None:
    _ensure_parent(path)
    await with_operation_timeout(
        locator.wait_for(state="visible", timeout=timeout_ms),
        timeout_ms,
        "element-visible",
    )
    await with_operation_timeout(
        locator.screenshot(path=path, timeout=timeout_ms),
        timeout_ms,
        "element-screenshot",
    )
