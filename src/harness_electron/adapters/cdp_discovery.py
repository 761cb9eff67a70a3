"""DevTools HTTP discovery client.

Reads ``/json/version`` and ``/json/list`` from a remote-debugging port and
picks the page target a session binds to.
"""

from __future__ import annotations

import http.client
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from harness_electron.errors import ErrorCode, HarnessError

logger = logging.getLogger(__name__)

START_APP_HINT = "Ensure Electron is running with --remote-debugging-port"


@dataclass(frozen=True)
class DevToolsVersion:
    web_socket_debugger_url: str
    browser: str
    protocol_version: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "DevToolsVersion":
        ws_url = payload.get("webSocketDebuggerUrl")
        if not isinstance(ws_url, str) or not ws_url:
            raise HarnessError(
                ErrorCode.CONNECT_FAILED,
                "DevTools endpoint did not report a webSocketDebuggerUrl",
                suggested_next=[START_APP_HINT],
                details={"response": payload},
            )
        return cls(
            web_socket_debugger_url=ws_url,
            browser=str(payload.get("Browser", "")),
            protocol_version=str(payload.get("Protocol-Version", "")),
        )


@dataclass(frozen=True)
class DevToolsTarget:
    id: str
    type: str
    title: str
    url: str
    web_socket_debugger_url: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "DevToolsTarget":
        return cls(
            id=str(payload.get("id", "")),
            type=str(payload.get("type", "")),
            title=str(payload.get("title", "")),
            url=str(payload.get("url", "")),
            web_socket_debugger_url=payload.get("webSocketDebuggerUrl"),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "title": self.title, "url": self.url}


class DevToolsClient:
    """Minimal client for the DevTools HTTP endpoints of one host/port."""

    def __init__(self, host: str = "127.0.0.1", port: int = 9222, timeout: float = 10) -> None:
        self.host = host
        self.port = int(port)
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            conn = http.client.HTTPConnection(self.host, self.port, timeout=self.timeout)
            try:
                conn.request("GET", path, headers={"Accept": "application/json"})
                resp = conn.getresponse()
                status = resp.status
                data = resp.read()
            finally:
                conn.close()
        except (OSError, http.client.HTTPException) as exc:
            raise HarnessError(
                ErrorCode.CONNECT_FAILED,
                f"Failed to fetch {url}: {exc}",
                suggested_next=[START_APP_HINT],
                details={"url": url},
            ) from exc
        if status != 200:
            raise HarnessError(
                ErrorCode.CONNECT_FAILED,
                f"Failed to fetch {url}: {status}",
                suggested_next=[START_APP_HINT],
                details={"url": url, "status": status},
            )
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise HarnessError(
                ErrorCode.CONNECT_FAILED,
                f"Invalid JSON from {url}",
                suggested_next=[START_APP_HINT],
                details={"url": url},
            ) from exc

    def version(self) -> DevToolsVersion:
        payload = self._get("/json/version")
        if not isinstance(payload, dict):
            raise HarnessError(
                ErrorCode.CONNECT_FAILED,
                "Unexpected /json/version response",
                suggested_next=[START_APP_HINT],
            )
        return DevToolsVersion.from_json(payload)

    def targets(self) -> List[DevToolsTarget]:
        payload = self._get("/json/list")
        if not isinstance(payload, list):
            raise HarnessError(
                ErrorCode.CONNECT_FAILED,
                "Unexpected /json/list response",
                suggested_next=[START_APP_HINT],
            )
        return [DevToolsTarget.from_json(item) for item in payload if isinstance(item, dict)]


def pick_target(
    targets: List[DevToolsTarget],
    title_contains: Optional[str] = None,
    url_contains: Optional[str] = None,
) -> DevToolsTarget:
    """Return the first page target matching both substring filters.

    Raises:
        HarnessError: TARGET_NOT_FOUND when there are no pages, or none match.
    """
    pages = [target for target in targets if target.type == "page"]
    if not pages:
        raise HarnessError(
            ErrorCode.TARGET_NOT_FOUND,
            "No page target found in Electron instance",
            suggested_next=["Open a BrowserWindow and retry connect"],
        )
    matches = [
        target
        for target in pages
        if (not title_contains or title_contains in target.title)
        and (not url_contains or url_contains in target.url)
    ]
    if not matches:
        raise HarnessError(
            ErrorCode.TARGET_NOT_FOUND,
            "No page target matched window-title/url filters",
            suggested_next=[
                "Run `harness-electron connect --port <port>` without filters to inspect targets"
            ],
            details={
                "windowTitle": title_contains,
                "urlContains": url_contains,
                "pages": [target.to_dict() for target in pages],
            },
        )
    return matches[0]
