"""``schema``: machine-readable description of every command and flag."""

from __future__ import annotations

from typing import Any, Dict, List

from harness_electron import PACKAGE_NAME
from harness_electron.commands.assertions import ASSERT_KINDS
from harness_electron.commands.base import CommandContext
from harness_electron.commands.actions import WAIT_MODES
from harness_electron.commands.dom import DEFAULT_MAX_NODES, DOM_FORMATS
from harness_electron.commands.query import DEFAULT_LIMIT
from harness_electron.domains.shared import DEFAULT_SESSION
from harness_electron.envelope import PROTOCOL_VERSION


def _option(name: str, type_: str, description: str, **extra: Any) -> Dict[str, Any]:
    option: Dict[str, Any] = {"name": name, "type": type_, "description": description}
    option.update(extra)
    return option


DISCOVERY_SELECTOR_OPTIONS: List[Dict[str, Any]] = [
    _option("--css", "string", "CSS selector", repeatable=True),
    _option("--xpath", "string", "XPath selector", repeatable=True),
    _option("--text", "string", "text selector", repeatable=True),
    _option("--role", "string", "ARIA role selector", repeatable=True),
    _option("--testid", "string", "data-testid selector", repeatable=True),
    _option("--name", "string", "accessible name filter for role", repeatable=True),
]

TARGET_SELECTOR_OPTIONS: List[Dict[str, Any]] = DISCOVERY_SELECTOR_OPTIONS + [
    _option("--element-id", "string", "element id returned by query"),
    _option("--index", "number", "0-based selector match index", default=0),
    _option("--strict-single", "boolean", "require exactly one selector match", default=False),
]


def _timeout(default: int) -> Dict[str, Any]:
    return _option("--timeout", "number", "timeout milliseconds", default=default)


def build_schema(timeout_ms: int = 5000, screenshot_timeout_ms: int = 15000) -> Dict[str, Any]:
    commands = [
        {
            "name": "connect",
            "summary": "connect to an Electron CDP endpoint and persist a session",
            "options": [
                _option("--port", "number", "CDP port", required=True),
                _option("--host", "string", "CDP host", default="127.0.0.1"),
                _option("--window-title", "string", "target title filter", repeatable=True),
                _option("--url-contains", "string", "target URL filter", repeatable=True),
            ],
        },
        {
            "name": "dom",
            "summary": "read renderer DOM in summary/tree/html formats",
            "options": [
                _option("--format", "string", "output mode", default="summary", enum=list(DOM_FORMATS)),
                _option("--max-nodes", "number", "tree node cap", default=DEFAULT_MAX_NODES),
            ],
        },
        {
            "name": "query",
            "summary": "find matching elements and persist reusable element ids",
            "options": [
                _option("--limit", "number", "maximum matches to return", default=DEFAULT_LIMIT),
                _option("--visible-only", "boolean", "return visible matches only", default=False),
            ]
            + DISCOVERY_SELECTOR_OPTIONS,
        },
        {
            "name": "type",
            "summary": "type text into a matched element",
            "options": [
                _option("--value", "string", "text to type", required=True, repeatable=True),
                _option("--clear", "boolean", "clear before typing", default=False),
                _timeout(timeout_ms),
            ]
            + TARGET_SELECTOR_OPTIONS,
        },
        {
            "name": "click",
            "summary": "click a matched element",
            "options": [_timeout(timeout_ms)] + TARGET_SELECTOR_OPTIONS,
        },
        {
            "name": "wait",
            "summary": "wait for visibility, text, or URL conditions",
            "options": [
                _option("--for", "string", "wait mode", required=True, enum=list(WAIT_MODES)),
                _option("--value", "string", "expected URL/text substring", repeatable=True),
                _timeout(timeout_ms),
            ]
            + TARGET_SELECTOR_OPTIONS,
        },
        {
            "name": "screenshot",
            "summary": "capture page or element screenshots",
            "options": [
                _option("--path", "string", "output path", required=True),
                _option("--full-page", "boolean", "capture full document", default=False),
                _timeout(screenshot_timeout_ms),
            ]
            + TARGET_SELECTOR_OPTIONS,
        },
        {
            "name": "evaluate",
            "summary": "evaluate JavaScript in page context",
            "options": [
                _option("--script", "string", "JavaScript expression", required=True, repeatable=True),
            ],
        },
        {
            "name": "assert",
            "summary": "assert DOM or URL state",
            "options": [
                _option("--kind", "string", "assertion kind", required=True, enum=list(ASSERT_KINDS)),
                _option("--expected", "string", "expected text/url substring", repeatable=True),
                _timeout(timeout_ms),
            ]
            + TARGET_SELECTOR_OPTIONS,
        },
        {"name": "disconnect", "summary": "remove one session record", "options": []},
        {"name": "sessions list", "summary": "list saved sessions", "options": []},
        {"name": "sessions prune", "summary": "remove one or all sessions", "options": []},
        {"name": "capabilities", "summary": "return high-level supported features", "options": []},
        {"name": "schema", "summary": "return machine-readable command/flag schema", "options": []},
        {"name": "version", "summary": "return package metadata and current package version", "options": []},
    ]

    session_applies_to = [
        "connect", "dom", "query", "type", "click", "wait",
        "screenshot", "evaluate", "assert", "disconnect", "sessions prune",
    ]

    return {
        "protocolVersion": PROTOCOL_VERSION,
        "package": PACKAGE_NAME,
        "defaults": {"session": DEFAULT_SESSION, "timeoutMs": timeout_ms},
        "globalOptionalOptions": [
            _option(
                "--session",
                "string",
                "optional advanced session override; omit for default flow",
                default=DEFAULT_SESSION,
                advanced=True,
                appliesTo=session_applies_to,
            ),
            _option("--verbose", "boolean", "debug logging on stderr", default=False, advanced=True),
        ],
        "selectorRules": {
            "mutuallyExclusive": ["--css", "--xpath", "--text", "--role", "--testid", "--element-id"],
            "roleNameOnlyWithRole": True,
            "strictSingleExcludesIndex": True,
        },
        "commands": commands,
    }


async def schema(ctx: CommandContext) -> Dict[str, Any]:
    return build_schema(ctx.config.timeout_ms, ctx.config.screenshot_timeout_ms)
