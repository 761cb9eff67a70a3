"""``capabilities``: high-level description of what this CLI supports."""

from __future__ import annotations

from typing import Any, Dict

from harness_electron import PACKAGE_NAME
from harness_electron.commands.assertions import ASSERT_KINDS
from harness_electron.commands.base import CommandContext
from harness_electron.domains.selector import SelectorStrategy
from harness_electron.domains.shared import DEFAULT_SESSION
from harness_electron.envelope import PROTOCOL_VERSION

COMMANDS = (
    "connect",
    "dom",
    "query",
    "type",
    "click",
    "wait",
    "screenshot",
    "evaluate",
    "assert",
    "disconnect",
    "sessions list",
    "sessions prune",
    "capabilities",
    "schema",
    "version",
)


async def capabilities(ctx: CommandContext) -> Dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "package": PACKAGE_NAME,
        "commands": list(COMMANDS),
        "selectors": [strategy.value for strategy in SelectorStrategy] + ["element-id"],
        "assertions": list(ASSERT_KINDS),
        "defaults": {
            "timeoutMs": ctx.config.timeout_ms,
            "screenshotTimeoutMs": ctx.config.screenshot_timeout_ms,
            "sessionPath": str(ctx.config.session_dir),
            "session": DEFAULT_SESSION,
        },
    }
