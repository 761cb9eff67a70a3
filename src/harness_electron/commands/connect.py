"""``connect``: bind a session to a DevTools endpoint and one page target."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from harness_electron.adapters.cdp_discovery import pick_target
from harness_electron.commands.base import CommandContext

logger = logging.getLogger(__name__)


async def connect(
    ctx: CommandContext,
    port: int,
    host: str = "127.0.0.1",
    window_title: Optional[str] = None,
    url_contains: Optional[str] = None,
) -> Dict[str, Any]:
    client = ctx.devtools_factory(host, port, timeout=ctx.config.http_timeout)
    version = client.version()
    target = pick_target(client.targets(), window_title, url_contains)
    logger.info("Binding session %s to %s (%s)", ctx.session_id, target.url, target.id)
    record = ctx.store.save(
        ctx.session_id,
        {
            "host": host,
            "port": port,
            "wsEndpoint": version.web_socket_debugger_url,
            "targetId": target.id,
            "targetUrl": target.url,
            "targetTitle": target.title,
        },
    )
    return {
        "session": record.to_wire(),
        "browser": version.browser,
        "protocol": version.protocol_version,
        "target": target.to_dict(),
    }
