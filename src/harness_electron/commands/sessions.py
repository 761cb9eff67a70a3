"""Session bookkeeping verbs: ``disconnect``, ``sessions list``, ``sessions prune``."""

from __future__ import annotations

from typing import Any, Dict, Optional

from harness_electron.commands.base import CommandContext


async def disconnect(ctx: CommandContext) -> Dict[str, Any]:
    return {"removed": ctx.store.delete(ctx.session_id), "session": ctx.session_id}


async def list_sessions(ctx: CommandContext) -> Dict[str, Any]:
    records = ctx.store.list()
    return {"count": len(records), "sessions": [record.to_summary() for record in records]}


async def prune_sessions(ctx: CommandContext, session_id: Optional[str] = None) -> Dict[str, Any]:
    return {"removed": ctx.store.prune(session_id), "scope": session_id or "all"}
