"""Command-line entry point.

Every invocation prints exactly one JSON envelope on stdout and exits with
the code derived from the envelope's error code (0 on success).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TextIO, Tuple

from harness_electron.commands import (
    actions,
    assertions,
    capabilities,
    connect,
    dom,
    query,
    schema,
    sessions,
    version,
)
from harness_electron.commands.base import CommandContext
from harness_electron.config import HarnessConfig, load_config
from harness_electron.domains.resolver import ResolutionTarget
from harness_electron.domains.selector import normalize_optional, normalize_required
from harness_electron.domains.shared import DEFAULT_SESSION
from harness_electron.envelope import emit, fail, ok
from harness_electron.errors import ErrorCode, HarnessError, normalize_error
from harness_electron.logging_setup import configure_logging

logger = logging.getLogger(__name__)

Handler = Callable[[CommandContext, argparse.Namespace], Awaitable[Any]]

SELECTOR_FLAGS = ("css", "xpath", "text", "role", "testid", "name")


class HarnessArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors as INVALID_INPUT."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise HarnessError(
            ErrorCode.INVALID_INPUT,
            message,
            suggested_next=["harness-electron schema", f"{self.prog} --help"],
        )


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value!r}")
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value!r}")
    return parsed


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value!r}")
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value!r}")
    return parsed


def _joined(value: Optional[Sequence[str]]) -> Optional[str]:
    if value is None:
        return None
    return " ".join(value)


# ----------------------------------------------------------------------
# Handlers: argparse namespace -> command call
# ----------------------------------------------------------------------


def _selector_flags(args: argparse.Namespace) -> Dict[str, Any]:
    return {flag: getattr(args, flag, None) for flag in SELECTOR_FLAGS}


def _target(args: argparse.Namespace) -> ResolutionTarget:
    return ResolutionTarget(
        selector=normalize_optional(_selector_flags(args)),
        element_id=args.element_id,
        index=args.index,
        strict_single=args.strict_single,
    )


def _timeout(ctx: CommandContext, args: argparse.Namespace) -> int:
    return args.timeout if args.timeout is not None else ctx.config.timeout_ms


async def _run_connect(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await connect.connect(
        ctx,
        port=args.port,
        host=args.host,
        window_title=_joined(args.window_title),
        url_contains=_joined(args.url_contains),
    )


async def _run_dom(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await dom.dom(ctx, format=args.format, max_nodes=args.max_nodes)


async def _run_query(ctx: CommandContext, args: argparse.Namespace) -> Any:
    selector = normalize_required(_selector_flags(args))
    return await query.query(ctx, selector, limit=args.limit, visible_only=args.visible_only)


async def _run_type(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await actions.type_text(
        ctx, _target(args), _joined(args.value), _timeout(ctx, args), clear=args.clear
    )


async def _run_click(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await actions.click(ctx, _target(args), _timeout(ctx, args))


async def _run_wait(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await actions.wait(
        ctx, args.mode, _target(args), _timeout(ctx, args), value=_joined(args.value)
    )


async def _run_screenshot(ctx: CommandContext, args: argparse.Namespace) -> Any:
    timeout_ms = args.timeout if args.timeout is not None else ctx.config.screenshot_timeout_ms
    return await actions.screenshot(
        ctx, args.path, _target(args), timeout_ms, full_page=args.full_page
    )


async def _run_evaluate(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await actions.evaluate(ctx, _joined(args.script))


async def _run_assert(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await assertions.assert_state(
        ctx, args.kind, _target(args), _timeout(ctx, args), expected=_joined(args.expected)
    )


async def _run_disconnect(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await sessions.disconnect(ctx)


async def _run_sessions_list(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await sessions.list_sessions(ctx)


async def _run_sessions_prune(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await sessions.prune_sessions(ctx, args.session)


async def _run_capabilities(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await capabilities.capabilities(ctx)


async def _run_schema(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await schema.schema(ctx)


async def _run_version(ctx: CommandContext, args: argparse.Namespace) -> Any:
    return await version.version(ctx)


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


def _add_session(parser: argparse.ArgumentParser, default: Optional[str] = DEFAULT_SESSION) -> None:
    parser.add_argument("--session", dest="session", default=default, help="session id (default: %(default)s)")


def _add_selector_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("selector")
    group.add_argument("--css", nargs="+", help="CSS selector")
    group.add_argument("--xpath", nargs="+", help="XPath selector")
    group.add_argument("--text", nargs="+", help="text selector")
    group.add_argument("--role", nargs="+", help="ARIA role selector")
    group.add_argument("--testid", nargs="+", help="data-testid selector")
    group.add_argument("--name", nargs="+", help="accessible name filter for --role")


def _add_target_flags(parser: argparse.ArgumentParser) -> None:
    _add_selector_flags(parser)
    group = parser.add_argument_group("target")
    group.add_argument("--element-id", dest="element_id", help="element id returned by query")
    group.add_argument("--index", type=_non_negative_int, default=0, help="0-based selector match index")
    group.add_argument(
        "--strict-single",
        dest="strict_single",
        action="store_true",
        help="require exactly one selector match",
    )


def _add_timeout(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--timeout", type=_positive_int, default=None, help="timeout in milliseconds")


def _build_arg_parser() -> HarnessArgumentParser:
    common = HarnessArgumentParser(add_help=False)
    common.add_argument(
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Log debug diagnostics to stderr.",
    )

    parser = HarnessArgumentParser(
        prog="harness-electron",
        description="Drive Electron windows over the Chrome DevTools Protocol. "
        "Every command prints one JSON envelope.",
        epilog="Values that begin with '-' must be attached with '=', for example "
        "--value=-5. --help prints plain usage text and exits 0 without an envelope.",
        parents=[common],
    )
    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    def command(name: str, handler: Handler, help_text: str) -> argparse.ArgumentParser:
        cmd = sub.add_parser(name, help=help_text, parents=[common])
        cmd.set_defaults(handler=handler, command_name=name)
        return cmd

    cmd = command("connect", _run_connect, "connect to a CDP endpoint and persist a session")
    cmd.add_argument("--port", type=_positive_int, required=True, help="CDP port")
    cmd.add_argument("--host", default="127.0.0.1", help="CDP host (default: %(default)s)")
    cmd.add_argument("--window-title", dest="window_title", nargs="+", help="target title contains filter")
    cmd.add_argument("--url-contains", dest="url_contains", nargs="+", help="target URL contains filter")
    _add_session(cmd)

    cmd = command("dom", _run_dom, "read renderer DOM in summary/tree/html formats")
    cmd.add_argument("--format", choices=dom.DOM_FORMATS, default="summary")
    cmd.add_argument("--max-nodes", dest="max_nodes", type=_positive_int, default=dom.DEFAULT_MAX_NODES)
    _add_session(cmd)

    cmd = command("query", _run_query, "find matching elements and persist element ids")
    cmd.add_argument("--limit", type=_positive_int, default=query.DEFAULT_LIMIT)
    cmd.add_argument("--visible-only", dest="visible_only", action="store_true")
    _add_selector_flags(cmd)
    _add_session(cmd)

    cmd = command("type", _run_type, "type text into a matched element")
    cmd.add_argument("--value", nargs="+", required=True, help="text to type")
    cmd.add_argument("--clear", action="store_true", help="clear before typing")
    _add_timeout(cmd)
    _add_target_flags(cmd)
    _add_session(cmd)

    cmd = command("click", _run_click, "click a matched element")
    _add_timeout(cmd)
    _add_target_flags(cmd)
    _add_session(cmd)

    cmd = command("wait", _run_wait, "wait for visibility, text, or URL conditions")
    cmd.add_argument("--for", dest="mode", choices=actions.WAIT_MODES, required=True)
    cmd.add_argument("--value", nargs="+", help="expected URL/text substring")
    _add_timeout(cmd)
    _add_target_flags(cmd)
    _add_session(cmd)

    cmd = command("screenshot", _run_screenshot, "capture page or element screenshots")
    cmd.add_argument("--path", required=True, help="output path")
    cmd.add_argument("--full-page", dest="full_page", action="store_true")
    _add_timeout(cmd)
    _add_target_flags(cmd)
    _add_session(cmd)

    cmd = command("evaluate", _run_evaluate, "evaluate JavaScript in page context")
    cmd.add_argument("--script", nargs="+", required=True, help="JavaScript expression")
    _add_session(cmd)

    cmd = command("assert", _run_assert, "assert DOM or URL state")
    cmd.add_argument("--kind", choices=assertions.ASSERT_KINDS, required=True)
    cmd.add_argument("--expected", nargs="+", help="expected text/url substring")
    _add_timeout(cmd)
    _add_target_flags(cmd)
    _add_session(cmd)

    cmd = command("disconnect", _run_disconnect, "remove one session record")
    _add_session(cmd)

    sessions_cmd = sub.add_parser("sessions", help="list or prune saved sessions", parents=[common])
    sessions_sub = sessions_cmd.add_subparsers(dest="sessions_command", metavar="action")
    sessions_sub.required = True
    listing = sessions_sub.add_parser("list", help="list saved sessions", parents=[common])
    listing.set_defaults(handler=_run_sessions_list, command_name="sessions list", session=None)
    prune = sessions_sub.add_parser("prune", help="remove one or all sessions", parents=[common])
    prune.set_defaults(handler=_run_sessions_prune, command_name="sessions prune")
    _add_session(prune, default=None)

    command("capabilities", _run_capabilities, "return high-level supported features")
    command("schema", _run_schema, "return machine-readable command/flag schema")
    command("version", _run_version, "return package metadata")

    return parser


# ----------------------------------------------------------------------
# Run loop
# ----------------------------------------------------------------------


def _peek_command(argv: Sequence[str]) -> Tuple[str, str]:
    """Best-effort command name and session for envelopes of unparsable input."""
    words = [word for word in argv if not word.startswith("-")]
    command = words[0] if words else "unknown"
    if command == "sessions" and len(words) > 1:
        command = f"sessions {words[1]}"
    session = DEFAULT_SESSION
    for position, word in enumerate(argv):
        if word == "--session" and position + 1 < len(argv):
            session = argv[position + 1]
        elif word.startswith("--session="):
            session = word.split("=", 1)[1]
    return command, session


def run_command(
    args: argparse.Namespace,
    config: HarnessConfig,
    stream: Optional[TextIO] = None,
    **context_overrides: Any,
) -> int:
    """Execute a parsed command and emit its envelope. Returns the exit code."""
    command_name: str = args.command_name
    session_id: str = getattr(args, "session", None) or DEFAULT_SESSION
    try:
        problems = config.validate()
        if problems:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                "Invalid configuration: " + "; ".join(problems),
                details={"problems": problems},
            )
        ctx = CommandContext.from_config(config, session_id=session_id, **context_overrides)
        data = asyncio.run(args.handler(ctx, args))
    except Exception as exc:
        error = normalize_error(exc)
        logger.debug("%s failed with %s: %s", command_name, error.code.value, error.message)
        emit(fail(command_name, session_id, error), stream)
        return error.exit_code
    emit(ok(command_name, session_id, data), stream)
    return 0


def main(
    argv: Optional[List[str]] = None,
    stream: Optional[TextIO] = None,
    **context_overrides: Any,
) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except HarnessError as exc:
        command_name, session_id = _peek_command(argv)
        emit(fail(command_name, session_id, exc), stream)
        return exc.exit_code

    config = load_config()
    configure_logging(config.log_level, verbose=getattr(args, "verbose", False))
    return run_command(args, config, stream, **context_overrides)


if __name__ == "__main__":
    sys.exit(main())
