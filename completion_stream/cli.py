"""Command line entry point: ``python -m completion_stream``.

Runs a single streamed completion using the ``models.<mode>`` block of the
active configuration and prints the result as JSON. ``--check`` lists the
endpoint's models instead of completing.

Exit codes: ``0`` success, ``1`` completion or health check failure,
``2`` argument or configuration problems.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from .base.errors import CompletionError
from .base.health import check_endpoint
from .base.logging import configure_logger
from .base.models import ProviderConfig
from .config import Settings
from .context import CompletionContext
from .requests import build_chat_request_body, build_tool_request_body

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI parser; performs no I/O."""
    p = argparse.ArgumentParser(
        prog="completion-stream", description="Run one streamed completion against an OpenAI-compatible endpoint"
    )
    p.add_argument("prompt", nargs="?", default=None, help="User message to send")
    p.add_argument("--system", default=DEFAULT_SYSTEM_PROMPT, help="System prompt text")
    p.add_argument("--context", default=None, help="Optional context turn sent before the message")
    p.add_argument("--user", default="", help="Display name prefixed to the user turn")
    p.add_argument("--mode", choices=("chat", "tool", "summary"), default="chat")
    p.add_argument("--structured", action="store_true", help="Decode the answer as JSON")
    p.add_argument("--check", action="store_true", help="List endpoint models instead of completing")
    p.add_argument("--config", default=None, help="JSON or YAML configuration file")
    p.add_argument("--log-level", default=None)
    return p


def _build_body(args: argparse.Namespace, settings: Settings, config: ProviderConfig) -> Dict[str, Any]:
    if args.mode == "chat":
        return build_chat_request_body(args.system, args.prompt, settings, context=args.context, user=args.user)
    return build_tool_request_body(args.system, config.model, args.prompt, settings)


async def _run(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    config = ProviderConfig.from_settings(settings, args.mode)
    async with CompletionContext(settings) as ctx:
        if args.check:
            models: List[str] = await check_endpoint(ctx.pool, config.endpoint, config.api_key, config.model)
            return {"ok": True, "endpoint": config.endpoint, "models": models}
        body = _build_body(args, settings, config)
        result = await ctx.engine.complete(body, config, mode=args.mode, structured=args.structured)
        return {"ok": result.ok, **result.to_dict()}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.check and not args.prompt:
        parser.error("a prompt is required unless --check is given")
    if args.log_level:
        configure_logger(level=args.log_level)
    try:
        settings = Settings(config_file=args.config)
    except (OSError, ValueError) as exc:
        print(json.dumps({"ok": False, "error": f"config: {exc}"}), file=sys.stderr)
        return 2
    try:
        payload = asyncio.run(_run(args, settings))
    except CompletionError as exc:
        print(json.dumps({"ok": False, "error": exc.to_dict()}, default=str), file=sys.stderr)
        return 1
    print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))
    return 0 if payload.get("ok") else 1


__all__ = ["build_parser", "main"]
