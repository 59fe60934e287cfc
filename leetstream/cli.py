#!/usr/bin/env python3
"""
cli.py - Entry point for leetstream
Resolve a catalog identifier into ranked magnet streams.
"""

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

import leetstream as pkg
from .config import LeetstreamConfig, load_config
from .logger import LeetstreamLogger, set_logger
from .pipeline import build_pipeline
from .search.types import SearchDescriptor, StreamRecord

console = Console()
MAGNET_PREVIEW_CHARS = 60
_CLI_SESSION_START_MONOTONIC = time.monotonic()


def _ui_info(message: str) -> None:
    console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_error(message: str) -> None:
    console.print(f"[red][ERROR][/red] {message}")


def _format_elapsed_runtime(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{seconds / 60:.1f}m"


def _shorten(text: str, limit: int = MAGNET_PREVIEW_CHARS) -> str:
    return text if len(text) <= limit else f"{text[: limit - 3]}..."


def display_plan(identifier: str, descriptor: SearchDescriptor) -> None:
    """Show the query plan resolved for an identifier"""
    if not descriptor.is_resolvable:
        _ui_info(f"No search query could be built for {escape(identifier)}")
        return
    table = Table(title=f"Search plan for {escape(identifier)}")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Query", style="green")
    for idx, variation in enumerate(descriptor.variations, start=1):
        table.add_row(str(idx), escape(variation))
    console.print(table)
    _ui_info(escape(descriptor.describe()))


def display_streams(identifier: str, streams: list[StreamRecord]) -> None:
    """Show resolved streams, best first"""
    if not streams:
        _ui_info(f"No streams found for {escape(identifier)}")
        return
    table = Table(title=f"Streams for {escape(identifier)}", show_lines=True)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Source", style="magenta")
    table.add_column("Title", style="green")
    table.add_column("Magnet", style="grey50")
    for idx, stream in enumerate(streams, start=1):
        table.add_row(
            str(idx),
            escape(stream.label),
            escape(stream.display_title),
            escape(_shorten(stream.playable_link)),
        )
    console.print(table)


async def run_identifier(
    config: LeetstreamConfig,
    identifier: str,
    *,
    content_type: Optional[str] = None,
    plan_only: bool = False,
    as_json: bool = False,
) -> None:
    async with build_pipeline(config) as pipeline:
        if plan_only:
            descriptor = await pipeline.plan(identifier, content_type)
            if as_json:
                print(json.dumps({
                    "primary_query": descriptor.primary_query,
                    "variations": list(descriptor.variations),
                    "content_kind": descriptor.content_kind,
                    "year": descriptor.year,
                    "season": descriptor.season,
                    "episode": descriptor.episode,
                }, indent=2))
            else:
                display_plan(identifier, descriptor)
            return

        streams = await pipeline.resolve(identifier, content_type)
        if as_json:
            print(json.dumps({"streams": [stream.to_dict() for stream in streams]}, indent=2, ensure_ascii=False))
        else:
            display_streams(identifier, streams)


def resolve_config_path(args_config: Optional[str]) -> Optional[Path]:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        return p

    cwd_candidate = Path.cwd() / "config.toml"
    if cwd_candidate.exists():
        return cwd_candidate
    return None


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"leetstream v{getattr(pkg, '__version__', '0.0.0')} - Resolve catalog ids into ranked magnet streams")
    print()
    parser.print_help()


def main(argv: Optional[list[str]] = None):
    """Entry point"""
    parser = argparse.ArgumentParser(prog="leetstream", add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("-t", "--type"), {"choices": ("movie", "series"), "help": "Content type hint"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("--plan",), {"action": "store_true", "help": "Only print the resolved search plan"}),
        (("--json",), {"action": "store_true", "help": "Print JSON instead of a table"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with API calls and timestamps"}),
        (("--log-file",), {"metavar": "PATH", "help": "Also write the log to this file"}),
    ):
        parser.add_argument(*args, **kwargs)
    parser.add_argument("identifier", nargs="?", help="tt1234567, tt1234567:1:2 or prefix:title[:year][:sN][:eN]")

    try:
        args = parser.parse_args(argv)
        if args.help or not args.identifier:
            show_help(parser)
            sys.exit(0)

        config = load_config(resolve_config_path(args.config))
        log_file = Path(args.log_file).expanduser() if args.log_file else None
        with LeetstreamLogger(log_file=log_file, debug=args.debug) as run_logger:
            set_logger(run_logger)
            asyncio.run(
                run_identifier(
                    config,
                    args.identifier,
                    content_type=args.type,
                    plan_only=args.plan,
                    as_json=args.json,
                )
            )
        sys.exit(0)
    except KeyboardInterrupt:
        elapsed = max(0.0, time.monotonic() - _CLI_SESSION_START_MONOTONIC)
        _ui_info(f"Goodbye! Elapsed {_format_elapsed_runtime(elapsed)}")
        sys.exit(0)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
