"""Command line interface for ctp."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from rich.console import Console
from rich.markup import escape

from . import __version__
from .cache import TemplateCache
from .config import CtpConfig
from .errors import CtpError
from .github import RepositoryFetcher
from .project import ProjectCreator
from .prompting import PresetPrompter, Prompter, RichPrompter

LOGGER = logging.getLogger(__name__)


def _parse_key_value_pairs(pairs: Iterable[str]) -> dict[str, str]:
    answers: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise argparse.ArgumentTypeError(
                f"invalid key/value pair '{pair}'. Expected KEY=VALUE syntax."
            )
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise argparse.ArgumentTypeError("keys must not be empty")
        answers[key] = value
    return answers


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctp", description="Create a project from a GitHub template repository"
    )
    parser.add_argument("template", nargs="?", help="Template repository as OWNER/REPO")
    parser.add_argument("name", nargs="?", help="Project name; prompted for when omitted")
    parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=None,
        help="Directory in which the project directory is created",
    )
    parser.add_argument(
        "-a",
        "--answer",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Answer a template input without being prompted",
    )
    parser.add_argument("--cache-dir", type=Path, help="Override the template cache directory")
    freshness = parser.add_mutually_exclusive_group()
    freshness.add_argument(
        "-c",
        "--clone",
        action="store_true",
        help="Download the template again even when the cached copy is current",
    )
    freshness.add_argument(
        "--offline",
        action="store_true",
        help="Use the cached template without contacting GitHub",
    )
    parser.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="List cached templates and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (repeat for debug output)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _format_synced(timestamp: int | None) -> str:
    if timestamp is None:
        return "never synced"
    moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return f"updated {moment.isoformat(timespec='seconds')}"


def _handle_list(config: CtpConfig, console: Console) -> int:
    cache = TemplateCache(config.cache_dir)
    console.print(f"[green]templates path:[/green] {escape(str(cache.root))}")
    console.print("[green]templates[/green]")
    for entry in cache.entries():
        console.print(f"[bright_black]-[/bright_black] {escape(entry.key)} ({_format_synced(entry.synced_at)})")
    return 0


def _handle_create(
    args: argparse.Namespace,
    config: CtpConfig,
    console: Console,
    *,
    prompter: Prompter | None,
    fetcher: RepositoryFetcher | None,
) -> int:
    presets = _parse_key_value_pairs(args.answer)
    interactive = prompter or RichPrompter(console)
    creator = ProjectCreator.from_config(
        config,
        PresetPrompter(presets, interactive),
        fetcher=fetcher,
        console=console,
    )
    project = creator.create(
        args.template,
        args.name,
        directory=args.directory,
        offline=args.offline,
        force=args.clone,
    )

    console.print()
    console.print("[green]🤩 successfully created the project! have fun coding![/green]")
    console.print()
    console.print(f"project path: [cyan]{escape(str(project.path))}[/cyan]")
    return 0


def main(
    argv: Sequence[str] | None = None,
    *,
    console: Console | None = None,
    prompter: Prompter | None = None,
    fetcher: RepositoryFetcher | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    console = console or Console()
    config = CtpConfig.from_env().with_cache_dir(args.cache_dir)

    if args.list:
        return _handle_list(config, console)
    if not args.template:
        parser.error("a template repository (OWNER/REPO) is required")

    try:
        return _handle_create(args, config, console, prompter=prompter, fetcher=fetcher)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except CtpError as exc:
        LOGGER.debug("project creation failed", exc_info=True)
        console.print(f"[red]❗ {escape(str(exc))}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("[yellow]aborted[/yellow]")
        return 130
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
