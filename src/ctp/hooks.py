"""Run the ``hooks.created`` commands of a template."""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Sequence

__all__ = ["COMMAND_NOT_FOUND", "Runner", "run_created_hooks", "tokenize_command"]


LOGGER = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"\"([^\"]+)\"|'([^']+)'|(\S+)")

COMMAND_NOT_FOUND = 127

Runner = Callable[[Sequence[str], Path], int]


def tokenize_command(command: str) -> list[str]:
    """Split ``command`` on whitespace, keeping quoted spans as single tokens."""

    return [
        double or single or bare
        for double, single, bare in _TOKEN_PATTERN.findall(command)
    ]


def _spawn(argv: Sequence[str], cwd: Path) -> int:
    # Standard streams are inherited so interactive hooks keep working.
    return subprocess.call(list(argv), cwd=cwd)


def run_created_hooks(
    commands: str | Iterable[str] | None,
    cwd: str | Path,
    *,
    runner: Runner | None = None,
) -> list[int]:
    """Run ``commands`` one after another inside ``cwd``.

    Each command is waited for before the next one starts. Exit codes are
    returned, and non-zero ones are logged; they never raise.
    """

    if commands is None:
        return []
    if isinstance(commands, str):
        commands = [commands]

    run = runner or _spawn
    cwd = Path(cwd)
    codes: list[int] = []
    for command in commands:
        argv = tokenize_command(command)
        if not argv:
            continue

        LOGGER.info("running hook %r in %s", command, cwd)
        try:
            code = run(argv, cwd)
        except OSError as exc:
            LOGGER.error("cannot start hook %r: %s", command, exc)
            code = COMMAND_NOT_FOUND

        if code != 0:
            LOGGER.warning("hook %r exited with status %s", command, code)
        codes.append(code)
    return codes
