"""Unpack downloaded template archives."""

from __future__ import annotations

import io
import shutil
import zipfile
from pathlib import Path

from .errors import ArchiveLayoutError

__all__ = ["extract_archive", "hoist_single_root"]

UNIX_SYSTEM = 3


def extract_archive(data: bytes, destination: str | Path) -> None:
    """Extract the zip archive ``data`` below ``destination``."""

    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    root = destination.resolve()
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for member in archive.namelist():
                target = (root / member).resolve()
                if target != root and root not in target.parents:
                    raise ArchiveLayoutError(f"archive member escapes destination: {member}")
            archive.extractall(root)
            _restore_modes(archive, root)
    except zipfile.BadZipFile as exc:
        raise ArchiveLayoutError(f"template archive is not a zip file: {exc}") from exc


def _restore_modes(archive: zipfile.ZipFile, root: Path) -> None:
    # extractall does not apply the Unix permission bits stored in the archive
    for info in archive.infolist():
        mode = (info.external_attr >> 16) & 0o777
        if info.create_system != UNIX_SYSTEM or info.is_dir() or not mode:
            continue
        (root / info.filename).chmod(mode)


def hoist_single_root(directory: str | Path) -> None:
    """Move the contents of the only directory in ``directory`` up one level.

    GitHub archives wrap the tree in ``<owner>-<repo>-<sha>/``. Anything other
    than exactly one top-level directory raises :class:`ArchiveLayoutError`.
    """

    directory = Path(directory)
    entries = list(directory.iterdir())
    if len(entries) != 1 or not entries[0].is_dir():
        names = ", ".join(sorted(entry.name for entry in entries)) or "nothing"
        raise ArchiveLayoutError(
            f"expected a single top-level directory in the template archive, found {names}"
        )

    wrapper = entries[0]
    staged = directory / f".{wrapper.name}.unpack"
    wrapper.rename(staged)
    for child in staged.iterdir():
        shutil.move(str(child), str(directory / child.name))
    staged.rmdir()
