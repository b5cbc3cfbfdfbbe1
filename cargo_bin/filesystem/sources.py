"""Source directory scanning for binary candidates."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cargo_bin.exceptions import StorageError

if TYPE_CHECKING:
    from cargo_bin.services.entrypoint import EntryPointDetector

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({"target"})


@dataclass(frozen=True)
class SourceCandidate:
    """A scanned source file and whether it defines an entry point."""

    path: Path
    has_entry_point: bool


def iter_source_files(scan_dir: Path, extension: str, *, recursive: bool = False) -> list[Path]:
    """List files in ``scan_dir`` ending in ``extension``, sorted by relative path.

    A missing ``scan_dir`` yields no files. When ``recursive`` is set, hidden
    directories and ``target`` are skipped.
    """
    if not scan_dir.is_dir():
        return []

    found: list[Path] = []
    try:
        if recursive:
            for root, dirs, files in os.walk(scan_dir):
                dirs[:] = [d for d in dirs if not d.startswith(".") and d not in IGNORED_DIRS]
                found.extend(Path(root) / f for f in files if _is_source(f, extension))
        else:
            found.extend(
                entry
                for entry in scan_dir.iterdir()
                if entry.is_file() and _is_source(entry.name, extension)
            )
    except OSError as exc:
        msg = f"Failed to list source directory {scan_dir}: {exc}"
        raise StorageError(msg) from exc

    return sorted(found, key=lambda p: p.relative_to(scan_dir).as_posix())


def _is_source(filename: str, extension: str) -> bool:
    return not filename.startswith(".") and filename.endswith(extension)


def read_source(path: Path) -> str | None:
    """Read a source file as UTF-8 text.

    Returns None (and logs a warning) when the file is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("Skipping %s: not valid UTF-8", path)
        return None
    except OSError as exc:
        msg = f"Failed to read source file {path}: {exc}"
        raise StorageError(msg) from exc


def has_entry_point(path: Path, detector: EntryPointDetector) -> bool:
    """Return True if ``path`` is a readable file whose text defines an entry point."""
    if not path.is_file():
        return False
    text = read_source(path)
    return text is not None and detector.defines_entry_point(text)


def scan_sources(
    scan_dir: Path,
    extension: str,
    detector: EntryPointDetector,
    *,
    recursive: bool = False,
) -> list[SourceCandidate]:
    """Scan ``scan_dir`` and classify each source file."""
    return [
        SourceCandidate(path=path, has_entry_point=has_entry_point(path, detector))
        for path in iter_source_files(scan_dir, extension, recursive=recursive)
    ]
