"""Binary target service: scaffolding new binaries and tidying the manifest."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cargo_bin.exceptions import (
    AlreadyExistsError,
    AmbiguousNameError,
    InvalidNameError,
    StorageError,
)
from cargo_bin.filesystem.manifest import (
    BinaryTarget,
    add_binary,
    inferred_bin_paths,
    list_binaries,
    load_manifest,
    normalize_target_path,
    remove_binary,
    remove_inferred_binary,
    save_manifest,
)
from cargo_bin.filesystem.sources import has_entry_point, scan_sources
from cargo_bin.services.entrypoint import DEFAULT_DETECTOR

if TYPE_CHECKING:
    from pathlib import Path

    from cargo_bin.config import Settings
    from cargo_bin.filesystem.manifest import ManifestDocument
    from cargo_bin.services.entrypoint import EntryPointDetector

logger = logging.getLogger(__name__)

MAIN_STUB = "fn main() {}\n"

_BIN_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")


@dataclass
class TidyReport:
    """Outcome of a tidy run."""

    added: list[BinaryTarget] = field(default_factory=list)
    removed: list[BinaryTarget] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def _claimed_paths(doc: ManifestDocument, target: BinaryTarget) -> list[str]:
    """Paths a record may point at: its own, or every Cargo candidate when pathless."""
    return inferred_bin_paths(doc, target.name) if target.inferred else [target.path]


def normalize_binary_name(name: str, extension: str) -> str:
    """Return the bare target name for ``name``, which may carry ``extension``.

    Raises InvalidNameError unless the result is a non-empty run of ASCII
    letters, digits, ``_`` and ``-``.
    """
    stem = name.removesuffix(extension)
    if not _BIN_NAME_RE.fullmatch(stem):
        msg = f"Invalid binary name {name!r}: use letters, digits, '_' or '-'"
        raise InvalidNameError(msg)
    return stem


def create_binary(manifest_path: Path, name: str, settings: Settings) -> BinaryTarget:
    """Write a ``fn main`` stub for ``name`` and register it in the manifest.

    The source file and the manifest are written separately; if the manifest
    write fails the new source file is left in place.
    """
    ext = settings.source_extension
    identifier = normalize_binary_name(name, ext)
    rel_path = normalize_target_path((settings.source_dir / f"{identifier}{ext}").as_posix())
    source_path = manifest_path.parent / rel_path

    if source_path.exists():
        msg = f"Source file already exists: {source_path}"
        raise AlreadyExistsError(msg)

    doc = load_manifest(manifest_path)
    registered = False
    for existing in list_binaries(doc):
        if existing.name != identifier:
            continue
        if rel_path not in _claimed_paths(doc, existing):
            msg = f"Binary {identifier!r} is already registered with path {existing.path}"
            raise AlreadyExistsError(msg)
        registered = True

    try:
        source_path.parent.mkdir(parents=True, exist_ok=True)
        with source_path.open("x", encoding="utf-8") as f:
            f.write(MAIN_STUB)
    except FileExistsError as exc:
        msg = f"Source file already exists: {source_path}"
        raise AlreadyExistsError(msg) from exc
    except OSError as exc:
        msg = f"Failed to create source file {source_path}: {exc}"
        raise StorageError(msg) from exc
    logger.info("Created %s", source_path)

    target = BinaryTarget(name=identifier, path=rel_path)
    if not registered and add_binary(doc, target):
        save_manifest(doc)
    return target


def tidy_binaries(
    manifest_path: Path,
    settings: Settings,
    detector: EntryPointDetector = DEFAULT_DETECTOR,
) -> TidyReport:
    """Synchronize the manifest's ``[[bin]]`` list with the source directory.

    Records whose file is gone or no longer defines an entry point are
    removed; still-valid records are left as they are. Each scanned file with
    an entry point and no record gets one, named after the file. When two
    files would get the same name the first in scan order wins and the rest
    are skipped, or AmbiguousNameError is raised if ``settings.strict_names``
    is set. The manifest is only rewritten when something changed.
    """
    root = manifest_path.parent
    ext = settings.source_extension
    candidates = scan_sources(
        root / settings.source_dir,
        ext,
        detector,
        recursive=settings.recursive_scan,
    )

    doc = load_manifest(manifest_path)
    report = TidyReport()
    kept: list[BinaryTarget] = []
    kept_paths: set[str] = set()
    for target in list_binaries(doc):
        live = [p for p in _claimed_paths(doc, target) if has_entry_point(root / p, detector)]
        if live:
            kept.append(target)
            kept_paths.update(live)
        else:
            report.removed.append(target)

    taken_names = {target.name for target in kept}
    for candidate in candidates:
        if not candidate.has_entry_point:
            continue
        rel_path = candidate.path.relative_to(root).as_posix()
        if rel_path in kept_paths:
            continue
        name = candidate.path.name.removesuffix(ext)
        if name in taken_names:
            if settings.strict_names:
                msg = f"Binary name {name!r} derived from {rel_path} is already taken"
                raise AmbiguousNameError(msg)
            logger.warning("Skipping %s: binary name %r is already taken", rel_path, name)
            report.skipped.append(rel_path)
            continue
        taken_names.add(name)
        report.added.append(BinaryTarget(name=name, path=rel_path))

    for target in report.removed:
        if target.inferred:
            remove_inferred_binary(doc, target.name)
        else:
            remove_binary(doc, target.path)
    for target in report.added:
        add_binary(doc, target)

    if report.changed:
        save_manifest(doc)
    else:
        logger.info("Manifest already tidy: %s", manifest_path)
    return report
