"""Cargo.toml reader/writer for the ``[[bin]]`` target list.

The manifest is edited with tomlkit so that comments, whitespace and inline
tables outside the touched ``[[bin]]`` records survive a rewrite.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Array

from cargo_bin.exceptions import ManifestNotFoundError, ManifestParseError, StorageError

logger = logging.getLogger(__name__)

MANIFEST_FILE = "Cargo.toml"

KEY_BIN = "bin"
KEY_NAME = "name"
KEY_PATH = "path"


@dataclass(frozen=True)
class BinaryTarget:
    """A ``[[bin]]`` record: target name and source path relative to the manifest.

    ``inferred`` is set when the table has no ``path`` key and ``path`` was
    resolved the way Cargo does it.
    """

    name: str
    path: str
    inferred: bool = field(default=False, compare=False)


@dataclass
class ManifestDocument:
    """Parsed manifest tree and the file it was loaded from."""

    data: Any = field(default_factory=tomlkit.document)
    path: Path | None = None


def normalize_target_path(path: str) -> str:
    """Return ``path`` with forward slashes and no ``.`` segments."""
    return PurePosixPath(path.replace("\\", "/")).as_posix()


def find_manifest(start_dir: Path, file_name: str = MANIFEST_FILE) -> Path:
    """Search ``start_dir`` and its ancestors for the manifest.

    Returns the absolute path of the first match.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    msg = f"{file_name} not found searching upward from {start}"
    raise ManifestNotFoundError(msg)


def load_manifest(path: Path) -> ManifestDocument:
    """Read and parse the manifest at ``path``."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Manifest not found: {path}"
        raise ManifestNotFoundError(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Manifest is not valid UTF-8: {path}"
        raise ManifestParseError(msg) from exc
    except OSError as exc:
        msg = f"Failed to read manifest {path}: {exc}"
        raise StorageError(msg) from exc

    try:
        data = tomlkit.parse(text)
    except TOMLKitError as exc:
        msg = f"Failed to parse manifest {path}: {exc}"
        raise ManifestParseError(msg) from exc

    doc = ManifestDocument(data=data, path=path)
    # Surface a malformed [[bin]] list at load time rather than mid-operation.
    list_binaries(doc)
    return doc


def _bin_tables(doc: ManifestDocument) -> list[Any]:
    """Return the raw ``[[bin]]`` tables, validating their shape."""
    raw = doc.data.get(KEY_BIN)
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(t, Mapping) for t in raw):
        msg = f"'{KEY_BIN}' should be an array of tables, got {type(raw).__name__}"
        raise ManifestParseError(_with_location(doc, msg))
    return raw


def _with_location(doc: ManifestDocument, msg: str) -> str:
    return f"{msg} (in {doc.path})" if doc.path is not None else msg


def _table_name(doc: ManifestDocument, table: Mapping[str, Any]) -> str:
    name = table.get(KEY_NAME)
    if not isinstance(name, str) or not name:
        msg = f"bin.{KEY_NAME} should be a non-empty string, got {name!r}"
        raise ManifestParseError(_with_location(doc, msg))
    return str(name)


def _table_path(doc: ManifestDocument, table: Mapping[str, Any]) -> str | None:
    """Return the explicit, normalized ``path`` of a table, or None when absent."""
    path = table.get(KEY_PATH)
    if path is None:
        return None
    if not isinstance(path, str) or not path:
        msg = f"bin.{KEY_PATH} should be a non-empty string, got {path!r}"
        raise ManifestParseError(_with_location(doc, msg))
    return normalize_target_path(str(path))


def package_name(doc: ManifestDocument) -> str | None:
    package = doc.data.get("package")
    if isinstance(package, Mapping):
        name = package.get("name")
        if isinstance(name, str):
            return str(name)
    return None


def inferred_bin_paths(doc: ManifestDocument, name: str) -> list[str]:
    """Return the locations Cargo tries, in order, for a ``[[bin]]`` without ``path``."""
    paths = []
    if name == package_name(doc):
        paths.append("src/main.rs")
    paths.append(f"src/bin/{name}.rs")
    paths.append(f"src/bin/{name}/main.rs")
    return paths


def _target_from_table(doc: ManifestDocument, table: Mapping[str, Any]) -> BinaryTarget:
    name = _table_name(doc, table)
    path = _table_path(doc, table)
    if path is not None:
        return BinaryTarget(name=name, path=path)

    candidates = inferred_bin_paths(doc, name)
    resolved = f"src/bin/{name}.rs"
    if doc.path is not None:
        root = doc.path.parent
        resolved = next((c for c in candidates if (root / c).is_file()), resolved)
    return BinaryTarget(name=name, path=resolved, inferred=True)


def list_binaries(doc: ManifestDocument) -> list[BinaryTarget]:
    """Return the binary targets in document order."""
    return [_target_from_table(doc, table) for table in _bin_tables(doc)]


def add_binary(doc: ManifestDocument, target: BinaryTarget) -> bool:
    """Append ``target`` unless a record with the same explicit path exists.

    Returns True when a record was appended.
    """
    if not target.name:
        raise ValueError("bin.name cannot be empty")
    if not target.path:
        raise ValueError("bin.path cannot be empty")

    path = normalize_target_path(target.path)
    tables = _bin_tables(doc)
    if any(_table_path(doc, table) == path for table in tables):
        logger.debug("Binary with path %s already registered", path)
        return False

    if isinstance(tables, Array):
        # bin = [{ ... }] written inline stays inline
        entry: Any = tomlkit.inline_table()
    else:
        entry = tomlkit.table()
    entry.add(KEY_NAME, target.name)
    entry.add(KEY_PATH, path)
    if KEY_BIN in doc.data:
        tables.append(entry)
    else:
        new_tables = tomlkit.aot()
        new_tables.append(entry)
        doc.data[KEY_BIN] = new_tables
    logger.info("Added binary %s (%s)", target.name, path)
    return True


def _remove_table(doc: ManifestDocument, tables: list[Any], index: int) -> None:
    del tables[index]
    if not tables:
        del doc.data[KEY_BIN]


def remove_binary(doc: ManifestDocument, target_path: str) -> bool:
    """Remove the record whose explicit path equals ``target_path``.

    Returns True when a record was removed.
    """
    path = normalize_target_path(target_path)
    tables = _bin_tables(doc)
    for index, table in enumerate(tables):
        if _table_path(doc, table) == path:
            name = _table_name(doc, table)
            _remove_table(doc, tables, index)
            logger.info("Removed binary %s (%s)", name, path)
            return True
    return False


def remove_inferred_binary(doc: ManifestDocument, name: str) -> bool:
    """Remove the record named ``name`` that has no explicit path.

    Returns True when a record was removed.
    """
    tables = _bin_tables(doc)
    for index, table in enumerate(tables):
        if _table_path(doc, table) is None and _table_name(doc, table) == name:
            _remove_table(doc, tables, index)
            logger.info("Removed binary %s (inferred path)", name)
            return True
    return False


def save_manifest(doc: ManifestDocument, path: Path | None = None) -> None:
    """Serialize the document to ``path``, defaulting to where it was loaded from."""
    target = path if path is not None else doc.path
    if target is None:
        raise ValueError("No path given for a manifest that was not loaded from disk")

    try:
        target.write_bytes(tomlkit.dumps(doc.data).encode("utf-8"))
    except OSError as exc:
        msg = f"Failed to write manifest {target}: {exc}"
        raise StorageError(msg) from exc
