"""CLI for managing Cargo ``[[bin]]`` targets."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cargo_bin.config import Settings
from cargo_bin.exceptions import CargoBinError
from cargo_bin.filesystem.manifest import find_manifest
from cargo_bin.services.bin_service import create_binary, tidy_binaries


def _configure_logging(debug: bool) -> None:
    """Configure CLI logging; warnings only unless verbose."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo-bin",
        description="Manage [[bin]] targets in Cargo.toml",
    )
    parser.add_argument(
        "--manifest-path",
        type=Path,
        help="Path to Cargo.toml (default: search upward from the current directory)",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        help="Binary source directory relative to the manifest (default: src/bin)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    new_parser = subparsers.add_parser("new", help="Create a binary source file and register it")
    new_parser.add_argument("name", help="Binary name, with or without the .rs extension")

    tidy_parser = subparsers.add_parser(
        "tidy", help="Add missing and remove stale [[bin]] entries"
    )
    tidy_parser.add_argument(
        "--recursive", "-r", action="store_true", help="Scan subdirectories too"
    )
    tidy_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of skipping files whose binary name is already taken",
    )
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if args.source_dir is not None:
        overrides["source_dir"] = args.source_dir
    if args.verbose:
        overrides["debug"] = True
    if getattr(args, "recursive", False):
        overrides["recursive_scan"] = True
    if getattr(args, "strict", False):
        overrides["strict_names"] = True
    return Settings(**overrides)


def _run(args: argparse.Namespace, settings: Settings) -> None:
    if args.manifest_path is not None:
        manifest_path = args.manifest_path.resolve()
    else:
        manifest_path = find_manifest(Path.cwd(), settings.manifest_name)

    if args.command == "new":
        target = create_binary(manifest_path, args.name, settings)
        print(f"Created binary {target.name} at {target.path}")
        return

    report = tidy_binaries(manifest_path, settings)
    for target in report.removed:
        print(f"  - {target.name} ({target.path})")
    for target in report.added:
        print(f"  + {target.name} ({target.path})")
    for rel_path in report.skipped:
        print(f"  ! {rel_path} (name already taken)")
    if report.changed:
        print(f"Updated {manifest_path}: {len(report.added)} added, {len(report.removed)} removed")
    else:
        print(f"{manifest_path} is already tidy")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)
    _configure_logging(settings.debug)

    try:
        _run(args, settings)
    except CargoBinError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
