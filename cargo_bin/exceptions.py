"""Error types raised by cargo-bin operations.

Convention:
- Every error derives from ``CargoBinError`` so the CLI can report any failure
  with a single handler and exit non-zero.
- Each error also derives from the closest built-in exception
  (``FileNotFoundError``, ``ValueError``, ...) so callers that only know the
  standard hierarchy still catch it.
- Messages always name the offending path or name.
"""

from __future__ import annotations


class CargoBinError(Exception):
    """Base class for all errors surfaced to the user."""


class ManifestNotFoundError(CargoBinError, FileNotFoundError):
    """Raised when the manifest (or a file it must read) does not exist."""


class ManifestParseError(CargoBinError, ValueError):
    """Raised when the manifest is not valid TOML or has a malformed ``[[bin]]`` list."""


class AlreadyExistsError(CargoBinError, FileExistsError):
    """Raised when ``new`` would overwrite an existing source file or binary name."""


class StorageError(CargoBinError, OSError):
    """Raised for any other read, write or create failure."""


class AmbiguousNameError(CargoBinError):
    """Raised by ``tidy`` in strict mode when two files derive the same binary name."""


class InvalidNameError(CargoBinError, ValueError):
    """Raised when a binary name is empty or not a valid target identifier."""
