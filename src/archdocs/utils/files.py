"""Utility helpers for working with files under the docs root."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from archdocs.errors import DocsRootError, MetadataUnreadable, PathTraversalError
from archdocs.models import clamp_size


def resolve_docs_root(docs_root: Path | str, base_dir: Path | None = None) -> Path:
    """Resolve ``docs_root`` to an absolute directory path.

    Relative paths are resolved against ``base_dir`` (the working directory
    by default).
    """
    path = Path(docs_root).expanduser()
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path
    if not path.exists():
        raise DocsRootError(f"Docs root does not exist: {path} (resolved from: {docs_root})")
    if not path.is_dir():
        raise DocsRootError(f"Docs root is not a directory: {path} (resolved from: {docs_root})")
    return path


def relative_posix(path: Path, docs_root: Path) -> str:
    """Docs-root-relative, ``/``-separated form of ``path``.

    Raises:
        PathTraversalError: if the path is not below the root.
    """
    try:
        relative = path.relative_to(docs_root)
    except ValueError as exc:
        raise PathTraversalError(f"{path} is outside {docs_root}") from exc
    posix = PurePosixPath(*relative.parts)
    if ".." in posix.parts:
        raise PathTraversalError(f"{path} escapes {docs_root}")
    return str(posix)


def file_size(path: Path) -> int:
    """Size of ``path`` in bytes, saturated to the unsigned 32-bit range."""
    try:
        return clamp_size(path.stat().st_size)
    except OSError as exc:
        raise MetadataUnreadable(f"Cannot read metadata of {path}: {exc}") from exc


class FileReader:
    """Reads files relative to a docs root, refusing anything outside it."""

    def __init__(self, docs_root: Path | str) -> None:
        self.docs_root = resolve_docs_root(docs_root)

    def _confined(self, relative_path: str) -> Path:
        root = Path(os.path.realpath(self.docs_root))
        candidate = Path(os.path.realpath(self.docs_root / relative_path))
        if candidate != root and root not in candidate.parents:
            raise PathTraversalError(
                f"Path traversal detected: {relative_path} is outside the docs root"
            )
        return candidate

    def read_text(self, relative_path: str) -> str:
        return self._confined(relative_path).read_text(encoding="utf-8")

    def read_bytes(self, relative_path: str) -> bytes:
        return self._confined(relative_path).read_bytes()
