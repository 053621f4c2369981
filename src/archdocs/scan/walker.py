"""Directory traversal for scan targets."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from archdocs.errors import AreaPathInvalid, ScanTargetMissing, ScanTargetNotDirectory
from archdocs.models import DocumentKind, DocumentType
from archdocs.scan.filters import admits

SERVICES_DIR = "services"

# (subdirectory names, file names), both sorted.
Listing = Tuple[List[str], List[str]]
ListDir = Callable[[Path], Listing]


def list_dir(path: Path) -> Listing:
    """List a directory as sorted ``(dirnames, filenames)``."""
    dirnames: List[str] = []
    filenames: List[str] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir():
                dirnames.append(entry.name)
            elif entry.is_file():
                filenames.append(entry.name)
    return sorted(dirnames), sorted(filenames)


def should_descend(document_type: DocumentType, dirname: str) -> bool:
    """Pruning policy of the typed walk."""
    if document_type.is_context_diagram:
        return False
    if document_type.kind is DocumentKind.C4_DIAGRAM:
        return dirname == SERVICES_DIR
    return True


def iter_typed(
    docs_root: Path,
    area_path: str,
    document_type: DocumentType,
    *,
    listing: ListDir = list_dir,
) -> Iterator[Path]:
    """Yield files under ``area_path`` admitted by the strict policy.

    C1-C3 diagrams only see the area's own files. C4 diagrams only descend
    into ``services`` directories and only admit files that live in one.

    Raises:
        AreaPathInvalid: if the area is missing or not a directory.
    """
    start = docs_root / area_path
    if not start.exists():
        raise AreaPathInvalid(f"Area path does not exist: {area_path}")
    if not start.is_dir():
        raise AreaPathInvalid(f"Area path is not a directory: {area_path}")

    services_only = document_type.kind is DocumentKind.C4_DIAGRAM
    stack: List[Tuple[Path, bool]] = [(start, start.name == SERVICES_DIR)]
    while stack:
        directory, in_services = stack.pop()
        dirnames, filenames = listing(directory)
        if in_services or not services_only:
            for filename in filenames:
                if admits(document_type, filename):
                    yield directory / filename
        for dirname in reversed(dirnames):
            if should_descend(document_type, dirname):
                stack.append((directory / dirname, in_services or dirname == SERVICES_DIR))


def iter_universal(
    docs_root: Path,
    target: str,
    document_type: DocumentType,
    allowed_extensions: Optional[Sequence[str]],
    *,
    listing: ListDir = list_dir,
) -> Iterator[Path]:
    """Yield every admitted file under ``target``, descending without pruning.

    A target that is a file is checked and yielded on its own.

    Raises:
        ScanTargetMissing: if the target does not exist.
        ScanTargetNotDirectory: if the target is neither a file nor a directory.
    """
    start = docs_root / target
    if not start.exists():
        raise ScanTargetMissing(f"Scan target does not exist: {target}")
    if start.is_file():
        if admits(document_type, start.name, allowed_extensions):
            yield start
        return
    if not start.is_dir():
        raise ScanTargetNotDirectory(f"Scan target is not a directory: {target}")

    stack = [start]
    while stack:
        directory = stack.pop()
        dirnames, filenames = listing(directory)
        for filename in filenames:
            if admits(document_type, filename, allowed_extensions):
                yield directory / filename
        stack.extend(directory / dirname for dirname in reversed(dirnames))
