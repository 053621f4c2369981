"""Docs tree scanning pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional, Sequence

from archdocs.config import ScanConfig
from archdocs.errors import (
    AreaPathInvalid,
    InvalidPathStructure,
    MetadataUnreadable,
    PathTraversalError,
    ScanTargetMissing,
    ScanTargetNotDirectory,
)
from archdocs.index.storage import DocumentIndex
from archdocs.models import DocumentKind, DocumentType, ResourceInfo
from archdocs.scan.classifier import (
    Classification,
    classify_structural,
    classify_universal,
    describe,
)
from archdocs.scan.filters import mime_type
from archdocs.scan.walker import ListDir, iter_typed, iter_universal, list_dir
from archdocs.utils.files import file_size, relative_posix

LOGGER = logging.getLogger(__name__)

Classifier = Callable[[str], Optional[Classification]]


@dataclass(slots=True)
class ScanStats:
    inserted: int = 0
    replaced: int = 0
    skipped: int = 0
    failed: int = 0
    failed_targets: list[str] = field(default_factory=list)

    def increment(self, status: str) -> None:
        if status == "inserted":
            self.inserted += 1
        elif status == "replaced":
            self.replaced += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1


@dataclass(slots=True)
class ScanGroup:
    """One configured scan: a document type, its targets and extensions.

    ``extensions`` of ``None`` selects the typed (area based) scan.
    """

    document_type: DocumentType
    targets: List[str]
    extensions: Optional[List[str]] = None


class DocumentScanner:
    """Walks scan targets and fills a :class:`DocumentIndex`."""

    def __init__(
        self,
        docs_root: Path,
        index: DocumentIndex | None = None,
        *,
        listing: ListDir = list_dir,
    ) -> None:
        self.docs_root = Path(docs_root)
        self.index = index if index is not None else DocumentIndex()
        self.listing = listing
        self.stats = ScanStats()

    def scan_documents(self, document_type: DocumentType, area_paths: Sequence[str]) -> None:
        """Typed scan of whole areas.

        Agreements go through the universal walk with the strict filter, the
        other kinds through the pruned walk and the structural classifier.
        """
        if document_type.kind is DocumentKind.AGREEMENTS:
            self.scan_documents_with_extensions(document_type, area_paths, [])
            return

        for area_path in area_paths:
            if self._escapes_root(area_path):
                continue
            try:
                for path in iter_typed(
                    self.docs_root, area_path, document_type, listing=self.listing
                ):
                    self._process(
                        document_type,
                        path,
                        lambda relative: classify_structural(document_type, relative),
                    )
            except (AreaPathInvalid, OSError) as exc:
                LOGGER.warning("Failed to scan area '%s': %s", area_path, exc)
                self.stats.failed_targets.append(area_path)

    def scan_documents_with_extensions(
        self,
        document_type: DocumentType,
        scan_targets: Sequence[str],
        allowed_extensions: Sequence[str],
    ) -> None:
        """Universal scan of files or directories filtered by extension."""
        for target in scan_targets:
            if self._escapes_root(target):
                continue
            try:
                for path in iter_universal(
                    self.docs_root,
                    target,
                    document_type,
                    allowed_extensions,
                    listing=self.listing,
                ):
                    self._process(
                        document_type,
                        path,
                        lambda relative: classify_universal(document_type, relative, target),
                    )
            except (ScanTargetMissing, ScanTargetNotDirectory) as exc:
                LOGGER.warning("%s", exc)
                self.stats.failed_targets.append(target)
            except OSError as exc:
                LOGGER.warning("Failed to scan target '%s': %s", target, exc)
                self.stats.failed_targets.append(target)

    def _escapes_root(self, target: str) -> bool:
        """Refuse absolute targets and targets with parent segments."""
        posix = PurePosixPath(target)
        if posix.is_absolute() or ".." in posix.parts:
            LOGGER.warning("Scan target escapes the docs root: %s", target)
            self.stats.failed_targets.append(target)
            return True
        return False

    def scan_group(self, group: ScanGroup) -> None:
        if group.extensions is None:
            self.scan_documents(group.document_type, group.targets)
        else:
            self.scan_documents_with_extensions(
                group.document_type, group.targets, group.extensions
            )

    def _process(self, document_type: DocumentType, path: Path, classify: Classifier) -> None:
        try:
            status = self._index_single(document_type, path, classify)
        except (InvalidPathStructure, MetadataUnreadable, PathTraversalError) as exc:
            LOGGER.warning("Failed to index %s: %s", path, exc)
            status = "failed"
        self.stats.increment(status)

    def _index_single(self, document_type: DocumentType, path: Path, classify: Classifier) -> str:
        relative_path = relative_posix(path, self.docs_root)
        classification = classify(relative_path)
        if classification is None:
            LOGGER.debug("Skipping %s", relative_path)
            return "skipped"

        info = ResourceInfo(
            uri=classification.uri,
            file_path=relative_path,
            area=classification.area,
            lang=classification.lang,
            category=classification.categories,
            project=classification.project,
            mime_type=mime_type(path.name),
            size=file_size(path),
            description=describe(
                document_type,
                classification.area,
                classification.lang,
                classification.categories,
                path.name,
            ),
        )
        previous = self.index.insert(info.uri, info)
        if previous is not None:
            LOGGER.debug("Replaced %s (was %s)", info.uri, previous.file_path)
            return "replaced"
        return "inserted"


def scan_groups(config: ScanConfig) -> List[ScanGroup]:
    """Expand a configuration into scan groups in indexing order."""
    groups = [ScanGroup(DocumentType.agreements(), list(config.agreements))]
    diagrams = list(config.diagram_extensions)
    for project in config.projects:
        name = project.name
        groups.extend(
            [
                ScanGroup(DocumentType(DocumentKind.C1_DIAGRAM, name), project.c4.c1, diagrams),
                ScanGroup(DocumentType(DocumentKind.C2_DIAGRAM, name), project.c4.c2, diagrams),
                ScanGroup(DocumentType(DocumentKind.C3_DIAGRAM, name), project.c4.c3, diagrams),
                ScanGroup(
                    DocumentType(DocumentKind.C4_DIAGRAM, name), project.c4.services, diagrams
                ),
                ScanGroup(DocumentType(DocumentKind.ERD_DIAGRAM, name), project.erd, diagrams),
                ScanGroup(DocumentType(DocumentKind.ADR_DOCUMENT, name), project.adr, diagrams),
                ScanGroup(
                    DocumentType(DocumentKind.OPENAPI_SPEC, name),
                    project.openapi,
                    list(config.openapi_extensions),
                ),
            ]
        )
    for guide in config.guides:
        groups.append(
            ScanGroup(
                DocumentType(DocumentKind.GUIDE_DOC, guide.name),
                guide.paths,
                list(config.guide_extensions),
            )
        )
    return groups


def build_index(
    docs_root: Path, config: ScanConfig, *, listing: ListDir = list_dir
) -> tuple[DocumentIndex, ScanStats]:
    """Scan every configured group and return the frozen index."""
    scanner = DocumentScanner(docs_root, listing=listing)
    started = time.perf_counter()
    for group in scan_groups(config):
        LOGGER.debug("Scanning %s: %s", group.document_type, group.targets)
        scanner.scan_group(group)
    LOGGER.info(
        "Scanned %d documents in %.3fs", len(scanner.index), time.perf_counter() - started
    )
    return scanner.index.freeze(), scanner.stats
