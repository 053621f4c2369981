"""File admission rules per document type."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, Iterable, Optional, Sequence

from archdocs.models import DocumentKind, DocumentType

STEM_RULES: Dict[DocumentKind, str] = {
    DocumentKind.C1_DIAGRAM: "c1",
    DocumentKind.C2_DIAGRAM: "c2",
    DocumentKind.C3_DIAGRAM: "c3",
}

# Strict policy extensions; kinds absent here (and from STEM_RULES) never match.
STRICT_EXTENSIONS: Dict[DocumentKind, frozenset[str]] = {
    DocumentKind.C4_DIAGRAM: frozenset({"mdx"}),
    DocumentKind.ERD_DIAGRAM: frozenset({"mdx"}),
    DocumentKind.ADR_DOCUMENT: frozenset({"mdx"}),
    DocumentKind.OPENAPI_SPEC: frozenset({"yaml"}),
    DocumentKind.AGREEMENTS: frozenset({"md", "mdx", "txt"}),
}

MIME_TYPES: Dict[str, str] = {
    "md": "text/markdown",
    "mdx": "text/markdown",
    "yaml": "application/x-yaml",
    "yml": "application/x-yaml",
    "rst": "text/x-rst",
}


def normalize_extension(extension: str) -> str:
    return extension.strip().lstrip(".").lower()


def file_extension(filename: str) -> str:
    """Return the lower-cased extension of ``filename`` without the dot."""
    return normalize_extension(PurePosixPath(filename).suffix)


def file_stem(filename: str) -> str:
    return PurePosixPath(filename).stem


def strict_admits(document_type: DocumentType, filename: str) -> bool:
    """Admission used when no extension allow-list is configured."""
    kind = document_type.kind
    if kind in STEM_RULES:
        return file_stem(filename) == STEM_RULES[kind]
    allowed = STRICT_EXTENSIONS.get(kind)
    if allowed is None:
        return False
    return file_extension(filename) in allowed


def extension_allowed(filename: str, allowed_extensions: Iterable[str]) -> bool:
    allowed = {normalize_extension(ext) for ext in allowed_extensions}
    if not allowed:
        return True
    return file_extension(filename) in allowed


def admits(
    document_type: DocumentType,
    filename: str,
    allowed_extensions: Optional[Sequence[str]] = None,
) -> bool:
    """Decide whether ``filename`` qualifies for ``document_type``.

    ``None`` selects the strict per-type policy. A sequence selects the
    allow-list policy, where an empty sequence lets every extension through.
    Agreements always use the strict policy; C1-C3 diagrams keep their stem
    rule under both policies.
    """
    if allowed_extensions is None or document_type.kind is DocumentKind.AGREEMENTS:
        return strict_admits(document_type, filename)

    if not extension_allowed(filename, allowed_extensions):
        return False
    stem_rule = STEM_RULES.get(document_type.kind)
    if stem_rule is not None:
        return file_stem(filename) == stem_rule
    return True


def mime_type(filename: str) -> str:
    return MIME_TYPES.get(file_extension(filename), "text/plain")
