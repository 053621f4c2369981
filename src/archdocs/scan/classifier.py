"""Derive canonical URIs and metadata from document paths.

Two strategies are supported:

* the structural strategy matches the path below the docs root against an
  ordered table of known layouts (``content/docs/architecture/...``,
  ``openapi-spec/...`` and the generic ``content/docs/{area}/{lang}/...``);
* the universal strategy builds the URI from the type prefix and the path
  below the configured scan target, which is what project groups use.

Both return a :class:`Classification`; ``None`` means the file is
deliberately skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from archdocs.errors import InvalidPathStructure
from archdocs.models import DocumentKind, DocumentType

REST = "**"

KNOWN_AGREEMENT_AREAS = ("backend", "frontend", "quality-assurance")
LANGUAGE_AREAS = frozenset({"backend", "frontend"})
GENERIC_AREA_NAMES = frozenset({"docs", ""})


@dataclass(slots=True)
class Classification:
    uri: str
    area: str
    lang: str
    categories: List[str] = field(default_factory=list)
    project: str = ""


Captures = Dict[str, str]
Builder = Callable[[DocumentType, Captures], Optional[Classification]]


@dataclass(frozen=True, slots=True)
class Shape:
    """A path layout: literal segments, ``{name}`` captures and a trailing ``**``.

    ``**`` swallows one or more segments. The last segment is always
    captured as ``filename``.
    """

    name: str
    pattern: Tuple[str, ...]
    build: Builder

    def match(self, parts: Sequence[str]) -> Optional[Captures]:
        pattern = self.pattern
        if pattern and pattern[-1] == REST:
            pattern = pattern[:-1]
            if len(parts) <= len(pattern):
                return None
        elif len(parts) != len(pattern):
            return None

        captures: Captures = {}
        for token, part in zip(pattern, parts):
            if token.startswith("{") and token.endswith("}"):
                captures[token[1:-1]] = part
            elif token != part:
                return None
        captures["filename"] = parts[-1]
        return captures


def adr_number(filename: str) -> str:
    """``001-use-temporal.mdx`` -> ``001``."""
    stem = PurePosixPath(filename).stem
    return stem.split("-", 1)[0] or "unknown"


def _architecture(uri: str, categories: List[str], project: str) -> Classification:
    return Classification(uri=uri, area="architecture", lang="", categories=categories, project=project)


def _c4_root(document_type: DocumentType, c: Captures) -> Classification:
    category = document_type.kind.value if document_type.is_context_diagram else "c4"
    return _architecture(
        f"docs://architecture/{c['project']}/{c['filename']}", [category], c["project"]
    )


def _c4_service(document_type: DocumentType, c: Captures) -> Classification:
    return _architecture(
        f"docs://architecture/{c['project']}/c4/{c['filename']}", ["c4"], c["project"]
    )


def _erd(document_type: DocumentType, c: Captures) -> Classification:
    return _architecture(
        f"docs://architecture/erd/{c['project']}/{c['filename']}", ["erd"], c["project"]
    )


def _adr(document_type: DocumentType, c: Captures) -> Classification:
    return _architecture(
        f"docs://architecture/{c['project']}/adr/{c['filename']}",
        ["adr", f"ADR-{adr_number(c['filename'])}"],
        c["project"],
    )


def _openapi(document_type: DocumentType, c: Captures) -> Classification:
    segments = [c["project"], c["service"], c["version"], c["access_level"]]
    categories = ["openapi", c["service"], c["version"], c["access_level"]]
    if "sub_category" in c:
        segments.append(c["sub_category"])
        categories.append(c["sub_category"])
    uri = "docs://openapi/" + "/".join(segments + [c["filename"]])
    return Classification(
        uri=uri, area="openapi", lang="", categories=categories, project=c["project"]
    )


def _generic(document_type: DocumentType, c: Captures) -> Classification:
    uri = f"{document_type.uri_prefix}{c['area']}/{c['lang']}/{c['category']}/{c['filename']}"
    if document_type.kind is DocumentKind.AGREEMENTS:
        categories = ["agreements", c["category"]]
    else:
        categories = [c["category"]]
    return Classification(uri=uri, area=c["area"], lang=c["lang"], categories=categories)


def _skip(document_type: DocumentType, c: Captures) -> None:
    return None


def _openapi_shapes() -> List[Shape]:
    shapes = []
    for root in (("content", "docs", "openapi-spec"), ("openapi-spec",)):
        base = root + ("{project}", "{service}", "{version}", "{access_level}")
        for middle in ((), ("{sub_category}",)):
            for endpoints in (("endpoints",), ()):
                pattern = base + middle + endpoints + ("{filename}",)
                shapes.append(Shape("openapi:" + "/".join(pattern), pattern, _openapi))
    return shapes


ARCHITECTURE = ("content", "docs", "architecture", "{project}")

STRUCTURAL_SHAPES: Tuple[Shape, ...] = (
    Shape("c4", ARCHITECTURE + ("c4", "{filename}"), _c4_root),
    Shape("c4-services", ARCHITECTURE + ("c4", "services", "{filename}"), _c4_service),
    Shape("erd-services", ARCHITECTURE + ("erd", "services", "{filename}"), _erd),
    Shape("erd", ARCHITECTURE + ("erd", "{filename}"), _erd),
    Shape("adr", ARCHITECTURE + ("adr", "{filename}"), _adr),
    *_openapi_shapes(),
    Shape("generic", ("content", "docs", "{area}", "{lang}", "{category}", REST), _generic),
    Shape("area-root", ("content", "docs", "{area}", REST), _skip),
)


def classify_structural(
    document_type: DocumentType, relative_path: str
) -> Optional[Classification]:
    """Classify a docs-root-relative path using the first matching shape.

    Raises:
        InvalidPathStructure: if no shape matches.
    """
    parts = [part for part in relative_path.split("/") if part]
    for shape in STRUCTURAL_SHAPES:
        captures = shape.match(parts)
        if captures is not None:
            return shape.build(document_type, captures)
    raise InvalidPathStructure(relative_path)


def relative_under_target(relative_path: str, scan_root: str) -> str:
    """Path of a file below its scan target.

    A file that is itself the target keeps its full docs-root-relative path.
    """
    root = scan_root.strip("/")
    path = relative_path.strip("/")
    prefix = root + "/"
    if root and path.startswith(prefix):
        return path[len(prefix):]
    return path


def guess_agreements_area(scan_root: str) -> str:
    normalized = scan_root.strip("/").lower()
    for area in KNOWN_AGREEMENT_AREAS:
        if (
            normalized == area
            or normalized.endswith("/" + area)
            or f"/{area}/" in normalized
        ):
            return area
    last = normalized.rsplit("/", 1)[-1].strip()
    return "" if last in GENERIC_AREA_NAMES else last


def parse_agreements_subpath(subpath: str, area: str) -> Tuple[str, List[str]]:
    """Split a subpath into ``(lang, categories)``; the filename is dropped."""
    parts = [part for part in subpath.split("/") if part]
    if area in LANGUAGE_AREAS and len(parts) >= 2:
        return parts[0], parts[1:-1]
    return "", parts[:-1]


# Fixed (area, categories) of the universal strategy for project-bound kinds.
_UNIVERSAL_METADATA: Dict[DocumentKind, Tuple[str, Tuple[str, ...]]] = {
    DocumentKind.C1_DIAGRAM: ("architecture", ("c1",)),
    DocumentKind.C2_DIAGRAM: ("architecture", ("c2",)),
    DocumentKind.C3_DIAGRAM: ("architecture", ("c3",)),
    DocumentKind.C4_DIAGRAM: ("architecture", ("c4",)),
    DocumentKind.ERD_DIAGRAM: ("architecture", ("erd",)),
    DocumentKind.ADR_DOCUMENT: ("architecture", ("adr",)),
    DocumentKind.OPENAPI_SPEC: ("openapi", ("openapi",)),
    DocumentKind.GUIDE_DOC: ("guides", ("guides",)),
}


def classify_universal(
    document_type: DocumentType, relative_path: str, scan_root: str
) -> Classification:
    """Classify a file found by the universal walk of ``scan_root``."""
    subpath = relative_under_target(relative_path, scan_root)

    if document_type.kind is DocumentKind.AGREEMENTS:
        area = guess_agreements_area(scan_root)
        lang, extra = parse_agreements_subpath(subpath, area)
        uri_subpath = f"{area}/{subpath}" if area else subpath
        return Classification(
            uri=document_type.uri_prefix + uri_subpath,
            area=area or "agreements",
            lang=lang,
            categories=["agreements", *extra],
        )

    area, categories = _UNIVERSAL_METADATA[document_type.kind]
    category_list = list(categories)
    if document_type.kind is DocumentKind.ADR_DOCUMENT:
        category_list.append(f"ADR-{adr_number(PurePosixPath(subpath).name)}")
    return Classification(
        uri=document_type.uri_prefix + subpath,
        area=area,
        lang="",
        categories=category_list,
        project=document_type.name,
    )


DESCRIPTION_TEMPLATES: Dict[DocumentKind, str] = {
    DocumentKind.AGREEMENTS: "Agreement document: {categories} - {area} ({lang})",
    DocumentKind.C1_DIAGRAM: "C1 diagram for {project} project",
    DocumentKind.C2_DIAGRAM: "C2 diagram for {project} project",
    DocumentKind.C3_DIAGRAM: "C3 diagram for {project} project",
    DocumentKind.C4_DIAGRAM: "C4 diagram for {stem} service in {project} project",
    DocumentKind.ERD_DIAGRAM: "ERD diagram for {project} project: {stem}",
    DocumentKind.ADR_DOCUMENT: "ADR-{adr} for {project} project",
    DocumentKind.OPENAPI_SPEC: "OpenAPI specification for {stem} endpoint in {project} project",
    DocumentKind.GUIDE_DOC: "Guide: {project} - {title}",
}


def guide_title(filename: str) -> str:
    """``getting_started.en.md`` -> ``getting started``."""
    name = filename
    for _ in range(2):
        stem = PurePosixPath(name).stem
        if stem == name:
            break
        name = stem
    return name.replace("_", " ")


def describe(
    document_type: DocumentType,
    area: str,
    lang: str,
    categories: Sequence[str],
    filename: str,
) -> str:
    """Human readable description for an indexed document."""
    template = DESCRIPTION_TEMPLATES[document_type.kind]
    return template.format(
        categories=", ".join(categories),
        area=area,
        lang=lang,
        project=document_type.name,
        stem=PurePosixPath(filename).stem,
        adr=adr_number(filename),
        title=guide_title(filename),
    )
