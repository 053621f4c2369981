"""Core archdocs data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List

MAX_SIZE = 2**32 - 1


class DocumentKind(str, Enum):
    """Closed set of document kinds the scanner understands."""

    AGREEMENTS = "agreements"
    C1_DIAGRAM = "c1"
    C2_DIAGRAM = "c2"
    C3_DIAGRAM = "c3"
    C4_DIAGRAM = "c4"
    ERD_DIAGRAM = "erd"
    ADR_DOCUMENT = "adr"
    OPENAPI_SPEC = "openapi"
    GUIDE_DOC = "guide"


# C1..C3 share the project root prefix; the rest get their own branch.
_URI_PREFIXES: Dict[DocumentKind, str] = {
    DocumentKind.AGREEMENTS: "docs://agreements/",
    DocumentKind.C1_DIAGRAM: "docs://architecture/{name}/",
    DocumentKind.C2_DIAGRAM: "docs://architecture/{name}/",
    DocumentKind.C3_DIAGRAM: "docs://architecture/{name}/",
    DocumentKind.C4_DIAGRAM: "docs://architecture/{name}/c4/",
    DocumentKind.ERD_DIAGRAM: "docs://architecture/erd/{name}/",
    DocumentKind.ADR_DOCUMENT: "docs://architecture/{name}/adr/",
    DocumentKind.OPENAPI_SPEC: "docs://openapi/{name}/",
    DocumentKind.GUIDE_DOC: "docs://guides/{name}/",
}

CONTEXT_DIAGRAMS = frozenset(
    {DocumentKind.C1_DIAGRAM, DocumentKind.C2_DIAGRAM, DocumentKind.C3_DIAGRAM}
)


@dataclass(frozen=True, slots=True)
class DocumentType:
    """A document kind plus its payload (project or guide product name).

    ``Agreements`` carries no payload; every other kind is bound to a name.
    """

    kind: DocumentKind
    name: str = ""

    @classmethod
    def agreements(cls) -> "DocumentType":
        return cls(DocumentKind.AGREEMENTS)

    @property
    def uri_prefix(self) -> str:
        return _URI_PREFIXES[self.kind].format(name=self.name)

    @property
    def is_context_diagram(self) -> bool:
        """True for C1, C2 and C3 diagrams."""
        return self.kind in CONTEXT_DIAGRAMS

    def __str__(self) -> str:
        if self.kind is DocumentKind.AGREEMENTS:
            return "agreements"
        return f"{self.kind.value}({self.name})"


@dataclass(slots=True)
class ResourceInfo:
    """Indexed document metadata."""

    uri: str
    file_path: str
    area: str
    lang: str
    category: List[str] = field(default_factory=list)
    project: str = ""
    mime_type: str = "text/plain"
    size: int = 0
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def clamp_size(size: int) -> int:
    """Saturate a byte count to the unsigned 32-bit range."""
    return min(max(size, 0), MAX_SIZE)
