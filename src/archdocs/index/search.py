"""Filtering, pagination and aggregate views over the document index."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from archdocs.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from archdocs.errors import InvalidQueryParameters, ResourceNotFound
from archdocs.index.storage import DocumentIndex
from archdocs.models import ResourceInfo

ADR_PREFIX = "ADR-"
NO_LANGUAGE = "none"


def _tokens(filter_value: str) -> List[str]:
    return [token.strip() for token in filter_value.split("|")]


def matches_filter(value: str, filter_value: Optional[str]) -> bool:
    """``a|b`` matches ``a`` or ``b``; ``None`` matches everything."""
    if filter_value is None:
        return True
    return value in _tokens(filter_value)


def matches_category_filter(categories: Sequence[str], filter_value: Optional[str]) -> bool:
    if filter_value is None:
        return True
    tokens = _tokens(filter_value)
    return any(category in tokens for category in categories)


def filter_documents(
    documents: Iterable[ResourceInfo],
    area: Optional[str] = None,
    lang: Optional[str] = None,
    category: Optional[str] = None,
) -> List[ResourceInfo]:
    return [
        info
        for info in documents
        if matches_filter(info.area, area)
        and matches_filter(info.lang, lang)
        and matches_category_filter(info.category, category)
    ]


def validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidQueryParameters(f"Page must be greater than 0, got {page}")
    if limit < 1 or limit > MAX_PAGE_LIMIT:
        raise InvalidQueryParameters(
            f"Limit must be between 1 and {MAX_PAGE_LIMIT}, got {limit}"
        )


@dataclass(slots=True)
class DocsPage:
    documents: List[ResourceInfo]
    total_documents: int
    total_pages: int
    current_page: int
    limit: int


def paginate(documents: Sequence[ResourceInfo], page: int, limit: int) -> DocsPage:
    validate_page(page, limit)
    total = len(documents)
    start = (page - 1) * limit
    end = min(start + limit, total)
    return DocsPage(
        documents=list(documents[start:end]) if start < total else [],
        total_documents=total,
        total_pages=(total + limit - 1) // limit,
        current_page=page,
        limit=limit,
    )


def adr_sort_key(info: ResourceInfo) -> int:
    """Numeric ADR suffix; missing or non-numeric numbers sort as 0."""
    for category in info.category:
        if category.startswith(ADR_PREFIX):
            suffix = category[len(ADR_PREFIX):]
            return int(suffix) if suffix.isascii() and suffix.isdigit() else 0
    return 0


@dataclass(slots=True)
class ProjectOverview:
    project: str
    total_documents: int
    total_size: int
    documents_by_type: Dict[str, List[ResourceInfo]] = field(default_factory=dict)
    documents_by_area: Dict[str, List[ResourceInfo]] = field(default_factory=dict)
    documents_by_language: Dict[str, List[ResourceInfo]] = field(default_factory=dict)
    all_documents: List[ResourceInfo] = field(default_factory=list)


def _sorted_groups(groups: Dict[str, List[ResourceInfo]]) -> Dict[str, List[ResourceInfo]]:
    return {key: groups[key] for key in sorted(groups)}


class Searcher:
    """Read-only query API over a built index."""

    def __init__(self, index: DocumentIndex) -> None:
        self.index = index

    def resolve(self, uri: str) -> ResourceInfo:
        info = self.index.get(uri)
        if info is None:
            raise ResourceNotFound(f"Resource not found in scanned documents: {uri}")
        return info

    def list_documents(self) -> List[ResourceInfo]:
        return self.index.values()

    def filter_and_paginate(
        self,
        area: Optional[str] = None,
        lang: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> DocsPage:
        validate_page(page, limit)
        filtered = filter_documents(self.index.values(), area=area, lang=lang, category=category)
        return paginate(filtered, page, limit)

    def adr_documents(self) -> List[ResourceInfo]:
        """ADR documents ordered by ADR number (stable for ties)."""
        documents = [
            info
            for info in self.index.values()
            if any(category.startswith(ADR_PREFIX) for category in info.category)
        ]
        return sorted(documents, key=adr_sort_key)

    def project_overview(self, project: str) -> ProjectOverview:
        documents = [info for info in self.index.values() if info.project == project]
        if not documents:
            raise ResourceNotFound(f"No documents found for project: {project}")

        by_type: Dict[str, List[ResourceInfo]] = defaultdict(list)
        by_area: Dict[str, List[ResourceInfo]] = defaultdict(list)
        by_language: Dict[str, List[ResourceInfo]] = defaultdict(list)
        for info in documents:
            for category in info.category:
                by_type[category].append(info)
            by_area[info.area].append(info)
            by_language[info.lang or NO_LANGUAGE].append(info)

        return ProjectOverview(
            project=project,
            total_documents=len(documents),
            total_size=sum(info.size for info in documents),
            documents_by_type=_sorted_groups(by_type),
            documents_by_area=_sorted_groups(by_area),
            documents_by_language=_sorted_groups(by_language),
            all_documents=documents,
        )

    def agreements(self, lang: str) -> List[ResourceInfo]:
        return [
            info
            for info in self.index.values()
            if info.lang == lang and "agreements" in info.category
        ]
