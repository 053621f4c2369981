"""Tests for filtering, pagination and aggregate views."""

from __future__ import annotations

import pytest

from archdocs.errors import InvalidQueryParameters, ResourceNotFound
from archdocs.index.search import (
    Searcher,
    adr_sort_key,
    filter_documents,
    matches_category_filter,
    matches_filter,
    paginate,
)
from archdocs.index.storage import DocumentIndex
from archdocs.models import ResourceInfo


def _info(
    uri: str,
    area: str = "backend",
    lang: str = "php",
    category: list[str] | None = None,
    project: str = "",
    size: int = 1,
) -> ResourceInfo:
    return ResourceInfo(
        uri=uri,
        file_path=uri.removeprefix("docs://"),
        area=area,
        lang=lang,
        category=category if category is not None else ["agreements"],
        project=project,
        size=size,
    )


def _searcher(*documents: ResourceInfo) -> Searcher:
    index = DocumentIndex()
    for info in documents:
        index.insert(info.uri, info)
    return Searcher(index.freeze())


class TestMatchesFilter:
    """Pipe-separated OR filters."""

    def test_none_matches_everything(self) -> None:
        assert matches_filter("anything", None)
        assert matches_filter("", None)

    def test_alternatives(self) -> None:
        assert matches_filter("a", "a|b")
        assert matches_filter("b", "a|b")
        assert not matches_filter("c", "a|b")

    def test_tokens_are_trimmed(self) -> None:
        assert matches_filter("b", " a | b ")

    def test_exact_match_only(self) -> None:
        assert not matches_filter("backend", "back")

    def test_category_filter(self) -> None:
        assert matches_category_filter(["agreements", "api"], "api|db")
        assert not matches_category_filter(["agreements"], "api|db")
        assert matches_category_filter([], None)

    def test_filter_documents_combines_fields(self) -> None:
        documents = [
            _info("docs://1", area="backend", lang="php"),
            _info("docs://2", area="frontend", lang="ts"),
            _info("docs://3", area="backend", lang="go"),
        ]

        result = filter_documents(documents, area="backend", lang="php|ts")

        assert [info.uri for info in result] == ["docs://1"]


class TestPaginate:
    """Pagination boundaries."""

    def test_empty(self) -> None:
        page = paginate([], 1, 50)

        assert page.total_documents == 0
        assert page.total_pages == 0
        assert page.documents == []

    def test_total_pages_round_up(self) -> None:
        documents = [_info(f"docs://{i:03d}") for i in range(101)]

        last = paginate(documents, 3, 50)

        assert last.total_pages == 3
        assert [info.uri for info in last.documents] == ["docs://100"]

    def test_page_beyond_range_is_empty(self) -> None:
        documents = [_info("docs://a"), _info("docs://b")]

        page = paginate(documents, 5, 1)

        assert page.documents == []
        assert page.total_pages == 2
        assert page.current_page == 5

    @pytest.mark.parametrize(("page", "limit"), [(0, 50), (-1, 50), (1, 0), (1, 201)])
    def test_invalid_parameters(self, page: int, limit: int) -> None:
        with pytest.raises(InvalidQueryParameters):
            paginate([], page, limit)

    def test_limit_bounds_are_inclusive(self) -> None:
        assert paginate([], 1, 1).limit == 1
        assert paginate([], 1, 200).limit == 200


class TestSearcher:
    """Tests for the query API."""

    def test_resolve(self) -> None:
        searcher = _searcher(_info("docs://agreements/a.md"))

        assert searcher.resolve("docs://agreements/a.md").file_path == "agreements/a.md"
        with pytest.raises(ResourceNotFound, match="docs://missing"):
            searcher.resolve("docs://missing")

    def test_filter_and_paginate(self) -> None:
        searcher = _searcher(
            _info("docs://a", category=["agreements", "api"]),
            _info("docs://b", category=["agreements", "db"]),
            _info("docs://c", category=["agreements", "ci"]),
        )

        page = searcher.filter_and_paginate(category="api|db", limit=1, page=2)

        assert page.total_documents == 2
        assert page.total_pages == 2
        assert [info.uri for info in page.documents] == ["docs://b"]

    def test_filter_and_paginate_rejects_before_filtering(self) -> None:
        with pytest.raises(InvalidQueryParameters):
            _searcher().filter_and_paginate(page=0)

    def test_adr_documents_sorted_by_number(self) -> None:
        searcher = _searcher(
            _info("docs://adr/a", category=["adr", "ADR-010"]),
            _info("docs://adr/b", category=["adr", "ADR-002"]),
            _info("docs://adr/c", category=["adr", "ADR-draft"]),
            _info("docs://adr/d", category=["adr", "ADR-unknown"]),
            _info("docs://other", category=["erd"]),
        )

        result = searcher.adr_documents()

        assert [info.uri for info in result] == [
            "docs://adr/c",
            "docs://adr/d",
            "docs://adr/b",
            "docs://adr/a",
        ]

    def test_adr_sort_key(self) -> None:
        assert adr_sort_key(_info("docs://x", category=["adr", "ADR-007"])) == 7
        assert adr_sort_key(_info("docs://x", category=["adr", "ADR-٣"])) == 0
        assert adr_sort_key(_info("docs://x", category=["adr"])) == 0

    def test_project_overview(self) -> None:
        searcher = _searcher(
            _info("docs://p/c1", area="architecture", lang="", category=["c1"], project="p", size=10),
            _info("docs://p/erd", area="architecture", lang="", category=["erd"], project="p", size=5),
            _info("docs://p/api", area="openapi", lang="", category=["openapi"], project="p", size=1),
            _info("docs://q/c1", area="architecture", lang="", category=["c1"], project="q"),
        )

        overview = searcher.project_overview("p")

        assert overview.total_documents == 3
        assert overview.total_size == 16
        assert list(overview.documents_by_type) == ["c1", "erd", "openapi"]
        assert list(overview.documents_by_area) == ["architecture", "openapi"]
        assert list(overview.documents_by_language) == ["none"]
        assert len(overview.documents_by_language["none"]) == 3
        assert [info.uri for info in overview.all_documents] == [
            "docs://p/api",
            "docs://p/c1",
            "docs://p/erd",
        ]

    def test_project_overview_unknown(self) -> None:
        with pytest.raises(ResourceNotFound, match="No documents found for project: x"):
            _searcher().project_overview("x")

    def test_agreements_by_language(self) -> None:
        searcher = _searcher(
            _info("docs://a", lang="php"),
            _info("docs://b", lang="go"),
            _info("docs://c", lang="php", category=["erd"]),
        )

        assert [info.uri for info in searcher.agreements("php")] == ["docs://a"]

    def test_agreements_on_empty_index(self) -> None:
        assert _searcher().agreements("php") == []
