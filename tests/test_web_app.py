"""Tests for the FastAPI web application."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from archdocs.config import ScanConfig
from archdocs.index.indexer import build_index
from archdocs.index.search import Searcher
from archdocs.utils.files import FileReader
from archdocs.web.app import app, configure


def _touch(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def client(tmp_path: Path) -> Iterator[TestClient]:
    _touch(tmp_path, "content/docs/backend/php/api/rest.md", "# REST\n")
    _touch(tmp_path, "content/docs/backend/go/api/grpc.md", "# gRPC\n")
    _touch(tmp_path, "arch/c4/c1.puml", "@startuml\n@enduml\n")
    _touch(tmp_path, "arch/adr/010-events.mdx", "# Events\n")
    _touch(tmp_path, "arch/adr/002-kafka.mdx", "# Kafka\n")
    config = ScanConfig.from_mapping(
        {
            "projects": [
                {"name": "proj-a", "c4": {"c1": ["arch/c4"]}, "adr": ["arch/adr"]},
            ]
        }
    )
    reader = FileReader(tmp_path)
    index, _ = build_index(reader.docs_root, config)
    configure(Searcher(index), reader)
    yield TestClient(app)
    app.state.searcher = None
    app.state.reader = None


class TestResources:
    """Tests for GET /resources."""

    def test_lists_every_document(self, client: TestClient) -> None:
        response = client.get("/resources")

        assert response.status_code == 200
        data = response.json()
        assert [item["uri"] for item in data["resources"]] == [
            "docs://agreements/backend/go/api/grpc.md",
            "docs://agreements/backend/php/api/rest.md",
            "docs://architecture/proj-a/adr/002-kafka.mdx",
            "docs://architecture/proj-a/adr/010-events.mdx",
            "docs://architecture/proj-a/c1.puml",
        ]
        assert data["stats"]["document_count"] == 5

    def test_index_not_loaded(self) -> None:
        app.state.searcher = None

        response = TestClient(app).get("/resources")

        assert response.status_code == 503


class TestDocuments:
    """Tests for GET /documents."""

    def test_filters(self, client: TestClient) -> None:
        response = client.get("/documents", params={"area": "backend", "lang": "php|ts"})

        assert response.status_code == 200
        data = response.json()
        assert data["total_documents"] == 1
        assert data["total_pages"] == 1
        assert data["current_page"] == 1
        assert data["limit"] == 50
        assert data["documents"][0]["uri"] == "docs://agreements/backend/php/api/rest.md"

    def test_pagination(self, client: TestClient) -> None:
        response = client.get("/documents", params={"page": 3, "limit": 2})

        data = response.json()
        assert data["total_pages"] == 3
        assert [item["uri"] for item in data["documents"]] == ["docs://architecture/proj-a/c1.puml"]

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 201}])
    def test_invalid_parameters(self, client: TestClient, params: dict[str, int]) -> None:
        response = client.get("/documents", params=params)

        assert response.status_code == 400


class TestContent:
    """Tests for GET /documents/content."""

    def test_reads_content(self, client: TestClient) -> None:
        response = client.get(
            "/documents/content", params={"uri": "docs://agreements/backend/php/api/rest.md"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "uri": "docs://agreements/backend/php/api/rest.md",
            "mime_type": "text/markdown",
            "content": "# REST\n",
        }

    def test_requires_scheme(self, client: TestClient) -> None:
        response = client.get("/documents/content", params={"uri": "file:///etc/passwd"})

        assert response.status_code == 400
        assert "docs://" in response.json()["detail"]

    def test_unknown_uri(self, client: TestClient) -> None:
        response = client.get("/documents/content", params={"uri": "docs://missing.md"})

        assert response.status_code == 404

    def test_deleted_file(self, client: TestClient, tmp_path: Path) -> None:
        (tmp_path / "arch/c4/c1.puml").unlink()

        response = client.get(
            "/documents/content", params={"uri": "docs://architecture/proj-a/c1.puml"}
        )

        assert response.status_code == 500
        assert "Failed to read file" in response.json()["detail"]


class TestAggregates:
    """Tests for ADR, project and agreements views."""

    def test_adr(self, client: TestClient) -> None:
        data = client.get("/adr").json()

        assert data["total_adr_documents"] == 2
        assert [item["uri"] for item in data["adr_documents"]] == [
            "docs://architecture/proj-a/adr/002-kafka.mdx",
            "docs://architecture/proj-a/adr/010-events.mdx",
        ]

    def test_project_overview(self, client: TestClient) -> None:
        response = client.get("/projects/proj-a")

        assert response.status_code == 200
        data = response.json()
        assert data["project"] == "proj-a"
        assert data["total_documents"] == 3
        assert sorted(data["documents_by_type"]) == ["ADR-002", "ADR-010", "adr", "c1"]
        assert list(data["documents_by_language"]) == ["none"]

    def test_unknown_project(self, client: TestClient) -> None:
        response = client.get("/projects/nope")

        assert response.status_code == 404

    def test_agreements(self, client: TestClient) -> None:
        data = client.get("/agreements", params={"lang": "go"}).json()

        assert data["lang"] == "go"
        assert data["total_agreements"] == 1
        assert data["agreements"][0]["uri"] == "docs://agreements/backend/go/api/grpc.md"

    def test_agreements_unknown_language(self, client: TestClient) -> None:
        data = client.get("/agreements", params={"lang": "php-legacy"}).json()

        assert data["total_agreements"] == 0
        assert data["agreements"] == []
