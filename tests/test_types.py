from __future__ import annotations

"""Chunk, metadata and search result model tests."""

import dataclasses

import pytest

from search_common.exceptions import InvalidMetadataError
from search_common.types import Chunk, ChunkMetadata, SearchResult, SearchType


def test_metadata_collects_unknown_fields() -> None:
    metadata = ChunkMetadata.from_dict(
        {"source_file": "report.pdf", "page_number": 3, "author": "ops", "tags": ["q4", "sales"]}
    )

    assert metadata.source_file == "report.pdf"
    assert metadata.page_number == 3
    assert metadata.document_title is None
    assert metadata.extra_fields == {"author": "ops", "tags": ["q4", "sales"]}
    assert metadata.get("author") == "ops"
    assert metadata.get("page_number") == 3
    assert metadata.get("missing", "fallback") == "fallback"


def test_metadata_flattens_extra_fields_back() -> None:
    raw = {
        "source_file": "a.md",
        "page_number": 1,
        "document_title": "Guide",
        "section": {"level": 2, "numbered": True, "weight": 0.5, "parent": None},
    }
    assert ChunkMetadata.from_dict(raw).to_dict() == raw


def test_metadata_defaults() -> None:
    metadata = ChunkMetadata.from_dict(None)
    assert (metadata.source_file, metadata.page_number, metadata.extra_fields) == ("", 0, {})


def test_metadata_rejects_non_json_values() -> None:
    with pytest.raises(InvalidMetadataError):
        ChunkMetadata(extra_fields={"when": object()})
    with pytest.raises(InvalidMetadataError):
        ChunkMetadata(extra_fields={"nested": {1: "non-string key"}})
    with pytest.raises(InvalidMetadataError):
        ChunkMetadata(extra_fields={"source_file": "shadowed"})


def test_chunk_is_immutable_and_serializable() -> None:
    chunk = Chunk.from_dict({"id": "c1", "text": "hello", "metadata": {"page_number": 2, "lang": "en"}})

    with pytest.raises(dataclasses.FrozenInstanceError):
        chunk.text = "changed"
    assert Chunk.from_dict(chunk.to_dict()) == chunk
    assert Chunk.from_dict({"id": 7, "text": "no metadata"}).metadata == ChunkMetadata()


def test_metadata_is_detached_from_caller_dicts() -> None:
    extra = {"lang": "en", "tags": ["q4"]}
    chunk = Chunk(id="c1", text="hello", metadata=ChunkMetadata(extra_fields=extra))

    extra["lang"] = object()
    extra["tags"].append("late")
    chunk.metadata.to_dict()["tags"].append("copy")

    assert chunk.metadata.extra_fields == {"lang": "en", "tags": ["q4"]}
    assert Chunk.from_dict(chunk.to_dict()) == chunk


def test_search_type_uses_lowercase_values() -> None:
    assert [t.value for t in SearchType] == ["keyword", "semantic", "hybrid"]
    assert SearchType("hybrid") is SearchType.HYBRID


def test_search_result_serialization() -> None:
    result = SearchResult(score=0.5, chunk=Chunk(id="c1", text="body"), search_type=SearchType.SEMANTIC)

    data = result.to_dict()

    assert data["search_type"] == "semantic"
    assert data["chunk"]["id"] == "c1"
    assert SearchResult.from_dict(data) == result
