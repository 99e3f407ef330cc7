from __future__ import annotations

"""Shared pytest fixtures for the retrieval core tests."""

from typing import List

import pytest

from search_common.types import Chunk, ChunkMetadata


def make_chunks(texts: List[str]) -> List[Chunk]:
    return [
        Chunk(
            id=f"chunk-{i}",
            text=text,
            metadata=ChunkMetadata(source_file="corpus.txt", page_number=i + 1),
        )
        for i, text in enumerate(texts)
    ]


@pytest.fixture
def scenario_a_texts() -> List[str]:
    """Three documents of 4, 6 and 5 tokens; 'zebra' only in document 1, twice."""
    return [
        "alpha beta gamma delta",
        "zebra zebra one two three four",
        "red green blue cyan pink",
    ]


@pytest.fixture
def corpus_texts() -> List[str]:
    return [
        "Python is a programming language for data science",
        "The quick brown fox jumps over the lazy dog",
        "Rust is a systems programming language focused on safety",
        "Dogs and foxes are both mammals",
        "Data pipelines move data between systems",
    ]


@pytest.fixture
def corpus_chunks(corpus_texts: List[str]) -> List[Chunk]:
    return make_chunks(corpus_texts)


@pytest.fixture
def corpus_embeddings() -> List[List[float]]:
    """One 3-d embedding per corpus chunk: axis 0 ~ programming, 1 ~ animals, 2 ~ data."""
    return [
        [0.9, 0.0, 0.4],
        [0.0, 1.0, 0.0],
        [1.0, 0.0, 0.1],
        [0.1, 0.9, 0.0],
        [0.2, 0.0, 1.0],
    ]


@pytest.fixture
def chunk_factory():
    return make_chunks
