from __future__ import annotations

"""Hybrid searcher tests: both engines fused through RRF."""

import pytest

from bm25 import BM25Index
from hybrid_search import HybridSearcher
from search_common.config import SearchConfig
from search_common.exceptions import CorpusMismatchError
from search_common.types import SearchType
from semantic_search import VectorStore

QUERY = "programming language"
QUERY_EMBEDDING = [1.0, 0.0, 0.2]


def build_searcher(chunks, embeddings, **config_overrides) -> HybridSearcher:
    config = SearchConfig(**config_overrides)
    return HybridSearcher(chunks, VectorStore(embeddings), config=config)


def test_fuses_keyword_and_semantic_rankings(corpus_chunks, corpus_embeddings) -> None:
    searcher = build_searcher(corpus_chunks, corpus_embeddings)

    results = searcher.search(QUERY, QUERY_EMBEDDING, top_k=3)

    assert [result.chunk.id for result in results] == ["chunk-0", "chunk-2", "chunk-4"]
    assert results[0].score == pytest.approx(1 / 61 + 1 / 62)
    assert results[0].score == results[1].score
    assert all(result.search_type == SearchType.HYBRID for result in results)


def test_parallel_and_sequential_agree(corpus_chunks, corpus_embeddings) -> None:
    parallel = build_searcher(corpus_chunks, corpus_embeddings, parallel_search=True)
    sequential = build_searcher(corpus_chunks, corpus_embeddings, parallel_search=False)

    assert parallel.search(QUERY, QUERY_EMBEDDING, top_k=5) == sequential.search(QUERY, QUERY_EMBEDDING, top_k=5)


def test_keyword_miss_falls_back_to_semantic_order(corpus_chunks, corpus_embeddings) -> None:
    searcher = build_searcher(corpus_chunks, corpus_embeddings)

    results = searcher.search("zzz qqq", [0.0, 1.0, 0.0], top_k=2)

    assert [result.chunk.id for result in results] == ["chunk-1", "chunk-3"]
    assert [result.score for result in results] == pytest.approx([1 / 61, 1 / 62])


def test_stats_report_fusion_and_timing(corpus_chunks, corpus_embeddings) -> None:
    searcher = build_searcher(corpus_chunks, corpus_embeddings, rrf_k=30)

    output = searcher.search_with_stats(QUERY, QUERY_EMBEDDING, top_k=3)

    stats = output["stats"]
    assert len(output["results"]) == 3
    assert stats["consensus_items"] == 2
    assert stats["rrf_k_parameter"] == 30
    assert set(stats["timing"]) == {"search_time", "fusion_time", "total_time"}


def test_default_limit_and_empty_limit(corpus_chunks, corpus_embeddings) -> None:
    searcher = build_searcher(corpus_chunks, corpus_embeddings, default_limit=2)

    assert len(searcher.search(QUERY, QUERY_EMBEDDING)) == 2
    assert searcher.search(QUERY, QUERY_EMBEDDING, top_k=0) == []


def test_candidate_depth_limits_each_engine(corpus_chunks, corpus_embeddings) -> None:
    searcher = build_searcher(corpus_chunks, corpus_embeddings)

    results = searcher.search(QUERY, QUERY_EMBEDDING, top_k=5, keyword_top_k=1, semantic_top_k=1)

    assert [result.chunk.id for result in results] == ["chunk-0", "chunk-2"]


def test_zero_keyword_depth_disables_keyword_candidates(corpus_chunks, corpus_embeddings) -> None:
    searcher = build_searcher(corpus_chunks, corpus_embeddings)

    results = searcher.search(QUERY, [0.0, 1.0, 0.0], top_k=2, keyword_top_k=0)

    assert [result.chunk.id for result in results] == ["chunk-1", "chunk-3"]
    assert [result.score for result in results] == pytest.approx([1 / 61, 1 / 62])


def test_prebuilt_index_must_match_corpus(corpus_chunks, corpus_embeddings) -> None:
    index = BM25Index.from_chunks(corpus_chunks[:4])

    with pytest.raises(CorpusMismatchError):
        HybridSearcher(corpus_chunks, VectorStore(corpus_embeddings), bm25_index=index)
