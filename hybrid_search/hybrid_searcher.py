"""
Hybrid Search Engine for chunk retrieval
Combines Semantic Search (dense vectors) and BM25 Search (sparse keywords)
using Reciprocal Rank Fusion (RRF)
"""

import logging
from typing import List, Dict, Any, Optional, Sequence, Tuple
import concurrent.futures
import time

from search_common.config import SearchConfig
from search_common.types import Chunk, SearchResult, SearchType
from bm25.bm25_indexer import BM25Index
from bm25.bm25_searcher import BM25Searcher
from semantic_search.vector_store import VectorStore
from semantic_search.searcher import SemanticSearcher
from .fusion_strategies import RRFusion

RankedList = List[Tuple[int, float]]


class HybridSearcher:
    """
    Hybrid search engine that combines semantic and BM25 search
    Uses RRF (Reciprocal Rank Fusion) to merge results from both engines
    """

    def __init__(
        self,
        chunks: Sequence[Chunk],
        vector_store: VectorStore,
        bm25_index: Optional[BM25Index] = None,
        config: Optional[SearchConfig] = None
    ):
        """
        Initialize hybrid searcher

        Args:
            chunks: Corpus in document id order, shared by both engines
            vector_store: One embedding per chunk
            bm25_index: Optional pre-built keyword index; built from the
                chunks with the configured parameters when omitted
            config: SearchConfig with fusion and parallelism settings
        """
        self.config = config or SearchConfig()
        self.parallel_search = self.config.parallel_search
        self.logger = logging.getLogger(__name__)

        # Initialize search engines
        self.bm25_searcher = BM25Searcher(chunks, bm25_index, self.config.bm25_params())
        self.semantic_searcher = SemanticSearcher(chunks, vector_store)
        self.chunks = self.bm25_searcher.chunks

        # Initialize fusion strategy
        self.fusion = RRFusion(k=self.config.rrf_k)

        self.logger.info(f"Hybrid searcher initialized with RRF k={self.config.rrf_k}")

    def search(
        self,
        query: str,
        query_embedding: Sequence[float],
        top_k: Optional[int] = None,
        keyword_top_k: Optional[int] = None,
        semantic_top_k: Optional[int] = None
    ) -> List[SearchResult]:
        """
        Perform hybrid search combining semantic and BM25 results

        Args:
            query: Search query string for BM25
            query_embedding: Embedding of the same query for semantic search
            top_k: Number of final results (default: config.default_limit)
            keyword_top_k: BM25 candidate depth (default: top_k * candidate_multiplier)
            semantic_top_k: Semantic candidate depth (default: top_k * candidate_multiplier)

        Returns:
            Hybrid search results with RRF scores
        """
        return self.search_with_stats(
            query, query_embedding, top_k, keyword_top_k, semantic_top_k
        )['results']

    def search_with_stats(
        self,
        query: str,
        query_embedding: Sequence[float],
        top_k: Optional[int] = None,
        keyword_top_k: Optional[int] = None,
        semantic_top_k: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Hybrid search that also reports fusion statistics and timings

        Returns:
            Dictionary with 'results' (List[SearchResult]) and 'stats'
        """
        try:
            top_k = self.config.default_limit if top_k is None else top_k
            if top_k <= 0:
                return {'results': [], 'stats': {}}

            # Retrieve deeper candidate lists for better fusion
            depth = top_k * max(1, self.config.candidate_multiplier)
            keyword_limit = depth if keyword_top_k is None else keyword_top_k
            semantic_limit = depth if semantic_top_k is None else semantic_top_k

            self.logger.info(f"Hybrid search: '{query}' (top_k={top_k})")

            start_time = time.time()
            if self.parallel_search:
                keyword_results, semantic_results = self._parallel_search(
                    query, query_embedding, keyword_limit, semantic_limit
                )
            else:
                keyword_results, semantic_results = self._sequential_search(
                    query, query_embedding, keyword_limit, semantic_limit
                )
            search_time = time.time() - start_time

            start_fusion = time.time()
            fused = self.fusion.fuse_results(keyword_results, semantic_results, max_results=top_k)
            fusion_time = time.time() - start_fusion

            results = [
                SearchResult(score=score, chunk=self.chunks[doc_id], search_type=SearchType.HYBRID)
                for doc_id, score in fused
            ]

            stats = self.fusion.get_fusion_stats(keyword_results, semantic_results, fused)
            stats['timing'] = {
                'search_time': search_time,
                'fusion_time': fusion_time,
                'total_time': search_time + fusion_time
            }
            stats['parallel_search'] = self.parallel_search

            self.logger.info(
                f"Hybrid search completed: {len(results)} results "
                f"(search: {search_time:.3f}s, fusion: {fusion_time:.3f}s)"
            )
            return {'results': results, 'stats': stats}

        except Exception as e:
            self.logger.error(f"Hybrid search failed: {e}")
            raise

    def _parallel_search(
        self,
        query: str,
        query_embedding: Sequence[float],
        keyword_limit: int,
        semantic_limit: int
    ) -> Tuple[RankedList, RankedList]:
        """Perform BM25 and semantic searches in parallel"""
        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            keyword_future = executor.submit(
                self.bm25_searcher.index.search, query, keyword_limit
            )
            semantic_future = executor.submit(
                self.semantic_searcher.vector_store.search, query_embedding, semantic_limit
            )

            return keyword_future.result(), semantic_future.result()

    def _sequential_search(
        self,
        query: str,
        query_embedding: Sequence[float],
        keyword_limit: int,
        semantic_limit: int
    ) -> Tuple[RankedList, RankedList]:
        """Perform BM25 and semantic searches sequentially"""
        keyword_results = self.bm25_searcher.index.search(query, keyword_limit)
        semantic_results = self.semantic_searcher.vector_store.search(query_embedding, semantic_limit)

        return keyword_results, semantic_results
