"""
BM25 Searcher for Hybrid Retrieval
Maps keyword index hits back to the chunks they were built from
"""

import logging
from typing import List, Dict, Any, Optional, Sequence

from search_common.config import BM25Params
from search_common.exceptions import CorpusMismatchError
from search_common.types import Chunk, SearchResult, SearchType
from .bm25_indexer import BM25Index


class BM25Searcher:
    """
    BM25 search engine for keyword-based chunk search
    Document id i of the index is chunks[i]
    """

    def __init__(
        self,
        chunks: Sequence[Chunk],
        index: Optional[BM25Index] = None,
        params: Optional[BM25Params] = None
    ):
        """
        Initialize BM25 searcher

        Args:
            chunks: Corpus in document id order
            index: Optional pre-built index over the same chunks
            params: Scoring parameters used when the index is built here

        Raises:
            CorpusMismatchError: If the index and chunk list differ in size
        """
        self.logger = logging.getLogger(__name__)
        self.chunks = list(chunks)

        if index is None:
            index = BM25Index.from_chunks(self.chunks, params)
        elif index.total_docs != len(self.chunks):
            raise CorpusMismatchError(index.total_docs, len(self.chunks))
        self.index = index

        self.logger.info(f"BM25 searcher initialized with {len(self.chunks):,} chunks")

    def search(self, query: str, top_k: int = 10) -> List[SearchResult]:
        """
        Perform BM25 keyword search

        Args:
            query: Search query string
            top_k: Number of results to return

        Returns:
            Keyword search results, best first
        """
        hits = self.index.search(query, top_k)
        results = [
            SearchResult(score=score, chunk=self.chunks[doc_id], search_type=SearchType.KEYWORD)
            for doc_id, score in hits
        ]
        self.logger.info(f"Found {len(results)} BM25 results for '{query}'")
        return results

    def multi_search(self, queries: List[str], top_k: int = 10) -> Dict[str, List[SearchResult]]:
        """
        Perform multiple BM25 searches

        Args:
            queries: List of search queries
            top_k: Number of results per query

        Returns:
            Dictionary mapping queries to their results
        """
        return {query: self.search(query, top_k) for query in queries}

    def get_chunk(self, doc_id: int) -> Optional[Chunk]:
        """Get chunk by document id"""
        if 0 <= doc_id < len(self.chunks):
            return self.chunks[doc_id]
        return None

    def get_index_stats(self) -> Dict[str, Any]:
        """Get BM25 index statistics"""
        return self.index.get_index_stats()


# Convenience function for quick BM25 searches
def quick_bm25_search(query: str, chunks: Sequence[Chunk], top_k: int = 5) -> List[SearchResult]:
    """
    Build a throwaway index over chunks and search it

    Args:
        query: Search query
        chunks: Corpus to index
        top_k: Number of results

    Returns:
        Search results
    """
    return BM25Searcher(chunks).search(query, top_k)
