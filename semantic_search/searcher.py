"""
Semantic Search over precomputed chunk embeddings
Query embeddings are produced by the caller's embedding model
"""

import logging
from typing import List, Dict, Any, Optional, Sequence

from search_common.exceptions import CorpusMismatchError
from search_common.types import Chunk, SearchResult, SearchType
from .vector_store import VectorStore


class SemanticSearcher:
    """
    Semantic search engine for chunks
    Queries the in-memory vector store with a query embedding
    """

    def __init__(self, chunks: Sequence[Chunk], vector_store: VectorStore):
        """
        Initialize semantic searcher

        Args:
            chunks: Corpus in document id order
            vector_store: Store holding one embedding per chunk

        Raises:
            CorpusMismatchError: If the store and chunk list differ in size
        """
        self.logger = logging.getLogger(__name__)
        self.chunks = list(chunks)

        if len(vector_store) != len(self.chunks):
            raise CorpusMismatchError(len(vector_store), len(self.chunks))
        self.vector_store = vector_store

        self.logger.info(
            f"Semantic searcher initialized with {len(self.chunks):,} chunks "
            f"(dimension {vector_store.dimension})"
        )

    def search(self, query_embedding: Sequence[float], top_k: int = 10) -> List[SearchResult]:
        """
        Perform semantic search

        Args:
            query_embedding: Embedding of the query text
            top_k: Number of results to return

        Returns:
            Semantic search results, most similar first
        """
        hits = self.vector_store.search(query_embedding, top_k)
        results = [
            SearchResult(score=score, chunk=self.chunks[doc_id], search_type=SearchType.SEMANTIC)
            for doc_id, score in hits
        ]
        self.logger.info(f"Found {len(results)} semantic results")
        return results

    def search_similar_chunks(self, doc_id: int, top_k: int = 5) -> List[SearchResult]:
        """
        Find chunks similar to a given chunk, excluding the chunk itself

        Args:
            doc_id: Document id of the reference chunk
            top_k: Number of similar chunks to return

        Returns:
            Similar chunks, most similar first; empty for unknown ids
        """
        embedding = self.vector_store.get_embedding(doc_id)
        if embedding is None:
            return []

        hits = self.vector_store.search(embedding, top_k + 1)
        return [
            SearchResult(score=score, chunk=self.chunks[hit_id], search_type=SearchType.SEMANTIC)
            for hit_id, score in hits if hit_id != doc_id
        ][:top_k]

    def get_chunk(self, doc_id: int) -> Optional[Chunk]:
        """Get chunk by document id"""
        if 0 <= doc_id < len(self.chunks):
            return self.chunks[doc_id]
        return None

    def get_index_stats(self) -> Dict[str, Any]:
        """Get vector store statistics"""
        return self.vector_store.get_index_stats()
