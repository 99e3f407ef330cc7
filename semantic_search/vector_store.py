"""
In-memory Vector Store for Hybrid Retrieval
Holds precomputed chunk embeddings and ranks them by cosine similarity
"""

import gzip
import pickle
import logging
from typing import List, Dict, Any, Optional, Sequence, Tuple

import numpy as np

from search_common.exceptions import DimensionMismatchError, IndexLoadError

# Lower bound for the cosine denominator so all-zero vectors score 0
NORM_EPSILON = 1e-9


class VectorStore:
    """
    Dense embedding container with brute-force cosine similarity search

    Row i of the embedding matrix belongs to document id i. Every search is a
    linear scan over all rows, which is the dominant query cost; no
    approximate nearest-neighbour structure is used.
    """

    def __init__(self, embeddings: Sequence[Sequence[float]] = ()):
        """
        Build a store from one embedding per document

        Args:
            embeddings: Embeddings in document id order

        Raises:
            DimensionMismatchError: If any embedding differs in length
                from the first one
        """
        self.logger = logging.getLogger(__name__)
        rows = list(embeddings)

        if not rows:
            self.dimension = 0
            self.embeddings = np.zeros((0, 0), dtype=np.float32)
            self._norms = np.zeros(0, dtype=np.float64)
            return

        dimension = len(rows[0])
        for i, embedding in enumerate(rows):
            if len(embedding) != dimension:
                raise DimensionMismatchError(i, len(embedding), dimension)

        self.dimension = dimension
        self.embeddings = np.asarray(rows, dtype=np.float32).reshape(len(rows), dimension)
        self._norms = np.linalg.norm(self.embeddings.astype(np.float64), axis=1)

        self.logger.info(f"Vector store built: {len(rows):,} embeddings of dimension {dimension}")

    def __len__(self) -> int:
        return self.embeddings.shape[0]

    @staticmethod
    def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
        """
        Cosine similarity of two vectors

        Returns 0.0 when the vectors differ in length. The denominator is
        clamped to NORM_EPSILON so zero vectors yield 0.0 instead of NaN.
        """
        if len(a) != len(b):
            return 0.0

        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        denominator = max(float(np.linalg.norm(a) * np.linalg.norm(b)), NORM_EPSILON)
        similarity = float(np.dot(a, b)) / denominator
        return float(np.clip(similarity, -1.0, 1.0))

    def search(self, query_embedding: Sequence[float], limit: int = 10) -> List[Tuple[int, float]]:
        """
        Rank stored embeddings by cosine similarity to the query

        Args:
            query_embedding: Query vector of length `dimension`
            limit: Maximum number of results

        Returns:
            (doc_id, similarity) pairs sorted by similarity descending and then
            by ascending doc id; empty for an empty store or a query of the
            wrong dimension
        """
        if len(self) == 0 or limit <= 0:
            return []
        if len(query_embedding) != self.dimension:
            self.logger.warning(
                f"Query dimension {len(query_embedding)} does not match store dimension {self.dimension}"
            )
            return []

        query = np.asarray(query_embedding, dtype=np.float64)
        denominators = np.maximum(self._norms * np.linalg.norm(query), NORM_EPSILON)
        similarities = np.clip((self.embeddings @ query) / denominators, -1.0, 1.0)

        doc_ids = np.arange(len(self))
        order = np.lexsort((doc_ids, -similarities))[:limit]
        return [(int(doc_id), float(similarities[doc_id])) for doc_id in order]

    def get_embedding(self, doc_id: int) -> Optional[np.ndarray]:
        """Copy of the embedding stored for a document, or None"""
        if 0 <= doc_id < len(self):
            return self.embeddings[doc_id].copy()
        return None

    def get_index_stats(self) -> Dict[str, Any]:
        """Get vector store statistics"""
        return {
            'total_documents': len(self),
            'dimension': self.dimension,
            'zero_vectors': int(np.sum(self._norms == 0.0)),
            'memory_bytes': int(self.embeddings.nbytes)
        }

    def to_dict(self) -> Dict[str, Any]:
        """Field-for-field record of the store"""
        return {
            'embeddings': self.embeddings.tolist(),
            'dimension': self.dimension
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VectorStore':
        """
        Rebuild a store from a record produced by to_dict()

        Raises:
            IndexLoadError: If the record is incomplete or its dimension
                disagrees with the stored embeddings
            DimensionMismatchError: If the embeddings have mixed lengths
        """
        try:
            embeddings = data['embeddings']
            dimension = int(data['dimension'])
        except (KeyError, TypeError, ValueError) as e:
            raise IndexLoadError(f"Malformed vector store record: {e}") from e

        store = cls(embeddings)
        if store.dimension != dimension:
            raise IndexLoadError(
                f"Record dimension {dimension} does not match embeddings of dimension {store.dimension}"
            )
        return store

    def to_bytes(self) -> bytes:
        """Serialize the store as a gzip-compressed pickle of to_dict()"""
        return gzip.compress(pickle.dumps(self.to_dict(), protocol=pickle.HIGHEST_PROTOCOL))

    @classmethod
    def from_bytes(cls, payload: bytes) -> 'VectorStore':
        """Load a store from to_bytes() output; only load trusted payloads"""
        try:
            data = pickle.loads(gzip.decompress(payload))
        except (OSError, EOFError, pickle.UnpicklingError) as e:
            raise IndexLoadError(f"Failed to decode vector store: {e}") from e

        if not isinstance(data, dict):
            raise IndexLoadError(f"Expected a dict record, got {type(data).__name__}")
        return cls.from_dict(data)
