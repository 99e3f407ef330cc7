"""
BM25 Keyword Index for Hybrid Retrieval
Inverted index with per-term document postings and Okapi BM25 scoring
"""

import gzip
import math
import pickle
import logging
from collections import Counter
from typing import List, Dict, Any, Optional, Iterable, Tuple

from tqdm import tqdm

from search_common.config import BM25Params
from search_common.exceptions import IndexLoadError
from search_common.types import Chunk
from .tokenizer import tokenize


class BM25Index:
    """
    BM25 index built once per corpus snapshot and queried read-only

    Document ids are positions in the sequence the index was built from.
    Postings are kept as a doc_id -> term frequency mapping per term, so a
    term frequency lookup is O(1) instead of a scan over the postings list.
    """

    def __init__(self, params: Optional[BM25Params] = None):
        """
        Initialize an empty BM25 index

        Args:
            params: Immutable scoring parameters (defaults k1=1.2, b=0.75)
        """
        self.params = params or BM25Params()
        self.logger = logging.getLogger(__name__)

        self.doc_frequencies: Dict[str, int] = {}
        self.doc_lengths: List[int] = []
        self.avg_doc_length: float = 0.0
        self.total_docs: int = 0
        self.inverted_index: Dict[str, Dict[int, int]] = {}

    @property
    def k1(self) -> float:
        return self.params.k1

    @property
    def b(self) -> float:
        return self.params.b

    @classmethod
    def build(
        cls,
        texts: Iterable[str],
        params: Optional[BM25Params] = None,
        show_progress: bool = False
    ) -> 'BM25Index':
        """
        Build a BM25 index from raw document texts

        Args:
            texts: Document texts; the i-th text becomes document id i
            params: Optional scoring parameters
            show_progress: Display a tqdm progress bar while indexing

        Returns:
            Fully built index
        """
        index = cls(params)
        for text in tqdm(texts, desc="Indexing documents", disable=not show_progress):
            index._add_document(tokenize(text))
        index._update_avg_doc_length()

        index.logger.info(
            f"BM25 index built: {index.total_docs:,} documents, "
            f"{len(index.doc_frequencies):,} terms, "
            f"avg length {index.avg_doc_length:.1f} tokens"
        )
        return index

    @classmethod
    def from_chunks(
        cls,
        chunks: Iterable[Chunk],
        params: Optional[BM25Params] = None,
        show_progress: bool = False
    ) -> 'BM25Index':
        """Build a BM25 index over the text of each chunk, in order"""
        return cls.build((chunk.text for chunk in chunks), params, show_progress)

    def _add_document(self, tokens: List[str]):
        doc_id = self.total_docs
        if not tokens:
            self.logger.warning(f"No valid tokens for document {doc_id}")

        self.doc_lengths.append(len(tokens))
        for term, tf in Counter(tokens).items():
            self.doc_frequencies[term] = self.doc_frequencies.get(term, 0) + 1
            self.inverted_index.setdefault(term, {})[doc_id] = tf
        self.total_docs += 1

    def _update_avg_doc_length(self):
        if self.doc_lengths:
            self.avg_doc_length = sum(self.doc_lengths) / len(self.doc_lengths)
        else:
            self.avg_doc_length = 0.0

    def get_term_frequency(self, term: str, doc_id: int) -> int:
        """Occurrences of term in the given document (0 if absent)"""
        return self.inverted_index.get(term, {}).get(doc_id, 0)

    def postings(self, term: str) -> List[Tuple[int, int]]:
        """(doc_id, term_frequency) pairs for term, ascending by doc id"""
        return list(self.inverted_index.get(term, {}).items())

    def _idf(self, term: str) -> float:
        df = self.doc_frequencies.get(term, 0)
        if df == 0:
            return 0.0
        idf = math.log((self.total_docs - df + 0.5) / (df + 0.5) + 1.0)
        return max(idf, self.params.epsilon)

    def _length_norm(self, doc_id: int) -> float:
        # Empty corpus statistics fall back to the constant part of the norm
        if self.avg_doc_length <= 0:
            return 1.0 - self.b
        return 1.0 - self.b + self.b * (self.doc_lengths[doc_id] / self.avg_doc_length)

    def _score_tokens(self, query_tokens: List[str], doc_id: int, idfs: Dict[str, float]) -> float:
        score = 0.0
        length_norm = self._length_norm(doc_id)

        for term in query_tokens:
            tf = self.get_term_frequency(term, doc_id)
            if tf == 0:
                continue

            idf = idfs.get(term, 0.0)
            if idf == 0.0:
                continue

            # b > 1 can drive the norm of short documents to zero or below
            denominator = tf + self.k1 * length_norm
            if denominator <= 0:
                continue

            normalized_tf = (tf * (self.k1 + 1.0)) / denominator
            score += idf * normalized_tf

        return score

    def _query_idfs(self, query_tokens: List[str]) -> Dict[str, float]:
        return {term: self._idf(term) for term in set(query_tokens) if term in self.doc_frequencies}

    def score(self, query: str, doc_id: int) -> float:
        """
        BM25 score of a single document against a query

        Args:
            query: Raw query text
            doc_id: Document id in [0, total_docs)

        Returns:
            Score, 0.0 for unknown documents or queries without indexed terms
        """
        if not 0 <= doc_id < self.total_docs:
            return 0.0
        query_tokens = tokenize(query)
        return self._score_tokens(query_tokens, doc_id, self._query_idfs(query_tokens))

    def get_scores(self, query: str) -> List[float]:
        """
        Score every document in the corpus

        This is the full linear scan over all documents, the dominant cost of a
        naive BM25 query. search() only visits documents in the postings of the
        query terms and returns the same ranking.
        """
        query_tokens = tokenize(query)
        if not query_tokens:
            return [0.0] * self.total_docs

        idfs = self._query_idfs(query_tokens)
        return [self._score_tokens(query_tokens, doc_id, idfs) for doc_id in range(self.total_docs)]

    def search(self, query: str, limit: int = 10) -> List[Tuple[int, float]]:
        """
        Rank documents against a keyword query

        Args:
            query: Raw query text
            limit: Maximum number of results

        Returns:
            (doc_id, score) pairs with score > 0, sorted by score descending
            and then by ascending doc id
        """
        if self.total_docs == 0 or limit <= 0:
            return []

        query_tokens = tokenize(query)
        if not query_tokens:
            self.logger.debug(f"No valid tokens in query: '{query}'")
            return []

        idfs = self._query_idfs(query_tokens)

        # Documents outside every query term's postings score exactly 0
        candidates = set()
        for term in idfs:
            candidates.update(self.inverted_index[term])

        results = []
        for doc_id in candidates:
            score = self._score_tokens(query_tokens, doc_id, idfs)
            if score > 0.0:
                results.append((doc_id, score))

        results.sort(key=lambda item: (-item[1], item[0]))
        self.logger.debug(f"BM25 query '{query}' matched {len(results)} documents")
        return results[:limit]

    def get_index_stats(self) -> Dict[str, Any]:
        """Get index statistics"""
        return {
            'total_documents': self.total_docs,
            'vocabulary_size': len(self.doc_frequencies),
            'avg_doc_length': self.avg_doc_length,
            'total_postings': sum(len(p) for p in self.inverted_index.values()),
            'params': self.params.to_dict()
        }

    def to_dict(self) -> Dict[str, Any]:
        """Field-for-field record of the index state"""
        return {
            'doc_frequencies': dict(self.doc_frequencies),
            'doc_lengths': list(self.doc_lengths),
            'avg_doc_length': self.avg_doc_length,
            'total_docs': self.total_docs,
            'inverted_index': {
                term: [[doc_id, tf] for doc_id, tf in postings.items()]
                for term, postings in self.inverted_index.items()
            },
            'k1': self.params.k1,
            'b': self.params.b,
            'epsilon': self.params.epsilon
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BM25Index':
        """
        Rebuild an index from a record produced by to_dict()

        Raises:
            IndexLoadError: If the record is incomplete or inconsistent
        """
        try:
            params = BM25Params(
                k1=data.get('k1', 1.2),
                b=data.get('b', 0.75),
                epsilon=data.get('epsilon', 0.0)
            )
            index = cls(params)
            index.doc_lengths = [int(length) for length in data['doc_lengths']]
            index.total_docs = int(data['total_docs'])
            index.doc_frequencies = {term: int(df) for term, df in data['doc_frequencies'].items()}
            index.inverted_index = {
                term: {int(doc_id): int(tf) for doc_id, tf in sorted(postings)}
                for term, postings in data['inverted_index'].items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise IndexLoadError(f"Malformed BM25 index record: {e}") from e

        if index.total_docs != len(index.doc_lengths):
            raise IndexLoadError(
                f"total_docs={index.total_docs} but {len(index.doc_lengths)} document lengths"
            )
        if set(index.doc_frequencies) != set(index.inverted_index):
            raise IndexLoadError("doc_frequencies and inverted_index cover different terms")
        for term, postings in index.inverted_index.items():
            if any(not 0 <= doc_id < index.total_docs for doc_id in postings):
                raise IndexLoadError(f"Postings for '{term}' reference unknown documents")
            if index.doc_frequencies[term] != len(postings):
                raise IndexLoadError(
                    f"Document frequency {index.doc_frequencies[term]} for '{term}' "
                    f"does not match {len(postings)} postings"
                )

        index._update_avg_doc_length()
        return index

    def to_bytes(self) -> bytes:
        """Serialize the index as a gzip-compressed pickle of to_dict()"""
        return gzip.compress(pickle.dumps(self.to_dict(), protocol=pickle.HIGHEST_PROTOCOL))

    @classmethod
    def from_bytes(cls, payload: bytes) -> 'BM25Index':
        """Load an index from to_bytes() output; only load trusted payloads"""
        try:
            data = pickle.loads(gzip.decompress(payload))
        except (OSError, EOFError, pickle.UnpicklingError) as e:
            raise IndexLoadError(f"Failed to decode BM25 index: {e}") from e

        if not isinstance(data, dict):
            raise IndexLoadError(f"Expected a dict record, got {type(data).__name__}")
        return cls.from_dict(data)
