"""
BM25 Keyword Search Module for Hybrid Retrieval
Provides keyword relevance ranking over an inverted index
"""

from .tokenizer import tokenize
from .bm25_indexer import BM25Index
from .bm25_searcher import BM25Searcher, quick_bm25_search

__all__ = [
    "tokenize",
    "BM25Index",
    "BM25Searcher",
    "quick_bm25_search"
]
