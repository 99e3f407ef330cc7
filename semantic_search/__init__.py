"""
Semantic Search Module for Hybrid Retrieval
Ranks chunks by cosine similarity of precomputed embeddings
"""

from .vector_store import VectorStore
from .searcher import SemanticSearcher

__all__ = ['VectorStore', 'SemanticSearcher']
