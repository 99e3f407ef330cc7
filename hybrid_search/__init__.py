"""
Hybrid Search Module for chunk retrieval
Combines BM25 keyword search and dense vector search
using Reciprocal Rank Fusion (RRF)
"""

from .fusion_strategies import RRFusion, hybrid_search
from .hybrid_searcher import HybridSearcher

__all__ = [
    "HybridSearcher",
    "RRFusion",
    "hybrid_search"
]
