"""
Fusion Strategies for Hybrid Retrieval
Implements RRF (Reciprocal Rank Fusion) for combining ranked lists
"""

import logging
from typing import List, Dict, Any, Sequence, Tuple
from collections import defaultdict

from search_common.exceptions import InvalidParameterError

DEFAULT_RRF_K = 60

RankedList = Sequence[Tuple[int, float]]


def hybrid_search(
    keyword_results: RankedList,
    semantic_results: RankedList,
    limit: int,
    k: float = DEFAULT_RRF_K
) -> List[Tuple[int, float]]:
    """
    Merge keyword and semantic rankings with Reciprocal Rank Fusion

    Each entry contributes 1 / (k + rank), rank being its 1-based position in
    its own list. Raw scores are ignored since BM25 and cosine scores live on
    different scales.

    Args:
        keyword_results: (doc_id, score) pairs, best first
        semantic_results: (doc_id, score) pairs, best first
        limit: Maximum number of fused results
        k: Smoothing constant

    Returns:
        (doc_id, fused_score) pairs sorted by fused score descending and then
        by ascending doc id
    """
    if k < 0:
        raise InvalidParameterError("k", k, "must be non-negative")

    fused_scores: Dict[int, float] = defaultdict(float)

    for results in (keyword_results, semantic_results):
        for rank, (doc_id, _score) in enumerate(results, 1):
            fused_scores[doc_id] += 1.0 / (k + rank)

    fused = sorted(fused_scores.items(), key=lambda item: (-item[1], item[0]))
    return fused[:max(limit, 0)]


class RRFusion:
    """
    Reciprocal Rank Fusion (RRF) strategy
    Combines ranked lists using the formula: score = 1/(k + rank)
    """

    def __init__(self, k: float = DEFAULT_RRF_K):
        """
        Initialize RRF fusion

        Args:
            k: Smoothing parameter (typically 60), damps the weight of top ranks
        """
        if k < 0:
            raise InvalidParameterError("k", k, "must be non-negative")
        self.k = k
        self.logger = logging.getLogger(__name__)

    def fuse_results(
        self,
        keyword_results: RankedList,
        semantic_results: RankedList,
        max_results: int = 50
    ) -> List[Tuple[int, float]]:
        """
        Fuse keyword and semantic rankings

        Args:
            keyword_results: Ranked (doc_id, score) pairs from BM25
            semantic_results: Ranked (doc_id, score) pairs from the vector store
            max_results: Maximum number of results to return

        Returns:
            Ranked (doc_id, rrf_score) pairs
        """
        fused = hybrid_search(keyword_results, semantic_results, max_results, self.k)
        self.logger.debug(
            f"RRF fusion: {len(keyword_results)} keyword + {len(semantic_results)} semantic "
            f"-> {len(fused)} results"
        )
        return fused

    def get_fusion_stats(
        self,
        keyword_results: RankedList,
        semantic_results: RankedList,
        fused_results: RankedList
    ) -> Dict[str, Any]:
        """
        Get statistics about the fusion results

        Args:
            keyword_results: Keyword input to the fusion
            semantic_results: Semantic input to the fusion
            fused_results: Output of fuse_results()

        Returns:
            Dictionary with fusion statistics
        """
        if not fused_results:
            return {}

        keyword_ids = {doc_id for doc_id, _ in keyword_results}
        semantic_ids = {doc_id for doc_id, _ in semantic_results}
        fused_ids = [doc_id for doc_id, _ in fused_results]

        consensus_count = sum(1 for doc_id in fused_ids if doc_id in keyword_ids and doc_id in semantic_ids)
        keyword_only = sum(1 for doc_id in fused_ids if doc_id in keyword_ids and doc_id not in semantic_ids)
        semantic_only = sum(1 for doc_id in fused_ids if doc_id in semantic_ids and doc_id not in keyword_ids)
        scores = [score for _, score in fused_results]

        return {
            'total_results': len(fused_results),
            'consensus_items': consensus_count,
            'keyword_only': keyword_only,
            'semantic_only': semantic_only,
            'consensus_percentage': (consensus_count / len(fused_results)) * 100,
            'average_rrf_score': sum(scores) / len(scores),
            'rrf_k_parameter': self.k,
            'top_score': scores[0],
            'score_range': {
                'max': max(scores),
                'min': min(scores)
            }
        }
