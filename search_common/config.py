"""
Configuration settings for the hybrid retrieval core
"""

import os
import math
import logging
from dataclasses import dataclass, fields
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .exceptions import InvalidParameterError

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class BM25Params:
    """
    Immutable BM25 hyperparameters attached to a single index

    Attributes:
        k1: Term frequency saturation
        b: Document length normalization strength
        epsilon: Lower bound applied to every term's idf
    """

    k1: float = 1.2
    b: float = 0.75
    epsilon: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameterError(f.name, value, "must be a number")
            if not math.isfinite(value):
                raise InvalidParameterError(f.name, value, "must be finite")
            if value < 0:
                raise InvalidParameterError(f.name, value, "must be non-negative")

    def to_dict(self) -> Dict[str, float]:
        return {"k1": self.k1, "b": self.b, "epsilon": self.epsilon}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class SearchConfig:
    """Configuration for the keyword, semantic and hybrid searchers"""

    # BM25 Settings
    bm25_k1: float = 1.2
    bm25_b: float = 0.75
    bm25_epsilon: float = 0.0

    # Fusion Settings
    rrf_k: int = 60
    default_limit: int = 10
    candidate_multiplier: int = 2  # per-engine depth = limit * multiplier
    parallel_search: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'SearchConfig':
        """Create config from environment variables"""
        return cls(
            bm25_k1=float(os.getenv("BM25_K1", "1.2")),
            bm25_b=float(os.getenv("BM25_B", "0.75")),
            bm25_epsilon=float(os.getenv("BM25_EPSILON", "0.0")),
            rrf_k=int(os.getenv("RRF_K", "60")),
            default_limit=int(os.getenv("SEARCH_LIMIT", "10")),
            candidate_multiplier=int(os.getenv("CANDIDATE_MULTIPLIER", "2")),
            parallel_search=_env_bool("PARALLEL_SEARCH", True),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None
        )

    def bm25_params(self) -> BM25Params:
        """Build the immutable BM25 parameter record for a new index"""
        return BM25Params(k1=self.bm25_k1, b=self.bm25_b, epsilon=self.bm25_epsilon)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return {
            field.name: getattr(self, field.name)
            for field in self.__dataclass_fields__.values()
        }


def configure_logging(config: Optional[SearchConfig] = None) -> None:
    """
    Configure root logging for applications embedding the retrieval core

    Args:
        config: SearchConfig providing log level and optional log file
    """
    config = config or SearchConfig()
    level = getattr(logging, str(config.log_level).upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding='utf-8'))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
