"""
Shared components for the hybrid retrieval core
Data model, configuration and errors used by the keyword, semantic and hybrid engines
"""

from .config import BM25Params, SearchConfig, configure_logging
from .types import Chunk, ChunkMetadata, SearchResult, SearchType, JSONValue
from .exceptions import (
    RetrievalError,
    DimensionMismatchError,
    InvalidParameterError,
    InvalidMetadataError,
    CorpusMismatchError,
    IndexLoadError,
)

__all__ = [
    'BM25Params', 'SearchConfig', 'configure_logging',
    'Chunk', 'ChunkMetadata', 'SearchResult', 'SearchType', 'JSONValue',
    'RetrievalError', 'DimensionMismatchError', 'InvalidParameterError',
    'InvalidMetadataError', 'CorpusMismatchError', 'IndexLoadError',
]
