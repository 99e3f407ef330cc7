"""
Exception hierarchy for the retrieval core
Construction and load failures are typed; searches never raise for bad input
"""

from typing import Optional


class RetrievalError(Exception):
    """Base class for all retrieval core errors"""


class DimensionMismatchError(RetrievalError, ValueError):
    """
    Raised when an embedding does not match the store dimension

    Attributes:
        index: Position of the offending embedding
        found_len: Length of the offending embedding
        expected_len: Dimension fixed by the first embedding
    """

    def __init__(self, index: int, found_len: int, expected_len: int):
        self.index = index
        self.found_len = found_len
        self.expected_len = expected_len
        super().__init__(
            f"Embedding {index} has dimension {found_len} but expected {expected_len}"
        )


class InvalidParameterError(RetrievalError, ValueError):
    """Raised for scoring or fusion parameters outside their valid domain"""

    def __init__(self, name: str, value: object, reason: Optional[str] = None):
        self.name = name
        self.value = value
        message = f"Invalid value for {name}: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidMetadataError(RetrievalError, TypeError):
    """Raised when chunk metadata holds a value that is not JSON-compatible"""


class CorpusMismatchError(RetrievalError):
    """Raised when an index and its chunk list disagree on corpus size"""

    def __init__(self, index_size: int, corpus_size: int):
        self.index_size = index_size
        self.corpus_size = corpus_size
        super().__init__(
            f"Index covers {index_size} documents but corpus has {corpus_size} chunks"
        )


class IndexLoadError(RetrievalError):
    """Raised when a serialized index record is malformed"""
