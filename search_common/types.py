"""
Shared retrieval data model
Chunks, their metadata and the search results that carry them
"""

import copy
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .exceptions import InvalidMetadataError

# Open-ended metadata value: null, bool, number, string, sequence or mapping
JSONValue = Union[None, bool, int, float, str, List["JSONValue"], Dict[str, "JSONValue"]]

_NAMED_METADATA_FIELDS = ("source_file", "page_number", "document_title")


def _check_json_value(value: Any, path: str) -> None:
    if value is None or isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_json_value(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidMetadataError(f"Non-string key {key!r} at {path}")
            _check_json_value(item, f"{path}.{key}")
        return
    raise InvalidMetadataError(
        f"Unsupported metadata value at {path}: {type(value).__name__}"
    )


@dataclass(frozen=True)
class ChunkMetadata:
    """Provenance metadata with a catch-all bag for unknown fields"""
    source_file: str = ""
    page_number: int = 0
    document_title: Optional[str] = None
    extra_fields: Dict[str, JSONValue] = field(default_factory=dict)

    def __post_init__(self):
        # Detach from the caller's dict so the frozen instance cannot change
        object.__setattr__(self, "extra_fields", copy.deepcopy(dict(self.extra_fields)))
        for key, value in self.extra_fields.items():
            if key in _NAMED_METADATA_FIELDS:
                raise InvalidMetadataError(f"'{key}' is a named metadata field")
            _check_json_value(value, key)

    def get(self, key: str, default: JSONValue = None) -> JSONValue:
        """Look up a named or extra field by key"""
        if key in _NAMED_METADATA_FIELDS:
            return getattr(self, key)
        return self.extra_fields.get(key, default)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'ChunkMetadata':
        """Build metadata from a flat mapping; unknown keys go to extra_fields"""
        data = dict(data or {})
        page_number = data.pop("page_number", 0)
        return cls(
            source_file=str(data.pop("source_file", "") or ""),
            page_number=int(page_number or 0),
            document_title=data.pop("document_title", None),
            extra_fields=data
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flatten named and extra fields into one mapping"""
        result: Dict[str, Any] = copy.deepcopy(self.extra_fields)
        result["source_file"] = self.source_file
        result["page_number"] = self.page_number
        result["document_title"] = self.document_title
        return result


@dataclass(frozen=True)
class Chunk:
    """Atomic retrievable unit of text plus provenance metadata"""
    id: str
    text: str
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Chunk':
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            metadata=ChunkMetadata.from_dict(data.get("metadata"))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "metadata": self.metadata.to_dict()}


class SearchType(str, Enum):
    """Provenance of a search result score"""
    KEYWORD = "keyword"
    SEMANTIC = "semantic"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class SearchResult:
    """Search result; higher score means more relevant"""
    score: float
    chunk: Chunk
    search_type: SearchType

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SearchResult':
        return cls(
            score=float(data["score"]),
            chunk=Chunk.from_dict(data["chunk"]),
            search_type=SearchType(data["search_type"])
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "chunk": self.chunk.to_dict(),
            "search_type": self.search_type.value
        }
