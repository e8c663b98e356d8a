"""Data models for translation memory units, chunks and terminology pairs."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TranslationUnit:
    """One aligned source/target segment pair from a TMX document."""

    source: str
    target: str

    @property
    def text(self) -> str:
        """Combined text used for token estimation."""
        return self.source + self.target

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass
class TmxDocument:
    """Parsed translation memory: language pair plus ordered units."""

    source_language: str
    target_language: str
    units: List[TranslationUnit] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.units)


@dataclass
class Chunk:
    """A contiguous, token-bounded group of units sent as one extraction request."""

    units: List[TranslationUnit]
    source_language: str = ""
    target_language: str = ""
    index: int = 0

    @property
    def unit_count(self) -> int:
        return len(self.units)

    def to_prompt_data(self) -> List[Dict[str, str]]:
        """Units as JSON-serialisable dicts."""
        return [u.to_dict() for u in self.units]


@dataclass(frozen=True)
class TerminologyPair:
    """A source-language term and its target-language equivalent."""

    source_term: str
    target_term: str

    def to_dict(self) -> Dict[str, str]:
        return {"sourceTerm": self.source_term, "targetTerm": self.target_term}


@dataclass
class ChunkResult:
    """Outcome of processing one chunk."""

    index: int
    unit_count: int
    pairs: List[Any] = field(default_factory=list)
    success: bool = True
    attempts: int = 0
    error: str = ""


@dataclass
class ExtractionResult:
    """Final deduplicated pairs plus run statistics."""

    pairs: List[TerminologyPair]
    total_chunks: int = 0
    failed_chunks: int = 0
    raw_pair_count: int = 0

    @property
    def succeeded_chunks(self) -> int:
        return self.total_chunks - self.failed_chunks

    @property
    def is_empty(self) -> bool:
        return not self.pairs


@dataclass
class ChunkEvent:
    """Structured diagnostic event emitted by the chunk driver."""

    kind: str  # start | success | empty | error | retry | failed
    chunk_index: int
    attempt: int = 0
    message: str = ""
    pair_count: int = 0
    delay: Optional[float] = None
