"""
TMX Term Extractor - LLM-powered bilingual terminology extraction.

Features:
- Token-bounded chunking of translation memory units
- Per-chunk LLM extraction with retry and exponential backoff
- Partial-failure tolerant processing
- Case-insensitive deduplication keeping the most complete translation
- Progress saving and resume support
"""

__version__ = "1.0.0"

from .models import (
    TranslationUnit,
    TmxDocument,
    Chunk,
    TerminologyPair,
    ChunkResult,
    ExtractionResult,
    ChunkEvent,
)
from .exceptions import TermExtractorError, InputError, ExtractionError
from .tmx_parser import parse_tmx, load_tmx, validate_tmx_file
from .chunker import chunk_units, chunk_document, estimate_tokens, DEFAULT_MAX_TOKENS_PER_CHUNK
from .prompts import build_extraction_prompt
from .dedup import aggregate, deduplicate_terms, filter_valid_pairs, is_valid_pair
from .processor import process_chunk, run_extraction, extract_terminology
from .llm_client import create_client, make_extractor
from .exporter import save_csv, save_json
from .config import ExtractorConfig
from .progress import ExtractionProgress, save_progress, load_progress

__all__ = [
    # Models
    "TranslationUnit",
    "TmxDocument",
    "Chunk",
    "TerminologyPair",
    "ChunkResult",
    "ExtractionResult",
    "ChunkEvent",
    "ExtractorConfig",
    "ExtractionProgress",
    # Errors
    "TermExtractorError",
    "InputError",
    "ExtractionError",
    # Parsing
    "parse_tmx",
    "load_tmx",
    "validate_tmx_file",
    # Chunking
    "chunk_units",
    "chunk_document",
    "estimate_tokens",
    "DEFAULT_MAX_TOKENS_PER_CHUNK",
    # Extraction
    "build_extraction_prompt",
    "process_chunk",
    "run_extraction",
    "extract_terminology",
    "create_client",
    "make_extractor",
    # Aggregation
    "aggregate",
    "deduplicate_terms",
    "filter_valid_pairs",
    "is_valid_pair",
    # Output
    "save_csv",
    "save_json",
    # Progress
    "save_progress",
    "load_progress",
]
