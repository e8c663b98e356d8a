"""Token-bounded chunking of translation units."""

from __future__ import annotations

import math
import logging
from typing import List, Sequence

from .models import Chunk, TmxDocument, TranslationUnit

logger = logging.getLogger(__name__)

# Default token budget per extraction request
DEFAULT_MAX_TOKENS_PER_CHUNK = 100000

# 1 token is roughly 4 characters of English text
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Cheap character-count token estimate, not a real tokenizer."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def chunk_units(
    units: Sequence[TranslationUnit],
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK,
    source_language: str = "",
    target_language: str = "",
) -> List[Chunk]:
    """
    Split units into contiguous chunks bounded by an estimated token budget.

    A unit is never split. A unit whose estimate alone exceeds the budget
    gets a chunk of its own.

    Args:
        units: Ordered translation units
        max_tokens_per_chunk: Positive token budget per chunk
        source_language: Source language copied into every chunk
        target_language: Target language copied into every chunk

    Returns:
        Ordered list of non-empty chunks
    """
    if isinstance(max_tokens_per_chunk, bool) or not isinstance(max_tokens_per_chunk, int):
        raise ValueError(f"max_tokens_per_chunk must be an integer, got {max_tokens_per_chunk!r}")
    if max_tokens_per_chunk < 1:
        raise ValueError(f"max_tokens_per_chunk must be positive, got {max_tokens_per_chunk}")

    chunks: List[Chunk] = []
    current: List[TranslationUnit] = []
    current_tokens = 0

    def close() -> None:
        chunks.append(Chunk(
            units=current,
            source_language=source_language,
            target_language=target_language,
            index=len(chunks),
        ))

    for unit in units:
        unit_tokens = estimate_tokens(unit.text)

        # 超出预算时先关闭当前 chunk（当前 chunk 为空时除外）
        if current_tokens + unit_tokens > max_tokens_per_chunk and current:
            close()
            current = []
            current_tokens = 0

        current.append(unit)
        current_tokens += unit_tokens

    if current:
        close()

    logger.debug(
        f"Split {len(units)} units into {len(chunks)} chunks "
        f"(~{max_tokens_per_chunk} tokens each)"
    )
    return chunks


def chunk_document(
    document: TmxDocument,
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK,
) -> List[Chunk]:
    """Chunk a parsed document, carrying its language pair into each chunk."""
    return chunk_units(
        document.units,
        max_tokens_per_chunk,
        source_language=document.source_language,
        target_language=document.target_language,
    )
