"""Chunk processing pipeline: per-chunk extraction with retry, then aggregation."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

from .chunker import DEFAULT_MAX_TOKENS_PER_CHUNK, chunk_document
from .dedup import aggregate
from .exceptions import InputError
from .llm_client import ExtractFn, classify_error
from .models import (
    Chunk,
    ChunkEvent,
    ChunkResult,
    ExtractionResult,
    TerminologyPair,
    TmxDocument,
)
from .progress import ExtractionProgress, save_progress
from .prompts import build_extraction_prompt

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF_BASE = 1.0

ProgressCallback = Callable[[int], None]
EventCallback = Callable[[ChunkEvent], None]


def _emit(on_event: Optional[EventCallback], event: ChunkEvent) -> None:
    if on_event is not None:
        on_event(event)


async def process_chunk(
    chunk: Chunk,
    dataset_info: str,
    extract: ExtractFn,
    model: str,
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    on_event: Optional[EventCallback] = None,
) -> ChunkResult:
    """
    Extract terminology from one chunk with bounded retry.

    A retry happens when the call raises, or when it returns no pairs
    while retries remain. Retry ``n`` (1-based) waits
    ``backoff_base * 2 ** (n - 1)`` seconds. Exhausting all attempts yields
    a failed result with no pairs; extraction errors are never raised.

    Args:
        chunk: Chunk to process (not modified)
        dataset_info: Free-text description of the dataset
        extract: Extraction call ``(prompt, model) -> raw pairs``
        model: Model identifier passed to the extraction call
        max_retries: Retries after the first attempt
        backoff_base: Base delay in seconds
        on_event: Optional structured diagnostics callback

    Returns:
        ChunkResult for this chunk
    """
    prompt = build_extraction_prompt(chunk, dataset_info)
    n = chunk.index + 1
    retry_count = 0
    last_error = ""

    _emit(on_event, ChunkEvent("start", chunk.index, message=f"{chunk.unit_count} units"))

    while True:
        attempt = retry_count + 1
        try:
            pairs = list(await extract(prompt, model))
        except Exception as e:
            error_type = classify_error(e)
            last_error = f"{error_type.value}: {e}"
            pairs = []
            logger.warning(f"Error processing chunk {n} on attempt {attempt}: {last_error}")
            _emit(on_event, ChunkEvent("error", chunk.index, attempt, message=last_error))
        else:
            if pairs:
                logger.info(f"Chunk {n} extracted {len(pairs)} terms on attempt {attempt}")
                _emit(on_event, ChunkEvent(
                    "success", chunk.index, attempt, pair_count=len(pairs)
                ))
                return ChunkResult(
                    index=chunk.index,
                    unit_count=chunk.unit_count,
                    pairs=pairs,
                    success=True,
                    attempts=attempt,
                )
            last_error = "no terms returned"
            logger.warning(f"Chunk {n} returned no terms on attempt {attempt}")
            _emit(on_event, ChunkEvent("empty", chunk.index, attempt, message=last_error))

        if retry_count >= max_retries:
            break

        delay = backoff_base * (2 ** retry_count)
        retry_count += 1
        logger.info(f"Retrying chunk {n} in {delay:g}s ({retry_count}/{max_retries})")
        _emit(on_event, ChunkEvent("retry", chunk.index, attempt, delay=delay))
        await asyncio.sleep(delay)

    logger.error(f"Chunk {n} failed after {retry_count + 1} attempts: {last_error}")
    _emit(on_event, ChunkEvent("failed", chunk.index, retry_count + 1, message=last_error))
    return ChunkResult(
        index=chunk.index,
        unit_count=chunk.unit_count,
        pairs=[],
        success=False,
        attempts=retry_count + 1,
        error=last_error,
    )


def compute_progress(processed_units: int, total_units: int) -> int:
    """Percentage of processed units, floored and capped at 100."""
    if total_units <= 0:
        return 100
    # 整数运算，避免浮点误差 (0.29 * 100 == 28.999...)
    return min(100, processed_units * 100 // total_units)


def map_progress(chunk_progress: int, start: int = 20, end: int = 90) -> int:
    """Map chunk progress (0-100) onto an overall progress band."""
    return start + chunk_progress * (end - start) // 100


def _serializable(pairs: List[Any]) -> List[Any]:
    return [p.to_dict() if isinstance(p, TerminologyPair) else p for p in pairs]


async def run_extraction(
    document: TmxDocument,
    dataset_info: str,
    extract: ExtractFn,
    model: str,
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK,
    *,
    on_progress: Optional[ProgressCallback] = None,
    on_event: Optional[EventCallback] = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    checkpoint: Optional[ExtractionProgress] = None,
    checkpoint_path: Optional[Path] = None,
) -> ExtractionResult:
    """
    Chunk the document, process chunks in order, and aggregate the terms.

    Chunk failures are absorbed; a run where every chunk failed returns an
    empty result instead of raising.

    Raises:
        InputError: the document has no translation units
        ValueError: max_tokens_per_chunk is not a positive integer
    """
    if document is None or not document.units:
        raise InputError("No translation units found in TMX document")

    chunks = chunk_document(document, max_tokens_per_chunk)
    total_units = len(document.units)
    logger.info(
        f"Processing {total_units} translation units in {len(chunks)} chunks "
        f"of ~{max_tokens_per_chunk} tokens"
    )

    if checkpoint is not None and not checkpoint.is_compatible(len(chunks), max_tokens_per_chunk):
        logger.warning("Checkpoint does not match current chunking, starting fresh")
        checkpoint = ExtractionProgress.create(
            checkpoint.input_file, len(chunks), max_tokens_per_chunk
        )

    raw_pairs: List[Any] = []
    processed_units = 0
    failed_chunks = 0

    for chunk in chunks:
        if checkpoint is not None and checkpoint.is_done(chunk.index):
            # 从进度恢复
            raw_pairs.extend(checkpoint.raw_pairs.get(chunk.index, []))
            if chunk.index in checkpoint.failed_chunks:
                failed_chunks += 1
            logger.debug(f"Chunk {chunk.index + 1} restored from checkpoint")
        else:
            logger.info(
                f"Processing chunk {chunk.index + 1}/{len(chunks)} "
                f"with {chunk.unit_count} units"
            )
            result = await process_chunk(
                chunk, dataset_info, extract, model,
                max_retries=max_retries,
                backoff_base=backoff_base,
                on_event=on_event,
            )
            raw_pairs.extend(result.pairs)
            if not result.success:
                failed_chunks += 1

            if checkpoint is not None:
                checkpoint.mark_completed(chunk.index, _serializable(result.pairs), result.success)
                if checkpoint_path is not None:
                    save_progress(checkpoint, checkpoint_path)

        processed_units += chunk.unit_count
        if on_progress is not None:
            on_progress(compute_progress(processed_units, total_units))

    if failed_chunks:
        logger.warning(
            f"Completed with {failed_chunks} failed chunks "
            f"out of {len(chunks)} total chunks"
        )
    else:
        logger.info(f"All {len(chunks)} chunks processed successfully")

    return ExtractionResult(
        pairs=aggregate(raw_pairs),
        total_chunks=len(chunks),
        failed_chunks=failed_chunks,
        raw_pair_count=len(raw_pairs),
    )


async def extract_terminology(
    document: TmxDocument,
    dataset_info: str,
    extract: ExtractFn,
    model: str,
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK,
    **kwargs,
) -> List[TerminologyPair]:
    """Run the pipeline and return only the deduplicated pairs."""
    result = await run_extraction(
        document, dataset_info, extract, model, max_tokens_per_chunk, **kwargs
    )
    return result.pairs
