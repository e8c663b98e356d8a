"""Validation and deduplication of extracted terminology pairs."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .models import TerminologyPair
from .text_utils import normalize_term

logger = logging.getLogger(__name__)


def _raw_fields(item: Any) -> Tuple[Any, Any]:
    """Pull (source, target) out of a pair object or a response dict."""
    if isinstance(item, TerminologyPair):
        return item.source_term, item.target_term
    if isinstance(item, Mapping):
        source = item.get("sourceTerm", item.get("source_term"))
        target = item.get("targetTerm", item.get("target_term"))
        return source, target
    return None, None


def is_valid_pair(item: Any) -> bool:
    """Both terms present, text, and non-empty after trimming."""
    source, target = _raw_fields(item)
    return bool(normalize_term(source)) and bool(normalize_term(target))


def filter_valid_pairs(raw_pairs: Iterable[Any]) -> List[TerminologyPair]:
    """
    Drop malformed entries and return trimmed TerminologyPair objects.

    Rejections are not errors; they only show up as a smaller count.
    """
    valid: List[TerminologyPair] = []
    dropped = 0

    for item in raw_pairs:
        source, target = _raw_fields(item)
        source, target = normalize_term(source), normalize_term(target)
        if source and target:
            valid.append(TerminologyPair(source, target))
        else:
            dropped += 1
            logger.debug(f"Dropping invalid pair: {item!r}")

    if dropped:
        logger.debug(f"Dropped {dropped} invalid pairs")
    return valid


def deduplicate_terms(pairs: Iterable[TerminologyPair]) -> List[TerminologyPair]:
    """
    Collapse pairs sharing a source term (case-insensitive).

    The longest target term wins; on equal length the first one seen is
    kept. The emitted source term uses the casing of its first occurrence.
    """
    # lowercased source -> best target
    best_target: Dict[str, str] = {}
    # lowercased source -> first-seen original casing
    first_casing: Dict[str, str] = {}

    for pair in pairs:
        key = pair.source_term.lower()
        first_casing.setdefault(key, pair.source_term)

        existing = best_target.get(key)
        if existing is None or len(existing) < len(pair.target_term):
            best_target[key] = pair.target_term

    return [
        TerminologyPair(first_casing[key], target)
        for key, target in best_target.items()
    ]


def aggregate(raw_pairs: Iterable[Any]) -> List[TerminologyPair]:
    """Validate then deduplicate raw pairs from all chunks."""
    raw_list = list(raw_pairs)
    valid = filter_valid_pairs(raw_list)
    unique = deduplicate_terms(valid)

    logger.info(
        f"Terms: {len(raw_list)} raw, {len(valid)} valid, "
        f"{len(unique)} after deduplication"
    )
    return unique
