"""Saving extracted terminology."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Sequence

from .models import TerminologyPair

logger = logging.getLogger(__name__)

CSV_HEADER = ("Source Term", "Target Term")
SUPPORTED_FORMATS = ("csv", "json")


def save_csv(pairs: Sequence[TerminologyPair], path: Path) -> None:
    """Write pairs as a two-column CSV with every field quoted."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_HEADER)
        for p in pairs:
            writer.writerow((p.source_term, p.target_term))

    logger.info(f"Saved {len(pairs)} terms to {path}")


def save_json(pairs: Sequence[TerminologyPair], path: Path) -> None:
    """Write pairs as ``{"terminologyPairs": [...]}``."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {"terminologyPairs": [p.to_dict() for p in pairs]}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info(f"Saved {len(pairs)} terms to {path}")


def save_terms(pairs: Sequence[TerminologyPair], path: Path, fmt: str = "csv") -> None:
    if fmt == "json":
        save_json(pairs, path)
    elif fmt == "csv":
        save_csv(pairs, path)
    else:
        raise ValueError(f"Unsupported output format: {fmt}")
