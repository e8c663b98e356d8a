"""Checkpointing and resume support."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict
from datetime import datetime

logger = logging.getLogger(__name__)

PROGRESS_SUFFIX = ".progress.json"


@dataclass
class ExtractionProgress:
    """提取进度记录。"""

    input_file: str
    max_tokens_per_chunk: int
    total_chunks: int
    completed_chunks: List[int]
    failed_chunks: List[int]
    raw_pairs: Dict[int, List[Any]]  # chunk index -> raw pairs
    started_at: str
    updated_at: str

    @classmethod
    def create(
        cls, input_file: str, total_chunks: int, max_tokens_per_chunk: int
    ) -> "ExtractionProgress":
        """创建新的进度记录。"""
        now = datetime.now().isoformat()
        return cls(
            input_file=input_file,
            max_tokens_per_chunk=max_tokens_per_chunk,
            total_chunks=total_chunks,
            completed_chunks=[],
            failed_chunks=[],
            raw_pairs={},
            started_at=now,
            updated_at=now,
        )

    def mark_completed(self, chunk_idx: int, pairs: List[Any], success: bool = True) -> None:
        """标记 chunk 完成并保存原始术语。"""
        if chunk_idx not in self.completed_chunks:
            self.completed_chunks.append(chunk_idx)
        if success:
            if chunk_idx in self.failed_chunks:
                self.failed_chunks.remove(chunk_idx)
        elif chunk_idx not in self.failed_chunks:
            self.failed_chunks.append(chunk_idx)
        self.raw_pairs[chunk_idx] = list(pairs)
        self.updated_at = datetime.now().isoformat()

    def is_done(self, chunk_idx: int) -> bool:
        return chunk_idx in self.completed_chunks

    def is_compatible(self, total_chunks: int, max_tokens_per_chunk: int) -> bool:
        """Chunk indices only line up if the chunking parameters match."""
        return (
            self.total_chunks == total_chunks
            and self.max_tokens_per_chunk == max_tokens_per_chunk
        )

    @property
    def completion_rate(self) -> float:
        """完成率 (0-1)。"""
        if self.total_chunks == 0:
            return 1.0
        return len(self.completed_chunks) / self.total_chunks


def get_progress_file(input_path: Path) -> Path:
    """获取进度文件路径。"""
    return input_path.with_suffix(input_path.suffix + PROGRESS_SUFFIX)


def save_progress(progress: ExtractionProgress, path: Path) -> bool:
    """
    保存进度到文件。

    Returns:
        True if successful
    """
    try:
        data = asdict(progress)
        # JSON 要求 key 为 str
        data['raw_pairs'] = {str(k): v for k, v in data['raw_pairs'].items()}

        with path.open('w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.debug(f"Progress saved to {path}")
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to save progress: {e}")
        return False


def load_progress(path: Path) -> Optional[ExtractionProgress]:
    """
    从文件加载进度。

    Returns:
        ExtractionProgress if found and valid, None otherwise
    """
    if not path.exists():
        return None

    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)

        data['raw_pairs'] = {int(k): v for k, v in data['raw_pairs'].items()}

        return ExtractionProgress(**data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Failed to load progress file: {e}")
        return None


def delete_progress(path: Path) -> None:
    """删除进度文件。"""
    try:
        if path.exists():
            path.unlink()
            logger.debug(f"Progress file deleted: {path}")
    except OSError as e:
        logger.warning(f"Failed to delete progress file: {e}")
