"""Configuration and constants."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .chunker import DEFAULT_MAX_TOKENS_PER_CHUNK
from .exporter import SUPPORTED_FORMATS
from .llm_client import DEFAULT_BASE_URL, DEFAULT_MODEL
from .processor import DEFAULT_BACKOFF_BASE, DEFAULT_MAX_RETRIES

# Load environment variables once
load_dotenv()

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "OPENAI_API_KEY")


def _api_key_from_env() -> Optional[str]:
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


@dataclass
class ExtractorConfig:
    """Configuration for terminology extraction."""

    # API settings
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    model_name: str = DEFAULT_MODEL
    timeout: float = 120.0

    # Processing settings
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS_PER_CHUNK
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base: float = DEFAULT_BACKOFF_BASE

    # Output settings
    output_format: str = "csv"
    output_prefix: str = "terms_"

    # Progress settings
    save_progress: bool = True

    def __post_init__(self):
        """Load API key from environment if not provided."""
        if self.api_key is None:
            self.api_key = _api_key_from_env()

    @classmethod
    def from_args(cls, args) -> "ExtractorConfig":
        """Create config from argparse namespace."""
        return cls(
            # 未提供时由 __post_init__ 从环境变量读取
            api_key=getattr(args, 'api_key', None) or None,
            base_url=getattr(args, 'base_url', DEFAULT_BASE_URL),
            model_name=getattr(args, 'model_name', DEFAULT_MODEL),
            timeout=getattr(args, 'timeout', 120.0),
            max_tokens_per_chunk=getattr(args, 'max_tokens', DEFAULT_MAX_TOKENS_PER_CHUNK),
            max_retries=getattr(args, 'max_retries', DEFAULT_MAX_RETRIES),
            backoff_base=getattr(args, 'backoff_base', DEFAULT_BACKOFF_BASE),
            output_format=getattr(args, 'output_format', "csv"),
            save_progress=not getattr(args, 'no_progress', False),
        )

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if not self.api_key:
            return "API key is required. Set GEMINI_API_KEY or use --api-key"

        if not self.model_name:
            return "Model name is required"

        if self.max_tokens_per_chunk < 1:
            return f"Max tokens per chunk must be positive, got {self.max_tokens_per_chunk}"

        if self.max_retries < 0:
            return f"Max retries must be >= 0, got {self.max_retries}"

        if self.backoff_base < 0:
            return f"Backoff must be >= 0, got {self.backoff_base}"

        if self.output_format not in SUPPORTED_FORMATS:
            return f"Output format must be one of {', '.join(SUPPORTED_FORMATS)}, got {self.output_format}"

        return None


# Default dataset description file, picked up when present
DEFAULT_DATASET_INFO_FILENAME = "dataset_info.txt"
