"""LLM API client utilities."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List
from enum import Enum

from openai import (
    AsyncOpenAI,
    APIConnectionError,
    RateLimitError,
    AuthenticationError,
    BadRequestError,
    APIStatusError,
)

from .exceptions import ExtractionError
from .prompts import SYSTEM_PROMPT
from .text_utils import strip_code_fences, truncate_text

logger = logging.getLogger(__name__)

# Gemini's OpenAI-compatible endpoint
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.0-flash"

# Extraction call contract: (prompt, model) -> raw pair dicts
ExtractFn = Callable[[str, str], Awaitable[List[Any]]]

CONNECTIVITY_TEST_PROMPT = """
Extract terminology pairs from this simple example:
SOURCE: "The computer processes data quickly."
TARGET: "L'ordinateur traite les données rapidement."

Return JSON only: {"terminologyPairs": [{"sourceTerm": "...", "targetTerm": "..."}]}
"""


class APIErrorType(Enum):
    """API 错误类型分类。"""
    RATE_LIMIT = "rate_limit"      # 429
    CONNECTION = "connection"       # 网络问题
    AUTH = "auth"                   # 401
    BAD_REQUEST = "bad_request"     # 400
    SERVER = "server"               # 500+
    RESPONSE = "response"           # 响应无法解析
    UNKNOWN = "unknown"


def classify_error(error: Exception) -> APIErrorType:
    """分类 API 错误，用于日志记录。"""
    if isinstance(error, RateLimitError):
        return APIErrorType.RATE_LIMIT
    elif isinstance(error, APIConnectionError):
        return APIErrorType.CONNECTION
    elif isinstance(error, AuthenticationError):
        return APIErrorType.AUTH
    elif isinstance(error, BadRequestError):
        return APIErrorType.BAD_REQUEST
    elif isinstance(error, APIStatusError):
        if hasattr(error, 'status_code') and error.status_code >= 500:
            return APIErrorType.SERVER
        return APIErrorType.UNKNOWN
    elif isinstance(error, ExtractionError):
        return APIErrorType.RESPONSE
    else:
        return APIErrorType.UNKNOWN


def normalize_model_name(model: str) -> str:
    """Strip a leading "models/" prefix from a model name."""
    return re.sub(r'^models/', '', model.strip())


async def call_llm_async(
    client: AsyncOpenAI,
    model: str,
    messages: List[Dict[str, str]],
    temperature: float = 0.2,
    json_mode: bool = False,
) -> str:
    """
    Make a single async call to the LLM API.

    Retrying is left to the caller.

    Args:
        client: AsyncOpenAI client instance
        model: Model name to use
        messages: List of message dictionaries
        temperature: Sampling temperature
        json_mode: Whether to request JSON response format

    Returns:
        Response content as string
    """
    params: Dict = {
        "model": normalize_model_name(model),
        "messages": messages,
        "temperature": temperature,
    }
    if json_mode:
        params["response_format"] = {"type": "json_object"}

    response = await client.chat.completions.create(**params)
    content = response.choices[0].message.content
    return content.strip() if content else ""


def parse_terminology_response(json_str: str) -> List[Any]:
    """
    Parse the JSON response of an extraction call.

    Entries are returned as-is; validating individual pairs is done later
    during aggregation.

    Raises:
        ExtractionError: response is empty, not JSON, or has no
            ``terminologyPairs`` list
    """
    if not json_str:
        raise ExtractionError("Empty response from LLM")

    try:
        data = json.loads(strip_code_fences(json_str))
    except json.JSONDecodeError as e:
        logger.debug(f"Raw response: {truncate_text(json_str, 200)}")
        raise ExtractionError(f"Failed to parse LLM response as JSON: {e}") from e

    pairs = data.get("terminologyPairs") if isinstance(data, dict) else None
    if not isinstance(pairs, list):
        raise ExtractionError("Invalid response format - missing terminologyPairs array")

    return pairs


async def request_terminology(
    client: AsyncOpenAI,
    model: str,
    prompt: str,
) -> List[Any]:
    """Send an extraction prompt and return the raw pair list."""
    content = await call_llm_async(
        client, model,
        [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt}
        ],
        temperature=0.2,
        json_mode=True,
    )
    return parse_terminology_response(content)


def make_extractor(client: AsyncOpenAI) -> ExtractFn:
    """
    Bind a client (and its credentials) into an extraction call.

    Any coroutine function with the same ``(prompt, model)`` signature can
    be used in its place.
    """
    async def extract(prompt: str, model: str) -> List[Any]:
        return await request_terminology(client, model, prompt)

    return extract


async def check_connectivity(client: AsyncOpenAI, model: str) -> int:
    """
    Run a tiny extraction to verify the key and model before a long run.

    Returns:
        Number of pairs returned by the test call
    """
    logger.info(f"Testing API connectivity with model: {model}")
    pairs = await request_terminology(client, model, CONNECTIVITY_TEST_PROMPT)

    if pairs:
        logger.info("API test successful")
    else:
        logger.warning("API test returned no results, proceeding with caution")
    return len(pairs)


def create_client(
    api_key: str,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 120.0
) -> AsyncOpenAI:
    """
    Create an AsyncOpenAI client.

    Args:
        api_key: API key for authentication
        base_url: API base URL
        timeout: Default timeout for requests

    Returns:
        Configured AsyncOpenAI client
    """
    # 重试由 chunk 处理器负责
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_retries=0,
    )
