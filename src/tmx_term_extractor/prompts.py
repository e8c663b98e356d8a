"""Prompt construction for terminology extraction."""

from __future__ import annotations

import json

from .models import Chunk

# Units beyond this are not included in a single prompt
MAX_PROMPT_SAMPLES = 100

SYSTEM_PROMPT = (
    "You are a terminology extraction expert. "
    "Extract bilingual terminology pairs from translation memory data. "
    "Output valid JSON only."
)


def build_extraction_prompt(chunk: Chunk, dataset_info: str) -> str:
    """
    Build the extraction instruction for one chunk.

    Pure function of the chunk data and the free-text dataset description.
    """
    samples = chunk.to_prompt_data()[:MAX_PROMPT_SAMPLES]
    info = dataset_info.strip() if dataset_info else ""

    return f"""
You are a terminology extraction expert. Extract bilingual terminology pairs from the following translation memory data.

## Dataset Information:
{info or 'N/A'}

## Language Pair:
Source Language: {chunk.source_language or 'unknown'}
Target Language: {chunk.target_language or 'unknown'}

## Translation Memory Data (sample of {len(samples)} translation units):
{json.dumps(samples, ensure_ascii=False, indent=2)}

Please analyze these translation units and extract bilingual terminology pairs.
Focus on specialized terms, technical concepts, and domain-specific vocabulary.
Return your answer in the following JSON format only:
{{
  "terminologyPairs": [
    {{
      "sourceTerm": "term in source language",
      "targetTerm": "equivalent term in target language"
    }}
  ]
}}
"""
