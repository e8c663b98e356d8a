"""Tests for data models."""

import pytest
from dataclasses import FrozenInstanceError

from tmx_term_extractor.models import (
    Chunk,
    ExtractionResult,
    TerminologyPair,
    TranslationUnit,
)


class TestTranslationUnit:

    def test_immutable(self):
        unit = TranslationUnit("Hello", "Hola")
        with pytest.raises(FrozenInstanceError):
            unit.source = "Bye"

    def test_text(self):
        assert TranslationUnit("ab", "cd").text == "abcd"


class TestChunk:

    def test_prompt_data(self):
        chunk = Chunk([TranslationUnit("Hello", "Hola")], "en", "es")
        assert chunk.unit_count == 1
        assert chunk.to_prompt_data() == [{"source": "Hello", "target": "Hola"}]


class TestTerminologyPair:

    def test_to_dict(self):
        assert TerminologyPair("cloud", "nube").to_dict() == {
            "sourceTerm": "cloud",
            "targetTerm": "nube",
        }


class TestExtractionResult:

    def test_counts(self):
        result = ExtractionResult([], total_chunks=3, failed_chunks=3)
        assert result.is_empty
        assert result.succeeded_chunks == 0
