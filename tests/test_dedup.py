"""Tests for dedup module."""

import pytest

from tmx_term_extractor.dedup import (
    aggregate,
    deduplicate_terms,
    filter_valid_pairs,
    is_valid_pair,
)
from tmx_term_extractor.models import TerminologyPair


def pair(source, target):
    return {"sourceTerm": source, "targetTerm": target}


class TestIsValidPair:

    def test_valid_dict(self):
        assert is_valid_pair(pair("cloud", "nube"))

    def test_valid_pair_object(self):
        assert is_valid_pair(TerminologyPair("cloud", "nube"))

    @pytest.mark.parametrize("item", [
        pair("", "algo"),
        pair("term", "  "),
        pair(None, "x"),
        pair("x", 42),
        {"sourceTerm": "only source"},
        "not a pair",
        None,
        ["cloud", "nube"],
    ])
    def test_invalid(self, item):
        assert not is_valid_pair(item)


class TestFilterValidPairs:

    def test_drops_and_trims(self):
        raw = [
            pair("  cloud ", " nube  "),
            pair("", "algo"),
            pair("term", "  "),
            None,
        ]
        assert filter_valid_pairs(raw) == [TerminologyPair("cloud", "nube")]

    def test_snake_case_keys(self):
        raw = [{"source_term": "server", "target_term": "servidor"}]
        assert filter_valid_pairs(raw) == [TerminologyPair("server", "servidor")]


class TestDeduplicateTerms:

    def test_case_insensitive_first_casing(self):
        result = deduplicate_terms([
            TerminologyPair("API", "interface"),
            TerminologyPair("api", "interfaz"),
        ])
        assert len(result) == 1
        assert result[0].source_term == "API"

    def test_longer_target_wins(self):
        result = deduplicate_terms([
            TerminologyPair("cloud", "nube"),
            TerminologyPair("cloud", "computación en la nube"),
        ])
        assert result == [TerminologyPair("cloud", "computación en la nube")]

    def test_equal_length_keeps_first(self):
        result = deduplicate_terms([
            TerminologyPair("cat", "gato"),
            TerminologyPair("Cat", "mish"),
        ])
        assert result == [TerminologyPair("cat", "gato")]

    def test_shorter_later_does_not_replace(self):
        result = deduplicate_terms([
            TerminologyPair("disk", "disco duro"),
            TerminologyPair("DISK", "disco"),
        ])
        assert result == [TerminologyPair("disk", "disco duro")]

    def test_distinct_terms_kept(self):
        pairs = [TerminologyPair("a", "1"), TerminologyPair("b", "2")]
        assert sorted(deduplicate_terms(pairs), key=lambda p: p.source_term) == pairs


class TestAggregate:

    def test_mixed_batch(self):
        raw = [
            pair("API", "interface"),
            pair("api", "interfaz"),
            pair("cloud", "nube"),
            pair("cloud", "computación en la nube"),
            pair("", "algo"),
            pair("term", "  "),
        ]
        result = {p.source_term: p.target_term for p in aggregate(raw)}
        assert result == {
            "API": "interface",
            "cloud": "computación en la nube",
        }

    def test_idempotent(self):
        raw = [
            pair("Server", "servidor"),
            pair("server", "servidor web"),
            pair("Client", "cliente"),
            pair(" ", "x"),
        ]
        once = aggregate(raw)
        twice = aggregate(once)
        assert twice == once

    def test_no_case_insensitive_duplicates(self):
        raw = [pair(s, "x" * i) for i, s in enumerate(["Term", "TERM", "term", "tErM"], 1)]
        result = aggregate(raw)
        assert len(result) == 1
        assert result[0] == TerminologyPair("Term", "xxxx")

    def test_empty(self):
        assert aggregate([]) == []
