"""Exception types."""

from __future__ import annotations


class TermExtractorError(Exception):
    """Base class for all extractor errors."""


class InputError(TermExtractorError):
    """Invalid or degenerate input document. Fatal to the run."""


class ExtractionError(TermExtractorError):
    """The extraction call produced an unusable response."""
