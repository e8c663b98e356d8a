"""TMX file parsing utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional
from xml.etree import ElementTree as ET

from .exceptions import InputError
from .models import TmxDocument, TranslationUnit

logger = logging.getLogger(__name__)

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

SUPPORTED_EXTENSIONS = {".tmx"}
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB


def _segment_text(tuv: ET.Element) -> str:
    seg = tuv.find("seg")
    if seg is None:
        return ""
    # 内联标签 (<bpt>, <ph> ...) 中的文本也保留
    return "".join(seg.itertext()).strip()


def _lang_of(tuv: ET.Element) -> str:
    return tuv.get(XML_LANG) or tuv.get("lang") or ""


def _same_lang(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def parse_tmx(content: str) -> TmxDocument:
    """
    Parse TMX content into a TmxDocument.

    The source language comes from ``<header srclang>``; the first other
    language seen becomes the target. Units missing either side are skipped.

    Args:
        content: Raw TMX file content

    Returns:
        Parsed document

    Raises:
        InputError: invalid XML, missing languages, or no usable units
    """
    if not content or not content.strip():
        raise InputError("TMX content is empty")

    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise InputError(f"Invalid XML format in TMX file: {e}") from e

    header = root.find("header")
    source_language = header.get("srclang", "") if header is not None else ""
    if not source_language or source_language == "*all*":
        raise InputError("Source language not found in TMX header")

    target_language = ""
    units: List[TranslationUnit] = []

    for tu in root.iter("tu"):
        source_text = ""
        target_text = ""

        for tuv in tu.findall("tuv"):
            lang = _lang_of(tuv)
            text = _segment_text(tuv)

            if _same_lang(lang, source_language):
                source_text = text
            else:
                if not target_language and lang:
                    target_language = lang
                    logger.debug(f"Target language detected: {target_language}")
                if lang and _same_lang(lang, target_language):
                    target_text = text

        if source_text and target_text:
            units.append(TranslationUnit(source_text, target_text))

    if not target_language:
        raise InputError("Target language not found in TMX file")

    if not units:
        raise InputError("No valid translation units found in TMX file")

    logger.info(
        f"Parsed {len(units)} translation units "
        f"({source_language} -> {target_language})"
    )
    return TmxDocument(source_language, target_language, units)


def validate_tmx_file(path: Path) -> Optional[str]:
    """
    Validate TMX file before processing.

    Args:
        path: Path to TMX file

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        return f"Invalid file extension: {suffix} (expected .tmx)"

    size = path.stat().st_size
    if size == 0:
        return "File is empty"
    if size > MAX_FILE_SIZE:
        return f"File too large: {size / 1024 / 1024:.1f}MB (max 50MB)"

    return None


def load_tmx(path: Path) -> TmxDocument:
    """Read and parse a TMX file (UTF-8, BOM tolerated)."""
    return parse_tmx(path.read_text(encoding="utf-8-sig"))
