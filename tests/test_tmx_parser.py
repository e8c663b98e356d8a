"""Tests for TMX parser."""

import pytest
from pathlib import Path
import tempfile

from tmx_term_extractor.exceptions import InputError
from tmx_term_extractor.models import TranslationUnit
from tmx_term_extractor.tmx_parser import parse_tmx, load_tmx, validate_tmx_file


SIMPLE_TMX = """<?xml version="1.0" encoding="UTF-8"?>
<tmx version="1.4">
  <header srclang="en-US" datatype="plaintext" segtype="sentence" adminlang="en" o-tmf="test" creationtool="test" creationtoolversion="1"/>
  <body>
    <tu>
      <tuv xml:lang="en-US"><seg>Open the cloud console.</seg></tuv>
      <tuv xml:lang="es-ES"><seg>Abra la consola de la nube.</seg></tuv>
    </tu>
    <tu>
      <tuv xml:lang="en-US"><seg>Restart the server.</seg></tuv>
      <tuv xml:lang="es-ES"><seg>Reinicie el servidor.</seg></tuv>
    </tu>
  </body>
</tmx>
"""


class TestParseTmx:

    def test_parse_simple(self):
        doc = parse_tmx(SIMPLE_TMX)
        assert doc.source_language == "en-US"
        assert doc.target_language == "es-ES"
        assert doc.units == [
            TranslationUnit("Open the cloud console.", "Abra la consola de la nube."),
            TranslationUnit("Restart the server.", "Reinicie el servidor."),
        ]

    def test_legacy_lang_attribute(self):
        content = """<tmx version="1.1"><header srclang="en"/><body>
<tu><tuv lang="en"><seg>Hello</seg></tuv><tuv lang="fr"><seg>Bonjour</seg></tuv></tu>
</body></tmx>"""
        doc = parse_tmx(content)
        assert doc.target_language == "fr"
        assert doc.units == [TranslationUnit("Hello", "Bonjour")]

    def test_inline_tags_keep_text(self):
        content = """<tmx version="1.4"><header srclang="en"/><body>
<tu><tuv xml:lang="en"><seg>Press <ph>&lt;b&gt;</ph>OK</seg></tuv>
<tuv xml:lang="de"><seg>Drücken Sie OK</seg></tuv></tu>
</body></tmx>"""
        doc = parse_tmx(content)
        assert doc.units[0].source == "Press <b>OK"

    def test_skips_incomplete_units(self):
        content = """<tmx version="1.4"><header srclang="en"/><body>
<tu><tuv xml:lang="en"><seg>Only source</seg></tuv></tu>
<tu><tuv xml:lang="en"><seg>Both</seg></tuv><tuv xml:lang="de"><seg>Beide</seg></tuv></tu>
<tu><tuv xml:lang="en"><seg></seg></tuv><tuv xml:lang="de"><seg>Leer</seg></tuv></tu>
</body></tmx>"""
        doc = parse_tmx(content)
        assert len(doc) == 1

    def test_ignores_third_language(self):
        content = """<tmx version="1.4"><header srclang="en"/><body>
<tu><tuv xml:lang="en"><seg>Cat</seg></tuv><tuv xml:lang="de"><seg>Katze</seg></tuv>
<tuv xml:lang="fr"><seg>Chat</seg></tuv></tu>
</body></tmx>"""
        doc = parse_tmx(content)
        assert doc.units == [TranslationUnit("Cat", "Katze")]

    def test_invalid_xml(self):
        with pytest.raises(InputError, match="Invalid XML"):
            parse_tmx("<tmx><header srclang='en'>")

    def test_missing_source_language(self):
        with pytest.raises(InputError, match="Source language"):
            parse_tmx("<tmx><header/><body/></tmx>")

    def test_missing_target_language(self):
        content = """<tmx><header srclang="en"/><body>
<tu><tuv xml:lang="en"><seg>Hello</seg></tuv></tu></body></tmx>"""
        with pytest.raises(InputError, match="Target language"):
            parse_tmx(content)

    def test_no_units(self):
        content = """<tmx><header srclang="en"/><body>
<tu><tuv xml:lang="en"><seg>Hello</seg></tuv><tuv xml:lang="de"><seg></seg></tuv></tu>
</body></tmx>"""
        with pytest.raises(InputError, match="No valid translation units"):
            parse_tmx(content)

    def test_empty(self):
        with pytest.raises(InputError):
            parse_tmx("")
        with pytest.raises(InputError):
            parse_tmx("   \n ")


class TestValidateTmxFile:

    def test_nonexistent(self):
        error = validate_tmx_file(Path("/nonexistent/file.tmx"))
        assert "not found" in error

    def test_wrong_extension(self):
        with tempfile.NamedTemporaryFile(suffix=".txt") as f:
            error = validate_tmx_file(Path(f.name))
            assert "Invalid file extension" in error

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.tmx"
        path.write_text("")
        assert validate_tmx_file(path) == "File is empty"

    def test_valid_file(self, tmp_path):
        path = tmp_path / "memory.TMX"
        path.write_text(SIMPLE_TMX, encoding="utf-8")
        assert validate_tmx_file(path) is None


class TestLoadTmx:

    def test_load_with_bom(self, tmp_path):
        path = tmp_path / "memory.tmx"
        path.write_bytes(b"\xef\xbb\xbf" + SIMPLE_TMX.replace(
            '<?xml version="1.0" encoding="UTF-8"?>\n', ""
        ).encode("utf-8"))
        doc = load_tmx(path)
        assert len(doc) == 2
