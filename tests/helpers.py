from pathlib import Path
from types import SimpleNamespace

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from fontarchive.metadata import FontMetadata


def fake_query(family: str | None = None, charset: str | None = None):
    """Metadata backend returning the same canned answer for every file."""
    meta = FontMetadata(family=family, charset=charset)
    return lambda path: meta


def make_fc_query_output(stdout: str = "", returncode: int = 0):
    """
    Factory helper for mocking fc-query output.

    Returns an object compatible with the result of run_command(),
    exposing 'stdout' and 'returncode' attributes.
    """
    return SimpleNamespace(stdout=stdout, returncode=returncode)


def write_font_bytes(path: Path, content: bytes = b"\x00\x01\x00\x00fake") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def build_test_font(
    path: Path,
    family: str = "Test Family",
    style: str = "Regular",
    codepoints: tuple[int, ...] = (0x20, 0x41, 0x42, 0x43),
) -> Path:
    """Write a minimal but valid TrueType font mapping ``codepoints``."""
    names = {cp: f"uni{cp:04X}" for cp in codepoints}
    glyph_order = [".notdef"] + list(names.values())

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(names)
    fb.setupGlyf({name: TTGlyphPen(None).glyph() for name in glyph_order})
    fb.setupHorizontalMetrics({name: (500, 0) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupOS2()
    fb.setupNameTable({"familyName": family, "styleName": style})
    fb.setupPost()

    path.parent.mkdir(parents=True, exist_ok=True)
    fb.save(str(path))
    return path
