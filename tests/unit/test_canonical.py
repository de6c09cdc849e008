"""Unit tests for canonical serialization and fingerprinting."""

import pytest

from fontgardener.domain import (
    Anchor,
    Component,
    Contour,
    GlyphData,
    Guideline,
    Image,
    Point,
    PointType,
    canon,
    fingerprint,
    from_canon,
)
from fontgardener.domain.canonical import format_number, parse_number


@pytest.fixture
def rich_glyph() -> GlyphData:
    """A glyph using every kind of element."""
    return GlyphData(
        width=612.5,
        height=0,
        unicodes=(0x41, 0x61),
        contours=(
            Contour(
                (
                    Point(10, 0, PointType.LINE, name="start"),
                    Point(40, 0),
                    Point(60, 20),
                    Point(60, 50, PointType.CURVE, smooth=True),
                    Point(10, 50, PointType.LINE, identifier="pt1"),
                ),
                identifier="c1",
            ),
            Contour((Point(0, 0, PointType.MOVE), Point(5, 5, PointType.LINE))),
        ),
        components=(Component("acutecomb", (1, 0, 0, 1, 120, 480.25)),),
        anchors=(Anchor(300, 700, "top", color="1,0,0,1"),),
        guidelines=(Guideline(x=100), Guideline(x=0, y=350, angle=45, name="slant")),
        image=Image("sketch.png", (0.5, 0, 0, 0.5, 0, 0), color="0,0,1,0.5"),
    )


class TestNumberFormat:
    """Tests for number formatting."""

    def test_integers_without_decimal_point(self) -> None:
        """Test integral values are written as integers."""
        assert format_number(500) == "500"
        assert format_number(500.0) == "500"

    def test_fractional_values(self) -> None:
        """Test fractional values use the shortest representation."""
        assert format_number(0.1) == "0.1"
        assert format_number(1 / 3) == "0.333333"

    def test_negative_zero(self) -> None:
        """Test negative zero is written as zero."""
        assert format_number(-0.0) == "0"

    def test_none(self) -> None:
        """Test absent values are written as empty fields."""
        assert format_number(None) == ""

    def test_parse(self) -> None:
        """Test parsing integers and floats."""
        assert parse_number("12") == 12
        assert parse_number("0.25") == 0.25


class TestCanon:
    """Tests for the canonical byte form."""

    def test_simple_glyph_bytes(self) -> None:
        """Test the exact rows of a simple glyph."""
        data = GlyphData(
            width=500,
            unicodes=(0x41,),
            contours=(
                Contour((Point(0, 0, PointType.LINE), Point(100, 0.5, PointType.LINE))),
            ),
        )
        assert canon(data) == (
            b"glyph\t500\t0\n"
            b"unicode\t0041\n"
            b"contour\n"
            b"point\t0\t0\tline\n"
            b"point\t100\t0.5\tline\n"
        )

    def test_deterministic(self, rich_glyph: GlyphData) -> None:
        """Test that canon gives identical bytes for equal values."""
        copy = from_canon(canon(rich_glyph))
        assert canon(copy) == canon(rich_glyph)

    def test_parse_back(self, rich_glyph: GlyphData) -> None:
        """Test that the canonical form parses back to an equal value."""
        assert from_canon(canon(rich_glyph)) == rich_glyph

    def test_empty_names_parse_back(self) -> None:
        """Test empty optional strings survive the canonical form."""
        data = GlyphData(
            contours=(Contour((Point(0, 0, PointType.LINE, name=""),), identifier=""),),
            anchors=(Anchor(1, 2, ""),),
            guidelines=(Guideline(y=10, name="", color=""),),
        )
        plain = GlyphData(
            contours=(Contour((Point(0, 0, PointType.LINE),)),),
            anchors=(Anchor(1, 2),),
            guidelines=(Guideline(y=10),),
        )
        assert from_canon(canon(data)) == data
        assert data == plain
        assert fingerprint(data) == fingerprint(plain)

    def test_tiny_differences_rounded_away(self) -> None:
        """Test values differing below the precision canonicalize identically."""
        a = GlyphData(width=500.0000001)
        b = GlyphData(width=500)
        assert canon(a) == canon(b)

    def test_order_of_contours_matters(self) -> None:
        """Test that contour order is part of the content."""
        first = Contour((Point(0, 0, PointType.LINE),))
        second = Contour((Point(1, 1, PointType.LINE),))
        assert canon(GlyphData(contours=(first, second))) != canon(
            GlyphData(contours=(second, first))
        )


class TestFingerprint:
    """Tests for content fingerprints."""

    def test_equal_content_equal_fingerprint(self, rich_glyph: GlyphData) -> None:
        """Test that equal values share a fingerprint."""
        assert fingerprint(rich_glyph) == fingerprint(from_canon(canon(rich_glyph)))

    def test_different_content(self) -> None:
        """Test that different values get different fingerprints."""
        assert fingerprint(GlyphData(width=500)) != fingerprint(GlyphData(width=501))

    def test_hex_digest(self) -> None:
        """Test fingerprint is a 32 character hex string."""
        fp = fingerprint(GlyphData())
        assert len(fp) == 32
        int(fp, 16)


class TestFromCanonErrors:
    """Tests for malformed payloads."""

    def test_empty_payload(self) -> None:
        """Test an empty payload is rejected."""
        with pytest.raises(ValueError, match="glyph"):
            from_canon(b"")

    def test_unknown_row(self) -> None:
        """Test an unknown row type is rejected."""
        with pytest.raises(ValueError, match="unknown row type"):
            from_canon(b"glyph\t500\t0\nbogus\t1\n")

    def test_point_outside_contour(self) -> None:
        """Test a point row must follow a contour row."""
        with pytest.raises(ValueError, match="outside a contour"):
            from_canon(b"glyph\t500\t0\npoint\t0\t0\tline\n")

    def test_too_many_fields(self) -> None:
        """Test rows wider than their type are rejected."""
        with pytest.raises(ValueError, match="too many fields"):
            from_canon(b"glyph\t500\t0\t7\n")

    def test_bad_number(self) -> None:
        """Test non-numeric values are rejected."""
        with pytest.raises(ValueError):
            from_canon(b"glyph\twide\t0\n")
