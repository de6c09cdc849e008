"""Canonical serialization and fingerprinting of glyph data.

The canonical form is a small table with one row per element, in a fixed
order: metrics, code points, contours (each followed by its points),
components, anchors, guidelines, image. It is both the input of the
fingerprint hash and the on-disk payload format, so equal glyph data always
produces the same bytes and the same fingerprint.

Row layout::

    glyph      width  height
    unicode    hex
    contour    identifier
    point      x  y  type  smooth  name  identifier
    component  base  xx  xy  yx  yy  dx  dy  identifier
    anchor     x  y  name  color  identifier
    guideline  x  y  angle  name  color  identifier
    image      file_name  xx  xy  yx  yy  dx  dy  color

Numbers are rounded to ``CANONICAL_PRECISION`` decimals; integral values are
written without a decimal point.
"""

import hashlib

from fontgardener.domain.glyph import (
    Anchor,
    Component,
    Contour,
    GlyphData,
    Guideline,
    Image,
    Point,
    PointType,
    normalize_number,
    normalize_transformation,
)
from fontgardener.utils.tables import decode_rows, encode_rows, optional, or_none

FINGERPRINT_DIGEST_SIZE = 16

ROW_WIDTHS = {
    "glyph": 3,
    "unicode": 2,
    "contour": 2,
    "point": 7,
    "component": 9,
    "anchor": 6,
    "guideline": 7,
    "image": 9,
}

SMOOTH = "smooth"


def format_number(value: float | None) -> str:
    """Format a number in canonical form ("" for None)."""
    if value is None:
        return ""
    number = normalize_number(value)
    if isinstance(number, int):
        return str(number)
    return repr(number)


def parse_number(text: str) -> float:
    try:
        return int(text)
    except ValueError:
        return normalize_number(float(text))


def _parse_optional_number(text: str) -> float | None:
    return None if text == "" else parse_number(text)


def canon_rows(data: GlyphData) -> list[list[str]]:
    """Build the canonical rows of a glyph data value."""
    rows = [["glyph", format_number(data.width), format_number(data.height)]]
    rows.extend(["unicode", f"{codepoint:04X}"] for codepoint in data.unicodes)

    for contour in data.contours:
        rows.append(["contour", optional(contour.identifier)])
        for point in contour.points:
            rows.append(
                [
                    "point",
                    format_number(point.x),
                    format_number(point.y),
                    point.type.value,
                    SMOOTH if point.smooth else "",
                    optional(point.name),
                    optional(point.identifier),
                ]
            )

    for component in data.components:
        rows.append(
            [
                "component",
                component.base_glyph,
                *(format_number(v) for v in component.transformation),
                optional(component.identifier),
            ]
        )

    for anchor in data.anchors:
        rows.append(
            [
                "anchor",
                format_number(anchor.x),
                format_number(anchor.y),
                optional(anchor.name),
                optional(anchor.color),
                optional(anchor.identifier),
            ]
        )

    for guideline in data.guidelines:
        rows.append(
            [
                "guideline",
                format_number(guideline.x),
                format_number(guideline.y),
                format_number(guideline.angle),
                optional(guideline.name),
                optional(guideline.color),
                optional(guideline.identifier),
            ]
        )

    if data.image is not None:
        rows.append(
            [
                "image",
                data.image.file_name,
                *(format_number(v) for v in data.image.transformation),
                optional(data.image.color),
            ]
        )

    return rows


def canon(data: GlyphData) -> bytes:
    """Serialize glyph data to its canonical bytes."""
    return encode_rows(canon_rows(data)).encode("utf-8")


def fingerprint(data: GlyphData) -> str:
    """Compute the content fingerprint of glyph data.

    Returns:
        Hex digest of the canonical bytes
    """
    digest = hashlib.blake2b(canon(data), digest_size=FINGERPRINT_DIGEST_SIZE)
    return digest.hexdigest()


def from_canon(payload: bytes) -> GlyphData:
    """Parse canonical bytes back into glyph data.

    Args:
        payload: Canonical serialization produced by ``canon``

    Returns:
        GlyphData equal to the serialized value

    Raises:
        ValueError: If the payload is not a valid canonical table
    """
    rows = decode_rows(payload.decode("utf-8"))
    if not rows or rows[0][0] != "glyph":
        raise ValueError("canonical payload must start with a 'glyph' row")

    width = height = 0.0
    unicodes: list[int] = []
    contours: list[Contour] = []
    current_points: list[Point] | None = None
    current_identifier: str | None = None
    components: list[Component] = []
    anchors: list[Anchor] = []
    guidelines: list[Guideline] = []
    image: Image | None = None

    def close_contour() -> None:
        nonlocal current_points
        if current_points is not None:
            contours.append(Contour(tuple(current_points), current_identifier))
            current_points = None

    for line_number, row in enumerate(rows, start=1):
        kind = row[0]
        expected = ROW_WIDTHS.get(kind)
        if expected is None:
            raise ValueError(f"line {line_number}: unknown row type '{kind}'")
        if len(row) > expected:
            raise ValueError(f"line {line_number}: too many fields for '{kind}'")
        row = row + [""] * (expected - len(row))

        if kind != "point":
            close_contour()

        if kind == "glyph":
            if line_number != 1:
                raise ValueError(f"line {line_number}: duplicate 'glyph' row")
            width, height = parse_number(row[1]), parse_number(row[2])
        elif kind == "unicode":
            unicodes.append(int(row[1], 16))
        elif kind == "contour":
            current_points = []
            current_identifier = or_none(row[1])
        elif kind == "point":
            if current_points is None:
                raise ValueError(f"line {line_number}: point outside a contour")
            current_points.append(
                Point(
                    x=parse_number(row[1]),
                    y=parse_number(row[2]),
                    type=PointType(row[3]),
                    smooth=row[4] == SMOOTH,
                    name=or_none(row[5]),
                    identifier=or_none(row[6]),
                )
            )
        elif kind == "component":
            components.append(
                Component(
                    base_glyph=row[1],
                    transformation=normalize_transformation(
                        tuple(parse_number(v) for v in row[2:8])
                    ),
                    identifier=or_none(row[8]),
                )
            )
        elif kind == "anchor":
            anchors.append(
                Anchor(
                    x=parse_number(row[1]),
                    y=parse_number(row[2]),
                    name=or_none(row[3]),
                    color=or_none(row[4]),
                    identifier=or_none(row[5]),
                )
            )
        elif kind == "guideline":
            guidelines.append(
                Guideline(
                    x=_parse_optional_number(row[1]),
                    y=_parse_optional_number(row[2]),
                    angle=_parse_optional_number(row[3]),
                    name=or_none(row[4]),
                    color=or_none(row[5]),
                    identifier=or_none(row[6]),
                )
            )
        elif kind == "image":
            image = Image(
                file_name=row[1],
                transformation=normalize_transformation(
                    tuple(parse_number(v) for v in row[2:8])
                ),
                color=or_none(row[8]),
            )
    close_contour()

    return GlyphData(
        width=width,
        height=height,
        unicodes=tuple(unicodes),
        contours=tuple(contours),
        components=tuple(components),
        anchors=tuple(anchors),
        guidelines=tuple(guidelines),
        image=image,
    )
