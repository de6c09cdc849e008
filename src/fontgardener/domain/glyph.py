"""Glyph data value types.

This module defines the format-independent representation of one glyph's
outline and metadata. Every type is a frozen dataclass so that two glyphs
with the same content compare equal and can be shared between sources.
"""

from dataclasses import dataclass, field
from enum import Enum

# (xx, xy, yx, yy, dx, dy)
Transformation = tuple[float, float, float, float, float, float]

IDENTITY: Transformation = (1, 0, 0, 1, 0, 0)

# Digits kept after the decimal point for every coordinate, metric and
# transformation value.
CANONICAL_PRECISION = 6


def normalize_number(value: float) -> float:
    """Round a number to the canonical precision.

    Integral results are returned as ``int`` and negative zero collapses to
    zero, so the value formats identically no matter which codec produced it.

    Args:
        value: Any real number

    Returns:
        The rounded number
    """
    rounded = round(float(value), CANONICAL_PRECISION)
    if rounded == 0:
        return 0
    if rounded.is_integer():
        return int(rounded)
    return rounded


def blank_to_none(instance: object, *field_names: str) -> None:
    """Store empty optional strings as None, their only canonical spelling."""
    for name in field_names:
        if getattr(instance, name) == "":
            object.__setattr__(instance, name, None)


def normalize_transformation(values: tuple[float, ...]) -> Transformation:
    """Normalize an affine transformation to six canonical numbers."""
    if len(values) != 6:
        raise ValueError(f"Transformation needs 6 values, got {len(values)}")
    return tuple(normalize_number(v) for v in values)  # type: ignore[return-value]


class PointType(str, Enum):
    """Segment type of a contour point.

    Values match the UFO point type names. Off-curve points carry no segment
    type in UFO; they are spelled out here so every point has a type.
    """

    MOVE = "move"
    LINE = "line"
    OFF_CURVE = "offcurve"
    CURVE = "curve"
    QCURVE = "qcurve"

    @classmethod
    def from_segment_type(cls, segment_type: str | None) -> "PointType":
        """Map a pen segment type (None for off-curve) to a PointType."""
        if segment_type is None:
            return cls.OFF_CURVE
        return cls(segment_type)

    @property
    def segment_type(self) -> str | None:
        """Segment type as expected by point pens."""
        if self is PointType.OFF_CURVE:
            return None
        return self.value


@dataclass(frozen=True, slots=True)
class Point:
    """A contour point.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units
        type: Segment type of the point
        smooth: Whether the point is a smooth connection
        name: Optional point name
        identifier: Optional unique identifier
    """

    x: float
    y: float
    type: PointType = PointType.OFF_CURVE
    smooth: bool = False
    name: str | None = None
    identifier: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "name", "identifier")


@dataclass(frozen=True, slots=True)
class Contour:
    """An ordered sequence of points, closed unless it starts with a move."""

    points: tuple[Point, ...] = ()
    identifier: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "identifier")


@dataclass(frozen=True, slots=True)
class Component:
    """A reference to another glyph, placed with an affine transformation."""

    base_glyph: str
    transformation: Transformation = IDENTITY
    identifier: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "identifier")


@dataclass(frozen=True, slots=True)
class Anchor:
    x: float
    y: float
    name: str | None = None
    color: str | None = None
    identifier: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "name", "color", "identifier")


@dataclass(frozen=True, slots=True)
class Guideline:
    """A glyph guideline.

    Horizontal and vertical guidelines leave one coordinate unset, following
    the UFO convention.
    """

    x: float | None = None
    y: float | None = None
    angle: float | None = None
    name: str | None = None
    color: str | None = None
    identifier: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "name", "color", "identifier")


@dataclass(frozen=True, slots=True)
class Image:
    """A background image reference."""

    file_name: str
    transformation: Transformation = IDENTITY
    color: str | None = None

    def __post_init__(self) -> None:
        blank_to_none(self, "color")


@dataclass(frozen=True, slots=True)
class GlyphData:
    """The shareable payload of one glyph in one source layer.

    GlyphData never carries the glyph's name, set or source: the same value
    may be referenced from many (glyph, source, layer) entries. Equality is
    field-wise, so two values are content-equal exactly when ``==`` holds.

    Attributes:
        width: Advance width
        height: Advance height
        unicodes: Unicode code points, in declaration order
        contours: Outline contours
        components: Component references
        anchors: Anchors
        guidelines: Glyph-level guidelines
        image: Optional background image
    """

    width: float = 0
    height: float = 0
    unicodes: tuple[int, ...] = ()
    contours: tuple[Contour, ...] = ()
    components: tuple[Component, ...] = ()
    anchors: tuple[Anchor, ...] = ()
    guidelines: tuple[Guideline, ...] = ()
    image: Image | None = field(default=None)

    def component_names(self) -> list[str]:
        """Names of the glyphs referenced as components, in order."""
        return [component.base_glyph for component in self.components]
