"""Converters between ufoLib2 glyphs and domain models.

This module handles the conversion between ufoLib2 glyph objects and our
GlyphData value type. Outlines travel through fontTools point pens, so any
glyph object implementing ``drawPoints`` can be converted.
"""

from typing import Any

from fontTools.misc.transform import Transform
from fontTools.pens.recordingPen import RecordingPointPen
from ufoLib2.objects import Anchor as UfoAnchor
from ufoLib2.objects import Glyph as UfoGlyph
from ufoLib2.objects import Guideline as UfoGuideline
from ufoLib2.objects import Image as UfoImage

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

MARK_COLOR_KEY = "public.markColor"


def _optional_number(value: float | None) -> float | None:
    return None if value is None else normalize_number(value)


def ufo_glyph_to_domain(glyph: UfoGlyph) -> GlyphData:
    """Convert a ufoLib2 glyph to a GlyphData value.

    Numbers are normalized to the canonical precision. The glyph lib
    (including the mark color) and note are not part of glyph data.

    Args:
        glyph: The ufoLib2 glyph

    Returns:
        Domain GlyphData
    """
    pen = RecordingPointPen()
    glyph.drawPoints(pen)
    contours, components = _recording_to_outline(pen.value)

    anchors = tuple(
        Anchor(
            x=normalize_number(anchor.x),
            y=normalize_number(anchor.y),
            name=anchor.name,
            color=anchor.color,
            identifier=anchor.identifier,
        )
        for anchor in glyph.anchors
    )
    guidelines = tuple(
        Guideline(
            x=_optional_number(guideline.x),
            y=_optional_number(guideline.y),
            angle=_optional_number(guideline.angle),
            name=guideline.name,
            color=guideline.color,
            identifier=guideline.identifier,
        )
        for guideline in glyph.guidelines
    )

    image = None
    if glyph.image.fileName is not None:
        image = Image(
            file_name=glyph.image.fileName,
            transformation=normalize_transformation(tuple(glyph.image.transformation)),
            color=glyph.image.color,
        )

    return GlyphData(
        width=normalize_number(glyph.width),
        height=normalize_number(glyph.height),
        unicodes=tuple(glyph.unicodes),
        contours=contours,
        components=components,
        anchors=anchors,
        guidelines=guidelines,
        image=image,
    )


def _recording_to_outline(
    recording: list[tuple[str, tuple[Any, ...], dict[str, Any]]],
) -> tuple[tuple[Contour, ...], tuple[Component, ...]]:
    """Convert a RecordingPointPen recording to contours and components.

    The RecordingPointPen records commands like:
    - ('beginPath', (), {'identifier': ...})
    - ('addPoint', ((x, y), segmentType, smooth, name), {'identifier': ...})
    - ('endPath', (), {})
    - ('addComponent', (baseGlyph, transformation), {'identifier': ...})
    """
    contours: list[Contour] = []
    components: list[Component] = []
    current_points: list[Point] | None = None
    current_identifier: str | None = None

    for command, args, kwargs in recording:
        if command == "beginPath":
            current_points = []
            current_identifier = kwargs.get("identifier")

        elif command == "addPoint":
            (x, y), segment_type, smooth, name = args
            if current_points is None:
                raise ValueError("addPoint outside of a path")
            current_points.append(
                Point(
                    x=normalize_number(x),
                    y=normalize_number(y),
                    type=PointType.from_segment_type(segment_type),
                    smooth=bool(smooth),
                    name=name,
                    identifier=kwargs.get("identifier"),
                )
            )

        elif command == "endPath":
            if current_points is not None:
                contours.append(Contour(tuple(current_points), current_identifier))
            current_points = None
            current_identifier = None

        elif command == "addComponent":
            base_glyph, transformation = args
            components.append(
                Component(
                    base_glyph=base_glyph,
                    transformation=normalize_transformation(tuple(transformation)),
                    identifier=kwargs.get("identifier"),
                )
            )

        else:
            raise ValueError(f"Unsupported point pen command '{command}'")

    return tuple(contours), tuple(components)


def domain_glyph_to_ufo(data: GlyphData, glyph: UfoGlyph) -> None:
    """Fill a ufoLib2 glyph from glyph data.

    The glyph's outlines, anchors, guidelines and image are replaced; its
    lib and note are left alone.

    Args:
        data: Domain glyph data
        glyph: ufoLib2 glyph to update
    """
    glyph.clearContours()
    glyph.clearComponents()
    glyph.clearAnchors()
    glyph.clearGuidelines()

    glyph.width = data.width
    glyph.height = data.height
    glyph.unicodes = list(data.unicodes)

    pen = glyph.getPointPen()
    for contour in data.contours:
        pen.beginPath(identifier=contour.identifier)
        for point in contour.points:
            pen.addPoint(
                (point.x, point.y),
                segmentType=point.type.segment_type,
                smooth=point.smooth,
                name=point.name,
                identifier=point.identifier,
            )
        pen.endPath()
    for component in data.components:
        pen.addComponent(
            component.base_glyph,
            Transform(*component.transformation),
            identifier=component.identifier,
        )

    for anchor in data.anchors:
        glyph.appendAnchor(
            UfoAnchor(
                x=anchor.x,
                y=anchor.y,
                name=anchor.name,
                color=anchor.color,
                identifier=anchor.identifier,
            )
        )
    for guideline in data.guidelines:
        glyph.appendGuideline(
            UfoGuideline(
                x=guideline.x,
                y=guideline.y,
                angle=guideline.angle,
                name=guideline.name,
                color=guideline.color,
                identifier=guideline.identifier,
            )
        )

    if data.image is not None:
        glyph.image = UfoImage(
            fileName=data.image.file_name,
            transformation=Transform(*data.image.transformation),
            color=data.image.color,
        )
    else:
        glyph.image.clear()
