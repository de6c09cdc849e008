"""Component closure of a glyph selection."""

from collections.abc import Callable, Iterable


def follow_components(
    glyph_names: Iterable[str],
    components_of: Callable[[str], Iterable[str]],
) -> set[str]:
    """Expand glyph names with every glyph they use as a component.

    Nested components are followed recursively; cycles are harmless.

    Args:
        glyph_names: Starting glyph names
        components_of: Returns the component base glyph names of a glyph
            (empty if the glyph is unknown)

    Returns:
        The starting names plus all transitively referenced glyph names
    """
    result: set[str] = set()
    pending = list(glyph_names)
    while pending:
        name = pending.pop()
        if name in result:
            continue
        result.add(name)
        pending.extend(components_of(name))
    return result
