"""
Field color assignment and color conversion helpers.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

FIELD_COLOR_PALETTE: Tuple[str, ...] = (
    "#2563eb",
    "#16a34a",
    "#f97316",
    "#ec4899",
    "#8b5cf6",
    "#22d3ee",
    "#f59e0b",
    "#ef4444",
)

DEFAULT_FIELD_COLOR = FIELD_COLOR_PALETTE[0]
DEFAULT_PLOT_COLOR = "#16a34a"

PRESET_COLORS: Dict[str, str] = {
    "blue": "#0064FF",
    "green": "#00C853",
    "yellow": "#FFD600",
    "orange": "#FF6D00",
    "red": "#D50000",
    "purple": "#AA00FF",
    "pink": "#E91E63",
    "teal": "#00BFA5",
    "brown": "#795548",
    "gray": "#757575",
}

RGBA = Tuple[int, int, int, int]


def pick_available_field_color(used_colors: Set[str], seed: int = 0) -> str:
    """
    Pick the first palette color not in ``used_colors``, starting at
    ``seed`` and wrapping around.

    ``used_colors`` is owned by the caller and updated in place with the
    returned color. Once the palette is exhausted an HSL color derived from
    the seed is returned instead.
    """
    size = len(FIELD_COLOR_PALETTE)
    for offset in range(size):
        candidate = FIELD_COLOR_PALETTE[(seed + offset) % size]
        if candidate not in used_colors:
            used_colors.add(candidate)
            return candidate

    hue = (seed * 47) % 360
    fallback = f"hsl({hue} 70% 45%)"
    used_colors.add(fallback)
    return fallback


def boundary_color(field: Mapping[str, Any]) -> Optional[str]:
    boundary = field.get("boundary")
    if not isinstance(boundary, Mapping):
        return None
    properties = boundary.get("properties")
    if not isinstance(properties, Mapping):
        return None
    return properties.get("color")


def collect_used_colors(fields: Sequence[Mapping[str, Any]]) -> Set[str]:
    """Every boundary color already set on ``fields``."""
    result: Set[str] = set()
    for field in fields:
        color = boundary_color(field)
        if color:
            result.add(color)
    return result


def _with_boundary_color(field: Mapping[str, Any], color: str) -> Dict[str, Any]:
    boundary = field["boundary"]
    return {
        **field,
        "boundary": {
            **boundary,
            "properties": {**(boundary.get("properties") or {}), "color": color},
        },
    }


def ensure_field_colors(fields: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """
    Give every field boundary without a color the next free palette color.

    Fields that already have a color (or have no boundary at all) are
    returned as the same object; the others are shallow copies, input
    fields are never modified.
    """
    used_colors = collect_used_colors(fields)
    seed = len(fields)

    result: List[Mapping[str, Any]] = []
    for field in fields:
        if not isinstance(field.get("boundary"), Mapping) or boundary_color(field):
            result.append(field)
        else:
            result.append(_with_boundary_color(field, pick_available_field_color(used_colors, seed)))
        seed += 1
    return result


def get_next_field_color(fields: Sequence[Mapping[str, Any]], seed: Optional[int] = None) -> str:
    """Color for a new field added to ``fields``."""
    used_colors = collect_used_colors(fields)
    base = len(fields) if seed is None else seed
    return pick_available_field_color(used_colors, base)


def hex_to_rgba(hex_color: str, alpha: int = 100) -> RGBA:
    """
    Convert ``#RRGGBB``, ``#RGB`` or a ``PRESET_COLORS`` name to an
    ``(r, g, b, alpha)`` tuple for map fill layers.

    Anything that does not parse maps to the default blue.
    """
    if not isinstance(hex_color, str):
        return 0, 100, 255, alpha
    clean = PRESET_COLORS.get(hex_color.lower(), hex_color).replace("#", "")
    if len(clean) == 3:
        parts = [clean[0] * 2, clean[1] * 2, clean[2] * 2]
    elif len(clean) == 6:
        parts = [clean[0:2], clean[2:4], clean[4:6]]
    else:
        return 0, 100, 255, alpha

    try:
        r, g, b = (int(part, 16) for part in parts)
    except ValueError:
        return 0, 100, 255, alpha
    return r, g, b, alpha

