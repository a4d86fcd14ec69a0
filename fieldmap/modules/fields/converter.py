"""
Field <-> GeoJSON conversion for the map editor.

Fields go out as one boundary Feature each (plots stay out of the map to
keep it readable, they only feed the ``plotCount`` tooltip). Edited
FeatureCollections come back grouped by ``fieldId`` into fields and plots.

Nothing here raises on missing or malformed data: every lookup has a
default and features that cannot be placed are dropped.
"""

import copy
import enum
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from fieldmap.modules.fields.colors import (
    DEFAULT_FIELD_COLOR,
    collect_used_colors,
    hex_to_rgba,
    pick_available_field_color,
)
from fieldmap.modules.geometry.engine import compute_polygon_area_hectares

logger = logging.getLogger(__name__)

FIELD_BOUNDARY_TYPE = "field-boundary"
PLOT_TYPE = "plot"

UNASSIGNED_MANAGER = "Sin asignar"
NEW_FIELD_NAME = "Nuevo Campo"
UNNAMED_FIELD = "Campo sin nombre"

# Properties stamped by fields_to_feature_collection for display only.
DISPLAY_PROPERTIES = ("type", "fieldId", "area", "managerName", "plotCount", "fillColor")


def _has_id(value: Any) -> bool:
    # 0 is a valid id, only None and "" mean missing
    return isinstance(value, (str, int)) and not isinstance(value, bool) and value != ""


def _properties(feature: Mapping[str, Any]) -> Mapping[str, Any]:
    properties = feature.get("properties")
    return properties if isinstance(properties, Mapping) else {}


class FeatureKind(enum.Enum):
    NEW_DRAWING = "new-drawing"
    FIELD_BOUNDARY = "field-boundary"
    PLOT = "plot"
    UNKNOWN = "unknown"


def classify_feature(feature: Mapping[str, Any]) -> FeatureKind:
    """
    Decide what an incoming feature represents.

    A feature is a fresh drawing when flagged with ``isNewPolygon`` or when
    it has neither ``type`` nor ``fieldId``. Otherwise it needs a
    ``fieldId`` and a known ``type``.
    """
    properties = _properties(feature)

    if properties.get("isNewPolygon"):
        return FeatureKind.NEW_DRAWING
    if not properties.get("type") and properties.get("fieldId") in (None, ""):
        return FeatureKind.NEW_DRAWING
    if not _has_id(properties.get("fieldId")):
        return FeatureKind.UNKNOWN
    if properties.get("type") == FIELD_BOUNDARY_TYPE:
        return FeatureKind.FIELD_BOUNDARY
    if properties.get("type") == PLOT_TYPE:
        return FeatureKind.PLOT
    return FeatureKind.UNKNOWN


# --- manager name resolution ---

def _full_name(person: Any) -> Optional[str]:
    if not isinstance(person, Mapping):
        return None
    name = f"{person.get('name') or ''} {person.get('lastName') or ''}".strip()
    return name or None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _manager_from_users(field: Mapping[str, Any], users: Sequence[Mapping[str, Any]]) -> Optional[str]:
    manager_id = field.get("managerId")
    if manager_id is None:
        return None
    for user in users:
        if isinstance(user, Mapping) and user.get("id") == manager_id:
            return _full_name(user)
    return None


def _manager_from_embedded(field: Mapping[str, Any], users: Sequence[Mapping[str, Any]]) -> Optional[str]:
    return _full_name(field.get("manager"))


def _manager_from_name(field: Mapping[str, Any], users: Sequence[Mapping[str, Any]]) -> Optional[str]:
    return _text(field.get("managerName"))


def _manager_from_properties(field: Mapping[str, Any], users: Sequence[Mapping[str, Any]]) -> Optional[str]:
    properties = field.get("properties")
    if not isinstance(properties, Mapping):
        return None
    return _text(properties.get("managerName"))


MANAGER_NAME_SOURCES: List[Callable[[Mapping[str, Any], Sequence[Mapping[str, Any]]], Optional[str]]] = [
    _manager_from_users,
    _manager_from_embedded,
    _manager_from_name,
    _manager_from_properties,
]


def resolve_manager_name(field: Mapping[str, Any], users: Optional[Sequence[Mapping[str, Any]]] = None) -> str:
    """First non-empty manager name from ``MANAGER_NAME_SOURCES``, in order."""
    users = users or []
    for source in MANAGER_NAME_SOURCES:
        name = source(field, users)
        if name:
            return name
    return UNASSIGNED_MANAGER


# --- plot count resolution ---

def _count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _plots_from_list(field: Mapping[str, Any]) -> Optional[int]:
    plots = field.get("plots")
    if isinstance(plots, (list, tuple)) and plots:
        return len(plots)
    return None


def _plots_from_count_field(field: Mapping[str, Any]) -> Optional[int]:
    return _count(field.get("plotsCount"))


def _plots_from_aggregate(field: Mapping[str, Any]) -> Optional[int]:
    aggregate = field.get("_count")
    if not isinstance(aggregate, Mapping):
        return None
    return _count(aggregate.get("plots"))


def _plots_from_properties(field: Mapping[str, Any]) -> Optional[int]:
    properties = field.get("properties")
    if not isinstance(properties, Mapping):
        return None
    return _count(properties.get("plotCount"))


PLOT_COUNT_SOURCES: List[Callable[[Mapping[str, Any]], Optional[int]]] = [
    _plots_from_list,
    _plots_from_count_field,
    _plots_from_aggregate,
    _plots_from_properties,
]


def resolve_plot_count(field: Mapping[str, Any]) -> int:
    """First available plot count from ``PLOT_COUNT_SOURCES``, in order."""
    for source in PLOT_COUNT_SOURCES:
        count = source(field)
        if count is not None:
            return count
    return 0


# --- Field -> GeoJSON ---

def _polygon_coordinates(geometry: Any) -> List:
    if isinstance(geometry, Mapping) and geometry.get("type", "Polygon") == "Polygon":
        return geometry.get("coordinates") or []
    return []


def _field_geometry(field: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    boundary = field.get("boundary")
    if isinstance(boundary, Mapping) and isinstance(boundary.get("geometry"), Mapping):
        return boundary["geometry"]
    location = field.get("location")
    if isinstance(location, Mapping):
        return location
    return None


def fields_to_feature_collection(
    fields: Sequence[Mapping[str, Any]],
    users: Optional[Sequence[Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Build a FeatureCollection with one boundary Feature per field.

    Each feature keeps the boundary's own properties and adds ``type``,
    ``fieldId``, ``area`` (hectares, from geometry), ``managerName``,
    ``plotCount`` and ``fillColor`` (RGBA of the boundary color). Fields
    without ``boundary`` or ``location`` are skipped.
    Boundaries without a color get one from the palette, unique within this
    batch.
    """
    used_colors = collect_used_colors(fields)
    features = []

    for index, field in enumerate(fields):
        geometry = _field_geometry(field)
        if geometry is None:
            logger.debug(f"Skipping field {field.get('id')!r}: no boundary or location")
            continue

        boundary = field.get("boundary")
        base_properties = {}
        if isinstance(boundary, Mapping) and isinstance(boundary.get("properties"), Mapping):
            base_properties = dict(boundary["properties"])

        if not base_properties.get("name"):
            base_properties["name"] = _text(field.get("name")) or UNNAMED_FIELD
        if not base_properties.get("color"):
            base_properties["color"] = pick_available_field_color(used_colors, len(fields) + index)

        features.append({
            "type": "Feature",
            "id": field.get("id"),
            "geometry": copy.deepcopy(geometry),
            "properties": {
                **base_properties,
                "type": FIELD_BOUNDARY_TYPE,
                "fieldId": field.get("id"),
                "area": compute_polygon_area_hectares(_polygon_coordinates(geometry)),
                "managerName": resolve_manager_name(field, users),
                "plotCount": resolve_plot_count(field),
                "fillColor": list(hex_to_rgba(base_properties["color"])),
            },
        })

    return {"type": "FeatureCollection", "features": features}


# --- GeoJSON -> Field ---

def _temporary_id(index: int) -> str:
    return f"temp-{int(time.time() * 1000)}-{index}"


def _strip_display(properties: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in properties.items() if k not in DISPLAY_PROPERTIES}


def _existing_boundary_properties(existing: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not existing:
        return {}
    boundary = existing.get("boundary")
    if isinstance(boundary, Mapping) and isinstance(boundary.get("properties"), Mapping):
        return boundary["properties"]
    return {}


def _new_field(feature: Mapping[str, Any], index: int, taken: Mapping[Any, Any]) -> Dict[str, Any]:
    properties = _properties(feature)
    field_id = feature.get("id")
    if not _has_id(field_id):
        field_id = _temporary_id(index)
    elif field_id in taken:
        # a drawing must not replace a field already collected
        field_id = _temporary_id(index)

    name = _text(properties.get("name")) or NEW_FIELD_NAME
    return {
        "id": field_id,
        "name": name,
        "boundary": {
            "type": "Feature",
            "id": field_id,
            "geometry": copy.deepcopy(feature.get("geometry")),
            "properties": {
                **_strip_display(properties),
                "name": name,
                "color": properties.get("color") or DEFAULT_FIELD_COLOR,
            },
        },
        "plots": [],
    }


def _plot_from_feature(feature: Mapping[str, Any]) -> Dict[str, Any]:
    properties = _strip_display(_properties(feature))
    geometry = copy.deepcopy(feature.get("geometry"))
    properties["area"] = compute_polygon_area_hectares(_polygon_coordinates(geometry))
    return {
        "type": "Feature",
        "id": feature.get("id"),
        "geometry": geometry,
        "properties": properties,
    }


def feature_collection_to_fields(
    feature_collection: Mapping[str, Any],
    existing_fields: Optional[Sequence[Mapping[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Rebuild fields (with their plots) from an edited FeatureCollection.

    Features are classified once with :func:`classify_feature`:

    - new drawings become new fields named "Nuevo Campo";
    - ``field-boundary`` features set the boundary and name of their field;
    - ``plot`` features are added to (or replace, by ``id``) the field's plots;
    - anything else is ignored.

    ``existing_fields`` is only used for defaults: missing boundary name and
    color, and the plots a field already had. Fields whose boundary never
    showed up are left out of the result.
    """
    existing_by_id = {
        field.get("id"): field
        for field in existing_fields or []
        if isinstance(field, Mapping) and isinstance(field.get("id"), (str, int))
    }
    grouped: "OrderedDict[Any, Dict[str, Any]]" = OrderedDict()

    def group_for(field_id: Any) -> Dict[str, Any]:
        if field_id not in grouped:
            existing = existing_by_id.get(field_id)
            grouped[field_id] = {
                "id": field_id,
                "plots": copy.deepcopy(list(existing.get("plots") or [])) if existing else [],
            }
        return grouped[field_id]

    features = feature_collection.get("features") or []
    for index, feature in enumerate(features):
        if not isinstance(feature, Mapping):
            continue

        kind = classify_feature(feature)
        properties = _properties(feature)

        if kind is FeatureKind.NEW_DRAWING:
            field = _new_field(feature, index, grouped)
            grouped[field["id"]] = field
        elif kind is FeatureKind.FIELD_BOUNDARY:
            field_id = properties["fieldId"]
            field = group_for(field_id)
            fallback = _existing_boundary_properties(existing_by_id.get(field_id))
            boundary_properties = _strip_display(properties)
            boundary_properties["name"] = properties.get("name") or fallback.get("name") or UNNAMED_FIELD
            boundary_properties["color"] = properties.get("color") or fallback.get("color") or DEFAULT_FIELD_COLOR
            field["name"] = boundary_properties["name"]
            field["boundary"] = {
                "type": "Feature",
                "id": field_id,
                "geometry": copy.deepcopy(feature.get("geometry")),
                "properties": boundary_properties,
            }
        elif kind is FeatureKind.PLOT:
            field = group_for(properties["fieldId"])
            plot = _plot_from_feature(feature)
            plots = field["plots"]
            position = next(
                (i for i, current in enumerate(plots)
                 if plot["id"] is not None and isinstance(current, Mapping) and current.get("id") == plot["id"]),
                None,
            )
            if position is None:
                plots.append(plot)
            else:
                plots[position] = plot
        else:
            logger.debug(f"Dropping feature {feature.get('id')!r}: unplaceable ({properties.get('type')!r})")

    result = [field for field in grouped.values() if field.get("boundary")]
    dropped = len(grouped) - len(result)
    if dropped:
        logger.debug(f"Dropped {dropped} field(s) without a boundary feature")
    return result
