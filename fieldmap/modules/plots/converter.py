"""
Plot <-> GeoJSON conversion, one Feature per plot.

Plots may come from the map editor (GeoJSON Feature with ``properties``)
or from the backend (flat record with ``location``). Area is always
recomputed from geometry, a client supplied area is never kept.
"""

import copy
import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from fieldmap.modules.fields.colors import DEFAULT_PLOT_COLOR
from fieldmap.modules.geometry.engine import compute_polygon_area_hectares

logger = logging.getLogger(__name__)

UNNAMED_PLOT = "Parcela sin nombre"
UNASSIGNED_VARIETY = "Sin asignar"


def _properties(item: Mapping[str, Any]) -> Mapping[str, Any]:
    properties = item.get("properties")
    return properties if isinstance(properties, Mapping) else {}


def _plot_geometry(plot: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    geometry = plot.get("geometry") or plot.get("location")
    return geometry if isinstance(geometry, Mapping) else None


def _area(geometry: Any) -> float:
    if not isinstance(geometry, Mapping) or geometry.get("type", "Polygon") != "Polygon":
        return 0.0
    return compute_polygon_area_hectares(geometry.get("coordinates") or [])


def _variety_name(value: Any) -> Optional[str]:
    if isinstance(value, Mapping):
        value = value.get("name")
    if isinstance(value, str) and value:
        return value
    return None


def _plot_name(plot: Mapping[str, Any]) -> Optional[str]:
    return plot.get("name") or _properties(plot).get("name")


def _plot_variety(plot: Mapping[str, Any]) -> Optional[str]:
    return _variety_name(_properties(plot).get("variety")) or _variety_name(plot.get("variety"))


def _plot_color(plot: Mapping[str, Any]) -> Optional[str]:
    return _properties(plot).get("color") or plot.get("color")


def plots_to_feature_collection(plots: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Build a FeatureCollection with one Feature per plot that has geometry.

    Properties carry ``name``, ``variety``, ``color``, ``area`` (hectares,
    from geometry) and ``plotId`` on top of whatever the plot already had.
    """
    features = []
    for plot in plots:
        geometry = _plot_geometry(plot)
        if geometry is None:
            logger.debug(f"Skipping plot {plot.get('id')!r}: no geometry")
            continue

        plot_id = plot.get("id")
        features.append({
            "type": "Feature",
            "id": plot_id,
            "geometry": copy.deepcopy(geometry),
            "properties": {
                **_properties(plot),
                "name": _plot_name(plot) or f"Parcela {plot_id}",
                "variety": _plot_variety(plot) or UNASSIGNED_VARIETY,
                "color": _plot_color(plot) or DEFAULT_PLOT_COLOR,
                "area": _area(geometry),
                "plotId": plot_id,
            },
        })

    return {"type": "FeatureCollection", "features": features}


def feature_collection_to_plots(
    feature_collection: Mapping[str, Any],
    existing_plots: Optional[Sequence[Mapping[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Turn an edited FeatureCollection back into plot records.

    Plots are matched to ``existing_plots`` by ``id`` (or ``plotId``);
    missing ``name``, ``variety`` and ``color`` fall back to the existing
    plot, then to fixed defaults. Matched plots keep their other keys.
    Features without geometry are dropped.
    """
    existing_by_id = {
        plot.get("id"): plot
        for plot in existing_plots or []
        if isinstance(plot, Mapping) and isinstance(plot.get("id"), (str, int))
    }

    plots = []
    for index, feature in enumerate(feature_collection.get("features") or []):
        if not isinstance(feature, Mapping) or not isinstance(feature.get("geometry"), Mapping):
            logger.debug("Dropping plot feature without geometry")
            continue

        properties = _properties(feature)
        plot_id = feature.get("id")
        if plot_id is None or plot_id == "":
            plot_id = properties.get("plotId")
        if not isinstance(plot_id, (str, int)) or plot_id == "":
            plot_id = f"temp-{int(time.time() * 1000)}-{index}"

        existing = existing_by_id.get(plot_id) or {}
        geometry = copy.deepcopy(feature["geometry"])

        plot = dict(existing)
        plot.update({
            "id": plot_id,
            "geometry": geometry,
            "name": properties.get("name") or _plot_name(existing) or UNNAMED_PLOT,
            "variety": _variety_name(properties.get("variety")) or _plot_variety(existing) or UNASSIGNED_VARIETY,
            "color": properties.get("color") or _plot_color(existing) or DEFAULT_PLOT_COLOR,
            "area": _area(geometry),
        })
        if "location" in existing:
            plot["location"] = copy.deepcopy(geometry)
        plots.append(plot)

    return plots
