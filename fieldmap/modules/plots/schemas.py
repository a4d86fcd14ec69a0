from pydantic import BaseModel
from typing import Any, Dict, List

from fieldmap.modules.geometry.schemas import FeatureCollection


class PlotsToGeoJSONRequest(BaseModel):
    # editor plots (GeoJSON Features) or backend plots (flat, with location)
    plots: List[Dict[str, Any]]


class GeoJSONToPlotsRequest(BaseModel):
    feature_collection: FeatureCollection
    existing_plots: List[Dict[str, Any]] = []
