from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional, Union

# --- 1. GeoJSON Sub-Models ---

class GeoJSONPolygon(BaseModel):
    """
    GeoJSON Polygon structure.
    Example:
    {
        "type": "Polygon",
        "coordinates": [
            [[-65.20, -26.83], [-65.19, -26.83], [-65.19, -26.82], [-65.20, -26.82], [-65.20, -26.83]]
        ]
    }
    """
    type: Literal["Polygon"] = "Polygon"
    # Level 1: The Polygon (ring 0 is the exterior, the rest are holes)
    # Level 2: The Linear Ring, closed or open
    # Level 3: The Coordinate Pair [Longitude, Latitude]
    coordinates: List[List[List[float]]]

    @field_validator("coordinates")
    @classmethod
    def validate_positions(cls, v):
        for ring in v:
            for position in ring:
                if len(position) < 2:
                    raise ValueError("Every position needs at least [longitude, latitude].")
        return v


class Feature(BaseModel):
    """GeoJSON Feature; geometry and properties are passed through untouched."""
    model_config = ConfigDict(extra="allow")

    type: Literal["Feature"] = "Feature"
    id: Optional[Union[str, int]] = None
    geometry: Optional[Dict[str, Any]] = None
    properties: Optional[Dict[str, Any]] = None


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = []

# --- 2. API Models ---

class AreaResponse(BaseModel):
    area_hectares: float = Field(..., description="Geodesic area of the exterior ring in hectares")


class CentroidResponse(BaseModel):
    latitude: float
    longitude: float


class ViewportResponse(BaseModel):
    longitude: float
    latitude: float
    zoom: int = Field(..., ge=1, le=20)
