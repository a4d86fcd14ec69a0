from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union

from fieldmap.modules.geometry.schemas import FeatureCollection


class UserRef(BaseModel):
    """Entry of the user directory, only used to resolve manager names."""
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    name: str = ""
    lastName: Optional[str] = None


class FieldsToGeoJSONRequest(BaseModel):
    # Fields arrive in several shapes (editor, backend), keep them as dicts
    fields: List[Dict[str, Any]] = Field(..., examples=[[{
        "id": "f-1",
        "boundary": {
            "type": "Feature",
            "id": "f-1",
            "geometry": {"type": "Polygon", "coordinates": [[[-65.2, -26.83], [-65.19, -26.83], [-65.19, -26.82], [-65.2, -26.83]]]},
            "properties": {"name": "Lote Norte", "color": "#2563eb"},
        },
        "plots": [],
        "managerId": "u-1",
    }]])
    users: List[UserRef] = []


class GeoJSONToFieldsRequest(BaseModel):
    feature_collection: FeatureCollection
    existing_fields: List[Dict[str, Any]] = []


class NextColorResponse(BaseModel):
    color: str
