from fastapi import APIRouter
from typing import Any, Dict, List

from . import schemas, services

router = APIRouter(prefix="/fields", tags=["Fields"])

field_map_service = services.FieldMapService()


@router.post("/geojson")
def fields_to_geojson(request: schemas.FieldsToGeoJSONRequest):
    """
    One boundary Feature per field, with area, manager name and plot count
    stamped in the properties for map tooltips.
    """
    users = [user.model_dump() for user in request.users]
    return field_map_service.render(request.fields, users)


@router.post("/from-geojson")
def fields_from_geojson(request: schemas.GeoJSONToFieldsRequest):
    """Rebuild fields and plots from an edited FeatureCollection."""
    return field_map_service.apply_edits(
        request.feature_collection.model_dump(),
        request.existing_fields,
    )


@router.post("/colors")
def assign_field_colors(fields: List[Dict[str, Any]]):
    return field_map_service.apply_colors(fields)


@router.post("/next-color", response_model=schemas.NextColorResponse)
def next_field_color(fields: List[Dict[str, Any]]):
    return {"color": field_map_service.next_color(fields)}
