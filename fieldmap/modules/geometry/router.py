from fastapi import APIRouter

from . import engine, schemas, viewport

router = APIRouter(prefix="/geometry", tags=["Geometry"])


@router.post("/area", response_model=schemas.AreaResponse)
def polygon_area(polygon: schemas.GeoJSONPolygon):
    """Geodesic area of the polygon's exterior ring, in hectares."""
    return {"area_hectares": engine.compute_polygon_area_hectares(polygon.coordinates)}


@router.post("/centroid", response_model=schemas.CentroidResponse)
def polygon_centroid(polygon: schemas.GeoJSONPolygon):
    latitude, longitude = engine.compute_polygon_centroid(polygon.coordinates)
    return {"latitude": latitude, "longitude": longitude}


@router.post("/viewport", response_model=schemas.ViewportResponse)
def feature_collection_viewport(collection: schemas.FeatureCollection):
    """
    Map center and zoom that frame every coordinate in the collection.
    Used to position the map when a layer is opened.
    """
    return viewport.calculate_center(collection.model_dump())
