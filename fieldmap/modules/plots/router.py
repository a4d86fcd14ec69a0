import logging

from fastapi import APIRouter

from . import converter, schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plots", tags=["Plots"])


@router.post("/geojson")
def plots_to_geojson(request: schemas.PlotsToGeoJSONRequest):
    return converter.plots_to_feature_collection(request.plots)


@router.post("/from-geojson")
def plots_from_geojson(request: schemas.GeoJSONToPlotsRequest):
    """
    Plot records for an edited FeatureCollection. Areas are recomputed
    from the submitted geometry.
    """
    plots = converter.feature_collection_to_plots(
        request.feature_collection.model_dump(),
        request.existing_plots,
    )
    logger.info(f"Rebuilt {len(plots)} plots from GeoJSON")
    return plots
