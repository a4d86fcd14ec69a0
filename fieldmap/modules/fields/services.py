import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from . import colors, converter

logger = logging.getLogger(__name__)


class FieldMapService:
    """Prepares fields for the map editor and reads edits back."""

    def render(
        self,
        fields: Sequence[Mapping[str, Any]],
        users: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> Dict[str, Any]:
        collection = converter.fields_to_feature_collection(self.apply_colors(fields), users)
        logger.info(f"Rendered {len(collection['features'])} of {len(fields)} fields as GeoJSON")
        return collection

    def apply_edits(
        self,
        feature_collection: Mapping[str, Any],
        existing_fields: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> List[Mapping[str, Any]]:
        fields = converter.feature_collection_to_fields(feature_collection, existing_fields)
        received = len(feature_collection.get("features") or [])
        logger.info(f"Rebuilt {len(fields)} fields from {received} features")
        return fields

    def apply_colors(self, fields: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        return colors.ensure_field_colors(fields)

    def next_color(self, fields: Sequence[Mapping[str, Any]]) -> str:
        return colors.get_next_field_color(fields)
