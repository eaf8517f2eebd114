"""
Image enricher for reorder suggestions.

Resolves catalog image ids to URLs in a single batch query after
ranking. Display only: a failed lookup leaves image_urls empty rather
than failing the suggestions.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.replenishment import ReplenishmentSuggestion

logger = structlog.get_logger(__name__)


class ImageEnricher:
    """Attaches image URLs to suggestions."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "images"

    def _image_ids(self, suggestion: ReplenishmentSuggestion) -> list[str]:
        """Variation images first, item images as fallback."""
        return suggestion.images or suggestion.item_images

    def _get_urls(self, image_ids: list[str]) -> dict[str, str]:
        response = (
            self.db.table(self.table)
            .select("id, url")
            .in_("id", image_ids)
            .execute()
        )
        return {row["id"]: row["url"] for row in response.data if row.get("url")}

    def attach_image_urls(
        self,
        suggestions: list[ReplenishmentSuggestion],
    ) -> list[ReplenishmentSuggestion]:
        """
        Set image_urls on each suggestion, keeping order.

        Args:
            suggestions: Ranked suggestions

        Returns:
            New suggestion objects with image_urls filled where resolvable
        """
        all_ids = sorted({
            image_id
            for s in suggestions
            for image_id in self._image_ids(s)
        })
        if not all_ids:
            return suggestions

        try:
            url_map = self._get_urls(all_ids)
        except Exception as e:
            logger.warning("image_enrichment_failed", error=str(e), images=len(all_ids))
            return suggestions

        enriched = []
        for suggestion in suggestions:
            urls = [url_map[i] for i in self._image_ids(suggestion) if i in url_map]
            enriched.append(suggestion.model_copy(update={"image_urls": urls}))

        logger.debug("image_urls_attached", suggestions=len(enriched), images=len(url_map))
        return enriched


# Singleton instance
_image_enricher: Optional[ImageEnricher] = None


def get_image_enricher() -> ImageEnricher:
    """Get or create ImageEnricher instance."""
    global _image_enricher
    if _image_enricher is None:
        _image_enricher = ImageEnricher()
    return _image_enricher
