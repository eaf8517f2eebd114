"""
Unit tests for ImageEnricher.
"""

import pytest
from unittest.mock import MagicMock, patch

from services.image_enricher import ImageEnricher
from tests.factories import SuggestionFactory


@pytest.fixture
def mock_db():
    """Mock Supabase client."""
    with patch("services.image_enricher.get_supabase_client") as mock:
        client = MagicMock()
        mock.return_value = client
        yield client


@pytest.fixture
def enricher(mock_db):
    return ImageEnricher()


def set_images(mock_db, rows):
    query = mock_db.table.return_value.select.return_value.in_.return_value
    query.execute.return_value = MagicMock(data=rows)


class TestAttachImageUrls:
    """Tests for attach_image_urls()."""

    def test_variation_images_resolved(self, enricher, mock_db):
        set_images(mock_db, [
            {"id": "img-1", "url": "https://cdn.example.com/1.jpg"},
            {"id": "img-2", "url": "https://cdn.example.com/2.jpg"},
        ])
        suggestion = SuggestionFactory.create(images=["img-2", "img-1"])

        result = enricher.attach_image_urls([suggestion])

        assert result[0].image_urls == [
            "https://cdn.example.com/2.jpg",
            "https://cdn.example.com/1.jpg",
        ]

    def test_item_images_fallback(self, enricher, mock_db):
        set_images(mock_db, [{"id": "img-item", "url": "https://cdn.example.com/item.jpg"}])
        suggestion = SuggestionFactory.create(images=[], item_images=["img-item"])

        result = enricher.attach_image_urls([suggestion])

        assert result[0].image_urls == ["https://cdn.example.com/item.jpg"]

    def test_unknown_ids_skipped(self, enricher, mock_db):
        set_images(mock_db, [{"id": "img-1", "url": None}])
        suggestion = SuggestionFactory.create(images=["img-1", "img-missing"])

        result = enricher.attach_image_urls([suggestion])

        assert result[0].image_urls == []

    def test_single_batch_query(self, enricher, mock_db):
        set_images(mock_db, [])
        suggestions = [
            SuggestionFactory.create(images=["img-b"]),
            SuggestionFactory.create(images=["img-a", "img-b"]),
        ]

        enricher.attach_image_urls(suggestions)

        mock_db.table.assert_called_once_with("images")
        mock_db.table.return_value.select.return_value.in_.assert_called_once_with(
            "id", ["img-a", "img-b"]
        )

    def test_no_images_skips_query(self, enricher, mock_db):
        suggestions = [SuggestionFactory.create()]

        result = enricher.attach_image_urls(suggestions)

        assert result == suggestions
        mock_db.table.assert_not_called()

    def test_lookup_failure_returns_suggestions_unchanged(self, enricher, mock_db):
        mock_db.table.side_effect = Exception("storage unavailable")
        suggestions = [
            SuggestionFactory.create(variation_id="a", images=["img-1"]),
            SuggestionFactory.create(variation_id="b", images=["img-2"]),
        ]

        result = enricher.attach_image_urls(suggestions)

        assert [s.variation_id for s in result] == ["a", "b"]
        assert all(s.image_urls == [] for s in result)

    def test_order_preserved_and_input_untouched(self, enricher, mock_db):
        set_images(mock_db, [{"id": "img-1", "url": "https://cdn.example.com/1.jpg"}])
        suggestions = [
            SuggestionFactory.create(variation_id="first", images=["img-1"]),
            SuggestionFactory.create(variation_id="second"),
        ]

        result = enricher.attach_image_urls(suggestions)

        assert [s.variation_id for s in result] == ["first", "second"]
        assert suggestions[0].image_urls == []
        assert result[1].image_urls == []

    def test_raw_ids_not_serialized(self, enricher, mock_db):
        suggestion = SuggestionFactory.create(images=["img-1"])

        dumped = suggestion.model_dump()

        assert "images" not in dumped
        assert "item_images" not in dumped
        assert "image_urls" in dumped
