"""
Tests de coerción de filas del backend.
"""

import pytest
from pydantic import ValidationError

from vitrina.models import ListingPage, PropertyPreview, PropertyRecord, PropertySummary
from vitrina.models.property import to_int, to_number


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2500000", 2_500_000.0),
        ("1,250,000", 1_250_000.0),
        (" 95.5 ", 95.5),
        (120, 120.0),
        ("n/a", None),
        ("", None),
        (None, None),
        (True, None),
    ],
)
def test_to_number(value, expected):
    assert to_number(value) == expected


def test_to_int_rejects_fractions():
    assert to_int("3") == 3
    assert to_int(2.0) == 2
    assert to_int("2.5") is None


class TestPropertySummary:
    def test_numeric_strings_are_coerced(self):
        summary = PropertySummary.from_row(
            {"id": "A", "price": "3500000", "beds": "3", "baths": 2, "area": "140.5"}
        )
        assert summary.price == 3_500_000
        assert summary.beds == 3
        assert summary.area == 140.5

    def test_unparseable_numbers_become_missing(self):
        summary = PropertySummary.from_row({"id": "A", "price": "ask", "beds": "many"})
        assert summary.price is None
        assert summary.beds is None

    def test_null_text_columns_get_defaults(self):
        summary = PropertySummary.from_row(
            {"id": 17, "title": None, "status": None, "currency": ""}
        )
        assert summary.id == "17"
        assert summary.title == ""
        assert summary.status == "draft"
        assert summary.currency == "EGP"

    def test_tags_from_comma_string(self):
        summary = PropertySummary.from_row({"id": "A", "tags": "pool, garden,"})
        assert summary.tags == ["pool", "garden"]

    def test_unknown_columns_are_ignored(self):
        summary = PropertySummary.from_row({"id": "A", "agent_phone": "+20"})
        assert not hasattr(summary, "agent_phone")

    @pytest.mark.parametrize("row", [{}, {"id": None}, {"id": "   "}])
    def test_id_is_required(self, row):
        with pytest.raises(ValidationError):
            PropertySummary.from_row(row)


class TestPropertyRecord:
    def test_media_accepts_objects(self):
        record = PropertyRecord.from_row(
            {
                "id": "A",
                "media": [
                    {"url": "https://img/1.jpg", "type": "image"},
                    "https://img/2.jpg",
                    {"type": "video"},
                ],
            }
        )
        assert record.media == ["https://img/1.jpg", "https://img/2.jpg"]

    @pytest.mark.parametrize("value,expected", [("45", 45), (130, 100), (-3, 0), ("x", None)])
    def test_progress_is_clamped(self, value, expected):
        assert PropertyRecord.from_row({"id": "A", "progress_percent": value}).progress_percent == expected

    def test_unknown_finishing_is_dropped(self):
        assert PropertyRecord.from_row({"id": "A", "finishing": "luxury"}).finishing is None
        assert PropertyRecord.from_row({"id": "A", "finishing": "core_shell"}).finishing == "core_shell"

    def test_is_immutable(self):
        record = PropertyRecord.from_row({"id": "A"})
        with pytest.raises(ValidationError):
            record.beds = 4


def test_preview_tolerates_null_title():
    preview = PropertyPreview.model_validate({"id": "A", "title": None})
    assert preview.title == ""


@pytest.mark.parametrize(
    "page,limit,total,expected",
    [(1, 12, 30, True), (3, 12, 30, False), (2, 10, 20, False), (1, 12, 0, False)],
)
def test_listing_page_has_next(page, limit, total, expected):
    assert ListingPage(page=page, limit=limit, total=total).has_next_page is expected
