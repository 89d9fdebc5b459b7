"""Tests for the property catalog."""

import pytest

from listing_api.exceptions import NotFound
from listing_api.schemas import PropertyCreate, PropertyUpdate


@pytest.fixture
def listings(catalog):
    rows = [
        PropertyCreate(title="Sunny Loft", location="Lisbon", liked=True),
        PropertyCreate(title="Downtown LOFT studio", location="Porto", liked=False),
        PropertyCreate(title="Garden House", location="Lisbon", liked=True),
        PropertyCreate(title="Lofty views 100%", location="Braga"),
        PropertyCreate(title=None, location="Lisbon"),
    ]
    return [catalog.create(r) for r in rows]


class TestCreate:
    def test_defaults(self, catalog) -> None:
        prop = catalog.create(PropertyCreate(title="Flat", features=["balcony"]))
        assert prop.id is not None
        assert prop.views == 0
        assert prop.features == ["balcony"]
        assert prop.image_urls == []


class TestList:
    def test_no_filters_returns_all(self, catalog, listings) -> None:
        assert len(catalog.list()) == len(listings)

    def test_title_is_case_insensitive_substring(self, catalog, listings) -> None:
        titles = [p.title for p in catalog.list(title="loft")]
        assert titles == ["Sunny Loft", "Downtown LOFT studio", "Lofty views 100%"]

    def test_title_is_matched_literally(self, catalog, listings) -> None:
        assert [p.title for p in catalog.list(title="100%")] == ["Lofty views 100%"]
        assert catalog.list(title="L_ft") == []

    def test_location_is_exact(self, catalog, listings) -> None:
        assert len(catalog.list(location="Lisbon")) == 3
        assert catalog.list(location="lisbon") == []

    def test_liked(self, catalog, listings) -> None:
        assert [p.title for p in catalog.list(liked=True)] == ["Sunny Loft", "Garden House"]
        assert [p.title for p in catalog.list(liked=False)] == ["Downtown LOFT studio"]

    def test_filters_combine_with_and(self, catalog, listings) -> None:
        found = catalog.list(liked=True, location="Lisbon", title="loft")
        assert [p.title for p in found] == ["Sunny Loft"]

    def test_title_folds_non_ascii_case(self, catalog) -> None:
        catalog.create(PropertyCreate(title="ÉCOLE Loft"))
        catalog.create(PropertyCreate(title="Ölmühle"))
        assert [p.title for p in catalog.list(title="école")] == ["ÉCOLE Loft"]
        assert [p.title for p in catalog.list(title="ÖLM")] == ["Ölmühle"]


class TestGetUpdate:
    def test_get_not_found(self, catalog) -> None:
        with pytest.raises(NotFound):
            catalog.get(123)

    def test_update_partial(self, catalog) -> None:
        prop = catalog.create(PropertyCreate(title="Old", price="100"))
        updated = catalog.update(prop.id, PropertyUpdate(title="New"))
        assert updated.title == "New"
        assert updated.price == "100"
        assert catalog.get(prop.id).title == "New"

    def test_update_not_found(self, catalog) -> None:
        with pytest.raises(NotFound):
            catalog.update(123, PropertyUpdate(title="x"))

    def test_get_many_keeps_given_order(self, catalog, listings) -> None:
        ids = [listings[2].id, 999, listings[0].id, listings[2].id]
        assert [p.title for p in catalog.get_many(ids)] == ["Garden House", "Sunny Loft"]
        assert catalog.get_many([]) == []
