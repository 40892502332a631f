"""
Unit Tests for the Service Catalog.
"""

import pytest

from beautyslot.backend.services.catalog import CatalogService


@pytest.fixture
def catalog(sync_store, make_service):
    sync_store.set_synced_data(
        services=[
            make_service(id=1, title="окрашивание", category_id=1, seance_length=7200),
            make_service(id=2, title="Маникюр", category_id=2, seance_length=None),
            make_service(id=3, title="Борода", category_id=1, active=0, image="https://example.com/b.png"),
        ]
    )


class TestListServices:
    def test_sorted_by_title_case_insensitive(self, catalog):
        result = CatalogService().list_services()

        assert result.total == 3
        assert [s.title for s in result.items] == ["Борода", "Маникюр", "окрашивание"]

    def test_duration_defaults_to_an_hour(self, catalog):
        items = {s.id: s for s in CatalogService().list_services().items}

        assert items[1].duration == 7200
        assert items[2].duration == 3600

    def test_active_flag_and_image(self, catalog):
        items = {s.id: s for s in CatalogService().list_services().items}

        assert items[3].active is False
        assert items[3].image == "https://example.com/b.png"
        assert items[1].image is None

    def test_filters(self, catalog):
        service = CatalogService()

        assert [s.id for s in service.list_services(search="МАНИ").items] == [2]
        assert {s.id for s in service.list_services(category_id=1).items} == {1, 3}
        assert {s.id for s in service.list_services(active_only=True).items} == {1, 2}

    def test_empty_store(self):
        assert CatalogService().list_services().total == 0
