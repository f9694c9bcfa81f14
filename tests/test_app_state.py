"""
Tests for the shared application state.
"""

import pytest

from conftest import product
from services.curation.app_state import AppState
from services.curation.storage import CurationStore
from utils.constants import MODE_KEY
from utils.schema.catalog_schema import ProductVariant
from utils.schema.curation_schema import CreatorWorkflowData, SavedProduct


STAPLE_TEE = product("5001", styleName="Staple Tee", productType="T-Shirts", gender="Men")

VARIANTS = [
    ProductVariant(styleCode="5001", sku="5001-WHITE-M", colour="WHITE", size="M"),
    ProductVariant(styleCode="5001", sku="5001-BLACK-M", colour="BLACK", size="M"),
    ProductVariant(styleCode="5001", sku="5001-BLACK-L", colour="BLACK", size="L"),
    ProductVariant(styleCode="5001", sku="5001-NAVY-L", colour="NAVY", size="L"),
]


@pytest.fixture
def app_state(store):
    state = AppState(store)
    yield state
    state.close()


class TestWorkingSet:

    def test_save_selection_updates_state_through_events(self, app_state):
        app_state.save_selection(STAPLE_TEE, ["BLACK", "WHITE", "BLACK"])

        assert [p.styleCode for p in app_state.saved_products] == ["5001"]
        assert app_state.saved_products[0].selectedColors == ["BLACK", "WHITE"]
        assert app_state.saved_products[0].productType == "T-Shirts"

    def test_save_selection_requires_a_colour(self, app_state):
        with pytest.raises(ValueError):
            app_state.save_selection(STAPLE_TEE, [])

    def test_clear_selection_also_clears_filters(self, app_state):
        app_state.save_selection(STAPLE_TEE, ["BLACK"])
        app_state.filter_engine.toggle_category("T-Shirts")

        app_state.clear_selection()

        assert app_state.saved_products == []
        assert app_state.filter_engine.state.categories == set()

    def test_remove_selection(self, app_state):
        app_state.save_selection(STAPLE_TEE, ["BLACK"])
        app_state.remove_selection("5001")
        assert app_state.saved_products == []

    def test_external_writes_are_picked_up(self, app_state, store):
        store.save_product(SavedProduct(styleCode="5026", selectedColors=["NAVY"], timestamp="t"))
        assert [p.styleCode for p in app_state.saved_products] == ["5026"]


class TestPublishing:

    def test_publish_moves_working_set_to_published(self, app_state, store):
        app_state.save_selection(STAPLE_TEE, ["BLACK", "WHITE"])

        assert app_state.publish_selection() == 1

        assert app_state.saved_products == []
        assert store.get_saved_products() == []
        assert [p.styleCode for p in app_state.published_products] == ["5001"]
        assert app_state.filter_engine.published_style_codes == {"5001"}

    def test_publish_with_nothing_saved(self, app_state):
        with pytest.raises(ValueError):
            app_state.publish_selection()

    def test_republish_overwrites_colours(self, app_state):
        app_state.save_selection(STAPLE_TEE, ["BLACK", "WHITE"])
        app_state.publish_selection()
        app_state.save_selection(STAPLE_TEE, ["NAVY"])
        app_state.publish_selection()

        assert app_state.creator_colors("5001") == ["NAVY"]


class TestMode:

    def test_initial_mode_comes_from_store(self, backend, event_bus):
        backend.set_item(MODE_KEY, "creator")
        state = AppState(CurationStore(backend, event_bus))

        assert state.mode == "creator"
        assert state.filter_engine.mode == "creator"
        state.close()

    def test_toggle_persists(self, app_state, store):
        assert app_state.toggle_mode() == "creator"
        assert store.get_user_mode() == "creator"
        assert app_state.filter_engine.mode == "creator"

        assert app_state.toggle_mode() == "admin"
        assert store.get_user_mode() == "admin"

    def test_mode_change_elsewhere_is_followed(self, app_state, store):
        store.set_user_mode("creator")
        assert app_state.mode == "creator"
        assert app_state.filter_engine.mode == "creator"


class TestColours:

    def test_admin_sees_every_variant_colour(self, app_state):
        assert app_state.available_colors("5001", VARIANTS) == ["BLACK", "NAVY", "WHITE"]

    def test_creator_sees_published_colours_only(self, app_state):
        app_state.save_selection(STAPLE_TEE, ["WHITE", "BLACK"])
        app_state.publish_selection()
        app_state.toggle_mode()

        assert app_state.available_colors("5001", VARIANTS) == ["BLACK", "WHITE"]
        assert app_state.creator_colors("5001") == ["WHITE", "BLACK"]

    def test_creator_sees_nothing_for_unpublished_style(self, app_state):
        app_state.toggle_mode()
        assert app_state.available_colors("5001", VARIANTS) == []

    def test_initial_selection_in_admin_is_the_saved_colours(self, app_state):
        app_state.save_selection(STAPLE_TEE, ["NAVY"])
        assert app_state.initial_selected_colors("5001") == ["NAVY"]
        assert app_state.initial_selected_colors("5026") == []

    def test_initial_selection_in_creator_comes_from_workflow(self, app_state, store):
        app_state.save_selection(STAPLE_TEE, ["WHITE", "BLACK"])
        app_state.publish_selection()
        app_state.toggle_mode()
        store.save_creator_workflow(CreatorWorkflowData(
            selectedProduct={"styleCode": "5001"},
            selectedColors=["BLACK", "NAVY"],
        ))

        assert app_state.initial_selected_colors("5001") == ["BLACK"]


def test_close_stops_listening(store):
    state = AppState(store)
    state.close()

    store.save_product(SavedProduct(styleCode="5001", selectedColors=["BLACK"], timestamp="t"))

    assert state.saved_products == []
    state.refresh()
    assert [p.styleCode for p in state.saved_products] == ["5001"]
