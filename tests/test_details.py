"""Tests for the detail view state machine and its rendering helpers."""

import asyncio

from conftest import detail_payload, detail_url, summary

from pokecatalog.catalog.details import (
    DETAIL_ERROR_MESSAGE,
    NOT_FOUND_MESSAGE,
    DetailLoader,
    DetailStatus,
    attribute_rows,
    gallery_slots,
)
from pokecatalog.catalog.pokeapi_service import parse_detail
from pokecatalog.catalog.render import NO_IMAGE_URL, render_details


class TestAttributeRows:
    def test_units_are_converted(self):
        detail = parse_detail(detail_payload(25, "pikachu", height=7, weight=60))
        rows = dict(attribute_rows(detail))
        assert rows["Height"] == "0.7 m"
        assert rows["Weight"] == "6 kg"
        assert rows["Base experience"] == "112"
        assert rows["Order"] == "250"

    def test_seven_rows_in_order(self):
        detail = parse_detail(
            detail_payload(1, "bulbasaur", abilities=["overgrow", "chlorophyll"], types=["grass", "poison"])
        )
        rows = attribute_rows(detail)
        assert [label for label, _ in rows] == [
            "Height", "Weight", "Base experience", "Abilities", "Types", "Species", "Order",
        ]
        assert rows[3][1] == "overgrow, chlorophyll"
        assert rows[4][1] == "grass, poison"
        assert rows[5][1] == "bulbasaur"

    def test_missing_numbers(self):
        payload = detail_payload(10001, "deoxys-attack")
        payload["base_experience"] = None
        rows = dict(attribute_rows(parse_detail(payload)))
        assert rows["Base experience"] == "n/a"


class TestGallery:
    def test_all_six_slots(self):
        slots = gallery_slots(parse_detail(detail_payload(25, "pikachu")))
        assert [s.label for s in slots] == [
            "Front", "Back", "Front shiny", "Back shiny", "Dream world", "Official artwork",
        ]

    def test_absent_back_shiny_is_skipped(self):
        payload = detail_payload(25, "pikachu")
        payload["sprites"]["back_shiny"] = None
        slots = gallery_slots(parse_detail(payload))
        assert len(slots) == 5
        assert "Back shiny" not in [s.label for s in slots]


class TestDetailLoader:
    def test_loading_then_loaded(self, fake_api):
        loader = DetailLoader(fake_api)
        assert loader.snapshot.status is DetailStatus.IDLE
        snap = asyncio.run(loader.show(summary(25, "pikachu")))
        assert snap.status is DetailStatus.LOADED
        assert snap.detail.name == "pikachu"
        assert fake_api.requested == [detail_url(25)]

    def test_failure_is_terminal(self, fake_api):
        fake_api.failures.add(detail_url(25))
        loader = DetailLoader(fake_api)
        snap = asyncio.run(loader.show(summary(25, "pikachu")))
        assert snap.status is DetailStatus.ERRORED
        assert snap.error == DETAIL_ERROR_MESSAGE
        assert snap.detail is None
        # No automatic retry.
        assert fake_api.requested == [detail_url(25)]
        assert snap.not_found is False

    def test_show_id_fills_subject_from_response(self, fake_api):
        loader = DetailLoader(fake_api)
        snap = asyncio.run(loader.show_id(7))
        assert snap.status is DetailStatus.LOADED
        assert snap.subject.name == "squirtle"
        assert snap.subject.types == ["water"]
        assert fake_api.requested == [detail_url(7)]

    def test_show_id_not_found(self, fake_api):
        loader = DetailLoader(fake_api)
        snap = asyncio.run(loader.show_id(9999))
        assert snap.status is DetailStatus.ERRORED
        assert snap.not_found is True
        assert snap.error == NOT_FOUND_MESSAGE
        assert snap.subject is None

    def test_subject_change_discards_stale_result(self, fake_api):
        loader = DetailLoader(fake_api)

        async def scenario():
            gate = asyncio.Event()
            fake_api.gates[detail_url(25)] = gate
            slow = asyncio.ensure_future(loader.show(summary(25, "pikachu")))
            await asyncio.sleep(0)
            await loader.show(summary(4, "charmander"))
            gate.set()
            await slow

        asyncio.run(scenario())
        assert loader.snapshot.status is DetailStatus.LOADED
        assert loader.snapshot.subject.id == 4
        assert loader.snapshot.detail.name == "charmander"


class TestRenderDetails:
    def test_loaded_page(self, fake_api):
        payload = detail_payload(25, "pikachu")
        payload["sprites"]["back_shiny"] = None
        fake_api.responses[detail_url(25)] = payload
        loader = DetailLoader(fake_api)
        snap = asyncio.run(loader.show(summary(25, "pikachu")))

        html = render_details(snap, is_favorite=True)
        assert "0.7 m" in html
        assert html.count("<figure>") == 5
        assert NO_IMAGE_URL in html
        assert "Remove from favorites" in html

    def test_error_page_has_back_link(self, fake_api):
        fake_api.failures.add(detail_url(25))
        loader = DetailLoader(fake_api)
        snap = asyncio.run(loader.show(summary(25, "pikachu")))
        html = render_details(snap, is_favorite=False)
        assert "Could not load the Pokémon details" in html
        assert 'href="/"' in html

    def test_error_without_subject(self, fake_api):
        snap = asyncio.run(DetailLoader(fake_api).show_id(9999))
        html = render_details(snap, is_favorite=False)
        assert NOT_FOUND_MESSAGE in html
        assert "Back to the list" in html
        assert "No Pokémon selected." not in html

    def test_nothing_selected(self, fake_api):
        html = render_details(DetailLoader(fake_api).snapshot, is_favorite=False)
        assert "No Pokémon selected." in html
