"""Unit tests for the "City, ST" location parser."""

import pytest

from src.ingestion.normalization.location_parser import CityState, parse_city_state


class TestParseCityState:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Austin, TX", CityState("Austin", "TX")),
            ("  austin ,  tx  ", CityState("austin", "TX")),
            ("Los Angeles,CA", CityState("Los Angeles", "CA")),
            ("Washington, D.C., DC", CityState("Washington, D.C.", "DC")),
            ("Austin, TX,", CityState("Austin", "TX")),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_city_state(text) == expected

    @pytest.mark.parametrize(
        "text",
        [None, "", "Austin", "Austin, Texas", "Austin, T", ", TX", " , "],
    )
    def test_invalid(self, text):
        assert parse_city_state(text) is None

    def test_named_fields(self):
        result = parse_city_state("Denver, co")
        assert result.city == "Denver"
        assert result.state_code == "CO"
