"""Parse free-text "City, ST" locations typed by the user."""

from __future__ import annotations

from typing import NamedTuple


class CityState(NamedTuple):
    city: str
    state_code: str


def parse_city_state(text: str | None) -> CityState | None:
    """
    Split "City, ST" into its parts.

    Everything before the last comma is the city (so "Washington, D.C., DC"
    keeps its inner comma); the last part must be a two-letter state code.

    Returns:
        CityState with an uppercased state code, or None when the input does
        not have that shape
    """
    if not text:
        return None
    parts = [part.strip() for part in text.split(",")]
    parts = [part for part in parts if part]
    if len(parts) < 2:
        return None

    state_code = parts[-1].upper()
    if len(state_code) != 2:
        return None
    return CityState(city=", ".join(parts[:-1]), state_code=state_code)
