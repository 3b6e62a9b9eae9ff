"""
src.main.

FastAPI entrypoint for the local events search service.

Responsibilities
----------------
• Health monitoring
• Coordinate search (``/local-events``)
• City search with category filters (``/events``)
• Location suggestions

Environment
-----------
Requires TICKETMASTER_API_KEY (and YELP_API_KEY when searching Yelp).

Each request builds its own adapter and EventSearchPipeline; no search
state is shared between requests.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from src.configs.logging import setup_logging
from src.configs.settings import Settings, get_settings
from src.ingestion.adapters import BaseSourceAdapter
from src.ingestion.factory import AdapterFactory, MissingAPIKeyError
from src.ingestion.normalization.location_parser import parse_city_state
from src.ingestion.pipelines.apis.ticketmaster import TicketmasterAdapter
from src.ingestion.search_pipeline import (
    EventSearchPipeline,
    SearchResult,
    SearchStatus,
    event_payload,
)
from src.ingestion.time_windows import DateRange, date_window
from src.schemas.filters import SearchFilters
from src.schemas.search import SearchQuery
from src.schemas.taxonomy import (
    CategoryTag,
    ComedyType,
    FamilyType,
    FestivalType,
    MusicGenre,
    NightlifeType,
    PriceBucket,
    SportsLevel,
    SportType,
    TheaterType,
    TimeOfDay,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "ticketmaster"
LOCATION_HINT = "Please enter a city and 2-letter state (e.g. Austin, TX)."

# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    logger.info(f"Starting local events API ({settings.ENV})")
    yield


app = FastAPI(
    title="Local Events API",
    version="0.1.0",
    description="Search, deduplicate and filter local events.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
)


# ---------------------------------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------------------------------


def get_app_settings() -> Settings:
    """Settings dependency (overridable in tests)."""
    return get_settings()


def _create_adapter(source: str, settings: Settings) -> BaseSourceAdapter:
    try:
        return AdapterFactory(settings=settings).create_adapter(source)
    except MissingAPIKeyError:
        raise HTTPException(
            status_code=500,
            detail={"error": f"Missing {source.upper()}_API_KEY env var"},
        ) from None
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)}) from None


async def get_adapter(
    source: str = Query(DEFAULT_SOURCE, description="Event source (ticketmaster, yelp)"),
    settings: Settings = Depends(get_app_settings),
) -> AsyncIterator[BaseSourceAdapter]:
    """Yield an adapter for the requested source, closed after the request."""
    adapter = _create_adapter(source, settings)
    try:
        yield adapter
    finally:
        await adapter.close()


async def get_ticketmaster_adapter(
    settings: Settings = Depends(get_app_settings),
) -> AsyncIterator[TicketmasterAdapter]:
    adapter = _create_adapter(DEFAULT_SOURCE, settings)
    try:
        yield adapter
    finally:
        await adapter.close()


def _raise_for_failure(result: SearchResult, default_status: int = 502) -> None:
    """Turn a failed search into an HTTP error carrying the provider status."""
    if result.status is not SearchStatus.FAILED:
        return
    raise HTTPException(
        status_code=result.status_code or default_status,
        detail={
            "error": f"{result.source_id} API error",
            "details": result.metadata.get("details") or "; ".join(result.errors),
        },
    )


# ---------------------------------------------------------------------------
# HEALTH ENDPOINT
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Monitoring"])
def health_check() -> dict[str, str]:
    """
    Check API health.

    Returns
    -------
    dict
        Service status indicator.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# SEARCH ENDPOINTS
# ---------------------------------------------------------------------------


@app.get("/local-events", tags=["Events"])
async def local_events(
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = Query(None, gt=0, description="Radius in miles"),
    start_date: int | None = Query(None, description="Window start, unix seconds"),
    end_date: int | None = Query(None, description="Window end, unix seconds"),
    adapter: BaseSourceAdapter = Depends(get_ticketmaster_adapter),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, list[dict]]:
    """
    Music events around a coordinate.

    Raises
    ------
    HTTPException
        400 when lat or lng is missing, the provider status when the
        provider call fails.
    """
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail={"error": "lat and lng are required"})

    try:
        query = SearchQuery(
            lat=lat,
            lng=lng,
            radius_miles=radius or settings.DEFAULT_RADIUS_MILES,
            start=dt.datetime.fromtimestamp(start_date, dt.UTC) if start_date else None,
            end=dt.datetime.fromtimestamp(end_date, dt.UTC) if end_date else None,
            category=CategoryTag.MUSIC,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)}) from None

    result = await EventSearchPipeline(adapter).search(query)
    _raise_for_failure(result)
    return {"events": [event_payload(event) for event in result.events]}


@app.get("/events", tags=["Events"])
async def search_events(
    location: str = Query(..., description='City and state, e.g. "Austin, TX"'),
    category: CategoryTag = CategoryTag.MUSIC,
    date: dt.date | None = Query(None, description="Only events on this local date"),
    date_range: DateRange | None = Query(
        None, alias="range", description="Provider-side window: tonight, week or date"
    ),
    music_genres: list[MusicGenre] = Query([]),
    venue_size: str | None = Query(None, description="small, mid, big or any"),
    sports: list[SportType] = Query([]),
    sports_level: SportsLevel = SportsLevel.ANY,
    comedy_types: list[ComedyType] = Query([]),
    festival_types: list[FestivalType] = Query([]),
    theater_types: list[TheaterType] = Query([]),
    nightlife_types: list[NightlifeType] = Query([]),
    family_types: list[FamilyType] = Query([]),
    time_of_day: TimeOfDay = TimeOfDay.ANY,
    price: PriceBucket = PriceBucket.ANY,
    adapter: BaseSourceAdapter = Depends(get_adapter),
) -> dict:
    """
    Search a city for events of one category and apply the sub-filters.

    Raises
    ------
    HTTPException
        400 for an unparseable location or a ``date`` range without a date,
        502 (or the provider status) when the provider call fails.
    """
    parsed = parse_city_state(location)
    if parsed is None:
        raise HTTPException(status_code=400, detail={"error": LOCATION_HINT})

    start = end = None
    if date_range is not None:
        try:
            start, end = date_window(date_range, day=date)
        except ValueError as e:
            raise HTTPException(status_code=400, detail={"error": str(e)}) from None

    query = SearchQuery(
        city=parsed.city,
        state_code=parsed.state_code,
        start=start,
        end=end,
        category=category,
    )
    try:
        filters = SearchFilters(
            category=category,
            date=date,
            music_genres=music_genres,
            venue_size=venue_size,
            sports=sports,
            sports_level=sports_level,
            comedy_types=comedy_types,
            festival_types=festival_types,
            theater_types=theater_types,
            nightlife_types=nightlife_types,
            family_types=family_types,
            time_of_day=time_of_day,
            price_bucket=price,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"error": str(e)}) from None

    result = await EventSearchPipeline(adapter).search(query, filters)
    _raise_for_failure(result)
    return result.to_dict()


# ---------------------------------------------------------------------------
# LOCATION ENDPOINTS
# ---------------------------------------------------------------------------


@app.get("/locations/suggest", tags=["Locations"])
async def suggest_locations(
    q: str = "",
    adapter: TicketmasterAdapter = Depends(get_ticketmaster_adapter),
) -> dict[str, list[str]]:
    """Suggest "City, ST" labels for a partial location."""
    return {"suggestions": await adapter.suggest_locations(q)}
