# roster_dashboard/api/endpoints.py
from fastapi import APIRouter, HTTPException, Depends, Request
from typing import Optional
from datetime import datetime
import logging

from roster_dashboard.api.models import ChatInput, GenerateRosterInput
from roster_dashboard.core.chat import UnknownActionError
from roster_dashboard.core.dashboard import Dashboard
from roster_dashboard.core.tracking import run_blocking
from roster_dashboard.data.client import FetchError
from roster_dashboard.utils.constants import ERROR_MESSAGES

logger = logging.getLogger(__name__)
router = APIRouter()


def get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


@router.get("/health")
async def health_check(dashboard: Dashboard = Depends(get_dashboard)):
    """Health of the dashboard and reachability of the roster service"""
    try:
        upstream = await run_blocking(dashboard.client.health_check)
        roster_service = upstream.get("status", "unknown") if isinstance(upstream, dict) else "unknown"
    except FetchError as e:
        logger.warning(f"Roster service health check failed: {e}")
        roster_service = "unreachable"
    return {
        "status": "healthy",
        "timestamp": datetime.now(),
        "roster_service": roster_service,
    }


# Crew

@router.get("/crew")
async def get_crew(
    search: Optional[str] = None,
    base: Optional[str] = None,
    rank: Optional[str] = None,
    aircraft: Optional[str] = None,
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Crew list filtered by the given search term and select values"""
    dashboard.crew.set_filters(search_term=search, base=base, rank=rank, aircraft=aircraft)
    return dashboard.crew.snapshot()


@router.post("/crew/refresh")
async def refresh_crew(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.crew.refresh()
    return dashboard.crew.snapshot()


@router.delete("/crew/filters")
async def clear_crew_filters(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.crew.clear_filters()
    return dashboard.crew.snapshot()


@router.get("/crew/{crew_id}/details")
async def get_crew_details(crew_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Profile, schedule history, preferences and latest-roster flights of one crew member"""
    await dashboard.crew_details.select(crew_id)
    return dashboard.crew_details.snapshot()


@router.delete("/crew/details")
async def close_crew_details(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.crew_details.close()
    return dashboard.crew_details.snapshot()


# Flights

@router.get("/flights")
async def get_flights(
    page: Optional[int] = None,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    aircraft_type: Optional[str] = None,
    date: Optional[str] = None,
    search: Optional[str] = None,
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Flights page; server-side parameters trigger a fetch, the search term filters locally"""
    changes = {
        key: value
        for key, value in {
            "page": page,
            "origin": origin,
            "destination": destination,
            "aircraft_type": aircraft_type,
            "date": date,
        }.items()
        if value is not None
    }
    if changes:
        if "page" in changes and changes["page"] < 1:
            raise HTTPException(status_code=400, detail="page must be 1 or greater")
        await dashboard.flights.update(**changes)
    if search is not None:
        dashboard.flights.set_search(search)
    return dashboard.flights.snapshot()


@router.post("/flights/refresh")
async def refresh_flights(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.flights.load()
    return dashboard.flights.snapshot()


# Rosters

@router.get("/rosters")
async def get_rosters(dashboard: Dashboard = Depends(get_dashboard)):
    return dashboard.rosters.snapshot()


@router.post("/rosters/refresh")
async def refresh_rosters(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.rosters.refresh_history()
    return dashboard.rosters.snapshot()


@router.get("/rosters/{roster_id}")
async def select_roster(roster_id: int, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.rosters.select_roster(roster_id)
    return dashboard.rosters.snapshot()


@router.delete("/rosters/{roster_id}")
async def delete_roster(roster_id: int, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.rosters.delete(roster_id)
    return dashboard.rosters.snapshot()


@router.post("/generate-roster")
async def generate_roster(request: GenerateRosterInput, dashboard: Dashboard = Depends(get_dashboard)):
    """Ask the roster service for an optimized roster over a date range"""
    logger.info(f"Requesting roster for {request.start_date} to {request.end_date}")
    await dashboard.rosters.generate(request.start_date, request.end_date, request.optimization_weights)
    return dashboard.rosters.snapshot()


@router.get("/analytics")
async def get_analytics(dashboard: Dashboard = Depends(get_dashboard)):
    analytics = dashboard.rosters.analytics()
    if analytics is None:
        return {"analytics": None, "message": ERROR_MESSAGES["NO_ROSTER"]}
    return {"analytics": analytics}


# System status

@router.get("/status")
async def get_status(dashboard: Dashboard = Depends(get_dashboard)):
    return dashboard.status.snapshot()


@router.post("/status/refresh")
async def refresh_status(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.status.refresh()
    return dashboard.status.snapshot()


# Disruption assistant

@router.get("/chat")
async def get_chat(dashboard: Dashboard = Depends(get_dashboard)):
    return dashboard.chat.snapshot()


@router.post("/chat")
async def send_chat_message(message: Optional[ChatInput] = None, dashboard: Dashboard = Depends(get_dashboard)):
    """Send a user turn; without a message the staged draft is sent"""
    accepted = await dashboard.chat.submit(message.message if message else None)
    return {"accepted": accepted, **dashboard.chat.snapshot()}


@router.post("/chat/reset")
async def reset_chat(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.chat.reset()
    return dashboard.chat.snapshot()


@router.post("/chat/actions/{action}")
async def stage_suggested_action(action: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Prefill the input box with the canned query for a suggested action"""
    try:
        dashboard.chat.select_suggested_action(action)
    except UnknownActionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return dashboard.chat.snapshot()


@router.get("/notifications")
async def get_notifications(dashboard: Dashboard = Depends(get_dashboard)):
    return {"notifications": dashboard.notifications.drain()}
