# roster_dashboard/core/views.py
import math
from dataclasses import dataclass, replace, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from roster_dashboard.api.models import (
    CrewMember, DataStatus, Flight, RosterDetail, RosterHistoryItem, RosterResponse,
)
from roster_dashboard.core.analytics import (
    calendar_events, flight_duty_hours, integrity_warnings, roster_analytics, roster_overview,
)
from roster_dashboard.core.config import settings
from roster_dashboard.core.filters import ALL, Criteria, apply_filters, choice, contains, search
from roster_dashboard.core.notifications import NotificationCenter
from roster_dashboard.core.tracking import RequestTracker, run_blocking
from roster_dashboard.data.client import FetchError, RosterServiceClient
from roster_dashboard.utils.constants import (
    AIRPORT_OPTIONS, AircraftTypes, ERROR_MESSAGES, SUCCESS_MESSAGES,
)
from roster_dashboard.utils.helpers import (
    date_range_days, format_time, is_on_leave, parse_duration, rank_badge, split_licenses, unique_values,
)

logger = logging.getLogger(__name__)


def _log_warnings(warnings: List[str]):
    for warning in warnings:
        logger.warning(warning)


class CrewListView:
    """Crew roster list with client-side search and select filters"""

    def __init__(self, client: RosterServiceClient, notifications: NotificationCenter):
        self.client = client
        self.notifications = notifications
        self.tracker = RequestTracker("crew-list")
        self.members: List[CrewMember] = []
        self.loading = False
        self.error: Optional[str] = None
        self.clear_filters()

    def clear_filters(self):
        self.search_term = ""
        self.base = "all"
        self.rank = "all"
        self.aircraft = "all"

    def set_filters(
        self,
        search_term: Optional[str] = None,
        base: Optional[str] = None,
        rank: Optional[str] = None,
        aircraft: Optional[str] = None,
    ):
        if search_term is not None:
            self.search_term = search_term
        if base is not None:
            self.base = base
        if rank is not None:
            self.rank = rank
        if aircraft is not None:
            self.aircraft = aircraft

    def criteria(self) -> Criteria:
        return {
            ("Name", "Crew_ID"): search(self.search_term),
            "Base": choice(self.base),
            "Rank": choice(self.rank),
            "Aircraft_Type_License": contains(self.aircraft),
        }

    @property
    def filtered(self) -> List[CrewMember]:
        return apply_filters(self.members, self.criteria())

    def options(self) -> Dict[str, List[str]]:
        aircraft = sorted({
            aircraft_type
            for member in self.members
            for aircraft_type in split_licenses(member.Aircraft_Type_License)
        })
        return {
            "bases": unique_values(self.members, "Base"),
            "ranks": unique_values(self.members, "Rank"),
            "aircraft": aircraft,
        }

    async def refresh(self) -> bool:
        token = self.tracker.issue()
        self.loading = True
        try:
            crew = await run_blocking(self.client.list_crew, settings.crew_lookup_limit, 0)
        except FetchError as e:
            logger.error(f"Error fetching crew members: {e}")
            if self.tracker.is_current(token):
                self.members = []
                self.error = str(e)
                self.loading = False
                self.notifications.error(ERROR_MESSAGES["CREW_FETCH_ERROR"])
            return False

        if not self.tracker.is_current(token):
            return False
        self.members = crew.crew_members
        self.error = None
        self.loading = False
        logger.info(f"Loaded {len(self.members)} crew members")
        return True

    def snapshot(self) -> Dict[str, Any]:
        filtered = self.filtered
        return {
            "loading": self.loading,
            "error": self.error,
            "filters": {
                "search": self.search_term,
                "base": self.base,
                "rank": self.rank,
                "aircraft": self.aircraft,
            },
            "options": self.options(),
            "showing": len(filtered),
            "total": len(self.members),
            "crew_members": [
                {
                    **member.model_dump(),
                    "on_leave": is_on_leave(member),
                    "licenses": split_licenses(member.Aircraft_Type_License),
                    "rank_badge": rank_badge(member.Rank),
                }
                for member in filtered
            ],
        }


@dataclass(frozen=True)
class FlightQuery:
    """Server-side parameters of one flights page"""
    page: int = 1
    origin: str = "all"
    destination: str = "all"
    aircraft_type: str = "all"
    date: str = ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * settings.flights_page_size


class FlightsView:
    """
    Paginated flight schedule. Origin, destination, aircraft and date
    filter on the server; the search box filters the loaded page.
    """

    def __init__(self, client: RosterServiceClient, notifications: NotificationCenter):
        self.client = client
        self.notifications = notifications
        self.tracker = RequestTracker("flights")
        self.query = FlightQuery()
        self.flights: List[Flight] = []
        self.total = 0
        self.search_term = ""
        self.loading = False
        self.error: Optional[str] = None

    def _server_param(self, value: str) -> Optional[str]:
        return None if choice(value) is ALL else value

    async def update(self, **changes) -> bool:
        """
        Change query parameters and fetch the matching page.
        A filter change without an explicit page goes back to page 1.
        """
        if "page" not in changes and changes:
            changes["page"] = 1
        return await self.load(replace(self.query, **changes))

    async def load(self, query: Optional[FlightQuery] = None) -> bool:
        if query is not None:
            self.query = query
        query = self.query
        token = self.tracker.issue()
        self.loading = True

        try:
            result = await run_blocking(
                self.client.list_flights,
                limit=settings.flights_page_size,
                offset=query.offset,
                origin=self._server_param(query.origin),
                destination=self._server_param(query.destination),
                aircraft_type=self._server_param(query.aircraft_type),
                flight_date=query.date or None,
            )
        except FetchError as e:
            logger.error(f"Error fetching flights: {e}")
            if self.tracker.is_current(token):
                self.flights = []
                self.total = 0
                self.error = str(e)
                self.loading = False
                self.notifications.error(ERROR_MESSAGES["FLIGHTS_FETCH_ERROR"])
            return False

        if not self.tracker.is_current(token):
            return False
        self.flights = result.flights
        self.total = result.total
        self.error = None
        self.loading = False
        return True

    def set_search(self, search_term: str):
        self.search_term = search_term or ""

    @property
    def filtered(self) -> List[Flight]:
        return apply_filters(
            self.flights,
            {("Flight_Number", "Origin", "Destination"): search(self.search_term)},
        )

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / settings.flights_page_size)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "loading": self.loading,
            "error": self.error,
            "query": asdict(self.query),
            "search": self.search_term,
            "total": self.total,
            "total_pages": self.total_pages,
            "options": {
                "origins": AIRPORT_OPTIONS,
                "destinations": AIRPORT_OPTIONS,
                "aircraft": AircraftTypes.ALL_TYPES,
            },
            "flights": [
                {
                    **flight.model_dump(),
                    "departure": format_time(flight.Scheduled_Departure_UTC),
                    "arrival": format_time(flight.Scheduled_Arrival_UTC),
                    "block_minutes": int(parse_duration(flight.Duration_HH_MM).total_seconds() // 60),
                }
                for flight in self.filtered
            ],
        }


class RosterView:
    """
    Generated roster history, the roster selected from it, and the most
    recently generated roster with its analytics.
    """

    def __init__(self, client: RosterServiceClient, notifications: NotificationCenter):
        self.client = client
        self.notifications = notifications
        self.history_tracker = RequestTracker("roster-history")
        self.detail_tracker = RequestTracker("roster-details")
        self.generate_tracker = RequestTracker("generate-roster")
        self.history: List[RosterHistoryItem] = []
        self.selected: Optional[RosterDetail] = None
        self.generated: Optional[RosterResponse] = None
        self.warnings: List[str] = []
        self.loading = False
        self.details_loading = False
        self.generating = False
        self.error: Optional[str] = None
        self.details_error: Optional[str] = None

    @property
    def current_info(self) -> Optional[RosterHistoryItem]:
        if self.selected is None:
            return None
        return next((item for item in self.history if item.id == self.selected.roster_id), None)

    async def refresh_history(self, select_latest: bool = True) -> bool:
        """Reload the history list and, by default, open the latest roster"""
        token = self.history_tracker.issue()
        self.loading = True
        try:
            history = await run_blocking(self.client.get_roster_history, settings.history_limit, 0)
        except FetchError as e:
            logger.error(f"Error fetching roster history: {e}")
            if self.history_tracker.is_current(token):
                self.history = []
                self.error = str(e)
                self.loading = False
                self.notifications.error(ERROR_MESSAGES["HISTORY_FETCH_ERROR"])
            return False

        if not self.history_tracker.is_current(token):
            return False
        self.history = history.rosters
        self.error = None
        self.loading = False

        if select_latest and self.history:
            await self.select_roster(self.history[0].id)
        return True

    async def select_roster(self, roster_id: int) -> bool:
        token = self.detail_tracker.issue()
        self.details_loading = True
        try:
            detail = await run_blocking(self.client.get_roster_details, roster_id)
        except FetchError as e:
            logger.error(f"Error fetching roster details: {e}")
            if self.detail_tracker.is_current(token):
                self.selected = None
                self.details_error = str(e)
                self.details_loading = False
                self.notifications.error(ERROR_MESSAGES["ROSTER_DETAILS_ERROR"])
            return False

        if not self.detail_tracker.is_current(token):
            return False
        self.selected = detail
        self.details_loading = False
        self.details_error = None
        self.warnings = integrity_warnings(detail.roster_data)
        _log_warnings(self.warnings)
        return True

    async def generate(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        optimization_weights: Optional[Dict[str, float]] = None,
    ) -> bool:
        token = self.generate_tracker.issue()
        self.generating = True
        try:
            response = await run_blocking(
                self.client.generate_roster,
                start_date or settings.default_start_date,
                end_date or settings.default_end_date,
                optimization_weights or settings.optimization_weights,
            )
        except FetchError as e:
            logger.error(f"Error generating roster: {e}")
            if self.generate_tracker.is_current(token):
                self.generating = False
                self.notifications.error(ERROR_MESSAGES["ROSTER_GENERATION_ERROR"])
            return False

        if not self.generate_tracker.is_current(token):
            return False
        self.generated = response
        self.generating = False
        self.warnings = integrity_warnings(
            response.roster,
            response.violations,
            response.optimization_metrics.violation_count,
        )
        for warning in self.warnings:
            logger.warning(warning)
            self.notifications.warning(warning)
        self.notifications.success(SUCCESS_MESSAGES["ROSTER_GENERATED"])
        logger.info(f"Generated roster with {len(response.roster)} flights and {len(response.violations)} violations")

        await self.refresh_history(select_latest=False)
        return True

    async def delete(self, roster_id: int) -> bool:
        try:
            await run_blocking(self.client.delete_roster, roster_id)
        except FetchError as e:
            logger.error(f"Error deleting roster: {e}")
            self.notifications.error(ERROR_MESSAGES["ROSTER_DELETE_ERROR"])
            return False

        self.notifications.success(SUCCESS_MESSAGES["ROSTER_DELETED"])
        if self.selected is not None and self.selected.roster_id == roster_id:
            self.detail_tracker.invalidate()
            self.selected = None
            self.details_loading = False
            self.details_error = None
        await self.refresh_history(select_latest=self.selected is None)
        return True

    def analytics(self) -> Optional[Dict[str, Any]]:
        if self.generated is None:
            return None
        return roster_analytics(self.generated)

    def snapshot(self) -> Dict[str, Any]:
        selected = None
        if self.selected is not None:
            info = self.current_info
            selected = {
                "roster_id": self.selected.roster_id,
                "info": info.model_dump() if info else None,
                "flights": [
                    {**flight.model_dump(), "duty_hours": flight_duty_hours(flight)["hours"]}
                    for flight in self.selected.roster_data
                ],
            }

        generated = None
        if self.generated is not None:
            generated = {
                "overview": roster_overview(self.generated),
                "calendar": calendar_events(self.generated.roster),
                "roster": [flight.model_dump() for flight in self.generated.roster],
                "violations": [violation.model_dump() for violation in self.generated.violations],
            }

        return {
            "loading": self.loading,
            "details_loading": self.details_loading,
            "details_error": self.details_error,
            "generating": self.generating,
            "error": self.error,
            "history": [item.model_dump() for item in self.history],
            "selected": selected,
            "generated": generated,
            "warnings": list(self.warnings),
        }


class SystemStatusView:
    def __init__(self, client: RosterServiceClient, notifications: NotificationCenter):
        self.client = client
        self.notifications = notifications
        self.tracker = RequestTracker("system-status")
        self.status: Optional[DataStatus] = None
        self.last_updated: Optional[datetime] = None
        self.loading = False
        self.error: Optional[str] = None

    async def refresh(self) -> bool:
        token = self.tracker.issue()
        self.loading = True
        try:
            status = await run_blocking(self.client.get_data_status)
        except FetchError as e:
            # status card falls back to its empty state, no toast
            logger.error(f"Error fetching system status: {e}")
            if self.tracker.is_current(token):
                self.error = str(e)
                self.loading = False
            return False

        if not self.tracker.is_current(token):
            return False
        self.status = status
        self.last_updated = datetime.now()
        self.error = None
        self.loading = False
        return True

    def snapshot(self) -> Dict[str, Any]:
        status = self.status.model_dump() if self.status else None
        date_range = self.status.flights_date_range if self.status else None
        return {
            "loading": self.loading,
            "error": self.error,
            "status": status,
            "range_days": date_range_days(date_range.min, date_range.max) if date_range else 0,
            "last_updated": self.last_updated,
        }
