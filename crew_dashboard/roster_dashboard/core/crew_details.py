# roster_dashboard/core/crew_details.py
import asyncio
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from roster_dashboard.api.models import CrewMember, CrewPreference, CrewSchedule, RosterItem
from roster_dashboard.core.analytics import flight_duty_hours, flights_for_crew
from roster_dashboard.core.config import settings
from roster_dashboard.core.notifications import NotificationCenter
from roster_dashboard.core.tracking import RequestTracker, run_blocking
from roster_dashboard.data.client import FetchError, RosterServiceClient
from roster_dashboard.utils.constants import DetailSections, ERROR_MESSAGES
from roster_dashboard.utils.helpers import (
    is_on_leave, priority_severity, qualification_tone, rank_badge, split_licenses,
)

logger = logging.getLogger(__name__)


class DetailState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    PARTIAL = "partial_loaded"
    FAILED = "failed"


class CrewDetailView:
    """
    Drill-down for one crew member.

    The profile, schedule history, preferences and the crew member's
    flights in the latest roster are fetched concurrently. Only a failed
    profile fails the view; any other failed section is left empty and
    listed in ``failed_sections``.
    """

    def __init__(self, client: RosterServiceClient, notifications: Optional[NotificationCenter] = None):
        self.client = client
        self.notifications = notifications or NotificationCenter()
        self.tracker = RequestTracker("crew-details")
        self._clear()

    def _clear(self):
        self.state = DetailState.IDLE
        self.crew_id: Optional[str] = None
        self.profile: Optional[CrewMember] = None
        self.schedules: List[CrewSchedule] = []
        self.preferences: List[CrewPreference] = []
        self.assignments: List[RosterItem] = []
        self.failed_sections: List[str] = []
        self.error: Optional[str] = None

    def _latest_assignments(self, crew_id: str) -> List[RosterItem]:
        """Flights of the most recent roster that list this crew member"""
        history = self.client.get_roster_history(limit=1, offset=0)
        if not history.rosters:
            return []
        latest = self.client.get_roster_details(history.rosters[0].id)
        return flights_for_crew(latest.roster_data, crew_id)

    async def _attempt(self, section: str, call: Callable, *args) -> Tuple[Any, Optional[FetchError]]:
        try:
            return await run_blocking(call, *args), None
        except FetchError as e:
            logger.error(f"Error fetching {section} for crew detail: {e}")
            return None, e

    async def select(self, crew_id: str) -> DetailState:
        token = self.tracker.issue()
        self._clear()
        self.crew_id = crew_id
        self.state = DetailState.LOADING

        profile_result, schedule_result, preferences_result, assignments_result = await asyncio.gather(
            self._attempt(DetailSections.PROFILE, self.client.get_crew_member, crew_id),
            self._attempt(DetailSections.SCHEDULE, self.client.get_crew_schedule, crew_id),
            self._attempt(DetailSections.PREFERENCES, self.client.get_crew_preferences, crew_id),
            self._attempt(DetailSections.ASSIGNMENTS, self._latest_assignments, crew_id),
        )
        profile, profile_error = profile_result
        schedule, schedule_error = schedule_result
        preferences, preferences_error = preferences_result
        assignments, assignments_error = assignments_result

        if not self.tracker.is_current(token):
            return self.state

        if profile_error is not None:
            self.state = DetailState.FAILED
            self.error = str(profile_error)
            self.notifications.error(ERROR_MESSAGES["CREW_DETAILS_ERROR"])
            return self.state

        self.profile = profile
        self.schedules = schedule.schedules if schedule is not None else []
        self.preferences = preferences.preferences if preferences is not None else []
        self.assignments = assignments or []

        section_errors = {
            DetailSections.SCHEDULE: schedule_error,
            DetailSections.PREFERENCES: preferences_error,
            DetailSections.ASSIGNMENTS: assignments_error,
        }
        self.failed_sections = [section for section in DetailSections.OPTIONAL if section_errors[section] is not None]
        self.state = DetailState.PARTIAL if self.failed_sections else DetailState.LOADED
        logger.info(f"Crew detail for {crew_id} {self.state.value}")
        return self.state

    def close(self):
        """Dismiss the drill-down; results still in flight are dropped"""
        self.tracker.invalidate()
        self._clear()

    def snapshot(self) -> Dict[str, Any]:
        profile = None
        if self.profile is not None:
            profile = self.profile.model_dump()
            profile.update({
                "on_leave": is_on_leave(self.profile),
                "licenses": split_licenses(self.profile.Aircraft_Type_License),
                "rank_badge": rank_badge(self.profile.Rank),
                "qualification_tone": qualification_tone(self.profile.Qualification),
            })

        return {
            "state": self.state.value,
            "crew_id": self.crew_id,
            "profile": profile,
            "schedules": [
                {**item.model_dump(), "has_violations": bool(item.violation_count)}
                for item in self.schedules[:settings.schedule_display_limit]
            ],
            "preferences": [
                {**pref.model_dump(), "severity": priority_severity(pref.priority)}
                for pref in self.preferences
            ],
            "assignments": [
                {**flight.model_dump(), "duty_hours": flight_duty_hours(flight)["hours"]}
                for flight in self.assignments
            ],
            "failed_sections": list(self.failed_sections),
            "error": self.error,
        }
