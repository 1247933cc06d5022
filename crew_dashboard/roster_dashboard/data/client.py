# roster_dashboard/data/client.py
import threading
import requests
from pydantic import BaseModel, ValidationError
from datetime import date
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
import logging

from roster_dashboard.core.config import settings
from roster_dashboard.api.models import (
    ChatQuery, ChatReply, CrewList, CrewMember, CrewPreferenceList, CrewScheduleList,
    DataStatus, FlightList, RosterDetail, RosterHistory, RosterRequest, RosterResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
DateLike = Union[date, str]


class FetchError(Exception):
    """A roster service call that did not complete or returned a non-2xx status."""

    def __init__(self, endpoint: str, message: str, status: Optional[int] = None):
        self.endpoint = endpoint
        self.status = status
        self.message = message
        super().__init__(f"{endpoint}: {message}" + (f" (HTTP {status})" if status else ""))


class PayloadError(FetchError):
    """A 2xx response whose body does not match the expected schema."""


def _as_date_param(value: Optional[DateLike]) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class RosterServiceClient:
    """HTTP accessor for the roster service.

    One method per endpoint. Every call is a single attempt: no retries,
    no caching and no dedup of concurrent identical requests.

    Calls run in worker threads, so unless a session is passed in each
    thread gets its own ``requests.Session``.
    """

    def __init__(
        self,
        base_url: str = settings.api_base_url,
        timeout: float = settings.request_timeout,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._shared_session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _request(
        self,
        endpoint: str,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body"""
        url = f"{self.base_url}{path}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        try:
            response = self.session.request(
                method,
                url,
                params=params or None,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            raise FetchError(endpoint, str(e)) from e

        if not response.ok:
            logger.error(f"{endpoint} returned HTTP {response.status_code}")
            raise FetchError(endpoint, "Unexpected response status", status=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise PayloadError(endpoint, "Response body is not valid JSON", status=response.status_code) from e

    def _parse(self, endpoint: str, model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed {endpoint} payload: {e.error_count()} validation errors")
            raise PayloadError(endpoint, f"Malformed payload: {e.errors()[0]['msg']}") from e

    # Rosters

    def generate_roster(
        self,
        start_date: DateLike,
        end_date: DateLike,
        optimization_weights: Optional[Dict[str, float]] = None,
    ) -> RosterResponse:
        request = RosterRequest(
            start_date=_as_date_param(start_date),
            end_date=_as_date_param(end_date),
            optimization_weights=optimization_weights,
        )
        data = self._request("generate-roster", "POST", "/generate-roster", payload=request.model_dump())
        return self._parse("generate-roster", RosterResponse, data)

    def get_roster_history(self, limit: int = settings.history_limit, offset: int = 0) -> RosterHistory:
        data = self._request("roster-history", "GET", "/rosters/history", params={"limit": limit, "offset": offset})
        return self._parse("roster-history", RosterHistory, data)

    def get_roster_details(self, roster_id: int) -> RosterDetail:
        data = self._request("roster-details", "GET", f"/rosters/{roster_id}")
        return self._parse("roster-details", RosterDetail, data)

    def delete_roster(self, roster_id: int) -> None:
        self._request("delete-roster", "DELETE", f"/rosters/{roster_id}")

    # Crew

    def list_crew(self, limit: int = settings.crew_lookup_limit, offset: int = 0) -> CrewList:
        data = self._request("crew", "GET", "/crew", params={"limit": limit, "offset": offset})
        return self._parse("crew", CrewList, data)

    def get_crew_member(self, crew_id: str) -> CrewMember:
        """Look a crew member up in the crew listing (the service has no per-id route)"""
        crew = self.list_crew(limit=settings.crew_lookup_limit, offset=0)
        for member in crew.crew_members:
            if member.Crew_ID == crew_id:
                return member
        raise FetchError("crew", f"Crew member {crew_id} not found", status=404)

    def get_crew_schedule(self, crew_id: str) -> CrewScheduleList:
        data = self._request("crew-schedule", "GET", f"/crew/{crew_id}/schedule")
        return self._parse("crew-schedule", CrewScheduleList, data)

    def get_crew_preferences(self, crew_id: str) -> CrewPreferenceList:
        data = self._request("crew-preferences", "GET", f"/preferences/{crew_id}")
        return self._parse("crew-preferences", CrewPreferenceList, data)

    # Flights

    def list_flights(
        self,
        limit: int = settings.flights_page_size,
        offset: int = 0,
        origin: Optional[str] = None,
        destination: Optional[str] = None,
        aircraft_type: Optional[str] = None,
        flight_date: Optional[DateLike] = None,
    ) -> FlightList:
        params = {
            "limit": limit,
            "offset": offset,
            "origin": origin or None,
            "destination": destination or None,
            "aircraft_type": aircraft_type or None,
            "date": _as_date_param(flight_date),
        }
        data = self._request("flights", "GET", "/flights", params=params)
        return self._parse("flights", FlightList, data)

    # Disruption assistant

    def disruption_chat(self, message: str, context: Optional[Dict[str, Any]] = None) -> ChatReply:
        query = ChatQuery(message=message, context=context or {})
        data = self._request("disruption-chat", "POST", "/disruption/chat", payload=query.model_dump())
        return self._parse("disruption-chat", ChatReply, data)

    # Service status

    def get_data_status(self) -> DataStatus:
        data = self._request("data-status", "GET", "/debug/data-status")
        return self._parse("data-status", DataStatus, data)

    def health_check(self) -> Any:
        data = self._request("health", "GET", "/health")
        return data or {}

    def close(self):
        """Close every HTTP session opened by this client"""
        if self._shared_session is not None:
            self._shared_session.close()
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
