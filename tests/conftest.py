"""
Shared fakes for the dashboard tests.

FakeRosterService stands in for RosterServiceClient with in-memory data.
Endpoints can be made to fail (``fail``) or to block until released
(``hold``) so tests can control the order in which fetches resolve.
"""

import json
import threading

import pytest

from roster_dashboard.api.models import (
    ChatReply, CrewList, CrewMember, CrewPreference, CrewPreferenceList, CrewSchedule,
    CrewScheduleList, DataStatus, Flight, FlightList, RosterDetail, RosterHistory,
    RosterHistoryItem, RosterItem, RosterResponse,
)
from roster_dashboard.data.client import FetchError


# ── Sample data ──────────────────────────────────────────────────────────

def make_crew():
    return [
        CrewMember(Crew_ID="C001", Name="Asha Rao", Base="DEL", Rank="Captain",
                   Qualification="Line Checked", Aircraft_Type_License="A320neo, A321neo"),
        CrewMember(Crew_ID="C002", Name="Vikram Shah", Base="BOM", Rank="Captain",
                   Qualification="Base Check", Aircraft_Type_License="A320neo"),
        CrewMember(Crew_ID="C003", Name="Neha Iyer", Base="DEL", Rank="First Officer",
                   Qualification="Senior", Aircraft_Type_License="A321neo",
                   Leave_Start="2023-10-05"),
    ]


def make_roster_item(flight_number, origin, destination, duty_start, duty_end, crew):
    return RosterItem(
        Date=duty_start[:10],
        Flight_Number=flight_number,
        Duty_Start=duty_start,
        Duty_End=duty_end,
        Aircraft_Type="A320neo",
        Origin=origin,
        Destination=destination,
        Duration="2:10",
        Crew_Members=[{"Crew_ID": crew_id, "Crew_Rank": rank} for crew_id, rank in crew],
    )


def make_roster():
    return [
        make_roster_item("6E101", "DEL", "BOM", "2023-10-01T06:00:00", "2023-10-01T09:30:00",
                         [("C001", "Captain"), ("C003", "First Officer")]),
        make_roster_item("6E202", "BOM", "BLR", "2023-10-01T10:00:00", "2023-10-01T13:15:00",
                         [("C002", "Captain")]),
        make_roster_item("6E303", "DEL", "MAA", "2023-10-01T14:00:00", "2023-10-01T18:00:00",
                         [("C001", "Captain")]),
    ]


def make_flights():
    rows = [
        ("6E101", "DEL", "BOM", "A320neo"),
        ("6E102", "BOM", "DEL", "A320neo"),
        ("6E202", "BOM", "BLR", "A321neo"),
        ("6E303", "DEL", "MAA", "A321neo"),
    ]
    return [
        Flight(Date="2023-10-01", Flight_Number=number, Origin=origin, Destination=destination,
               Scheduled_Departure_UTC="06:30:00", Scheduled_Arrival_UTC="08:40:00",
               Aircraft_Type=aircraft, Duration_HH_MM="2:10")
        for number, origin, destination, aircraft in rows
    ]


def make_roster_response(violations=None, violation_count=None):
    violations = violations if violations is not None else [
        {"type": "Standard", "category": "Rest", "message": "C001 rest below 12h"},
        {"type": "Standard", "category": "Rest", "message": "C003 rest below 12h"},
        {"type": "RAG", "category": "DutyTime", "message": "C001 FDP exceeded"},
    ]
    return RosterResponse(
        roster=make_roster(),
        fitness_score=812.6,
        violations=violations,
        optimization_metrics={
            "total_assignments": 4,
            "crew_utilization": 100.0,
            "violation_count": len(violations) if violation_count is None else violation_count,
            "fitness_score": 812.6,
            "fairness_score": 71.5,
            "max_duty_hours": 7.5,
            "min_duty_hours": 3.25,
            "avg_duty_hours": 4.92,
            "std_dev_duty_hours": 1.8,
        },
    )


# ── Fake roster service ──────────────────────────────────────────────────

class FakeRosterService:
    def __init__(self):
        self.crew = make_crew()
        self.flights = make_flights()
        self.history = [
            RosterHistoryItem(id=7, created_at="2023-10-02 09:00:00", start_date="2023-10-01",
                              end_date="2023-10-01", fitness_score=812.6, violation_count=3),
            RosterHistoryItem(id=5, created_at="2023-10-01 09:00:00", start_date="2023-09-30",
                              end_date="2023-09-30", fitness_score=640.0, violation_count=5),
        ]
        self.rosters = {7: make_roster(), 5: make_roster()[:1]}
        self.schedules = {
            "C001": [CrewSchedule(roster_id=7, start_date="2023-10-01", end_date="2023-10-01", violation_count=2)],
        }
        self.preferences = {
            "C001": [CrewPreference(type="Day_Off", detail="2023-10-07", priority="High")],
        }
        self.generated = make_roster_response()
        self.health = {"status": "healthy"}
        self.chat_reply = ChatReply(
            response="Assign standby crew from DEL.",
            suggested_actions=["analyze_disruption", "page_the_ceo"],
        )
        self.calls = []
        self.failures = set()
        self._holds = {}
        self._lock = threading.Lock()

    # control

    def fail(self, endpoint):
        self.failures.add(endpoint)

    def hold(self, endpoint, key=None, once=False):
        """
        Block calls to an endpoint (optionally for one key) until the
        returned event is set. With ``once`` only the next call blocks.
        """
        event = threading.Event()
        self._holds[(endpoint, key)] = (event, once)
        return event

    def _enter(self, endpoint, key=None):
        with self._lock:
            self.calls.append((endpoint, key))
            hold_key = (endpoint, key) if (endpoint, key) in self._holds else (endpoint, None)
            held = self._holds.get(hold_key)
            if held is not None and held[1]:
                del self._holds[hold_key]
        if held is not None:
            held[0].wait(timeout=5)
        if endpoint in self.failures:
            raise FetchError(endpoint, "Unexpected response status", status=500)

    # endpoints

    def list_crew(self, limit=100, offset=0):
        self._enter("crew")
        page = self.crew[offset:offset + limit]
        return CrewList(crew_members=page, total=len(page))

    def get_crew_member(self, crew_id):
        self._enter("crew-member", crew_id)
        for member in self.crew:
            if member.Crew_ID == crew_id:
                return member
        raise FetchError("crew", f"Crew member {crew_id} not found", status=404)

    def get_crew_schedule(self, crew_id):
        self._enter("crew-schedule", crew_id)
        return CrewScheduleList(crew_id=crew_id, schedules=self.schedules.get(crew_id, []))

    def get_crew_preferences(self, crew_id):
        self._enter("crew-preferences", crew_id)
        return CrewPreferenceList(crew_id=crew_id, preferences=self.preferences.get(crew_id, []))

    def get_roster_history(self, limit=20, offset=0):
        self._enter("roster-history")
        return RosterHistory(rosters=self.history[offset:offset + limit], total_count=len(self.history))

    def get_roster_details(self, roster_id):
        self._enter("roster-details", roster_id)
        if roster_id not in self.rosters:
            raise FetchError("roster-details", "Unexpected response status", status=404)
        return RosterDetail(roster_id=roster_id, roster_data=self.rosters[roster_id])

    def delete_roster(self, roster_id):
        self._enter("delete-roster", roster_id)
        self.history = [item for item in self.history if item.id != roster_id]
        self.rosters.pop(roster_id, None)

    def generate_roster(self, start_date, end_date, optimization_weights=None):
        self._enter("generate-roster")
        self.last_generate = (start_date, end_date, optimization_weights)
        return self.generated

    def list_flights(self, limit=20, offset=0, origin=None, destination=None, aircraft_type=None, flight_date=None):
        self._enter("flights", origin)
        self.last_flights_params = {
            "limit": limit, "offset": offset, "origin": origin,
            "destination": destination, "aircraft_type": aircraft_type, "date": flight_date,
        }
        matching = [
            flight for flight in self.flights
            if (origin is None or flight.Origin == origin)
            and (destination is None or flight.Destination == destination)
            and (aircraft_type is None or flight.Aircraft_Type == aircraft_type)
            and (flight_date is None or flight.Date == flight_date)
        ]
        return FlightList(flights=matching[offset:offset + limit], total=len(matching))

    def disruption_chat(self, message, context=None):
        self._enter("disruption-chat")
        self.last_chat = (message, context)
        return self.chat_reply

    def get_data_status(self):
        self._enter("data-status")
        return DataStatus(crew_count=3, flights_count=4,
                          flights_date_range={"min": "2023-10-01", "max": "2023-10-07"})

    def health_check(self):
        self._enter("health")
        return self.health

    def close(self):
        self.closed = True


@pytest.fixture
def service():
    return FakeRosterService()


# ── Fake HTTP session for the resource client ────────────────────────────

class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        if text is not None:
            self.content = text.encode()
        elif payload is not None:
            self.content = json.dumps(payload).encode()
        else:
            self.content = b""

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.content)


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.requests = []
        self.closed = False

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def close(self):
        self.closed = True
