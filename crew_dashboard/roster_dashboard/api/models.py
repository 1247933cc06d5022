# roster_dashboard/api/models.py
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum


# Roster service payloads

class CrewMemberAssignment(BaseModel):
    Crew_ID: str
    Crew_Rank: str


class RosterItem(BaseModel):
    Date: str
    Flight_Number: str
    Duty_Start: Optional[str] = None
    Duty_End: Optional[str] = None
    Aircraft_Type: str
    Origin: str
    Destination: str
    Duration: str
    Crew_Members: List[CrewMemberAssignment] = Field(default_factory=list)


class CrewMember(BaseModel):
    Crew_ID: str
    Name: str
    Base: str
    Rank: str
    Qualification: str
    Aircraft_Type_License: str
    Leave_Start: Optional[str] = None
    Leave_End: Optional[str] = None


class Flight(BaseModel):
    Date: str
    Flight_Number: str
    Origin: str
    Destination: str
    Scheduled_Departure_UTC: Optional[str] = None
    Scheduled_Arrival_UTC: Optional[str] = None
    Aircraft_Type: str
    Duration_HH_MM: Optional[str] = None


class Violation(BaseModel):
    type: str
    category: str
    message: str


class OptimizationMetrics(BaseModel):
    total_assignments: int
    crew_utilization: float
    violation_count: int
    fitness_score: float
    fairness_score: float
    max_duty_hours: float
    min_duty_hours: float
    avg_duty_hours: float
    std_dev_duty_hours: float


class RosterRequest(BaseModel):
    start_date: str
    end_date: str
    optimization_weights: Optional[Dict[str, float]] = None


class RosterResponse(BaseModel):
    roster: List[RosterItem]
    fitness_score: float
    violations: List[Violation]
    optimization_metrics: OptimizationMetrics


class RosterHistoryItem(BaseModel):
    id: int
    created_at: str
    # rosters saved after a crew replacement carry no summary
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    fitness_score: Optional[float] = None
    violation_count: Optional[int] = None


class RosterHistory(BaseModel):
    rosters: List[RosterHistoryItem] = Field(default_factory=list)
    total_count: int = 0


class RosterDetail(BaseModel):
    roster_id: int
    roster_data: List[RosterItem] = Field(default_factory=list)


class CrewList(BaseModel):
    crew_members: List[CrewMember] = Field(default_factory=list)
    total: int = 0


class FlightList(BaseModel):
    flights: List[Flight] = Field(default_factory=list)
    total: int = 0


class CrewSchedule(BaseModel):
    roster_id: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    violation_count: Optional[int] = None


class CrewScheduleList(BaseModel):
    crew_id: str
    schedules: List[CrewSchedule] = Field(default_factory=list)


class CrewPreference(BaseModel):
    type: str
    detail: str
    priority: str


class CrewPreferenceList(BaseModel):
    crew_id: str
    preferences: List[CrewPreference] = Field(default_factory=list)


class ChatQuery(BaseModel):
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


class ChatReply(BaseModel):
    response: str
    suggested_actions: List[str] = Field(default_factory=list)


class DateRange(BaseModel):
    min: Optional[str] = None
    max: Optional[str] = None


class DataStatus(BaseModel):
    crew_count: Optional[int] = None
    flights_count: Optional[int] = None
    flights_date_range: Optional[DateRange] = None
    database_connected: Optional[bool] = None


# Dashboard-side types

class SuggestedAction(str, Enum):
    ANALYZE_DISRUPTION = "analyze_disruption"
    VIEW_ROSTER = "view_roster"
    CHECK_COMPLIANCE = "check_compliance"


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    id: str
    role: ChatRole
    content: str
    timestamp: datetime
    suggested_actions: List[SuggestedAction] = Field(default_factory=list)


class ChatInput(BaseModel):
    # None sends the staged draft
    message: Optional[str] = None


class GenerateRosterInput(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    optimization_weights: Optional[Dict[str, float]] = None
