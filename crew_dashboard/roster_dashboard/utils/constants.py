# roster_dashboard/utils/constants.py
from enum import Enum


# Crew Bases
class CrewBases(Enum):
    DELHI = "DEL"
    MUMBAI = "BOM"
    BANGALORE = "BLR"
    CHENNAI = "MAA"
    KOLKATA = "CCU"
    HYDERABAD = "HYD"
    GOA = "GOI"


# Aircraft Types offered by the flights filter
class AircraftTypes:
    A320NEO = "A320neo"
    A321NEO = "A321neo"
    ATR = "ATR"
    ALL_TYPES = [A320NEO, A321NEO, ATR]


AIRPORT_OPTIONS = [base.value for base in CrewBases]


# Priority Levels
class PriorityLevels(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# Display severity per preference priority (lower-cased lookup)
PRIORITY_SEVERITY = {
    PriorityLevels.HIGH.value.lower(): "critical",
    PriorityLevels.MEDIUM.value.lower(): "warning",
    PriorityLevels.LOW.value.lower(): "ok",
}

# Display tone per qualification tier (lower-cased lookup)
QUALIFICATION_TONE = {
    "line checked": "success",
    "base check": "info",
    "senior": "accent",
    "junior": "caution",
}

# Rank badge groups (lower-cased lookup)
RANK_BADGES = {
    "captain": "primary",
    "first officer": "cockpit",
    "senior first officer": "cockpit-senior",
    "instructor/check pilot": "instructor",
    "purser": "cabin-lead",
    "sccm (lead cabin crew)": "cabin-lead",
    "senior cabin crew": "cabin-senior",
    "junior cabin crew": "cabin",
    "trainee cabin crew": "trainee",
    "fa": "cabin",
}

DEFAULT_BADGE = "neutral"


# Detail drill-down sections
class DetailSections:
    PROFILE = "profile"
    SCHEDULE = "schedule"
    PREFERENCES = "preferences"
    ASSIGNMENTS = "assignments"
    OPTIONAL = [SCHEDULE, PREFERENCES, ASSIGNMENTS]


# Chat
CHAT_SEED_GREETING = (
    "Hello! I'm your IndiGo Disruption Management Assistant. I can help you handle "
    "crew disruptions, find replacements, and ensure DGCA compliance. "
    "How can I assist you today?"
)

CHAT_FALLBACK_REPLY = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again later."
)

# Error Messages
ERROR_MESSAGES = {
    "CREW_FETCH_ERROR": "Failed to fetch crew members",
    "CREW_DETAILS_ERROR": "Failed to fetch crew details",
    "FLIGHTS_FETCH_ERROR": "Failed to fetch flights",
    "HISTORY_FETCH_ERROR": "Failed to fetch roster history",
    "ROSTER_DETAILS_ERROR": "Failed to fetch roster details",
    "ROSTER_GENERATION_ERROR": "Failed to generate roster",
    "ROSTER_DELETE_ERROR": "Failed to delete roster",
    "STATUS_FETCH_ERROR": "Failed to fetch system status",
    "CHAT_ERROR": "Failed to send message",
    "NO_ROSTER": "Generate a roster to see analytics",
}

# Success Messages
SUCCESS_MESSAGES = {
    "ROSTER_GENERATED": "Roster generated successfully!",
    "ROSTER_DELETED": "Roster deleted successfully",
}
