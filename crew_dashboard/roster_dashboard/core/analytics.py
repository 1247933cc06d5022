# roster_dashboard/core/analytics.py
import pandas as pd
from typing import Any, Dict, List, Optional, Sequence

from roster_dashboard.api.models import OptimizationMetrics, RosterItem, RosterResponse, Violation
from roster_dashboard.core.config import settings
from roster_dashboard.utils.helpers import calculate_duty_hours, parse_datetime_from_string


def violations_by_category(violations: Sequence[Violation]) -> Dict[str, int]:
    """
    Histogram of violations per category.
    Every violation is counted exactly once; categories keep first-seen order.
    """
    categories: Dict[str, int] = {}
    for violation in violations:
        categories[violation.category] = categories.get(violation.category, 0) + 1
    return categories


def flight_duty_hours(flight: RosterItem) -> Dict[str, Any]:
    """
    Duty window length of one flight assignment.

    Windows that cannot be parsed or that end before they start are
    flagged as anomalous and reported as 0.0 hours. Rendering stays quiet;
    the anomaly is reported once through ``integrity_warnings``.
    """
    hours = calculate_duty_hours(flight.Duty_Start, flight.Duty_End)
    anomalous = hours is None or hours < 0
    return {
        "flight": flight.Flight_Number,
        "hours": 0.0 if anomalous else hours,
        "route": f"{flight.Origin}-{flight.Destination}",
        "anomalous": anomalous,
    }


def duty_hours_by_flight(roster: Sequence[RosterItem], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Per-flight duty hours, truncated to the first ``limit`` flights for the chart"""
    if limit is None:
        limit = settings.duty_chart_limit
    return [flight_duty_hours(flight) for flight in roster[:limit]]


def duty_hour_stats(metrics: OptimizationMetrics) -> Dict[str, float]:
    # Server-computed, displayed as-is
    return {
        "fairness_score": metrics.fairness_score,
        "max_duty_hours": metrics.max_duty_hours,
        "min_duty_hours": metrics.min_duty_hours,
        "avg_duty_hours": metrics.avg_duty_hours,
        "std_dev_duty_hours": metrics.std_dev_duty_hours,
    }


def roster_overview(response: RosterResponse) -> Dict[str, Any]:
    return {
        "fitness_score": round(response.fitness_score),
        "crew_utilization": response.optimization_metrics.crew_utilization,
        "violation_count": len(response.violations),
        "total_assignments": response.optimization_metrics.total_assignments,
    }


def calendar_events(roster: Sequence[RosterItem]) -> List[Dict[str, Any]]:
    """One calendar event per flight assignment, spanning its duty window"""
    events = []
    for index, flight in enumerate(roster):
        events.append({
            "id": index,
            "title": f"{flight.Flight_Number} | {flight.Origin} → {flight.Destination}",
            "start": parse_datetime_from_string(flight.Duty_Start),
            "end": parse_datetime_from_string(flight.Duty_End),
            "aircraft_type": flight.Aircraft_Type,
            "crew": [f"{crew.Crew_Rank}: {crew.Crew_ID}" for crew in flight.Crew_Members],
        })
    return events


def flights_for_crew(roster: Sequence[RosterItem], crew_id: str) -> List[RosterItem]:
    return [
        flight for flight in roster
        if any(crew.Crew_ID == crew_id for crew in flight.Crew_Members)
    ]


def crew_workload(roster: Sequence[RosterItem]) -> List[Dict[str, Any]]:
    """
    Flights flown and total duty hours per crew member, busiest first.
    Anomalous duty windows contribute 0 hours.
    """
    rows = []
    for flight in roster:
        hours = flight_duty_hours(flight)["hours"]
        for crew in flight.Crew_Members:
            rows.append({
                "Crew_ID": crew.Crew_ID,
                "Crew_Rank": crew.Crew_Rank,
                "Flight_Number": flight.Flight_Number,
                "hours": hours,
            })

    if not rows:
        return []

    df = pd.DataFrame(rows)
    summary = (
        df.groupby("Crew_ID", sort=False)
        .agg(rank=("Crew_Rank", "first"), flights=("Flight_Number", "count"), duty_hours=("hours", "sum"))
        .reset_index()
        .sort_values(["duty_hours", "Crew_ID"], ascending=[False, True], kind="stable")
    )

    return [
        {
            "crew_id": row.Crew_ID,
            "rank": row.rank,
            "flights": int(row.flights),
            "duty_hours": round(float(row.duty_hours), 2),
        }
        for row in summary.itertuples(index=False)
    ]


def integrity_warnings(
    roster: Sequence[RosterItem],
    violations: Optional[Sequence[Violation]] = None,
    expected_violation_count: Optional[int] = None,
) -> List[str]:
    """
    Data-integrity issues in a roster payload. Returned, never raised or
    logged here; the views log them once when the roster is fetched.
    """
    warnings = []

    if violations is not None and expected_violation_count is not None:
        if expected_violation_count != len(violations):
            warnings.append(
                f"Violation count mismatch: summary reports {expected_violation_count}, "
                f"detail lists {len(violations)}"
            )

    for flight in roster:
        if not flight.Crew_Members:
            warnings.append(f"Flight {flight.Flight_Number} on {flight.Date} has no crew assigned")
        if flight_duty_hours(flight)["anomalous"]:
            warnings.append(
                f"Anomalous duty window for {flight.Flight_Number} on {flight.Date}: "
                f"{flight.Duty_Start} -> {flight.Duty_End}"
            )

    return warnings


def roster_analytics(response: RosterResponse, chart_limit: Optional[int] = None) -> Dict[str, Any]:
    """Everything the analytics tab shows for one generated roster"""
    histogram = violations_by_category(response.violations)
    return {
        "overview": roster_overview(response),
        "violations_by_category": [{"name": name, "value": value} for name, value in histogram.items()],
        "duty_hours": duty_hours_by_flight(response.roster, chart_limit),
        "duty_hour_stats": duty_hour_stats(response.optimization_metrics),
        "crew_workload": crew_workload(response.roster),
        "integrity_warnings": integrity_warnings(
            response.roster,
            response.violations,
            response.optimization_metrics.violation_count,
        ),
    }
