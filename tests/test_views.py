"""
Tests for the crew, flights, roster and status views, including stale
response handling for param-driven fetches.
"""

import asyncio
import logging

from roster_dashboard.core.notifications import NotificationCenter
from roster_dashboard.core.views import CrewListView, FlightQuery, FlightsView, RosterView, SystemStatusView
from conftest import make_roster_response


def _run(coro):
    return asyncio.run(coro)


class TestCrewListView:

    def test_refresh_then_filter_by_base_and_rank(self, service):
        view = CrewListView(service, NotificationCenter())
        _run(view.refresh())

        view.set_filters(base="DEL", rank="Captain")

        assert [member.Crew_ID for member in view.filtered] == ["C001"]
        snapshot = view.snapshot()
        assert snapshot["showing"] == 1
        assert snapshot["total"] == 3

    def test_clear_filters_restores_full_list(self, service):
        view = CrewListView(service, NotificationCenter())
        _run(view.refresh())
        view.set_filters(search_term="neha", base="BOM")
        assert view.filtered == []

        view.clear_filters()

        assert view.filtered == view.members

    def test_options_are_derived_from_members(self, service):
        view = CrewListView(service, NotificationCenter())
        _run(view.refresh())

        options = view.options()

        assert options["bases"] == ["BOM", "DEL"]
        assert options["ranks"] == ["Captain", "First Officer"]
        assert options["aircraft"] == ["A320neo", "A321neo"]

    def test_failed_refresh_is_an_error_not_empty(self, service):
        service.fail("crew")
        notifications = NotificationCenter()
        view = CrewListView(service, notifications)

        assert _run(view.refresh()) is False

        assert view.members == []
        assert view.error
        assert view.loading is False
        assert notifications.pending()[0].message == "Failed to fetch crew members"

    def test_aircraft_filter_ignores_case(self, service):
        view = CrewListView(service, NotificationCenter())
        _run(view.refresh())

        view.set_filters(aircraft="a321NEO")

        assert [member.Crew_ID for member in view.filtered] == ["C001", "C003"]

    def test_stale_refresh_does_not_overwrite_newer(self, service):
        view = CrewListView(service, NotificationCenter())
        everyone = list(service.crew)
        release = service.hold("crew", once=True)

        async def scenario():
            older = asyncio.create_task(view.refresh())
            await asyncio.sleep(0.05)
            service.crew = everyone[1:]
            newer = await view.refresh()
            service.crew = everyone
            release.set()
            return newer, await older

        newer, older = _run(scenario())

        assert newer is True
        assert older is False
        assert [member.Crew_ID for member in view.members] == ["C002", "C003"]
        assert view.loading is False



class TestFlightsView:

    def test_server_filters_and_page_offset(self, service):
        view = FlightsView(service, NotificationCenter())

        _run(view.load(FlightQuery(page=3, origin="DEL", aircraft_type="all")))

        assert service.last_flights_params == {
            "limit": 20, "offset": 40, "origin": "DEL",
            "destination": None, "aircraft_type": None, "date": None,
        }

    def test_filter_change_returns_to_first_page(self, service):
        view = FlightsView(service, NotificationCenter())
        _run(view.update(page=2))

        _run(view.update(origin="BOM"))

        assert view.query.page == 1
        assert [flight.Flight_Number for flight in view.flights] == ["6E102", "6E202"]
        assert view.total_pages == 1

    def test_search_filters_loaded_page(self, service):
        view = FlightsView(service, NotificationCenter())
        _run(view.load())

        view.set_search("maa")

        assert [flight.Flight_Number for flight in view.filtered] == ["6E303"]
        assert view.snapshot()["flights"][0]["departure"] == "06:30"

    def test_stale_response_does_not_overwrite_newer_query(self, service):
        view = FlightsView(service, NotificationCenter())
        release = service.hold("flights", "DEL")

        async def scenario():
            older = asyncio.create_task(view.update(origin="DEL"))
            await asyncio.sleep(0.05)
            newer = await view.update(origin="BOM")
            release.set()
            return newer, await older

        newer, older = _run(scenario())

        assert newer is True
        assert older is False
        assert view.query.origin == "BOM"
        assert {flight.Origin for flight in view.flights} == {"BOM"}
        assert view.loading is False

    def test_stale_failure_is_silent(self, service):
        notifications = NotificationCenter()
        view = FlightsView(service, notifications)
        release = service.hold("flights", "DEL")

        async def scenario():
            older = asyncio.create_task(view.update(origin="DEL"))
            await asyncio.sleep(0.05)
            service.fail("flights")
            await view.update(origin="BOM")
            service.failures.clear()
            release.set()
            await older

        _run(scenario())

        assert len(notifications.pending()) == 1
        assert view.error


class TestRosterView:

    def test_refresh_history_opens_latest_roster(self, service):
        view = RosterView(service, NotificationCenter())

        _run(view.refresh_history())

        assert [item.id for item in view.history] == [7, 5]
        assert view.selected.roster_id == 7
        assert view.current_info.violation_count == 3

    def test_empty_history_selects_nothing(self, service):
        service.history = []
        view = RosterView(service, NotificationCenter())

        assert _run(view.refresh_history()) is True
        assert view.selected is None
        assert view.error is None

    def test_generate_stores_roster_and_refreshes_history(self, service):
        notifications = NotificationCenter()
        view = RosterView(service, notifications)

        assert _run(view.generate("2023-10-01", "2023-10-02")) is True

        assert view.generated is service.generated
        assert service.last_generate == (
            "2023-10-01", "2023-10-02",
            {"crew_utilization": 1.0, "violation_penalty": 2.0, "fairness": 0.5},
        )
        assert ("roster-history", None) in service.calls
        assert view.warnings == []
        assert notifications.pending()[-1].level == "success"
        assert view.analytics()["violations_by_category"][0] == {"name": "Rest", "value": 2}

    def test_generated_count_mismatch_is_a_warning(self, service):
        service.generated = make_roster_response(violation_count=4)
        notifications = NotificationCenter()
        view = RosterView(service, notifications)

        assert _run(view.generate()) is True

        assert len(view.warnings) == 1
        assert [notice.level for notice in notifications.pending()] == ["warning", "success"]

    def test_generate_failure_keeps_previous_roster(self, service):
        view = RosterView(service, NotificationCenter())
        _run(view.generate())
        previous = view.generated
        service.fail("generate-roster")

        assert _run(view.generate()) is False
        assert view.generated is previous

    def test_delete_selected_roster_moves_to_next_latest(self, service):
        view = RosterView(service, NotificationCenter())
        _run(view.refresh_history())

        assert _run(view.delete(7)) is True

        assert [item.id for item in view.history] == [5]
        assert view.selected.roster_id == 5

    def test_delete_failure_keeps_history(self, service):
        service.fail("delete-roster")
        notifications = NotificationCenter()
        view = RosterView(service, notifications)
        _run(view.refresh_history())

        assert _run(view.delete(7)) is False
        assert [item.id for item in view.history] == [7, 5]
        assert notifications.pending()[-1].message == "Failed to delete roster"

    def test_no_analytics_before_generation(self, service):
        assert RosterView(service, NotificationCenter()).analytics() is None

    def test_failed_selection_clears_previous_roster(self, service):
        notifications = NotificationCenter()
        view = RosterView(service, notifications)
        _run(view.refresh_history())
        service.fail("roster-details")

        assert _run(view.select_roster(5)) is False

        snapshot = view.snapshot()
        assert snapshot["selected"] is None
        assert snapshot["details_error"]
        assert snapshot["details_loading"] is False
        assert notifications.pending()[-1].level == "error"

    def test_successful_selection_clears_details_error(self, service):
        view = RosterView(service, NotificationCenter())
        service.fail("roster-details")
        _run(view.select_roster(7))
        service.failures.clear()

        assert _run(view.select_roster(5)) is True

        assert view.details_error is None
        assert view.selected.roster_id == 5

    def test_stale_selection_does_not_overwrite_newer(self, service):
        view = RosterView(service, NotificationCenter())
        release = service.hold("roster-details", 7)

        async def scenario():
            older = asyncio.create_task(view.select_roster(7))
            await asyncio.sleep(0.05)
            newer = await view.select_roster(5)
            release.set()
            return newer, await older

        newer, older = _run(scenario())

        assert newer is True
        assert older is False
        assert view.selected.roster_id == 5
        assert view.details_loading is False

    def test_stale_history_refresh_is_discarded(self, service):
        view = RosterView(service, NotificationCenter())
        full_history = list(service.history)
        release = service.hold("roster-history", once=True)

        async def scenario():
            older = asyncio.create_task(view.refresh_history(select_latest=False))
            await asyncio.sleep(0.05)
            service.history = full_history[1:]
            newer = await view.refresh_history(select_latest=False)
            service.history = full_history
            release.set()
            return newer, await older

        newer, older = _run(scenario())

        assert newer is True
        assert older is False
        assert [item.id for item in view.history] == [5]

    def test_anomalous_roster_is_logged_once_per_fetch(self, service, caplog):
        service.rosters[7][2].Duty_End = "2023-10-01T13:00:00"
        view = RosterView(service, NotificationCenter())

        with caplog.at_level(logging.WARNING):
            _run(view.refresh_history())
            view.snapshot()
            view.snapshot()

        anomalies = [record for record in caplog.records if "Anomalous duty window" in record.getMessage()]
        assert len(anomalies) == 1
        assert view.warnings == [
            "Anomalous duty window for 6E303 on 2023-10-01: 2023-10-01T14:00:00 -> 2023-10-01T13:00:00"
        ]



class TestSystemStatusView:

    def test_refresh_reports_range_days(self, service):
        view = SystemStatusView(service, NotificationCenter())

        _run(view.refresh())

        snapshot = view.snapshot()
        assert snapshot["status"]["crew_count"] == 3
        assert snapshot["range_days"] == 7
        assert snapshot["last_updated"] is not None

    def test_failure_leaves_empty_state(self, service):
        service.fail("data-status")
        view = SystemStatusView(service, NotificationCenter())

        assert _run(view.refresh()) is False
        assert view.snapshot()["status"] is None
