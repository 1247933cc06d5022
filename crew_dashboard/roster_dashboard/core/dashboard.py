# roster_dashboard/core/dashboard.py
import asyncio
from typing import Optional
import logging

from roster_dashboard.core.chat import DisruptionChat
from roster_dashboard.core.crew_details import CrewDetailView
from roster_dashboard.core.notifications import NotificationCenter
from roster_dashboard.core.views import CrewListView, FlightsView, RosterView, SystemStatusView
from roster_dashboard.data.client import RosterServiceClient

logger = logging.getLogger(__name__)


class Dashboard:
    """
    One operator console session: a view object per tab, sharing the
    roster service client and the notification center. Views never touch
    each other's state.
    """

    def __init__(self, client: Optional[RosterServiceClient] = None):
        self.client = client or RosterServiceClient()
        self.notifications = NotificationCenter()
        self.crew = CrewListView(self.client, self.notifications)
        self.crew_details = CrewDetailView(self.client, self.notifications)
        self.flights = FlightsView(self.client, self.notifications)
        self.rosters = RosterView(self.client, self.notifications)
        self.status = SystemStatusView(self.client, self.notifications)
        self.chat = DisruptionChat(self.client, self.notifications)

    async def load_initial(self):
        """Initial fetch for every tab; each view degrades on its own"""
        await asyncio.gather(
            self.crew.refresh(),
            self.flights.load(),
            self.rosters.refresh_history(),
            self.status.refresh(),
        )
        logger.info("Dashboard views loaded")

    def close(self):
        self.client.close()
        logger.info("Dashboard session closed")
