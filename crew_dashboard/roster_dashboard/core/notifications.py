# roster_dashboard/core/notifications.py
from collections import deque
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Deque, Dict, List


@dataclass
class Notice:
    level: str
    message: str
    created_at: datetime = field(default_factory=datetime.now)


class NotificationCenter:
    """Transient user-facing notices, drained by whoever renders them"""

    def __init__(self, max_pending: int = 50):
        self._pending: Deque[Notice] = deque(maxlen=max_pending)

    def success(self, message: str):
        self._pending.append(Notice("success", message))

    def error(self, message: str):
        self._pending.append(Notice("error", message))

    def warning(self, message: str):
        self._pending.append(Notice("warning", message))

    def pending(self) -> List[Notice]:
        return list(self._pending)

    def drain(self) -> List[Dict]:
        notices = [asdict(notice) for notice in self._pending]
        self._pending.clear()
        return notices
