"""Daily guest quotas — goal creations and report downloads per guest id.

The tracker is owned by the application (app.state) and injected into
handlers. Counts are kept per guest and reset on the first use of a new
calendar day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from goalplan.exceptions import QuotaExceededError
from goalplan.planner.models import QuotaStatus

logger = logging.getLogger(__name__)

GOALS = "goals"
REPORTS = "reports"


@dataclass(slots=True)
class _GuestWindow:
    day: date
    goals: int = 0
    reports: int = 0


class GuestQuotaTracker:
    def __init__(self, goal_limit: int, report_limit: int) -> None:
        self._limits = {GOALS: goal_limit, REPORTS: report_limit}
        self._windows: dict[str, _GuestWindow] = {}
        self._day: date | None = None

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, today: date) -> None:
        # Windows from earlier days are expired; drop them once per new day.
        if today == self._day:
            return
        self._windows = {gid: w for gid, w in self._windows.items() if w.day == today}
        self._day = today

    def _window(self, guest_id: str, today: date) -> _GuestWindow:
        self._sweep(today)
        window = self._windows.get(guest_id)
        if window is None or window.day != today:
            window = _GuestWindow(day=today)
            self._windows[guest_id] = window
        return window

    def consume(self, guest_id: str, kind: str, today: date) -> int:
        """Count one use of `kind` for the guest; raise once the daily limit is reached.

        Compare and increment happen with no await in between, so concurrent
        requests on the event loop cannot both take the last slot.
        """
        limit = self._limits[kind]
        window = self._window(guest_id, today)
        used = getattr(window, kind)
        if used >= limit:
            logger.info("Guest %s hit daily %s limit (%d)", guest_id, kind, limit)
            raise QuotaExceededError(kind, limit)
        setattr(window, kind, used + 1)
        return limit - used - 1

    def status(self, guest_id: str, today: date) -> QuotaStatus:
        window = self._windows.get(guest_id)
        if window is None or window.day != today:
            window = _GuestWindow(day=today)
        return QuotaStatus(
            is_guest=True,
            goals_created=window.goals,
            goals_limit=self._limits[GOALS],
            reports_downloaded=window.reports,
            reports_limit=self._limits[REPORTS],
            resets_on=today + timedelta(days=1),
        )
