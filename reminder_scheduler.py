"""Client‑side reminder scheduler.

Polls the Wellness API for reminders and raises a notification when a
reminder's ``HH:MM`` equals the current local wall‑clock minute.  Two
independent loops run on one asyncio event loop:

* **refresh** fetches the full reminder list on start (and, if
  ``refresh_interval`` is set, periodically afterwards) and replaces
  the in‑memory list wholesale;
* **tick** evaluates the in‑memory list once immediately and then every
  ``tick_interval`` seconds.

A tick never waits for a refresh: it evaluates whatever list is
currently held, which may be stale or still empty.  Two ticks that
land in the same clock minute both fire, and a minute skipped because
the process was suspended is not caught up.  Disabling a reminder
takes effect on the first tick after the change is saved and the list
refreshed.

Firing a reminder shows a desktop‑style notification when permission
was granted, and always raises the user‑facing alert as the fallback
channel.

Environment variables for :func:`main`:

``WELLNESS_BASE_URL``
    API base URL including prefix, e.g. ``http://localhost:8000/api/v1``.
    Required.
``WELLNESS_API_TOKEN``
    Bearer token for the API.
``REMINDER_TICK_SECONDS``
    Tick interval, default 60.
``REMINDER_REFRESH_SECONDS``
    Periodic refresh interval, default 300; 0 refreshes only on start.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, TextIO, Tuple

from wellness_client import WellnessAPI


logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Reminder Alert! 🔔"
MEDICINE_ICON = "💊"
TASK_ICON = "✓"

Reminder = Dict[str, Any]


def format_clock(now: datetime) -> str:
    """Return the local wall‑clock minute as ``HH:MM``."""
    return f"{now.hour:02d}:{now.minute:02d}"


def due_reminders(reminders: Iterable[Reminder], now: datetime) -> List[Reminder]:
    """Return the enabled reminders whose ``time`` equals the minute of ``now``.

    Pure function: the tick loop calls it with the in‑memory list and
    the current time.
    """
    current = format_clock(now)
    return [r for r in reminders if r.get("enabled") and r.get("time") == current]


class Notifier(Protocol):
    """Side effects used to present a due reminder.

    ``permission`` is ``"default"`` until :meth:`request_permission`
    settles it to ``"granted"`` or ``"denied"``.
    """

    permission: str

    def request_permission(self) -> str: ...

    def show_notification(self, title: str, body: str, icon: str) -> None: ...

    def alert(self, message: str) -> None: ...


class ConsoleNotifier:
    """Notifier for terminals.

    Notifications go to the log; alerts are written to ``stream``
    (stdout by default) with a terminal bell.

    Args:
        allow_notifications: Answer given to the permission request.
        stream: Where alerts are written.
    """

    def __init__(self, allow_notifications: bool = True, stream: Optional[TextIO] = None) -> None:
        self.permission = "default"
        self.allow_notifications = allow_notifications
        self.stream = stream or sys.stdout

    def request_permission(self) -> str:
        self.permission = "granted" if self.allow_notifications else "denied"
        return self.permission

    def show_notification(self, title: str, body: str, icon: str) -> None:
        logger.info("%s %s %s", icon, title, body)

    def alert(self, message: str) -> None:
        print(f"\a{message}", file=self.stream, flush=True)


def fire_notification(reminder: Reminder, notifier: Notifier) -> None:
    """Present one due reminder through ``notifier``.

    The alert is raised even when showing the notification fails.
    """
    title = str(reminder.get("title", ""))
    if notifier.permission == "granted":
        icon = MEDICINE_ICON if reminder.get("type") == "medicine" else TASK_ICON
        try:
            notifier.show_notification(NOTIFICATION_TITLE, title, icon)
        except Exception:
            logger.exception("Failed to show notification for %s", title)
    notifier.alert(f"🔔 Reminder: {title}")


class ReminderScheduler:
    """Polling scheduler firing reminders at their minute.

    Args:
        api: Client used to fetch and mutate reminders.
        notifier: Presents due reminders.
        clock: Returns the current local time; injectable for tests.
        tick_interval: Seconds between ticks.
        refresh_interval: Seconds between list refreshes; ``None`` or 0
            refreshes only on start and after mutations made through
            this scheduler.
    """

    def __init__(
        self,
        api: WellnessAPI,
        notifier: Notifier,
        *,
        clock: Callable[[], datetime] = datetime.now,
        tick_interval: float = 60.0,
        refresh_interval: Optional[float] = None,
    ) -> None:
        self.api = api
        self.notifier = notifier
        self.clock = clock
        self.tick_interval = tick_interval
        self.refresh_interval = refresh_interval
        self.reminders: List[Reminder] = []
        self._tasks: List[asyncio.Task] = []
        # One call at a time: WellnessAPI shares a single requests.Session.
        self._api_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def tick(self) -> List[Reminder]:
        """Fire every reminder due this minute and return them."""
        now = self.clock()
        due = due_reminders(self.reminders, now)
        for reminder in due:
            logger.info("Reminder due at %s: %s", format_clock(now), reminder.get("title"))
            fire_notification(reminder, self.notifier)
        return due

    async def refresh(self) -> bool:
        """Replace the in‑memory list with the server's.

        On failure the previous list is kept and ``False`` returned.
        """
        reminders, error = await self._call_api(self.api.list_reminders)
        if error:
            logger.error("Error fetching reminders: %s", error.get("message"))
            return False
        self.reminders = reminders
        logger.debug("Loaded %d reminders", len(reminders))
        return True

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------
    async def _tick_loop(self) -> None:
        while True:
            try:
                self.tick()
            except Exception:
                logger.exception("Reminder tick failed")
            await asyncio.sleep(self.tick_interval)

    async def _refresh_loop(self) -> None:
        while True:
            await self.refresh()
            if not self.refresh_interval:
                return
            await asyncio.sleep(self.refresh_interval)

    async def start(self) -> None:
        """Ask for notification permission once and start both loops."""
        if self.running:
            return
        if self.notifier.permission == "default":
            permission = self.notifier.request_permission()
            if permission == "granted":
                logger.info("Notifications enabled; you will receive reminder alerts.")
        self._tasks = [
            asyncio.create_task(self._refresh_loop(), name="reminder-refresh"),
            asyncio.create_task(self._tick_loop(), name="reminder-tick"),
        ]

    async def stop(self) -> None:
        """Cancel both loops and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def run_forever(self) -> None:
        """Start the loops and block until cancelled."""
        await self.start()
        try:
            await asyncio.gather(*self._tasks)
        finally:
            await self.stop()

    # ------------------------------------------------------------------
    # Mutations (each followed by a refresh)
    # ------------------------------------------------------------------
    async def _call_api(self, call: Callable[..., Tuple[Any, Optional[Dict[str, Any]]]], *args: Any, **kwargs: Any):
        async with self._api_lock:
            return await asyncio.to_thread(call, *args, **kwargs)

    async def _mutate(self, call: Callable[..., Tuple[Any, Optional[Dict[str, Any]]]], *args: Any, **kwargs: Any):
        result, error = await self._call_api(call, *args, **kwargs)
        if error is None:
            await self.refresh()
        return result, error

    async def add(self, title: str, time_of_day: str, reminder_type: Optional[str] = None):
        return await self._mutate(self.api.add_reminder, title, time_of_day, reminder_type)

    async def toggle(self, reminder_id: str, current_enabled: bool):
        return await self._mutate(self.api.toggle_reminder, reminder_id, current_enabled)

    async def delete(self, reminder_id: str):
        return await self._mutate(self.api.delete_reminder, reminder_id)


def main() -> None:
    """Run the scheduler until interrupted."""
    from wellness_api.app.core.logging_config import setup_logging

    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    base_url = os.getenv("WELLNESS_BASE_URL")
    if not base_url:
        raise RuntimeError("Missing WELLNESS_BASE_URL environment variable")
    api = WellnessAPI(base_url=base_url, api_token=os.getenv("WELLNESS_API_TOKEN") or None)
    scheduler = ReminderScheduler(
        api,
        ConsoleNotifier(),
        tick_interval=float(os.getenv("REMINDER_TICK_SECONDS", "60")),
        refresh_interval=float(os.getenv("REMINDER_REFRESH_SECONDS", "300")),
    )
    logger.info("Reminder scheduler polling %s", base_url)
    try:
        asyncio.run(scheduler.run_forever())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Reminder scheduler stopped")


if __name__ == "__main__":
    main()
