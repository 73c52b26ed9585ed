"""Unified entry point for the Wellness API and the reminder scheduler.

Starts the API with Uvicorn and, when ``RUN_SCHEDULER`` is truthy, a
reminder scheduler polling that same API in the same event loop.  The
scheduler reads its settings from the ``WELLNESS_*`` and
``REMINDER_*`` variables described in :mod:`reminder_scheduler`;
``WELLNESS_BASE_URL`` defaults to the local server and
``WELLNESS_API_TOKEN`` to ``API_TOKEN``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from reminder_scheduler import ConsoleNotifier, ReminderScheduler
from wellness_api.app.core.config import settings
from wellness_client import WellnessAPI


async def run_api(host: str, port: int) -> None:
    """Serve the API until the server exits."""
    config = Config(app="wellness_api.app.main:app", host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


async def run_scheduler(host: str, port: int) -> None:
    """Poll the local API for reminders and fire them."""
    base_url = os.getenv("WELLNESS_BASE_URL", f"http://127.0.0.1:{port}{settings.api_prefix}")
    api = WellnessAPI(base_url=base_url, api_token=os.getenv("WELLNESS_API_TOKEN", settings.api_token))
    scheduler = ReminderScheduler(
        api,
        ConsoleNotifier(),
        tick_interval=float(os.getenv("REMINDER_TICK_SECONDS", "60")),
        refresh_interval=float(os.getenv("REMINDER_REFRESH_SECONDS", "300")),
    )
    # Give the server a moment to bind before the first refresh.
    await asyncio.sleep(1)
    await scheduler.run_forever()


async def main() -> None:
    """Run the API and, optionally, the scheduler concurrently."""
    logging.basicConfig(level=logging.INFO)
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    tasks = [asyncio.create_task(run_api(host, port))]
    if os.getenv("RUN_SCHEDULER", "false").lower() in {"1", "true", "yes"}:
        tasks.append(asyncio.create_task(run_scheduler(host, port)))
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in done:
        if not task.cancelled() and (exception := task.exception()):
            logging.exception("Exception in service", exc_info=exception)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
