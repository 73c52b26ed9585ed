"""Wellness API client.

A small synchronous wrapper around the Wellness API's HTTP surface,
built on ``requests``.  It is used by the reminder scheduler and can
back any other client (a CLI, a bot, a notebook).

Every method returns a tuple ``(result, error)``.  On success
``error`` is ``None``; on failure ``result`` is empty (``None`` or an
empty list) and ``error`` is a dictionary with ``status_code`` and
``message`` keys.  Transport and HTTP errors are never raised.

High‑level operations:

* :meth:`health` – liveness check.
* :meth:`list_moods` / :meth:`add_mood` – the mood log.
* :meth:`list_reminders` / :meth:`add_reminder` / :meth:`update_reminder`
  / :meth:`toggle_reminder` / :meth:`delete_reminder` – reminders.
* :meth:`list_memories` / :meth:`add_memory` / :meth:`delete_memory` –
  the photo journal.

Listed records get an ``id`` derived from the key convention
(``reminder:<createdAt>``, ``memory:<timestamp>``, ``mood:<timestamp>``)
so they can be passed back to the update and delete calls.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests


logger = logging.getLogger(__name__)

# Photos above this size are rejected before upload; the server does
# not re‑check.
MAX_PHOTO_BYTES = 5 * 1024 * 1024

Error = Dict[str, Any]


def _now_ms() -> int:
    return int(time.time() * 1000)


def to_data_url(data: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw bytes as a ``data:<mime>;base64,...`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class WellnessAPI:
    """Client for the Wellness API.

    Args:
        base_url: URL of the API including its prefix, e.g.
            ``http://localhost:8000/api/v1``.
        api_token: Static bearer token sent as ``Authorization: Bearer``.
        session: Optional ``requests.Session``; one is created if omitted.
        timeout: Per‑request timeout in seconds.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, json_body: Any | None = None
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Perform an HTTP request and unwrap the response envelope.

        Returns:
            ``(payload, None)`` when the server answered with
            ``success: true``; otherwise ``(None, error)``.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = None
        if not isinstance(data, dict):
            message = response.text or f"Unexpected response from {url}"
            logger.error("API request failed (%s): %s", response.status_code, message)
            return None, {"status_code": response.status_code, "message": message}

        if response.status_code >= 400 or data.get("success") is False:
            message = data.get("error") or data.get("detail") or getattr(response, "reason", None) or "Request failed"
            logger.error("API request failed (%s): %s", response.status_code, message)
            return None, {"status_code": response.status_code, "message": str(message)}
        return data, None

    def _list(self, path: str, key: str, id_prefix: str, id_field: str) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", path)
        if error:
            return [], error
        items = data.get(key) if data else None
        if not isinstance(items, list):
            return [], None
        for item in items:
            if isinstance(item, dict) and "id" not in item and item.get(id_field) is not None:
                item["id"] = f"{id_prefix}{item[id_field]}"
        return items, None

    @staticmethod
    def _path_id(record_id: str) -> str:
        return quote(str(record_id), safe="")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def health(self) -> Tuple[bool, Optional[Error]]:
        data, error = self._request("GET", "/health")
        if error:
            return False, error
        return bool(data and data.get("status") == "ok"), None

    # ------------------------------------------------------------------
    # Moods
    # ------------------------------------------------------------------
    def list_moods(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Return mood entries, newest first."""
        moods, error = self._list("/moods", "moods", "mood:", "timestamp")
        moods.sort(key=lambda m: m.get("timestamp") or 0, reverse=True)
        return moods, error

    def add_mood(
        self, emoji: str, note: Optional[str] = None, timestamp: Optional[int] = None
    ) -> Tuple[Optional[str], Optional[Error]]:
        body = {"emoji": emoji, "note": note, "timestamp": timestamp or _now_ms()}
        data, error = self._request("POST", "/moods", json_body=body)
        if error:
            return None, error
        return data.get("moodId"), None

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    def list_reminders(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        return self._list("/reminders", "reminders", "reminder:", "createdAt")

    def add_reminder(
        self,
        title: str,
        time_of_day: str,
        reminder_type: Optional[str] = None,
        enabled: bool = True,
    ) -> Tuple[Optional[str], Optional[Error]]:
        """Create a reminder firing daily at ``time_of_day`` (``HH:MM``)."""
        body: Dict[str, Any] = {"title": title, "time": time_of_day, "enabled": enabled}
        if reminder_type:
            body["type"] = reminder_type
        data, error = self._request("POST", "/reminders", json_body=body)
        if error:
            return None, error
        return data.get("reminderId"), None

    def update_reminder(self, reminder_id: str, **fields: Any) -> Tuple[bool, Optional[Error]]:
        """Merge ``fields`` into the stored reminder."""
        _, error = self._request("PUT", f"/reminders/{self._path_id(reminder_id)}", json_body=fields)
        return error is None, error

    def toggle_reminder(self, reminder_id: str, current_enabled: bool) -> Tuple[bool, Optional[Error]]:
        return self.update_reminder(reminder_id, enabled=not current_enabled)

    def delete_reminder(self, reminder_id: str) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/reminders/{self._path_id(reminder_id)}")
        return error is None, error

    # ------------------------------------------------------------------
    # Memories
    # ------------------------------------------------------------------
    def list_memories(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Return memories, newest first.  ``photoUrl`` values expire."""
        memories, error = self._list("/memories", "memories", "memory:", "timestamp")
        memories.sort(key=lambda m: m.get("timestamp") or 0, reverse=True)
        return memories, error

    def add_memory(
        self,
        caption: Optional[str] = None,
        photo: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
        timestamp: Optional[int] = None,
    ) -> Tuple[Optional[str], Optional[Error]]:
        """Create a memory from a caption and/or raw photo bytes.

        Photos larger than :data:`MAX_PHOTO_BYTES` are rejected locally
        without contacting the server.
        """
        if not caption and not photo:
            return None, {"status_code": None, "message": "Please add a caption or photo"}
        if photo is not None and len(photo) > MAX_PHOTO_BYTES:
            return None, {
                "status_code": None,
                "message": "Image too large. Please choose an image under 5MB.",
            }
        body: Dict[str, Any] = {"timestamp": timestamp or _now_ms()}
        if caption:
            body["caption"] = caption
        if photo:
            body["photoBase64"] = to_data_url(photo, mime_type)
        data, error = self._request("POST", "/memories", json_body=body)
        if error:
            return None, error
        return data.get("memoryId"), None

    def delete_memory(self, memory_id: str) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/memories/{self._path_id(memory_id)}")
        return error is None, error
