"""Tests for the reminder endpoints."""

from __future__ import annotations

from urllib.parse import quote

import pytest

from tests.conftest import PREFIX


def _create(client, **body):
    resp = client.post(f"{PREFIX}/reminders", json=body)
    assert resp.status_code == 200, resp.json()
    return resp.json()["reminderId"]


def test_create_medicine_reminder_and_list(client):
    resp = client.post(
        f"{PREFIX}/reminders",
        json={"title": "Take pill", "time": "09:00", "type": "medicine"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["reminderId"].startswith("reminder:")

    reminders = client.get(f"{PREFIX}/reminders").json()["reminders"]
    assert len(reminders) == 1
    reminder = reminders[0]
    assert reminder["title"] == "Take pill"
    assert reminder["time"] == "09:00"
    assert reminder["type"] == "medicine"
    assert reminder["enabled"] is True
    assert data["reminderId"] == f"reminder:{reminder['createdAt']}"


def test_defaults_type_task_and_enabled(client, kv):
    reminder_id = _create(client, title="Water plants", time="18:30", type=None, enabled=None)
    stored = kv.get(reminder_id)
    assert stored["type"] == "task"
    assert stored["enabled"] is True


def test_explicitly_disabled_on_create(client, kv):
    reminder_id = _create(client, title="Walk", time="07:15", enabled=False)
    assert kv.get(reminder_id)["enabled"] is False


@pytest.mark.parametrize(
    "body, field",
    [
        ({"time": "09:00"}, "title"),
        ({"title": "", "time": "09:00"}, "title"),
        ({"title": "Take pill"}, "time"),
        ({"title": "Take pill", "time": "9am"}, "time"),
        ({"title": "Take pill", "time": "24:00"}, "time"),
        ({"title": "Take pill", "time": "09:00", "type": "chore"}, "type"),
    ],
)
def test_invalid_create_bodies(client, body, field):
    resp = client.post(f"{PREFIX}/reminders", json=body)
    assert resp.status_code == 400
    data = resp.json()
    assert data["success"] is False
    assert field in data["error"]


def test_partial_update_preserves_other_fields(client, kv):
    reminder_id = _create(client, title="Take pill", time="09:00", type="medicine")
    before = kv.get(reminder_id)

    resp = client.put(f"{PREFIX}/reminders/{quote(reminder_id)}", json={"enabled": False})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    after = kv.get(reminder_id)
    assert after["enabled"] is False
    for field in ("title", "time", "type", "createdAt"):
        assert after[field] == before[field]


def test_update_accepts_bare_id(client, kv):
    reminder_id = _create(client, title="Take pill", time="09:00")
    bare = reminder_id.split(":", 1)[1]
    resp = client.put(f"{PREFIX}/reminders/{bare}", json={"time": "10:30"})
    assert resp.status_code == 200
    assert kv.get(reminder_id)["time"] == "10:30"


def test_update_ignores_nulls_unknown_fields_and_created_at(client, kv):
    reminder_id = _create(client, title="Take pill", time="09:00")
    before = kv.get(reminder_id)
    resp = client.put(
        f"{PREFIX}/reminders/{quote(reminder_id)}",
        json={"title": None, "createdAt": 1, "colour": "blue"},
    )
    assert resp.status_code == 200
    assert kv.get(reminder_id) == before


def test_update_validates_supplied_fields(client):
    reminder_id = _create(client, title="Take pill", time="09:00")
    resp = client.put(f"{PREFIX}/reminders/{quote(reminder_id)}", json={"time": "25:00"})
    assert resp.status_code == 400
    assert "time" in resp.json()["error"]


def test_update_unknown_reminder_is_not_found(client):
    resp = client.put(f"{PREFIX}/reminders/{quote('reminder:123')}", json={"enabled": False})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Reminder not found"}


def test_delete_is_idempotent(client):
    reminder_id = _create(client, title="Take pill", time="09:00")
    path = f"{PREFIX}/reminders/{quote(reminder_id)}"
    assert client.delete(path).json() == {"success": True}
    assert client.delete(path).json() == {"success": True}
    assert client.get(f"{PREFIX}/reminders").json()["reminders"] == []


def test_reminders_sorted_by_time_of_day(client):
    _create(client, title="Evening", time="20:00")
    _create(client, title="Morning", time="08:00")
    _create(client, title="Noon", time="12:00")
    titles = [r["title"] for r in client.get(f"{PREFIX}/reminders").json()["reminders"]]
    assert titles == ["Morning", "Noon", "Evening"]
