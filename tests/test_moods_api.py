"""Tests for the mood log endpoints."""

from __future__ import annotations

from tests.conftest import PREFIX


def test_create_then_list_roundtrips_entry(client):
    body = {"emoji": "😊", "note": "Sunny morning", "timestamp": 1700000000000}
    resp = client.post(f"{PREFIX}/moods", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "moodId": "mood:1700000000000"}

    resp = client.get(f"{PREFIX}/moods")
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["moods"] == [body]


def test_note_is_optional(client, kv):
    resp = client.post(f"{PREFIX}/moods", json={"emoji": "😐", "timestamp": 42})
    assert resp.status_code == 200
    assert kv.get("mood:42") == {"emoji": "😐", "timestamp": 42}


def test_mood_without_note_reads_back_as_posted(client):
    body = {"emoji": "😴", "timestamp": 5}
    client.post(f"{PREFIX}/moods", json=body)
    assert client.get(f"{PREFIX}/moods").json()["moods"] == [body]


def test_moods_listed_newest_first(client):
    for ts in (3000, 1000, 2000):
        client.post(f"{PREFIX}/moods", json={"emoji": "🙂", "timestamp": ts})
    moods = client.get(f"{PREFIX}/moods").json()["moods"]
    assert [m["timestamp"] for m in moods] == [3000, 2000, 1000]


def test_same_millisecond_overwrites(client):
    client.post(f"{PREFIX}/moods", json={"emoji": "😢", "timestamp": 5})
    client.post(f"{PREFIX}/moods", json={"emoji": "😄", "timestamp": 5})
    moods = client.get(f"{PREFIX}/moods").json()["moods"]
    assert len(moods) == 1
    assert moods[0]["emoji"] == "😄"


def test_missing_emoji_is_rejected(client):
    resp = client.post(f"{PREFIX}/moods", json={"timestamp": 1})
    assert resp.status_code == 400
    data = resp.json()
    assert data["success"] is False
    assert "emoji" in data["error"]


def test_blank_emoji_is_rejected(client):
    resp = client.post(f"{PREFIX}/moods", json={"emoji": "  ", "timestamp": 1})
    assert resp.status_code == 400
    assert "emoji" in resp.json()["error"]


def test_missing_timestamp_is_rejected(client):
    resp = client.post(f"{PREFIX}/moods", json={"emoji": "🙂"})
    assert resp.status_code == 400
    assert "timestamp" in resp.json()["error"]


def test_malformed_documents_are_skipped(client, kv):
    kv.set("mood:1", {"unexpected": True})
    kv.set("mood:2", {"emoji": "🙂", "note": None, "timestamp": 2})
    moods = client.get(f"{PREFIX}/moods").json()["moods"]
    assert [m["timestamp"] for m in moods] == [2]
