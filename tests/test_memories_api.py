"""Tests for the photo journal endpoints."""

from __future__ import annotations

import base64
from urllib.parse import quote

from wellness_api.app.core.blob_store import InMemoryBlobStore
from wellness_api.app.core.errors import StorageError
from wellness_api.app.services.memory_service import decode_data_url

from tests.conftest import PREFIX

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-payload"
DATA_URL = "data:image/png;base64," + base64.b64encode(JPEG_BYTES).decode("ascii")
# Length not divisible by three, so the encoding ends in "==".
PADDED_BYTES = JPEG_BYTES + b"\x00"


class FlakyBlobStore(InMemoryBlobStore):
    """In-memory store whose operations can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail_upload = False
        self.fail_remove = False
        self.unsignable = set()

    def upload(self, path, data, content_type):
        if self.fail_upload:
            raise StorageError("bucket unavailable")
        super().upload(path, data, content_type)

    def create_signed_url(self, path, ttl_seconds):
        if path in self.unsignable:
            raise StorageError("signing service down")
        return super().create_signed_url(path, ttl_seconds)

    def remove(self, path):
        if self.fail_remove:
            raise StorageError("bucket unavailable")
        super().remove(path)


def test_caption_only_memory(client, kv):
    resp = client.post(f"{PREFIX}/memories", json={"caption": "Sunset walk", "timestamp": 1000})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "memoryId": "memory:1000"}
    assert kv.get("memory:1000") == {"caption": "Sunset walk", "photoPath": None, "timestamp": 1000}

    memories = client.get(f"{PREFIX}/memories").json()["memories"]
    assert memories == [{"caption": "Sunset walk", "photoPath": None, "timestamp": 1000}]
    assert "photoUrl" not in memories[0]


def test_photo_memory_uploads_decoded_bytes(client, kv, blobs):
    resp = client.post(f"{PREFIX}/memories", json={"photoBase64": DATA_URL, "timestamp": 2000})
    assert resp.status_code == 200
    stored = kv.get("memory:2000")
    path = stored["photoPath"]
    assert path.endswith(".jpg")
    stem = path[: -len(".jpg")]
    millis, suffix = stem.split("-")
    assert millis.isdigit()
    assert len(suffix) == 7
    assert blobs.objects[path] == (JPEG_BYTES, "image/jpeg")
    assert "photoUrl" not in stored


def test_photo_only_memory_has_no_caption_field(client, kv):
    client.post(f"{PREFIX}/memories", json={"photoBase64": DATA_URL, "timestamp": 2500})
    stored = kv.get("memory:2500")
    assert set(stored) == {"photoPath", "timestamp"}
    listed = client.get(f"{PREFIX}/memories").json()["memories"][0]
    assert "caption" not in listed
    assert listed["photoPath"] == stored["photoPath"]


def test_list_signs_fresh_urls_each_time(client):
    client.post(f"{PREFIX}/memories", json={"caption": "Beach", "photoBase64": DATA_URL, "timestamp": 3000})
    first = client.get(f"{PREFIX}/memories").json()["memories"][0]
    second = client.get(f"{PREFIX}/memories").json()["memories"][0]
    assert first["photoUrl"]
    assert first["photoPath"] == second["photoPath"]
    assert first["photoUrl"] != second["photoUrl"]


def test_timestamp_defaults_to_server_time(client):
    resp = client.post(f"{PREFIX}/memories", json={"caption": "No clock"})
    assert resp.status_code == 200
    memory_id = resp.json()["memoryId"]
    assert memory_id.startswith("memory:")
    assert int(memory_id.split(":", 1)[1]) > 1_600_000_000_000


def test_requires_caption_or_photo(client, kv):
    resp = client.post(f"{PREFIX}/memories", json={"caption": "", "timestamp": 1})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Caption or photo is required"}
    assert kv.scan_by_prefix("memory:") == []


def test_invalid_base64_is_rejected(client, kv):
    resp = client.post(
        f"{PREFIX}/memories",
        json={"photoBase64": "data:image/jpeg;base64,@@not base64@@", "timestamp": 1},
    )
    assert resp.status_code == 400
    assert "photoBase64" in resp.json()["error"]
    assert kv.scan_by_prefix("memory:") == []


def test_decode_accepts_unpadded_and_wrapped_payloads():
    encoded = base64.b64encode(PADDED_BYTES).decode("ascii")
    assert encoded.endswith("=")
    unpadded = encoded.rstrip("=")
    wrapped = "\n".join(encoded[i:i + 8] for i in range(0, len(encoded), 8))
    assert decode_data_url("data:image/jpeg;base64," + unpadded) == PADDED_BYTES
    assert decode_data_url("data:image/jpeg;base64, " + wrapped + "\r\n") == PADDED_BYTES
    assert decode_data_url(unpadded) == PADDED_BYTES


def test_unpadded_photo_is_stored(client, kv, blobs):
    payload = base64.b64encode(PADDED_BYTES).decode("ascii").rstrip("=")
    resp = client.post(
        f"{PREFIX}/memories",
        json={"photoBase64": "data:image/jpeg;base64," + payload, "timestamp": 6},
    )
    assert resp.status_code == 200
    assert blobs.objects[kv.get("memory:6")["photoPath"]][0] == PADDED_BYTES


def test_memories_listed_newest_first(client):
    for ts in (10, 30, 20):
        client.post(f"{PREFIX}/memories", json={"caption": f"m{ts}", "timestamp": ts})
    memories = client.get(f"{PREFIX}/memories").json()["memories"]
    assert [m["timestamp"] for m in memories] == [30, 20, 10]


def test_delete_removes_record_and_blob(client, kv, blobs):
    client.post(f"{PREFIX}/memories", json={"caption": "Park", "photoBase64": DATA_URL, "timestamp": 4000})
    path = kv.get("memory:4000")["photoPath"]

    resp = client.delete(f"{PREFIX}/memories/{quote('memory:4000')}")
    assert resp.json() == {"success": True}

    assert client.get(f"{PREFIX}/memories").json()["memories"] == []
    assert path not in blobs.objects
    try:
        blobs.create_signed_url(path, 60)
    except StorageError:
        pass
    else:
        raise AssertionError("deleted photo still resolves to a signed URL")


def test_delete_is_idempotent(client):
    path = f"{PREFIX}/memories/{quote('memory:999')}"
    assert client.delete(path).json() == {"success": True}
    assert client.delete(path).json() == {"success": True}


def test_delete_accepts_bare_id(client, kv):
    client.post(f"{PREFIX}/memories", json={"caption": "Bare", "timestamp": 77})
    assert client.delete(f"{PREFIX}/memories/77").status_code == 200
    assert kv.get("memory:77") is None


# ---------------------------------------------------------------------------
# Blob failures
# ---------------------------------------------------------------------------

def _flaky_client(test_settings, kv):
    from fastapi.testclient import TestClient

    from wellness_api.app.main import create_app
    from tests.conftest import API_TOKEN

    blobs = FlakyBlobStore()
    app = create_app(test_settings, kv=kv, blobs=blobs)
    return TestClient(app, headers={"Authorization": f"Bearer {API_TOKEN}"}), blobs


def test_upload_failure_persists_nothing(test_settings, kv):
    client, blobs = _flaky_client(test_settings, kv)
    blobs.fail_upload = True
    resp = client.post(f"{PREFIX}/memories", json={"caption": "x", "photoBase64": DATA_URL, "timestamp": 5})
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to upload photo"}
    assert kv.get("memory:5") is None


def test_unsignable_photo_is_listed_without_url(test_settings, kv):
    client, blobs = _flaky_client(test_settings, kv)
    client.post(f"{PREFIX}/memories", json={"caption": "a", "photoBase64": DATA_URL, "timestamp": 1})
    client.post(f"{PREFIX}/memories", json={"caption": "b", "photoBase64": DATA_URL, "timestamp": 2})
    broken = kv.get("memory:1")["photoPath"]
    blobs.unsignable.add(broken)

    memories = client.get(f"{PREFIX}/memories").json()["memories"]
    by_ts = {m["timestamp"]: m for m in memories}
    assert "photoUrl" not in by_ts[1]
    assert by_ts[1]["photoPath"] == broken
    assert by_ts[2]["photoUrl"]


def test_blob_removal_failure_still_deletes_record(test_settings, kv):
    client, blobs = _flaky_client(test_settings, kv)
    client.post(f"{PREFIX}/memories", json={"caption": "a", "photoBase64": DATA_URL, "timestamp": 9})
    path = kv.get("memory:9")["photoPath"]
    blobs.fail_remove = True

    resp = client.delete(f"{PREFIX}/memories/{quote('memory:9')}")
    assert resp.status_code == 200
    assert kv.get("memory:9") is None
    assert path in blobs.objects
