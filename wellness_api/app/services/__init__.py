"""
Service layer.

Each service is a thin CRUD façade over the key/value store (and, for
memories, the blob store) that owns one key prefix and the validation
rules of its resource.  Services receive their stores through the
constructor; the API layer builds them from ``app.state``.
"""


def record_key(prefix: str, record_id: str) -> str:
    """Return the store key for ``record_id``.

    Accepts either the full key (``"reminder:17000"``) or the bare
    discriminator (``"17000"``).
    """
    return record_id if record_id.startswith(prefix) else f"{prefix}{record_id}"
