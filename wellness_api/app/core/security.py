"""
Request authentication and URL signing helpers.

All API routes are gated by one static bearer token configured via
``API_TOKEN``.  ``require_token`` is a FastAPI dependency that checks
the ``Authorization`` header against it using a constant‑time
comparison.

The local blob backend hands out time‑limited read URLs.  They carry
an ``expires`` UNIX timestamp and an HMAC‑SHA256 ``signature`` over
``"<path>:<expires>"`` encoded as base64url without padding.
``sign_blob_path`` and ``verify_blob_signature`` implement both
halves.
"""

import base64
import hashlib
import hmac
import time
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def sign_blob_path(path: str, expires: int, secret: str) -> str:
    """Return the signature authorising reads of ``path`` until ``expires``."""
    return _b64_url_encode(_sign(f"{path}:{expires}".encode("utf-8"), secret))


def verify_blob_signature(
    path: str,
    expires: int,
    signature: str,
    secret: str,
    now: Optional[float] = None,
) -> bool:
    """Check a signed blob URL.

    Returns ``False`` when the URL has expired or the signature does
    not match; the comparison is constant‑time.
    """
    current = time.time() if now is None else now
    if expires < int(current):
        return False
    expected = sign_blob_path(path, expires, secret)
    return hmac.compare_digest(expected, signature)


security = HTTPBearer(auto_error=False)


def require_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> None:
    """Dependency rejecting requests without the configured bearer token.

    The expected token is read from ``request.app.state.settings`` so
    that applications built with custom settings (e.g. in tests) are
    honoured.  Raises HTTP 401 when the header is missing or wrong.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    expected = request.app.state.settings.api_token
    if not hmac.compare_digest(credentials.credentials.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
