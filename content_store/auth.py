"""
Content Store - Admin API authorization

Two separate pieces:

- *who* is calling: an HMAC-signed bearer token (``<json>|<signature>``)
  carrying the principal name, signed with ``SECRET_KEY``.
- *may* they write: a capability check ``(principal) -> bool`` injected into
  the API at construction time.  The store itself never checks permissions.

Usage:
    - Issue a token with ``create_token("alice", config.secret_key)``.
    - Send it as ``Authorization: Bearer <token>``.
    - Pass ``capability=allow_principals({"alice"})`` (or any callable) to
      ``create_app``; the default is built from ``ADMIN_PRINCIPALS``.
"""

import hashlib
import hmac
import json
import time
from typing import Any, Callable, Iterable, Optional

from fastapi import Request

Capability = Callable[[Optional[str]], bool]

# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def _sign(payload: str, secret_key: str) -> str:
    """Create an HMAC-SHA256 signature for a payload string."""
    return hmac.new(
        secret_key.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def create_token(principal: str, secret_key: str) -> str:
    """Create a signed bearer token for *principal*."""
    data = json.dumps({"sub": principal, "ts": int(time.time())})
    return f"{data}|{_sign(data, secret_key)}"


def parse_token(token: str, secret_key: str, max_age: int) -> dict[str, Any] | None:
    """Parse and verify a bearer token.  Returns the claims dict or None."""
    if not token or "|" not in token:
        return None

    data_part, sig_part = token.rsplit("|", 1)
    if not hmac.compare_digest(sig_part, _sign(data_part, secret_key)):
        return None

    try:
        claims = json.loads(data_part)
    except json.JSONDecodeError:
        return None
    if not isinstance(claims, dict) or not claims.get("sub"):
        return None

    # Check expiry
    if time.time() - claims.get("ts", 0) > max_age:
        return None

    return claims


def get_principal(request: Request) -> str | None:
    """Return the principal from the request's bearer token, if valid."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None

    config = request.app.state.config
    claims = parse_token(token.strip(), config.secret_key, config.token_max_age)
    return claims["sub"] if claims else None


# ---------------------------------------------------------------------------
# Capability checks
# ---------------------------------------------------------------------------


def allow_all(principal: Optional[str]) -> bool:
    """Capability that lets every caller write (local development)."""
    return True


def allow_principals(principals: Iterable[str]) -> Capability:
    """
    Capability allowing the listed principals.

    An empty list allows any authenticated principal.
    """
    allowed = frozenset(principals)

    def check(principal: Optional[str]) -> bool:
        if principal is None:
            return False
        if not allowed:
            return True
        return principal in allowed

    return check
