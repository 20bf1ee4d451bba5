# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""Security primitives for the HTTP transport.

- Constant-time token comparison
- Production-safe error messages
- Unguessable session identifiers
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def secure_compare(candidate: str | bytes | None, reference: str | bytes | None) -> bool:
    """Compare two secrets in constant time.

    When the lengths differ, both sides are hashed to fixed-size digests and
    compared anyway so the rejection takes the same path as a mismatch.
    Never raises: missing or empty values compare unequal.
    """
    if not candidate or not reference:
        return False

    a = _to_bytes(candidate)
    b = _to_bytes(reference)

    if len(a) != len(b):
        hmac.compare_digest(hashlib.sha256(a).digest(), hashlib.sha256(b).digest())
        return False

    return hmac.compare_digest(a, b)


def sanitize_error_message(error: BaseException | str, production: bool) -> str:
    """Return a message that is safe to show to a client.

    Outside production the full message is returned. In production the
    message is mapped onto a small fixed vocabulary.
    """
    message = error if isinstance(error, str) else str(error)
    if not production:
        return message

    if "API error" in message:
        return "External API request failed"
    if "Validation" in message:
        return "Invalid input provided"
    if "Unauthorized" in message or "401" in message:
        return "Authentication failed"
    lowered = message.lower()
    if "fetch" in lowered or "network" in lowered:
        return "Network connection error"
    return GENERIC_ERROR_MESSAGE


def generate_session_id() -> str:
    """Generate a session id of the form ``sess_<epoch-ms>_<random>``."""
    return f"sess_{int(time.time() * 1000)}_{secrets.token_urlsafe(16)}"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None
