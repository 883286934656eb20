"""
sessionguard.auth.credentials

Transport encoding of session credentials.

Responsibilities:
- Turn `(session_id, session_key)` into an `Authorization` header value.
- Parse such a header back, rejecting anything that is not `Basic <base64(id:key)>`.
"""

from __future__ import annotations

import base64
import binascii

SCHEME = "Basic"


class MalformedCredential(Exception):
    pass


def encode_credentials(session_id: str, session_key: str) -> str:
    raw = f"{session_id}:{session_key}".encode()
    return f"{SCHEME} {base64.b64encode(raw).decode('ascii')}"


def decode_credentials(header: str | None) -> tuple[str, str]:
    if not header:
        raise MalformedCredential("missing authorization header")

    # Scheme token is case-sensitive; no other schemes are accepted.
    prefix = f"{SCHEME} "
    if not header.startswith(prefix):
        raise MalformedCredential("unsupported authorization scheme")

    try:
        decoded = base64.b64decode(header[len(prefix) :], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedCredential("credentials are not valid base64") from e

    session_id, sep, session_key = decoded.partition(":")
    if not sep:
        raise MalformedCredential("credentials lack a separator")
    return session_id, session_key
