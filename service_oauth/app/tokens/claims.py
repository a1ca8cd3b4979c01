"""
Claim sets carried by oauthtoy tokens.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from shared.errors import MalformedTokenError


@dataclass(frozen=True)
class ClaimSet:
    """Typed claims of one token.

    ``expires_at`` is ``None`` for tokens that never expire (refresh tokens).
    On the wire the fields are ``iat``, ``exp`` and ``client_id``.
    """

    client_id: str
    issued_at: int
    expires_at: Optional[int] = None

    @property
    def expires(self) -> bool:
        return self.expires_at is not None

    def is_expired(self, now: float) -> bool:
        return self.expires and self.expires_at <= now

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"iat": self.issued_at}
        if self.expires:
            payload["exp"] = self.expires_at
        payload["client_id"] = self.client_id
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ClaimSet":
        """Build a claim set from a decoded token payload."""
        client_id = payload.get("client_id")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")

        if not isinstance(client_id, str):
            raise MalformedTokenError("Token claim client_id missing or not a string")
        if not _is_int(issued_at):
            raise MalformedTokenError("Token claim iat missing or not an integer")
        if expires_at is not None and not _is_int(expires_at):
            raise MalformedTokenError("Token claim exp is not an integer")

        return cls(client_id=client_id, issued_at=issued_at, expires_at=expires_at)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def build_claims(client_id: str, ttl: int = 0, now: Optional[float] = None) -> ClaimSet:
    """Build the claims for a token issued to *client_id*.

    A positive *ttl* (seconds) sets ``expires_at``; zero means the token never
    expires.
    """
    issued_at = int(time.time() if now is None else now)
    expires_at = issued_at + ttl if ttl > 0 else None
    return ClaimSet(client_id=client_id, issued_at=issued_at, expires_at=expires_at)
