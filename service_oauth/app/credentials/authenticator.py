"""
Client credential validation for the token endpoint.
"""

from dataclasses import dataclass
from typing import Optional

CLIENT_CREDENTIALS_GRANT = "client_credentials"


@dataclass(frozen=True)
class ClientCredentialRecord:
    """The single client allowed to request tokens."""
    client_id: str
    client_secret: str
    grant_type: str = CLIENT_CREDENTIALS_GRANT


class CredentialAuthenticator:
    """Checks a grant type and client id/secret against the static record.

    Comparison is exact string equality with no normalization.
    """

    def __init__(self, record: ClientCredentialRecord):
        self.record = record

    def authenticate(self, grant_type: str, client_id: str, client_secret: str) -> bool:
        return self.rejection_reason(grant_type, client_id, client_secret) is None

    def rejection_reason(self, grant_type: str, client_id: str, client_secret: str) -> Optional[str]:
        """Short label for why a request was rejected, or None if authorized."""
        if grant_type != self.record.grant_type:
            return "wrong grant type"
        if client_id != self.record.client_id or client_secret != self.record.client_secret:
            return "bad credentials"
        return None
