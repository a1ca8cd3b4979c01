"""
Token signing with the shared secret.
"""

import jwt

from shared.errors import SerializationError, SigningError
from shared.logging import get_logger
from .claims import ClaimSet


class TokenSigner:
    """Serializes claim sets into compact signed JWTs."""

    def __init__(self, secret: bytes, algorithm: str = "HS256"):
        self._secret = secret
        self.algorithm = algorithm
        self.logger = get_logger("oauth.signer")

    def sign(self, claims: ClaimSet) -> str:
        """Return the compact token for *claims*.

        Raises:
            SigningError: the key was rejected (an empty secret included).
            SerializationError: the claims could not be JSON encoded.
        """
        if not self._secret:
            raise SigningError("Refusing to sign with an empty secret")

        try:
            return jwt.encode(
                claims.to_payload(),
                self._secret,
                algorithm=self.algorithm,
                headers={"typ": "JWT"},
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Token claims could not be encoded: {e}",
                details={"client_id": claims.client_id},
            ) from e
        except (jwt.PyJWTError, NotImplementedError) as e:
            self.logger.error("Token signing failed", algorithm=self.algorithm, error=str(e))
            raise SigningError(
                f"Token signing failed: {e}",
                details={"algorithm": self.algorithm},
            ) from e
