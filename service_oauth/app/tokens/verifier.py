"""
Bearer token verification against the shared secret.
"""

import time
from typing import Callable, Optional

import jwt
from pydantic import BaseModel

from shared.errors import (
    ExpiredTokenError,
    MalformedTokenError,
    SignatureMismatchError,
    TokenValidationFailure,
)
from shared.logging import get_logger
from .claims import ClaimSet


class TokenVerificationResult(BaseModel):
    """Outcome of verifying one token."""
    valid: bool
    claims: Optional[ClaimSet] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class TokenVerifier:
    """Checks structure, signature and expiry of compact tokens.

    Expiry is evaluated against ``clock`` rather than PyJWT's own clock so the
    current time can be injected.
    """

    def __init__(self, secret: bytes, algorithm: str = "HS256", clock: Callable[[], float] = time.time):
        self._secret = secret
        self.algorithm = algorithm
        self._clock = clock
        self.logger = get_logger("oauth.verifier")

    def decode(self, token: str) -> ClaimSet:
        """Verify *token* and return its claims.

        Raises:
            MalformedTokenError: not a three-part token or claims of the wrong type.
            SignatureMismatchError: signature or declared algorithm does not match.
            ExpiredTokenError: ``exp`` is present and not in the future.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError, jwt.InvalidKeyError) as e:
            raise SignatureMismatchError(str(e)) from e
        except jwt.PyJWTError as e:
            raise MalformedTokenError(str(e)) from e

        claims = ClaimSet.from_payload(payload)

        now = self._clock()
        if claims.is_expired(now):
            raise ExpiredTokenError(
                "Token has expired",
                details={"expires_at": claims.expires_at, "now": int(now)},
            )

        return claims

    def verify(self, token: str) -> TokenVerificationResult:
        """Verify a token without raising for validation failures."""
        try:
            claims = self.decode(token)
        except TokenValidationFailure as e:
            self.logger.warning("Token verification failed", error_code=e.code, error=e.message)
            return TokenVerificationResult(valid=False, error=e.message, error_code=e.code)

        return TokenVerificationResult(valid=True, claims=claims)
