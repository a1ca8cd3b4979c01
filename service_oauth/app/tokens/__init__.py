"""
Token package.

Builds claim sets, signs them into compact JWTs with the shared secret,
and verifies presented tokens (signature, structure, expiry) without any
server-side lookup.
"""

from .claims import ClaimSet, build_claims
from .signer import TokenSigner
from .verifier import TokenVerificationResult, TokenVerifier

__all__ = [
    "ClaimSet",
    "build_claims",
    "TokenSigner",
    "TokenVerificationResult",
    "TokenVerifier",
]
