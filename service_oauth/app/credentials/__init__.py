"""
Client credential checks for the token endpoint.
"""

from .authenticator import ClientCredentialRecord, CredentialAuthenticator

__all__ = ["ClientCredentialRecord", "CredentialAuthenticator"]
