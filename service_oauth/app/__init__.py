"""
Token server package for oauthtoy.

This package exposes the FastAPI application that issues and verifies
client-credentials bearer tokens:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.tokens: Claim construction, signing and verification.
- app.credentials: The static client credential record and its check.
- app.handlers: Token issuance and the protected echo endpoint.

Design notes:
- Tokens are stateless HS256 JWTs; nothing is stored server side.
- The shared secret and credential record are built once from
  ServerConfig and handed to the handlers; there is no module-level state.
"""
