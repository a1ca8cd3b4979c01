"""
Shared utilities for the oauthtoy token server and client.

This package aggregates common building blocks consumed by both services:

- config: Server and client configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- responses: JSON reply and error envelope helpers
- base_service: FastAPI application scaffolding

Do not import from service_* packages into shared/.
"""
