"""
Polling client package for oauthtoy.

- app.transport: Replaying transport that logs token endpoint responses.
- app.auth: httpx auth performing the client credentials grant with caching.
- app.poller: Fixed-interval loop against the protected echo endpoint.
- app.main: Entrypoint wiring configuration, client and poller.
"""
