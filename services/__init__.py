"""Service-layer wiring for the interview API."""
