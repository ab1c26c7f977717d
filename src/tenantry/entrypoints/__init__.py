"""Entry points: the HTTP API."""
