"""WebSocket chat server that also relays messages published on Redis Pub/Sub channels."""

__version__ = "0.1.0"