"""Fan-out of messages to the clients of one channel."""

from __future__ import annotations

from .interfaces import Client


class ChannelBroadcaster:
    """Holds the clients of one channel and sends each message to all of them."""

    def __init__(self) -> None:
        # A dict keeps insertion order and serves as an ordered set.
        self._clients: dict[Client, None] = {}

    def register(self, client: Client) -> None:
        """Add ``client``; adding it twice has no further effect."""
        self._clients[client] = None

    def unregister(self, client: Client) -> None:
        """Remove ``client`` and close it."""
        self._clients.pop(client, None)
        client.close()

    def broadcast(self, message: bytes) -> None:
        """Send ``message`` to every registered client."""
        for client in list(self._clients):
            client.send(message)

    def close_all_clients(self) -> None:
        """Close and remove every client."""
        clients = list(self._clients)
        self._clients.clear()
        for client in clients:
            client.close()

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client: object) -> bool:
        return client in self._clients