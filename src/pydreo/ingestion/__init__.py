"""Ingestion layer.

Adapters that receive device frames from the shared WebSocket and emit
normalized state updates.
"""

__all__: list[str] = []
