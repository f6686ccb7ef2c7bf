"""Ingestion layer.

Helpers that turn loosely typed Fuel Finder payloads into normalized
values (coordinates, fuel kinds, prices).
"""

__all__: list[str] = []
