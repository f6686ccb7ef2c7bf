"""Durable snapshot storage.

One JSON file holds the latest :class:`CacheSnapshot`. Storage is
best-effort: a missing or malformed file reads as "no cache", and a
failed write is logged without affecting the in-memory snapshot.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from fuelr.exceptions import FuelFinderPersistenceError
from fuelr.models.snapshot import CacheSnapshot

_logger = logging.getLogger(__name__)


class SnapshotStore:
    """Reads and writes the snapshot file at *path*."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def read(self) -> CacheSnapshot:
        """Load the snapshot synchronously.

        Raises
        ------
        FuelFinderPersistenceError
            The file is missing, unreadable or not a valid snapshot.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FuelFinderPersistenceError(f"Cannot read {self.path}: {exc}") from exc

        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise FuelFinderPersistenceError(f"{self.path} is not valid JSON") from exc
        if not isinstance(document, dict) or not isinstance(document.get("stations"), list):
            raise FuelFinderPersistenceError(f"{self.path} has no station list")

        try:
            return CacheSnapshot.model_validate(document)
        except ValidationError as exc:
            raise FuelFinderPersistenceError(f"{self.path} is not a valid snapshot: {exc}") from exc

    def write(self, snapshot: CacheSnapshot) -> None:
        """Persist *snapshot* synchronously, replacing the file atomically.

        Raises
        ------
        FuelFinderPersistenceError
            The directory or file could not be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(snapshot.to_json())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise FuelFinderPersistenceError(f"Cannot write {self.path}: {exc}") from exc

    async def load(self) -> CacheSnapshot | None:
        """Load the snapshot in a worker thread; ``None`` when unavailable."""
        try:
            snapshot = await asyncio.to_thread(self.read)
        except FuelFinderPersistenceError as exc:
            _logger.debug("No usable cache snapshot: %s", exc)
            return None
        _logger.info("Loaded %d stations from %s", len(snapshot.stations), self.path)
        return snapshot

    async def save(self, snapshot: CacheSnapshot) -> bool:
        """Persist *snapshot* in a worker thread. Returns ``False`` on failure."""
        try:
            await asyncio.to_thread(self.write, snapshot)
        except FuelFinderPersistenceError:
            _logger.warning("Failed to persist cache snapshot", exc_info=True)
            return False
        _logger.debug("Persisted %d stations to %s", len(snapshot.stations), self.path)
        return True
