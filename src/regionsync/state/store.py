"""Per-aircraft state persistence.

Records are keyed ``region:{registration}``. The reconciliation engine is
the only writer during a tick; the admin surface reads and deletes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from regionsync._constants import registration_from_key, state_key
from regionsync.models.state import AircraftState

_logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Async key-value contract for :class:`AircraftState` records."""

    async def get(self, registration: str) -> AircraftState | None:
        ...

    async def put(self, state: AircraftState) -> None:
        ...

    async def delete(self, registration: str) -> bool:
        """Delete a record; return whether one existed."""
        ...

    async def registrations(self) -> list[str]:
        ...


def _encode(state: AircraftState) -> dict[str, Any]:
    return state.model_dump(mode="json")


def _decode(key: str, raw: Any) -> AircraftState | None:
    try:
        return AircraftState.model_validate(raw)
    except ValidationError:
        _logger.warning("Ignoring unreadable state record %s", key, exc_info=True)
        return None


class MemoryStateStore:
    """In-process store. State is lost when the process exits."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    async def get(self, registration: str) -> AircraftState | None:
        key = state_key(registration)
        raw = self._records.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    async def put(self, state: AircraftState) -> None:
        self._records[state_key(state.registration)] = _encode(state)

    async def delete(self, registration: str) -> bool:
        return self._records.pop(state_key(registration), None) is not None

    async def registrations(self) -> list[str]:
        found = (registration_from_key(key) for key in self._records)
        return sorted(r for r in found if r is not None)


class JsonFileStateStore:
    """Durable store backed by a single JSON document.

    Writes replace the file atomically (temp file + ``os.replace``). A
    missing file reads as empty; a corrupt file reads as empty with a
    warning and is overwritten by the next write.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_sync(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("State file %s is corrupt; treating as empty", self._path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("State file %s does not hold an object; treating as empty", self._path)
            return {}
        return data

    def _write_sync(self, records: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def _read(self) -> dict[str, Any]:
        return await asyncio.get_running_loop().run_in_executor(None, self._read_sync)

    async def _write(self, records: dict[str, Any]) -> None:
        await asyncio.get_running_loop().run_in_executor(None, self._write_sync, records)

    async def get(self, registration: str) -> AircraftState | None:
        key = state_key(registration)
        raw = (await self._read()).get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    async def put(self, state: AircraftState) -> None:
        async with self._lock:
            records = await self._read()
            records[state_key(state.registration)] = _encode(state)
            await self._write(records)

    async def delete(self, registration: str) -> bool:
        async with self._lock:
            records = await self._read()
            existed = records.pop(state_key(registration), None) is not None
            if existed:
                await self._write(records)
            return existed

    async def registrations(self) -> list[str]:
        found = (registration_from_key(key) for key in await self._read())
        return sorted(r for r in found if r is not None)
