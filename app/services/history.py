"""
Recent-scan history kept in a single persisted slot.

Every mutation reads the whole slot and writes it back whole. Slot I/O runs
in a worker thread so file access never blocks the event loop.
"""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Protocol
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from app.schemas.scan import HistoryEntry

logger = logging.getLogger(__name__)

HISTORY_SLOT = "scanHistory"
MAX_ENTRIES = 50

_entries = TypeAdapter(List[HistoryEntry])


class HistorySlot(Protocol):
    def read(self) -> Optional[str]: ...
    def write(self, data: str) -> None: ...
    def delete(self) -> None: ...


class FileHistorySlot:
    """One JSON file per slot name under ``directory``."""

    def __init__(self, directory: str, name: str = HISTORY_SLOT):
        self.path = Path(directory) / f"{name}.json"

    def read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, data: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(data, encoding="utf-8")
        tmp.replace(self.path)

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


def _same_scan(a: HistoryEntry, b: HistoryEntry) -> bool:
    if a.product.barcode and a.product.barcode == b.product.barcode:
        return True
    return a.product.id is not None and a.product.id == b.product.id


class HistoryCache:

    def __init__(self, slot: HistorySlot, max_entries: int = MAX_ENTRIES):
        self.slot = slot
        self.max_entries = max_entries
        self._lock = asyncio.Lock()

    def _load(self) -> List[HistoryEntry]:
        raw = self.slot.read()
        if not raw:
            return []
        try:
            return _entries.validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning("Scan history is corrupt, starting a new one: %s", e)
            return []

    def _store(self, entries: List[HistoryEntry]) -> None:
        self.slot.write(_entries.dump_json(entries).decode("utf-8"))

    async def record(self, entry: HistoryEntry) -> None:
        """
        Replace a matching entry where it stands (it does NOT move to the
        front), otherwise prepend. The list is then capped at max_entries.
        """
        async with self._lock:
            entries = await asyncio.to_thread(self._load)
            for i, existing in enumerate(entries):
                if _same_scan(existing, entry):
                    entries[i] = entry
                    break
            else:
                entries.insert(0, entry)
            await asyncio.to_thread(self._store, entries[:self.max_entries])

    async def list(self) -> List[HistoryEntry]:
        async with self._lock:
            return await asyncio.to_thread(self._load)

    async def search(self, query: str) -> List[HistoryEntry]:
        needle = query.strip().lower()
        entries = await self.list()
        if not needle:
            return entries
        return [
            e for e in entries
            if needle in e.product.name.lower() or (e.product.barcode and needle in e.product.barcode)
        ]

    async def remove(self, barcode: Optional[str], product_id: Optional[UUID]) -> bool:
        """Drop the entry whose barcode and id both match."""
        async with self._lock:
            entries = await asyncio.to_thread(self._load)
            kept = [
                e for e in entries
                if e.product.barcode != barcode or e.product.id != product_id
            ]
            if len(kept) == len(entries):
                return False
            await asyncio.to_thread(self._store, kept)
            return True

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self.slot.delete)
