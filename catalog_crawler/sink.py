from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Union

from .models import Record

logger = logging.getLogger(__name__)

_NAME_WIDTH = 9


class DatasetSink:
    """
    Append-only record store: one JSON file per record, named by its 1-based
    write sequence (000000001.json, ...). Files are never rewritten.
    """

    def __init__(self, storage_dir: Union[str, os.PathLike]) -> None:
        self.path = Path(storage_dir)
        self.path.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        self._count = self._last_sequence()

    def __len__(self) -> int:
        return self._count

    def _entries(self) -> List[Path]:
        return sorted(p for p in self.path.glob("*.json") if p.stem.isdigit())

    def _last_sequence(self) -> int:
        entries = self._entries()
        return int(entries[-1].stem) if entries else 0

    def purge(self) -> int:
        """Remove every stored record. Returns how many were removed."""
        removed = 0
        for entry in self._entries():
            entry.unlink()
            removed += 1
        self._count = 0
        if removed:
            logger.info("Purged %s records from %s", removed, self.path)
        return removed

    async def append(self, record: Union[Record, Dict[str, Any]]) -> Path:
        data = record if isinstance(record, dict) else record.to_dict()
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        async with self._lock:
            target = self.path / f"{self._count + 1:0{_NAME_WIDTH}d}.json"
            tmp = target.with_suffix(".tmp")
            tmp.write_text(payload, encoding="utf-8")
            # rename so readers never see half a record
            os.replace(tmp, target)
            self._count += 1
        return target

    def read_all(self) -> List[Any]:
        """Every stored record in write order."""
        records = []
        for entry in self._entries():
            with open(entry, "r", encoding="utf-8") as f:
                records.append(json.load(f))
        return records
