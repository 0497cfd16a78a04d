from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence
from pathlib import Path

from .base import Exporter
from ..sink import DatasetSink

logger = logging.getLogger(__name__)


class JSONExporter:
    """Writes all records as one JSON array, replacing any previous file."""

    def export(self, records: Sequence[Any], path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(list(records), f, indent=2, ensure_ascii=False)


def aggregate(sink: DatasetSink, path: str, exporter: Optional[Exporter] = None) -> int:
    """
    Combine every record in the sink, in write order, into the output artifact.
    No merging or de-duplication. Returns the number of records written.
    """
    records = sink.read_all()
    (exporter or JSONExporter()).export(records, path)
    logger.info("Aggregated %s records from %s into %s", len(records), sink.path, path)
    return len(records)
