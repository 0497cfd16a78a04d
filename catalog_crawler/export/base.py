from __future__ import annotations

from typing import Any, Protocol, Sequence


class Exporter(Protocol):
    def export(self, records: Sequence[Any], path: str) -> None:
        ...
