"""Dataclasses shared between the normalizer and its callers."""
from __future__ import annotations
from dataclasses import dataclass, field

@dataclass
class NormalizedTable:
    """Headers plus body rows with exact dimensions."""
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, list]:
        return {"headers": list(self.headers), "rows": [list(r) for r in self.rows]}
