from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ExtractionResult:
    url: str
    flag: str | None
    characters: list[str] = field(default_factory=list)
    character_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "flag": self.flag,
            "characters": list(self.characters),
            "character_count": self.character_count,
        }


@dataclass(frozen=True)
class StrategyReport:
    strategy: str
    characters: list[str]
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.characters)
