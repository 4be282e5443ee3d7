"""Catalog record types shared by the matcher and its stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

PATH_DELIMITER = " > "


@dataclass(frozen=True)
class CategoryRecord:
    cat_id: str
    path_segments: Tuple[str, ...]

    @property
    def full_path(self) -> str:
        return PATH_DELIMITER.join(self.path_segments)

    @classmethod
    def from_segments(cls, cat_id, segments) -> "CategoryRecord":
        cleaned = tuple(str(seg).strip() for seg in segments if seg and str(seg).strip())
        return cls(cat_id=str(cat_id).strip(), path_segments=cleaned)


@dataclass(frozen=True)
class CategoryVector:
    cat_id: str
    vector: List[float] = field(default_factory=list)

    @property
    def dimension(self) -> int:
        return len(self.vector)
