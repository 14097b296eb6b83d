from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

"""Header row model.

The header row has exactly one origin per conversion. The origin decides whether
the first physical row of the source is consumed as the header (DETECTED) or kept
as data (SUPPLIED).
"""

__all__ = [
    "HeaderOrigin",
    "ResolvedHeader",
]


class HeaderOrigin(Enum):
    DETECTED = "detected"
    SUPPLIED = "supplied"


@dataclass(frozen=True)
class ResolvedHeader:
    headers: list[str]
    origin: HeaderOrigin
    rows: Iterator[list[str]]  # 残りのデータ行 (single pass)

    @property
    def first_data_row(self) -> int:
        """Physical (1-based) row number of the first data row."""
        return 2 if self.origin is HeaderOrigin.DETECTED else 1
