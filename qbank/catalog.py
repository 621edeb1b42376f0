"""Known filename categories and era offsets."""

from __future__ import annotations

import enum
import re
from typing import Optional


class Category(str, enum.Enum):
    GYOUSEI = "gyousei"
    KANTEIHYOKA = "kanteihyoka"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Category.GYOUSEI: "行政法規",
    Category.KANTEIHYOKA: "鑑定評価法規",
}

FILENAME_RE = re.compile(
    r"^(?P<year_key>r\d{2})_(?P<category>" + "|".join(c.value for c in Category) + r")\.csv$",
    re.IGNORECASE,
)

# era marker -> offset added to the era year; 平成 etc. not covered yet
ERA_OFFSETS = {
    "令和": 2018,
}

DEFAULT_EXAM_NAME = "不動産鑑定士 短答"


def category_for(filename: str) -> Optional[Category]:
    m = FILENAME_RE.match(filename)
    if not m:
        return None
    return Category(m.group("category").lower())


def guess_gregorian(era: str, era_year: Optional[int]) -> Optional[int]:
    if not era or era_year is None:
        return None
    for marker, offset in ERA_OFFSETS.items():
        if marker in era:
            return offset + era_year
    return None
