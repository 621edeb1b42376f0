"""Japanese-aware ordering of questions within a bundle.

Characters are compared by their JIS X 0208 position (Shift_JIS code order):
kana before kanji, level-1 kanji by reading. Katakana is folded to hiragana and
text is NFKC-normalized first so width and kana variants collate together.
"""

from __future__ import annotations

import typing as t
import unicodedata

from qbank.models import Question

_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_SHIFT = 0x60
_OUTSIDE_JIS = 0x10000


def _fold_kana(text: str) -> str:
    return "".join(
        chr(ord(ch) - _KANA_SHIFT) if _KATAKANA_START <= ord(ch) <= _KATAKANA_END else ch
        for ch in text
    )


def _char_weight(ch: str) -> int:
    try:
        b = ch.encode("shift_jis")
    except UnicodeEncodeError:
        return _OUTSIDE_JIS + ord(ch)
    return int.from_bytes(b, "big")


def collation_key(text: str) -> t.Tuple[t.Tuple[int, ...], str]:
    folded = _fold_kana(unicodedata.normalize("NFKC", text or ""))
    return tuple(_char_weight(ch) for ch in folded), text or ""


def sort_questions(items: t.List[Question]) -> t.List[Question]:
    return sorted(items, key=lambda q: (collation_key(q.subject), q.question_no))
