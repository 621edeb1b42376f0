"""CSV reading and pre-normalization validation.

Rows are read with a header line, blank records dropped, and stray quotes inside
unquoted fields kept literally. A quoted field still open at end of file is a
parse error.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import List, Tuple

from qbank.errors import ParseError, SchemaError, ValidationError
from qbank.models import RawRow
from qbank.utils import get_logger, to_int

logger = get_logger(__name__)

CHOICE_COLUMNS = tuple(f"choice{k}" for k in range(1, 6))
ANSWER_RANGE = range(1, 6)


def read_rows(path: Path) -> Tuple[List[str], List[RawRow]]:
    """Return (header, rows) for one CSV file."""
    name = path.name
    try:
        text = path.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(name, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: List[str] = []
    rows: List[RawRow] = []
    try:
        for record in reader:
            if not record:
                continue
            if not header:
                header = [h.strip() for h in record]
                continue
            if len(record) != len(header):
                raise ParseError(
                    name,
                    f"expected {len(header)} fields, got {len(record)}",
                    line=reader.line_num,
                )
            rows.append(RawRow(values=dict(zip(header, record)), index=len(rows), filename=name))
    except csv.Error as e:
        raise ParseError(name, str(e), line=reader.line_num) from e

    logger.info("parse: file=%s rows=%d", name, len(rows))
    return header, rows


def validate_rows(header: List[str], rows: List[RawRow], filename: str) -> None:
    missing = [c for c in CHOICE_COLUMNS if c not in header]
    if missing:
        raise SchemaError(filename, f"missing required column(s): {', '.join(missing)}", line=1)

    for row in rows:
        raw = row.get("answer")
        answer = to_int(raw)
        if answer is None or answer not in ANSWER_RANGE:
            raise ValidationError(
                filename,
                f"answer must be an integer in 1..5, got {raw!r}",
                line=row.line,
            )
