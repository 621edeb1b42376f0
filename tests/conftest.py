import csv
import io
from pathlib import Path

import pytest

COLUMNS = [
    "id", "year", "era", "era_year", "exam", "subject", "topic", "question_no", "statement",
    "choice1", "choice2", "choice3", "choice4", "choice5", "answer", "explanation",
    "law_citations", "difficulty", "tags", "source_page", "updated_at",
]


def csv_text(rows, columns=COLUMNS):
    buf = io.StringIO(newline="")
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(columns)
    for r in rows:
        w.writerow([r.get(c, "") for c in columns])
    return buf.getvalue()


def question_row(**kw):
    row = {
        "era": "令和",
        "era_year": "7",
        "question_no": "1",
        "statement": "次の記述のうち正しいものはどれか。",
        "choice1": "ア",
        "choice2": "イ",
        "choice3": "ウ",
        "choice4": "エ",
        "choice5": "オ",
        "answer": "1",
    }
    row.update(kw)
    return row


@pytest.fixture
def write_csv():
    def _write(path: Path, rows, columns=COLUMNS) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(csv_text(rows, columns), encoding="utf-8")
        return path

    return _write
