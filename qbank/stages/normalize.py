"""Raw CSV row -> normalized Question."""

from __future__ import annotations

import typing as t

from qbank.catalog import DEFAULT_EXAM_NAME, category_for, guess_gregorian
from qbank.models import Choice, LawCitation, Question, RawRow, Source
from qbank.utils import get_logger, to_int

logger = get_logger(__name__)


def _split_list(raw: str, sep: str) -> t.List[str]:
    return [s.strip() for s in (raw or "").split(sep) if s.strip()]


def parse_law_citations(raw: str) -> t.List[LawCitation]:
    out: t.List[LawCitation] = []
    for seg in _split_list(raw, ";"):
        law, _, article = seg.partition(":")
        out.append(LawCitation(law=law.strip(), article=article.strip()))
    return out


def parse_tags(raw: str) -> t.List[str]:
    return _split_list(raw, ",")


def parse_choices(row: RawRow) -> t.List[Choice]:
    choices: t.List[Choice] = []
    for k in range(1, 6):
        text = row.get(f"choice{k}").strip()
        if text:
            choices.append(Choice(key=k, text=text))
    return choices


def subject_hint(filename: str, raw_subject: str) -> str:
    cat = category_for(filename)
    return cat.display_name if cat else raw_subject


def normalize_row(
    row: RawRow,
    year_key: str,
    *,
    build_ts: str,
    exam_name: str = DEFAULT_EXAM_NAME,
) -> Question:
    raw_subject = row.get("subject")
    hint = subject_hint(row.filename, raw_subject)

    era = row.get("era")
    era_year_raw = row.get("era_year")
    era_year = to_int(era_year_raw)

    year_raw = row.get("year").strip()
    year = to_int(year_raw)
    if year is None:
        if year_raw:
            logger.warning("normalize: %s:%d non-numeric year %r -> null", row.filename, row.line, year_raw)
        else:
            year = guess_gregorian(era, era_year)

    subject = raw_subject.strip() or hint

    qno_raw = row.get("question_no").strip()
    question_no = to_int(qno_raw)
    if question_no is None:
        if qno_raw:
            logger.warning("normalize: %s:%d non-numeric question_no %r -> 0", row.filename, row.line, qno_raw)
        question_no = 0

    return Question(
        id=row.get("id").strip() or f"{year_key}-{row.index + 1:03d}",
        year=year,
        era=era,
        era_year=era_year,
        exam=row.get("exam") or exam_name,
        subject=subject,
        topic=row.get("topic"),
        question_no=question_no,
        statement=row.get("statement"),
        choices=parse_choices(row),
        answer=to_int(row.get("answer")),
        explanation=row.get("explanation"),
        law_citations=parse_law_citations(row.get("law_citations")),
        difficulty=to_int(row.get("difficulty")),
        tags=parse_tags(row.get("tags")),
        source=Source(
            paper=f"{era}{era_year_raw}年 {subject}".strip(),
            page=to_int(row.get("source_page")),
        ),
        updated_at=row.get("updated_at").strip() or build_ts,
    )


def normalize_group(
    rows: t.Iterable[RawRow],
    year_key: str,
    *,
    build_ts: str,
    exam_name: str = DEFAULT_EXAM_NAME,
) -> t.List[Question]:
    out: t.List[Question] = []
    seen: t.Set[str] = set()
    for row in rows:
        q = normalize_row(row, year_key, build_ts=build_ts, exam_name=exam_name)
        if q.id in seen:
            logger.warning("normalize: duplicate id %s in group %s (%s:%d)", q.id, year_key, row.filename, row.line)
        seen.add(q.id)
        out.append(q)
    return out
