import json
import logging

from qbank.models import RawRow
from qbank.stages.normalize import normalize_group, normalize_row, parse_law_citations, parse_tags
from qbank.stages.packer import to_json_line

from conftest import question_row

BUILD_TS = "2025-04-01T00:00:00.000Z"


def _row(index=0, filename="r07_gyousei.csv", **kw):
    return RawRow(values=question_row(**kw), index=index, filename=filename)


def test_id_synthesized_from_index():
    q = normalize_row(_row(index=4), "r07", build_ts=BUILD_TS)
    assert q.id == "r07-005"
    q2 = normalize_row(_row(id="  Q-9 "), "r07", build_ts=BUILD_TS)
    assert q2.id == "Q-9"


def test_year_explicit_and_guessed():
    assert normalize_row(_row(), "r07", build_ts=BUILD_TS).year == 2025
    assert normalize_row(_row(year="2024"), "r07", build_ts=BUILD_TS).year == 2024
    assert normalize_row(_row(era="平成", era_year="30"), "r07", build_ts=BUILD_TS).year is None
    assert normalize_row(_row(era_year=""), "r07", build_ts=BUILD_TS).year is None


def test_choices_keep_original_slot():
    q = normalize_row(_row(choice3="  ", choice5=""), "r07", build_ts=BUILD_TS)
    assert [c.key for c in q.choices] == [1, 2, 4]
    assert all(c.text for c in q.choices)


def test_law_citations_and_tags():
    cites = parse_law_citations("民法:1条; 借地借家法 ;; 都市計画法:8条:2項")
    assert [(c.law, c.article) for c in cites] == [
        ("民法", "1条"),
        ("借地借家法", ""),
        ("都市計画法", "8条:2項"),
    ]
    assert parse_tags(" 用途地域, ,建ぺい率,") == ["用途地域", "建ぺい率"]
    assert parse_law_citations("") == []


def test_subject_fallback_from_filename():
    q = normalize_row(_row(filename="r07_kanteihyoka.csv", subject="  "), "r07", build_ts=BUILD_TS)
    assert q.subject == "鑑定評価法規"
    assert q.source.paper == "令和7年 鑑定評価法規"

    q2 = normalize_row(_row(subject="都市計画法"), "r07", build_ts=BUILD_TS)
    assert q2.subject == "都市計画法"
    assert q2.source.paper == "令和7年 都市計画法"


def test_defaults_and_optional_fields():
    q = normalize_row(_row(question_no=""), "r07", build_ts=BUILD_TS)
    assert q.exam == "不動産鑑定士 短答"
    assert q.question_no == 0
    assert q.updated_at == BUILD_TS
    assert q.answer == 1

    data = json.loads(to_json_line(q))
    assert data["year"] == 2025
    assert data["era_year"] == 7
    assert "difficulty" not in data
    assert "page" not in data["source"]
    assert list(data)[:3] == ["id", "year", "era"]


def test_optional_numbers_present():
    q = normalize_row(
        _row(difficulty="3", source_page="12", updated_at=" 2025-01-02T03:04:05Z ", exam="別試験"),
        "r07",
        build_ts=BUILD_TS,
    )
    data = json.loads(to_json_line(q))
    assert data["difficulty"] == 3
    assert data["source"] == {"paper": "令和7年 行政法規", "page": 12}
    assert data["updated_at"] == "2025-01-02T03:04:05Z"
    assert data["exam"] == "別試験"


def test_missing_year_serializes_as_null():
    q = normalize_row(_row(era="", era_year=""), "r07", build_ts=BUILD_TS)
    data = json.loads(to_json_line(q))
    assert data["year"] is None
    assert "era_year" not in data
    assert data["source"]["paper"] == "年 行政法規"


def test_non_numeric_question_no_warns(caplog):
    with caplog.at_level(logging.WARNING):
        q = normalize_row(_row(question_no="第3問"), "r07", build_ts=BUILD_TS)
    assert q.question_no == 0
    assert "question_no" in caplog.text


def test_duplicate_ids_warn(caplog):
    rows = [_row(index=0), _row(index=0, filename="r07_kanteihyoka.csv")]
    with caplog.at_level(logging.WARNING):
        items = normalize_group(rows, "r07", build_ts=BUILD_TS)
    assert [q.id for q in items] == ["r07-001", "r07-001"]
    assert "duplicate id r07-001" in caplog.text


def test_padded_subject_trimmed_in_paper():
    q = normalize_row(_row(subject=" 都市計画法 "), "r07", build_ts=BUILD_TS)
    assert q.subject == "都市計画法"
    assert q.source.paper == "令和7年 都市計画法"


def test_non_numeric_year_is_null_not_guessed(caplog):
    with caplog.at_level(logging.WARNING):
        q = normalize_row(_row(year="abc"), "r07", build_ts=BUILD_TS)
    assert q.year is None
    assert "non-numeric year" in caplog.text
