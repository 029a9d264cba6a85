from datetime import UTC, datetime
from uuid import UUID

import pytest

from educonnect.features.analytics.domain.models import Method, Reason
from educonnect.features.analytics.pipeline.aggregation import repository as repo_module
from educonnect.features.analytics.pipeline.aggregation.repository import (
    ContactAnalyticsRepository,
    build_contacts_query,
    parse_contact_rows,
)

START = datetime(2025, 10, 13, tzinfo=UTC)
END = datetime(2025, 10, 15, 23, 59, 59, 999000, tzinfo=UTC)


def _row(**overrides):
    row = {
        "id": UUID("00000000-0000-0000-0000-000000000001"),
        "owner_id": UUID("00000000-0000-0000-0000-0000000000aa"),
        "student_id": None,
        "occurred_at": datetime(2025, 10, 14, 9, 0, tzinfo=UTC),
        "created_at": datetime(2025, 10, 14, 9, 5, tzinfo=UTC),
        "method": "email",
        "category": "academic",
    }
    row.update(overrides)
    return row


def test_query_without_filters_has_no_filter_predicates():
    query, params = build_contacts_query("teacher-123", START, END)

    assert "method = ANY" not in query
    assert "category = ANY" not in query
    assert "occurred_at >= %s" in query and "occurred_at <= %s" in query
    assert params == ("teacher-123", START, END)


def test_query_with_filters_dedupes_values_in_order():
    query, params = build_contacts_query(
        "teacher-123",
        START,
        END,
        methods=[Method.PHONE, Method.EMAIL, Method.PHONE],
        reasons=[Reason.POSITIVE],
    )

    assert "AND method = ANY(%s)" in query
    assert "AND category = ANY(%s)" in query
    assert query.rstrip().endswith("ORDER BY occurred_at ASC")
    assert params == ("teacher-123", START, END, ["phone", "email"], ["positive"])


def test_parse_rows_normalises_ids_and_blank_categories():
    records = parse_contact_rows([_row(category="  ", student_id=UUID(int=7))])

    assert records[0].id == "00000000-0000-0000-0000-000000000001"
    assert records[0].student_id == "00000000-0000-0000-0000-000000000007"
    assert records[0].category is None


def test_parse_rows_treats_naive_timestamps_as_utc():
    records = parse_contact_rows([_row(occurred_at=datetime(2025, 10, 14, 9, 0))])
    assert records[0].occurred_at.tzinfo is UTC


def test_parse_rows_skips_malformed_rows():
    rows = [
        _row(),
        _row(occurred_at="yesterday-ish"),
        _row(method="   "),
        {"id": "missing-everything"},
    ]

    records = parse_contact_rows(rows)

    assert len(records) == 1


@pytest.mark.asyncio
async def test_fetch_contacts_runs_query_and_validates(monkeypatch):
    captured = {}

    async def fake_fetch_all(query, params=(), operation="fetch_all"):
        captured["query"] = query
        captured["params"] = params
        captured["operation"] = operation
        return [_row(), _row(method="")]

    monkeypatch.setattr(repo_module, "fetch_all", fake_fetch_all)

    records = await ContactAnalyticsRepository.fetch_contacts(
        "teacher-123", START, END, methods=["video"]
    )

    assert [r.method for r in records] == ["email"]
    assert captured["params"][-1] == ["video"]
    assert captured["operation"] == "fetch_contacts"
