"""
Repository for analytics reads.

Fetches the teacher's contact rows for a resolved interval from the
contacts table and validates each one into a ContactRecord.
"""

from collections.abc import Iterable
from datetime import datetime

from pydantic import ValidationError

from educonnect.db.helpers import fetch_all
from educonnect.features.analytics.domain.models import ContactRecord
from educonnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_BASE_QUERY = """
    SELECT
        id,
        owner_id,
        student_id,
        occurred_at,
        created_at,
        method,
        category
    FROM contacts
    WHERE owner_id = %s
      AND occurred_at >= %s
      AND occurred_at <= %s
"""


def _distinct(values: Iterable[str] | None) -> list[str]:
    seen: dict[str, None] = {}
    for value in values or ():
        seen.setdefault(str(getattr(value, "value", value)), None)
    return list(seen)


def build_contacts_query(
    owner_id: str,
    start: datetime,
    end: datetime,
    methods: Iterable[str] | None = None,
    reasons: Iterable[str] | None = None,
) -> tuple[str, tuple]:
    """SQL + params for the filtered contacts read. Empty filters add no predicate."""
    query = _BASE_QUERY
    params: list = [owner_id, start, end]

    method_values = _distinct(methods)
    if method_values:
        query += "      AND method = ANY(%s)\n"
        params.append(method_values)

    reason_values = _distinct(reasons)
    if reason_values:
        query += "      AND category = ANY(%s)\n"
        params.append(reason_values)

    query += "    ORDER BY occurred_at ASC\n"
    return query, tuple(params)


def parse_contact_rows(rows: Iterable[dict]) -> list[ContactRecord]:
    """Validate raw rows; malformed rows are skipped and logged, never guessed at."""
    records: list[ContactRecord] = []
    skipped = 0
    for row in rows:
        try:
            records.append(ContactRecord.model_validate(row))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed contact row",
                contact_id=str(row.get("id")) if isinstance(row, dict) else None,
                errors=e.error_count(),
            )
    if skipped:
        logger.warning("Contact rows skipped during validation", skipped=skipped, kept=len(records))
    return records


class ContactAnalyticsRepository:
    """Raw SQL helpers for analytics reads."""

    @classmethod
    async def fetch_contacts(
        cls,
        owner_id: str,
        start: datetime,
        end: datetime,
        methods: Iterable[str] | None = None,
        reasons: Iterable[str] | None = None,
    ) -> list[ContactRecord]:
        query, params = build_contacts_query(owner_id, start, end, methods, reasons)
        rows = await fetch_all(query, params, operation="fetch_contacts")
        records = parse_contact_rows(rows)
        logger.debug(
            "Fetched contacts for analytics",
            owner_id=owner_id,
            row_count=len(rows),
            record_count=len(records),
        )
        return records
