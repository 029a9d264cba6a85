"""
Contact analytics aggregation.

Turns the fetched contact records for one resolved range into dashboard
KPIs, a zero-filled trend series and the method/reason distributions.
Pure and synchronous: no I/O, no state kept between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ...domain.models import (
    UNCATEGORIZED,
    AnalyticsAggregate,
    AnalyticsKpis,
    AnalyticsSnapshot,
    Bucket,
    ContactRecord,
    DistributionRow,
    ResolvedRange,
    method_label,
    reason_label,
)
from ..time_range import format_range_label, monday_of

_ONE_WEEK = timedelta(weeks=1)
_TENTH = Decimal("0.1")


def _round_half_up(value: Decimal, exp: Decimal = Decimal("1")) -> Decimal:
    return value.quantize(exp, rounding=ROUND_HALF_UP)


def weeks_between(start: datetime, end: datetime) -> int:
    """Whole weeks spanned by the interval, never less than one."""
    ratio = Decimal((end - start) // timedelta(microseconds=1)) / Decimal(
        _ONE_WEEK // timedelta(microseconds=1)
    )
    return max(1, int(_round_half_up(ratio)))


def day_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def week_label(monday: date) -> str:
    return f"Week of {day_label(monday)}"


class ContactAnalyticsAggregator:
    def aggregate(
        self, records: Sequence[ContactRecord], resolved: ResolvedRange
    ) -> AnalyticsAggregate:
        total_contacts = len(records)
        students_reached = len({r.student_id for r in records if r.student_id})

        weeks = weeks_between(resolved.start, resolved.end)
        avg_per_week = float(_round_half_up(Decimal(total_contacts) / Decimal(weeks), _TENTH))

        return AnalyticsAggregate(
            kpis=AnalyticsKpis(
                total_contacts=total_contacts,
                students_reached=students_reached,
                avg_per_week=avg_per_week,
            ),
            trend_series=self._build_trend(records, resolved),
            method_distribution=self._distribution(
                (r.method for r in records), method_label
            ),
            reason_distribution=self._distribution(
                (r.category or UNCATEGORIZED for r in records), reason_label
            ),
        )

    def _seed_buckets(self, resolved: ResolvedRange) -> dict[date, int]:
        first = resolved.start.date()
        last = resolved.end.date()
        step_days = 1
        if resolved.bucket is Bucket.WEEK:
            # One bucket per Monday in [monday_of(start), end]: a start that is not a
            # Monday adds one leading bucket for its partial week
            first = monday_of(first)
            step_days = 7

        # Offsets are counted up front; stepping past the last bucket could overflow date.max
        count = (last - first).days // step_days + 1
        return {first + timedelta(days=i * step_days): 0 for i in range(count)}

    def _bucket_key(self, occurred_at: datetime, resolved: ResolvedRange) -> date:
        local_day = occurred_at.astimezone(resolved.start.tzinfo).date()
        if resolved.bucket is Bucket.WEEK:
            return monday_of(local_day)
        return local_day

    def _build_trend(
        self, records: Iterable[ContactRecord], resolved: ResolvedRange
    ) -> tuple[DistributionRow, ...]:
        buckets = self._seed_buckets(resolved)
        for record in records:
            key = self._bucket_key(record.occurred_at, resolved)
            # Keys outside the seeded range are dropped; totals still count them
            if key in buckets:
                buckets[key] += 1

        label = week_label if resolved.bucket is Bucket.WEEK else day_label
        return tuple(DistributionRow(label=label(key), count=count) for key, count in buckets.items())

    def _distribution(self, values: Iterable[str], labeler) -> tuple[DistributionRow, ...]:
        # Counter keeps first-seen order
        counts = Counter(values)
        return tuple(DistributionRow(label=labeler(key), count=count) for key, count in counts.items())


def describe_filters(
    methods: Iterable[str] | None = None, reasons: Iterable[str] | None = None
) -> tuple[str, ...]:
    """Human labels for the active filters, methods first, in selection order."""
    labels: dict[str, None] = {}
    for value in methods or ():
        labels.setdefault(f"Method: {method_label(getattr(value, 'value', value))}", None)
    for value in reasons or ():
        labels.setdefault(f"Reason: {reason_label(getattr(value, 'value', value))}", None)
    return tuple(labels)


def build_snapshot(
    aggregate: AnalyticsAggregate,
    resolved: ResolvedRange,
    generated_at: datetime,
    active_filters: Iterable[str] = (),
) -> AnalyticsSnapshot:
    return AnalyticsSnapshot(
        range_label=format_range_label(resolved.start, resolved.end),
        generated_at=generated_at,
        active_filters=tuple(active_filters),
        kpis=aggregate.kpis,
        trend_series=aggregate.trend_series,
        method_distribution=aggregate.method_distribution,
        reason_distribution=aggregate.reason_distribution,
    )


contact_analytics_aggregator = ContactAnalyticsAggregator()


def aggregate_contacts(
    records: Sequence[ContactRecord], resolved: ResolvedRange
) -> AnalyticsAggregate:
    return contact_analytics_aggregator.aggregate(records, resolved)
