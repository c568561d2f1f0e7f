"""
Revenue statistics for the finance dashboard.

Totals and breakdowns follow the requested ``startDate``/``endDate``
range.  The monthly chart series always covers the most recent
``HMS_REVENUE_MONTHS`` calendar months, ending with the current one, and
is loaded independently of the requested range.
"""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone

from clinic.models import Bill
from clinic.services.common import iso, money

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

REVENUE_COLOR = '#3B82F6'
EXPENSES_COLOR = '#F97316'


def shift_months(value: datetime, months: int) -> datetime:
    """Move ``value`` by whole calendar months, clamping the day."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, _days_in_month(year, month))
    return value.replace(year=year, month=month, day=day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (datetime(year, month + 1, 1) - datetime(year, month, 1)).days


def estimated_expenses(revenue: Decimal) -> int:
    # There is no expense ledger; expenses are charted as a fixed share of revenue
    return int((revenue * settings.HMS_EXPENSE_RATIO).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def month_starts(now: datetime, count: int) -> list[datetime]:
    """Return the first instant of each of the last ``count`` months, oldest first."""
    first = timezone.localtime(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return [shift_months(first, -i) for i in range(count - 1, -1, -1)]


def monthly_series(now: datetime, count: Optional[int] = None) -> list[dict]:
    count = count or settings.HMS_REVENUE_MONTHS
    starts = month_starts(now, count)
    window_end = shift_months(starts[-1], 1)
    buckets = {(s.year, s.month): Decimal('0') for s in starts}
    rows = Bill.objects.filter(bill_date__gte=starts[0], bill_date__lt=window_end).values_list('bill_date', 'paid_amount')
    for bill_date, paid in rows:
        local = timezone.localtime(bill_date)
        bucket = (local.year, local.month)
        if bucket in buckets:
            buckets[bucket] += paid or Decimal('0')
    series = []
    for s in starts:
        revenue = buckets[(s.year, s.month)]
        series.append({
            'month': MONTH_NAMES[s.month - 1],
            'revenue': money(revenue),
            'expenses': estimated_expenses(revenue),
        })
    return series


def _breakdown(qs, field: str, summed: str) -> list[dict]:
    rows = qs.values(field).annotate(count=Count('id'), total=Sum(summed)).order_by(field)
    return [
        {'_id': row[field], 'count': row['count'], 'total': money(row['total'] or 0)}
        for row in rows
    ]


def get_revenue_stats(start: Optional[datetime] = None, end: Optional[datetime] = None,
                      now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    end = end or now
    start = start or shift_months(now, -settings.HMS_REVENUE_MONTHS)

    in_range = Bill.objects.filter(bill_date__gte=start, bill_date__lte=end)
    totals = in_range.aggregate(billed=Sum('total_amount'), paid=Sum('paid_amount'))
    total_billed = totals['billed'] or Decimal('0')
    total_paid = totals['paid'] or Decimal('0')

    monthly = monthly_series(now)
    return {
        'period': {'startDate': iso(start), 'endDate': iso(end)},
        'totalBilled': money(total_billed),
        'totalPaid': money(total_paid),
        'outstanding': money(total_billed - total_paid),
        'paymentMethodBreakdown': _breakdown(in_range, 'payment_method', 'paid_amount'),
        'billTypeBreakdown': _breakdown(in_range, 'bill_type', 'total_amount'),
        'monthlyData': monthly,
        'labels': [m['month'] for m in monthly],
        'datasets': [
            {
                'label': 'Revenue',
                'data': [m['revenue'] for m in monthly],
                'backgroundColor': REVENUE_COLOR,
            },
            {
                'label': 'Expenses',
                'data': [m['expenses'] for m in monthly],
                'backgroundColor': EXPENSES_COLOR,
            },
        ],
    }
