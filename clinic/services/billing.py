"""
Bill lifecycle and payment recording.

``record_payment`` is the only write path that keeps the
``0 <= paidAmount <= totalAmount`` invariant and the derived
``paymentStatus`` in step.  Plain bill updates assign fields as given
and do not re-derive the status; callers that edit ``paidAmount``
directly bypass the invariant.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.exceptions import ExceedsBalance, PaymentConflict
from clinic.models import Admission, Appointment, Bill, BillPayment, Patient
from clinic.services import stats_cache
from clinic.services.common import get_or_404, iso, money, pick, resolve
from clinic.services.records import format_patient

logger = logging.getLogger(__name__)

PATIENT_SUMMARY = ('name', 'contactNumber')
PATIENT_CONTACT = ('name', 'contactNumber', 'email')

_FIELD_MAP = {
    'patient': 'patient_id',
    'admission': 'admission_id',
    'appointment': 'appointment_id',
    'billType': 'bill_type',
    'items': 'items',
    'totalAmount': 'total_amount',
    'paidAmount': 'paid_amount',
    'paymentStatus': 'payment_status',
    'paymentMethod': 'payment_method',
    'billDate': 'bill_date',
    'dueDate': 'due_date',
}


def derive_payment_status(paid, total) -> str:
    """Map paid/total onto Pending, Partial or Paid.

    Overdue is never produced here; it is set by ``mark_overdue_bills``.
    """
    paid = Decimal(paid or 0)
    total = Decimal(total or 0)
    if paid <= 0:
        return Bill.STATUS_PENDING
    if paid < total:
        return Bill.STATUS_PARTIAL
    return Bill.STATUS_PAID


def format_payment(p: BillPayment) -> dict:
    return {'amount': money(p.amount), 'date': iso(p.date), 'method': p.method}


def format_bill(bill: Bill, *, patient=None, admission=None, appointment=None, include_payments=True) -> dict:
    data = {
        '_id': str(bill.id),
        'patient': patient,
        'admission': admission,
        'appointment': appointment,
        'billType': bill.bill_type,
        'items': bill.items or [],
        'totalAmount': money(bill.total_amount),
        'paidAmount': money(bill.paid_amount),
        'balance': money(bill.balance),
        'paymentStatus': bill.payment_status,
        'paymentMethod': bill.payment_method,
        'billDate': iso(bill.bill_date),
        'dueDate': iso(bill.due_date),
        'createdAt': iso(bill.created_at),
        'updatedAt': iso(bill.updated_at),
    }
    if include_payments:
        data['payments'] = [format_payment(p) for p in bill.payments.all()]
    return data


def format_bills(bills, *, patient_fields=PATIENT_SUMMARY, populate_patient=True) -> list[dict]:
    """Format a bill list, resolving each patient reference once.

    With ``populate_patient`` off the raw patient id is returned instead.
    """
    bills = list(bills)
    patients = {}
    if populate_patient:
        patients = resolve(Patient, [b.patient_id for b in bills],
                           lambda p: pick(patient_fields, format_patient(p)))
    out = []
    for b in bills:
        patient = patients.get(b.patient_id) if populate_patient else str(b.patient_id)
        out.append(format_bill(b, patient=patient))
    return out


def format_bill_detail(bill: Bill) -> dict:
    patient = resolve(Patient, [bill.patient_id], lambda p: pick(PATIENT_CONTACT, format_patient(p)))
    admission = resolve(Admission, [bill.admission_id], lambda a: {
        '_id': str(a.id),
        'admissionDate': iso(a.admission_date),
        'dischargeDate': iso(a.discharge_date),
    })
    appointment = resolve(Appointment, [bill.appointment_id], lambda a: {
        '_id': str(a.id),
        'date': iso(a.date),
        'time': a.time,
        'purpose': a.purpose,
    })
    return format_bill(
        bill,
        patient=patient.get(bill.patient_id),
        admission=admission.get(bill.admission_id),
        appointment=appointment.get(bill.appointment_id),
    )


def _assign(bill: Bill, data: dict) -> None:
    for key, attr in _FIELD_MAP.items():
        if key in data:
            setattr(bill, attr, data[key])


def create_bill(data: dict) -> Bill:
    bill = Bill()
    _assign(bill, data)
    if 'paymentStatus' not in data:
        bill.payment_status = derive_payment_status(bill.paid_amount, bill.total_amount)
    bill.save()
    stats_cache.invalidate()
    logger.info('bill %s created for patient %s (total %s)', bill.id, bill.patient_id, bill.total_amount)
    return bill


def update_bill(bill: Bill, data: dict) -> Bill:
    # Plain assignment: paymentStatus is not re-derived from paidAmount here
    _assign(bill, data)
    bill.save()
    stats_cache.invalidate()
    return bill


def delete_bill(bill_id) -> str:
    bill = get_or_404(Bill, bill_id)
    # Claims referencing this bill are left in place and will resolve to null
    pk = str(bill.id)
    bill.delete()
    stats_cache.invalidate()
    logger.info('bill %s deleted', pk)
    return pk


def _attempt_payment(bill_id, amount: Decimal, method: str) -> Optional[Bill]:
    """Apply one payment attempt; return None when another writer won the race."""
    with transaction.atomic():
        bill = Bill.objects.select_for_update().filter(pk=bill_id).first()
        if bill is None:
            return None
        new_paid = bill.paid_amount + amount
        if new_paid > bill.total_amount:
            raise ExceedsBalance(bill.total_amount - bill.paid_amount)
        new_status = derive_payment_status(new_paid, bill.total_amount)
        now = timezone.now()
        updated = Bill.objects.filter(pk=bill.pk, version=bill.version).update(
            paid_amount=new_paid,
            payment_status=new_status,
            version=F('version') + 1,
            updated_at=now,
        )
        if not updated:
            return None
        BillPayment.objects.create(bill=bill, amount=amount, date=now, method=method)
    bill.refresh_from_db()
    return bill


def record_payment(bill_id, amount: Decimal, method: Optional[str] = None) -> Bill:
    """Add ``amount`` to a bill's paid amount and re-derive its status.

    Each attempt runs in its own transaction, locks the row where the
    database supports it and writes with a compare-and-swap on
    ``version``.  A stale read therefore never overwrites another
    payment; the attempt is retried against fresh state instead.
    Identical requests submitted twice are both applied.
    """
    bill = get_or_404(Bill, bill_id)
    method = method or Bill.PAYMENT_METHOD_CASH
    attempts = max(1, settings.HMS_PAYMENT_MAX_RETRIES)
    for attempt in range(attempts):
        updated = _attempt_payment(bill.pk, amount, method)
        if updated is not None:
            stats_cache.invalidate()
            logger.info(
                'payment of %s (%s) recorded on bill %s: %s/%s %s',
                amount, method, updated.pk, updated.paid_amount, updated.total_amount, updated.payment_status,
            )
            return updated
        if not Bill.objects.filter(pk=bill.pk).exists():
            raise NotFound('Bill not found')
        logger.warning('payment on bill %s lost a concurrent update (attempt %d)', bill.pk, attempt + 1)
    raise PaymentConflict()


def payment_summary(bill: Bill) -> dict:
    return {
        'message': 'Payment recorded successfully',
        'bill': {
            '_id': str(bill.id),
            'totalAmount': money(bill.total_amount),
            'paidAmount': money(bill.paid_amount),
            'paymentStatus': bill.payment_status,
        },
    }


def _outstanding(bills) -> Decimal:
    return sum((b.total_amount - b.paid_amount for b in bills), Decimal('0'))


def pending_summary() -> dict:
    bills = list(
        Bill.objects.filter(payment_status__in=Bill.OPEN_STATUSES).order_by('due_date').prefetch_related('payments')
    )
    return {
        'bills': format_bills(bills),
        'totalPending': money(_outstanding(bills)),
        'count': len(bills),
    }


def overdue_queryset(today: Optional[date] = None):
    today = today or timezone.localdate()
    return Bill.objects.filter(
        payment_status__in=Bill.OPEN_STATUSES + (Bill.STATUS_OVERDUE,),
        due_date__lt=today,
    )


def overdue_summary(today: Optional[date] = None) -> dict:
    bills = list(overdue_queryset(today).order_by('due_date').prefetch_related('payments'))
    return {
        'bills': format_bills(bills),
        'totalOverdue': money(_outstanding(bills)),
        'count': len(bills),
    }


def mark_overdue_bills(today: Optional[date] = None) -> int:
    """Flag open bills whose due date has passed. Returns the number changed."""
    today = today or timezone.localdate()
    changed = Bill.objects.filter(
        payment_status__in=Bill.OPEN_STATUSES,
        due_date__lt=today,
    ).update(payment_status=Bill.STATUS_OVERDUE, updated_at=timezone.now())
    if changed:
        stats_cache.invalidate()
    logger.info('%d bill(s) marked overdue as of %s', changed, today)
    return changed
