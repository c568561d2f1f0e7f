from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.exceptions import ExceedsBalance, PaymentConflict
from clinic.models import Bill, BillPayment, InsuranceClaim
from clinic.services import billing
from clinic.services.claims import format_claim_detail
from .factories import make_bill, make_patient

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('paid,total,expected', [
    ('0', '1000', 'Pending'),
    ('-1', '1000', 'Pending'),
    ('400', '1000', 'Partial'),
    ('1000', '1000', 'Paid'),
    ('1200', '1000', 'Paid'),
    ('0', '0', 'Pending'),
])
def test_derive_payment_status(paid, total, expected):
    assert billing.derive_payment_status(Decimal(paid), Decimal(total)) == expected


def test_payment_sequence_reaches_paid_and_rejects_overpayment():
    bill = make_bill(make_patient())

    bill = billing.record_payment(bill.id, Decimal('400'))
    assert bill.paid_amount == Decimal('400.00')
    assert bill.payment_status == Bill.STATUS_PARTIAL

    bill = billing.record_payment(bill.id, Decimal('600'), 'Credit Card')
    assert bill.paid_amount == Decimal('1000.00')
    assert bill.payment_status == Bill.STATUS_PAID

    with pytest.raises(ExceedsBalance) as exc:
        billing.record_payment(bill.id, Decimal('1'))
    assert str(exc.value.detail) == 'Payment amount exceeds remaining balance. Maximum payment allowed: ₹0.00'

    payments = list(BillPayment.objects.filter(bill=bill).values_list('amount', 'method'))
    assert payments == [(Decimal('400.00'), 'Cash'), (Decimal('600.00'), 'Credit Card')]


def test_overpayment_leaves_bill_untouched():
    bill = make_bill(make_patient(), paid='400.00', status=Bill.STATUS_PARTIAL)
    with pytest.raises(ExceedsBalance) as exc:
        billing.record_payment(bill.id, Decimal('700'))
    assert exc.value.remaining == Decimal('600.00')
    assert 'Maximum payment allowed: ₹600.00' in str(exc.value.detail)
    bill.refresh_from_db()
    assert bill.paid_amount == Decimal('400.00')
    assert bill.payment_status == Bill.STATUS_PARTIAL
    assert bill.version == 0
    assert not bill.payments.exists()


def test_payment_bumps_version():
    bill = make_bill(make_patient())
    billing.record_payment(bill.id, Decimal('100'))
    billing.record_payment(bill.id, Decimal('100'))
    bill.refresh_from_db()
    assert bill.version == 2


def test_payment_on_missing_bill_is_not_found():
    with pytest.raises(NotFound):
        billing.record_payment('7d0f5c2e-0000-4000-8000-000000000000', Decimal('10'))
    with pytest.raises(NotFound):
        billing.record_payment('not-a-uuid', Decimal('10'))


def test_lost_race_is_retried(monkeypatch):
    bill = make_bill(make_patient())
    real_attempt = billing._attempt_payment
    calls = []

    def flaky(bill_id, amount, method):
        calls.append(amount)
        if len(calls) == 1:
            return None
        return real_attempt(bill_id, amount, method)

    monkeypatch.setattr(billing, '_attempt_payment', flaky)
    bill = billing.record_payment(bill.id, Decimal('250'))
    assert len(calls) == 2
    assert bill.paid_amount == Decimal('250.00')
    assert bill.payments.count() == 1


def test_stale_read_never_overwrites_concurrent_payment(monkeypatch):
    bill = make_bill(make_patient())
    real = Bill.objects.select_for_update
    calls = []

    class StaleRows:
        def __init__(self, row):
            self.row = row

        def filter(self, **kwargs):
            return self

        def first(self):
            return self.row

    def select_for_update(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            # Another writer commits between this read and the write
            stale = Bill.objects.get(pk=bill.pk)
            Bill.objects.filter(pk=bill.pk).update(
                paid_amount=Decimal('100.00'), payment_status=Bill.STATUS_PARTIAL, version=F('version') + 1,
            )
            return StaleRows(stale)
        return real(*args, **kwargs)

    monkeypatch.setattr(Bill.objects, 'select_for_update', select_for_update)
    updated = billing.record_payment(bill.id, Decimal('250'))
    assert len(calls) == 2
    assert updated.paid_amount == Decimal('350.00')
    assert updated.version == bill.version + 2
    assert updated.payments.count() == 1


def test_retry_exhaustion_raises_conflict(monkeypatch, settings):
    settings.HMS_PAYMENT_MAX_RETRIES = 2
    bill = make_bill(make_patient())
    monkeypatch.setattr(billing, '_attempt_payment', lambda *args: None)
    with pytest.raises(PaymentConflict):
        billing.record_payment(bill.id, Decimal('10'))
    bill.refresh_from_db()
    assert bill.paid_amount == Decimal('0.00')


def test_create_bill_derives_status_unless_given():
    patient = make_patient()
    due = timezone.localdate() + timedelta(days=10)
    bill = billing.create_bill({
        'patient': patient.id, 'billType': 'Laboratory', 'totalAmount': Decimal('500'),
        'paidAmount': Decimal('200'), 'dueDate': due,
    })
    assert bill.payment_status == Bill.STATUS_PARTIAL

    bill = billing.create_bill({
        'patient': patient.id, 'billType': 'Laboratory', 'totalAmount': Decimal('500'),
        'paymentStatus': 'Overdue', 'dueDate': due,
    })
    assert bill.payment_status == Bill.STATUS_OVERDUE


def test_update_bill_does_not_rederive_status():
    bill = make_bill(make_patient())
    bill = billing.update_bill(bill, {'paidAmount': Decimal('1000')})
    assert bill.paid_amount == Decimal('1000')
    assert bill.payment_status == Bill.STATUS_PENDING


def test_delete_bill_leaves_claims_dangling():
    patient = make_patient()
    bill = make_bill(patient)
    claim = InsuranceClaim.objects.create(
        patient=patient, bill=bill, insurance_provider='Star Health', policy_number='POL1',
        claim_amount=Decimal('1000'),
    )
    assert billing.delete_bill(bill.id) == str(bill.id)
    claim.refresh_from_db()
    assert claim.bill_id == bill.id
    assert format_claim_detail(claim)['bill'] is None


def test_pending_and_overdue_summaries():
    patient = make_patient()
    make_bill(patient, total='1000.00', paid='400.00', status=Bill.STATUS_PARTIAL, due_in_days=-3)
    make_bill(patient, total='300.00', due_in_days=5)
    make_bill(patient, total='200.00', paid='200.00', status=Bill.STATUS_PAID, due_in_days=-10)
    make_bill(patient, total='150.00', status=Bill.STATUS_OVERDUE, due_in_days=-20)

    pending = billing.pending_summary()
    assert pending['count'] == 2
    assert pending['totalPending'] == 900.0
    assert [b['totalAmount'] for b in pending['bills']] == [1000.0, 300.0]
    assert pending['bills'][0]['patient'] == {'_id': str(patient.id), 'name': 'Rahul Verma', 'contactNumber': '9000000001'}

    overdue = billing.overdue_summary()
    assert overdue['count'] == 2
    assert overdue['totalOverdue'] == 750.0


def test_mark_overdue_moves_only_open_bills_past_due():
    patient = make_patient()
    late_pending = make_bill(patient, due_in_days=-1)
    late_partial = make_bill(patient, paid='10.00', status=Bill.STATUS_PARTIAL, due_in_days=-30)
    late_paid = make_bill(patient, paid='1000.00', status=Bill.STATUS_PAID, due_in_days=-1)
    due_today = make_bill(patient, due_in_days=0)

    assert billing.mark_overdue_bills() == 2

    statuses = dict(Bill.objects.values_list('id', 'payment_status'))
    assert statuses[late_pending.id] == Bill.STATUS_OVERDUE
    assert statuses[late_partial.id] == Bill.STATUS_OVERDUE
    assert statuses[late_paid.id] == Bill.STATUS_PAID
    assert statuses[due_today.id] == Bill.STATUS_PENDING


def test_mark_overdue_command_accepts_date():
    patient = make_patient()
    bill = make_bill(patient, due_in_days=5)
    later = (timezone.localdate() + timedelta(days=10)).isoformat()
    call_command('mark_overdue_bills', date=later)
    bill.refresh_from_db()
    assert bill.payment_status == Bill.STATUS_OVERDUE
