"""
Insurance claim lifecycle.

A claim references one patient and one bill.  Its approval status and
approved amount are tracked on the claim only: approving a claim never
records a payment on the bill, so the two may diverge until someone
reconciles them by hand.
"""
from __future__ import annotations

import logging

from django.utils import timezone

from clinic.models import Bill, InsuranceClaim, Patient
from clinic.services.common import clean_text, get_or_404, iso, money, pick, resolve
from clinic.services.records import format_patient

logger = logging.getLogger(__name__)

_FIELD_MAP = {
    'patient': 'patient_id',
    'bill': 'bill_id',
    'insuranceProvider': 'insurance_provider',
    'policyNumber': 'policy_number',
    'claimAmount': 'claim_amount',
    'approvedAmount': 'approved_amount',
    'status': 'status',
    'submissionDate': 'submission_date',
    'approvalDate': 'approval_date',
    'rejectionReason': 'rejection_reason',
    'notes': 'notes',
}
_TEXT_FIELDS = {'rejectionReason', 'notes'}


def _bill_ref(fields):
    def fmt(b: Bill) -> dict:
        full = {
            'totalAmount': money(b.total_amount),
            'billDate': iso(b.bill_date),
            'items': b.items or [],
        }
        return {'_id': str(b.id), **{f: full[f] for f in fields}}
    return fmt


def format_claim(claim: InsuranceClaim, *, patient=None, bill=None) -> dict:
    return {
        '_id': str(claim.id),
        'patient': patient,
        'bill': bill,
        'insuranceProvider': claim.insurance_provider,
        'policyNumber': claim.policy_number,
        'claimAmount': money(claim.claim_amount),
        'approvedAmount': money(claim.approved_amount),
        'status': claim.status,
        'submissionDate': iso(claim.submission_date),
        'approvalDate': iso(claim.approval_date),
        'rejectionReason': claim.rejection_reason,
        'notes': claim.notes,
        'createdAt': iso(claim.created_at),
        'updatedAt': iso(claim.updated_at),
    }


def format_claims(claims, *, patient_fields=('name', 'contactNumber'),
                  bill_fields=('totalAmount', 'billDate')) -> list[dict]:
    """Format claims with their patient and bill references resolved.

    ``patient_fields=None`` leaves the patient as its raw id.  References
    whose target was deleted come back as ``None``.
    """
    claims = list(claims)
    patients = {}
    if patient_fields is not None:
        patients = resolve(Patient, [c.patient_id for c in claims],
                           lambda p: pick(patient_fields, format_patient(p)))
    bills = resolve(Bill, [c.bill_id for c in claims], _bill_ref(bill_fields))
    out = []
    for c in claims:
        patient = patients.get(c.patient_id) if patient_fields is not None else str(c.patient_id)
        out.append(format_claim(c, patient=patient, bill=bills.get(c.bill_id)))
    return out


def format_claim_detail(claim: InsuranceClaim) -> dict:
    return format_claims(
        [claim],
        patient_fields=('name', 'contactNumber', 'email'),
        bill_fields=('totalAmount', 'billDate', 'items'),
    )[0]


def _assign(claim: InsuranceClaim, data: dict) -> None:
    for key, attr in _FIELD_MAP.items():
        if key in data:
            value = data[key]
            if key in _TEXT_FIELDS:
                value = clean_text(value)
            setattr(claim, attr, value)


def create_claim(data: dict) -> InsuranceClaim:
    # claimAmount is taken as submitted; it is not checked against the bill total
    claim = InsuranceClaim()
    _assign(claim, data)
    claim.save()
    logger.info('claim %s submitted for bill %s (%s)', claim.id, claim.bill_id, claim.claim_amount)
    return claim


def update_claim(claim: InsuranceClaim, data: dict) -> InsuranceClaim:
    _assign(claim, data)
    claim.save()
    return claim


def update_claim_status(claim_id, status: str, approved_amount=None, rejection_reason=None) -> InsuranceClaim:
    """Move a claim to ``status``.

    ``approved_amount`` is stored verbatim when given.  Entering an
    approval status stamps ``approvalDate`` unless one is already set.
    The linked bill is not touched.
    """
    claim = get_or_404(InsuranceClaim, claim_id, 'Insurance claim')
    previous = claim.status
    claim.status = status
    if approved_amount is not None:
        claim.approved_amount = approved_amount
    if rejection_reason is not None:
        claim.rejection_reason = clean_text(rejection_reason)
    if status in InsuranceClaim.APPROVAL_STATUSES and claim.approval_date is None:
        claim.approval_date = timezone.now()
    claim.save()
    logger.info('claim %s status %s -> %s', claim.id, previous, status)
    return claim


def delete_claim(claim_id) -> str:
    claim = get_or_404(InsuranceClaim, claim_id, 'Insurance claim')
    pk = str(claim.id)
    claim.delete()
    logger.info('claim %s deleted', pk)
    return pk
