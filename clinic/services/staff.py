"""Staff directory and daily attendance."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic.models import Attendance, Staff
from clinic.services.common import clean_text, get_or_404, iso

logger = logging.getLogger(__name__)


def format_staff(s: Staff) -> dict:
    return {
        '_id': str(s.id),
        'name': s.name,
        'staffId': s.staff_id,
        'role': s.role,
        'department': s.department,
        'contactNumber': s.contact_number,
        'email': s.email,
        'joiningDate': iso(s.joining_date),
        'qualification': s.qualification,
        'schedule': s.schedule or [],
        'createdAt': iso(s.created_at),
        'updatedAt': iso(s.updated_at),
    }


_STAFF_FIELDS = {
    'name': 'name',
    'staffId': 'staff_id',
    'role': 'role',
    'department': 'department',
    'contactNumber': 'contact_number',
    'email': 'email',
    'joiningDate': 'joining_date',
    'qualification': 'qualification',
    'schedule': 'schedule',
}


def save_staff(data: dict, staff: Optional[Staff] = None) -> Staff:
    staff = staff or Staff()
    for key, attr in _STAFF_FIELDS.items():
        if key in data:
            setattr(staff, attr, data[key])
    try:
        with transaction.atomic():
            staff.save()
    except IntegrityError:
        # A concurrent insert took the staff ID or email after validation passed
        raise ValidationError({'staffId': ['A staff member with this staff ID or email already exists']})
    return staff


def delete_staff(staff_id) -> None:
    staff = get_or_404(Staff, staff_id, 'Staff member')
    staff.delete()
    logger.info('staff %s (%s) deleted', staff.staff_id, staff_id)


def schedule_for(staff_id) -> dict:
    staff = get_or_404(Staff, staff_id, 'Staff member')
    return {'_id': str(staff.id), 'name': staff.name, 'schedule': staff.schedule or []}


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------

def _staff_ref(s: Staff) -> dict:
    return {'_id': str(s.id), 'name': s.name, 'staffId': s.staff_id, 'role': s.role, 'department': s.department}


def format_attendance(records) -> list[dict]:
    records = list(records)
    ids = {r.staff_id for r in records}
    staff = {pk: _staff_ref(s) for pk, s in Staff.objects.in_bulk(list(ids)).items()} if ids else {}
    return [
        {
            '_id': str(r.id),
            'staff': staff.get(r.staff_id),
            'date': iso(r.date),
            'checkIn': r.check_in,
            'checkOut': r.check_out,
            'status': r.status,
            'notes': r.notes,
            'createdAt': iso(r.created_at),
            'updatedAt': iso(r.updated_at),
        }
        for r in records
    ]


def _apply(record: Attendance, data: dict) -> None:
    # A blank check-in keeps the time already recorded
    if data.get('checkIn'):
        record.check_in = data['checkIn']
    if 'checkOut' in data:
        record.check_out = data['checkOut']
    if 'status' in data:
        record.status = data['status']
    if 'notes' in data:
        record.notes = clean_text(data['notes'])


def _default_check_in() -> str:
    return timezone.localtime().strftime('%H:%M')


def mark_attendance(data: dict) -> Tuple[Attendance, bool]:
    """Create or update the single record for (staff, day).

    Only the fields present in ``data`` are written on update.  Returns
    the record and whether it was created.  Two requests racing on a
    new day both resolve to the same row: the loser of the insert falls
    back to updating the winner's record.
    """
    staff = get_or_404(Staff, data['staffId'], 'Staff member')
    day: date = data.get('date') or timezone.localdate()
    try:
        with transaction.atomic():
            record = Attendance.objects.select_for_update().filter(staff=staff, date=day).first()
            created = record is None
            if created:
                record = Attendance(staff=staff, date=day, check_in=data.get('checkIn') or _default_check_in())
            _apply(record, data)
            record.save()
    except IntegrityError:
        with transaction.atomic():
            record = Attendance.objects.select_for_update().get(staff=staff, date=day)
            _apply(record, data)
            record.save()
        created = False
    logger.info('attendance %s for %s on %s: %s', 'created' if created else 'updated', staff.staff_id, day, record.status)
    return record, created


def update_attendance(attendance_id, data: dict) -> Attendance:
    record = get_or_404(Attendance, attendance_id, 'Attendance record')
    if 'staffId' in data:
        record.staff_id = get_or_404(Staff, data['staffId'], 'Staff member').pk
    if 'date' in data and data['date'] is not None:
        record.date = data['date']
    _apply(record, data)
    try:
        with transaction.atomic():
            record.save()
    except IntegrityError:
        raise ValidationError({'date': ['Attendance already recorded for this staff member on this date']})
    return record


def attendance_on(day: date):
    return Attendance.objects.filter(date=day).order_by('created_at')


def attendance_for(staff_id, start: Optional[date] = None, end: Optional[date] = None):
    staff = get_or_404(Staff, staff_id, 'Staff member')
    qs = Attendance.objects.filter(staff=staff)
    if start:
        qs = qs.filter(date__gte=start)
    if end:
        qs = qs.filter(date__lte=end)
    return qs.order_by('-date')
