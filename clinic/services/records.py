"""
Patient records: registration, appointments and admissions.

Appointment and admission statuses are checked against their allowed
values at the API boundary, but any status may follow any other; no
transition graph is enforced.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.utils import timezone

from clinic.models import Admission, Appointment, Patient, Staff
from clinic.services import stats_cache
from clinic.services.common import clean_text, get_or_404, iso, pick, resolve

logger = logging.getLogger(__name__)

PATIENT_BRIEF = ('name', 'age', 'gender', 'contactNumber')
STAFF_BRIEF = ('name', 'role', 'department')


def format_patient(p: Patient) -> dict:
    return {
        '_id': str(p.id),
        'name': p.name,
        'age': p.age,
        'gender': p.gender,
        'contactNumber': p.contact_number,
        'email': p.email,
        'address': p.address,
        'bloodGroup': p.blood_group,
        'medicalHistory': p.medical_history,
        'emergencyContact': p.emergency_contact,
        'allergies': p.allergies or [],
        'currentMedications': p.current_medications or [],
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
    }


def _staff_brief(s: Staff) -> dict:
    return {'_id': str(s.id), 'name': s.name, 'role': s.role, 'department': s.department}


_PATIENT_FIELDS = {
    'name': 'name',
    'age': 'age',
    'gender': 'gender',
    'contactNumber': 'contact_number',
    'email': 'email',
    'address': 'address',
    'bloodGroup': 'blood_group',
    'medicalHistory': 'medical_history',
    'emergencyContact': 'emergency_contact',
    'allergies': 'allergies',
    'currentMedications': 'current_medications',
}


def save_patient(data: dict, patient: Optional[Patient] = None) -> Patient:
    patient = patient or Patient()
    for key, attr in _PATIENT_FIELDS.items():
        if key in data:
            value = data[key]
            if key == 'medicalHistory':
                value = clean_text(value) or ''
            elif key == 'bloodGroup':
                value = value or None
            setattr(patient, attr, value)
    patient.save()
    # Finance summaries embed patient names
    stats_cache.invalidate()
    return patient


def delete_patient(patient_id) -> None:
    patient = get_or_404(Patient, patient_id)
    # Bills, claims, appointments and admissions keep their (now dangling) reference
    patient.delete()
    stats_cache.invalidate()
    logger.info('patient %s deleted', patient_id)


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------

def format_appointment(a: Appointment, *, patient=None, doctor=None) -> dict:
    return {
        '_id': str(a.id),
        'patient': patient,
        'doctor': doctor,
        'date': iso(a.date),
        'time': a.time,
        'status': a.status,
        'purpose': a.purpose,
        'notes': a.notes,
        'createdAt': iso(a.created_at),
        'updatedAt': iso(a.updated_at),
    }


def format_appointments(appointments, *, populate_patient=True, populate_doctor=True) -> list[dict]:
    appointments = list(appointments)
    patients = resolve(Patient, [a.patient_id for a in appointments],
                       lambda p: pick(PATIENT_BRIEF, format_patient(p))) if populate_patient else {}
    doctors = resolve(Staff, [a.doctor_id for a in appointments], _staff_brief) if populate_doctor else {}
    return [
        format_appointment(
            a,
            patient=patients.get(a.patient_id) if populate_patient else str(a.patient_id),
            doctor=doctors.get(a.doctor_id) if populate_doctor else str(a.doctor_id),
        )
        for a in appointments
    ]


_APPOINTMENT_FIELDS = {
    'patientId': 'patient_id',
    'doctorId': 'doctor_id',
    'date': 'date',
    'time': 'time',
    'status': 'status',
    'purpose': 'purpose',
    'notes': 'notes',
}


def save_appointment(data: dict, appointment: Optional[Appointment] = None) -> Appointment:
    appointment = appointment or Appointment()
    for key, attr in _APPOINTMENT_FIELDS.items():
        if key in data:
            value = clean_text(data[key]) if key == 'notes' else data[key]
            setattr(appointment, attr, value)
    appointment.save()
    return appointment


def set_appointment_status(appointment_id, status: str) -> Appointment:
    appointment = get_or_404(Appointment, appointment_id)
    appointment.status = status
    appointment.save(update_fields=['status', 'updated_at'])
    return appointment


# ---------------------------------------------------------------------------
# Admissions
# ---------------------------------------------------------------------------

def format_admission(a: Admission, *, patient=None, admitted_by=None) -> dict:
    return {
        '_id': str(a.id),
        'patient': patient,
        'admittedBy': admitted_by,
        'roomNumber': a.room_number,
        'bedNumber': a.bed_number,
        'admissionDate': iso(a.admission_date),
        'dischargeDate': iso(a.discharge_date),
        'diagnosis': a.diagnosis,
        'treatmentPlan': a.treatment_plan,
        'status': a.status,
        'createdAt': iso(a.created_at),
        'updatedAt': iso(a.updated_at),
    }


def format_admissions(admissions, *, populate_patient=True) -> list[dict]:
    admissions = list(admissions)
    patients = resolve(Patient, [a.patient_id for a in admissions],
                       lambda p: pick(PATIENT_BRIEF, format_patient(p))) if populate_patient else {}
    staff = resolve(Staff, [a.admitted_by_id for a in admissions], _staff_brief)
    return [
        format_admission(
            a,
            patient=patients.get(a.patient_id) if populate_patient else str(a.patient_id),
            admitted_by=staff.get(a.admitted_by_id),
        )
        for a in admissions
    ]


_ADMISSION_FIELDS = {
    'patientId': 'patient_id',
    'doctorId': 'admitted_by_id',
    'roomNumber': 'room_number',
    'bedNumber': 'bed_number',
    'admissionDate': 'admission_date',
    'diagnosis': 'diagnosis',
    'treatmentPlan': 'treatment_plan',
    'status': 'status',
}


def save_admission(data: dict, admission: Optional[Admission] = None) -> Admission:
    admission = admission or Admission()
    for key, attr in _ADMISSION_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        if key in ('diagnosis', 'treatmentPlan'):
            value = clean_text(value)
        elif key == 'admissionDate' and value is None:
            value = timezone.now()
        setattr(admission, attr, value)
    admission.save()
    return admission


def discharge(admission_id, discharge_date=None) -> Admission:
    admission = get_or_404(Admission, admission_id)
    admission.status = Admission.STATUS_DISCHARGED
    admission.discharge_date = discharge_date or timezone.now()
    admission.save(update_fields=['status', 'discharge_date', 'updated_at'])
    logger.info('admission %s discharged at %s', admission.id, admission.discharge_date)
    return admission
