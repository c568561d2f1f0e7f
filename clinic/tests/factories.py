"""Small builders for test records."""
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from clinic.models import Bill, Patient, Staff


def make_patient(name='Rahul Verma', **kwargs):
    defaults = {
        'age': 42,
        'gender': 'Male',
        'contact_number': '9000000001',
        'email': 'rahul@example.com',
        'address': '12 MG Road',
    }
    defaults.update(kwargs)
    return Patient.objects.create(name=name, **defaults)


def make_staff(staff_id='DOC001', **kwargs):
    defaults = {
        'name': 'Dr. Ananya Rao',
        'role': 'Doctor',
        'department': 'Cardiology',
        'contact_number': '9800000001',
        'email': f'{staff_id.lower()}@hospital.example',
    }
    defaults.update(kwargs)
    return Staff.objects.create(staff_id=staff_id, **defaults)


def make_bill(patient, total='1000.00', paid='0.00', status=Bill.STATUS_PENDING, due_in_days=15, **kwargs):
    defaults = {
        'bill_type': 'Consultation',
        'items': [{'name': 'Consultation', 'amount': float(total)}],
        'due_date': timezone.localdate() + timedelta(days=due_in_days),
    }
    defaults.update(kwargs)
    return Bill.objects.create(
        patient=patient,
        total_amount=Decimal(total),
        paid_amount=Decimal(paid),
        payment_status=status,
        **defaults,
    )
