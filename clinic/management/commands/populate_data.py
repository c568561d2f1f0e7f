"""
Management command to populate the database with demo data.

Staff are keyed on their staff ID and patients on their contact number,
so running the command twice does not duplicate them.  Bills receive
their payments through ``record_payment`` so paid amounts and statuses
are consistent with what the API would have produced.
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import Admission, Appointment, Attendance, Bill, InsuranceClaim, Patient, Staff
from clinic.services.billing import create_bill, record_payment


class Command(BaseCommand):
    help = 'Populate database with demo patients, staff, appointments, bills and claims'

    def add_arguments(self, parser):
        parser.add_argument('--seed', type=int, default=None, help='Random seed for repeatable data')

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])
        self.stdout.write('Creating demo data...')

        staff = self.create_staff()
        patients = self.create_patients()
        appointments = self.create_appointments(patients, staff)
        admissions = self.create_admissions(patients, staff)
        self.create_attendance(staff)
        bills = self.create_bills(patients, appointments, admissions)
        self.create_claims(bills)

        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def create_staff(self):
        staff_data = [
            ('DOC001', 'Dr. Ananya Rao', 'Doctor', 'Cardiology', 'MD Cardiology'),
            ('DOC002', 'Dr. Vikram Shah', 'Doctor', 'Neurology', 'DM Neurology'),
            ('DOC003', 'Dr. Meera Iyer', 'Doctor', 'Pediatrics', 'MD Pediatrics'),
            ('NUR001', 'Kavya Nair', 'Nurse', 'General', 'B.Sc Nursing'),
            ('NUR002', 'Rohan Das', 'Nurse', 'Emergency', 'B.Sc Nursing'),
            ('REC001', 'Sneha Patel', 'Receptionist', 'Administration', None),
            ('LAB001', 'Arjun Menon', 'Lab Technician', 'General', 'DMLT'),
        ]
        week = [
            {'day': day, 'startTime': '09:00', 'endTime': '17:00'}
            for day in ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday')
        ]
        staff = []
        for staff_id, name, role, department, qualification in staff_data:
            member, created = Staff.objects.get_or_create(
                staff_id=staff_id,
                defaults={
                    'name': name,
                    'role': role,
                    'department': department,
                    'contact_number': f'98{random.randint(10000000, 99999999)}',
                    'email': f'{staff_id.lower()}@hospital.example',
                    'qualification': qualification,
                    'schedule': week,
                },
            )
            staff.append(member)
        self.stdout.write(f'  staff: {len(staff)}')
        return staff

    def create_patients(self):
        names = ['Rahul Verma', 'Priya Singh', 'Amit Kumar', 'Neha Gupta', 'Suresh Reddy',
                 'Pooja Joshi', 'Karan Malhotra', 'Divya Pillai']
        patients = []
        for i, name in enumerate(names):
            patient, created = Patient.objects.get_or_create(
                contact_number=f'90000000{i:02d}',
                defaults={
                    'name': name,
                    'age': random.randint(18, 80),
                    'gender': random.choice(['Male', 'Female']),
                    'email': f"{name.split()[0].lower()}@example.com",
                    'address': f'{random.randint(1, 200)} MG Road, Bengaluru',
                    'blood_group': random.choice([g for g, _ in Patient.BLOOD_GROUP_CHOICES]),
                    'medical_history': random.choice(['', 'Hypertension', 'Type 2 diabetes', 'Asthma']),
                    'allergies': random.choice([[], ['Penicillin'], ['Peanuts', 'Dust']]),
                },
            )
            patients.append(patient)
        self.stdout.write(f'  patients: {len(patients)}')
        return patients

    def create_appointments(self, patients, staff):
        doctors = [s for s in staff if s.role == 'Doctor']
        today = timezone.localdate()
        appointments = []
        for patient in patients:
            appointments.append(Appointment.objects.create(
                patient=patient,
                doctor=random.choice(doctors),
                date=today + timedelta(days=random.randint(-30, 14)),
                time=random.choice(['09:30 AM', '11:00 AM', '02:15 PM', '04:00 PM']),
                status=random.choice([c for c, _ in Appointment.STATUS_CHOICES]),
                purpose=random.choice(['Follow-up', 'General checkup', 'Chest pain', 'Fever']),
            ))
        self.stdout.write(f'  appointments: {len(appointments)}')
        return appointments

    def create_admissions(self, patients, staff):
        doctors = [s for s in staff if s.role == 'Doctor']
        admissions = []
        for i, patient in enumerate(patients[:3]):
            admitted = timezone.now() - timedelta(days=random.randint(1, 20))
            discharged = i == 0
            admissions.append(Admission.objects.create(
                patient=patient,
                admitted_by=random.choice(doctors),
                room_number=f'{100 + i}',
                bed_number=random.choice(['A', 'B']),
                admission_date=admitted,
                discharge_date=admitted + timedelta(days=3) if discharged else None,
                diagnosis=random.choice(['Pneumonia', 'Fracture', 'Observation']),
                status=Admission.STATUS_DISCHARGED if discharged else Admission.STATUS_ADMITTED,
            ))
        self.stdout.write(f'  admissions: {len(admissions)}')
        return admissions

    def create_attendance(self, staff):
        today = timezone.localdate()
        count = 0
        for offset in range(5):
            day = today - timedelta(days=offset)
            for member in staff:
                _, created = Attendance.objects.get_or_create(
                    staff=member,
                    date=day,
                    defaults={
                        'check_in': random.choice(['08:55', '09:00', '09:20']),
                        'check_out': '17:30',
                        'status': random.choice(['Present', 'Present', 'Late', 'Half Day']),
                    },
                )
                count += created
        self.stdout.write(f'  attendance records: {count}')

    def create_bills(self, patients, appointments, admissions):
        now = timezone.now()
        bills = []
        for i, patient in enumerate(patients):
            items = [
                {'name': 'Consultation fee', 'quantity': 1, 'unitPrice': 500, 'amount': 500},
                {'name': 'Blood test', 'quantity': 1, 'unitPrice': random.choice([300, 800]), 'amount': 0},
            ]
            items[1]['amount'] = items[1]['unitPrice']
            total = sum(Decimal(str(item['amount'])) for item in items)
            bill_date = now - timedelta(days=30 * random.randint(0, 5) + random.randint(0, 20))
            bill = create_bill({
                'patient': patient.id,
                'appointment': appointments[i].id,
                'admission': admissions[i].id if i < len(admissions) else None,
                'billType': random.choice(['Consultation', 'Laboratory']),
                'items': items,
                'totalAmount': total,
                'billDate': bill_date,
                'dueDate': (bill_date + timedelta(days=15)).date(),
            })
            share = random.choice([Decimal('0'), Decimal('0.5'), Decimal('1')])
            if share:
                method = random.choice([c for c, _ in Bill.PAYMENT_METHOD_CHOICES])
                bill = record_payment(bill.id, (total * share).quantize(Decimal('0.01')), method)
            bills.append(bill)
        self.stdout.write(f'  bills: {len(bills)}')
        return bills

    def create_claims(self, bills):
        count = 0
        for bill in bills[:4]:
            status = random.choice([c for c, _ in InsuranceClaim.STATUS_CHOICES])
            approved = status in InsuranceClaim.APPROVAL_STATUSES
            InsuranceClaim.objects.create(
                patient_id=bill.patient_id,
                bill=bill,
                insurance_provider=random.choice(['Star Health', 'HDFC Ergo', 'ICICI Lombard']),
                policy_number=f'POL{random.randint(100000, 999999)}',
                claim_amount=bill.total_amount,
                approved_amount=bill.total_amount * Decimal('0.8') if approved else None,
                status=status,
                approval_date=timezone.now() if approved else None,
                rejection_reason='Pre-existing condition' if status == InsuranceClaim.STATUS_REJECTED else None,
            )
            count += 1
        self.stdout.write(f'  insurance claims: {count}')
