"""
Integration tests for the hospital management API.

These drive the REST endpoints end to end through DRF's APIClient:
patient and staff records, attendance upserts, the bill payment
lifecycle, insurance claim status changes and the finance statistics.

To run the tests:

```
pytest -q clinic/tests
```
"""
import uuid
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from clinic.models import Attendance, Bill, InsuranceClaim, Patient
from .factories import make_bill, make_patient, make_staff


class PatientAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()

    def test_create_and_fetch_patient(self):
        r = self.client.post('/api/patients', {
            'name': '  Priya Singh ',
            'age': 34,
            'gender': 'Female',
            'contactNumber': '9000000002',
            'email': ' Priya@Example.COM ',
            'address': '4 Park Street',
            'allergies': ['Penicillin'],
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['name'], 'Priya Singh')
        self.assertEqual(r.data['email'], 'priya@example.com')
        self.assertEqual(r.data['medicalHistory'], '')

        r = self.client.get(f"/api/patients/{r.data['_id']}")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['allergies'], ['Penicillin'])

    def test_missing_required_fields(self):
        r = self.client.post('/api/patients', {'name': 'No Age'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('age', r.data['errors'])
        self.assertTrue(r.data['message'])

    def test_unknown_and_malformed_ids_are_404(self):
        r = self.client.get(f'/api/patients/{uuid.uuid4()}')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data, {'message': 'Patient not found'})
        r = self.client.get('/api/patients/not-an-id')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_and_delete_patient(self):
        patient = make_patient()
        r = self.client.put(f'/api/patients/{patient.id}', {'age': 43}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['age'], 43)
        self.assertEqual(r.data['name'], 'Rahul Verma')

        r = self.client.delete(f'/api/patients/{patient.id}')
        self.assertEqual(r.data, {'message': 'Patient removed'})
        self.assertFalse(Patient.objects.filter(pk=patient.id).exists())

    def test_deleted_patient_shows_null_on_bills(self):
        patient = make_patient()
        make_bill(patient)
        pk = patient.id
        patient.delete()
        r = self.client.get('/api/finance/bills')
        self.assertEqual(len(r.data), 1)
        self.assertIsNone(r.data[0]['patient'])
        r = self.client.get(f'/api/finance/bills/patient/{pk}')
        self.assertEqual(len(r.data), 1)
        self.assertEqual(r.data[0]['patient'], str(pk))


class AppointmentAdmissionAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.patient = make_patient()
        self.doctor = make_staff()

    def test_appointment_status_lifecycle(self):
        r = self.client.post('/api/patients/appointments', {
            'patientId': str(self.patient.id),
            'doctorId': str(self.doctor.id),
            'date': timezone.localdate().isoformat(),
            'time': '10:30 AM',
            'purpose': 'Follow-up',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['status'], 'Scheduled')
        self.assertEqual(r.data['doctor']['name'], 'Dr. Ananya Rao')
        appointment_id = r.data['_id']

        r = self.client.patch(f'/api/patients/appointments/{appointment_id}/status', {'status': 'Completed'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['status'], 'Completed')

        # No transition graph: a completed appointment may go back to Scheduled
        r = self.client.patch(f'/api/patients/appointments/{appointment_id}/status', {'status': 'Scheduled'}, format='json')
        self.assertEqual(r.data['status'], 'Scheduled')

        r = self.client.patch(f'/api/patients/appointments/{appointment_id}/status', {'status': 'Teleported'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid status value', r.data['message'])

        r = self.client.get(f'/api/patients/{self.patient.id}/appointments')
        self.assertEqual(len(r.data), 1)
        r = self.client.get(f'/api/staff/{self.doctor.id}/appointments')
        self.assertEqual(r.data[0]['patient']['name'], 'Rahul Verma')

    def test_admission_discharge(self):
        r = self.client.post('/api/patients/admissions', {
            'patientId': str(self.patient.id),
            'doctorId': str(self.doctor.id),
            'roomNumber': '101',
            'bedNumber': 'A',
            'diagnosis': 'Pneumonia',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['status'], 'Admitted')
        self.assertEqual(r.data['admittedBy']['department'], 'Cardiology')
        admission_id = r.data['_id']

        r = self.client.patch(f'/api/patients/admissions/{admission_id}/discharge', {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['status'], 'Discharged')
        self.assertIsNotNone(r.data['dischargeDate'])

    def test_unknown_id_is_404_before_body_validation(self):
        r = self.client.patch(f'/api/patients/appointments/{uuid.uuid4()}/status', {'status': 'Teleported'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['message'], 'Appointment not found')
        r = self.client.patch(f'/api/patients/admissions/{uuid.uuid4()}/discharge', {'dischargeDate': 'not-a-date'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['message'], 'Admission not found')


class StaffAttendanceAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.nurse = make_staff('NUR001', name='Kavya Nair', role='Nurse', department='General')

    def test_duplicate_staff_id_and_email_rejected(self):
        payload = {
            'name': 'Someone Else',
            'staffId': 'NUR001',
            'role': 'Nurse',
            'department': 'General',
            'contactNumber': '9800000009',
            'email': 'other@hospital.example',
        }
        r = self.client.post('/api/staff', payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('staffId', r.data['errors'])

        payload.update(staffId='NUR002', email='NUR001@hospital.example')
        r = self.client.post('/api/staff', payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', r.data['errors'])

    def test_staff_filters(self):
        make_staff('DOC001')
        r = self.client.get('/api/staff/role/Doctor')
        self.assertEqual([s['staffId'] for s in r.data], ['DOC001'])
        r = self.client.get('/api/staff/department/General')
        self.assertEqual([s['staffId'] for s in r.data], ['NUR001'])

    def test_marking_twice_updates_the_same_record(self):
        today = timezone.localdate().isoformat()
        r = self.client.post('/api/staff/attendance', {
            'staffId': str(self.nurse.id), 'date': today, 'checkIn': '09:00',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['status'], 'Present')
        self.assertEqual(r.data['staff']['staffId'], 'NUR001')

        r = self.client.post('/api/staff/attendance', {
            'staffId': str(self.nurse.id), 'date': today, 'checkOut': '17:30',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['checkIn'], '09:00')
        self.assertEqual(r.data['checkOut'], '17:30')
        self.assertEqual(Attendance.objects.filter(staff=self.nurse).count(), 1)

        r = self.client.get(f'/api/staff/attendance/date/{today}')
        self.assertEqual(len(r.data), 1)
        r = self.client.get(f'/api/staff/attendance/staff/{self.nurse.id}')
        self.assertEqual(len(r.data), 1)

    def test_attendance_for_unknown_staff_is_404(self):
        r = self.client.post('/api/staff/attendance', {'staffId': str(uuid.uuid4()), 'checkIn': '09:00'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_blank_check_in_keeps_recorded_time(self):
        today = timezone.localdate().isoformat()
        r = self.client.post('/api/staff/attendance', {
            'staffId': str(self.nurse.id), 'date': today, 'checkIn': '',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data['checkIn'])

        Attendance.objects.filter(staff=self.nurse).update(check_in='09:00')
        r = self.client.post('/api/staff/attendance', {
            'staffId': str(self.nurse.id), 'date': today, 'checkIn': '', 'status': 'Late',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['checkIn'], '09:00')
        self.assertEqual(r.data['status'], 'Late')

    def test_moving_attendance_onto_taken_day_is_rejected(self):
        today = timezone.localdate()
        Attendance.objects.create(staff=self.nurse, date=today, check_in='09:00')
        other = Attendance.objects.create(staff=self.nurse, date=today - timedelta(days=1), check_in='09:10')
        r = self.client.put(f'/api/staff/attendance/{other.id}', {'date': today.isoformat()}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)


class BillingAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.patient = make_patient()

    def _create_bill(self, total=1000):
        r = self.client.post('/api/finance/bills', {
            'patient': str(self.patient.id),
            'billType': 'Consultation',
            'items': [{'name': 'Consultation', 'quantity': 1, 'unitPrice': total, 'amount': total}],
            'totalAmount': total,
            'dueDate': (timezone.localdate() + timedelta(days=15)).isoformat(),
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        return r.data

    def test_payment_lifecycle(self):
        bill = self._create_bill()
        self.assertEqual(bill['paymentStatus'], 'Pending')
        self.assertEqual(bill['paidAmount'], 0.0)
        url = f"/api/finance/bills/{bill['_id']}/payments"

        r = self.client.post(url, {'amount': 400}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['message'], 'Payment recorded successfully')
        self.assertEqual(r.data['bill']['paidAmount'], 400.0)
        self.assertEqual(r.data['bill']['paymentStatus'], 'Partial')

        r = self.client.post(url, {'amount': 600, 'method': 'Debit Card'}, format='json')
        self.assertEqual(r.data['bill']['paymentStatus'], 'Paid')

        r = self.client.post(url, {'amount': 1}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['message'], 'Payment amount exceeds remaining balance. Maximum payment allowed: ₹0.00')

        r = self.client.get(f"/api/finance/bills/{bill['_id']}")
        self.assertEqual(r.data['paidAmount'], 1000.0)
        self.assertEqual([p['method'] for p in r.data['payments']], ['Cash', 'Debit Card'])
        self.assertEqual(r.data['patient']['email'], 'rahul@example.com')

    def test_invalid_payment_amounts(self):
        bill = self._create_bill()
        url = f"/api/finance/bills/{bill['_id']}/payments"
        for payload in ({'amount': -5}, {'amount': 0}, {'amount': 'abc'}, {}):
            r = self.client.post(url, payload, format='json')
            self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST, payload)
            self.assertIn('Valid payment amount is required', r.data['message'])
        self.assertEqual(Bill.objects.get(pk=bill['_id']).paid_amount, 0)

    def test_payment_on_unknown_bill_is_404(self):
        r = self.client.post(f'/api/finance/bills/{uuid.uuid4()}/payments', {'amount': 5}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data['message'], 'Bill not found')

    def test_float_amounts_are_rounded_to_cents(self):
        bill = self._create_bill(total=99.999)
        self.assertEqual(bill['totalAmount'], 100.0)
        url = f"/api/finance/bills/{bill['_id']}/payments"

        r = self.client.post(url, {'amount': 0.1 + 0.2}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['bill']['paidAmount'], 0.3)

        r = self.client.post(url, {'amount': 33.333}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['bill']['paidAmount'], 33.63)

        # Rounds down to nothing
        r = self.client.post(url, {'amount': 0.001}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Bill.objects.get(pk=bill['_id']).paid_amount, Decimal('33.63'))

    def test_bills_by_status(self):
        make_bill(self.patient, due_in_days=5)
        make_bill(self.patient, due_in_days=1)
        make_bill(self.patient, paid='1000.00', status=Bill.STATUS_PAID)
        r = self.client.get('/api/finance/bills/status/Pending')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(len(r.data), 2)
        self.assertLess(r.data[0]['dueDate'], r.data[1]['dueDate'])

        r = self.client.get('/api/finance/bills/status/Lost')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_bill(self):
        bill = self._create_bill()
        r = self.client.delete(f"/api/finance/bills/{bill['_id']}")
        self.assertEqual(r.data, {'message': 'Bill deleted successfully', 'id': bill['_id']})
        r = self.client.delete(f"/api/finance/bills/{bill['_id']}")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_revenue_cache_invalidated_by_payment(self):
        bill = self._create_bill()
        r = self.client.get('/api/finance/stats/revenue')
        self.assertEqual(r.data['totalPaid'], 0.0)
        self.assertEqual(len(r.data['labels']), 6)

        self.client.post(f"/api/finance/bills/{bill['_id']}/payments", {'amount': 400}, format='json')
        r = self.client.get('/api/finance/stats/revenue')
        self.assertEqual(r.data['totalPaid'], 400.0)
        self.assertEqual(r.data['monthlyData'][-1]['revenue'], 400.0)

    def test_revenue_rejects_inverted_range(self):
        r = self.client.get('/api/finance/stats/revenue', {'startDate': '2024-05-01', 'endDate': '2024-01-01'})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pending_and_overdue_stats(self):
        make_bill(self.patient, paid='250.00', status=Bill.STATUS_PARTIAL, due_in_days=-2)
        r = self.client.get('/api/finance/stats/pending')
        self.assertEqual(r.data['count'], 1)
        self.assertEqual(r.data['totalPending'], 750.0)
        r = self.client.get('/api/finance/stats/overdue')
        self.assertEqual(r.data['count'], 1)
        self.assertEqual(r.data['totalOverdue'], 750.0)


class InsuranceAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.patient = make_patient()
        self.bill = make_bill(self.patient)

    def _submit(self, amount=1000):
        r = self.client.post('/api/finance/insurance', {
            'patient': str(self.patient.id),
            'bill': str(self.bill.id),
            'insuranceProvider': 'Star Health',
            'policyNumber': 'POL123456',
            'claimAmount': amount,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        return r.data

    def test_approval_does_not_touch_bill(self):
        claim = self._submit()
        self.assertEqual(claim['status'], 'Submitted')

        r = self.client.patch(f"/api/finance/insurance/{claim['_id']}/status",
                              {'status': 'Approved', 'approvedAmount': 800}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['status'], 'Approved')
        self.assertEqual(r.data['approvedAmount'], 800.0)
        self.assertIsNotNone(r.data['approvalDate'])

        self.bill.refresh_from_db()
        self.assertEqual(self.bill.total_amount, 1000)
        self.assertEqual(self.bill.paid_amount, 0)
        self.assertEqual(self.bill.payment_status, Bill.STATUS_PENDING)

    def test_status_validation(self):
        claim = self._submit()
        url = f"/api/finance/insurance/{claim['_id']}/status"
        r = self.client.patch(url, {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Status is required', r.data['message'])
        r = self.client.patch(url, {'status': 'Maybe'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.client.patch(f'/api/finance/insurance/{uuid.uuid4()}/status', {'status': 'Approved'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_missing_claim_fields(self):
        r = self.client.post('/api/finance/insurance', {'patient': str(self.patient.id)}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('bill', 'insuranceProvider', 'policyNumber', 'claimAmount'):
            self.assertIn(field, r.data['errors'])

    def test_claim_survives_bill_deletion(self):
        claim = self._submit()
        self.client.delete(f'/api/finance/bills/{self.bill.id}')
        r = self.client.get(f"/api/finance/insurance/{claim['_id']}")
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertIsNone(r.data['bill'])
        self.assertEqual(r.data['patient']['name'], 'Rahul Verma')

    def test_listing_and_delete(self):
        claim = self._submit()
        self._submit(500)
        r = self.client.get('/api/finance/insurance')
        self.assertEqual(len(r.data), 2)
        self.assertEqual(r.data[0]['bill']['totalAmount'], 1000.0)
        r = self.client.get('/api/finance/insurance/status/Submitted')
        self.assertEqual(len(r.data), 2)
        self.assertEqual(set(r.data[0]['patient']), {'_id', 'name'})
        r = self.client.get('/api/finance/insurance/status/Unknown')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.client.get(f'/api/finance/insurance/patient/{self.patient.id}')
        self.assertEqual(len(r.data), 2)

        r = self.client.delete(f"/api/finance/insurance/{claim['_id']}")
        self.assertEqual(r.data, {'message': 'Insurance claim deleted successfully', 'id': claim['_id']})
        self.assertEqual(InsuranceClaim.objects.count(), 1)


class HealthTests(APITestCase):
    def test_healthz(self):
        r = self.client.get('/healthz')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {'ok': True, 'db': True})
