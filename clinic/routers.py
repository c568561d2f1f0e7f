"""
URL mappings for the hospital management API.

Paths are served without trailing slashes.  Literal segments such as
``patients/appointments`` or ``staff/attendance`` are listed before the
``<str:pk>`` routes that would otherwise swallow them; identifiers are
matched as plain strings so a malformed id gets a JSON 404 from the view.
"""
from django.urls import path, include

from .views import admissions, appointments, attendance, bills, health, insurance, patients, staff, stats

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Appointments and admissions live under /patients
    path('api/patients/appointments', appointments.appointments),
    path('api/patients/appointments/<str:pk>', appointments.appointment_detail),
    path('api/patients/appointments/<str:pk>/status', appointments.appointment_status),
    path('api/patients/admissions', admissions.admissions),
    path('api/patients/admissions/<str:pk>', admissions.admission_detail),
    path('api/patients/admissions/<str:pk>/discharge', admissions.admission_discharge),

    path('api/patients', patients.patients),
    path('api/patients/<str:pk>', patients.patient_detail),
    path('api/patients/<str:pk>/appointments', patients.patient_appointments),
    path('api/patients/<str:pk>/admissions', patients.patient_admissions),

    path('api/staff/attendance', attendance.attendance),
    path('api/staff/attendance/date/<str:day>', attendance.attendance_by_date),
    path('api/staff/attendance/staff/<str:staff_id>', attendance.attendance_by_staff),
    path('api/staff/attendance/<str:pk>', attendance.attendance_detail),
    path('api/staff/role/<str:role>', staff.staff_by_role),
    path('api/staff/department/<str:department>', staff.staff_by_department),
    path('api/staff', staff.staff_list),
    path('api/staff/<str:pk>', staff.staff_detail),
    path('api/staff/<str:pk>/appointments', staff.staff_appointments),
    path('api/staff/<str:pk>/schedule', staff.staff_schedule),

    path('api/finance/bills', bills.bills),
    path('api/finance/bills/status/<str:payment_status>', bills.bills_by_status),
    path('api/finance/bills/patient/<str:patient_id>', bills.bills_by_patient),
    path('api/finance/bills/<str:pk>', bills.bill_detail),
    path('api/finance/bills/<str:pk>/payments', bills.bill_payments),

    path('api/finance/insurance', insurance.claims),
    path('api/finance/insurance/status/<str:claim_status>', insurance.claims_by_status),
    path('api/finance/insurance/patient/<str:patient_id>', insurance.claims_by_patient),
    path('api/finance/insurance/<str:pk>', insurance.claim_detail),
    path('api/finance/insurance/<str:pk>/status', insurance.claim_status),

    path('api/finance/stats/revenue', stats.revenue_stats),
    path('api/finance/stats/pending', stats.pending_stats),
    path('api/finance/stats/overdue', stats.overdue_stats),
]
