"""
Django admin registrations for the clinic models.

Lets superusers inspect and hand-correct records under ``/admin/``.
Payments are shown inline on their bill and are read-only there: new
payments must go through the payments endpoint so the bill's paid amount
and status stay consistent.
"""

from django.contrib import admin

from .models import Admission, Appointment, Attendance, Bill, BillPayment, InsuranceClaim, Patient, Staff


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('name', 'age', 'gender', 'contact_number', 'blood_group', 'created_at')
    search_fields = ('name', 'contact_number', 'email')


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'name', 'role', 'department', 'email')
    list_filter = ('role', 'department')
    search_fields = ('staff_id', 'name', 'email')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('date', 'time', 'patient_id', 'doctor_id', 'status')
    list_filter = ('status',)


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('room_number', 'bed_number', 'patient_id', 'admission_date', 'status')
    list_filter = ('status',)


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ('date', 'staff_id', 'check_in', 'check_out', 'status')
    list_filter = ('status', 'date')


class BillPaymentInline(admin.TabularInline):
    model = BillPayment
    extra = 0
    readonly_fields = ('amount', 'date', 'method')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_id', 'bill_type', 'total_amount', 'paid_amount', 'payment_status', 'due_date')
    list_filter = ('payment_status', 'bill_type')
    readonly_fields = ('paid_amount', 'version')
    inlines = [BillPaymentInline]


@admin.register(InsuranceClaim)
class InsuranceClaimAdmin(admin.ModelAdmin):
    list_display = ('policy_number', 'insurance_provider', 'bill_id', 'claim_amount', 'approved_amount', 'status')
    list_filter = ('status', 'insurance_provider')
    search_fields = ('policy_number', 'insurance_provider')
