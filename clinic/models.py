"""
Database models for the hospital management API.

Every record carries a generated UUID identity.  Relationships are plain
references: foreign keys are declared without database constraints and
with ``DO_NOTHING`` so that deleting a patient, staff member or bill
never cascades and never fails because something still points at it.
Readers resolve references through ``in_bulk`` lookups and treat a
missing target as ``None`` (see ``clinic.services.common.resolve``).
"""
from __future__ import annotations

import uuid

from django.db import models
from django.utils import timezone


def _reference(to: str, related_name: str, **kwargs) -> models.ForeignKey:
    return models.ForeignKey(
        to,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name=related_name,
        **kwargs,
    )


class Document(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Patient(Document):
    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    ]
    BLOOD_GROUP_CHOICES = [
        (g, g) for g in ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')
    ]
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    contact_number = models.CharField(max_length=32)
    email = models.EmailField(blank=True, null=True)
    address = models.TextField()
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES, blank=True, null=True)
    medical_history = models.TextField(blank=True, default='')
    emergency_contact = models.CharField(max_length=255, blank=True, null=True)
    allergies = models.JSONField(default=list, blank=True)
    current_medications = models.JSONField(default=list, blank=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Staff(Document):
    ROLE_CHOICES = [
        ('Doctor', 'Doctor'),
        ('Nurse', 'Nurse'),
        ('Receptionist', 'Receptionist'),
        ('Lab Technician', 'Lab Technician'),
        ('Admin', 'Admin'),
        ('Other', 'Other'),
    ]
    DEPARTMENT_CHOICES = [
        ('Cardiology', 'Cardiology'),
        ('Neurology', 'Neurology'),
        ('Pediatrics', 'Pediatrics'),
        ('Orthopedics', 'Orthopedics'),
        ('Gynecology', 'Gynecology'),
        ('General', 'General'),
        ('Emergency', 'Emergency'),
        ('Administration', 'Administration'),
    ]
    name = models.CharField(max_length=255)
    staff_id = models.CharField(max_length=50, unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, db_index=True)
    department = models.CharField(max_length=20, choices=DEPARTMENT_CHOICES, db_index=True)
    contact_number = models.CharField(max_length=32)
    email = models.EmailField(unique=True)
    joining_date = models.DateField(default=timezone.localdate)
    qualification = models.CharField(max_length=255, blank=True, null=True)
    # [{"day": "Monday", "startTime": "09:00", "endTime": "17:00"}, ...]
    schedule = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name_plural = 'staff'

    def __str__(self) -> str:
        return f"{self.name} ({self.staff_id})"


class Appointment(Document):
    STATUS_SCHEDULED = 'Scheduled'
    STATUS_CHOICES = [
        ('Scheduled', 'Scheduled'),
        ('Confirmed', 'Confirmed'),
        ('Completed', 'Completed'),
        ('Cancelled', 'Cancelled'),
        ('No-Show', 'No-Show'),
    ]
    patient = _reference('Patient', 'appointments')
    doctor = _reference('Staff', 'appointments')
    date = models.DateField()
    # Kept as the string the front desk typed ("10:30 AM"), never combined with date
    time = models.CharField(max_length=20)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    purpose = models.CharField(max_length=255)
    notes = models.TextField(blank=True, null=True)

    def __str__(self) -> str:
        return f"Appointment {self.date} {self.time} ({self.status})"


class Admission(Document):
    STATUS_ADMITTED = 'Admitted'
    STATUS_DISCHARGED = 'Discharged'
    STATUS_CHOICES = [
        (STATUS_ADMITTED, 'Admitted'),
        (STATUS_DISCHARGED, 'Discharged'),
    ]
    patient = _reference('Patient', 'admissions')
    admitted_by = _reference('Staff', 'admissions')
    room_number = models.CharField(max_length=20)
    bed_number = models.CharField(max_length=20)
    admission_date = models.DateTimeField(default=timezone.now)
    discharge_date = models.DateTimeField(blank=True, null=True)
    diagnosis = models.TextField()
    treatment_plan = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ADMITTED, db_index=True)

    def __str__(self) -> str:
        return f"Admission room {self.room_number}/{self.bed_number} ({self.status})"


class Attendance(Document):
    STATUS_PRESENT = 'Present'
    STATUS_CHOICES = [
        ('Present', 'Present'),
        ('Absent', 'Absent'),
        ('Late', 'Late'),
        ('Half Day', 'Half Day'),
        ('On Leave', 'On Leave'),
    ]
    staff = _reference('Staff', 'attendance')
    date = models.DateField(default=timezone.localdate)
    check_in = models.CharField(max_length=20)
    check_out = models.CharField(max_length=20, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PRESENT)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['staff', 'date'], name='attendance_one_per_staff_per_day'),
        ]

    def __str__(self) -> str:
        return f"{self.staff_id} on {self.date}: {self.status}"


class Bill(Document):
    STATUS_PENDING = 'Pending'
    STATUS_PARTIAL = 'Partial'
    STATUS_PAID = 'Paid'
    STATUS_OVERDUE = 'Overdue'
    PAYMENT_STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PARTIAL, 'Partial'),
        (STATUS_PAID, 'Paid'),
        (STATUS_OVERDUE, 'Overdue'),
    ]
    BILL_TYPE_CHOICES = [
        ('Consultation', 'Consultation'),
        ('Room Charge', 'Room Charge'),
        ('Laboratory', 'Laboratory'),
        ('Medication', 'Medication'),
        ('Other', 'Other'),
        ('Surgery', 'Surgery'),
        ('Lab Test', 'Lab Test'),
    ]
    PAYMENT_METHOD_CASH = 'Cash'
    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_METHOD_CASH, 'Cash'),
        ('Credit Card', 'Credit Card'),
        ('Debit Card', 'Debit Card'),
        ('Insurance', 'Insurance'),
        ('Online Payment', 'Online Payment'),
    ]
    OPEN_STATUSES = (STATUS_PENDING, STATUS_PARTIAL)

    patient = _reference('Patient', 'bills')
    admission = _reference('Admission', 'bills', null=True, blank=True)
    appointment = _reference('Appointment', 'bills', null=True, blank=True)
    bill_type = models.CharField(max_length=20, choices=BILL_TYPE_CHOICES, db_index=True)
    # [{"name", "description", "quantity", "unitPrice", "amount"}]; amount is authoritative
    items = models.JSONField(default=list, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    payment_status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default=STATUS_PENDING, db_index=True
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True, null=True)
    bill_date = models.DateTimeField(default=timezone.now, db_index=True)
    due_date = models.DateField()
    # Bumped on every payment; record_payment writes compare-and-swap on it
    version = models.PositiveIntegerField(default=0)

    class Meta:
        indexes = [
            models.Index(fields=['payment_status', 'due_date'], name='bill_status_due_idx'),
        ]

    @property
    def balance(self):
        return self.total_amount - self.paid_amount

    def __str__(self) -> str:
        return f"Bill {self.id} {self.paid_amount}/{self.total_amount} ({self.payment_status})"


class BillPayment(models.Model):
    """One payment applied to a bill through the payments endpoint."""
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateTimeField(default=timezone.now)
    method = models.CharField(max_length=20, default=Bill.PAYMENT_METHOD_CASH)

    class Meta:
        ordering = ['date', 'id']

    def __str__(self) -> str:
        return f"{self.amount} via {self.method} on {self.bill_id}"


class InsuranceClaim(Document):
    STATUS_SUBMITTED = 'Submitted'
    STATUS_IN_PROCESS = 'In Process'
    STATUS_APPROVED = 'Approved'
    STATUS_REJECTED = 'Rejected'
    STATUS_PARTIALLY_APPROVED = 'Partially Approved'
    STATUS_CHOICES = [
        (STATUS_SUBMITTED, 'Submitted'),
        (STATUS_IN_PROCESS, 'In Process'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_PARTIALLY_APPROVED, 'Partially Approved'),
    ]
    APPROVAL_STATUSES = (STATUS_APPROVED, STATUS_PARTIALLY_APPROVED)

    patient = _reference('Patient', 'insurance_claims')
    # Several claims may point at the same bill
    bill = _reference('Bill', 'insurance_claims')
    insurance_provider = models.CharField(max_length=255)
    policy_number = models.CharField(max_length=100)
    claim_amount = models.DecimalField(max_digits=12, decimal_places=2)
    approved_amount = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED, db_index=True)
    submission_date = models.DateTimeField(default=timezone.now)
    approval_date = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    def __str__(self) -> str:
        return f"Claim {self.policy_number} ({self.status})"
