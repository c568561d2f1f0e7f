from rest_framework import serializers

from clinic.models import Admission, Appointment, Patient
from .common import DateInput, DateTimeInput, choice_values


class PatientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=0, max_value=150)
    gender = serializers.ChoiceField(choices=choice_values(Patient.GENDER_CHOICES))
    contactNumber = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField()
    bloodGroup = serializers.ChoiceField(
        choices=choice_values(Patient.BLOOD_GROUP_CHOICES), required=False, allow_blank=True, allow_null=True
    )
    medicalHistory = serializers.CharField(required=False, allow_blank=True)
    emergencyContact = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    allergies = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    currentMedications = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    def validate_name(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_email(self, v):
        return (v or '').strip().lower() or None


class AppointmentSerializer(serializers.Serializer):
    patientId = serializers.UUIDField()
    doctorId = serializers.UUIDField()
    date = DateInput()
    time = serializers.CharField(max_length=20)
    status = serializers.ChoiceField(choices=choice_values(Appointment.STATUS_CHOICES), required=False)
    purpose = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=choice_values(Appointment.STATUS_CHOICES),
        error_messages={'invalid_choice': 'Invalid status value'},
    )


class AdmissionSerializer(serializers.Serializer):
    patientId = serializers.UUIDField()
    doctorId = serializers.UUIDField()
    roomNumber = serializers.CharField(max_length=20)
    bedNumber = serializers.CharField(max_length=20)
    admissionDate = DateTimeInput(required=False, allow_null=True)
    diagnosis = serializers.CharField()
    treatmentPlan = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=choice_values(Admission.STATUS_CHOICES), required=False)


class DischargeSerializer(serializers.Serializer):
    dischargeDate = DateTimeInput(required=False, allow_null=True)
