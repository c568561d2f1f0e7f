"""
Patient registration views.

Deleting a patient removes only the patient document; appointments,
admissions, bills and claims that reference it stay in place and show a
``null`` patient from then on.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import Admission, Appointment, Patient
from clinic.serializers.patient import PatientSerializer
from clinic.services.common import get_or_404
from clinic.services.records import (
    delete_patient,
    format_admissions,
    format_appointments,
    format_patient,
    save_patient,
)
from clinic.services.updates import broadcast_refresh


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def patients(request):
    if request.method == 'GET':
        qs = Patient.objects.order_by('-created_at')
        return Response([format_patient(p) for p in qs])
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = save_patient(s.validated_data)
    broadcast_refresh('patients')
    return Response(format_patient(patient), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def patient_detail(request, pk):
    if request.method == 'DELETE':
        delete_patient(pk)
        broadcast_refresh('patients')
        return Response({'message': 'Patient removed'})
    patient = get_or_404(Patient, pk)
    if request.method == 'GET':
        return Response(format_patient(patient))
    s = PatientSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = save_patient(s.validated_data, patient)
    broadcast_refresh('patients')
    return Response(format_patient(patient))


@api_view(['GET'])
@permission_classes([AllowAny])
def patient_appointments(request, pk):
    patient = get_or_404(Patient, pk)
    qs = Appointment.objects.filter(patient=patient).order_by('-date')
    return Response(format_appointments(qs, populate_patient=False))


@api_view(['GET'])
@permission_classes([AllowAny])
def patient_admissions(request, pk):
    patient = get_or_404(Patient, pk)
    qs = Admission.objects.filter(patient=patient).order_by('-admission_date')
    return Response(format_admissions(qs, populate_patient=False))
