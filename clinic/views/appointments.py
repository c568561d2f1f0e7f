from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import Appointment
from clinic.serializers.patient import AppointmentSerializer, AppointmentStatusSerializer
from clinic.services.common import get_or_404
from clinic.services.records import format_appointments, save_appointment, set_appointment_status
from clinic.services.updates import broadcast_refresh


def _one(appointment):
    return format_appointments([appointment])[0]


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def appointments(request):
    if request.method == 'GET':
        return Response(format_appointments(Appointment.objects.order_by('-date', '-created_at')))
    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = save_appointment(s.validated_data)
    broadcast_refresh('appointments')
    return Response(_one(appointment), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def appointment_detail(request, pk):
    appointment = get_or_404(Appointment, pk)
    if request.method == 'GET':
        return Response(_one(appointment))
    if request.method == 'DELETE':
        pk = str(appointment.id)
        appointment.delete()
        broadcast_refresh('appointments')
        return Response({'message': 'Appointment removed', 'id': pk})
    s = AppointmentSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    appointment = save_appointment(s.validated_data, appointment)
    broadcast_refresh('appointments')
    return Response(_one(appointment))


@api_view(['PATCH'])
@permission_classes([AllowAny])
def appointment_status(request, pk):
    get_or_404(Appointment, pk)
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = set_appointment_status(pk, s.validated_data['status'])
    broadcast_refresh('appointments')
    return Response(_one(appointment))
