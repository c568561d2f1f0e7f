from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import Appointment, Staff
from clinic.serializers.staff import StaffSerializer
from clinic.services.common import get_or_404
from clinic.services.records import format_appointments
from clinic.services.staff import delete_staff, format_staff, save_staff, schedule_for
from clinic.services.updates import broadcast_refresh


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def staff_list(request):
    if request.method == 'GET':
        return Response([format_staff(s) for s in Staff.objects.order_by('name')])
    s = StaffSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    staff = save_staff(s.validated_data)
    broadcast_refresh('staff')
    return Response(format_staff(staff), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def staff_detail(request, pk):
    if request.method == 'DELETE':
        delete_staff(pk)
        broadcast_refresh('staff')
        return Response({'message': 'Staff removed'})
    staff = get_or_404(Staff, pk, 'Staff member')
    if request.method == 'GET':
        return Response(format_staff(staff))
    s = StaffSerializer(staff, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    staff = save_staff(s.validated_data, staff)
    broadcast_refresh('staff')
    return Response(format_staff(staff))


@api_view(['GET'])
@permission_classes([AllowAny])
def staff_by_role(request, role):
    return Response([format_staff(s) for s in Staff.objects.filter(role=role).order_by('name')])


@api_view(['GET'])
@permission_classes([AllowAny])
def staff_by_department(request, department):
    return Response([format_staff(s) for s in Staff.objects.filter(department=department).order_by('name')])


@api_view(['GET'])
@permission_classes([AllowAny])
def staff_appointments(request, pk):
    """Appointments booked with this staff member, newest first."""
    staff = get_or_404(Staff, pk, 'Staff member')
    qs = Appointment.objects.filter(doctor=staff).order_by('-date', 'time')
    return Response(format_appointments(qs, populate_doctor=False))


@api_view(['GET'])
@permission_classes([AllowAny])
def staff_schedule(request, pk):
    return Response(schedule_for(pk))
