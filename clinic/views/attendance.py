"""
Attendance views.

POST marks attendance for a staff member on a day: the first mark
creates the record (201), later marks on the same day update the fields
they carry (200).
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import Attendance
from clinic.serializers.staff import (
    AttendanceDaySerializer,
    AttendanceMarkSerializer,
    AttendanceRangeSerializer,
    AttendanceUpdateSerializer,
)
from clinic.services.staff import attendance_for, attendance_on, format_attendance, mark_attendance, update_attendance
from clinic.services.updates import broadcast_refresh


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def attendance(request):
    if request.method == 'GET':
        return Response(format_attendance(Attendance.objects.order_by('-date', '-created_at')))
    s = AttendanceMarkSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record, created = mark_attendance(s.validated_data)
    broadcast_refresh('attendance')
    return Response(format_attendance([record])[0], status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([AllowAny])
def attendance_by_date(request, day):
    s = AttendanceDaySerializer(data={'date': day})
    s.is_valid(raise_exception=True)
    return Response(format_attendance(attendance_on(s.validated_data['date'])))


@api_view(['GET'])
@permission_classes([AllowAny])
def attendance_by_staff(request, staff_id):
    q = AttendanceRangeSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    records = attendance_for(staff_id, q.validated_data.get('startDate'), q.validated_data.get('endDate'))
    return Response(format_attendance(records))


@api_view(['PUT'])
@permission_classes([AllowAny])
def attendance_detail(request, pk):
    s = AttendanceUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    record = update_attendance(pk, s.validated_data)
    broadcast_refresh('attendance')
    return Response(format_attendance([record])[0])
