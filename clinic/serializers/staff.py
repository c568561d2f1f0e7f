from rest_framework import serializers

from clinic.models import Attendance, Staff
from .common import DateInput, choice_values


class ScheduleEntrySerializer(serializers.Serializer):
    day = serializers.CharField(max_length=20)
    startTime = serializers.CharField(max_length=20)
    endTime = serializers.CharField(max_length=20)


class StaffSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    staffId = serializers.CharField(max_length=50)
    role = serializers.ChoiceField(choices=choice_values(Staff.ROLE_CHOICES))
    department = serializers.ChoiceField(choices=choice_values(Staff.DEPARTMENT_CHOICES))
    contactNumber = serializers.CharField(max_length=32)
    email = serializers.EmailField()
    joiningDate = DateInput(required=False)
    qualification = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    schedule = ScheduleEntrySerializer(many=True, required=False)

    def _others(self):
        qs = Staff.objects.all()
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        return qs

    def validate_name(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_staffId(self, v):
        v = v.strip()
        if self._others().filter(staff_id=v).exists():
            raise serializers.ValidationError('A staff member with this staff ID already exists')
        return v

    def validate_email(self, v):
        v = v.strip().lower()
        if self._others().filter(email=v).exists():
            raise serializers.ValidationError('A staff member with this email already exists')
        return v


class AttendanceMarkSerializer(serializers.Serializer):
    staffId = serializers.UUIDField()
    date = DateInput(required=False)
    checkIn = serializers.CharField(required=False, allow_blank=True, max_length=20)
    checkOut = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)
    status = serializers.ChoiceField(choices=choice_values(Attendance.STATUS_CHOICES), required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AttendanceUpdateSerializer(AttendanceMarkSerializer):
    staffId = serializers.UUIDField(required=False)


class AttendanceDaySerializer(serializers.Serializer):
    date = DateInput()


class AttendanceRangeSerializer(serializers.Serializer):
    startDate = DateInput(required=False)
    endDate = DateInput(required=False)
