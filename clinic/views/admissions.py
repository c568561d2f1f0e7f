from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import Admission
from clinic.serializers.patient import AdmissionSerializer, DischargeSerializer
from clinic.services.common import get_or_404
from clinic.services.records import discharge, format_admissions, save_admission
from clinic.services.updates import broadcast_refresh


def _one(admission):
    return format_admissions([admission])[0]


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def admissions(request):
    if request.method == 'GET':
        return Response(format_admissions(Admission.objects.order_by('-admission_date')))
    s = AdmissionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    admission = save_admission(s.validated_data)
    broadcast_refresh('admissions')
    return Response(_one(admission), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT'])
@permission_classes([AllowAny])
def admission_detail(request, pk):
    admission = get_or_404(Admission, pk)
    if request.method == 'GET':
        return Response(_one(admission))
    # Status may be set back to Admitted here; there is no transition graph
    s = AdmissionSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    admission = save_admission(s.validated_data, admission)
    broadcast_refresh('admissions')
    return Response(_one(admission))


@api_view(['PATCH'])
@permission_classes([AllowAny])
def admission_discharge(request, pk):
    get_or_404(Admission, pk)
    s = DischargeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    admission = discharge(pk, s.validated_data.get('dischargeDate'))
    broadcast_refresh('admissions')
    return Response(_one(admission))
