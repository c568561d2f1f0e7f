from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import InsuranceClaim
from clinic.serializers.finance import CLAIM_STATUSES, ClaimStatusSerializer, InsuranceClaimSerializer
from clinic.services import claims as claim_service
from clinic.services.common import get_or_404, parse_uuid
from clinic.services.updates import broadcast_refresh


def _plain(claim):
    return claim_service.format_claims([claim], patient_fields=None, bill_fields=('totalAmount', 'billDate'))[0]


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def claims(request):
    if request.method == 'GET':
        return Response(claim_service.format_claims(InsuranceClaim.objects.order_by('-submission_date')))
    s = InsuranceClaimSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    claim = claim_service.create_claim(s.validated_data)
    broadcast_refresh('insurance')
    return Response(_plain(claim), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def claim_detail(request, pk):
    if request.method == 'DELETE':
        claim_id = claim_service.delete_claim(pk)
        broadcast_refresh('insurance')
        return Response({'message': 'Insurance claim deleted successfully', 'id': claim_id})
    claim = get_or_404(InsuranceClaim, pk, 'Insurance claim')
    if request.method == 'GET':
        return Response(claim_service.format_claim_detail(claim))
    s = InsuranceClaimSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    claim = claim_service.update_claim(claim, s.validated_data)
    broadcast_refresh('insurance')
    return Response(_plain(claim))


@api_view(['PATCH'])
@permission_classes([AllowAny])
def claim_status(request, pk):
    get_or_404(InsuranceClaim, pk, 'Insurance claim')
    s = ClaimStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    claim = claim_service.update_claim_status(
        pk,
        s.validated_data['status'],
        approved_amount=s.validated_data.get('approvedAmount'),
        rejection_reason=s.validated_data.get('rejectionReason'),
    )
    broadcast_refresh('insurance')
    return Response(_plain(claim))


@api_view(['GET'])
@permission_classes([AllowAny])
def claims_by_status(request, claim_status):
    if claim_status not in CLAIM_STATUSES:
        raise ValidationError({'status': [f'"{claim_status}" is not a valid claim status']})
    qs = InsuranceClaim.objects.filter(status=claim_status).order_by('-submission_date')
    return Response(claim_service.format_claims(qs, patient_fields=('name',), bill_fields=('totalAmount',)))


@api_view(['GET'])
@permission_classes([AllowAny])
def claims_by_patient(request, patient_id):
    key = parse_uuid(patient_id)
    if key is None:
        raise NotFound('Patient not found')
    qs = InsuranceClaim.objects.filter(patient_id=key).order_by('-submission_date')
    return Response(claim_service.format_claims(qs, patient_fields=None))
