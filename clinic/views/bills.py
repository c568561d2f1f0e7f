"""
Bill views.

Payments go through ``POST /finance/bills/<id>/payments`` only; that is
the write path that keeps ``paidAmount`` within ``totalAmount`` and the
payment status in step with it.  ``PUT`` assigns fields as sent.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import Bill
from clinic.serializers.finance import PAYMENT_STATUSES, BillSerializer, PaymentSerializer
from clinic.services import billing
from clinic.services.common import get_or_404, parse_uuid
from clinic.services.updates import broadcast_refresh


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def bills(request):
    if request.method == 'GET':
        qs = Bill.objects.order_by('-bill_date').prefetch_related('payments')
        return Response(billing.format_bills(qs))
    s = BillSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bill = billing.create_bill(s.validated_data)
    broadcast_refresh('bills', 'stats')
    return Response(billing.format_bills([bill], populate_patient=False)[0], status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([AllowAny])
def bill_detail(request, pk):
    if request.method == 'DELETE':
        bill_id = billing.delete_bill(pk)
        broadcast_refresh('bills', 'stats')
        return Response({'message': 'Bill deleted successfully', 'id': bill_id})
    bill = get_or_404(Bill, pk)
    if request.method == 'GET':
        return Response(billing.format_bill_detail(bill))
    s = BillSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    bill = billing.update_bill(bill, s.validated_data)
    broadcast_refresh('bills', 'stats')
    return Response(billing.format_bills([bill], populate_patient=False)[0])


@api_view(['GET'])
@permission_classes([AllowAny])
def bills_by_status(request, payment_status):
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError({'status': [f'"{payment_status}" is not a valid payment status']})
    qs = Bill.objects.filter(payment_status=payment_status).order_by('due_date').prefetch_related('payments')
    return Response(billing.format_bills(qs))


@api_view(['GET'])
@permission_classes([AllowAny])
def bills_by_patient(request, patient_id):
    # Bills stay listed under a patient id even after the patient is deleted
    key = parse_uuid(patient_id)
    if key is None:
        raise NotFound('Patient not found')
    qs = Bill.objects.filter(patient_id=key).order_by('-bill_date').prefetch_related('payments')
    return Response(billing.format_bills(qs, populate_patient=False))


@api_view(['POST'])
@permission_classes([AllowAny])
def bill_payments(request, pk):
    get_or_404(Bill, pk)
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bill = billing.record_payment(pk, s.validated_data['amount'], s.validated_data.get('method'))
    broadcast_refresh('bills', 'stats')
    return Response(billing.payment_summary(bill))
