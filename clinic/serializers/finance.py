from decimal import Decimal

from rest_framework import serializers

from clinic.models import Bill, InsuranceClaim
from .common import DateInput, DateTimeInput, MoneyInput, choice_values

PAYMENT_STATUSES = choice_values(Bill.PAYMENT_STATUS_CHOICES)
CLAIM_STATUSES = choice_values(InsuranceClaim.STATUS_CHOICES)


def _money(**kwargs):
    return MoneyInput(**kwargs)


class BillItemSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.FloatField(required=False, allow_null=True, min_value=0)
    unitPrice = serializers.FloatField(required=False, allow_null=True, min_value=0)
    amount = serializers.FloatField(min_value=0)


class BillSerializer(serializers.Serializer):
    patient = serializers.UUIDField()
    admission = serializers.UUIDField(required=False, allow_null=True)
    appointment = serializers.UUIDField(required=False, allow_null=True)
    billType = serializers.ChoiceField(choices=choice_values(Bill.BILL_TYPE_CHOICES))
    items = BillItemSerializer(many=True, required=False)
    totalAmount = _money(min_value=Decimal('0'))
    paidAmount = _money(required=False, min_value=Decimal('0'))
    paymentStatus = serializers.ChoiceField(choices=PAYMENT_STATUSES, required=False)
    paymentMethod = serializers.ChoiceField(
        choices=choice_values(Bill.PAYMENT_METHOD_CHOICES), required=False, allow_blank=True, allow_null=True
    )
    billDate = DateTimeInput(required=False)
    dueDate = DateInput()


class PaymentSerializer(serializers.Serializer):
    amount = _money(error_messages={
        'required': 'Valid payment amount is required',
        'null': 'Valid payment amount is required',
        'invalid': 'Valid payment amount is required',
    })
    method = serializers.ChoiceField(
        choices=choice_values(Bill.PAYMENT_METHOD_CHOICES), required=False, allow_blank=True, allow_null=True
    )

    def validate_amount(self, v):
        if v <= 0:
            raise serializers.ValidationError('Valid payment amount is required')
        return v


class InsuranceClaimSerializer(serializers.Serializer):
    patient = serializers.UUIDField()
    bill = serializers.UUIDField()
    insuranceProvider = serializers.CharField(max_length=255)
    policyNumber = serializers.CharField(max_length=100)
    claimAmount = _money(min_value=Decimal('0'))
    approvedAmount = _money(required=False, allow_null=True, min_value=Decimal('0'))
    status = serializers.ChoiceField(choices=CLAIM_STATUSES, required=False)
    submissionDate = DateTimeInput(required=False)
    approvalDate = DateTimeInput(required=False, allow_null=True)
    rejectionReason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ClaimStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CLAIM_STATUSES, error_messages={'required': 'Status is required'})
    approvedAmount = _money(required=False, allow_null=True, min_value=Decimal('0'))
    rejectionReason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RevenueQuerySerializer(serializers.Serializer):
    startDate = DateTimeInput(required=False)
    endDate = DateTimeInput(required=False)

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if start and end and start > end:
            raise serializers.ValidationError('startDate must not be after endDate')
        return attrs
