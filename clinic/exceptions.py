"""
API error types and the DRF exception handler.

Every error body has a human readable ``message``.  Validation failures
also carry the per-field ``errors`` produced by the serializers.
"""
import logging
from decimal import Decimal

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ExceedsBalance(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'exceeds_balance'

    def __init__(self, remaining: Decimal):
        self.remaining = remaining
        super().__init__(
            'Payment amount exceeds remaining balance. '
            f'Maximum payment allowed: {settings.HMS_CURRENCY_SYMBOL}{remaining:.2f}'
        )


class PaymentConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The bill was updated concurrently, please retry the payment'
    default_code = 'payment_conflict'


def _first_message(errors) -> str:
    if isinstance(errors, dict):
        for field, value in errors.items():
            msg = _first_message(value)
            if field == 'non_field_errors':
                return msg
            return f'{field}: {msg}'
        return 'Invalid input'
    if isinstance(errors, (list, tuple)):
        return _first_message(errors[0]) if errors else 'Invalid input'
    return str(errors)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'), exc_info=exc)
        return Response({'message': 'Server error', 'error': str(exc)}, status=500)
    if isinstance(exc, ValidationError):
        return Response({'message': _first_message(resp.data), 'errors': resp.data}, status=resp.status_code)
    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    headers = {k: v for k, v in resp.items() if k.lower() != 'content-type'}
    return Response({'message': str(detail)}, status=resp.status_code, headers=headers)
