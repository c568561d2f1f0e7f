from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rest_framework import serializers

# The dashboard sends plain dates, but edited records come back as full ISO timestamps
DATE_INPUT_FORMATS = ['iso-8601', '%Y-%m-%dT%H:%M:%S.%fZ', '%Y-%m-%dT%H:%M:%SZ', '%Y-%m-%dT%H:%M:%S']
DATETIME_INPUT_FORMATS = ['iso-8601', '%Y-%m-%d']

CENTS = Decimal('0.01')


def choice_values(choices) -> list[str]:
    return [value for value, _ in choices]


class DateInput(serializers.DateField):
    def __init__(self, **kwargs):
        kwargs.setdefault('input_formats', DATE_INPUT_FORMATS)
        super().__init__(**kwargs)


class DateTimeInput(serializers.DateTimeField):
    def __init__(self, **kwargs):
        kwargs.setdefault('input_formats', DATETIME_INPUT_FORMATS)
        super().__init__(**kwargs)


class MoneyInput(serializers.DecimalField):
    """Accepts any finite number and rounds it half-up to whole cents.

    JSON clients send floats such as ``0.1 + 0.2`` or ``33.333``; these are
    rounded rather than rejected for carrying extra digits.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault('max_value', Decimal('9999999999.99'))
        super().__init__(max_digits=None, decimal_places=None, **kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return value.quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            # Too large to hold to the cent
            self.fail('invalid')
