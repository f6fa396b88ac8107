from enum import StrEnum


class PaymentProvider(StrEnum):
    PAYSTACK = 'paystack'
    METATICKETS = 'metatickets'
