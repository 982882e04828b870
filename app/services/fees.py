"""Platform commission and payment operator fees"""

from typing import Optional

from app.config import settings
from app.errors import ValidationError

OPERATOR_FEE_RATES = {
    "airtel": 0.02,
    "moov": 0.02,
    "card": 0.03,
}


def percent_of(amount: int, rate: float) -> int:
    """Rate applied to an FCFA amount, rounded up, computed in basis points"""
    basis_points = int(round(rate * 10000))
    return -(-amount * basis_points // 10000)


def calculate_commission(subtotal: int, rate: Optional[float] = None) -> int:
    return percent_of(subtotal, settings.commission_rate if rate is None else rate)


def calculate_transaction_fee(amount: int, operator: str) -> int:
    if operator not in OPERATOR_FEE_RATES:
        raise ValidationError("Opérateur de paiement inconnu", detail=operator)
    return percent_of(amount, OPERATOR_FEE_RATES[operator])


def payment_breakdown(subtotal: int, operator: str) -> dict:
    commission = calculate_commission(subtotal)
    transaction_fee = calculate_transaction_fee(subtotal + commission, operator)
    return {
        "operator": operator,
        "subtotal": subtotal,
        "commission": commission,
        "transaction_fee": transaction_fee,
        "total": subtotal + commission + transaction_fee,
    }
