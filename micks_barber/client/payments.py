import logging
import random
import string
import time
from typing import Optional

logger = logging.getLogger(__name__)

# gateway simulado: 90% de aprovação
SUCCESS_RATE = 0.9

PAYMENT_METHOD_NAMES = {
    "cash": "Cash",
    "card": "Credit/Debit Card",
    "gcash": "GCash",
    "paymaya": "PayMaya",
    "bank_transfer": "Bank Transfer",
}

_BASE36 = string.digits + string.ascii_lowercase


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_transaction_id(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    suffix = "".join(rng.choice(_BASE36) for _ in range(9))
    return f"TXN_{_now_ms()}_{suffix}"


def process_payment(
    amount: float,
    payment_method: str,
    user_id: int,
    appointment_id: int,
    rng: Optional[random.Random] = None,
    delay: float = 0,
) -> dict:
    """Simula o processamento no gateway (não existe gateway real).

    Retorna ``success``/``transaction_id``/``payment_reference`` em caso de
    aprovação ou ``success=False`` com ``error`` quando recusado.
    """
    rng = rng or random
    logger.info(
        "Processing %s payment of %.2f for appointment %s (user %s)",
        payment_method, amount, appointment_id, user_id,
    )
    if delay:
        time.sleep(delay)

    if rng.random() < SUCCESS_RATE:
        return {
            "success": True,
            "transaction_id": generate_transaction_id(rng),
            "payment_reference": f"REF_{_now_ms()}",
            "message": "Payment processed successfully",
        }

    return {
        "success": False,
        "error": "Payment processing failed. Please try again.",
        "message": "Payment could not be processed",
    }


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}₱{abs(amount):,.2f}"


def payment_method_display_name(method: str) -> str:
    return PAYMENT_METHOD_NAMES.get(method, method)
