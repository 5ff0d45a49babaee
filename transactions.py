from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN

MAX_CLIENT_ID = 65535
MAX_TX_ID = 4294967295

AMOUNT_QUANTUM = Decimal(".0001")

# 14 integer digits keeps sums of up to 10**10 amounts exact in the default 28-digit context
MAX_AMOUNT = Decimal("99999999999999.9999")


def normalize_amount(text):
    """Parse an amount string, truncating anything past 4 decimal places.

    Raises decimal.InvalidOperation for unparseable text and ValueError for
    negative amounts or amounts above MAX_AMOUNT.
    """
    amount = Decimal(text).quantize(AMOUNT_QUANTUM, rounding=ROUND_DOWN)
    if amount < 0:
        raise ValueError(f"negative amount {text}")
    if amount > MAX_AMOUNT:
        raise ValueError(f"amount {text} exceeds {MAX_AMOUNT}")
    return amount


@dataclass(frozen=True)
class Deposit:
    client_id: int
    tx_id: int
    amount: Decimal

    record_type = "deposit"


@dataclass(frozen=True)
class Withdrawal:
    client_id: int
    tx_id: int
    amount: Decimal

    record_type = "withdrawal"


@dataclass(frozen=True)
class Dispute:
    client_id: int
    tx_id: int

    record_type = "dispute"


@dataclass(frozen=True)
class Resolve:
    client_id: int
    tx_id: int

    record_type = "resolve"


@dataclass(frozen=True)
class Chargeback:
    client_id: int
    tx_id: int

    record_type = "chargeback"


TRANSACTION_TYPES = {cls.record_type: cls for cls in (Deposit, Withdrawal, Dispute, Resolve, Chargeback)}

# kinds that must carry an amount; the rest must not
AMOUNT_TYPES = {Deposit.record_type, Withdrawal.record_type}
