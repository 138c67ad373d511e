from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Union

getcontext().prec = 28

# user_balances.balance is NUMERIC(10, 2): the ledger never holds more than
# two decimals, whatever the group currency
LEDGER_EXPONENT = 2

# ISO 4217 exponents that differ from the usual two decimals
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW", "VND", "CLP", "ISK", "UGX"}
THREE_DECIMAL_CURRENCIES = {"BHD", "KWD", "OMR", "JOD", "TND"}

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AUD": "A$",
    "CAD": "C$",
    "JPY": "¥",
    "CNY": "¥",
}

Amount = Union[Decimal, int, str]


def currency_exponent(currency: str | None) -> int:
    code = (currency or "").upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def currency_symbol(currency: str | None) -> str:
    code = (currency or "USD").upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def to_minor_units(amount: Amount, exponent: int = 2) -> int:
    """
    Decimal-ish amount -> integer minor units (paise, cents, ...).

    Floats are refused: by the time a float reaches here the drift has
    already happened.
    """
    if isinstance(amount, (bool, float)):
        raise TypeError(f"Amounts must be Decimal, int or str, got {type(amount).__name__}")

    scaled = Decimal(str(amount)).scaleb(exponent)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int, exponent: int = 2) -> Decimal:
    return Decimal(minor).scaleb(-exponent).quantize(Decimal(1).scaleb(-exponent))
