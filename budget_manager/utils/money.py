from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "KRW": "₩",
}

CENT = Decimal("0.01")


def parse_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """Parse user input ("1,234.5") into a Decimal rounded to cents"""
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Union[int, float, Decimal], currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), "")
    amount = float(value)
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}"
    if symbol:
        return f"{sign}{symbol}{body}"
    return f"{sign}{body} {currency.upper()}"
