"""
Currency Conversion

Static conversion of contract amounts to the base currency (NIS) and the
display format used by the reporting UI.
"""

from decimal import ROUND_CEILING, Decimal, InvalidOperation

BASE_CURRENCY_CODE = "NIS"
BASE_CURRENCY_SYMBOL = "₪"

# 1 unit of currency = N NIS
CURRENCY_RATES: dict[str, Decimal] = {
    "NIS": Decimal("1"),
    "ILS": Decimal("1"),
    "₪": Decimal("1"),
    "USD": Decimal("3.7"),
    "EUR": Decimal("4.0"),
    "GBP": Decimal("4.7"),
}

# Currency ids as stored on leads
CURRENCY_ID_TO_CODE: dict[int, str] = {
    1: "NIS",
    2: "EUR",
    3: "USD",
    4: "GBP",
}

CURRENCY_ID_TO_SYMBOL: dict[int, str] = {
    1: "₪",
    2: "€",
    3: "$",
    4: "£",
}


def parse_amount(value: object) -> Decimal:
    """
    Parse a monetary amount from loosely-typed input.

    Accepts Decimal, int, float or numeric strings (thousands separators
    allowed). None, empty, non-numeric and non-finite values parse to 0.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return Decimal("0")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def resolve_currency_code(currency: int | str | None) -> str:
    """Map a currency id, code or symbol to a known currency code."""
    if currency is None:
        return BASE_CURRENCY_CODE
    if isinstance(currency, int):
        return CURRENCY_ID_TO_CODE.get(currency, BASE_CURRENCY_CODE)

    code = str(currency).strip().upper()
    if code.isdigit():
        return CURRENCY_ID_TO_CODE.get(int(code), BASE_CURRENCY_CODE)
    return code if code in CURRENCY_RATES else BASE_CURRENCY_CODE


def to_base_currency(amount: object, currency: int | str | None) -> Decimal:
    """
    Convert an amount to the base currency.

    Non-positive or unparseable amounts convert to 0; unknown currencies
    are treated as already being in the base currency.
    """
    value = parse_amount(amount)
    if value <= 0:
        return Decimal("0")
    rate = CURRENCY_RATES[resolve_currency_code(currency)]
    return value * rate


def format_currency(amount: Decimal | int | float, symbol: str = BASE_CURRENCY_SYMBOL) -> str:
    """Round up to whole units and format with symbol and thousands grouping."""
    whole = parse_amount(amount).to_integral_value(rounding=ROUND_CEILING)
    return f"{symbol}{int(whole):,}"
