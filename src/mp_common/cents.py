"""Integer money utilities.

All prices, subtotals, discounts and totals are int minor units (cents).
No float, no Decimal.
"""

_CURRENCY_SYMBOLS: dict[str, str] = {
    "ZAR": "R",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def cents_to_display(cents: int, currency: str = "ZAR") -> str:
    """Convert cents to a display string: 30000 ZAR -> 'R300.00', -1200 USD -> '-$12.00'.

    Unknown currencies fall back to the ISO code: 500 CHF -> 'CHF 5.00'.
    """
    symbol = _CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if cents < 0 else ""
    abs_cents = abs(cents)
    return f"{sign}{symbol}{abs_cents // 100:,}.{abs_cents % 100:02d}"


def percent_of(amount: int, percent: int) -> int:
    """``amount * percent / 100`` rounded half-up to the cent.

    Inputs are non-negative, so floor division of the shifted value rounds
    half-up: 1005 * 10% = 100.5 -> 101.
    """
    if amount < 0 or percent < 0:
        raise ValueError("amount and percent must be non-negative")
    return (amount * percent + 50) // 100
