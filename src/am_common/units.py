"""Integer arithmetic utilities for wei-denominated amounts.

All prices, fees and balances are int in the currency's smallest unit. No float,
no Decimal on the money path; display strings are derived only for responses.
"""

BPS_DENOMINATOR = 10_000
DEFAULT_DECIMALS = 18


def bps_of(amount: int, rate_bps: int) -> int:
    """Floor of amount * rate_bps / 10000; dust stays with the caller of the split."""
    return amount * rate_bps // BPS_DENOMINATOR


def format_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render an integer amount with a decimal point: 97500000000000000000 -> '97.5'."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    if frac == 0:
        return f"{sign}{whole}"
    frac_str = f"{frac:0{decimals}d}".rstrip("0")
    return f"{sign}{whole}.{frac_str}"
