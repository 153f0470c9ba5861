"""Integer money utilities.

All amounts and balances are int paise (1 rupee = 100 paise). Rounding
happens once, when a fractional value (interest, line totals) is turned
into paise; everything downstream is exact integer arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal


def paise_to_display(paise: int) -> str:
    """Convert paise to display string: 123450 -> '₹1,234.50', -1200 -> '-₹12.00'."""
    if paise < 0:
        abs_paise = -paise
        return f"-₹{abs_paise // 100:,}.{abs_paise % 100:02d}"
    return f"₹{paise // 100:,}.{paise % 100:02d}"


def round_to_paise(value: Decimal) -> int:
    """Round a fractional paise amount half-up to a whole paisa."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def rupees_to_paise(rupees: Decimal | int | str) -> int:
    """'12.345' -> 1235. Used for seed data and display-side conversions."""
    return round_to_paise(Decimal(str(rupees)) * 100)
