"""Decimal helpers shared by the normalizer, assembler and exporters."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

CENT = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def quantize_money(value: Number) -> Decimal:
    """Round a value to cents using half-up rounding."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    """Format an amount as ``$1,234.50``."""
    amount = quantize_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_quantity(value: Optional[Decimal]) -> str:
    if value is None:
        return ""
    return f"{quantize_money(value):.2f}"


def format_pitch(pitch: Optional[float]) -> Optional[str]:
    """Render a rise-per-12 pitch as ``8/12`` (or ``8.5/12``)."""
    if pitch is None:
        return None
    rise = f"{pitch:g}"
    return f"{rise}/12"
