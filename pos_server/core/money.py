"""金额计算工具，所有金额按分四舍五入"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(value) -> float:
    """四舍五入到分"""
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def to_cents(value) -> int:
    return int((Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
