"""Trend Calculator - up / down / unchanged labels between consecutive prices"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Trend:
    """Direction of a price against the next-older observation"""
    label: str  # 'no reference', 'increased', 'decreased', 'unchanged'
    direction: str  # 'up', 'down', 'neutral'
    delta: Optional[Decimal] = None
    delta_text: Optional[str] = None


NO_REFERENCE = Trend(label="no reference", direction="neutral")


def to_money(value: Number) -> Decimal:
    """Round a numeric value to cents."""
    if not isinstance(value, Decimal):
        # str() keeps floats like 0.1 from dragging binary noise along
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _exact(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def compute_trend(current: Number, previous: Optional[Number]) -> Trend:
    if previous is None:
        return NO_REFERENCE

    # round the exact difference once, not each side
    delta = to_money(_exact(current) - _exact(previous))

    if delta > 0:
        return Trend(label="increased", direction="up", delta=delta, delta_text=f"+{delta}")
    if delta < 0:
        return Trend(label="decreased", direction="down", delta=delta, delta_text=f"-{abs(delta)}")
    return Trend(label="unchanged", direction="neutral", delta=Decimal("0.00"), delta_text="0.00")


def annotate_trends(prices: Sequence[Number]) -> List[Trend]:
    """
    Trend for every price of a newest-first sequence.

    Position i is compared with position i + 1, the next-older price; the
    oldest price has nothing to compare with and reports no reference.
    """
    trends = []
    for index, price in enumerate(prices):
        previous = prices[index + 1] if index + 1 < len(prices) else None
        trends.append(compute_trend(price, previous))
    return trends
