from decimal import Decimal, ROUND_HALF_UP
from typing import Union


def round_half_up(value: float, places: int = 0) -> Union[int, float]:
    """
    Round the exact value of a float with halves going up.

    ``round_half_up(502.5) == 503`` and ``round_half_up(4.25, 1) == 4.3``,
    where the built-in ``round`` gives 502 and 4.2.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def deal_price(original_price: int, discount: int) -> int:
    """Price after taking `discount` percent off `original_price`"""
    return round_half_up(original_price * (1 - discount / 100))
