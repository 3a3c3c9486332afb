from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from chocoblitz.config import settings


def money(v: Union[Decimal, float, int]) -> str:
    quant = Decimal(1).scaleb(-settings.decimals)
    amount = Decimal(str(v)).quantize(quant, rounding=ROUND_HALF_UP)
    return f"{settings.currency_symbol}{amount}"


def stars(rating: int, out_of: int = 5) -> str:
    return "★" * rating + "☆" * (out_of - rating)
