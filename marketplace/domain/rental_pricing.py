# marketplace/domain/rental_pricing.py
import enum
import math
from datetime import datetime, timedelta
from decimal import Decimal

from marketplace.domain.errors import ValidationError
from marketplace.utils.money import to_money


class PriceUnit(str, enum.Enum):
    HOUR = "HOUR"
    DAY = "DAY"
    WEEK = "WEEK"


UNIT_LENGTH = {
    PriceUnit.HOUR: timedelta(hours=1),
    PriceUnit.DAY: timedelta(days=1),
    PriceUnit.WEEK: timedelta(weeks=1),
}


def billable_units(rental_start: datetime, rental_end: datetime, unit: PriceUnit) -> int:
    if rental_end <= rental_start:
        raise ValidationError("Rental end must be after rental start")

    # zaczeta jednostka liczy sie jako cala
    units = math.ceil((rental_end - rental_start) / UNIT_LENGTH[PriceUnit(unit)])
    return max(units, 1)


def rental_unit_price(rate: Decimal, rental_start: datetime, rental_end: datetime, unit: PriceUnit) -> Decimal:
    """Cena jednej sztuki za caly okres wynajmu."""
    return to_money(Decimal(rate) * billable_units(rental_start, rental_end, unit))
