"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: a stay from check-in (inclusive) to check-out (exclusive)
- Rupiah: rounding helper for integer IDR amounts
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Union

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for booking periods and availability checks.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValidationError(
                f"Check-in date ({self.start_date}) must be before check-out date ({self.end_date})"
            )

    def nights(self) -> Iterator[date]:
        """Yield every occupied night, i.e. each date except the check-out day"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """Number of nights"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


def round_rupiah(value: Union[Decimal, int, str]) -> int:
    """Round to a whole rupiah, halves away from zero"""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
