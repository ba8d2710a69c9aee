"""Warranty coverage computation.

Pure calendar-day arithmetic: identical inputs always give identical output and
nothing here reads the clock, so callers pass ``now`` explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

# Policy constant: warranties with this many days or fewer left are near expiry.
NEAR_EXPIRY_THRESHOLD_DAYS = 30


class WarrantyStatus(str, Enum):
    ACTIVE = "active"
    NEAR_EXPIRY = "near_expiry"
    EXPIRED = "expired"


@dataclass(frozen=True)
class WarrantyComputation:
    end_date: date
    remaining_days: int
    status: WarrantyStatus

    @property
    def display_remaining_days(self) -> int:
        """Remaining days clamped at zero for display."""
        return max(self.remaining_days, 0)


def _calendar_dates(activation: date | datetime, now: date | datetime) -> tuple[date, date]:
    """Reduce both instants to calendar dates on the same clock.

    An aware ``now`` is converted into the activation timestamp's timezone so a
    late-evening lookup does not slip onto the next UTC day.
    """
    if isinstance(activation, datetime):
        if isinstance(now, datetime) and now.tzinfo is not None and activation.tzinfo is not None:
            now = now.astimezone(activation.tzinfo)
        activation_day = activation.date()
    else:
        activation_day = activation

    now_day = now.date() if isinstance(now, datetime) else now
    return activation_day, now_day


def classify(remaining_days: int) -> WarrantyStatus:
    if remaining_days <= 0:
        return WarrantyStatus.EXPIRED
    if remaining_days <= NEAR_EXPIRY_THRESHOLD_DAYS:
        return WarrantyStatus.NEAR_EXPIRY
    return WarrantyStatus.ACTIVE


def compute(
    activation_date: date | datetime,
    duration_days: int,
    now: date | datetime,
) -> WarrantyComputation:
    """Compute end date, signed remaining days and status for a warranty.

    Args:
        activation_date: When the code was activated
        duration_days: Warranty duration of the product, in days
        now: Reference instant for the remaining-days computation

    Returns:
        WarrantyComputation with the raw (possibly negative) remaining days

    Raises:
        ValueError: If duration_days is not positive
    """
    if duration_days <= 0:
        raise ValueError(f"duration_days must be positive, got {duration_days}")

    activation_day, now_day = _calendar_dates(activation_date, now)
    end_date = activation_day + timedelta(days=duration_days)
    remaining_days = (end_date - now_day).days

    return WarrantyComputation(
        end_date=end_date,
        remaining_days=remaining_days,
        status=classify(remaining_days),
    )
