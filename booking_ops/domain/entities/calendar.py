from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from booking_ops.domain.entities.appointment import Appointment


class Granularity(str, Enum):
    day = "day"
    week = "week"
    month = "month"
    list = "list"


@dataclass(frozen=True)
class CalendarCell:
    date: date
    is_current_period: bool
    is_today: bool
    appointments: tuple[Appointment, ...] = ()

    @property
    def key(self) -> str:
        return self.date.isoformat()
