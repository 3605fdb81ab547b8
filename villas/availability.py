"""
Línea temporal de indisponibilidad de una villa.

Combina los rangos ocupados del feed iCal externo con los bloqueos manuales
en una sola lista ordenada, sin duplicados y etiquetada por origen. Se calcula
en cada petición, no se persiste.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from utils.dates import DateRange, overlaps, ONE_DAY
from villas.blocks import ManualBlockedPeriod, clean_comment
from villas.pricing import normalize_pricing_calendars

SOURCE_ICAL = "ical"
SOURCE_MANUAL = "manual"

ICAL_LABEL = "Occupied"
MANUAL_LABEL = "Blocked"


@dataclass(frozen=True)
class BlockedInterval:
    start: date
    end: date
    source: str
    label: str

    @property
    def range(self):
        return DateRange(self.start, self.end)

    def to_dict(self):
        return {
            "from": self.start.isoformat(),
            "to": self.end.isoformat(),
            "source": self.source,
            "label": self.label,
        }


@dataclass
class ListingCalendarConfig:
    """Lo que la villa guarda sobre su calendario (forma del documento del almacén)."""

    availability_ical_url: Optional[str] = None
    manual_blocked_periods: list = field(default_factory=list)
    pricing_years: list = field(default_factory=list)

    @classmethod
    def from_record(cls, record):
        record = record or {}
        periods = [ManualBlockedPeriod.from_dict(p) for p in record.get("manualBlockedPeriods") or []]
        return cls(
            availability_ical_url=(record.get("availabilityIcalUrl") or "").strip() or None,
            manual_blocked_periods=[p for p in periods if p is not None],
            pricing_years=normalize_pricing_calendars(record.get("pricingCalendars")),
        )


def merge(ical_ranges, manual_periods):
    """
    Devuelve los BlockedInterval ordenados por (start, end).

    Los duplicados consecutivos con el mismo (source, start, end) se
    colapsan. Si el que se conserva lleva la etiqueta genérica "Blocked" y el
    descartado una más concreta, se adopta la concreta.
    """
    intervals = [BlockedInterval(r.start, r.end, SOURCE_ICAL, ICAL_LABEL) for r in ical_ranges]
    for period in manual_periods:
        label = clean_comment(period.comment) or MANUAL_LABEL
        intervals.append(BlockedInterval(period.start, period.end, SOURCE_MANUAL, label))

    intervals.sort(key=lambda i: (i.start, i.end))

    out = []
    for interval in intervals:
        prev = out[-1] if out else None
        if prev and (prev.source, prev.start, prev.end) == (interval.source, interval.start, interval.end):
            if prev.label == MANUAL_LABEL and interval.label != MANUAL_LABEL:
                out[-1] = BlockedInterval(prev.start, prev.end, prev.source, interval.label)
            continue
        out.append(interval)
    return out


def blocked_ranges(intervals):
    return [i.range for i in intervals]


def is_stay_available(intervals, checkin, checkout):
    """Libre si ningún intervalo toca las noches [checkin, checkout - 1]."""
    if checkout <= checkin:
        return False
    stay = DateRange(checkin, checkout - ONE_DAY)
    return not any(overlaps(stay, i.range) for i in intervals)
