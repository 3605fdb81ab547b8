"""
Utilidades de rangos de fechas compartidas por el lector iCal, las tarifas,
los bloqueos manuales y el generador ICS.

Todo se resuelve por día de calendario (``datetime.date``), sin hora ni zona.
Los rangos son inclusivos en ambos extremos salvo el DTEND de ICS.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, order=True)
class DateRange:
    """Rango de días inclusivo: ``start`` y ``end`` forman parte del rango."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Rango inválido: {self.start} > {self.end}")

    def __contains__(self, day):
        return self.start <= day <= self.end

    @property
    def days(self):
        return (self.end - self.start).days + 1

    def to_dict(self):
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


def overlaps(a, b):
    return a.start <= b.end and b.start <= a.end


def to_inclusive_end(exclusive_end):
    return exclusive_end - ONE_DAY


def to_exclusive_end(inclusive_end):
    """DTEND de ICS: primer día que ya no forma parte del rango."""
    return inclusive_end + ONE_DAY


def parse_ymd(value):
    """
    Convierte ``value`` en ``date``.

    Acepta ``date``, ``datetime`` (se descarta la hora) o un string
    'YYYY-MM-DD'. Devuelve None si no se puede interpretar, nunca lanza:
    quien llama descarta la entrada malformada.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_range(start, end):
    """Rango a partir de dos valores crudos; None si alguno falla o start > end."""
    start, end = parse_ymd(start), parse_ymd(end)
    if start is None or end is None or start > end:
        return None
    return DateRange(start, end)


def sort_and_dedupe(ranges):
    """Ordena por (start, end) y colapsa los rangos idénticos consecutivos."""
    out = []
    for r in sorted(ranges, key=lambda r: (r.start, r.end)):
        if out and out[-1].start == r.start and out[-1].end == r.end:
            continue
        out.append(r)
    return out


def year_bounds(year):
    return date(year, 1, 1), date(year, 12, 31)


def days_in_year(year):
    first, last = year_bounds(year)
    return (last - first).days + 1


def iter_days(start, end):
    """Itera los días de ``start`` a ``end``, ambos incluidos."""
    current = start
    while current <= end:
        yield current
        current += ONE_DAY
