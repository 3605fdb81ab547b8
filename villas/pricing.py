"""
Tarifas por noche: precio por defecto de cada año más rangos de excepción.

Los rangos tal como los introduce el propietario pueden solaparse (gana el
último aplicado). ``resolve_overrides_for_year`` los normaliza a una lista
ordenada, disjunta y mínima; ``price_for_day`` consulta esa lista ya
normalizada.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional

from utils.dates import parse_range, iter_days, ONE_DAY
from villas.utils.runs import resolve_year_runs

logger = logging.getLogger(__name__)

LABEL_MAX_LENGTH = 80


@dataclass(frozen=True)
class PricingOverride:
    start: date
    end: date
    nightly_price: int
    label: str = ""

    def __contains__(self, day):
        return self.start <= day <= self.end

    def to_dict(self):
        data = {
            "from": self.start.isoformat(),
            "to": self.end.isoformat(),
            "nightlyPrice": self.nightly_price,
        }
        if self.label:
            data["label"] = self.label
        return data


@dataclass(frozen=True)
class PricingYear:
    year: int
    default_nightly_price: int
    overrides: tuple = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, raw):
        """Lee un calendario del almacén; None si año o precio no son válidos."""
        if not isinstance(raw, dict):
            return None
        year = raw.get("year")
        price = clean_price(raw.get("defaultNightlyPrice"))
        if isinstance(year, bool) or not isinstance(year, int) or price is None:
            return None
        overrides = raw.get("overrides") or []
        if not isinstance(overrides, list):
            overrides = []
        return cls(year, price, tuple(overrides))

    def normalized(self):
        return PricingYear(
            self.year,
            self.default_nightly_price,
            tuple(resolve_overrides_for_year(self.year, self.default_nightly_price, self.overrides)),
        )

    def bounds(self):
        return compute_min_max(self.default_nightly_price, self.overrides)

    def to_dict(self):
        return {
            "year": self.year,
            "defaultNightlyPrice": self.default_nightly_price,
            "overrides": [o.to_dict() for o in self.overrides],
        }


class PriceBounds(NamedTuple):
    min: int
    max: Optional[int] = None

    def to_dict(self):
        data = {"min": self.min}
        if self.max is not None:
            data["max"] = self.max
        return data


@dataclass(frozen=True)
class StayQuote:
    nights: int
    total: int
    average_nightly: Decimal
    min_nightly: int
    max_nightly: Optional[int] = None

    def to_dict(self):
        return {
            "nights": self.nights,
            "total": self.total,
            "averageNightly": self.average_nightly,
            "minNightly": self.min_nightly,
            "maxNightly": self.max_nightly,
        }


def clean_price(value):
    """Entero >= 0 o None. Acepta floats enteros (800.0) tal como llegan de JSON."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        return None
    return value


def clean_label(value):
    if not isinstance(value, str):
        return ""
    return value.strip()[:LABEL_MAX_LENGTH].rstrip()


def _coerce_override(raw):
    if isinstance(raw, PricingOverride):
        return raw.start, raw.end, clean_price(raw.nightly_price), clean_label(raw.label)
    if not isinstance(raw, dict):
        return None
    rng = parse_range(raw.get("from"), raw.get("to"))
    price = clean_price(raw.get("nightlyPrice"))
    if rng is None or price is None:
        return None
    return rng.start, rng.end, price, clean_label(raw.get("label"))


def resolve_overrides_for_year(year, default_price, overrides):
    """
    Normaliza las excepciones de ``year`` sobre ``default_price``.

    Entradas con precio no entero/negativo, fechas ilegibles o from > to se
    ignoran; las porciones fuera del año se descartan. Idempotente: aplicar
    el resultado de nuevo devuelve la misma lista. Hay que volver a ejecutarla
    si cambian el año o el precio por defecto.
    """
    assignments = []
    for raw in overrides or []:
        coerced = _coerce_override(raw)
        if coerced is None or coerced[2] is None:
            logger.debug(f"Excepción de tarifa ignorada en {year}: {raw!r}")
            continue
        start, end, price, label = coerced
        assignments.append((start, end, (price, label)))

    runs = resolve_year_runs(year, (default_price, ""), assignments)
    return [PricingOverride(start, end, price, label) for start, end, (price, label) in runs]


def price_for_day(day, default_price, overrides):
    """Primer rango que contiene ``day`` (lista normalizada, sin solapes)."""
    for override in overrides:
        if day in override:
            return override.nightly_price
    return default_price


def compute_min_max(default_price, overrides):
    prices = [default_price] + [o.nightly_price for o in overrides]
    low, high = min(prices), max(prices)
    return PriceBounds(low, None if high == low else high)


def normalize_pricing_calendars(raw_calendars):
    """Un PricingYear normalizado por año, ordenados; si un año se repite gana el último."""
    by_year = {}
    for raw in raw_calendars or []:
        calendar = raw if isinstance(raw, PricingYear) else PricingYear.from_dict(raw)
        if calendar is None:
            continue
        by_year[calendar.year] = calendar.normalized()
    return [by_year[year] for year in sorted(by_year)]


def nightly_price_for_date(day, pricing_years, fallback_price=None):
    """
    Precio de la noche ``day`` buscando el calendario de su año.

    Sin calendario para ese año se usa ``fallback_price`` (precio mínimo de la
    villa). Devuelve None si no hay ni calendario ni precio de reserva.
    """
    calendar = next((c for c in pricing_years if c.year == day.year), None)
    if calendar is None:
        return clean_price(fallback_price)
    return price_for_day(day, calendar.default_nightly_price, calendar.overrides)


def quote_stay(checkin, checkout, pricing_years, fallback_price=None):
    """
    Estimación de una estancia: una noche por día de [checkin, checkout).

    Lanza ValueError si checkout no es posterior a checkin. Devuelve None si
    ninguna noche tiene precio.
    """
    nights = (checkout - checkin).days
    if nights <= 0:
        raise ValueError("La fecha de salida debe ser posterior a la de llegada")

    prices = []
    for day in iter_days(checkin, checkout - ONE_DAY):
        nightly = nightly_price_for_date(day, pricing_years, fallback_price)
        if nightly is not None:
            prices.append(nightly)
    if not prices:
        return None

    total = sum(prices)
    average = (Decimal(total) / nights).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    low, high = min(prices), max(prices)
    return StayQuote(
        nights=nights,
        total=total,
        average_nightly=average,
        min_nightly=low,
        max_nightly=None if high == low else high,
    )
