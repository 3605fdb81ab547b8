import hashlib
import logging

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import transaction

from utils.dates import DateRange, overlaps
from villas.blocks import ManualBlockedPeriod, clean_comment, resolve_blocked_periods
from villas.exceptions import OverlapsExternalBlock
from villas.models import Villa
from villas.pricing import PricingYear, normalize_pricing_calendars
from villas.utils.ical import fetch_blocked_ranges, validate_feed_url

logger = logging.getLogger(__name__)


def feed_cache_key(normalized_url):
    return "ical-feed:" + hashlib.md5(normalized_url.encode("utf-8")).hexdigest()


def get_cached_ical_ranges(ical_url, allowed_hosts=None):
    """
    fetch_blocked_ranges con caché de Django (clave = URL normalizada).

    Solo se guardan resultados no vacíos: un feed caído devuelve [] y se
    vuelve a intentar en la siguiente petición. Si dos peticiones rellenan la
    misma clave a la vez gana la última escritura.
    """
    url = validate_feed_url(ical_url, allowed_hosts)
    ttl = settings.ICAL_CACHE_TTL
    if ttl <= 0:
        return fetch_blocked_ranges(url, allowed_hosts)

    key = feed_cache_key(url)
    ranges = cache.get(key)
    if ranges is not None:
        return ranges

    ranges = fetch_blocked_ranges(url, allowed_hosts)
    if ranges:
        cache.set(key, ranges, ttl)
    return ranges


def check_manual_block(start, end, comment, ical_ranges):
    """
    Validación estricta de un bloqueo manual nuevo (punto de edición).

    Lanza ValidationError si falta el comentario, las fechas están al revés
    o cruzan de año, y OverlapsExternalBlock si pisa un rango del iCal.
    """
    if not clean_comment(comment):
        raise ValidationError({"comment": ValidationError("El comentario es obligatorio.", code="required")})
    if start > end:
        raise ValidationError("La fecha de fin no puede ser anterior a la de inicio.", code="invalid_range")
    if start.year != end.year:
        raise ValidationError("Un bloqueo no puede abarcar dos años.", code="spans_years")

    block = DateRange(start, end)
    for external in ical_ranges:
        if overlaps(block, external):
            raise OverlapsExternalBlock(external)


def add_manual_block(villa, start, end, comment, ical_ranges=None):
    """
    Añade un bloqueo manual y guarda la lista renormalizada.
    Devuelve la lista de ManualBlockedPeriod resultante.
    """
    if ical_ranges is None:
        ical_ranges = villa.get_ical_ranges()
    check_manual_block(start, end, comment, ical_ranges)

    new_period = ManualBlockedPeriod(start, end, clean_comment(comment))
    with transaction.atomic():
        villa = Villa.objects.select_for_update().get(pk=villa.pk)
        periods = resolve_blocked_periods(list(villa.manual_blocked_periods or []) + [new_period])
        villa.manual_blocked_periods = [p.to_dict() for p in periods]
        villa.save(update_fields=["manual_blocked_periods", "updated_at"])

    logger.info(
        f"Bloqueo manual añadido en '{villa.slug}': {start.isoformat()} → {end.isoformat()} "
        f"({len(periods)} tramos)"
    )
    return periods


def save_pricing_year(villa, year, default_price, overrides):
    """
    Sustituye el calendario de tarifas de ``year`` por uno normalizado.
    Las excepciones ya vienen validadas por el formulario.
    """
    pricing_year = PricingYear(year, default_price, tuple(overrides)).normalized()

    with transaction.atomic():
        villa = Villa.objects.select_for_update().get(pk=villa.pk)
        others = [c for c in normalize_pricing_calendars(villa.pricing_calendars) if c.year != year]
        calendars = sorted(others + [pricing_year], key=lambda c: c.year)
        villa.pricing_calendars = [c.to_dict() for c in calendars]
        villa.save(update_fields=["pricing_calendars", "updated_at"])

    logger.info(
        f"Tarifas {year} guardadas en '{villa.slug}': base {default_price}, "
        f"{len(pricing_year.overrides)} excepciones"
    )
    return pricing_year
