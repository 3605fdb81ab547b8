from datetime import datetime, date
from zoneinfo import ZoneInfo
from django.conf import settings
from django.utils.timezone import is_aware


def local_tz():
    return ZoneInfo(settings.TIME_ZONE)


def to_local_date(value, tz=None):
    """
    value puede ser date o datetime (aware o naive).
    Devuelve el día de calendario en la zona local: los datetime aware se
    convierten a 'tz' antes de quitar la hora, los naive se toman tal cual.
    """
    if isinstance(value, datetime):
        if is_aware(value):
            value = value.astimezone(tz or local_tz())
        return value.date()
    if isinstance(value, date):
        return value
    raise ValueError("Fecha inválida")
