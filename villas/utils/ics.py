"""
Feed ICS público con la disponibilidad de una villa.

Un VEVENT de día completo por intervalo bloqueado. El UID depende solo de la
villa, el origen y las fechas, así que regenerar el feed con los mismos
bloqueos produce los mismos UID y los clientes de calendario actualizan en
lugar de duplicar.
"""
from datetime import timezone

from django.conf import settings
from icalendar import Calendar, Event

from utils.dates import to_exclusive_end


def format_date(day):
    return day.strftime("%Y%m%d")


def event_uid(listing_id, source, start, end_exclusive):
    return f"{listing_id}-{source}-{format_date(start)}-{format_date(end_exclusive)}@{settings.ICS_UID_DOMAIN}"


def build_calendar(listing_id, intervals, now):
    """
    Calendar de icalendar con un Event por intervalo.

    DTEND es exclusivo: un bloqueo del 10 al 12 incluidos se publica con
    DTSTART 10 y DTEND 13.
    """
    dtstamp = now.astimezone(timezone.utc) if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)

    cal = Calendar()
    cal.add("version", "2.0")
    cal.add("prodid", settings.ICS_PRODID)
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", f"Disponibilités - {listing_id}")
    cal.add("x-wr-timezone", settings.ICS_TIMEZONE)

    for interval in intervals:
        end_exclusive = to_exclusive_end(interval.end)
        event = Event()
        event.add("uid", event_uid(listing_id, interval.source, interval.start, end_exclusive))
        event.add("dtstamp", dtstamp)
        event.add("dtstart", interval.start)
        event.add("dtend", end_exclusive)
        event.add("summary", interval.label)
        cal.add_component(event)

    return cal


def generate(listing_id, intervals, now):
    """Documento ICS completo (líneas plegadas a 75 octetos, CRLF final)."""
    # sorted=False: se respeta el orden en que se añaden las propiedades
    return build_calendar(listing_id, intervals, now).to_ical(sorted=False).decode("utf-8")
