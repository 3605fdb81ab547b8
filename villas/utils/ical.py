# villas/utils/ical.py
import logging
import re
from time import monotonic
from urllib.parse import urlsplit

import requests
from icalendar import Calendar
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

from core.tzutils import to_local_date
from utils.dates import DateRange, sort_and_dedupe, to_inclusive_end
from villas.exceptions import InvalidFeedUrl, HostNotAllowed

logger = logging.getLogger(__name__)

WEBCAL_RE = re.compile(r"^webcals?://", re.IGNORECASE)
ALLOWED_SCHEMES = ("http", "https")
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def normalize_feed_url(raw_url):
    """webcal:// y webcals:// se piden por https://."""
    return WEBCAL_RE.sub("https://", str(raw_url or "").strip())


def is_allowed_host(hostname, allowed_hosts):
    allowed = [h.strip().lower() for h in allowed_hosts if h and h.strip()]
    if "*" in allowed:
        return True
    return (hostname or "").lower() in allowed


def validate_feed_url(raw_url, allowed_hosts=None):
    """
    Normaliza y valida la URL de un feed antes de pedirla.

    Lanza InvalidFeedUrl (missing_url, invalid_url, invalid_protocol) o
    HostNotAllowed si ``allowed_hosts`` no incluye el host ni "*". Con
    ``allowed_hosts=None`` no se comprueba el host.
    """
    url = normalize_feed_url(raw_url)
    if not url:
        raise InvalidFeedUrl("Falta la URL del calendario", code="missing_url")

    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise InvalidFeedUrl("URL de calendario no válida", code="invalid_url")
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidFeedUrl("Solo se aceptan URLs http(s) o webcal", code="invalid_protocol")
    try:
        URLValidator(schemes=list(ALLOWED_SCHEMES))(url)
    except ValidationError:
        raise InvalidFeedUrl("URL de calendario no válida", code="invalid_url")

    if allowed_hosts is not None and not is_allowed_host(parts.hostname, allowed_hosts):
        raise HostNotAllowed(f"Host no permitido: {parts.hostname}")
    return url


def fetch_blocked_ranges(ical_url, allowed_hosts=None, timeout=None):
    """
    Descarga un feed iCal y devuelve sus rangos ocupados (DateRange inclusivos).

    Los errores de URL se lanzan (validación). Cualquier fallo de red, respuesta
    no 2xx o cuerpo ilegible devuelve [] para no tumbar la página. No reintenta
    ni cachea: eso es cosa de quien llama.
    """
    url = validate_feed_url(ical_url, allowed_hosts)
    timeout = settings.ICAL_FETCH_TIMEOUT if timeout is None else timeout

    try:
        content = _download(url, timeout)
    except requests.Timeout:
        logger.warning(f"Timeout ({timeout}s) al descargar el feed iCal {url}")
        return []
    except requests.RequestException as e:
        logger.warning(f"No se pudo descargar el feed iCal {url}: {e}")
        return []

    ranges = parse_blocked_ranges(content)
    logger.info(f"Feed iCal {urlsplit(url).hostname}: {len(ranges)} rangos ocupados")
    return ranges


def _download(url, timeout):
    """
    Cuerpo del feed con un plazo total de ``timeout`` segundos.

    El timeout de requests se aplica a cada conexión o lectura por separado;
    un servidor que envía poco a poco no debe alargar la petición.
    """
    deadline = monotonic() + timeout
    chunks = []
    with requests.get(
        url, timeout=timeout, headers={"User-Agent": settings.ICAL_USER_AGENT}, stream=True
    ) as r:
        r.raise_for_status()
        for chunk in r.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
            if monotonic() > deadline:
                raise requests.ReadTimeout(f"Plazo total de {timeout}s superado")
            chunks.append(chunk)
    return b"".join(chunks)


def parse_blocked_ranges(content):
    """
    Convierte el cuerpo de un feed en rangos ocupados ordenados y sin duplicados.

    DTEND es exclusivo en iCal: se resta un día y, si queda antes del inicio,
    se iguala al inicio. Los eventos sin DTSTART/DTEND o con fechas ilegibles
    se saltan sin afectar al resto.
    """
    try:
        calendar = Calendar.from_ical(content)
    except Exception as e:
        logger.warning(f"Feed iCal ilegible: {e}")
        return []

    ranges = []
    for component in calendar.walk("VEVENT"):
        try:
            rng = _event_range(component)
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Evento iCal ignorado ({component.get('uid')}): {e}")
            continue
        if rng is not None:
            ranges.append(rng)

    return sort_and_dedupe(ranges)


def _event_range(component):
    dtstart = component.get("dtstart")
    dtend = component.get("dtend")
    if dtstart is None or dtend is None:
        return None

    start = to_local_date(dtstart.dt)
    end = to_inclusive_end(to_local_date(dtend.dt))
    if end < start:
        end = start
    return DateRange(start, end)
