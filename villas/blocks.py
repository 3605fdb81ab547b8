"""
Bloqueos manuales introducidos por el propietario.

Misma disciplina que las tarifas: array denso por día con el comentario,
gana el último aplicado, y recompresión en tramos mínimos. Un día está
bloqueado si su comentario no queda vacío tras recortarlo a 120 caracteres.
"""
import logging
from dataclasses import dataclass
from datetime import date

from utils.dates import parse_range, ONE_DAY
from villas.utils.runs import resolve_year_runs

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 120


@dataclass(frozen=True)
class ManualBlockedPeriod:
    start: date
    end: date
    comment: str

    @classmethod
    def from_dict(cls, raw):
        """Lee un bloqueo del almacén; None si las fechas o el comentario no sirven."""
        if not isinstance(raw, dict):
            return None
        rng = parse_range(raw.get("from"), raw.get("to"))
        comment = clean_comment(raw.get("comment"))
        if rng is None or not comment:
            return None
        return cls(rng.start, rng.end, comment)

    def to_dict(self):
        return {
            "from": self.start.isoformat(),
            "to": self.end.isoformat(),
            "comment": self.comment,
        }


def clean_comment(value):
    if not isinstance(value, str):
        return ""
    return value.strip()[:COMMENT_MAX_LENGTH].rstrip()


def _coerce(raw):
    if isinstance(raw, ManualBlockedPeriod):
        comment = clean_comment(raw.comment)
        return ManualBlockedPeriod(raw.start, raw.end, comment) if comment else None
    return ManualBlockedPeriod.from_dict(raw)


def resolve_blocked_periods_for_year(year, periods):
    """
    Normaliza los bloqueos de ``year``: tramos ordenados, disjuntos y mínimos.

    Las entradas ilegibles, con from > to o sin comentario se ignoran y las
    porciones fuera del año se descartan. Hay que volver a ejecutarla si
    cambia el año.
    """
    assignments = []
    for raw in periods or []:
        period = _coerce(raw)
        if period is None:
            logger.debug(f"Bloqueo manual ignorado en {year}: {raw!r}")
            continue
        assignments.append((period.start, period.end, period.comment))

    runs = resolve_year_runs(year, "", assignments)
    return [ManualBlockedPeriod(start, end, comment) for start, end, comment in runs]


def resolve_blocked_periods(periods):
    """
    Normaliza bloqueos que pueden abarcar varios años.

    Se resuelve cada año tocado por algún bloqueo y se vuelven a unir los
    tramos que cruzan el 31 de diciembre con el mismo comentario.
    """
    valid = [p for p in (_coerce(raw) for raw in periods or []) if p is not None]
    if not valid:
        return []

    first_year = min(p.start.year for p in valid)
    last_year = max(p.end.year for p in valid)

    out = []
    for year in range(first_year, last_year + 1):
        for period in resolve_blocked_periods_for_year(year, valid):
            prev = out[-1] if out else None
            if prev and prev.comment == period.comment and prev.end + ONE_DAY == period.start:
                out[-1] = ManualBlockedPeriod(prev.start, period.end, prev.comment)
            else:
                out.append(period)
    return out
