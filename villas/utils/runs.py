"""
Resolución "último gana" de intervalos solapados dentro de un año.

Se materializa un array denso con un valor por día del año, se aplican las
asignaciones en orden de entrada y se recomprime en tramos máximos cuyo valor
difiere del valor por defecto. Tarifas y bloqueos manuales usan la misma
rutina con distinto tipo de valor.
"""
from datetime import timedelta

from utils.dates import year_bounds, days_in_year


def resolve_year_runs(year, default, assignments):
    """
    ``assignments``: iterable de (start, end, value) con fechas inclusivas.

    Las porciones fuera de [year-01-01, year-12-31] se descartan. Devuelve
    una lista ordenada de (start, end, value) disjuntos y mínimos: dos tramos
    contiguos nunca tienen el mismo valor.
    """
    first, last = year_bounds(year)
    dense = [default] * days_in_year(year)

    for start, end, value in assignments:
        if start > end or end < first or start > last:
            continue
        lo = (max(start, first) - first).days
        hi = (min(end, last) - first).days
        for i in range(lo, hi + 1):
            dense[i] = value

    runs = []
    run_start = None
    for i, value in enumerate(dense):
        if run_start is not None and value != dense[run_start]:
            runs.append(_run(first, run_start, i - 1, dense[run_start]))
            run_start = None
        if run_start is None and value != default:
            run_start = i
    if run_start is not None:
        runs.append(_run(first, run_start, len(dense) - 1, dense[run_start]))
    return runs


def _run(first, lo, hi, value):
    return first + timedelta(days=lo), first + timedelta(days=hi), value
