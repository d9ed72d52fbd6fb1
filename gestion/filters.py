"""
Filtering, pagination and totals for the list views.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from gestion.records import ESTADO_ANULADA, PersonaRecord, TransaccionRecord
from gestion.utils import parse_date

DEFAULT_PER_PAGE = 15


def filter_personas(
    personas: Iterable[PersonaRecord],
    search: Optional[str] = "",
    sede_id: Optional[str] = "",
) -> list[PersonaRecord]:
    term = (search or "").strip().lower()
    result = []
    for persona in personas:
        if term:
            names = (persona.nombres, persona.primer_apellido, persona.segundo_apellido)
            matches = any(term in (name or "").lower() for name in names)
            if not matches and term not in (persona.numero_id or ""):
                continue
        if sede_id and persona.sede_id != sede_id:
            continue
        result.append(persona)
    return result


def filter_transacciones(
    transacciones: Iterable[TransaccionRecord],
    fecha_inicio: Optional[str] = None,
    fecha_fin: Optional[str] = None,
    actividad_id: Optional[str] = None,
) -> list[TransaccionRecord]:
    """Keep transactions inside ``[fecha_inicio, fecha_fin]`` (whole days)."""
    desde: Optional[date] = parse_date(fecha_inicio)
    hasta: Optional[date] = parse_date(fecha_fin)
    result = []
    for transaccion in transacciones:
        if actividad_id and transaccion.actividad_id != actividad_id:
            continue
        fecha = parse_date(transaccion.fecha)
        if desde and (fecha is None or fecha < desde):
            continue
        if hasta and (fecha is None or fecha > hasta):
            continue
        result.append(transaccion)
    return result


@dataclass
class Page:
    items: list
    page: int
    per_page: int
    total: int
    pages: int

    @property
    def start(self) -> int:
        """1-based index of the first item on the page (0 when empty)."""
        return (self.page - 1) * self.per_page + 1 if self.items else 0

    @property
    def end(self) -> int:
        return (self.page - 1) * self.per_page + len(self.items)


def paginate(items: Sequence, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> Page:
    per_page = max(1, per_page)
    total = len(items)
    pages = max(1, math.ceil(total / per_page))
    page = min(max(1, page), pages)
    offset = (page - 1) * per_page
    return Page(
        items=list(items[offset : offset + per_page]),
        page=page,
        per_page=per_page,
        total=total,
        pages=pages,
    )


def resumen(transacciones: Iterable[TransaccionRecord]) -> dict:
    ingresos = 0.0
    egresos = 0.0
    for transaccion in transacciones:
        if transaccion.estado == ESTADO_ANULADA:
            continue
        if transaccion.tipo == "ingreso":
            ingresos += transaccion.monto
        elif transaccion.tipo == "egreso":
            egresos += transaccion.monto
    return {"ingresos": ingresos, "egresos": egresos, "neto": ingresos - egresos}
