"""
Sequential ``numero_transaccion`` values (ING001, EGR002, ...).

Numbers are derived from the most recent transaction of the same type, so
two concurrent writers can receive the same value.
"""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)

PREFIXES = {"ingreso": "ING", "egreso": "EGR"}
PAD_WIDTH = 3


def prefix_for(tipo: str) -> str:
    try:
        return PREFIXES[tipo]
    except KeyError:
        raise ValueError(f"Tipo de transacción desconocido: {tipo!r}") from None


def next_numero_transaccion(tipo: str, last: Optional[str]) -> str:
    prefix = prefix_for(tipo)
    first = f"{prefix}{1:0{PAD_WIDTH}d}"
    if not last:
        return first
    suffix = last[len(prefix):] if last.startswith(prefix) else last
    if not suffix.isdigit():
        logger.warning("Ignoring unparsable numero_transaccion %r", last)
        return first
    return f"{prefix}{int(suffix) + 1:0{PAD_WIDTH}d}"
