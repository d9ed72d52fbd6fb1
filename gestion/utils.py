"""
Text, date and validation helpers shared by the routes.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Optional

SPANISH_CONNECTORS = frozenset(
    {
        "de", "del", "la", "las", "el", "los", "y", "o", "u", "a", "e",
        "da", "do", "das", "dos", "san", "santa",
    }
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
TRUTHY_FORM_VALUES = frozenset({"on", "true", "1", "si", "sí", "yes"})


def to_title_case_es(value: Optional[str]) -> Optional[str]:
    """Title-case a Spanish name, keeping connectors like "de" in lower case."""
    if not value:
        return value
    words = re.sub(r"\s+", " ", value.lower()).strip().split(" ")
    result = []
    for index, word in enumerate(words):
        if index > 0 and word in SPANISH_CONNECTORS:
            result.append(word)
        else:
            result.append(word[:1].upper() + word[1:])
    return " ".join(result)


def full_name(*parts: Optional[str]) -> str:
    return " ".join(part.strip() for part in parts if part and part.strip())


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` (or a full ISO timestamp) into a date."""
    if not value:
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def calcular_edad(
    fecha_nacimiento: Optional[str], today: Optional[date] = None
) -> Optional[int]:
    nacimiento = parse_date(fecha_nacimiento)
    if nacimiento is None:
        return None
    hoy = today or date.today()
    edad = hoy.year - nacimiento.year
    if (hoy.month, hoy.day) < (nacimiento.month, nacimiento.day):
        edad -= 1
    return edad


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value and EMAIL_PATTERN.match(value))


def is_uuid(value: Optional[str]) -> bool:
    return bool(value and UUID_PATTERN.match(value))


def validate_id_number(numero_id: Optional[str], tipo_id: Optional[str]) -> bool:
    """Check an identity document number against its document type."""
    if not numero_id or not tipo_id:
        return False
    digits = re.sub(r"\D", "", numero_id)
    if tipo_id in ("CC", "CE"):
        return bool(re.fullmatch(r"\d{6,10}", digits))
    if tipo_id == "TI":
        return bool(re.fullmatch(r"\d{8,11}", digits))
    if tipo_id == "RC":
        return bool(re.fullmatch(r"[A-Za-z0-9]{6,12}", re.sub(r"\s+", "", numero_id)))
    return False


def parse_amount(value: Optional[str]) -> float:
    """Parse a form amount, mapping anything unparseable or non-finite to 0."""
    if value is None:
        return 0.0
    try:
        amount = float(str(value).strip())
    except ValueError:
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in TRUTHY_FORM_VALUES


def clean(value: Optional[str]) -> Optional[str]:
    """Strip a form value, mapping blanks to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def format_cop(amount: float) -> str:
    """Format an amount as Colombian pesos, e.g. ``$ 1.234.567``."""
    rounded = round(amount or 0)
    sign = "-" if rounded < 0 else ""
    return f"{sign}$ {abs(rounded):,}".replace(",", ".")
