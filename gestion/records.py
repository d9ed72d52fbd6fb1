"""
Plain records exchanged between the database clients and the routes.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

TIPOS_MOVIMIENTO = ("ingreso", "egreso")
ESTADOS_ACTIVIDAD = ("planeada", "en_curso", "completada")
ESTADO_ACTIVA = "activa"
ESTADO_ANULADA = "anulada"


def new_id() -> str:
    return str(uuid.uuid4())


def iso_timestamp(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).isoformat()


def _now() -> float:
    return time.time()


@dataclass
class SedeRecord:
    id: str
    nombre_sede: str
    direccion_sede: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class EscalaRecord:
    id: str
    nombre_escala: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class PersonaRecord:
    id: str
    nombres: str
    primer_apellido: str
    numero_id: str
    tipo_id: Optional[str] = None
    segundo_apellido: Optional[str] = None
    fecha_nacimiento: Optional[str] = None
    edad: Optional[int] = None
    genero: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    direccion: Optional[str] = None
    url_foto: Optional[str] = None
    user_id: Optional[str] = None
    sede_id: Optional[str] = None
    estado_civil: Optional[str] = None
    departamento: Optional[str] = None
    municipio: Optional[str] = None
    bautizado: bool = False
    created_at: float = field(default_factory=_now)
    updated_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = iso_timestamp(self.created_at)
        data["updated_at"] = iso_timestamp(self.updated_at)
        return data


@dataclass
class CategoriaRecord:
    id: str
    nombre: str
    tipo: str
    descripcion: Optional[str] = None
    created_at: float = field(default_factory=_now)
    updated_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = iso_timestamp(self.created_at)
        data["updated_at"] = iso_timestamp(self.updated_at)
        return data


@dataclass
class ActividadRecord:
    id: str
    nombre: str
    fecha_inicio: str
    meta: float
    estado: str = "en_curso"
    descripcion: Optional[str] = None
    fecha_fin: Optional[str] = None
    user_id: Optional[str] = None
    created_at: float = field(default_factory=_now)
    updated_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = iso_timestamp(self.created_at)
        data["updated_at"] = iso_timestamp(self.updated_at)
        return data


@dataclass
class TransaccionRecord:
    id: str
    numero_transaccion: str
    fecha: str
    monto: float
    tipo: str
    categoria_id: str
    descripcion: Optional[str] = None
    actividad_id: Optional[str] = None
    persona_id: Optional[str] = None
    user_id: Optional[str] = None
    evidencia: Optional[str] = None
    estado: str = ESTADO_ACTIVA
    created_at: float = field(default_factory=_now)
    updated_at: float = field(default_factory=_now)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = iso_timestamp(self.created_at)
        data["updated_at"] = iso_timestamp(self.updated_at)
        return data


@dataclass
class UserRecord:
    """Application user (``profiles`` table)."""

    id: str
    email: str
    password_hash: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    sede_id: Optional[str] = None
    created_at: float = field(default_factory=_now)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "sede_id": self.sede_id,
            "created_at": iso_timestamp(self.created_at),
        }
