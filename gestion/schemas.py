"""
Pydantic schemas for the JSON endpoints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class IdCheckRequest(BaseModel):
    numero_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("numero_id", "numeroId")
    )


class IdCheckResponse(BaseModel):
    exists: bool


class PersonaSearchResult(BaseModel):
    id: str
    nombre_completo: str
    documento_identidad: str
    tipo_documento: Optional[str] = None


class UserCreateRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: Optional[str] = Field(default=None, min_length=6)
    full_name: Optional[str] = None
    role: Optional[str] = None
    sede_id: Optional[str] = None


class UserUpdateRequest(BaseModel):
    user_id: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    sede_id: Optional[str] = None


class UserMutationResponse(BaseModel):
    ok: bool
    user_id: Optional[str] = None


class SedeCreateRequest(BaseModel):
    nombre_sede: str = Field(..., min_length=1, max_length=200)
    direccion_sede: Optional[str] = None


class SedeResponse(BaseModel):
    id: str
    nombre_sede: str
    direccion_sede: Optional[str] = None


class EscalaCreateRequest(BaseModel):
    nombre_escala: str = Field(..., min_length=1, max_length=200)


class EscalaResponse(BaseModel):
    id: str
    nombre_escala: str


class ResumenResponse(BaseModel):
    ingresos: float
    egresos: float
    neto: float


class ActividadDetalleResponse(BaseModel):
    actividad: dict
    transacciones: list[dict]
    resumen: ResumenResponse


class TransaccionesPageResponse(BaseModel):
    items: list[dict]
    page: int
    per_page: int
    total: int
    pages: int
    resumen: ResumenResponse
