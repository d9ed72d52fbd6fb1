"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import time
from dataclasses import asdict, fields
from typing import Dict, Iterable, Optional, Protocol, TypeVar

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    create_engine,
    delete,
    func,
    or_,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from gestion.records import (
    ActividadRecord,
    CategoriaRecord,
    EscalaRecord,
    PersonaRecord,
    SedeRecord,
    TransaccionRecord,
    UserRecord,
    new_id,
)

R = TypeVar("R")


class DbClient(Protocol):
    """Interface for database access."""

    # Sedes / escalas
    def create_sede(
        self, nombre_sede: str, direccion_sede: Optional[str] = None
    ) -> SedeRecord:
        ...

    def get_sede(self, sede_id: str) -> Optional[SedeRecord]:
        ...

    def list_sedes(self) -> list[SedeRecord]:
        ...

    def create_escala(self, nombre_escala: str) -> EscalaRecord:
        ...

    def list_escalas(self) -> list[EscalaRecord]:
        ...

    # Personas
    def insert_persona(self, persona: PersonaRecord) -> PersonaRecord:
        ...

    def get_persona(self, persona_id: str) -> Optional[PersonaRecord]:
        ...

    def list_personas(self) -> list[PersonaRecord]:
        ...

    def find_persona_by_numero_id(
        self, numero_id: str, exclude_id: Optional[str] = None
    ) -> Optional[PersonaRecord]:
        ...

    def search_personas(self, term: str, limit: int = 10) -> list[PersonaRecord]:
        ...

    def update_persona(
        self, persona_id: str, changes: dict
    ) -> Optional[PersonaRecord]:
        ...

    def delete_persona(self, persona_id: str) -> bool:
        ...

    def link_persona_escalas(
        self, persona_id: str, escala_ids: Iterable[str]
    ) -> None:
        ...

    def unlink_persona_escalas(self, persona_id: str) -> int:
        ...

    def list_persona_escalas(self, persona_id: str) -> list[EscalaRecord]:
        ...

    # Categorias
    def insert_categoria(self, categoria: CategoriaRecord) -> CategoriaRecord:
        ...

    def get_categoria(self, categoria_id: str) -> Optional[CategoriaRecord]:
        ...

    def list_categorias(self, tipo: Optional[str] = None) -> list[CategoriaRecord]:
        ...

    def update_categoria(
        self, categoria_id: str, changes: dict
    ) -> Optional[CategoriaRecord]:
        ...

    def delete_categoria(self, categoria_id: str) -> bool:
        ...

    # Actividades
    def insert_actividad(self, actividad: ActividadRecord) -> ActividadRecord:
        ...

    def get_actividad(self, actividad_id: str) -> Optional[ActividadRecord]:
        ...

    def list_actividades(self) -> list[ActividadRecord]:
        ...

    def find_actividad_by_nombre(
        self, nombre: str, user_id: Optional[str], exclude_id: Optional[str] = None
    ) -> Optional[ActividadRecord]:
        ...

    def update_actividad(
        self, actividad_id: str, changes: dict
    ) -> Optional[ActividadRecord]:
        ...

    def delete_actividad(self, actividad_id: str) -> bool:
        ...

    # Transacciones
    def insert_transaccion(
        self, transaccion: TransaccionRecord
    ) -> TransaccionRecord:
        ...

    def get_transaccion(self, transaccion_id: str) -> Optional[TransaccionRecord]:
        ...

    def list_transacciones(
        self, actividad_id: Optional[str] = None
    ) -> list[TransaccionRecord]:
        ...

    def count_transacciones(
        self,
        *,
        actividad_id: Optional[str] = None,
        categoria_id: Optional[str] = None,
    ) -> int:
        ...

    def last_numero_transaccion(self, tipo: str) -> Optional[str]:
        ...

    def update_transaccion(
        self, transaccion_id: str, changes: dict
    ) -> Optional[TransaccionRecord]:
        ...

    # Users
    def insert_user(self, user: UserRecord) -> UserRecord:
        ...

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    def update_user(self, user_id: str, changes: dict) -> Optional[UserRecord]:
        ...


def _apply_changes(record, changes: dict, *, touch: bool = True) -> None:
    for key, value in changes.items():
        setattr(record, key, value)
    if touch and hasattr(record, "updated_at") and "updated_at" not in changes:
        record.updated_at = time.time()


def _newest_first(items: Iterable):
    # Ties on created_at keep the most recently inserted first.
    return sorted(reversed(list(items)), key=lambda r: r.created_at, reverse=True)


def _persona_sort_key(persona: PersonaRecord) -> tuple[str, str]:
    return (persona.primer_apellido or "").lower(), (persona.nombres or "").lower()


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.sedes: Dict[str, SedeRecord] = {}
        self.escalas: Dict[str, EscalaRecord] = {}
        self.personas: Dict[str, PersonaRecord] = {}
        self.persona_escala: list[tuple[str, str]] = []
        self.categorias: Dict[str, CategoriaRecord] = {}
        self.actividades: Dict[str, ActividadRecord] = {}
        self.transacciones: Dict[str, TransaccionRecord] = {}
        self.users: Dict[str, UserRecord] = {}

    def create_sede(
        self, nombre_sede: str, direccion_sede: Optional[str] = None
    ) -> SedeRecord:
        record = SedeRecord(
            id=new_id(), nombre_sede=nombre_sede, direccion_sede=direccion_sede
        )
        self.sedes[record.id] = record
        return record

    def get_sede(self, sede_id: str) -> Optional[SedeRecord]:
        return self.sedes.get(sede_id)

    def list_sedes(self) -> list[SedeRecord]:
        return sorted(self.sedes.values(), key=lambda s: s.nombre_sede.lower())

    def create_escala(self, nombre_escala: str) -> EscalaRecord:
        record = EscalaRecord(id=new_id(), nombre_escala=nombre_escala)
        self.escalas[record.id] = record
        return record

    def list_escalas(self) -> list[EscalaRecord]:
        return sorted(self.escalas.values(), key=lambda e: e.nombre_escala.lower())

    def insert_persona(self, persona: PersonaRecord) -> PersonaRecord:
        self.personas[persona.id] = persona
        return persona

    def get_persona(self, persona_id: str) -> Optional[PersonaRecord]:
        return self.personas.get(persona_id)

    def list_personas(self) -> list[PersonaRecord]:
        return sorted(self.personas.values(), key=_persona_sort_key)

    def find_persona_by_numero_id(
        self, numero_id: str, exclude_id: Optional[str] = None
    ) -> Optional[PersonaRecord]:
        for persona in self.personas.values():
            if persona.numero_id == numero_id and persona.id != exclude_id:
                return persona
        return None

    def search_personas(self, term: str, limit: int = 10) -> list[PersonaRecord]:
        needle = (term or "").lower()
        matches = []
        for persona in self.personas.values():
            haystacks = (persona.numero_id, persona.nombres, persona.primer_apellido)
            if any(needle in (value or "").lower() for value in haystacks):
                matches.append(persona)
                if len(matches) >= limit:
                    break
        return matches

    def update_persona(
        self, persona_id: str, changes: dict
    ) -> Optional[PersonaRecord]:
        persona = self.personas.get(persona_id)
        if not persona:
            return None
        _apply_changes(persona, changes)
        return persona

    def delete_persona(self, persona_id: str) -> bool:
        return self.personas.pop(persona_id, None) is not None

    def link_persona_escalas(
        self, persona_id: str, escala_ids: Iterable[str]
    ) -> None:
        for escala_id in escala_ids:
            if escala_id not in self.escalas:
                raise KeyError(f"Escala {escala_id} no existe")
            self.persona_escala.append((persona_id, escala_id))

    def unlink_persona_escalas(self, persona_id: str) -> int:
        before = len(self.persona_escala)
        self.persona_escala = [
            link for link in self.persona_escala if link[0] != persona_id
        ]
        return before - len(self.persona_escala)

    def list_persona_escalas(self, persona_id: str) -> list[EscalaRecord]:
        return [
            self.escalas[escala_id]
            for pid, escala_id in self.persona_escala
            if pid == persona_id and escala_id in self.escalas
        ]

    def insert_categoria(self, categoria: CategoriaRecord) -> CategoriaRecord:
        self.categorias[categoria.id] = categoria
        return categoria

    def get_categoria(self, categoria_id: str) -> Optional[CategoriaRecord]:
        return self.categorias.get(categoria_id)

    def list_categorias(self, tipo: Optional[str] = None) -> list[CategoriaRecord]:
        items = [c for c in self.categorias.values() if not tipo or c.tipo == tipo]
        return sorted(items, key=lambda c: c.nombre.lower())

    def update_categoria(
        self, categoria_id: str, changes: dict
    ) -> Optional[CategoriaRecord]:
        categoria = self.categorias.get(categoria_id)
        if not categoria:
            return None
        _apply_changes(categoria, changes)
        return categoria

    def delete_categoria(self, categoria_id: str) -> bool:
        return self.categorias.pop(categoria_id, None) is not None

    def insert_actividad(self, actividad: ActividadRecord) -> ActividadRecord:
        self.actividades[actividad.id] = actividad
        return actividad

    def get_actividad(self, actividad_id: str) -> Optional[ActividadRecord]:
        return self.actividades.get(actividad_id)

    def list_actividades(self) -> list[ActividadRecord]:
        return _newest_first(self.actividades.values())

    def find_actividad_by_nombre(
        self, nombre: str, user_id: Optional[str], exclude_id: Optional[str] = None
    ) -> Optional[ActividadRecord]:
        for actividad in self.actividades.values():
            if (
                actividad.nombre == nombre
                and actividad.user_id == user_id
                and actividad.id != exclude_id
            ):
                return actividad
        return None

    def update_actividad(
        self, actividad_id: str, changes: dict
    ) -> Optional[ActividadRecord]:
        actividad = self.actividades.get(actividad_id)
        if not actividad:
            return None
        _apply_changes(actividad, changes)
        return actividad

    def delete_actividad(self, actividad_id: str) -> bool:
        return self.actividades.pop(actividad_id, None) is not None

    def insert_transaccion(
        self, transaccion: TransaccionRecord
    ) -> TransaccionRecord:
        self.transacciones[transaccion.id] = transaccion
        return transaccion

    def get_transaccion(self, transaccion_id: str) -> Optional[TransaccionRecord]:
        return self.transacciones.get(transaccion_id)

    def list_transacciones(
        self, actividad_id: Optional[str] = None
    ) -> list[TransaccionRecord]:
        items = [
            t
            for t in self.transacciones.values()
            if not actividad_id or t.actividad_id == actividad_id
        ]
        return _newest_first(items)

    def count_transacciones(
        self,
        *,
        actividad_id: Optional[str] = None,
        categoria_id: Optional[str] = None,
    ) -> int:
        count = 0
        for t in self.transacciones.values():
            if actividad_id and t.actividad_id != actividad_id:
                continue
            if categoria_id and t.categoria_id != categoria_id:
                continue
            count += 1
        return count

    def last_numero_transaccion(self, tipo: str) -> Optional[str]:
        for t in _newest_first(self.transacciones.values()):
            if t.tipo == tipo:
                return t.numero_transaccion
        return None

    def update_transaccion(
        self, transaccion_id: str, changes: dict
    ) -> Optional[TransaccionRecord]:
        transaccion = self.transacciones.get(transaccion_id)
        if not transaccion:
            return None
        _apply_changes(transaccion, changes)
        return transaccion

    def insert_user(self, user: UserRecord) -> UserRecord:
        self.users[user.id] = user
        return user

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        needle = (email or "").strip().lower()
        for user in self.users.values():
            if user.email.lower() == needle:
                return user
        return None

    def update_user(self, user_id: str, changes: dict) -> Optional[UserRecord]:
        user = self.users.get(user_id)
        if not user:
            return None
        _apply_changes(user, changes, touch=False)
        return user


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_record(row, record_cls: type[R]) -> R:
        return record_cls(**{f.name: getattr(row, f.name) for f in fields(record_cls)})

    def _insert(self, row_cls, record):
        with self.Session() as session:
            session.add(row_cls(**asdict(record)))
            session.commit()
        return record

    def _get(self, row_cls, record_cls, key: str):
        with self.Session() as session:
            row = session.get(row_cls, key)
            return self._to_record(row, record_cls) if row else None

    def _update(self, row_cls, record_cls, key: str, changes: dict, *, touch=True):
        with self.Session() as session:
            row = session.get(row_cls, key)
            if not row:
                return None
            _apply_changes(row, changes, touch=touch)
            session.commit()
            return self._to_record(row, record_cls)

    def _delete(self, row_cls, key: str) -> bool:
        with self.Session() as session:
            row = session.get(row_cls, key)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def create_sede(
        self, nombre_sede: str, direccion_sede: Optional[str] = None
    ) -> SedeRecord:
        record = SedeRecord(
            id=new_id(), nombre_sede=nombre_sede, direccion_sede=direccion_sede
        )
        return self._insert(SedeRow, record)

    def get_sede(self, sede_id: str) -> Optional[SedeRecord]:
        return self._get(SedeRow, SedeRecord, sede_id)

    def list_sedes(self) -> list[SedeRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(SedeRow).order_by(SedeRow.nombre_sede.asc())
            ).scalars()
            return [self._to_record(row, SedeRecord) for row in rows]

    def create_escala(self, nombre_escala: str) -> EscalaRecord:
        record = EscalaRecord(id=new_id(), nombre_escala=nombre_escala)
        return self._insert(EscalaRow, record)

    def list_escalas(self) -> list[EscalaRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(EscalaRow).order_by(EscalaRow.nombre_escala.asc())
            ).scalars()
            return [self._to_record(row, EscalaRecord) for row in rows]

    def insert_persona(self, persona: PersonaRecord) -> PersonaRecord:
        return self._insert(PersonaRow, persona)

    def get_persona(self, persona_id: str) -> Optional[PersonaRecord]:
        return self._get(PersonaRow, PersonaRecord, persona_id)

    def list_personas(self) -> list[PersonaRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(PersonaRow).order_by(
                    func.lower(PersonaRow.primer_apellido), func.lower(PersonaRow.nombres)
                )
            ).scalars()
            return [self._to_record(row, PersonaRecord) for row in rows]

    def find_persona_by_numero_id(
        self, numero_id: str, exclude_id: Optional[str] = None
    ) -> Optional[PersonaRecord]:
        with self.Session() as session:
            stmt = select(PersonaRow).where(PersonaRow.numero_id == numero_id)
            if exclude_id:
                stmt = stmt.where(PersonaRow.id != exclude_id)
            row = session.execute(stmt.limit(1)).scalar_one_or_none()
            return self._to_record(row, PersonaRecord) if row else None

    def search_personas(self, term: str, limit: int = 10) -> list[PersonaRecord]:
        pattern = f"%{term or ''}%"
        with self.Session() as session:
            stmt = (
                select(PersonaRow)
                .where(
                    or_(
                        PersonaRow.numero_id.ilike(pattern),
                        PersonaRow.nombres.ilike(pattern),
                        PersonaRow.primer_apellido.ilike(pattern),
                    )
                )
                .limit(limit)
            )
            rows = session.execute(stmt).scalars()
            return [self._to_record(row, PersonaRecord) for row in rows]

    def update_persona(
        self, persona_id: str, changes: dict
    ) -> Optional[PersonaRecord]:
        return self._update(PersonaRow, PersonaRecord, persona_id, changes)

    def delete_persona(self, persona_id: str) -> bool:
        return self._delete(PersonaRow, persona_id)

    def link_persona_escalas(
        self, persona_id: str, escala_ids: Iterable[str]
    ) -> None:
        with self.Session() as session:
            for escala_id in escala_ids:
                if session.get(EscalaRow, escala_id) is None:
                    raise KeyError(f"Escala {escala_id} no existe")
                session.add(PersonaEscalaRow(persona_id=persona_id, escala_id=escala_id))
            session.commit()

    def unlink_persona_escalas(self, persona_id: str) -> int:
        with self.Session() as session:
            result = session.execute(
                delete(PersonaEscalaRow).where(
                    PersonaEscalaRow.persona_id == persona_id
                )
            )
            session.commit()
            return result.rowcount or 0

    def list_persona_escalas(self, persona_id: str) -> list[EscalaRecord]:
        with self.Session() as session:
            stmt = (
                select(EscalaRow)
                .join(PersonaEscalaRow, PersonaEscalaRow.escala_id == EscalaRow.id)
                .where(PersonaEscalaRow.persona_id == persona_id)
                .order_by(PersonaEscalaRow.id.asc())
            )
            rows = session.execute(stmt).scalars()
            return [self._to_record(row, EscalaRecord) for row in rows]

    def insert_categoria(self, categoria: CategoriaRecord) -> CategoriaRecord:
        return self._insert(CategoriaRow, categoria)

    def get_categoria(self, categoria_id: str) -> Optional[CategoriaRecord]:
        return self._get(CategoriaRow, CategoriaRecord, categoria_id)

    def list_categorias(self, tipo: Optional[str] = None) -> list[CategoriaRecord]:
        with self.Session() as session:
            stmt = select(CategoriaRow).order_by(func.lower(CategoriaRow.nombre))
            if tipo:
                stmt = stmt.where(CategoriaRow.tipo == tipo)
            rows = session.execute(stmt).scalars()
            return [self._to_record(row, CategoriaRecord) for row in rows]

    def update_categoria(
        self, categoria_id: str, changes: dict
    ) -> Optional[CategoriaRecord]:
        return self._update(CategoriaRow, CategoriaRecord, categoria_id, changes)

    def delete_categoria(self, categoria_id: str) -> bool:
        return self._delete(CategoriaRow, categoria_id)

    def insert_actividad(self, actividad: ActividadRecord) -> ActividadRecord:
        return self._insert(ActividadRow, actividad)

    def get_actividad(self, actividad_id: str) -> Optional[ActividadRecord]:
        return self._get(ActividadRow, ActividadRecord, actividad_id)

    def list_actividades(self) -> list[ActividadRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(ActividadRow).order_by(ActividadRow.created_at.desc())
            ).scalars()
            return [self._to_record(row, ActividadRecord) for row in rows]

    def find_actividad_by_nombre(
        self, nombre: str, user_id: Optional[str], exclude_id: Optional[str] = None
    ) -> Optional[ActividadRecord]:
        with self.Session() as session:
            stmt = select(ActividadRow).where(
                ActividadRow.nombre == nombre, ActividadRow.user_id == user_id
            )
            if exclude_id:
                stmt = stmt.where(ActividadRow.id != exclude_id)
            row = session.execute(stmt.limit(1)).scalar_one_or_none()
            return self._to_record(row, ActividadRecord) if row else None

    def update_actividad(
        self, actividad_id: str, changes: dict
    ) -> Optional[ActividadRecord]:
        return self._update(ActividadRow, ActividadRecord, actividad_id, changes)

    def delete_actividad(self, actividad_id: str) -> bool:
        return self._delete(ActividadRow, actividad_id)

    def insert_transaccion(
        self, transaccion: TransaccionRecord
    ) -> TransaccionRecord:
        return self._insert(TransaccionRow, transaccion)

    def get_transaccion(self, transaccion_id: str) -> Optional[TransaccionRecord]:
        return self._get(TransaccionRow, TransaccionRecord, transaccion_id)

    def list_transacciones(
        self, actividad_id: Optional[str] = None
    ) -> list[TransaccionRecord]:
        with self.Session() as session:
            stmt = select(TransaccionRow).order_by(
                TransaccionRow.created_at.desc(),
                TransaccionRow.numero_transaccion.desc(),
            )
            if actividad_id:
                stmt = stmt.where(TransaccionRow.actividad_id == actividad_id)
            rows = session.execute(stmt).scalars()
            return [self._to_record(row, TransaccionRecord) for row in rows]

    def count_transacciones(
        self,
        *,
        actividad_id: Optional[str] = None,
        categoria_id: Optional[str] = None,
    ) -> int:
        with self.Session() as session:
            stmt = select(func.count()).select_from(TransaccionRow)
            if actividad_id:
                stmt = stmt.where(TransaccionRow.actividad_id == actividad_id)
            if categoria_id:
                stmt = stmt.where(TransaccionRow.categoria_id == categoria_id)
            return session.execute(stmt).scalar_one()

    def last_numero_transaccion(self, tipo: str) -> Optional[str]:
        with self.Session() as session:
            stmt = (
                select(TransaccionRow.numero_transaccion)
                .where(TransaccionRow.tipo == tipo)
                .order_by(
                    TransaccionRow.created_at.desc(),
                    TransaccionRow.numero_transaccion.desc(),
                )
                .limit(1)
            )
            return session.execute(stmt).scalar_one_or_none()

    def update_transaccion(
        self, transaccion_id: str, changes: dict
    ) -> Optional[TransaccionRecord]:
        return self._update(TransaccionRow, TransaccionRecord, transaccion_id, changes)

    def insert_user(self, user: UserRecord) -> UserRecord:
        return self._insert(ProfileRow, user)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self._get(ProfileRow, UserRecord, user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            stmt = select(ProfileRow).where(
                func.lower(ProfileRow.email) == (email or "").strip().lower()
            )
            row = session.execute(stmt.limit(1)).scalar_one_or_none()
            return self._to_record(row, UserRecord) if row else None

    def update_user(self, user_id: str, changes: dict) -> Optional[UserRecord]:
        return self._update(ProfileRow, UserRecord, user_id, changes, touch=False)


Base = declarative_base()


class SedeRow(Base):
    __tablename__ = "sedes"

    id = Column(String, primary_key=True)
    nombre_sede = Column(String, nullable=False)
    direccion_sede = Column(String, nullable=True)


class EscalaRow(Base):
    __tablename__ = "escala_de_crecimiento"

    id = Column(String, primary_key=True)
    nombre_escala = Column(String, nullable=False)


class PersonaRow(Base):
    __tablename__ = "persona"

    id = Column(String, primary_key=True)
    nombres = Column(String, nullable=False)
    primer_apellido = Column(String, nullable=False)
    segundo_apellido = Column(String, nullable=True)
    tipo_id = Column(String, nullable=True)
    numero_id = Column(String, nullable=False, unique=True, index=True)
    fecha_nacimiento = Column(String, nullable=True)
    edad = Column(Integer, nullable=True)
    genero = Column(String, nullable=True)
    telefono = Column(String, nullable=True)
    email = Column(String, nullable=True)
    direccion = Column(String, nullable=True)
    url_foto = Column(String, nullable=True)
    user_id = Column(String, nullable=True)
    sede_id = Column(String, ForeignKey("sedes.id"), nullable=True, index=True)
    estado_civil = Column(String, nullable=True)
    departamento = Column(String, nullable=True)
    municipio = Column(String, nullable=True)
    bautizado = Column(Boolean, nullable=False, default=False)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class PersonaEscalaRow(Base):
    __tablename__ = "persona_escala"

    id = Column(Integer, primary_key=True, autoincrement=True)
    persona_id = Column(String, ForeignKey("persona.id"), nullable=False, index=True)
    escala_id = Column(
        String, ForeignKey("escala_de_crecimiento.id"), nullable=False
    )


class CategoriaRow(Base):
    __tablename__ = "categorias"

    id = Column(String, primary_key=True)
    nombre = Column(String, nullable=False)
    tipo = Column(String, nullable=False, index=True)
    descripcion = Column(String, nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class ActividadRow(Base):
    __tablename__ = "actividades"

    id = Column(String, primary_key=True)
    nombre = Column(String, nullable=False)
    descripcion = Column(String, nullable=True)
    fecha_inicio = Column(String, nullable=False)
    fecha_fin = Column(String, nullable=True)
    estado = Column(String, nullable=False, default="en_curso")
    meta = Column(Float, nullable=False)
    user_id = Column(String, nullable=True, index=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class TransaccionRow(Base):
    __tablename__ = "transacciones"

    id = Column(String, primary_key=True)
    numero_transaccion = Column(String, nullable=False, index=True)
    fecha = Column(String, nullable=False)
    monto = Column(Float, nullable=False)
    tipo = Column(String, nullable=False, index=True)
    categoria_id = Column(
        String, ForeignKey("categorias.id"), nullable=False, index=True
    )
    descripcion = Column(String, nullable=True)
    actividad_id = Column(
        String, ForeignKey("actividades.id"), nullable=True, index=True
    )
    persona_id = Column(String, ForeignKey("persona.id"), nullable=True)
    user_id = Column(String, nullable=True)
    evidencia = Column(String, nullable=True)
    estado = Column(String, nullable=False, default="activa")
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class ProfileRow(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    role = Column(String, nullable=True)
    sede_id = Column(String, nullable=True)
    created_at = Column(Float, nullable=False)
