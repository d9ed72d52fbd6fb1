"""
HTTP routes for the people registry (personas).
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import FormData, UploadFile

from gestion import exports
from gestion.config import Settings, get_settings
from gestion.db import DbClient
from gestion.dependencies import get_current_user, get_db_client, get_storage_client
from gestion.errors import ActionError, action_success
from gestion.filters import filter_personas
from gestion.records import PersonaRecord, UserRecord, new_id
from gestion.schemas import IdCheckRequest, IdCheckResponse, PersonaSearchResult
from gestion.storage import StorageClient
from gestion.utils import (
    calcular_edad,
    clean,
    full_name,
    is_valid_email,
    parse_bool,
    to_title_case_es,
    validate_id_number,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PERSONAS_PATH = "/personas"
KNOWN_ID_TYPES = ("CC", "TI", "CE", "RC")
OPTIONAL_TEXT_FIELDS = (
    "segundo_apellido",
    "genero",
    "fecha_nacimiento",
    "email",
    "direccion",
    "telefono",
    "estado_civil",
    "departamento",
    "municipio",
)


def _form_text(form: FormData, key: str) -> Optional[str]:
    value = form.get(key)
    if isinstance(value, UploadFile):
        return None
    return clean(value)


def _persona_payload(
    db: DbClient, persona: PersonaRecord, sedes_by_id: Optional[dict] = None
) -> dict:
    data = persona.as_dict()
    sede = None
    if persona.sede_id:
        if sedes_by_id is not None:
            sede = sedes_by_id.get(persona.sede_id)
        else:
            sede = db.get_sede(persona.sede_id)
    data["sede"] = sede.as_dict() if sede else None
    data["escalas"] = [e.as_dict() for e in db.list_persona_escalas(persona.id)]
    return data


def _filtered_payloads(db: DbClient, q: Optional[str], sede_id: Optional[str]) -> list[dict]:
    sedes_by_id = {sede.id: sede for sede in db.list_sedes()}
    personas = filter_personas(db.list_personas(), search=q, sede_id=sede_id)
    return [_persona_payload(db, persona, sedes_by_id) for persona in personas]


def _check_document(numero_id: str, tipo_id: Optional[str], redirect_to: str) -> None:
    if tipo_id in KNOWN_ID_TYPES and not validate_id_number(numero_id, tipo_id):
        raise ActionError(
            "El número de identificación no es válido para el tipo de documento.",
            redirect_to,
        )


def _check_sede(db: DbClient, sede_id: Optional[str], redirect_to: str) -> None:
    if sede_id and db.get_sede(sede_id) is None:
        raise ActionError("La sede seleccionada no existe.", redirect_to)


async def _upload_foto(
    upload, user: UserRecord, storage: StorageClient, settings: Settings
) -> tuple[Optional[str], Optional[str]]:
    """Store the submitted photo, returning (storage path, public URL)."""
    if not isinstance(upload, UploadFile) or not upload.filename:
        return None, None
    content = await upload.read()
    if not content:
        return None, None
    extension = upload.filename.rsplit(".", 1)[-1].lower() if "." in upload.filename else "jpg"
    path = f"{settings.fotos_prefix}/{user.id}-{int(time.time() * 1000)}.{extension}"
    logger.info("Uploading photo %s (%d bytes)", path, len(content))
    try:
        storage.upload_bytes(path, content, upload.content_type)
    except Exception:
        logger.exception("Photo upload failed for %s", path)
        raise ActionError("No se pudo subir la imagen.", PERSONAS_PATH, 500)
    return path, storage.public_url(path)


@router.post("/personas")
async def create_persona(
    request: Request,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
):
    form = await request.form()
    numero_id = _form_text(form, "numero_id")
    logger.info("Creating persona %s requested by %s", numero_id, user.email)
    if not numero_id:
        raise ActionError("El número de identificación es obligatorio.", PERSONAS_PATH)

    nombres = _form_text(form, "nombres")
    primer_apellido = _form_text(form, "primer_apellido")
    if not nombres or not primer_apellido:
        raise ActionError("Los nombres y el primer apellido son obligatorios.", PERSONAS_PATH)

    tipo_id = _form_text(form, "tipo_id")
    _check_document(numero_id, tipo_id, PERSONAS_PATH)

    fields = {key: _form_text(form, key) for key in OPTIONAL_TEXT_FIELDS}
    if fields["email"] and not is_valid_email(fields["email"]):
        raise ActionError("Por favor ingresa un email válido", PERSONAS_PATH)

    sede_id = _form_text(form, "sede_id")
    _check_sede(db, sede_id, PERSONAS_PATH)

    if db.find_persona_by_numero_id(numero_id):
        logger.info("numero_id %s already registered", numero_id)
        raise ActionError(
            "Ya existe una persona con este número de identificación.", PERSONAS_PATH
        )

    foto_path, foto_url = await _upload_foto(form.get("foto_upload"), user, storage, settings)

    fields["segundo_apellido"] = to_title_case_es(fields["segundo_apellido"])
    persona = PersonaRecord(
        id=new_id(),
        nombres=to_title_case_es(nombres),
        primer_apellido=to_title_case_es(primer_apellido),
        numero_id=numero_id,
        tipo_id=tipo_id,
        edad=calcular_edad(fields["fecha_nacimiento"]),
        url_foto=foto_url,
        user_id=user.id,
        sede_id=sede_id,
        bautizado=parse_bool(_form_text(form, "bautizado")),
        **fields,
    )
    try:
        db.insert_persona(persona)
    except SQLAlchemyError:
        logger.exception("Insert of persona %s failed", numero_id)
        if foto_path:
            storage.delete(foto_path)
        raise ActionError("No se pudo guardar la persona.", PERSONAS_PATH, 500)
    logger.info("Persona inserted with id %s", persona.id)

    escala_ids = [value for value in form.getlist("escalas_seleccionadas") if value]
    if escala_ids:
        try:
            db.link_persona_escalas(persona.id, escala_ids)
        except (KeyError, SQLAlchemyError) as exc:
            logger.exception("Linking escalas to persona %s failed", persona.id)
            raise ActionError(
                f"Error de base de datos al asociar escalas: {exc}", PERSONAS_PATH, 500
            )

    return action_success(
        request,
        "Persona creada con éxito",
        PERSONAS_PATH,
        {"persona": _persona_payload(db, persona)},
    )


@router.get("/personas")
def list_personas(
    q: Optional[str] = Query(None),
    sede_id: Optional[str] = Query(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    payloads = _filtered_payloads(db, q, sede_id)
    logger.info("Listing %d personas", len(payloads))
    return payloads


@router.get("/personas/buscar", response_model=list[PersonaSearchResult])
def buscar_personas(
    q: str = Query(""),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return [
        PersonaSearchResult(
            id=persona.id,
            nombre_completo=full_name(
                persona.nombres, persona.primer_apellido, persona.segundo_apellido
            ),
            documento_identidad=persona.numero_id,
            tipo_documento=persona.tipo_id,
        )
        for persona in db.search_personas(q.strip(), limit=10)
    ]


@router.get("/personas/export")
def export_personas(
    formato: str = Query("pdf"),
    q: Optional[str] = Query(None),
    sede_id: Optional[str] = Query(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    payloads = _filtered_payloads(db, q, sede_id)
    formato_normalizado = (formato or "").strip().lower()
    if formato_normalizado == "pdf":
        content, media_type, extension = exports.personas_pdf(payloads), exports.PDF_MEDIA_TYPE, "pdf"
    elif formato_normalizado in ("excel", "xlsx"):
        content, media_type, extension = exports.personas_xlsx(payloads), exports.XLSX_MEDIA_TYPE, "xlsx"
    else:
        raise HTTPException(status_code=400, detail="Formato no soportado")
    filename = f"personas_{time.strftime('%Y%m%d_%H%M%S')}.{extension}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/personas/{persona_id}")
def get_persona(
    persona_id: str,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    persona = db.get_persona(persona_id)
    if not persona:
        raise HTTPException(status_code=404, detail="Persona no encontrada")
    return _persona_payload(db, persona)


@router.api_route("/personas/{persona_id}/update", methods=["POST", "PUT"])
async def update_persona(
    persona_id: str,
    request: Request,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    form = await request.form()
    edit_path = f"{PERSONAS_PATH}/{persona_id}/editar"

    required = {
        key: _form_text(form, key)
        for key in ("nombres", "primer_apellido", "numero_id", "tipo_id", "email", "telefono")
    }
    if not all(required.values()):
        raise ActionError("Por favor completa todos los campos requeridos", edit_path)
    if not is_valid_email(required["email"]):
        raise ActionError("Por favor ingresa un email válido", edit_path)
    _check_document(required["numero_id"], required["tipo_id"], edit_path)

    if db.get_persona(persona_id) is None:
        logger.warning("Persona %s not found for update", persona_id)
        raise ActionError("Persona no encontrada", PERSONAS_PATH, 404)

    if db.find_persona_by_numero_id(required["numero_id"], exclude_id=persona_id):
        raise ActionError(
            "Ya existe una persona con este número de identificación", edit_path
        )

    sede_id = _form_text(form, "sede_id")
    _check_sede(db, sede_id, edit_path)

    fecha_nacimiento = _form_text(form, "fecha_nacimiento")
    changes = {
        "nombres": to_title_case_es(required["nombres"]),
        "primer_apellido": to_title_case_es(required["primer_apellido"]),
        "segundo_apellido": to_title_case_es(_form_text(form, "segundo_apellido")),
        "numero_id": required["numero_id"],
        "tipo_id": required["tipo_id"],
        "email": required["email"],
        "telefono": required["telefono"],
        "direccion": _form_text(form, "direccion"),
        "genero": _form_text(form, "genero"),
        "fecha_nacimiento": fecha_nacimiento,
        "edad": calcular_edad(fecha_nacimiento),
        "url_foto": _form_text(form, "url_foto"),
        "sede_id": sede_id,
    }
    for key in ("estado_civil", "departamento", "municipio"):
        if key in form:
            changes[key] = _form_text(form, key)
    if "bautizado" in form:
        changes["bautizado"] = parse_bool(_form_text(form, "bautizado"))

    relink = "escalas_seleccionadas" in form
    escala_ids = [v for v in form.getlist("escalas_seleccionadas") if v]
    if relink:
        known = {escala.id for escala in db.list_escalas()}
        unknown = [escala_id for escala_id in escala_ids if escala_id not in known]
        if unknown:
            raise ActionError(f"Escala no encontrada: {unknown[0]}", edit_path)

    logger.info("Updating persona %s", persona_id)
    try:
        db.update_persona(persona_id, changes)
        if relink:
            db.unlink_persona_escalas(persona_id)
            db.link_persona_escalas(persona_id, escala_ids)
    except (KeyError, SQLAlchemyError) as exc:
        logger.exception("Update of persona %s failed", persona_id)
        raise ActionError(f"Error al actualizar la persona: {exc}", edit_path, 500)

    return action_success(
        request,
        "Persona actualizada correctamente",
        f"{PERSONAS_PATH}/{persona_id}",
    )


@router.api_route("/personas/{persona_id}/delete", methods=["POST", "DELETE"])
def delete_persona(
    persona_id: str,
    request: Request,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    logger.info("Deleting persona %s", persona_id)
    if db.get_persona(persona_id) is None:
        raise ActionError("Persona no encontrada", PERSONAS_PATH, 404)
    try:
        db.unlink_persona_escalas(persona_id)
        db.delete_persona(persona_id)
    except SQLAlchemyError:
        logger.exception("Delete of persona %s failed", persona_id)
        raise ActionError("Error al eliminar la persona.", PERSONAS_PATH, 500)
    return action_success(request, "Persona eliminada correctamente", PERSONAS_PATH)


@router.post("/id-checker", response_model=IdCheckResponse)
def id_checker(
    payload: IdCheckRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    numero_id = clean(payload.numero_id)
    if not numero_id:
        return JSONResponse({"message": "numero_id es requerido"}, status_code=400)
    exists = db.find_persona_by_numero_id(numero_id) is not None
    logger.info("id-checker %s exists=%s", numero_id, exists)
    return IdCheckResponse(exists=exists)
