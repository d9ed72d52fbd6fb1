"""
HTTP routes for the accounting module: categorias, actividades and
transacciones.

HTML forms cannot send PUT or DELETE, so the ``POST /{id}`` routes accept a
``_method`` override field.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError

from gestion import exports
from gestion.db import DbClient
from gestion.dependencies import get_current_user, get_db_client
from gestion.errors import ActionError, action_success
from gestion.filters import DEFAULT_PER_PAGE, filter_transacciones, paginate, resumen
from gestion.numbering import next_numero_transaccion
from gestion.records import (
    ESTADO_ACTIVA,
    ESTADO_ANULADA,
    ESTADOS_ACTIVIDAD,
    TIPOS_MOVIMIENTO,
    ActividadRecord,
    CategoriaRecord,
    TransaccionRecord,
    UserRecord,
    new_id,
)
from gestion.schemas import ActividadDetalleResponse, TransaccionesPageResponse
from gestion.utils import clean, full_name, is_uuid, parse_amount, parse_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contabilidad")

CONTABILIDAD_PATH = "/contabilidad"
ACTIVIDADES_PATH = "/contabilidad/actividades"
METHOD_NOT_ALLOWED = "Método no permitido"


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _export_format(formato: Optional[str]) -> str:
    value = (formato or "").strip().lower()
    if value == "pdf":
        return "pdf"
    if value in ("excel", "xlsx"):
        return "xlsx"
    raise HTTPException(status_code=400, detail="Formato no soportado")


# ---------------------------------------------------------------------------
# Categorias
# ---------------------------------------------------------------------------


@router.get("/categorias")
def list_categorias(
    tipo: Optional[str] = Query(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return [categoria.as_dict() for categoria in db.list_categorias(tipo=clean(tipo))]


@router.post("/categorias")
def create_categoria(
    request: Request,
    nombre: Optional[str] = Form(None),
    tipo: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    nombre = clean(nombre)
    tipo = clean(tipo)
    if not nombre or tipo not in TIPOS_MOVIMIENTO:
        raise ActionError(
            "Nombre y tipo (ingreso/egreso) son requeridos", CONTABILIDAD_PATH
        )
    categoria = CategoriaRecord(
        id=new_id(), nombre=nombre, tipo=tipo, descripcion=clean(descripcion)
    )
    try:
        db.insert_categoria(categoria)
    except SQLAlchemyError:
        logger.exception("Insert of categoria %s failed", nombre)
        raise ActionError("No se pudo registrar la categoría", CONTABILIDAD_PATH, 500)
    logger.info("Categoria %s (%s) created by %s", nombre, tipo, user.email)
    return action_success(
        request,
        "Categoría registrada exitosamente ✅",
        CONTABILIDAD_PATH,
        {"categoria": categoria.as_dict()},
    )


@router.get("/categorias/{categoria_id}")
def get_categoria(
    categoria_id: str,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    categoria = db.get_categoria(categoria_id)
    if not categoria:
        raise HTTPException(status_code=404, detail="Categoría no encontrada")
    return categoria.as_dict()


def _update_categoria(
    db: DbClient,
    categoria_id: str,
    nombre: Optional[str],
    tipo: Optional[str],
    descripcion: Optional[str],
) -> dict:
    nombre = clean(nombre)
    tipo = clean(tipo)
    if not nombre or tipo not in TIPOS_MOVIMIENTO:
        raise HTTPException(
            status_code=400, detail="Nombre y tipo (ingreso/egreso) son requeridos"
        )
    if db.get_categoria(categoria_id) is None:
        raise HTTPException(status_code=404, detail="Categoría no encontrada")
    updated = db.update_categoria(
        categoria_id,
        {"nombre": nombre, "tipo": tipo, "descripcion": clean(descripcion)},
    )
    logger.info("Categoria %s updated", categoria_id)
    return {"message": "Categoría actualizada con éxito", "categoria": updated.as_dict()}


def _delete_categoria(db: DbClient, categoria_id: str) -> dict:
    if not is_uuid(categoria_id):
        raise HTTPException(
            status_code=400, detail="ID de categoría tiene un formato inválido"
        )
    if db.get_categoria(categoria_id) is None:
        raise HTTPException(status_code=404, detail="Categoría no encontrada")
    if db.count_transacciones(categoria_id=categoria_id):
        raise HTTPException(
            status_code=400,
            detail="No se puede eliminar la categoría porque tiene transacciones asociadas",
        )
    db.delete_categoria(categoria_id)
    logger.info("Categoria %s deleted", categoria_id)
    return {"message": "Categoría eliminada con éxito"}


@router.put("/categorias/{categoria_id}")
def update_categoria(
    categoria_id: str,
    nombre: Optional[str] = Form(None),
    tipo: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return _update_categoria(db, categoria_id, nombre, tipo, descripcion)


@router.delete("/categorias/{categoria_id}")
def delete_categoria(
    categoria_id: str,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return _delete_categoria(db, categoria_id)


@router.post("/categorias/{categoria_id}")
def override_categoria(
    categoria_id: str,
    method: str = Form("", alias="_method"),
    nombre: Optional[str] = Form(None),
    tipo: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    override = method.strip().upper()
    if override == "PUT":
        return _update_categoria(db, categoria_id, nombre, tipo, descripcion)
    if override == "DELETE":
        return _delete_categoria(db, categoria_id)
    raise HTTPException(status_code=405, detail=METHOD_NOT_ALLOWED)


# ---------------------------------------------------------------------------
# Actividades
# ---------------------------------------------------------------------------


def _actividad_fields(
    redirect_to: str,
    nombre: Optional[str],
    descripcion: Optional[str],
    fecha_inicio: Optional[str],
    fecha_fin: Optional[str],
    estado: Optional[str],
    meta: Optional[str],
) -> dict:
    """Validate the activity form, raising ActionError on the first problem."""
    nombre = clean(nombre)
    fecha_inicio = clean(fecha_inicio)
    if not nombre or not fecha_inicio:
        raise ActionError("El nombre y la fecha de inicio son obligatorios", redirect_to)
    inicio = parse_date(fecha_inicio)
    if inicio is None:
        raise ActionError("La fecha de inicio no es válida", redirect_to)

    fecha_fin = clean(fecha_fin)
    if fecha_fin:
        fin = parse_date(fecha_fin)
        if fin is None or fin < inicio:
            raise ActionError(
                "La fecha de finalización no puede ser anterior a la fecha de inicio",
                redirect_to,
            )

    meta_value = parse_amount(meta)
    if meta_value <= 0:
        raise ActionError(
            "La meta de recaudación debe ser un valor positivo mayor a cero", redirect_to
        )

    estado = clean(estado) or "en_curso"
    if estado not in ESTADOS_ACTIVIDAD:
        raise ActionError("El estado de la actividad no es válido", redirect_to)

    return {
        "nombre": nombre,
        "descripcion": clean(descripcion),
        "fecha_inicio": fecha_inicio,
        "fecha_fin": fecha_fin,
        "estado": estado,
        "meta": meta_value,
    }


@router.get("/actividades")
def list_actividades(
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return [actividad.as_dict() for actividad in db.list_actividades()]


@router.post("/actividades")
def create_actividad(
    request: Request,
    nombre: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    fecha_inicio: Optional[str] = Form(None),
    fecha_fin: Optional[str] = Form(None),
    estado: Optional[str] = Form(None),
    meta: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    fields = _actividad_fields(
        ACTIVIDADES_PATH, nombre, descripcion, fecha_inicio, fecha_fin, estado, meta
    )
    if db.find_actividad_by_nombre(fields["nombre"], user.id):
        raise ActionError("Ya existe una actividad con este nombre", ACTIVIDADES_PATH)

    actividad = ActividadRecord(id=new_id(), user_id=user.id, **fields)
    try:
        db.insert_actividad(actividad)
    except SQLAlchemyError:
        logger.exception("Insert of actividad %s failed", fields["nombre"])
        raise ActionError("No se pudo registrar la actividad", ACTIVIDADES_PATH, 500)
    logger.info("Actividad %s created by %s", actividad.id, user.email)
    return action_success(
        request,
        "¡Actividad registrada con éxito!",
        ACTIVIDADES_PATH,
        {"actividad": actividad.as_dict()},
    )


@router.get("/actividades/{actividad_id}", response_model=ActividadDetalleResponse)
def get_actividad(
    actividad_id: str,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    actividad = db.get_actividad(actividad_id)
    if not actividad:
        raise HTTPException(status_code=404, detail="Actividad no encontrada")
    transacciones = db.list_transacciones(actividad_id=actividad_id)
    return {
        "actividad": actividad.as_dict(),
        "transacciones": _enrich(db, transacciones),
        "resumen": resumen(transacciones),
    }


def _update_actividad(
    request: Request, db: DbClient, actividad_id: str, user: UserRecord, **form_values
):
    edit_path = f"{ACTIVIDADES_PATH}/{actividad_id}/editar"
    existing = db.get_actividad(actividad_id)
    if not existing:
        raise ActionError("Actividad no encontrada", ACTIVIDADES_PATH, 404)
    fields = _actividad_fields(edit_path, **form_values)
    if db.find_actividad_by_nombre(
        fields["nombre"], user.id, exclude_id=actividad_id
    ):
        raise ActionError("Ya existe una actividad con este nombre", edit_path)
    try:
        updated = db.update_actividad(actividad_id, fields)
    except SQLAlchemyError:
        logger.exception("Update of actividad %s failed", actividad_id)
        raise ActionError("No se pudo actualizar la actividad", edit_path, 500)
    logger.info("Actividad %s updated", actividad_id)
    return action_success(
        request,
        "Actividad actualizada correctamente",
        f"{ACTIVIDADES_PATH}/{actividad_id}",
        {"actividad": updated.as_dict()},
    )


def _delete_actividad(request: Request, db: DbClient, actividad_id: str, user: UserRecord):
    if not is_uuid(actividad_id):
        raise ActionError("ID de actividad tiene un formato inválido", ACTIVIDADES_PATH)
    actividad = db.get_actividad(actividad_id)
    if not actividad or actividad.user_id != user.id:
        raise ActionError("Actividad no encontrada", ACTIVIDADES_PATH, 404)
    if db.count_transacciones(actividad_id=actividad_id):
        raise ActionError(
            "No se puede eliminar la actividad porque tiene transacciones asociadas",
            ACTIVIDADES_PATH,
        )
    try:
        db.delete_actividad(actividad_id)
    except SQLAlchemyError:
        logger.exception("Delete of actividad %s failed", actividad_id)
        raise ActionError("No se pudo eliminar la actividad", ACTIVIDADES_PATH, 500)
    logger.info("Actividad %s deleted by %s", actividad_id, user.email)
    return action_success(request, "Actividad eliminada con éxito", ACTIVIDADES_PATH)


@router.put("/actividades/{actividad_id}")
def update_actividad(
    actividad_id: str,
    request: Request,
    nombre: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    fecha_inicio: Optional[str] = Form(None),
    fecha_fin: Optional[str] = Form(None),
    estado: Optional[str] = Form(None),
    meta: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return _update_actividad(
        request,
        db,
        actividad_id,
        user,
        nombre=nombre,
        descripcion=descripcion,
        fecha_inicio=fecha_inicio,
        fecha_fin=fecha_fin,
        estado=estado,
        meta=meta,
    )


@router.delete("/actividades/{actividad_id}")
def delete_actividad(
    actividad_id: str,
    request: Request,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return _delete_actividad(request, db, actividad_id, user)


@router.post("/actividades/{actividad_id}")
def override_actividad(
    actividad_id: str,
    request: Request,
    method: str = Form("", alias="_method"),
    nombre: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    fecha_inicio: Optional[str] = Form(None),
    fecha_fin: Optional[str] = Form(None),
    estado: Optional[str] = Form(None),
    meta: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    override = method.strip().upper()
    if override == "PUT":
        return _update_actividad(
            request,
            db,
            actividad_id,
            user,
            nombre=nombre,
            descripcion=descripcion,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
            estado=estado,
            meta=meta,
        )
    if override == "DELETE":
        return _delete_actividad(request, db, actividad_id, user)
    raise HTTPException(status_code=405, detail=METHOD_NOT_ALLOWED)


# ---------------------------------------------------------------------------
# Transacciones
# ---------------------------------------------------------------------------


def _enrich(db: DbClient, transacciones: Iterable[TransaccionRecord]) -> list[dict]:
    """Attach category, activity and person names to each transaction."""
    categorias = {categoria.id: categoria for categoria in db.list_categorias()}
    actividades = {actividad.id: actividad for actividad in db.list_actividades()}
    personas = {}
    result = []
    for transaccion in transacciones:
        data = transaccion.as_dict()
        categoria = categorias.get(transaccion.categoria_id)
        actividad = actividades.get(transaccion.actividad_id)
        persona = None
        if transaccion.persona_id:
            if transaccion.persona_id not in personas:
                personas[transaccion.persona_id] = db.get_persona(transaccion.persona_id)
            persona = personas[transaccion.persona_id]
        data["categoria_nombre"] = categoria.nombre if categoria else "Sin categoría"
        data["actividad_nombre"] = actividad.nombre if actividad else None
        data["persona_nombre"] = (
            full_name(persona.nombres, persona.primer_apellido, persona.segundo_apellido)
            if persona
            else None
        )
        result.append(data)
    return result


def _filtered_transacciones(
    db: DbClient,
    actividad_id: Optional[str],
    fecha_inicio: Optional[str],
    fecha_fin: Optional[str],
) -> list[TransaccionRecord]:
    return filter_transacciones(
        db.list_transacciones(actividad_id=clean(actividad_id)),
        fecha_inicio=clean(fecha_inicio),
        fecha_fin=clean(fecha_fin),
    )


def _get_transaccion_or_404(db: DbClient, transaccion_id: str) -> TransaccionRecord:
    transaccion = db.get_transaccion(transaccion_id)
    if not transaccion:
        raise HTTPException(status_code=404, detail="Transacción no encontrada")
    return transaccion


@router.get("/transacciones")
def list_transacciones(
    actividad_id: Optional[str] = Query(None),
    fecha_inicio: Optional[str] = Query(None),
    fecha_fin: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=200),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    transacciones = _filtered_transacciones(db, actividad_id, fecha_inicio, fecha_fin)
    if page is None:
        return _enrich(db, transacciones)
    pagina = paginate(transacciones, page=page, per_page=per_page)
    return TransaccionesPageResponse(
        items=_enrich(db, pagina.items),
        page=pagina.page,
        per_page=pagina.per_page,
        total=pagina.total,
        pages=pagina.pages,
        resumen=resumen(transacciones),
    )


@router.post("/transacciones")
def create_transaccion(
    request: Request,
    fecha: Optional[str] = Form(None),
    monto: Optional[str] = Form(None),
    tipo: Optional[str] = Form(None),
    categoria_id: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    actividad_id: Optional[str] = Form(None),
    persona_id: Optional[str] = Form(None),
    evidencia: Optional[str] = Form(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    fecha = clean(fecha)
    tipo = clean(tipo)
    categoria_id = clean(categoria_id)
    actividad_id = clean(actividad_id)
    persona_id = clean(persona_id)
    monto_value = parse_amount(monto)
    if (
        parse_date(fecha) is None
        or monto_value <= 0
        or tipo not in TIPOS_MOVIMIENTO
        or not categoria_id
    ):
        raise ActionError(
            "Datos inválidos: revise fecha, monto, tipo y categoría", CONTABILIDAD_PATH
        )

    categoria = db.get_categoria(categoria_id)
    if not categoria:
        raise ActionError("La categoría seleccionada no existe", CONTABILIDAD_PATH)
    if categoria.tipo != tipo:
        raise ActionError(
            "La categoría no corresponde al tipo de transacción", CONTABILIDAD_PATH
        )
    if actividad_id and not db.get_actividad(actividad_id):
        raise ActionError("La actividad seleccionada no existe", CONTABILIDAD_PATH)
    if persona_id and not db.get_persona(persona_id):
        raise ActionError("La persona seleccionada no existe", CONTABILIDAD_PATH)

    numero = next_numero_transaccion(tipo, db.last_numero_transaccion(tipo))
    transaccion = TransaccionRecord(
        id=new_id(),
        numero_transaccion=numero,
        fecha=fecha,
        monto=monto_value,
        tipo=tipo,
        categoria_id=categoria_id,
        descripcion=clean(descripcion),
        actividad_id=actividad_id,
        persona_id=persona_id,
        user_id=user.id,
        evidencia=clean(evidencia),
        estado=ESTADO_ACTIVA,
    )
    try:
        db.insert_transaccion(transaccion)
    except SQLAlchemyError:
        logger.exception("Insert of transaccion %s failed", numero)
        raise ActionError("No se pudo registrar la transacción", CONTABILIDAD_PATH, 500)
    logger.info("Transaccion %s (%s %.2f) created by %s", numero, tipo, monto_value, user.email)
    return action_success(
        request,
        "Transacción registrada exitosamente ✅",
        CONTABILIDAD_PATH,
        {"transaccion": _enrich(db, [transaccion])[0]},
    )


@router.get("/transacciones/export")
def export_transacciones(
    formato: str = Query("pdf"),
    actividad_id: Optional[str] = Query(None),
    fecha_inicio: Optional[str] = Query(None),
    fecha_fin: Optional[str] = Query(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    extension = _export_format(formato)
    transacciones = _filtered_transacciones(db, actividad_id, fecha_inicio, fecha_fin)
    enriched = _enrich(db, transacciones)
    totals = resumen(transacciones)
    filename = f"transacciones_{time.strftime('%Y%m%d_%H%M%S')}.{extension}"
    logger.info("Exporting %d transacciones as %s", len(enriched), extension)
    if extension == "pdf":
        return _attachment(
            exports.transacciones_pdf(enriched, totals), exports.PDF_MEDIA_TYPE, filename
        )
    return _attachment(
        exports.transacciones_xlsx(enriched, totals), exports.XLSX_MEDIA_TYPE, filename
    )


@router.get("/transacciones/{transaccion_id}")
def get_transaccion(
    transaccion_id: str,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return _enrich(db, [_get_transaccion_or_404(db, transaccion_id)])[0]


@router.post("/transacciones/{transaccion_id}/anular")
def anular_transaccion(
    transaccion_id: str,
    request: Request,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    transaccion = db.get_transaccion(transaccion_id)
    if not transaccion:
        raise ActionError("Transacción no encontrada", CONTABILIDAD_PATH, 404)
    if transaccion.estado == ESTADO_ANULADA:
        raise ActionError("La transacción ya está anulada", CONTABILIDAD_PATH)
    try:
        updated = db.update_transaccion(transaccion_id, {"estado": ESTADO_ANULADA})
    except SQLAlchemyError:
        logger.exception("Annulment of transaccion %s failed", transaccion_id)
        raise ActionError("No se pudo anular la transacción", CONTABILIDAD_PATH, 500)
    logger.info(
        "Transaccion %s annulled by %s", transaccion.numero_transaccion, user.email
    )
    return action_success(
        request,
        "Transacción anulada correctamente",
        CONTABILIDAD_PATH,
        {"transaccion": _enrich(db, [updated])[0]},
    )


@router.get("/transacciones/{transaccion_id}/comprobante")
def comprobante_transaccion(
    transaccion_id: str,
    formato: str = Query("pdf"),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    extension = _export_format(formato)
    data = _enrich(db, [_get_transaccion_or_404(db, transaccion_id)])[0]
    filename = exports.receipt_filename(data, extension)
    if extension == "pdf":
        return _attachment(exports.transaccion_pdf(data), exports.PDF_MEDIA_TYPE, filename)
    return _attachment(exports.transaccion_xlsx(data), exports.XLSX_MEDIA_TYPE, filename)
