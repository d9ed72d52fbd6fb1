"""
HTTP routes for sessions, user administration and the lookup tables.

The personas and contabilidad routers are mounted here so the app only
includes one router.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from gestion.auth import authenticate, build_session_token, hash_password
from gestion.config import Settings, get_settings
from gestion.contabilidad_routes import router as contabilidad_router
from gestion.db import DbClient
from gestion.dependencies import get_current_user, get_db_client, require_admin
from gestion.errors import LOGIN_PATH, ActionError, redirect_with, wants_json
from gestion.personas_routes import router as personas_router
from gestion.records import UserRecord, new_id
from gestion.schemas import (
    EscalaCreateRequest,
    EscalaResponse,
    SedeCreateRequest,
    SedeResponse,
    UserCreateRequest,
    UserMutationResponse,
    UserUpdateRequest,
)
from gestion.utils import clean, is_valid_email

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    user = authenticate(db, email.strip(), password)
    if not user:
        logger.info("Failed login for %s", email)
        raise ActionError("Correo o contraseña incorrectos", LOGIN_PATH, 401)

    token = build_session_token(user.id, settings.session_secret)
    if wants_json(request):
        response = JSONResponse({"ok": True, "user_id": user.id})
    else:
        response = redirect_with("/")
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
    )
    logger.info("User %s logged in", user.email)
    return response


@router.get("/logout")
def logout(settings: Settings = Depends(get_settings)):
    response = RedirectResponse(url=LOGIN_PATH, status_code=303)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response


@router.post("/user/create", response_model=UserMutationResponse)
def create_user(
    payload: UserCreateRequest,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    email = payload.email.strip().lower()
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Email inválido")
    if db.get_user_by_email(email):
        raise HTTPException(status_code=400, detail="Ya existe un usuario con este email")
    user = UserRecord(
        id=new_id(),
        email=email,
        password_hash=hash_password(payload.password) if payload.password else None,
        full_name=clean(payload.full_name),
        role=clean(payload.role) or "user",
        sede_id=clean(payload.sede_id),
    )
    try:
        db.insert_user(user)
    except SQLAlchemyError:
        logger.exception("Insert of user %s failed", email)
        raise HTTPException(status_code=500, detail="No se pudo crear el usuario")
    logger.info("User %s created by %s", email, admin.email)
    return UserMutationResponse(ok=True, user_id=user.id)


@router.post("/user/update", response_model=UserMutationResponse)
def update_user(
    payload: UserUpdateRequest,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    if not payload.user_id:
        raise HTTPException(status_code=400, detail="user_id requerido")
    if db.get_user(payload.user_id) is None:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")

    changes = {}
    if isinstance(payload.full_name, str):
        changes["full_name"] = payload.full_name
    if payload.role:
        changes["role"] = payload.role
    if "sede_id" in payload.model_fields_set:
        changes["sede_id"] = payload.sede_id
    if changes:
        db.update_user(payload.user_id, changes)
    logger.info("User %s updated by %s: %s", payload.user_id, admin.email, sorted(changes))
    return UserMutationResponse(ok=True)


@router.get("/sedes", response_model=list[SedeResponse])
def list_sedes(
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return [SedeResponse(**sede.as_dict()) for sede in db.list_sedes()]


@router.post("/sedes", response_model=SedeResponse, status_code=201)
def create_sede(
    payload: SedeCreateRequest,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    sede = db.create_sede(payload.nombre_sede.strip(), clean(payload.direccion_sede))
    return SedeResponse(**sede.as_dict())


@router.get("/escalas", response_model=list[EscalaResponse])
def list_escalas(
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    return [EscalaResponse(**escala.as_dict()) for escala in db.list_escalas()]


@router.post("/escalas", response_model=EscalaResponse, status_code=201)
def create_escala(
    payload: EscalaCreateRequest,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    escala = db.create_escala(payload.nombre_escala.strip())
    return EscalaResponse(**escala.as_dict())


router.include_router(personas_router)
router.include_router(contabilidad_router)
