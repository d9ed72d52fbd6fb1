"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from gestion.auth import read_session_token
from gestion.config import Settings, get_settings
from gestion.db import DbClient, InMemoryDbClient, SqlDbClient
from gestion.errors import AuthRequired
from gestion.records import UserRecord
from gestion.storage import InMemoryStorageClient, S3StorageClient, StorageClient

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so in-memory state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.s3_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.storage_public_base_url or "",
        )
    return _storage_client


def _session_token(request: Request, settings: Settings) -> Optional[str]:
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return request.cookies.get(settings.session_cookie_name)


def get_current_user(
    request: Request,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
) -> UserRecord:
    user_id = read_session_token(
        _session_token(request, settings),
        settings.session_secret,
        settings.session_max_age_seconds,
    )
    user = db.get_user(user_id) if user_id else None
    if not user:
        raise AuthRequired()
    return user


def require_admin(user: UserRecord = Depends(get_current_user)) -> UserRecord:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="No autorizado - no es admin")
    return user
