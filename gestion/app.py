"""
FastAPI application entry point for the church management backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from gestion.auth import bootstrap_admin
from gestion.config import get_settings
from gestion.dependencies import get_db_client
from gestion.errors import install_handlers
from gestion.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Gestión Iglesia Backend (FastAPI)", version="0.1.0")
    install_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    if settings.admin_email and settings.admin_password:
        bootstrap_admin(get_db_client(), settings)
    return app


app = create_app()
