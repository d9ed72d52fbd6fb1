"""
Exceptions raised by the routes and the handlers that render them.

Form endpoints answer browsers with a redirect carrying ``?success=`` or
``?error=`` and answer AJAX/JSON callers with a JSON body.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
LOGIN_REQUIRED_JSON = "Debe iniciar sesión"
LOGIN_REQUIRED_REDIRECT = "Debe iniciar sesión para continuar"


class ActionError(Exception):
    """A form action failed; tell the user and send them back."""

    def __init__(self, message: str, redirect_to: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.redirect_to = redirect_to
        self.status_code = status_code


class AuthRequired(Exception):
    """No valid session was presented."""


def wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    requested_with = request.headers.get("x-requested-with", "")
    return "application/json" in accept or requested_with == "XMLHttpRequest"


def redirect_with(path: str, **params: str) -> RedirectResponse:
    query = urlencode({k: v for k, v in params.items() if v is not None})
    separator = "&" if "?" in path else "?"
    url = f"{path}{separator}{query}" if query else path
    return RedirectResponse(url=url, status_code=303)


def action_success(
    request: Request,
    message: str,
    redirect_to: str,
    payload: Optional[dict[str, Any]] = None,
):
    if wants_json(request):
        body = {"success": True, "message": message}
        body.update(payload or {})
        return JSONResponse(body, status_code=200)
    return redirect_with(redirect_to, success=message)


async def _action_error_handler(request: Request, exc: ActionError):
    logger.info("Action rejected on %s: %s", request.url.path, exc.message)
    if wants_json(request):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)
    return redirect_with(exc.redirect_to, error=exc.message)


async def _auth_required_handler(request: Request, exc: AuthRequired):
    logger.info("Unauthenticated request to %s", request.url.path)
    if wants_json(request) or request.method == "GET":
        return JSONResponse({"error": LOGIN_REQUIRED_JSON}, status_code=401)
    return redirect_with(LOGIN_PATH, error=LOGIN_REQUIRED_REDIRECT)


def install_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ActionError, _action_error_handler)
    app.add_exception_handler(AuthRequired, _auth_required_handler)
