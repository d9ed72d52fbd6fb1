"""
Password hashing and signed session tokens.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
import time
from typing import Optional

from gestion.config import Settings
from gestion.db import DbClient
from gestion.records import UserRecord, new_id

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 120_000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    stored = (stored_hash or "").strip()
    if not stored:
        return False
    try:
        algo, iterations, salt, digest_hex = stored.split("$", 3)
        iterations_count = int(iterations)
    except ValueError:
        return False
    if algo != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations_count
    )
    return hmac.compare_digest(digest.hex(), digest_hex)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def build_session_token(
    user_id: str, secret: str, issued_at: Optional[float] = None
) -> str:
    payload_json = json.dumps(
        {"u": user_id, "iat": int(issued_at if issued_at is not None else time.time())},
        separators=(",", ":"),
    )
    payload = (
        base64.urlsafe_b64encode(payload_json.encode("utf-8")).decode("ascii").rstrip("=")
    )
    return f"{payload}.{_sign(payload, secret)}"


def read_session_token(token: Optional[str], secret: str, max_age: int) -> Optional[str]:
    """Return the user id inside a valid, unexpired token."""
    if not token or "." not in token:
        return None
    payload, signature = token.rsplit(".", 1)
    if not hmac.compare_digest(signature, _sign(payload, secret)):
        return None
    try:
        padding = "=" * (-len(payload) % 4)
        data = json.loads(base64.urlsafe_b64decode(payload + padding).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    user_id = str(data.get("u") or "").strip()
    issued_at = data.get("iat")
    if not user_id or not isinstance(issued_at, int):
        return None
    if time.time() - issued_at > max_age:
        return None
    return user_id


def authenticate(db: DbClient, email: str, password: str) -> Optional[UserRecord]:
    user = db.get_user_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def bootstrap_admin(db: DbClient, settings: Settings) -> Optional[UserRecord]:
    """Create the configured administrator if it does not exist yet."""
    if not settings.admin_email or not settings.admin_password:
        return None
    existing = db.get_user_by_email(settings.admin_email)
    if existing:
        return existing
    user = db.insert_user(
        UserRecord(
            id=new_id(),
            email=settings.admin_email.strip().lower(),
            password_hash=hash_password(settings.admin_password),
            full_name="Administrador",
            role="admin",
        )
    )
    logger.info("Created bootstrap administrator %s", user.email)
    return user
