import time
import unittest

from api_support import JSON_HEADERS, ApiTestCase
from gestion.auth import (
    bootstrap_admin,
    build_session_token,
    hash_password,
    read_session_token,
    verify_password,
)
from gestion.config import Settings
from gestion.db import InMemoryDbClient


class PasswordAndTokenTests(unittest.TestCase):
    def test_hash_and_verify_password(self):
        stored = hash_password("clave-segura")
        self.assertTrue(stored.startswith("pbkdf2_sha256$120000$"))
        self.assertTrue(verify_password("clave-segura", stored))
        self.assertFalse(verify_password("otra", stored))
        self.assertFalse(verify_password("clave-segura", None))
        self.assertFalse(verify_password("clave-segura", "md5$abc"))

    def test_session_token(self):
        token = build_session_token("user-1", "secret")
        self.assertEqual(read_session_token(token, "secret", 60), "user-1")
        self.assertIsNone(read_session_token(token, "other-secret", 60))
        self.assertIsNone(read_session_token(token + "0", "secret", 60))
        self.assertIsNone(read_session_token("garbage", "secret", 60))
        self.assertIsNone(read_session_token(None, "secret", 60))

    def test_expired_session_token(self):
        token = build_session_token("user-1", "secret", issued_at=time.time() - 120)
        self.assertIsNone(read_session_token(token, "secret", 60))

    def test_bootstrap_admin_is_idempotent(self):
        db = InMemoryDbClient()
        settings = Settings(admin_email="Admin@Iglesia.org", admin_password="cambiar123")
        first = bootstrap_admin(db, settings)
        second = bootstrap_admin(db, settings)
        self.assertEqual(first.id, second.id)
        self.assertEqual(first.email, "admin@iglesia.org")
        self.assertTrue(first.is_admin)
        self.assertEqual(len(db.users), 1)

    def test_bootstrap_admin_without_credentials(self):
        self.assertIsNone(bootstrap_admin(InMemoryDbClient(), Settings()))


class SessionApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.client.headers.pop("Authorization")

    def test_login_sets_cookie_and_redirects(self):
        response = self.client.post(
            "/api/login",
            data={"email": "TESORERIA@example.com", "password": "secreto123"},
        )
        self.assertRedirect(response, "/")
        self.assertIn(self.settings.session_cookie_name, response.cookies)

        # the client keeps the cookie for the next request
        response = self.client.get("/api/personas")
        self.assertEqual(response.status_code, 200)

    def test_login_json(self):
        response = self.client.post(
            "/api/login",
            data={"email": "tesoreria@example.com", "password": "secreto123"},
            headers=JSON_HEADERS,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True, "user_id": self.user.id})

    def test_login_rejects_bad_credentials(self):
        response = self.client.post(
            "/api/login",
            data={"email": "tesoreria@example.com", "password": "incorrecta"},
        )
        self.assertRedirect(response, "/login", error="Correo o contraseña incorrectos")

        response = self.client.post(
            "/api/login",
            data={"email": "nadie@example.com", "password": "x"},
            headers=JSON_HEADERS,
        )
        self.assertEqual(response.status_code, 401)

    def test_logout_clears_cookie(self):
        response = self.client.get("/api/logout")
        self.assertRedirect(response, "/login")
        self.assertIn(self.settings.session_cookie_name, response.headers["set-cookie"])


class UserAdminApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.make_user("admin@example.com", role="admin")
        self.admin_headers = self.auth_headers(self.admin)

    def test_create_user_requires_admin(self):
        response = self.client.post(
            "/api/user/create", json={"email": "nuevo@example.com"}
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"], "No autorizado - no es admin")

    def test_create_user(self):
        sede = self.db.create_sede("Sur")
        response = self.client.post(
            "/api/user/create",
            json={
                "email": "Nuevo@Example.com",
                "password": "123456",
                "full_name": "Nuevo Líder",
                "role": "lider",
                "sede_id": sede.id,
            },
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["ok"])
        user = self.db.get_user(body["user_id"])
        self.assertEqual(user.email, "nuevo@example.com")
        self.assertEqual(user.role, "lider")
        self.assertEqual(user.sede_id, sede.id)

        response = self.client.post(
            "/api/login",
            data={"email": "nuevo@example.com", "password": "123456"},
            headers=JSON_HEADERS,
        )
        self.assertEqual(response.status_code, 200)

    def test_create_user_rejects_duplicates_and_bad_email(self):
        response = self.client.post(
            "/api/user/create",
            json={"email": "tesoreria@example.com"},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            "/api/user/create", json={"email": "sin-arroba"}, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 400)

    def test_update_user_applies_only_present_fields(self):
        self.db.update_user(self.user.id, {"sede_id": "sede-1", "full_name": "Tesorería"})
        response = self.client.post(
            "/api/user/update",
            json={"user_id": self.user.id, "role": "lider"},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["ok"], True)
        user = self.db.get_user(self.user.id)
        self.assertEqual(user.role, "lider")
        self.assertEqual(user.sede_id, "sede-1")
        self.assertEqual(user.full_name, "Tesorería")

        response = self.client.post(
            "/api/user/update",
            json={"user_id": self.user.id, "sede_id": None, "role": ""},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 200)
        user = self.db.get_user(self.user.id)
        self.assertIsNone(user.sede_id)
        self.assertEqual(user.role, "lider")

    def test_update_user_errors(self):
        response = self.client.post(
            "/api/user/update", json={"role": "admin"}, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "user_id requerido")

        response = self.client.post(
            "/api/user/update",
            json={"user_id": "desconocido", "role": "admin"},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 404)


class LookupApiTests(ApiTestCase):
    def test_sedes_and_escalas(self):
        self.db.create_sede("Norte")
        self.db.create_escala("Bautismo")
        response = self.client.get("/api/sedes")
        self.assertEqual([s["nombre_sede"] for s in response.json()], ["Norte"])
        response = self.client.get("/api/escalas")
        self.assertEqual([e["nombre_escala"] for e in response.json()], ["Bautismo"])

    def test_create_sede_requires_admin(self):
        response = self.client.post("/api/sedes", json={"nombre_sede": "Este"})
        self.assertEqual(response.status_code, 403)

        admin = self.make_user("admin@example.com", role="admin")
        response = self.client.post(
            "/api/sedes",
            json={"nombre_sede": "Este", "direccion_sede": "Av. 5"},
            headers=self.auth_headers(admin),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["nombre_sede"], "Este")
        self.assertEqual(len(self.db.list_sedes()), 1)

    def test_create_escala_requires_admin(self):
        response = self.client.post("/api/escalas", json={"nombre_escala": "Bautismo"})
        self.assertEqual(response.status_code, 403)

        admin = self.make_user("admin@example.com", role="admin")
        response = self.client.post(
            "/api/escalas",
            json={"nombre_escala": " Bautismo "},
            headers=self.auth_headers(admin),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["nombre_escala"], "Bautismo")


if __name__ == "__main__":
    unittest.main()
