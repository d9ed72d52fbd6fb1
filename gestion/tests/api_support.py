import unittest
from urllib.parse import parse_qs, urlsplit

from fastapi.testclient import TestClient

from gestion.app import create_app
from gestion.auth import build_session_token, hash_password
from gestion.config import get_settings
from gestion.db import InMemoryDbClient
from gestion.dependencies import get_db_client, get_storage_client
from gestion.records import UserRecord, new_id
from gestion.storage import InMemoryStorageClient

JSON_HEADERS = {"Accept": "application/json"}


class ApiTestCase(unittest.TestCase):
    """Runs the app against fresh in-memory clients, logged in as a regular user."""

    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.settings = get_settings()
        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.client = TestClient(self.app, follow_redirects=False)
        self.user = self.make_user("tesoreria@example.com", role="user")
        self.client.headers.update(self.auth_headers(self.user))

    def make_user(self, email, role="user", password="secreto123"):
        return self.db.insert_user(
            UserRecord(
                id=new_id(),
                email=email,
                password_hash=hash_password(password),
                full_name=email.split("@")[0].title(),
                role=role,
            )
        )

    def auth_headers(self, user):
        token = build_session_token(user.id, self.settings.session_secret)
        return {"Authorization": f"Bearer {token}"}

    def assertRedirect(self, response, path, **expected_params):
        self.assertEqual(response.status_code, 303, response.text)
        location = urlsplit(response.headers["location"])
        self.assertEqual(location.path, path)
        params = {k: v[0] for k, v in parse_qs(location.query).items()}
        for key, value in expected_params.items():
            self.assertEqual(params.get(key), value)
        return params
