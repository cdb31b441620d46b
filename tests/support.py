"""Shared test case: a fresh in-memory database and API client per test."""

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from civictrack.core.config import get_settings
from civictrack.core.database import build_engine, get_db
from civictrack.main import create_app
from civictrack.services.bootstrap import init_db, seed_admin, seed_default_categories

ADMIN_EMAIL = "admin@civictrack.local"
ADMIN_PASSWORD = "Admin@123"


class DatabaseTestCase(unittest.TestCase):
    """Creates the schema and seeds categories and the admin in a private SQLite database."""

    def setUp(self) -> None:
        self.settings = get_settings()
        self.engine = build_engine("sqlite://", poolclass=StaticPool)
        init_db(self.engine)
        self.SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        with self.SessionTesting() as db:
            seed_default_categories(db)
            seed_admin(db, self.settings)

    def tearDown(self) -> None:
        self.engine.dispose()

    def session(self) -> Session:
        return self.SessionTesting()


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient bound to that database."""

    def setUp(self) -> None:
        super().setUp()
        self.app = create_app(self.settings, run_bootstrap=False)

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionTesting()
            try:
                yield db
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

        self.app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.client.close()
        super().tearDown()

    @staticmethod
    def auth(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def register(self, email: str, password: str, name: str | None = None) -> dict:
        body = {"email": email, "password": password}
        if name is not None:
            body["name"] = name
        resp = self.client.post("/api/auth/register", json=body)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def login(self, email: str, password: str) -> str:
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]

    def admin_token(self) -> str:
        return self.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    def audit_logs(self, token: str | None = None, **params: object) -> list[dict]:
        resp = self.client.get(
            "/api/admin/audit-logs",
            headers=self.auth(token or self.admin_token()),
            params=params,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()
