"""API tests for /auth: registration, login and the current identity."""

import unittest

from civictrack.core.security import create_access_token
from tests.support import ADMIN_EMAIL, ADMIN_PASSWORD, ApiTestCase


class TestRegister(ApiTestCase):
    def test_register_returns_public_fields_with_user_role(self) -> None:
        body = self.register("a@x.com", "Secret1")
        self.assertEqual(body["email"], "a@x.com")
        self.assertEqual(body["role"], "user")
        self.assertEqual(body["name"], "a")
        self.assertIsInstance(body["id"], int)
        self.assertNotIn("password_hash", body)
        self.assertNotIn("password", body)

    def test_register_keeps_given_name(self) -> None:
        body = self.register("b@x.com", "Secret1", name="Bea")
        self.assertEqual(body["name"], "Bea")

    def test_duplicate_email_is_conflict(self) -> None:
        self.register("a@x.com", "Secret1")
        resp = self.client.post("/api/auth/register", json={"email": "a@x.com", "password": "Other1"})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json(), {"error": "Email already registered"})

    def test_email_is_case_sensitive(self) -> None:
        self.register("a@x.com", "Secret1")
        body = self.register("A@x.com", "Secret1")
        self.assertEqual(body["email"], "A@x.com")

    def test_missing_fields_are_bad_request(self) -> None:
        for payload in ({"email": "a@x.com"}, {"password": "Secret1"}, {}, {"email": "", "password": "x"}):
            resp = self.client.post("/api/auth/register", json=payload)
            self.assertEqual(resp.status_code, 400, payload)
            self.assertIn("error", resp.json())

    def test_password_over_bcrypt_limit_is_bad_request(self) -> None:
        # 37 two-byte characters: within the character limit, over 72 bytes.
        for password in ("a" * 73, "\u00e9" * 37):
            resp = self.client.post("/api/auth/register", json={"email": "a@x.com", "password": password})
            self.assertEqual(resp.status_code, 400)
            self.assertIn("password", resp.json()["error"])
        self.register("a@x.com", "a" * 72)
        self.login("a@x.com", "a" * 72)

    def test_register_cannot_choose_role(self) -> None:
        resp = self.client.post(
            "/api/auth/register",
            json={"email": "c@x.com", "password": "Secret1", "role": "admin"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["role"], "user")


class TestLogin(ApiTestCase):
    def test_login_returns_token_and_user(self) -> None:
        created = self.register("a@x.com", "Secret1")
        resp = self.client.post("/api/auth/login", json={"email": "a@x.com", "password": "Secret1"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["token"])
        self.assertEqual(
            body["user"],
            {"id": created["id"], "name": "a", "email": "a@x.com", "role": "user"},
        )

    def test_failures_are_indistinguishable(self) -> None:
        self.register("a@x.com", "Secret1")
        self.register("off@x.com", "Secret1")
        admin = self.admin_token()
        users = self.client.get("/api/admin/users", headers=self.auth(admin)).json()
        off_id = next(u["id"] for u in users if u["email"] == "off@x.com")
        resp = self.client.patch(
            f"/api/admin/users/{off_id}", json={"active": False}, headers=self.auth(admin)
        )
        self.assertEqual(resp.status_code, 200)

        attempts = (
            {"email": "a@x.com", "password": "wrong"},
            {"email": "nobody@x.com", "password": "Secret1"},
            {"email": "off@x.com", "password": "Secret1"},
        )
        for payload in attempts:
            resp = self.client.post("/api/auth/login", json=payload)
            self.assertEqual(resp.status_code, 401, payload)
            self.assertEqual(resp.json(), {"error": "Invalid credentials"})

    def test_seeded_admin_can_log_in(self) -> None:
        resp = self.client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["role"], "admin")


class TestMe(ApiTestCase):
    def test_me_returns_current_user(self) -> None:
        self.register("a@x.com", "Secret1")
        token = self.login("a@x.com", "Secret1")
        resp = self.client.get("/api/auth/me", headers=self.auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["email"], "a@x.com")

    def test_me_requires_token(self) -> None:
        resp = self.client.get("/api/auth/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Unauthenticated"})
        self.assertEqual(resp.headers.get("www-authenticate"), "Bearer")

    def test_me_for_unknown_identity_is_not_found(self) -> None:
        token = create_access_token(sub=9999, role="user")
        resp = self.client.get("/api/auth/me", headers=self.auth(token))
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
