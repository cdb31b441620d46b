"""Unit tests for the credential store and the startup bootstrap."""

import unittest
from unittest.mock import patch

from sqlalchemy import func, select

from civictrack.core.config import Settings
from civictrack.core.errors import Conflict, ValidationError
from civictrack.core.security import verify_password
from civictrack.models import AuditAction, Category, User
from civictrack.services import users
from civictrack.services.audit import record_audit
from civictrack.services.bootstrap import (
    DEFAULT_CATEGORIES,
    bootstrap,
    seed_admin,
    seed_default_categories,
)
from tests.support import ADMIN_EMAIL, ADMIN_PASSWORD, DatabaseTestCase


class TestCredentialStore(DatabaseTestCase):
    def test_create_and_find(self) -> None:
        with self.session() as db:
            created = users.create_user(db, email="a@x.com", password="Secret1")
            self.assertEqual(created.role, "user")
            self.assertTrue(created.active)
            self.assertEqual(created.name, "a")
            self.assertIsNotNone(created.created_at)
            self.assertNotEqual(created.password_hash, "Secret1")
            self.assertTrue(verify_password("Secret1", created.password_hash))

            self.assertEqual(users.find_by_email(db, "a@x.com").id, created.id)
            self.assertEqual(users.find_by_id(db, created.id).email, "a@x.com")
            self.assertIsNone(users.find_by_email(db, "A@X.COM"))
            self.assertIsNone(users.find_by_id(db, 999))

    def test_duplicate_email_conflict(self) -> None:
        with self.session() as db:
            users.create_user(db, email="a@x.com", password="Secret1")
            with self.assertRaises(Conflict):
                users.create_user(db, email="a@x.com", password="Other1")

    def test_invalid_role_rejected(self) -> None:
        with self.session() as db:
            with self.assertRaises(ValueError):
                users.create_user(db, email="a@x.com", password="Secret1", role="root")

    def test_authenticate(self) -> None:
        with self.session() as db:
            user = users.create_user(db, email="a@x.com", password="Secret1")
            self.assertEqual(users.authenticate(db, "a@x.com", "Secret1").id, user.id)
            self.assertIsNone(users.authenticate(db, "a@x.com", "secret1"))
            self.assertIsNone(users.authenticate(db, "b@x.com", "Secret1"))

            users.update_mutable_fields(db, user, active=False)
            db.commit()
            self.assertIsNone(users.authenticate(db, "a@x.com", "Secret1"))

    def test_password_over_bcrypt_limit_rejected(self) -> None:
        with self.session() as db:
            with self.assertRaises(ValidationError):
                users.create_user(db, email="a@x.com", password="a" * 73)
            self.assertIsNone(users.find_by_email(db, "a@x.com"))

    def test_failed_authentication_always_runs_bcrypt(self) -> None:
        with self.session() as db:
            user = users.create_user(db, email="a@x.com", password="Secret1")
            users.update_mutable_fields(db, user, active=False)
            db.commit()
            users.create_user(db, email="b@x.com", password="Secret1")

            for email, password in (("nobody@x.com", "Secret1"), ("a@x.com", "Secret1"), ("b@x.com", "wrong")):
                with patch.object(users, "verify_password", wraps=verify_password) as verify:
                    self.assertIsNone(users.authenticate(db, email, password))
                self.assertEqual(verify.call_count, 1, email)

    def test_update_mutable_fields_only(self) -> None:
        with self.session() as db:
            user = users.create_user(db, email="a@x.com", password="Secret1")
            original_hash = user.password_hash
            users.update_mutable_fields(db, user, role="admin", name="Alice")
            db.commit()
            db.refresh(user)
            self.assertEqual((user.role, user.name, user.active), ("admin", "Alice", True))
            self.assertEqual(user.email, "a@x.com")
            self.assertEqual(user.password_hash, original_hash)
            with self.assertRaises(ValueError):
                users.update_mutable_fields(db, user, role="root")

    def test_delete_user_without_history(self) -> None:
        with self.session() as db:
            user = users.create_user(db, email="a@x.com", password="Secret1")
            users.delete_user(db, user)
            db.commit()
            self.assertIsNone(users.find_by_email(db, "a@x.com"))

    def test_delete_user_with_history_refused(self) -> None:
        with self.session() as db:
            admin = users.find_by_email(db, ADMIN_EMAIL)
            record_audit(db, admin.id, AuditAction.UPDATE_SETTINGS, "settings")
            db.commit()
            self.assertTrue(users.has_audit_history(db, admin.id))
            with self.assertRaises(Conflict):
                users.delete_user(db, admin)
            db.rollback()
            self.assertIsNotNone(users.find_by_email(db, ADMIN_EMAIL))


class TestBootstrap(DatabaseTestCase):
    def _admins(self) -> list[User]:
        with self.session() as db:
            return list(db.execute(select(User).where(User.role == "admin")).scalars())

    def test_seeded_admin_exists_once(self) -> None:
        admins = self._admins()
        self.assertEqual([a.email for a in admins], [ADMIN_EMAIL])
        self.assertTrue(verify_password(ADMIN_PASSWORD, admins[0].password_hash))

    def test_seeding_is_idempotent(self) -> None:
        with self.session() as db:
            self.assertIsNone(seed_admin(db, self.settings))
            self.assertEqual(seed_default_categories(db), 0)
        with self.session() as db:
            count = db.execute(select(func.count()).select_from(Category)).scalar_one()
        self.assertEqual(count, len(DEFAULT_CATEGORIES))
        self.assertEqual(len(self._admins()), 1)

    def test_no_second_admin_when_email_changes(self) -> None:
        other = Settings(ADMIN_EMAIL="root@civictrack.local")
        with self.session() as db:
            self.assertIsNone(seed_admin(db, other))
        self.assertEqual(len(self._admins()), 1)

    def test_full_bootstrap_on_existing_schema(self) -> None:
        with self.session() as db:
            bootstrap(self.engine, db, self.settings)
        self.assertEqual(len(self._admins()), 1)


if __name__ == "__main__":
    unittest.main()
