"""Test environment: in-memory SQLite, fast bcrypt, no rate limiting.

Set before any civictrack module is imported so the cached settings pick it up.
"""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_EMAIL"] = "admin@civictrack.local"
os.environ["ADMIN_PASSWORD"] = "Admin@123"
os.environ["LOG_LEVEL"] = "WARNING"
