"""
Create a user (e.g. an extra admin). Run from project root:
  python -m civictrack.scripts.create_user EMAIL PASSWORD [role] [--name NAME]
Example:
  python -m civictrack.scripts.create_user ops@city.gov your-secure-password admin
"""
import argparse
import logging
import sys

from civictrack.core.config import get_settings
from civictrack.core.database import SessionLocal, engine
from civictrack.core.errors import Conflict
from civictrack.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LEN,
    ROLES,
    password_fits,
)
from civictrack.services.bootstrap import init_db
from civictrack.services.users import create_user

logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a CivicTrack user.")
    parser.add_argument("email", help="Email (login key)")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLES))
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args(argv)

    email = args.email.strip()
    if "@" not in email or len(email) > EMAIL_MAX_LEN:
        print("Invalid email.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be 1-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    if not password_fits(args.password):
        print(f"Password must be at most {PASSWORD_MAX_BYTES} bytes.", file=sys.stderr)
        return 1

    init_db(engine)
    db = SessionLocal()
    try:
        user = create_user(
            db,
            email=email,
            password=args.password,
            name=args.name,
            role=args.role,
        )
        logger.info("Created user %s with role %s", user.email, user.role)
        print(f"Created user '{user.email}' (id={user.id}) with role '{user.role}'.")
        return 0
    except Conflict:
        print(f"User '{email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
