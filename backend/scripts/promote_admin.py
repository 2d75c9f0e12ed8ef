#!/usr/bin/env python3
"""
Bootstrap an admin: POST /api/admin/promote needs an admin token, so the first one is made here.
Run from backend dir with project venv active: python scripts/promote_admin.py someone@example.com
"""
import logging
import sys
from pathlib import Path

BACKEND = Path(__file__).resolve().parent.parent
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

logger = logging.getLogger("promote_admin")


def promote(email: str) -> bool:
    from sqlalchemy import select
    from navigator.database import SessionLocal, init_sqlite_db
    from navigator.models.user import User

    init_sqlite_db()
    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email))
        if not user:
            return False
        user.role = "admin"
        db.commit()
        return True
    finally:
        db.close()


def main(argv: list[str]) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if len(argv) != 2:
        print("usage: promote_admin.py <email>")
        return 2
    email = argv[1].strip()
    if not promote(email):
        logger.error("No user with email %s", email)
        return 1
    logger.info("%s is now an admin", email)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
