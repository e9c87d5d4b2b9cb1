"""Bootstrap the first super admin: python -m gymdesk.create_admin"""
import os
import sys
from typing import Optional

from gymdesk.core.database import SessionLocal
from gymdesk.core.exceptions import DuplicateMember
from gymdesk.models.user import User
from gymdesk.services.auth_service import create_staff_user

DEFAULT_ADMIN_EMAIL = "admin@gymdesk.local"


def create_super_admin(db, email: str, password: str) -> Optional[User]:
    """Create the super admin unless the email is taken. Returns None if it already exists."""
    try:
        return create_staff_user(db, email, password, "Super", "Admin", role="SUPER_ADMIN")
    except DuplicateMember:
        return None


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    email = argv[0] if len(argv) > 0 else os.environ.get("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    password = argv[1] if len(argv) > 1 else os.environ.get("ADMIN_PASSWORD", "")
    if not password:
        print("Password required: pass it as the second argument or set ADMIN_PASSWORD")
        return 1

    db = SessionLocal()
    try:
        user = create_super_admin(db, email, password)
        if user is None:
            print(f"Already exists: {email}")
        else:
            print(f"Super admin created: email={email}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
