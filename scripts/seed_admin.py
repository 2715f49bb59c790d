import argparse
from pathlib import Path
import sys

from sqlalchemy import select

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from academy.core.config import get_settings
from academy.core.security import hash_password
from academy.db.session import get_session_factory
from academy.models.admin import Admin


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create the badge catalog operator account.")
    parser.add_argument("--login", default=settings.bootstrap_admin_login)
    parser.add_argument("--password", default=settings.bootstrap_admin_password)
    parser.add_argument(
        "--reset-password",
        action="store_true",
        help="Overwrite the password when the account already exists.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    session_factory = get_session_factory()
    with session_factory() as db:
        admin = db.scalar(select(Admin).where(Admin.login == args.login))
        if admin is None:
            db.add(Admin(login=args.login, password_hash=hash_password(args.password), role="admin"))
            action = "created"
        elif args.reset_password:
            admin.password_hash = hash_password(args.password)
            action = "password reset"
        else:
            action = "already present"
        db.commit()
    print(f"Admin {args.login}: {action}.")


if __name__ == "__main__":
    main()
