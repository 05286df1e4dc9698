import argparse
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = CURRENT_DIR.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import projecthub.models  # noqa: E402,F401
from projecthub.db import Base, SessionLocal, engine, get_db_path  # noqa: E402
from projecthub.services.identity import ensure_admin  # noqa: E402


def reset_database() -> None:
    db_path = get_db_path()
    if engine.url.drivername.startswith("sqlite"):
        if not db_path:
            raise RuntimeError("SQLite database path could not be resolved.")
        path = Path(db_path)
        engine.dispose()
        if path.exists():
            print(f"[reset_db] Removing existing sqlite file: {path}")
            path.unlink()
        else:
            print(f"[reset_db] No existing sqlite file at {path}, skipping delete.")
    else:
        print(f"[reset_db] Non-sqlite database configured: {engine.url}. Dropping all tables.")
        Base.metadata.drop_all(bind=engine)

    print("[reset_db] Creating database schema...")
    Base.metadata.create_all(bind=engine)


def create_admin(email: str, username: str, password: str) -> None:
    with SessionLocal() as db:
        user = ensure_admin(db, email=email, username=username, password=password)
        print(f"[reset_db] System admin ready: {user.email} ({user.id})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reset local development database.")
    parser.add_argument("--keep-data", action="store_true", help="Do not drop existing data.")
    parser.add_argument("--admin-email", help="Create (or promote) a system admin with this email.")
    parser.add_argument("--admin-username", default="admin")
    parser.add_argument("--admin-password", default="admin123")
    args = parser.parse_args()

    if not args.keep_data:
        reset_database()
    if args.admin_email:
        create_admin(args.admin_email, args.admin_username, args.admin_password)
    print("[reset_db] Done.")
