# scripts/setup_admin.py
# Provisiona el primer admin (idempotente). Mismo flujo que POST /api/v1/setup/admin.
from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

# Ensure "app" is importable when run as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy.orm import Session  # noqa: E402

from app.core.errors import ProvisioningError  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.services.setup_service import provision_admin  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create the first admin user")
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted when omitted")
    p.add_argument("--first-name", default="Admin")
    p.add_argument("--last-name", default="User")
    return p.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    configure_logging()
    args = _parse_args(argv)
    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("[ERR] Password is required")
        return 2

    db: Session = SessionLocal()
    try:
        result = provision_admin(
            db,
            email=args.email,
            password=password,
            first_name=args.first_name,
            last_name=args.last_name,
        )
    except ProvisioningError as e:
        print(f"[ERR] {e}")
        return 1
    finally:
        db.close()

    tag = "OK" if result["created"] else "SKIP"
    print(f"[{tag}] {result['message']} ({args.email}, id={result['user_id']})")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
