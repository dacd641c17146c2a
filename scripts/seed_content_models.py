# scripts/seed_content_models.py
# Carga los content models definidos en app/seeds/models/*.json (o en --dir).
# Idempotente: los modelos existentes se saltan salvo --update.
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure "app" is importable when run as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy.orm import Session  # noqa: E402

from app.core.errors import FieldValidationFailed  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.seeds.content_loader import DEFAULT_MODELS_DIR, bulk_load_models, discover_model_files  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed content models from JSON files")
    p.add_argument("--dir", type=Path, default=DEFAULT_MODELS_DIR, help="Directory with <model>.json files")
    p.add_argument("--update", action="store_true", help="Overwrite existing models with the file contents")
    p.add_argument("--dry-run", action="store_true", help="Validate and roll back")
    return p.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    configure_logging()
    args = _parse_args(argv)
    files = discover_model_files(args.dir)
    if not files:
        print(f"[ERR] No model files under {args.dir}")
        return 2

    db: Session = SessionLocal()
    try:
        results = bulk_load_models(db, files, update_existing=args.update)
        if args.dry_run:
            db.rollback()
        else:
            db.commit()
    except FieldValidationFailed as e:
        db.rollback()
        print(f"[ERR] {e.message}")
        for err in e.errors:
            print(f"       {err['field']}: {err['message']}")
        return 1
    except ValueError as e:
        db.rollback()
        print(f"[ERR] {e}")
        return 1
    finally:
        db.close()

    for api_identifier, created in results:
        print(f"[{'OK' if created else 'SKIP'}] {api_identifier}")
    if args.dry_run:
        print("[DRY-RUN] nothing was written")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
