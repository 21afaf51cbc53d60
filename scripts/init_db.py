"""
Create the schema straight from model metadata (local dev / SQLite).

Production databases go through Alembic instead (scripts/release.py).

Usage:
  python scripts/init_db.py
"""

import os
import sys
from pathlib import Path

from sqlalchemy import create_engine

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.customer_service.models import Base, load_all_models  # noqa: E402


def create_tables(*, database_url: str | None = None) -> None:
    """Idempotent: existing tables are left alone."""
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///customers.db").strip()
    load_all_models()
    engine = create_engine(db_url, future=True, pool_pre_ping=True)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
    print(f"Initialized database: {', '.join(sorted(Base.metadata.tables))}")


def main() -> None:
    create_tables(database_url=None)


if __name__ == "__main__":
    main()
