#!/usr/bin/env python3
# backend/init_db.py
"""
Database initialization script.

Creates every table and seeds the reference data (default asset types and
the CASH001 settlement account). Safe to run repeatedly.

This script can be run from any directory:
    python backend/init_db.py
    cd backend && python init_db.py
"""
import sys
from pathlib import Path

# Add the backend directory to Python path so 'portfolio_ledger' is importable
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from portfolio_ledger.database import SessionLocal, init_db
from portfolio_ledger.services.catalog import CatalogService
from portfolio_ledger.utils import setup_logging


def main() -> None:
    setup_logging()
    print("Creating database tables...")
    init_db()

    with SessionLocal() as db:
        created = CatalogService().seed_reference_data(db)

    print(
        f"Done: {created['asset_types']} asset type(s) and "
        f"{created['settlement_accounts']} settlement account(s) created"
    )


if __name__ == "__main__":
    main()
