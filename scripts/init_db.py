from __future__ import annotations

import argparse
import importlib
import os
from pathlib import Path

from dotenv import load_dotenv

from academy_manager.config import get_settings_module
from academy_manager.database.bootstrap import apply_schema, ensure_superadmin, list_tables


def main() -> None:
    load_dotenv(override=False)
    parser = argparse.ArgumentParser(description="Create the academy database tables and a superadmin account.")
    parser.add_argument("--admin-email", default=os.getenv("SUPERADMIN_EMAIL"))
    parser.add_argument("--admin-password", default=os.getenv("SUPERADMIN_PASSWORD"))
    parser.add_argument("--admin-name", default=os.getenv("SUPERADMIN_NAME", "Διαχειριστής"))
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )

    if args.admin_email and args.admin_password:
        ensure_superadmin(db_config, name=args.admin_name, email=args.admin_email, password=args.admin_password)
        print(f"OK: superadmin {args.admin_email}")


if __name__ == "__main__":
    main()
