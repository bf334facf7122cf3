from __future__ import annotations

import argparse
from pathlib import Path

from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.services.auth import EmailTakenError, register_user
from services.api.app.services.catalog import import_catalog
from services.api.app.services.restaurant_json import JsonRestaurantRepository, default_data_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed PedidosHN restaurants and an admin user")
    parser.add_argument("--data", type=Path, default=default_data_path())
    parser.add_argument("--admin-email", default=None)
    parser.add_argument("--admin-password", default=None)
    parser.add_argument("--admin-name", default="Administrador")
    args = parser.parse_args()

    if bool(args.admin_email) != bool(args.admin_password):
        parser.error("--admin-email and --admin-password must be given together")

    init_db()

    db = db_session()
    try:
        restaurants, dishes = import_catalog(db, JsonRestaurantRepository(args.data))
        print(f"Seeded restaurants={restaurants} dishes={dishes} from {args.data}")

        if args.admin_email:
            try:
                admin = register_user(
                    db,
                    name=args.admin_name,
                    email=args.admin_email,
                    password=args.admin_password,
                    is_admin=True,
                )
                print(f"Created admin user id={admin.id}")
            except EmailTakenError:
                print(f"Admin {args.admin_email} already exists")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
