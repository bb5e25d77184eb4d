"""Create an account directly in the database.

Usage:
  python scripts/create_user.py --name 'Alice Example From Accounts' \
      --email alice@example.com --password 'Secret#123' --role user

A `store` role also creates the store row, named after the account.

NOTE: This is intended for local/dev.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from store_ratings.auth import create_account
from store_ratings.config import load_config
from store_ratings.db import connect, init_db
from store_ratings.errors import AppError


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--name", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--address", default=None)
    ap.add_argument("--role", choices=["user", "store", "admin"], default="user")
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN)

    try:
        with connect(cfg.DB_DSN) as conn:
            result = create_account(
                conn,
                name=args.name,
                email=args.email,
                password=args.password,
                address=args.address,
                role=args.role,
            )
    except AppError as e:
        sys.exit(f"error: {e.message}")

    print("Created user:")
    print(result.to_dict())


if __name__ == "__main__":
    main()
