#!/usr/bin/env python3
"""
Change the role of an existing account (there is no API for promoting sellers).

Usage:
  python scripts/set_role.py --user alice [--role seller]
  python scripts/set_role.py --user alice@example.com --role user
"""
from __future__ import annotations

import argparse
import sys

from marketplace.repositories.sql_repository import SQLRepository
from marketplace.schemas import Role


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Set the role of an account")
    ap.add_argument("--user", required=True, help="Username or email of the account")
    ap.add_argument("--role", default=Role.seller.value, choices=[role.value for role in Role])
    args = ap.parse_args(argv)

    repo = SQLRepository()
    ref = (args.user or "").strip()
    if not ref:
        raise SystemExit("Empty user reference")
    user = repo.find_user(username=ref, email=ref)
    if not user:
        raise SystemExit(f"Account '{ref}' not found")
    if user.role == args.role:
        print(f"OK: {user.username} already has role {args.role}")
        return
    repo.set_user_role(user.id, args.role)
    print("OK: role updated")
    print(f"  User: {user.username} <{user.email}>")
    print(f"  Role: {user.role} -> {args.role}")
    print("  Existing tokens keep the old role until they expire.")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
