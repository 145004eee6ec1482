#!/usr/bin/env python3
"""
Register a demo account against a running server and print what came back.

Usage:
  python scripts/register_demo.py [--base-url http://localhost:8000] [--username meuser]
"""
from __future__ import annotations

import argparse
import sys

import httpx


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Register a demo account")
    ap.add_argument("--base-url", default="http://localhost:8000")
    ap.add_argument("--username", default="meuser")
    ap.add_argument("--email", default="me@example.com")
    ap.add_argument("--password", default="password123")
    args = ap.parse_args(argv)

    payload = {
        "username": args.username,
        "email": args.email,
        "password": args.password,
        "fullName": {"firstName": "Me", "lastName": "User"},
        "phone": "1234567890",
    }
    response = httpx.post(f"{args.base_url.rstrip('/')}/api/auth/register", json=payload, timeout=10)
    print("status:", response.status_code)
    print("body:", response.text)
    print("set-cookie:", response.headers.get_list("set-cookie"))


if __name__ == "__main__":
    try:
        main()
    except httpx.HTTPError as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
