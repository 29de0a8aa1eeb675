#!/usr/bin/env python3
"""
Create a user directly in the users JSON file (the API must not be running).

Usage:
  python scripts/add_user.py --name "Ada" --email ada@example.com [--password secret123]
"""
from __future__ import annotations

import argparse
import secrets
import sys

import anyio

from eventhub.core.config import get_settings
from eventhub.core.security import hash_password
from eventhub.repositories.json_storage import JsonCollectionFile
from eventhub.repositories.user_store import UserStore


def gen_password(length: int = 12) -> str:
    return secrets.token_urlsafe(length)[:length]


async def add_user(name: str, email: str, password: str) -> dict:
    settings = get_settings()
    store = UserStore(JsonCollectionFile(settings.users_path))
    await store.load()
    if await store.find_by_email(email):
        raise SystemExit(f"User '{email}' already exists")
    return await store.create(name, email, hash_password(password))


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a user in the JSON store")
    ap.add_argument("--name", required=True, help="Display name")
    ap.add_argument("--email", required=True, help="Login email")
    ap.add_argument("--password", help="Password (default: random)")
    args = ap.parse_args()

    name = (args.name or "").strip()
    email = (args.email or "").strip().lower()
    if not name or "@" not in email:
        raise SystemExit("Name and a valid email are required")
    password = (args.password or "").strip() or gen_password()
    if len(password) < get_settings().password_min_length:
        raise SystemExit("Password too short")

    user = anyio.run(add_user, name, email, password)
    print("OK: user created")
    print(f"  ID: {user['id']}")
    print(f"  Email: {user['email']}")
    if not args.password:
        print(f"  Password: {password}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
