"""Bootstrap the Vayam PostgreSQL database before the first deploy.

Creates the database named in DATABASE_URL when it is missing, optionally
resets its public schema, and can then apply migrations up to head.
"""

from __future__ import annotations

import argparse
import sys
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql

from vayam.core.settings import settings
from vayam.scripts.migrate import run_upgrade_head


def normalize_to_psycopg(uri: str) -> str:
    """Return a Postgres URI suitable for psycopg.connect().

    Strips quotes and whitespace and turns SQLAlchemy schemes
    (``postgresql+driver``) into plain ``postgresql``.
    """
    uri = (uri or "").strip().strip("'\"")
    if not uri:
        raise ValueError("DATABASE_URL is empty")
    parts = urlsplit(uri)
    scheme = parts.scheme
    if scheme.startswith("postgresql+"):
        scheme = "postgresql"
    if scheme != "postgresql":
        raise ValueError(f"Not a Postgres URL: {uri!r}")
    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def split_admin_url(db_url: str) -> tuple[str, str]:
    """Return `(admin_url, target_db)` using the maintenance database."""
    parts = urlsplit(normalize_to_psycopg(db_url))
    target_db = parts.path.lstrip("/") or "vayam"
    if parts.netloc:
        admin_url = urlunsplit(("postgresql", parts.netloc, "/postgres", parts.query, ""))
    else:
        admin_url = "postgresql:///postgres"
    return admin_url, target_db


def ensure_database_exists(db_url: str) -> bool:
    """Create the configured database if it is missing; return True when created."""
    admin_url, target_db = split_admin_url(db_url)
    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target_db,))
        if cur.fetchone() is not None:
            print(f"[ensure_db] database {target_db} already exists")
            return False
        cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
    print(f"[ensure_db] created database {target_db}")
    return True


def reset_schema(db_url: str) -> None:
    """Drop every Vayam table by recreating the public schema."""
    with psycopg.connect(normalize_to_psycopg(db_url), autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("DROP SCHEMA IF EXISTS public CASCADE")
        cur.execute("CREATE SCHEMA public")
    print("[ensure_db] public schema reset")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the Vayam database and apply migrations")
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to the effective settings URL)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables by recreating the public schema.",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply alembic migrations up to head afterwards.",
    )
    args = parser.parse_args(argv)

    raw_url = args.url or settings.effective_database_url
    try:
        ensure_database_exists(raw_url)
        if args.reset:
            reset_schema(raw_url)
    except (ValueError, psycopg.Error) as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        return 1

    if args.migrate:
        run_upgrade_head()
        print("[ensure_db] migrations applied")
    return 0


if __name__ == "__main__":
    sys.exit(main())
