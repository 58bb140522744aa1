"""Mint a development access token, creating the user row if asked.

Identity is issued by an external provider in production; this script only
exists so a local API can be exercised by hand or by the session client.
"""

from __future__ import annotations

import argparse
import sys

from sqlalchemy import select

from vayam.core.security import create_access_token
from vayam.db.session import SessionLocal
from vayam.models import User


def ensure_user(username: str, email: str | None, hname: str | None) -> User:
    """Return the user named `username`, creating it when missing."""
    with SessionLocal() as db:
        user = db.scalars(select(User).where(User.username == username)).first()
        if user is None:
            user = User(username=username, email=email, hname=hname)
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"[issue-token] created user uid={user.uid}", file=sys.stderr)
        return user


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a bearer token for a local user")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--uid", type=int, help="Existing user id")
    group.add_argument("--username", help="Username to look up or create")
    parser.add_argument("--email", default=None, help="Email for a newly created user")
    parser.add_argument("--name", default=None, help="Display name for a newly created user")
    args = parser.parse_args()

    uid = args.uid
    if uid is None:
        uid = ensure_user(args.username, args.email, args.name).uid
    print(create_access_token(uid))


if __name__ == "__main__":
    main()
