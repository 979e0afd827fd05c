"""
Admin bootstrap.

    python manage.py create-admin owner@example.com 's3cret'
    python manage.py set-admin owner@example.com
    python manage.py set-admin owner@example.com --revoke
"""
import argparse
import sys

from auth import upsert_admin
from database import db


def main(argv=None, database=None):
    parser = argparse.ArgumentParser(description="Manage Siraq Studio admin users")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-admin", help="Create an admin user or reset its password")
    create.add_argument("email")
    create.add_argument("password")

    grant = sub.add_parser("set-admin", help="Grant or revoke admin access for an existing user")
    grant.add_argument("email")
    grant.add_argument("--revoke", action="store_true")

    args = parser.parse_args(argv)
    target = database if database is not None else db

    try:
        if args.command == "create-admin":
            user_id = upsert_admin(target, args.email, args.password)
        else:
            user_id = upsert_admin(target, args.email, admin=not args.revoke)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"User {args.email} ({user_id}) admin={not getattr(args, 'revoke', False)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
