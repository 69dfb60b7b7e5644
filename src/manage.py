"""Marketplace database management CLI.

Creates or drops the relational schema for the marketplace aggregates when
the active ``PROTEAN_ENV`` overlay points at a SQL database. With the
default memory provider both commands are no-ops.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def _initialized_domain():
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


def setup_database():
    from marketplace.utils.db import setup_db

    domain = _initialized_domain()
    print("Creating marketplace database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from marketplace.utils.db import drop_db

    domain = _initialized_domain()
    print("Dropping marketplace database schema...")
    drop_db(domain)
    print("Done.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Marketplace database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        sys.exit(1)


if __name__ == "__main__":
    main()
