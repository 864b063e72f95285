"""FreshCart storefront management CLI.

Creates and drops the database schema, and runs the guest cart purge
outside the HTTP API (e.g. from cron).

Usage:
    python src/manage.py setup-db            # Create all tables
    python src/manage.py drop-db             # Drop all tables
    python src/manage.py purge-guest-carts   # Delete lapsed guest carts
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def purge_guest_carts():
    from storefront.cart.management import PurgeExpiredGuestCarts

    domain = _domain()
    with domain.domain_context():
        purged = domain.process(PurgeExpiredGuestCarts(), asynchronous=False)
    print(f"Purged {purged} expired guest cart(s).")


def main():
    parser = argparse.ArgumentParser(description="FreshCart storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("purge-guest-carts", help="Delete guest carts past their 30-day lifetime")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "purge-guest-carts":
        purge_guest_carts()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
