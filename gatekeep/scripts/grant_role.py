"""
Grant a role to an existing account (e.g. the first admin). Run from project root:
  python -m gatekeep.scripts.grant_role EMAIL ROLE
Example:
  python -m gatekeep.scripts.grant_role ann@example.com admin
"""
import argparse
import sys

from gatekeep.core.clock import utcnow
from gatekeep.core.database import SessionLocal
from gatekeep.core.security import normalize_email
from gatekeep.stores import CredentialStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Grant a role to a Gatekeep account.")
    parser.add_argument("email", help="Email of an existing account")
    parser.add_argument("role", help="Role name (1-50 chars), e.g. admin")
    args = parser.parse_args(argv)

    role = args.role.strip().lower()
    if not role or len(role) > 50:
        print("Invalid role name length.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        account = store.find_active_by_email(normalize_email(args.email))
        if account is None:
            print("Account not found.", file=sys.stderr)
            return 1
        if not store.grant_role(account.id, role, utcnow()):
            print(f"Account already has role '{role}'.")
            return 0
        print(f"Granted role '{role}' to {account.email}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
