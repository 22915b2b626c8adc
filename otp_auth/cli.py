"""CLI tool for admin operations.

Usage:
    python -m otp_auth.cli set-role <email> <role>
"""

import sys

from sqlmodel import Session, select

from otp_auth.database import engine, create_db_and_tables
from otp_auth.models.identity import Identity, Role


def set_role(email: str, role_name: str) -> int:
    """Record a role claim on an existing identity."""
    try:
        role = Role(role_name.strip().lower())
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        print(f"Unknown role '{role_name}'. Choose one of: {allowed}")
        return 1

    create_db_and_tables()

    with Session(engine) as session:
        identity = session.exec(select(Identity).where(Identity.email == email.strip())).first()
        if not identity:
            print(f"User '{email}' not found.")
            return 1

        identity.role = role
        session.add(identity)
        session.commit()

    print(f"{email} now has role '{role.value}'.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python -m otp_auth.cli <command>")
        print("Commands: set-role <email> <role>")
        return 1

    command = args[0]
    if command == "set-role":
        if len(args) != 3:
            print("Usage: python -m otp_auth.cli set-role <email> <role>")
            return 1
        return set_role(args[1], args[2])

    print(f"Unknown command: {command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
