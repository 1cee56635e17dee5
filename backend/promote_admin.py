"""Grant admin rights to an existing user.

Usage:
    python -m backend.promote_admin user@example.com
"""
import sys

from backend.core import config
from backend.core.errors import NotFound
from backend.database import Database
from backend.services.credentials import promote_admin


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python -m backend.promote_admin <email>", file=sys.stderr)
        return 2

    database = Database(config.DATABASE_URL)
    database.open()
    db = database.session()
    try:
        user = promote_admin(db, args[0])
    except NotFound:
        print(f"No user registered with email {args[0]!r}", file=sys.stderr)
        return 1
    finally:
        db.close()
        database.close()

    print(f"{user.email} is now an admin.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
