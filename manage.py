import sys
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

USAGE = "usage: python manage.py promote-admin <email>"


def promote_admin(email):
    """Give an existing user the admin role."""
    from bookmarket.config import Settings
    from bookmarket.db import Database
    from bookmarket import crud

    settings = Settings.load()
    if not settings.database_url:
        raise SystemExit("DATABASE_URL not set")

    database = Database(settings.database_url)
    database.create_all()
    session = database.session()
    try:
        if not crud.set_admin(session, email):
            raise SystemExit(f"No user registered with email {email}")
    finally:
        session.close()
        database.dispose()
    print(f"{email} is now an admin.")


if __name__ == "__main__":
    if len(sys.argv) != 3 or sys.argv[1] != "promote-admin":
        raise SystemExit(USAGE)
    promote_admin(sys.argv[2])
