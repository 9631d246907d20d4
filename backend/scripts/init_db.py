"""Initialize the task board database.

Usage:
  python scripts/init_db.py            # create missing tables
  python scripts/init_db.py --reset    # drop and recreate every table
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import engine, Base
import app.models  # noqa: F401 - registers all models


def init_db(reset: bool = False):
    if reset:
        print("Dropping all task board tables...")
        Base.metadata.drop_all(bind=engine)
    print("Creating task board tables...")
    Base.metadata.create_all(bind=engine)
    print(f"Database initialized: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()
    init_db(reset=args.reset)
