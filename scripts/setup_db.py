#!/usr/bin/env python3
"""
Create the database tables, optionally seeding the tool catalog.

    python scripts/setup_db.py [--seed-tools]
"""
import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import app
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.db.init_db import init_db


def main(argv=None):
    parser = argparse.ArgumentParser(description="Set up the agent factory database")
    parser.add_argument("--seed-tools", action="store_true", help="Insert the default catalog tools")
    args = parser.parse_args(argv)

    init_db()

    if args.seed_tools:
        from insert_send_email_tool import insert_send_email_tool

        insert_send_email_tool()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    main()
