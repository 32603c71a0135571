# start_app.py
"""Prepare the database and launch the gstbook API server."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn
from dotenv import load_dotenv

import config


def main(argv: list[str] | None = None) -> None:
    """Load settings, create missing tables, then start the API."""

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--skip-db-init",
        action="store_true",
        help="Start without creating missing tables",
    )
    parser.add_argument("--host", default="0.0.0.0")  # nosec B104: bind for local development
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file
    config.get_settings.cache_clear()
    settings = config.get_settings()

    if not args.skip_db_init:
        from gstbook.app import db

        db.init_db()
        print(f"database ready: {settings.database_url}", file=sys.stderr)

    uvicorn.run(
        "gstbook.app.main:app",
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
