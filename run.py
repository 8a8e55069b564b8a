#!/usr/bin/env python
"""
Script to run the portal locally with the development server.
This will also create the tables and the admin account if they don't exist.
"""

import argparse
import logging

import uvicorn

from init_db import create_tables_if_not_exist, init_db
from license_portal.db.session import SessionLocal

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """
    Main function to run the application with development server.
    """
    parser = argparse.ArgumentParser(description="Run the Driver's License Portal locally")
    parser.add_argument("--host", default="127.0.0.1", help="Host to listen on")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--skip-init-db", action="store_true", help="Skip database initialization")
    args = parser.parse_args()

    if not args.skip_init_db:
        logger.info("Initializing database with the admin account")
        create_tables_if_not_exist()
        db = SessionLocal()
        try:
            init_db(db)
        finally:
            db.close()

    logger.info(f"Starting server at http://{args.host}:{args.port}")
    logger.info(f"API documentation available at http://{args.host}:{args.port}/api/docs")
    uvicorn.run("license_portal.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
