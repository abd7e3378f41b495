"""Create the database tables for the configured DATABASE_URL.

Usage:
    python -m scripts.init_db
"""

import asyncio
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from cms.config import get_settings
from cms.services.database import dispose_engine, init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main() -> int:
    url = get_settings().database_url
    print(f"Initialising database at {url}")
    try:
        await init_db()
    except SQLAlchemyError as exc:
        logger.error("Failed to create tables: %s", exc)
        return 1
    finally:
        await dispose_engine()
    print("Tables ready.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
