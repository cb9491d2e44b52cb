import asyncio
import logging
import sys

from truthordare.config import get_settings
from truthordare.db.exceptions import DatabaseConnectionError
from truthordare.db.service import create_database_service
from truthordare.utils.logging_setup import setup_logging


async def main() -> int:
    """Verify the database is reachable before the bot accepts traffic."""
    settings = get_settings()
    setup_logging(settings)
    logger = logging.getLogger(__name__)

    db = create_database_service(settings.db)
    try:
        await db.test_connection()
    except DatabaseConnectionError as e:
        logger.error("Database is unreachable, aborting startup: %s", e)
        return 1
    finally:
        await db.close()

    logger.info(
        "Database connection verified (backend=%s, pool_size=%d)",
        settings.db.backend,
        settings.db.pool_size,
    )
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logging.info("Startup check interrupted.")
