"""Script to create database tables from SQLAlchemy models."""

import asyncio
import sys

from peoplequery.infrastructure.database.session import create_tables, engine
from peoplequery.infrastructure.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def main() -> None:
    """Create database tables."""
    configure_logging()
    logger.info("Creating database tables...")

    try:
        await create_tables()
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
