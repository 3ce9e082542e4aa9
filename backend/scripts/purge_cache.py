"""Script to delete expired entries from the answer cache."""

import asyncio
import sys

from peoplequery.infrastructure.database.session import engine, local_session
from peoplequery.infrastructure.logging import configure_logging, get_logger
from peoplequery.modules.query.cache import QueryCache

logger = get_logger(__name__)


async def main() -> None:
    """Purge expired cache entries."""
    configure_logging()

    try:
        async with local_session() as db:
            purged = await QueryCache().purge_expired(db)
        logger.info("Expired cache entries purged", extra={"purged_count": purged})
    except Exception as e:
        logger.error(f"Error purging the answer cache: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
