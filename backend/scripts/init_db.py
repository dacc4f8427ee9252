import sys, pathlib, asyncio
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from loguru import logger
from sqlalchemy import text

from sewflow.core.db import get_engine
from sewflow.core.logging import setup_logging
from sewflow.models import Base


async def main():
    engine = get_engine()
    async with engine.begin() as conn:
        one = await conn.execute(text("SELECT 1"))
        logger.bind(result=one.scalar()).info("db_ping")

        await conn.run_sync(Base.metadata.create_all)
        logger.bind(tables=sorted(Base.metadata.tables)).info("database_tables_ready")
    await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
