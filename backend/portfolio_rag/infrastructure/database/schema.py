"""Schema bootstrap for the content chunk table."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from portfolio_rag.infrastructure.database.base import Base
from portfolio_rag.infrastructure.database.models import ContentChunkModel  # noqa: F401  (registers table)

logger = logging.getLogger(__name__)


async def init_schema(engine: AsyncEngine) -> None:
    """Enable pgvector and create missing tables and indexes. Idempotent."""
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Content chunk schema ready")
