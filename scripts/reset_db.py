# scripts/reset_db.py

import asyncio
import os
import sys
from loguru import logger

# Ensure project root (the folder containing 'app') is on sys.path
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from app.core.db import engine
from app.infrastructure.db import models  # noqa: F401
from app.infrastructure.db.base import Base


async def reset_db():
    logger.info("Resetting billing schema (drop_all + create_all) on {}", engine.url.render_as_string(hide_password=True))

    async with engine.begin() as conn:
        logger.info("Dropping all tables...")
        await conn.run_sync(Base.metadata.drop_all)

        logger.info("Creating all tables from current models...")
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    logger.success("DB reset complete: users, customers, projects, bank_details, invoices, payments, invoice_sequences")


if __name__ == "__main__":
    asyncio.run(reset_db())
