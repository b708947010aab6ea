from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

import os
import logging

from . import config
from .utils import new_record_id, slugify

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./worktasks.db")

# Use NullPool to avoid connection-pool objects being bound to a specific
# event loop (which can cause 'bound to a different event loop' errors
# when tests create a fresh loop per test).
engine = create_async_engine(DATABASE_URL, echo=False, future=True, poolclass=NullPool)

async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    # import models so their tables are registered on SQLModel.metadata
    from .models import Project
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    if not config.SEED_DEFAULT_PROJECTS:
        return
    async with async_session() as sess:
        existing = (await sess.exec(select(Project))).first()
        if existing is not None:
            return
        for name, color in config.DEFAULT_PROJECTS:
            sess.add(Project(id=new_record_id(), name=name, slug=slugify(name), color=color))
        await sess.commit()
        logger.info('seeded %d default projects', len(config.DEFAULT_PROJECTS))


async def reset_db():
    """Drop and recreate all tables (tests use this for isolation)."""
    from . import models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
