# storefront/db/init_db.py
from storefront.db.database import engine, Base
from storefront.db import models  # noqa: F401  registers the tables on Base.metadata


async def init_db(bind=None):
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
