import asyncio
import logging

from sqlalchemy import select

from trading_road.core.config import settings
from trading_road.core.security import get_password_hash
from trading_road.db.base import Base
from trading_road.db.session import engine, SessionLocal

# Import every model so its table is registered before create_all
from trading_road.models import (  # noqa: F401
    User, Employee, Product, Order, OrderItem, Message, Rating,
    StockHistory, BugReport, AuditLog, ScheduleException, FeatureFlag,
)
from trading_road.models.user import ROLE_ADMIN

logger = logging.getLogger(__name__)


async def ensure_tables_exist() -> None:
    """
    Create missing tables (called at application startup)
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_first_admin() -> bool:
    """
    Create the level 1 admin from settings when the platform has no admin yet.
    Returns True when an admin was created.
    """
    async with SessionLocal() as db:
        result = await db.execute(select(User.id).where(User.role == ROLE_ADMIN).limit(1))
        if result.scalar_one_or_none() is not None:
            return False

        result = await db.execute(select(User.id).where(User.email == settings.FIRST_ADMIN_EMAIL))
        if result.scalar_one_or_none() is not None:
            logger.warning(f"Cannot seed admin: {settings.FIRST_ADMIN_EMAIL} already belongs to another account")
            return False

        admin = User(
            email=settings.FIRST_ADMIN_EMAIL,
            password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            name=settings.FIRST_ADMIN_NAME,
            role=ROLE_ADMIN,
            admin_level=1,
        )
        db.add(admin)
        await db.commit()
        logger.info(f"Seeded first admin {settings.FIRST_ADMIN_EMAIL}")
        return True


async def init_db() -> None:
    await ensure_tables_exist()
    await seed_first_admin()


if __name__ == "__main__":
    asyncio.run(init_db())
