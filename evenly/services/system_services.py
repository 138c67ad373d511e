import logging
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from evenly.db.session import engine
from evenly.models.user import User
from evenly.models.group import Group
from evenly.models.user_balance import UserBalance

logger = logging.getLogger(__name__)

async def check_db_service():
    try:
        async with engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return {"db": True, "message": "Database is connected"}
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database health check failed: %s", e)
        return {"db": False, "error": str(e)}

async def system_health():
    return {
        "status": "ok"
    }

async def system_metrics(db: AsyncSession):
    users_q = select(func.count(User.id))
    groups_q = select(func.count(Group.id)).where(
        Group.is_deleted == False
    )
    balances_q = select(func.count(UserBalance.id))

    users_res = await db.execute(users_q)
    groups_res = await db.execute(groups_q)
    balances_res = await db.execute(balances_q)

    return {
        "users": users_res.scalar(),
        "groups": groups_res.scalar(),
        "balances": balances_res.scalar()
    }
