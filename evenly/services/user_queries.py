from typing import Dict, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from evenly.models.user import User

async def get_user_by_id(db: AsyncSession, user_id: int):
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()

async def get_user_by_auth_id(db: AsyncSession, auth_service_id: str):
    res = await db.execute(select(User).where(User.auth_service_id == auth_service_id))
    return res.scalar_one_or_none()

async def get_users_by_ids(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, User]:
    ids = set(user_ids)
    if not ids:
        return {}

    res = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in res.scalars().all()}
