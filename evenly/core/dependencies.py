from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from evenly.db.session import async_session
from evenly.core.security import verify_token
from evenly.services.user_queries import get_user_by_auth_id
from sqlalchemy import select
from evenly.models.group import Group
from evenly.models.group_member import GroupMember

async def get_db():
    async with async_session() as session:
        yield session

async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)):
    payload = await verify_token(request)
    subject = payload.get("sub")

    if subject is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")

    user = await get_user_by_auth_id(db, str(subject))

    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    return user

async def get_active_group(db: AsyncSession, group_id: int) -> Group:
    q_group = select(Group).where(Group.id == group_id, Group.is_deleted == False)
    res_group = await db.execute(q_group)
    group = res_group.scalar_one_or_none()

    if not group:
        raise HTTPException(404, "Group does not exist")

    return group

async def check_group_membership(db: AsyncSession, group_id: int, user_id: int) -> Group:
    group = await get_active_group(db, group_id)

    q_member = select(GroupMember).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
        GroupMember.is_active == True
    )

    res_member = await db.execute(q_member)
    member = res_member.scalar_one_or_none()

    if not member:
        raise HTTPException(403, "You are not a member of this group")

    return group
