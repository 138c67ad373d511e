from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from evenly.core.dependencies import get_current_user, get_db
from evenly.schemas.balances import (
    BalanceConsistencyOut,
    GroupBalanceOut,
    GroupBalanceSummaryOut,
    ShareMessageOut,
    SimplifiedDebtOut,
    UserBalanceOut,
    UserNetBalanceOut,
)
from evenly.services.balance_service import (
    get_group_balance_summary,
    get_group_balances,
    get_share_message,
    get_simplified_debts,
    get_user_balances,
    get_user_net_balance,
    validate_group_balance_consistency,
)

router = APIRouter()


@router.get("/user", response_model=list[UserBalanceOut])
async def my_balances(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_user_balances(db, user.id)


@router.get("/user/net", response_model=UserNetBalanceOut)
async def my_net_balance(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_user_net_balance(db, user.id)


@router.get("/group/{group_id}", response_model=list[GroupBalanceOut])
async def group_balances(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_group_balances(db, group_id, user.id)


@router.get("/group/{group_id}/summary", response_model=GroupBalanceSummaryOut)
async def group_summary(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_group_balance_summary(db, group_id, user.id)


@router.get("/group/{group_id}/simplified-debts", response_model=list[SimplifiedDebtOut])
async def simplified_debts(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_simplified_debts(db, group_id, user.id)


@router.get("/group/{group_id}/validate", response_model=BalanceConsistencyOut)
async def validate_group(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await validate_group_balance_consistency(db, group_id, user.id)


@router.get("/group/{group_id}/share-message", response_model=ShareMessageOut)
async def share_message(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await get_share_message(db, group_id, user.id)
