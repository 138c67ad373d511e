import logging
from decimal import Decimal
from typing import Iterable, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evenly.core.dependencies import check_group_membership
from evenly.core.simplify import (
    collect_nonzero_balances,
    rescale_minor_units,
    simplify_debts,
)
from evenly.core.utils import (
    LEDGER_EXPONENT,
    currency_exponent,
    currency_symbol,
    from_minor_units,
    to_minor_units,
)
from evenly.models.group import Group
from evenly.models.user import User
from evenly.models.user_balance import UserBalance
from evenly.services.user_queries import get_user_by_id, get_users_by_ids

logger = logging.getLogger(__name__)


def _fmt(amount, exponent: int = 2) -> str:
    return str(from_minor_units(to_minor_units(amount, exponent), exponent))


def _user_brief(user: User | None):
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
    }


def _totals(amounts: Iterable[Decimal], exponent: int = 2) -> Tuple[int, int]:
    """(owed, owing) in minor units; owing is returned as a positive number."""
    owed = 0
    owing = 0
    for amount in amounts:
        minor = to_minor_units(amount, exponent)
        if minor > 0:
            owed += minor
        else:
            owing += -minor
    return owed, owing


# working fine
async def get_group_net_balances(
    db: AsyncSession,
    group_id: int,
    exponent: int = 2,
) -> List[Tuple[int, Decimal]]:
    """
    Ledger snapshot for the simplifier.

    Rows come back in ledger creation order (user_balances.id) so the
    simplifier's tie-break is stable between requests; zero rows are dropped
    and the remainder must sum to zero.
    """
    q = (
        select(UserBalance.user_id, UserBalance.balance)
        .where(UserBalance.group_id == group_id)
        .order_by(UserBalance.id)
    )

    res = await db.execute(q)
    rows = [(row.user_id, Decimal(str(row.balance))) for row in res]

    return collect_nonzero_balances(
        rows, exponent, group_id=group_id, ledger_exponent=LEDGER_EXPONENT
    )


async def get_group_balances(db: AsyncSession, group_id: int, user_id: int):
    group = await check_group_membership(db, group_id, user_id)
    return await _group_balance_rows(db, group)


async def _group_balance_rows(db: AsyncSession, group: Group):
    exponent = currency_exponent(group.currency)

    q = (
        select(UserBalance, User)
        .join(User, User.id == UserBalance.user_id)
        .where(UserBalance.group_id == group.id)
        .order_by(UserBalance.balance.desc(), UserBalance.user_id)
    )

    res = await db.execute(q)
    pairs = res.all()

    # apportioned in ledger order so the displayed amounts keep summing to zero
    in_ledger_order = sorted(pairs, key=lambda pair: pair[0].id)
    display = rescale_minor_units(
        (to_minor_units(Decimal(str(b.balance)), LEDGER_EXPONENT) for b, _ in in_ledger_order),
        LEDGER_EXPONENT,
        exponent,
    )
    shown = {
        b.id: str(from_minor_units(minor, exponent))
        for (b, _), minor in zip(in_ledger_order, display)
    }

    return [
        {
            "id": balance.id,
            "user_id": balance.user_id,
            "group_id": balance.group_id,
            "balance": shown[balance.id],
            "updated_at": balance.updated_at,
            "user": _user_brief(user),
        }
        for balance, user in pairs
    ]


async def get_user_balances(db: AsyncSession, user_id: int):
    q = (
        select(UserBalance, Group.currency)
        .join(Group, Group.id == UserBalance.group_id)
        .where(UserBalance.user_id == user_id, Group.is_deleted == False)
        .order_by(UserBalance.group_id)
    )

    res = await db.execute(q)

    return [
        {
            "id": balance.id,
            "user_id": balance.user_id,
            "group_id": balance.group_id,
            "balance": _fmt(balance.balance, currency_exponent(currency)),
            "updated_at": balance.updated_at,
        }
        for balance, currency in res.all()
    ]


async def get_user_net_balance(db: AsyncSession, user_id: int):
    """
    Totals across every group the user has a balance in.

    Amounts from different currencies are added as-is, at cent precision.
    """
    balances = await get_user_balances(db, user_id)

    owed, owing = _totals(Decimal(b["balance"]) for b in balances)

    return {
        "total_owed": str(from_minor_units(owed)),
        "total_owing": str(from_minor_units(owing)),
        "net_balance": str(from_minor_units(owed - owing)),
    }


async def _simplified_debts(db: AsyncSession, group: Group):
    exponent = currency_exponent(group.currency)

    balances = await get_group_net_balances(db, group.id, exponent)
    transfers = simplify_debts(balances, exponent)

    users = await get_users_by_ids(db, (uid for uid, _ in balances))

    logger.info(
        "Group %s: %d non-zero balances simplified into %d transfers",
        group.id, len(balances), len(transfers),
    )

    return [
        {
            "from_user_id": t.from_user_id,
            "to_user_id": t.to_user_id,
            "amount": str(t.amount),
            "from_user": _user_brief(users.get(t.from_user_id)),
            "to_user": _user_brief(users.get(t.to_user_id)),
        }
        for t in transfers
    ]


# working fine
async def get_simplified_debts(db: AsyncSession, group_id: int, user_id: int):
    group = await check_group_membership(db, group_id, user_id)
    return await _simplified_debts(db, group)


async def get_group_balance_summary(db: AsyncSession, group_id: int, user_id: int):
    group = await check_group_membership(db, group_id, user_id)
    exponent = currency_exponent(group.currency)

    balances = await _group_balance_rows(db, group)
    simplified = await _simplified_debts(db, group)

    owed, owing = _totals((Decimal(b["balance"]) for b in balances), exponent)

    return {
        "total_members": len(balances),
        "total_owed": str(from_minor_units(owed, exponent)),
        "total_owing": str(from_minor_units(owing, exponent)),
        "net_balance": str(from_minor_units(owed - owing, exponent)),
        "balances": balances,
        "simplified_debts": simplified,
    }


async def validate_group_balance_consistency(db: AsyncSession, group_id: int, user_id: int):
    """
    Diagnostic view of the ledger: reports drift instead of raising on it.
    """
    await check_group_membership(db, group_id, user_id)

    q = select(UserBalance.balance).where(UserBalance.group_id == group_id)
    res = await db.execute(q)

    # checked at storage precision; currency rounding is applied afterwards
    total = sum(
        (to_minor_units(Decimal(str(balance)), LEDGER_EXPONENT) for balance in res.scalars()),
        0,
    )
    total_balance = from_minor_units(total, LEDGER_EXPONENT)

    issues = []
    if total != 0:
        issues.append(f"Total balance is {total_balance}, should be 0")
        logger.warning("Group %s ledger is off by %s", group_id, total_balance)

    return {
        "is_valid": total == 0,
        "total_balance": str(total_balance),
        "issues": issues,
    }


def build_share_message(
    member_name: str,
    group_name: str,
    currency: str,
    debts: List[Tuple[str, str]],
    credits: List[Tuple[str, str]],
) -> str:
    """
    Plain-text balance summary a member can paste into a chat.

    debts / credits are (counterparty name, amount) pairs.
    """
    symbol = currency_symbol(currency)

    message = f"Hi {member_name},\n\nHere is your balance in \"{group_name}\":\n\n"

    if debts:
        message += "You owe:\n"
        for name, amount in debts:
            message += f"• {symbol}{amount} to {name}\n"
        message += "\n"

    if credits:
        message += "You are owed:\n"
        for name, amount in credits:
            message += f"• {symbol}{amount} from {name}\n"
        message += "\n"

    if not debts and not credits:
        message += "You are all settled up in this group.\n\n"

    message += "View details in the Evenly app."
    return message


async def get_share_message(db: AsyncSession, group_id: int, user_id: int):
    group = await check_group_membership(db, group_id, user_id)
    simplified = await _simplified_debts(db, group)

    me = await get_user_by_id(db, user_id)

    def _name(brief):
        return brief["name"] if brief else "Unknown"

    debts = [
        (_name(d["to_user"]), d["amount"])
        for d in simplified if d["from_user_id"] == user_id
    ]
    credits = [
        (_name(d["from_user"]), d["amount"])
        for d in simplified if d["to_user_id"] == user_id
    ]

    return {
        "group_id": group.id,
        "message": build_share_message(me.name, group.name, group.currency, debts, credits),
    }
