"""
Debt simplification for a single group.

Net balances are positive for members who are owed money and negative for
members who owe. The greedy pass repeatedly matches the largest remaining
creditor with the largest remaining debtor; ties go to whoever appears first
in the input, so the same input list always yields the same transfer list.

Everything runs on integer minor units. Amounts are checked for a zero sum at
the ledger's precision, then apportioned to the currency's precision so the
set still sums to zero, and per-member totals stay exact from there on.
"""
import heapq
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Hashable, Iterable, List, Sequence, Tuple

from evenly.core.errors import InconsistentBalancesError
from evenly.core.utils import LEDGER_EXPONENT, Amount, from_minor_units, to_minor_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimplifiedTransfer:
    from_user_id: Hashable
    to_user_id: Hashable
    amount: Decimal


def _net_by_user(balances: Iterable[Tuple[Hashable, int]]) -> Dict[Hashable, int]:
    # repeated ids fold into the first position they appeared at
    net: Dict[Hashable, int] = {}
    for user_id, minor in balances:
        net[user_id] = net.get(user_id, 0) + minor
    return net


def settle_minor_units(
    balances: Sequence[Tuple[Hashable, int]],
    exponent: int = 2,
) -> List[Tuple[Hashable, Hashable, int]]:
    """
    Greedy largest-creditor / largest-debtor matching on minor units.

    Returns (from_user_id, to_user_id, minor_amount) in emission order.
    `exponent` is only used to report the imbalance when the input does not
    sum to zero.
    """
    net = _net_by_user(balances)

    total = sum(net.values())
    if total != 0:
        raise InconsistentBalancesError(total, exponent)

    # (-remaining, input position, user_id): max-heaps with positional tie-break
    creditors = []
    debtors = []

    for position, (user_id, minor) in enumerate(net.items()):
        if minor > 0:
            creditors.append((-minor, position, user_id))
        elif minor < 0:
            debtors.append((minor, position, user_id))

    heapq.heapify(creditors)
    heapq.heapify(debtors)

    transfers: List[Tuple[Hashable, Hashable, int]] = []

    while creditors and debtors:
        cred_neg, cred_pos, cred_id = heapq.heappop(creditors)
        debt_neg, debt_pos, debt_id = heapq.heappop(debtors)

        settle = min(-cred_neg, -debt_neg)
        transfers.append((debt_id, cred_id, settle))

        cred_left = -cred_neg - settle
        debt_left = -debt_neg - settle

        if cred_left > 0:
            heapq.heappush(creditors, (-cred_left, cred_pos, cred_id))
        if debt_left > 0:
            heapq.heappush(debtors, (-debt_left, debt_pos, debt_id))

    return transfers


def rescale_minor_units(
    values: Iterable[int],
    from_exponent: int,
    to_exponent: int,
) -> List[int]:
    """
    Move minor-unit amounts from one precision to another.

    Scaling up is exact. Scaling down floors every value and hands the
    leftover units to the largest remainders, earlier positions first, so the
    result sums to the input total rounded at the new precision. A set that
    summed to zero still sums to zero.
    """
    values = list(values)

    if to_exponent >= from_exponent:
        factor = 10 ** (to_exponent - from_exponent)
        return [value * factor for value in values]

    shift = from_exponent - to_exponent
    factor = 10 ** shift

    scaled = [value // factor for value in values]
    remainders = [value - quotient * factor for value, quotient in zip(values, scaled)]

    target = to_minor_units(from_minor_units(sum(values), shift), 0)
    missing = target - sum(scaled)

    order = sorted(range(len(values)), key=lambda i: (-remainders[i], i))
    for i in order[:missing]:
        scaled[i] += 1

    return scaled


def _to_currency_units(
    rows: Iterable[Tuple[Hashable, Amount]],
    exponent: int,
    ledger_exponent: int | None,
    group_id: int | None = None,
) -> List[Tuple[Hashable, int]]:
    # zero-sum check at ledger precision, then apportion to the currency's
    if ledger_exponent is None:
        ledger_exponent = max(exponent, LEDGER_EXPONENT)

    net = _net_by_user(
        (user_id, to_minor_units(amount, ledger_exponent)) for user_id, amount in rows
    )

    total = sum(net.values())
    if total != 0:
        raise InconsistentBalancesError(total, ledger_exponent, group_id)

    return list(zip(net.keys(), rescale_minor_units(net.values(), ledger_exponent, exponent)))


def simplify_debts(
    balances: Iterable[Tuple[Hashable, Amount]],
    exponent: int = 2,
    ledger_exponent: int | None = None,
) -> List[SimplifiedTransfer]:
    """
    Reduce a group's net balances to the transfers that settle them.

    balances: (user_id, net_amount) pairs, net_amount as Decimal, int or str.
    exponent: decimal places of the group's currency.
    ledger_exponent: decimal places the balances were stored with. Defaults
        to the ledger's two, or the currency's when that is finer.

    Raises InconsistentBalancesError when the amounts do not sum to zero at
    ledger precision. Amounts are then rounded to the currency's minor unit
    by largest remainder, so a 333.33 / 333.33 / -666.66 JPY group settles
    as 333 + 333.
    """
    minor = _to_currency_units(balances, exponent, ledger_exponent)

    transfers = [
        SimplifiedTransfer(
            from_user_id=from_id,
            to_user_id=to_id,
            amount=from_minor_units(amount, exponent),
        )
        for from_id, to_id, amount in settle_minor_units(minor, exponent)
    ]

    logger.debug("Simplified %d balances into %d transfers", len(minor), len(transfers))
    return transfers


def collect_nonzero_balances(
    rows: Iterable[Tuple[Hashable, Amount]],
    exponent: int = 2,
    group_id: int | None = None,
    ledger_exponent: int | None = None,
) -> List[Tuple[Hashable, Decimal]]:
    """
    Prepare ledger rows for simplify_debts.

    Checks the rows sum to zero at ledger precision, rounds them to the
    currency's minor unit and drops members left at zero. Input order is
    preserved.
    """
    minor = _to_currency_units(rows, exponent, ledger_exponent, group_id)

    return [
        (user_id, from_minor_units(amount, exponent))
        for user_id, amount in minor
        if amount != 0
    ]
