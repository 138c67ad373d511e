from evenly.core.utils import from_minor_units


class InconsistentBalancesError(Exception):
    """
    Net balances handed to the simplifier do not sum to zero.

    This always points at a bookkeeping bug upstream (the ledger drifted),
    so it is never recovered from inside the service layer.
    """

    def __init__(self, imbalance_minor: int, exponent: int = 2, group_id: int | None = None):
        self.imbalance_minor = imbalance_minor
        self.imbalance = from_minor_units(imbalance_minor, exponent)
        self.group_id = group_id

        where = f" in group {group_id}" if group_id is not None else ""
        super().__init__(f"Net balances{where} are off by {self.imbalance}")
