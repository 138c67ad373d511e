from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from evenly.core.utils import LEDGER_EXPONENT
from evenly.db.session import Base

class UserBalance(Base):
    """
    One member's running net position in a group.

    Written by the expense and payment services on every mutation;
    positive means the member is owed money, negative means they owe.
    """
    __tablename__ = "user_balances"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_user_balance_group_user"),
    )

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    balance = Column(Numeric(10, LEDGER_EXPONENT), nullable=False, server_default="0.00")

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
