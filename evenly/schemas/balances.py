from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import List

class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

class UserBrief(CamelModel):
    id: int
    name: str
    email: str | None = None
    avatar: str | None = None

class GroupBalanceOut(CamelModel):
    id: int
    user_id: int
    group_id: int
    balance: str
    updated_at: datetime | None = None
    user: UserBrief

class UserBalanceOut(CamelModel):
    id: int
    user_id: int
    group_id: int
    balance: str
    updated_at: datetime | None = None

class UserNetBalanceOut(CamelModel):
    total_owed: str
    total_owing: str
    net_balance: str

class SimplifiedDebtOut(CamelModel):
    from_user_id: int
    to_user_id: int
    amount: str
    from_user: UserBrief | None = None
    to_user: UserBrief | None = None

class GroupBalanceSummaryOut(CamelModel):
    total_members: int
    total_owed: str
    total_owing: str
    net_balance: str
    balances: List[GroupBalanceOut]
    simplified_debts: List[SimplifiedDebtOut]

class BalanceConsistencyOut(CamelModel):
    is_valid: bool
    total_balance: str
    issues: List[str]

class ShareMessageOut(CamelModel):
    group_id: int
    message: str
