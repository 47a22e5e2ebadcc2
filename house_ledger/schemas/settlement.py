"""Settlement schemas"""
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class SettleWithUserRequest(BaseModel):
    """Request body naming the counterparty of a bulk settlement"""
    counterparty_id: UUID


class SettlementResult(BaseModel):
    """Outcome of a bulk settlement"""
    settled_count: int
    net_amount: Decimal
