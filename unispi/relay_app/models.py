from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PacketView(BaseModel):
    head: Optional[Dict[str, Any]] = None
    payload: Any = None
    key_used: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class TransactionMeta(BaseModel):
    ip: Optional[str] = None
    mac: Optional[str] = None


class Transaction(BaseModel):
    timestamp: float
    meta: TransactionMeta
    req: PacketView
    res: PacketView


class TransactionsResponse(BaseModel):
    transactions: List[Transaction] = Field(default_factory=list)
    total: int = 0


class LogsResponse(BaseModel):
    events: List[Dict[str, Any]] = Field(default_factory=list)
