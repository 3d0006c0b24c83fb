from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, List, Optional

from unispi.parsing.inform import PacketResult
from unispi.relay_app.models import PacketView, Transaction, TransactionMeta


def packet_view(result: PacketResult) -> PacketView:
    return PacketView(
        head=result.head.as_dict() if result.head is not None else None,
        payload=result.data,
        key_used=result.key_used,
        warnings=list(result.warnings),
    )


class TransactionStore:
    """Bounded in-memory log of decoded request/response pairs, newest last."""

    def __init__(self, max_entries: int = 500):
        self.max_entries = max_entries
        self._transactions: Deque[Transaction] = deque(maxlen=max_entries)
        self._lock = asyncio.Lock()
        self.total = 0

    async def insert(self, ip: Optional[str], req: PacketResult, res: PacketResult) -> Transaction:
        txn = Transaction(
            timestamp=time.time(),
            meta=TransactionMeta(ip=ip, mac=req.head.mac if req.head is not None else None),
            req=packet_view(req),
            res=packet_view(res),
        )
        async with self._lock:
            self._transactions.append(txn)
            self.total += 1
        return txn

    async def recent(self, limit: Optional[int] = None, mac: Optional[str] = None) -> List[Transaction]:
        async with self._lock:
            items = list(self._transactions)
        if mac:
            items = [t for t in items if t.meta.mac == mac.lower()]
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    async def clear(self) -> None:
        async with self._lock:
            self._transactions.clear()
