"""
Follow-up memo stores.

Memos are the notes the agent leaves for staff, e.g. when a confirmed trip
is close and no travel rep has been assigned.
"""

import logging
import uuid
from datetime import date
from typing import Optional, Protocol

from travel_status.schemas.customer_schema import Memo
from travel_status.tools.caspio import CaspioClient
from travel_status.utils import quote_where

logger = logging.getLogger(__name__)

CREATED_BY = "AI Agent"


class MemoStore(Protocol):
    async def create(
        self,
        memo_type: str,
        details: str,
        customer_id: str,
        phone_number: str = "",
        created_date: Optional[date] = None,
    ) -> Memo: ...

    async def list_for(self, customer_id: str) -> list[Memo]: ...


class InMemoryMemoStore:
    """Memo store held in process memory."""

    def __init__(self) -> None:
        self._memos: list[Memo] = []

    async def create(
        self,
        memo_type: str,
        details: str,
        customer_id: str,
        phone_number: str = "",
        created_date: Optional[date] = None,
    ) -> Memo:
        memo = Memo(
            memo_id=f"MEMO-{uuid.uuid4().hex[:8].upper()}",
            memo_type=memo_type,
            details=details or "",
            customer_id=customer_id,
            phone_number=phone_number or "",
            created_date=(created_date or date.today()).isoformat(),
            created_by=CREATED_BY,
        )
        self._memos.append(memo)
        logger.info("Memo created: %s (%s) for %s", memo.memo_id, memo_type, customer_id)
        return memo

    async def list_for(self, customer_id: str) -> list[Memo]:
        memos = [m for m in self._memos if m.customer_id == customer_id]
        return sorted(memos, key=lambda m: m.created_date, reverse=True)

    def reset(self) -> None:
        """Clear all memos. Used by test fixtures for isolation."""
        self._memos.clear()


class CaspioMemoStore:
    """Memo store backed by the hosted memo table."""

    def __init__(self, client: CaspioClient, table: str) -> None:
        self._client = client
        self._table = table

    async def create(
        self,
        memo_type: str,
        details: str,
        customer_id: str,
        phone_number: str = "",
        created_date: Optional[date] = None,
    ) -> Memo:
        record = {
            "memo_type": memo_type,
            "details": details or "",
            "vac_id": customer_id,
            "phone_number": phone_number or "",
            "created_date": (created_date or date.today()).isoformat(),
            "created_by": CREATED_BY,
        }
        stored = await self._client.insert(self._table, record)
        memo_id = stored.get("memo_id") or stored.get("PK_ID") or stored.get("id")
        if memo_id is None:
            memo_id = f"MEMO-{uuid.uuid4().hex[:8].upper()}"
            logger.warning("Memo insert returned no id; using local id %s", memo_id)
        memo = Memo(memo_id=str(memo_id), **record)
        logger.info("Memo created: %s (%s) for %s", memo.memo_id, memo_type, customer_id)
        return memo

    async def list_for(self, customer_id: str) -> list[Memo]:
        rows = await self._client.query(self._table, f"vac_id={quote_where(customer_id)}")
        memos = [
            Memo(
                memo_id=str(row.get("memo_id") or row.get("PK_ID") or row.get("id") or ""),
                memo_type=row.get("memo_type") or "",
                details=row.get("details") or "",
                customer_id=str(row.get("vac_id") or customer_id),
                phone_number=row.get("phone_number") or "",
                created_date=str(row.get("created_date") or "")[:10],
                created_by=row.get("created_by") or CREATED_BY,
            )
            for row in rows
        ]
        return sorted(memos, key=lambda m: m.created_date, reverse=True)


async def ensure_memo(
    store: MemoStore,
    memo_type: str,
    details: str,
    customer_id: str,
    phone_number: str,
    today: date,
) -> Memo:
    """Create a memo unless one of the same type was already created today."""
    for memo in await store.list_for(customer_id):
        if memo.memo_type == memo_type and memo.created_date == today.isoformat():
            logger.debug("Reusing memo %s (%s) for %s", memo.memo_id, memo_type, customer_id)
            return memo
    return await store.create(memo_type, details, customer_id, phone_number, created_date=today)
