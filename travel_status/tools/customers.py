"""
Customer record stores.

Two backends share one narrow interface: an in-memory store seeded with
sample customers (used for development and the console demo) and the
hosted-table store. Both normalize rows into CustomerRecord here, so
column-name variants never reach the engine.
"""

import logging
from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional, Protocol

from travel_status.schemas.customer_schema import CustomerRecord
from travel_status.tools.caspio import CaspioClient
from travel_status.utils import is_blank, normalize_phone, quote_where

logger = logging.getLogger(__name__)


class CustomerStore(Protocol):
    """Read-only customer lookups. Each returns None when nothing matches."""

    async def find_by_phone(self, digits: str) -> Optional[CustomerRecord]: ...

    async def find_by_certificate(self, code: str) -> Optional[CustomerRecord]: ...

    async def find_by_email(self, email: str) -> Optional[CustomerRecord]: ...


def _build_column_map() -> dict[str, str]:
    columns: dict[str, str] = {}
    for name, info in CustomerRecord.model_fields.items():
        key = info.alias or name
        columns[name.lower()] = key
        columns[key.lower()] = key
    return columns


_COLUMNS = _build_column_map()


def record_from_row(row: Mapping[str, Any]) -> CustomerRecord:
    """Normalize a raw store row into a CustomerRecord.

    Column names are matched case-insensitively against both the store's
    names (``Asgn_trv_DT``, ``PHN1``) and the canonical field names
    (``travel_date``). Unknown columns are dropped.
    """
    values: dict[str, Any] = {}
    for column, value in row.items():
        key = _COLUMNS.get(str(column).lower())
        if key is not None and key not in values:
            values[key] = value
    return CustomerRecord.model_validate(values)


def _matches_certificate(record: CustomerRecord, code: str) -> bool:
    if record.certificate_code and record.certificate_code.upper() == code.upper():
        return True
    return code.isdigit() and record.customer_id == code


def sample_customer_rows(today: Optional[date] = None) -> list[dict[str, Any]]:
    """Sample customers in store column format, dated relative to ``today``."""
    today = today or date.today()

    def days_out(days: int) -> str:
        return (today + timedelta(days=days)).isoformat()

    return [
        {
            # Deposits paid in full, rep assigned, documents sent, booked
            "phn1": "8182121359",
            "phn2": "3105551234",
            "pkg_code": "BEACH",
            "pkg_code2": "BEACH123",
            "vac_id": "123456",
            "last_name": "Johnson",
            "first_name": "Sarah",
            "email": "sarah.johnson@email.com",
            "val_dep": 250.00,
            "conf_deposit": 500.00,
            "Asgn_trv_DT": days_out(120),
            "confirm_status": "confirm",
            "tm": "John Smith",
            "date_print_enc": days_out(-10),
            "agency_book_via": "FLIGHT123",
            "htl_bk_via": "HOTEL456",
        },
        {
            # Deposits complete, confirmed trip 41 days out, no rep yet
            "phn1": "3105559876",
            "phn2": "",
            "pkg_code": "E",
            "pkg_code2": "E789",
            "vac_id": "234567",
            "last_name": "Chen",
            "first_name": "Mike",
            "email": "mike.chen@email.com",
            "val_dep": 250.00,
            "conf_deposit": 250.00,
            "Asgn_trv_DT": days_out(41),
            "confirm_status": "confirm",
            "tm": "",
            "date_print_enc": "",
            "agency_book_via": "",
            "htl_bk_via": "",
        },
        {
            # Nothing paid yet, mail-in activation package
            "phn1": "4155551212",
            "phn2": "",
            "pkg_code": "SKI",
            "pkg_code2": "SKI555",
            "vac_id": "345678",
            "last_name": "Martinez",
            "first_name": "Lisa",
            "email": "lisa.martinez@email.com",
            "val_dep": 0,
            "conf_deposit": 0,
            "Asgn_trv_DT": "0000-00-00",
            "confirm_status": "",
            "tm": "",
            "date_print_enc": "",
            "agency_book_via": "",
            "htl_bk_via": "",
        },
    ]


class InMemoryCustomerStore:
    """Customer store backed by a list of rows, for development and tests."""

    def __init__(self, rows: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        source = sample_customer_rows() if rows is None else rows
        self._records = [record_from_row(row) for row in source]

    def __len__(self) -> int:
        return len(self._records)

    async def find_by_phone(self, digits: str) -> Optional[CustomerRecord]:
        target = normalize_phone(digits)
        if not target:
            return None
        for record in self._records:
            if target in (normalize_phone(record.phone_primary), normalize_phone(record.phone_secondary)):
                logger.debug("Customer found by phone: %s", record.full_name)
                return record
        return None

    async def find_by_certificate(self, code: str) -> Optional[CustomerRecord]:
        code = (code or "").strip()
        if not code:
            return None
        for record in self._records:
            if _matches_certificate(record, code):
                return record
        return None

    async def find_by_email(self, email: str) -> Optional[CustomerRecord]:
        target = (email or "").strip().lower()
        if not target:
            return None
        for record in self._records:
            if record.email.lower() == target:
                return record
        return None


class CaspioCustomerStore:
    """Customer lookups against the hosted customer table."""

    def __init__(self, client: CaspioClient, table: str) -> None:
        self._client = client
        self._table = table

    async def _first(self, where: str) -> Optional[CustomerRecord]:
        rows = await self._client.query(self._table, where)
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning("%d customer rows matched %s; using the first", len(rows), where)
        return record_from_row(rows[0])

    async def find_by_phone(self, digits: str) -> Optional[CustomerRecord]:
        target = normalize_phone(digits)
        if not target:
            return None
        quoted = quote_where(target)
        return await self._first(f"phn1={quoted} OR phn2={quoted}")

    async def find_by_certificate(self, code: str) -> Optional[CustomerRecord]:
        code = (code or "").strip()
        if is_blank(code):
            return None
        if code.isdigit():
            where = f"vac_id={code} OR pkg_code2={quote_where(code)}"
        else:
            where = f"pkg_code2={quote_where(code.upper())}"
        return await self._first(where)

    async def find_by_email(self, email: str) -> Optional[CustomerRecord]:
        target = (email or "").strip()
        if not target:
            return None
        return await self._first(f"email={quote_where(target)}")
