"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from travel_status.calls.session_store import CallSessionStore
from travel_status.calls.tracker import LiveCallTracker
from travel_status.engine.aggregator import StatusAggregator
from travel_status.engine.knowledge_base import KnowledgeBaseResolver
from travel_status.errors import CollaboratorFailure
from travel_status.schemas.customer_schema import CustomerRecord, Memo
from travel_status.tools.customers import InMemoryCustomerStore, record_from_row, sample_customer_rows
from travel_status.tools.memos import InMemoryMemoStore
from travel_status.tools.packages import InMemoryPackageTable

TODAY = date(2026, 3, 2)


def days_out(days: int) -> str:
    return (TODAY + timedelta(days=days)).isoformat()


def make_row(**overrides: Any) -> dict[str, Any]:
    """A customer row in store column format with nothing paid or scheduled."""
    row = {
        "phn1": "5550001111",
        "phn2": "",
        "pkg_code": "E",
        "pkg_code2": "E100",
        "vac_id": "900001",
        "first_name": "Test",
        "last_name": "Customer",
        "email": "test.customer@example.com",
        "val_dep": 0,
        "conf_deposit": 0,
        "Asgn_trv_DT": "",
        "confirm_status": "",
        "tm": "",
        "date_print_enc": "",
        "agency_book_via": "",
        "htl_bk_via": "",
    }
    row.update(overrides)
    return row


def make_record(**overrides: Any) -> CustomerRecord:
    return record_from_row(make_row(**overrides))


class RecordingNotifier:
    """Notifier that keeps every message it is asked to send."""

    def __init__(self, delivered: bool = True) -> None:
        self.delivered = delivered
        self.sent: list[tuple[dict[str, Any], Optional[str]]] = []

    async def send(self, message: dict[str, Any], thread_key: Optional[str] = None) -> bool:
        self.sent.append((message, thread_key))
        return self.delivered


class FailingCustomerStore:
    async def find_by_phone(self, digits: str):
        raise CollaboratorFailure("caspio", "query RIMS_DATA timed out")

    async def find_by_certificate(self, code: str):
        raise CollaboratorFailure("caspio", "query RIMS_DATA timed out")

    async def find_by_email(self, email: str):
        raise CollaboratorFailure("caspio", "query RIMS_DATA timed out")


class FailingMemoStore:
    def __init__(self) -> None:
        self.attempts = 0

    async def create(self, memo_type, details, customer_id, phone_number="", created_date=None) -> Memo:
        self.attempts += 1
        raise CollaboratorFailure("caspio", "insert RIMS_MEMOS failed with HTTP 500")

    async def list_for(self, customer_id: str) -> list[Memo]:
        return []


class FakeClock:
    """Deterministic UTC clock for the call tracker."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def package_table():
    return InMemoryPackageTable()


@pytest.fixture
def resolver(package_table):
    return KnowledgeBaseResolver(package_table)


@pytest.fixture
def customer_store():
    return InMemoryCustomerStore(sample_customer_rows(TODAY))


@pytest.fixture
def memo_store():
    store = InMemoryMemoStore()
    yield store
    store.reset()


@pytest.fixture
def aggregator(customer_store, resolver, memo_store):
    return StatusAggregator(customer_store, resolver, memo_store, today_fn=lambda: TODAY)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(notifier, clock):
    return LiveCallTracker(notifier, CallSessionStore(), clock=clock)
