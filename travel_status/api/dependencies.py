"""Service wiring and FastAPI dependency injection."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import httpx
from fastapi import Request

from travel_status.calls.tracker import LiveCallTracker
from travel_status.config import AppConfig, settings
from travel_status.engine.aggregator import StatusAggregator
from travel_status.engine.knowledge_base import KnowledgeBaseResolver
from travel_status.tools.caspio import CaspioClient
from travel_status.tools.customers import (
    CaspioCustomerStore,
    CustomerStore,
    InMemoryCustomerStore,
    sample_customer_rows,
)
from travel_status.tools.memos import CaspioMemoStore, InMemoryMemoStore, MemoStore
from travel_status.tools.notifications import GoogleChatNotifier
from travel_status.tools.packages import CaspioPackageTable, InMemoryPackageTable, PackageTable

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routers need, built once per application."""

    config: AppConfig
    customers: CustomerStore
    packages: PackageTable
    memos: MemoStore
    resolver: KnowledgeBaseResolver
    aggregator: StatusAggregator
    notifier: GoogleChatNotifier
    tracker: LiveCallTracker
    caspio: Optional[CaspioClient] = None

    async def close(self) -> None:
        await self.notifier.close()
        if self.caspio is not None:
            await self.caspio.close()


def build_services(
    config: AppConfig = settings,
    *,
    store_transport: Optional[httpx.AsyncBaseTransport] = None,
    notify_transport: Optional[httpx.AsyncBaseTransport] = None,
    today_fn: Optional[Callable[[], date]] = None,
) -> Services:
    """Build the collaborators for the configured store backend."""
    caspio = None
    if config.store.backend == "caspio":
        caspio = CaspioClient(
            config.store.caspio_base_url,
            config.store.caspio_client_id,
            config.store.caspio_client_secret,
            timeout=config.store.timeout_sec,
            transport=store_transport,
        )
        customers = CaspioCustomerStore(caspio, config.store.customers_table)
        packages = CaspioPackageTable(caspio, config.store.packages_table)
        memos = CaspioMemoStore(caspio, config.store.memos_table)
    else:
        customers = InMemoryCustomerStore(sample_customer_rows(today_fn() if today_fn else None))
        packages = InMemoryPackageTable()
        memos = InMemoryMemoStore()

    resolver = KnowledgeBaseResolver(packages)
    aggregator = StatusAggregator(
        customers,
        resolver,
        memos,
        urgent_days=config.policy.tr_urgent_days,
        window_end_days=config.policy.tr_window_end_days,
        timezone=config.policy.travel_timezone,
        today_fn=today_fn,
    )
    notifier = GoogleChatNotifier(
        config.notifications.google_chat_webhook_url,
        timeout=config.notifications.timeout_sec,
        transport=notify_transport,
    )
    tracker = LiveCallTracker(
        notifier,
        dashboard_url=config.notifications.dashboard_url,
        default_agent_name=config.notifications.default_agent_name,
    )
    logger.info("Services built (store backend: %s)", config.store.backend)
    return Services(
        config=config,
        customers=customers,
        packages=packages,
        memos=memos,
        resolver=resolver,
        aggregator=aggregator,
        notifier=notifier,
        tracker=tracker,
        caspio=caspio,
    )


def get_services(request: Request) -> Services:
    """Get the service container from app state."""
    return request.app.state.services
