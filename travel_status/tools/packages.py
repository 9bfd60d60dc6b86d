"""Package knowledge base tables (expected deposit and activation method)."""

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from travel_status.schemas.customer_schema import ActivationMethod, PackagePolicy
from travel_status.tools.caspio import CaspioClient
from travel_status.utils import quote_where

logger = logging.getLogger(__name__)


class PackageTable(Protocol):
    async def find_first(self, candidates: Sequence[str]) -> Optional[PackagePolicy]:
        """Return the policy for the earliest candidate the table contains."""
        ...


SAMPLE_PACKAGES: list[PackagePolicy] = [
    PackagePolicy(
        code="BEACH",
        total_deposit=750,
        activation_method=ActivationMethod.ONLINE,
        destination_options="Caribbean, Mexico",
        package_features="Beach resort, 5 nights",
    ),
    PackagePolicy(
        code="E",
        total_deposit=500,
        activation_method=ActivationMethod.ONLINE,
        destination_options="Hawaii, Caribbean, Mexico",
        package_features="All-inclusive, 7 nights",
    ),
    PackagePolicy(
        code="SKI",
        total_deposit=800,
        activation_method=ActivationMethod.MAIL,
        destination_options="Colorado, Utah",
        package_features="Ski resort, 4 nights",
    ),
]


def policy_from_row(row: Mapping[str, Any]) -> PackagePolicy:
    """Build a PackagePolicy from a knowledge-base row (any column casing)."""
    lowered = {str(k).lower(): v for k, v in row.items()}
    return PackagePolicy(
        code=lowered.get("certificate_code") or lowered.get("code") or "",
        total_deposit=lowered.get("total_deposit", 0),
        activation_method=lowered.get("activation_method") or ActivationMethod.ONLINE.value,
        destination_options=lowered.get("destination_options") or "",
        package_features=lowered.get("package_features") or "",
    )


class InMemoryPackageTable:
    """Package table held in memory, keyed by upper-cased code."""

    def __init__(self, policies: Optional[Iterable[PackagePolicy]] = None) -> None:
        source = SAMPLE_PACKAGES if policies is None else policies
        self._policies = {p.code: p for p in source}

    def __len__(self) -> int:
        return len(self._policies)

    async def find_first(self, candidates: Sequence[str]) -> Optional[PackagePolicy]:
        for code in candidates:
            policy = self._policies.get(code.upper())
            if policy is not None:
                return policy
        return None


class CaspioPackageTable:
    """Knowledge base lookups against the hosted table, one query per resolution."""

    def __init__(self, client: CaspioClient, table: str) -> None:
        self._client = client
        self._table = table

    async def find_first(self, candidates: Sequence[str]) -> Optional[PackagePolicy]:
        codes = [c.upper() for c in candidates if c]
        if not codes:
            return None
        where = f"certificate_code IN ({', '.join(quote_where(c) for c in codes)})"
        rows = await self._client.query(self._table, where)
        by_code = {}
        for row in rows:
            policy = policy_from_row(row)
            by_code.setdefault(policy.code, policy)
        for code in codes:
            if code in by_code:
                return by_code[code]
        return None
