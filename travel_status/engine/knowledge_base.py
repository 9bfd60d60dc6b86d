"""
Certificate-code resolution against the package knowledge base.

Sold certificates carry numeric suffixes (``BEACH123`` is unit 123 of the
``BEACH`` package). The resolver tries the full code first, then each
shorter form obtained by dropping one trailing digit at a time, and
returns the first package the table knows about.

Usage:
    resolver = KnowledgeBaseResolver(InMemoryPackageTable())
    policy = await resolver.resolve("BEACH123")  # → BEACH policy
"""

import logging
import string
from typing import Optional

from travel_status.schemas.customer_schema import PackagePolicy
from travel_status.tools.packages import PackageTable

logger = logging.getLogger(__name__)


def candidate_codes(code: Optional[str]) -> list[str]:
    """Return lookup candidates for a code, most specific first.

    Examples:
        >>> candidate_codes("E789")
        ['E789', 'E78', 'E7', 'E']
        >>> candidate_codes("SKI")
        ['SKI']
        >>> candidate_codes("")
        []
    """
    if not code:
        return []
    candidates = [code]
    current = code
    while current and current[-1] in string.digits:
        current = current[:-1]
        if current:
            candidates.append(current)
    return candidates


class KnowledgeBaseResolver:
    """Resolves raw certificate/package codes to a PackagePolicy."""

    def __init__(self, table: PackageTable) -> None:
        self._table = table

    async def resolve(self, code: Optional[str]) -> Optional[PackagePolicy]:
        """Return the policy for the most specific known form of ``code``, or None."""
        candidates = [c.upper() for c in candidate_codes((code or "").strip())]
        if not candidates:
            return None
        policy = await self._table.find_first(candidates)
        if policy is None:
            logger.info("No package found for code %r (tried %s)", code, candidates)
        else:
            logger.debug("Code %r resolved to package %s", code, policy.code)
        return policy
