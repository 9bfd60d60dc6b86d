"""
Travel customer status service entry point.

Runs the HTTP API, or resolves a single caller's status in the console
against the configured store (no server required).

Usage:
    HTTP server:  python main.py serve
    Console mode: python main.py status <phone | certificate | email>
"""

import asyncio
import json
import logging
import sys

from travel_status.config import settings
from travel_status.utils import normalize_phone

logger = logging.getLogger(__name__)


def classify_key(key: str) -> dict[str, str]:
    """Guess which identifier a console argument is."""
    key = key.strip()
    if "@" in key:
        return {"email": key}
    if len(normalize_phone(key)) >= 10 and not any(c.isalpha() for c in key):
        return {"phone": key}
    return {"certificate": key}


async def _print_status(key: str) -> None:
    from travel_status.api.dependencies import build_services

    services = build_services(settings)
    try:
        result = await services.aggregator.resolve(**classify_key(key))
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    finally:
        await services.close()


def _run_server() -> None:
    import uvicorn

    uvicorn.run(
        "travel_status.api.app:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    if len(sys.argv) > 2 and sys.argv[1] == "status":
        asyncio.run(_print_status(sys.argv[2]))
    elif len(sys.argv) > 1 and sys.argv[1] not in ("serve",):
        print(__doc__)
        sys.exit(2)
    else:
        _run_server()
