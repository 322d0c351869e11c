"""
Shared process boundary for the operator scripts.

Row-level problems are handled inside the importers; anything that
reaches here is fatal: it is logged with its stack trace and the process
exits with status 1.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from backend.app.core.config import settings
from backend.app.core.exceptions import ConfigurationError
from backend.app.core.observability import configure_logging
from backend.app.db.session import engine

logger = logging.getLogger("church_ledger")


def run_script(main: Callable[[], Awaitable[None]], requires_database: bool = True) -> int:
    """Run an async script entry point and return its exit code."""
    configure_logging(settings.log_level)

    async def _run():
        try:
            if requires_database and not settings.database_configured:
                raise ConfigurationError("DATABASE_URL")
            await main()
        finally:
            if requires_database:
                await engine.dispose()

    try:
        asyncio.run(_run())
    except ConfigurationError as e:
        logger.error("❌ %s", e.message)
        return 1
    except Exception:
        logger.exception("❌ Script failed")
        return 1
    return 0
