# This project was developed with assistance from AI tools.
"""CLI entrypoint for the stale M-PESA payment sweep.

Usage:
    python -m src.reconcile                  # Payments pending > PAYMENT_RECONCILE_AFTER_MINUTES
    python -m src.reconcile --older-than 30  # Custom age threshold (minutes)
"""

import argparse
import asyncio
import json
import logging

from db.database import CrmSessionLocal, SessionLocal

from .core.config import settings
from .services.daraja import close_daraja_client, init_daraja_client
from .services.notification import close_push_dispatcher, init_push_dispatcher
from .services.reconciliation import reconcile_pending_payments


async def main(older_than: int, limit: int) -> dict[str, int]:
    """Run one reconcile sweep."""
    client = init_daraja_client(settings)
    init_push_dispatcher(settings)
    try:
        async with SessionLocal() as session:
            async with CrmSessionLocal() as crm_session:
                result = await reconcile_pending_payments(
                    session, crm_session, client, older_than_minutes=older_than, limit=limit
                )
                print(json.dumps(result, indent=2))
                return result
    finally:
        await close_daraja_client()
        await close_push_dispatcher()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    parser = argparse.ArgumentParser(description="Reconcile stale M-PESA payments")
    parser.add_argument(
        "--older-than",
        type=int,
        default=settings.PAYMENT_RECONCILE_AFTER_MINUTES,
        help="Only query payments pending for at least this many minutes",
    )
    parser.add_argument("--limit", type=int, default=100, help="Maximum payments to query")
    args = parser.parse_args()
    asyncio.run(main(older_than=args.older_than, limit=args.limit))
