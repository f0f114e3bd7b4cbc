# This project was developed with assistance from AI tools.
"""CLI entrypoint for campaign seeding.

Usage:
    python -m src.seed          # Seed this month's featured campaign
"""

import argparse
import asyncio
import json
import sys

from db.database import SessionLocal

from .services.campaign import seed_monthly_campaign


async def main() -> None:
    """Run campaign seeding."""
    async with SessionLocal() as session:
        result = await seed_monthly_campaign(session)
        print(json.dumps(result, indent=2, default=str))

        if result.get("status") == "already_seeded":
            print("\nThis month's campaign already exists.")
            sys.exit(0)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the monthly featured campaign")
    parser.parse_args()
    asyncio.run(main())
