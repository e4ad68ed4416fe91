#!/usr/bin/env python3
"""
Run one watering reminder sweep by hand.

Same pass the daily Celery Beat job runs: every user with notifications
enabled gets a reminder per due plant, plus a summary when several are due.
Use --dry-run to list what would be sent without delivering anything.

Usage:
  python scripts/run_dispatch_sweep.py
  python scripts/run_dispatch_sweep.py --dry-run
"""

import argparse
import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plantcare.core.database import Database
from plantcare.engine import get_dispatch_sweep, get_engine_config, get_plant_store, get_settings_store
from plantcare.plants.urgency import classify_plant, needs_water, status_text


async def dry_run():
    config = get_engine_config()
    enabled = await get_settings_store().list_enabled()
    plants = await get_plant_store().list_all()

    print(f"Users with notifications enabled: {len(enabled)}")
    for settings in enabled:
        owned = [p for p in plants if p.user_id == settings.user_id]
        due = []
        for plant in owned:
            state = classify_plant(plant, config=config)
            if needs_water(state):
                due.append((plant, state))
        if not due:
            continue
        print(f"\nUser {settings.user_id}: {len(due)} due")
        for plant, state in due:
            print(f"  - {plant.name} ({plant.location or 'no location'}): {status_text(state)}")


async def main(is_dry_run: bool):
    await Database.connect()
    try:
        if is_dry_run:
            await dry_run()
        else:
            stats = await get_dispatch_sweep().run()
            print("Dispatch sweep complete.")
            for key, value in stats.items():
                print(f"  {key}: {value}")
    finally:
        await Database.disconnect()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run one watering reminder sweep")
    parser.add_argument("--dry-run", action="store_true", help="List due plants without sending")
    args = parser.parse_args()
    asyncio.run(main(args.dry_run))
