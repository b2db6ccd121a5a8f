"""
Main Execution Script for the Worker Readiness Engine.
Loads (or generates) a worker snapshot, runs the readiness service over it and
exports a per-day dashboard file for the frontend.
"""

import argparse
import asyncio
import json
import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Dict

from generators.data_factory import DataGenerator
from models import DayObligation
from readiness import (
    EngineSettings,
    ReadinessService,
    JsonSnapshotSource,
    InMemoryRecordSource,
    ReadinessError,
    save_snapshot,
)
from readiness.calendar import format_for_display, to_date

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- CONFIGURATION ---
DEFAULT_SNAPSHOT = "debug_snapshot.json"
DEFAULT_EXPORT = "dashboard_data.json"
# ---------------------


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Worker readiness report")
    parser.add_argument("--snapshot", default=DEFAULT_SNAPSHOT,
                        help="Cached snapshot JSON (generated if missing)")
    parser.add_argument("--worker", default=None, help="Worker id (defaults to the snapshot's worker)")
    parser.add_argument("--as-of", dest="as_of", type=to_date, default=None,
                        help="Evaluate as of YYYY-MM-DD (defaults to today)")
    parser.add_argument("--seed", type=int, default=42, help="Seed for generated data")
    parser.add_argument("--export", default=DEFAULT_EXPORT, help="Dashboard JSON output path")
    return parser.parse_args(argv)


def load_source(path: Path, seed: int, as_of: date):
    """Cached snapshot if present, otherwise a freshly generated (and cached) one."""
    if path.exists():
        try:
            return JsonSnapshotSource(path)
        except (json.JSONDecodeError, ValueError, KeyError) as e:
            logger.warning(f"⚠️ Snapshot {path} is invalid ({e}). Falling back to Generator.")

    logger.info("--- Phase 1: Synthetic Data Generation ---")
    snapshot = DataGenerator(seed=seed).generate_snapshot(as_of=as_of)
    save_snapshot(snapshot, path)
    return InMemoryRecordSource.from_snapshot(snapshot)


def export_dashboard_data(days: Dict[date, DayObligation], filename: str):
    """
    Serializes the day-by-day verdicts into a JSON format for the frontend.
    """
    logger.info(f"💾 Exporting dashboard data to {filename}...")
    data = {"days": {}, "summary": {}}

    for day, obligation in days.items():
        data["days"][day.isoformat()] = {
            "label": format_for_display(day),
            "state": obligation.state.value,
            "has_shift": obligation.schedule.has_shift,
            "shift_type": obligation.schedule.shift_type.value,
            "check_in_done": obligation.check_in_done,
            "check_in_on_time": obligation.check_in_on_time,
            "warm_up_required": obligation.warm_up_required,
            "warm_up_done": obligation.warm_up_done,
            "plan_day": obligation.plan_day,
            "exception": obligation.exception.exception_type.label if obligation.exception else None,
            "progress_percent": obligation.progress_percent,
        }

    for obligation in days.values():
        key = obligation.state.value
        data["summary"][key] = data["summary"].get(key, 0) + 1

    with open(filename, 'w') as f:
        json.dump(data, f, indent=2)
    logger.info("✅ Dashboard data exported.")


async def run(args: argparse.Namespace) -> int:
    settings = EngineSettings.from_env()
    as_of = args.as_of or date.today()

    source = load_source(Path(args.snapshot), args.seed, as_of)
    worker_id = args.worker or source.worker_id

    # Evaluate at midday of the as-of day
    service = ReadinessService(source, settings, clock=lambda: datetime.combine(as_of, time(12, 0)))

    logger.info(f"\n--- Phase 2: Readiness Evaluation for {worker_id} ---")
    try:
        today, streak, progress = await asyncio.gather(
            service.evaluate_day(worker_id, as_of),
            service.compute_streak(worker_id, as_of),
            service.plan_progress(worker_id),
        )
        start = as_of - timedelta(days=settings.default_lookback_days)
        engine = await service.engine_for(worker_id, start, as_of)
        days = engine.evaluate_range(worker_id, start, as_of)
    except ReadinessError as e:
        logger.error(f"❌ Evaluation failed: {e}")
        return 1

    # --- PHASE 3: REPORTING ---
    print("\n" + "="*50)
    print(f"📊 READINESS REPORT - {format_for_display(as_of)}")
    print("="*50)
    print(f"Today:            {today.state.value} ({today.progress_percent}%)")
    if today.exception:
        print(f"Exception:        {today.exception.exception_type.label} - {today.exception.reason}")
    print(f"Current streak:   {streak.current_streak} (longest {streak.longest_streak})")
    print(f"Missed shifts:    {streak.missed_schedule_count}")
    if streak.next_milestone:
        print(f"Next milestone:   {streak.next_milestone} days ({streak.days_until_next_milestone} to go)")
    if streak.badge:
        print(f"Badge:            {streak.badge.icon} {streak.badge.name}")
    if streak.next_check_in_date:
        print(f"Next check-in:    {format_for_display(streak.next_check_in_date)}")

    if progress:
        print(f"\n🏋️ Plan: day {progress.current_day}/{progress.duration_days}, "
              f"{progress.days_completed} days complete ({progress.progress_percent}%)")
        if progress.next_warm_up_available_at:
            print(f"Next warm-up:     {progress.next_warm_up_available_at.isoformat()}")

    if streak.missed_schedule_dates:
        print("\n🔍 MISSED SHIFTS")
        for day in streak.missed_schedule_dates:
            print(f"❌ {format_for_display(day)}")

    # --- PHASE 4: EXPORT FOR FRONTEND ---
    export_dashboard_data(days, args.export)

    print("\n✅ Readiness run complete.")
    return 0


def main(argv=None) -> int:
    logger.info("🚀 Starting Worker Readiness Engine...")
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
