"""
Async service boundary.

The readiness views are refreshed on page load, on window focus and on
visibility change, often several times at once for the same worker. This module
keeps those refreshes coordinated:
1. Request coalescing - one in-flight snapshot fetch per key; concurrent callers
   await the same future instead of issuing duplicate remote calls. A forced
   refresh starts a new fetch that supersedes the one in flight.
2. Last-write-wins    - a result from a request that was overtaken by a newer,
   already-published one is discarded in favour of the newer result.
3. Failure typing     - collaborator errors and malformed payloads become
   DataUnavailableError; nothing is ever defaulted to zeros.

The clock is read here and only here, then injected into the pure engine.
"""

import asyncio
import logging
from datetime import date as date_type, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional, Tuple, Type, TypeVar
from collections import defaultdict

from pydantic import BaseModel, ValidationError

from models import (
    WorkerScheduleEntry,
    RecurringSchedule,
    ExceptionRecord,
    CheckInRecord,
    RehabilitationPlan,
    ExerciseCompletionRecord,
    DayObligation,
    StreakState,
    PlanProgress,
)
from .calendar import date_range, local_today
from .engine import ReadinessEngine
from .rehab import validate_plan
from .errors import DataUnavailableError, ReadinessError
from .settings import EngineSettings, DEFAULT_SETTINGS
from .snapshot import WorkerSnapshot
from .sources import RecordSource

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class InFlightRequests:
    """
    Single in-flight task per key. Late callers join the running task unless
    they force a fresh fetch, which replaces it for every later caller.
    """

    def __init__(self):
        self._pending: Dict[Hashable, "asyncio.Future[Any]"] = {}

    def in_flight(self, key: Hashable) -> bool:
        return key in self._pending

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[T]], force: bool = False) -> T:
        task = self._pending.get(key)
        if task is None or force:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug(f"Joining in-flight request {key}")
        # shield: one caller being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)

    def _forget(self, key: Hashable, task: "asyncio.Future[Any]") -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Every caller may have been cancelled; consume the outcome so it is never orphaned
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Request {key} failed: {task.exception()}")


class LatestResults:
    """
    Last-write-wins bookkeeping: each request gets a sequence number at issue
    time; publishing an older result after a newer one returns the newer one.
    A key is forgotten once no request for it is outstanding.
    """

    def __init__(self):
        self._issued: Dict[Hashable, int] = defaultdict(int)
        self._outstanding: Dict[Hashable, int] = defaultdict(int)
        self._published: Dict[Hashable, Tuple[int, Any]] = {}

    def issue(self, key: Hashable) -> int:
        self._issued[key] += 1
        self._outstanding[key] += 1
        return self._issued[key]

    def publish(self, key: Hashable, seq: int, result: T) -> T:
        current = self._published.get(key)
        if current is not None and current[0] > seq:
            logger.debug(f"Discarding stale result #{seq} for {key} (newer #{current[0]} already published)")
            return current[1]
        self._published[key] = (seq, result)
        return result

    def release(self, key: Hashable) -> None:
        """Mark one issued request as finished (published, failed or cancelled)."""
        self._outstanding[key] -= 1
        if self._outstanding[key] <= 0:
            self._outstanding.pop(key, None)
            self._issued.pop(key, None)
            self._published.pop(key, None)

    def tracked_keys(self) -> int:
        return len(self._issued) + len(self._published)


class ReadinessService:
    """
    Assembles snapshots from a RecordSource and runs the engine over them.
    """

    def __init__(
        self,
        source: RecordSource,
        settings: Optional[EngineSettings] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.source = source
        self.settings = settings or DEFAULT_SETTINGS
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._inflight = InFlightRequests()
        self._latest = LatestResults()

    def today(self) -> date_type:
        return local_today(self.clock(), self.settings.timezone)

    # --- Public API ---

    async def load_snapshot(
        self,
        worker_id: str,
        start: date_type,
        end: date_type,
        force: bool = False
    ) -> WorkerSnapshot:
        """
        Coalesced, last-write-wins snapshot fetch for [start, end].
        `force` starts a fresh fetch even when one is in flight (e.g. right
        after a check-in was submitted); the older fetch can no longer win.
        """
        key = (worker_id, start, end)
        seq = self._latest.issue(key)
        try:
            snapshot = await self._inflight.run(
                key, lambda: self._fetch_snapshot(worker_id, start, end), force=force
            )
            return self._latest.publish(key, seq, snapshot)
        finally:
            self._latest.release(key)

    async def engine_for(self, worker_id: str, start: date_type, end: date_type) -> ReadinessEngine:
        snapshot = await self.load_snapshot(worker_id, start, end)
        return ReadinessEngine(snapshot, self.settings)

    async def evaluate_day(self, worker_id: str, day: Optional[date_type] = None) -> DayObligation:
        day = day or self.today()
        engine = await self.engine_for(worker_id, day, day)
        return engine.evaluate_day(worker_id, day)

    async def compute_streak(
        self,
        worker_id: str,
        as_of: Optional[date_type] = None,
        since: Optional[date_type] = None
    ) -> StreakState:
        """
        Streak over a bounded history: `since`, or the default lookback.
        The fetch range also covers the lookahead used for upcoming shifts.
        """
        as_of = as_of or self.today()
        since = since or as_of - timedelta(days=self.settings.default_lookback_days)
        end = as_of + timedelta(days=self.settings.schedule_lookahead_days)
        engine = await self.engine_for(worker_id, since, end)
        return engine.compute_streak(worker_id, as_of, since=since)

    async def plan_progress(self, worker_id: str) -> Optional[PlanProgress]:
        now = self.clock()
        today = local_today(now, self.settings.timezone)
        raw_plan = await self._call("active_rehab_plan", worker_id, self.source.fetch_active_rehab_plan(worker_id))
        if raw_plan is None:
            return None
        plan = _coerce(RehabilitationPlan, raw_plan, "active_rehab_plan", worker_id)
        validate_plan(plan, self.settings)

        # Progress needs every completion from day 1 through today
        end = min(max(today, plan.start_date), plan.end_date)
        engine = await self.engine_for(worker_id, plan.start_date, end)
        return engine.compute_plan_progress(now)

    # --- Snapshot Assembly ---

    async def _fetch_snapshot(self, worker_id: str, start: date_type, end: date_type) -> WorkerSnapshot:
        logger.info(f"Fetching records for {worker_id} ({start.isoformat()} .. {end.isoformat()})")
        src = self.source

        raw_entries, raw_recurring, raw_exceptions, raw_check_ins, raw_plan = await _gather_all(
            self._call("schedule", worker_id, src.fetch_schedule(worker_id, start, end)),
            self._call("recurring_schedules", worker_id, src.fetch_recurring_schedules(worker_id)),
            self._call("exceptions", worker_id, src.fetch_exceptions(worker_id, start, end)),
            self._call("check_ins", worker_id, src.fetch_check_ins(worker_id, start, end)),
            self._call("active_rehab_plan", worker_id, src.fetch_active_rehab_plan(worker_id)),
        )

        plan = None
        if raw_plan is not None:
            plan = _coerce(RehabilitationPlan, raw_plan, "active_rehab_plan", worker_id)

        completions: List[ExerciseCompletionRecord] = []
        if plan is not None:
            # Only the plan days inside the requested range
            days = list(date_range(max(plan.start_date, start), min(plan.end_date, end)))
            per_day = await _gather_all(*(
                self._call("exercise_completions", worker_id, src.fetch_exercise_completions(plan.id, day))
                for day in days
            ))
            for day, exercise_ids in zip(days, per_day):
                if exercise_ids is None:
                    raise DataUnavailableError("exercise_completions", worker_id, f"no payload for {day.isoformat()}")
                completions.extend(
                    ExerciseCompletionRecord(plan_id=plan.id, date=day, exercise_id=str(exercise_id))
                    for exercise_id in exercise_ids
                )

        return WorkerSnapshot(
            worker_id=worker_id,
            schedule_entries=_coerce_list(WorkerScheduleEntry, raw_entries, "schedule", worker_id),
            recurring_schedules=_coerce_list(RecurringSchedule, raw_recurring, "recurring_schedules", worker_id),
            exceptions=_coerce_list(ExceptionRecord, raw_exceptions, "exceptions", worker_id),
            check_ins=_coerce_list(CheckInRecord, raw_check_ins, "check_ins", worker_id),
            rehab_plan=plan,
            completions=completions,
            range_start=start,
            range_end=end,
            fetched_at=self.clock(),
        )

    async def _call(self, operation: str, worker_id: str, pending: Awaitable[T]) -> T:
        try:
            return await pending
        except ReadinessError:
            raise
        except Exception as e:
            logger.error(f"❌ {operation} fetch failed for {worker_id}: {e}")
            raise DataUnavailableError(operation, worker_id, str(e)) from e


async def _gather_all(*calls: Awaitable[Any]) -> List[Any]:
    """
    Await every call before surfacing the first failure, so no sibling fetch
    is left running after the snapshot has already failed.
    """
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def _coerce(model: Type[M], item: Any, operation: str, worker_id: str) -> M:
    """Accept model instances or raw dicts; anything malformed is unavailable data."""
    if isinstance(item, model):
        return item
    try:
        return model.model_validate(item)
    except ValidationError as e:
        raise DataUnavailableError(operation, worker_id, f"malformed {model.__name__}: {e}") from e


def _coerce_list(model: Type[M], items: Any, operation: str, worker_id: str) -> List[M]:
    if items is None:
        # An empty list means "no records"; a missing payload means "unknown"
        raise DataUnavailableError(operation, worker_id, "no payload returned")
    return [_coerce(model, item, operation, worker_id) for item in items]
