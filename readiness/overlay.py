"""
Exception Overlay.

Context modifier that suspends the standard check-in obligation while a worker
is injured, on leave, transferred, etc.

Precedence policy: when several exceptions cover the same day, the one with the
latest start date wins (the most recent decision about the worker). Records with
equal start dates keep their input order. This is a product policy, not a law of
the data; see DESIGN.md.
"""

import logging
from datetime import date as date_type
from typing import List, Optional, Dict, Iterable, Set, Tuple
from collections import defaultdict

from models import ExceptionRecord
from .errors import InvalidExceptionRangeError

logger = logging.getLogger(__name__)


class ExceptionOverlay:
    """
    Selects the exception, if any, that governs a worker's day.
    """

    def __init__(self, exceptions: List[ExceptionRecord]):
        self.exceptions: Dict[str, List[ExceptionRecord]] = defaultdict(list)
        for record in exceptions:
            self.exceptions[record.worker_id].append(record)

    def covering(self, worker_id: str, day: date_type) -> List[ExceptionRecord]:
        """All exceptions of the worker covering `day`, in input order."""
        records = self.exceptions.get(worker_id, [])
        self._validate(worker_id, records)
        return [r for r in records if r.covers(day)]

    def active_exception_for(self, worker_id: str, day: date_type) -> Optional[ExceptionRecord]:
        """The exception governing `day`, or None."""
        candidates = self.covering(worker_id, day)
        if not candidates:
            return None

        # max() keeps the first of equal keys, so ties resolve to input order
        winner = max(candidates, key=lambda r: r.start_date)
        if len(candidates) > 1:
            logger.warning(
                f"{len(candidates)} overlapping exceptions for {worker_id} on {day.isoformat()}; "
                f"using {winner.id or winner.exception_type.value} (latest start {winner.start_date.isoformat()})"
            )
        return winner

    def effective_range(self, worker_id: str, day: date_type) -> Optional[Tuple[date_type, Optional[date_type]]]:
        """(start, end) of the governing exception; end None means open-ended."""
        winner = self.active_exception_for(worker_id, day)
        if winner is None:
            return None
        return winner.start_date, winner.end_date

    def excepted_dates(self, worker_id: str, days: Iterable[date_type]) -> Set[date_type]:
        """Subset of `days` on which some exception is in force."""
        return {day for day in days if self.covering(worker_id, day)}

    def _validate(self, worker_id: str, records: List[ExceptionRecord]) -> None:
        for record in records:
            if not record.has_valid_range:
                raise InvalidExceptionRangeError(worker_id, record.id, record.start_date, record.end_date)
