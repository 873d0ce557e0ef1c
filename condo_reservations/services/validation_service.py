"""End-to-end acceptance check for a single reservation request."""

from __future__ import annotations

from condo_reservations.domain.models import (
    RejectionReason,
    ReservationRequest,
    ValidationResult,
    day_of_week,
)
from condo_reservations.services.occupancy_service import OccupancyIndex
from condo_reservations.services.schedule_service import ScheduleResolver
from condo_reservations.utils.clock import Clock, minute_of_day
from condo_reservations.utils.logger import get_logger


logger = get_logger(__name__)


class ReservationValidator:
    """Pure predicate over one request and an immutable schedule/occupancy snapshot.

    Checks run in a fixed order and stop at the first failure, so the caller
    always sees the most basic problem first.
    """

    def __init__(
        self,
        resolver: ScheduleResolver,
        occupancy: OccupancyIndex,
        clock: Clock,
        *,
        inclusive_boundaries: bool = True,
    ) -> None:
        self._resolver = resolver
        self._occupancy = occupancy
        self._clock = clock
        self._inclusive = inclusive_boundaries

    def validate(self, request: ReservationRequest) -> ValidationResult:
        result = self._evaluate(request)
        logger.debug(
            "Reservation validated | space_id=%s | start=%s | end=%s | accepted=%s | reason=%s",
            request.space_id,
            request.start.isoformat(),
            request.end.isoformat(),
            result.accepted,
            result.reason.value if result.reason else None,
        )
        return result

    def _evaluate(self, request: ReservationRequest) -> ValidationResult:
        start, end = request.start, request.end
        if end <= start:
            return ValidationResult.reject(RejectionReason.INVALID_RANGE)

        if start.date() != end.date():
            return ValidationResult.reject(RejectionReason.MULTI_DAY_NOT_SUPPORTED)

        window = self._resolver.resolve(day_of_week(start.date()))
        if window is None:
            return ValidationResult.reject(RejectionReason.DAY_NOT_AVAILABLE)

        if not window.contains(start.time()) or not window.contains(end.time()):
            return ValidationResult.reject(
                RejectionReason.OUTSIDE_OPERATING_HOURS,
                (
                    f"The space is open from {window.open_time:%H:%M} "
                    f"to {window.close_time:%H:%M} on that day"
                ),
            )

        conflicts = self._occupancy.conflicts(
            start.date(),
            start.time(),
            end.time(),
            inclusive=self._inclusive,
        )
        if conflicts:
            first = conflicts[0]
            return ValidationResult.reject(
                RejectionReason.SLOT_OCCUPIED,
                (
                    "The selected hours overlap an existing reservation "
                    f"from {first.start_time:%H:%M} to {first.end_time:%H:%M}"
                ),
            )

        now = self._clock.now()
        if start.date() == now.date() and minute_of_day(start) < minute_of_day(now):
            return ValidationResult.reject(RejectionReason.PAST_TIME)

        return ValidationResult.accept()
