"""Availability and reservation orchestration over the booking store."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Optional

from condo_reservations.domain.constraints import EngineConfig, validate_engine_config
from condo_reservations.domain.models import (
    CommonSpace,
    MonthCalendar,
    RejectionReason,
    ReservationPage,
    ReservationRecord,
    ReservationRequest,
    ReservationStatus,
    Slot,
    ValidationResult,
)
from condo_reservations.repository.data_repository import DataRepository, SlotTakenError
from condo_reservations.services.calendar_service import CalendarAvailabilityComputer
from condo_reservations.services.occupancy_service import OccupancyIndex
from condo_reservations.services.schedule_service import (
    ScheduleConfigurationError,
    ScheduleResolver,
)
from condo_reservations.services.slot_service import SlotGenerator
from condo_reservations.services.timezone_service import TimezoneNormalizer, parse_wall_clock
from condo_reservations.services.validation_service import ReservationValidator
from condo_reservations.utils.clock import Clock, SystemClock
from condo_reservations.utils.config import Settings, get_settings
from condo_reservations.utils.logger import get_logger


logger = get_logger(__name__)

APPROVABLE_STATUSES = (ReservationStatus.PENDING,)
CANCELLABLE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ReservationServiceError(Exception):
    """Base exception for reservation workflow failures."""


class SpaceNotFoundError(ReservationServiceError):
    """Raised when a space id does not exist or is inactive."""


class ReservationNotFoundError(ReservationServiceError):
    """Raised when a reservation id does not exist."""


class ReservationStateError(ReservationServiceError):
    """Raised when a reservation's current status does not allow the change."""

    def __init__(
        self,
        reservation_id: int,
        current: ReservationStatus,
        target: ReservationStatus,
    ) -> None:
        super().__init__(
            f"Reservation {reservation_id} is {current.value} and cannot become {target.value}"
        )
        self.reservation_id = reservation_id
        self.current = current
        self.target = target


class ReservationRejectedError(ReservationServiceError):
    """Raised when a request fails validation before commit."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.message)
        self.result = result


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """Engine components bound to one fetch of schedule and occupancy."""

    space: CommonSpace
    resolver: ScheduleResolver
    occupancy: OccupancyIndex
    slot_generator: SlotGenerator
    calendar: CalendarAvailabilityComputer
    validator: ReservationValidator


class ReservationService:
    """Exposes day availability, slots, month grids, validation and commit."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        normalizer: Optional[TimezoneNormalizer] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._clock = clock or SystemClock(self._settings.timezone_name)
        self._normalizer = normalizer or TimezoneNormalizer()
        self._config = EngineConfig(
            slot_granularity_minutes=self._settings.slot_granularity_minutes,
            inclusive_overlap_boundaries=self._settings.inclusive_overlap_boundaries,
            blocking_statuses=tuple(self._settings.blocking_statuses),
        )
        validate_engine_config(self._config)

    @property
    def clock(self) -> Clock:
        return self._clock

    def list_spaces(self) -> list[CommonSpace]:
        return [record.space for record in self._repository.list_spaces(active_only=True)]

    def snapshot(self, space_id: int, start_date: date, end_date: date) -> AvailabilitySnapshot:
        """Fetch schedule and occupancy fresh and wire the engine around them."""
        record = self._repository.get_space(space_id)
        if record is None or not record.space.active:
            raise SpaceNotFoundError(f"Common space {space_id} was not found")

        schedule = self._repository.get_weekly_schedule(space_id)
        if schedule is None:
            raise SpaceNotFoundError(f"Common space {space_id} was not found")
        resolver = ScheduleResolver(schedule)
        occupancy = OccupancyIndex.from_mapping(
            self._repository.get_occupied_ranges(space_id, start_date, end_date)
        )
        slot_generator = SlotGenerator(
            resolver,
            occupancy,
            self._clock,
            granularity_minutes=self._config.slot_granularity_minutes,
            inclusive_boundaries=self._config.inclusive_overlap_boundaries,
        )
        return AvailabilitySnapshot(
            space=record.space,
            resolver=resolver,
            occupancy=occupancy,
            slot_generator=slot_generator,
            calendar=CalendarAvailabilityComputer(resolver, slot_generator, self._clock),
            validator=ReservationValidator(
                resolver,
                occupancy,
                self._clock,
                inclusive_boundaries=self._config.inclusive_overlap_boundaries,
            ),
        )

    def compute_day_availability(self, space_id: int, target_date: date) -> bool:
        return self.snapshot(space_id, target_date, target_date).calendar.day_is_bookable(
            target_date
        )

    def compute_slots(self, space_id: int, target_date: date) -> list[Slot]:
        return self.snapshot(space_id, target_date, target_date).slot_generator.slots(
            target_date
        )

    def compute_month(self, space_id: int, year: int, month: int) -> MonthCalendar:
        if not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")
        _, days_in_month = calendar.monthrange(year, month)
        first_day = date(year, month, 1)
        last_day = date(year, month, days_in_month)
        return self.snapshot(space_id, first_day, last_day).calendar.month(year, month)

    def build_request(
        self,
        *,
        space_id: int,
        start: str,
        end: str,
        unit_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> ReservationRequest:
        """Parse wall-clock inputs; raises ``MalformedDateTimeError``."""
        return ReservationRequest(
            space_id=space_id,
            start=parse_wall_clock(start),
            end=parse_wall_clock(end),
            unit_id=unit_id,
            reason=reason,
        )

    def validate_reservation(self, request: ReservationRequest) -> ValidationResult:
        try:
            snapshot = self.snapshot(request.space_id, request.start.date(), request.end.date())
        except ScheduleConfigurationError as exc:
            logger.warning(
                "Schedule misconfigured | space_id=%s | detail=%s",
                request.space_id,
                exc,
            )
            return ValidationResult.reject(RejectionReason.CONFIGURATION_ERROR, str(exc))
        return snapshot.validator.validate(request)

    def create_reservation(self, request: ReservationRequest) -> ReservationRecord:
        """Validate, then commit through the store's own transactional check."""
        result = self.validate_reservation(request)
        if not result.accepted:
            raise ReservationRejectedError(result)

        record = self._repository.get_space(request.space_id)
        if record is None:
            raise SpaceNotFoundError(f"Common space {request.space_id} was not found")
        status = (
            ReservationStatus.PENDING
            if record.space.requires_approval
            else ReservationStatus.CONFIRMED
        )
        zone = self._settings.timezone_name
        try:
            return self._repository.commit_reservation(
                request,
                status=status,
                start_instant=self._normalizer.normalize_datetime(request.start, zone),
                end_instant=self._normalizer.normalize_datetime(request.end, zone),
            )
        except SlotTakenError:
            logger.warning(
                "Commit-time overlap detected | space_id=%s | date=%s",
                request.space_id,
                request.date.isoformat(),
            )
            raise

    def get_reservation(self, reservation_id: int) -> ReservationRecord:
        record = self._repository.get_reservation(reservation_id)
        if record is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} was not found")
        return record

    def list_reservations(
        self,
        *,
        space_id: Optional[int] = None,
        status: Optional[ReservationStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        unit_id: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ReservationPage:
        """Filtered, paginated history ordered by date and start time."""
        if page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValueError("start_date must not be after end_date")

        items, total = self._repository.list_reservations(
            space_id=space_id,
            statuses=(status,) if status is not None else (),
            start_date=start_date,
            end_date=end_date,
            unit_id=unit_id,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return ReservationPage(items=items, total=total, page=page, limit=limit)

    def _transition(
        self,
        reservation_id: int,
        target: ReservationStatus,
        allowed_from: tuple[ReservationStatus, ...],
        recheck_overlap: bool = False,
    ) -> ReservationRecord:
        previous = self._repository.transition_reservation_status(
            reservation_id,
            target,
            from_statuses=allowed_from,
            recheck_overlap=recheck_overlap,
        )
        if previous is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} was not found")
        if previous not in allowed_from:
            logger.warning(
                "Status transition refused | reservation_id=%s | current=%s | target=%s",
                reservation_id,
                previous.value,
                target.value,
            )
            raise ReservationStateError(reservation_id, previous, target)
        return self.get_reservation(reservation_id)

    def approve_reservation(self, reservation_id: int) -> ReservationRecord:
        """Confirm a pending reservation, re-checking overlaps at commit."""
        return self._transition(
            reservation_id,
            ReservationStatus.CONFIRMED,
            APPROVABLE_STATUSES,
            recheck_overlap=True,
        )

    def reject_reservation(self, reservation_id: int) -> ReservationRecord:
        return self._transition(reservation_id, ReservationStatus.CANCELLED, APPROVABLE_STATUSES)

    def cancel_reservation(self, reservation_id: int) -> ReservationRecord:
        return self._transition(reservation_id, ReservationStatus.CANCELLED, CANCELLABLE_STATUSES)
