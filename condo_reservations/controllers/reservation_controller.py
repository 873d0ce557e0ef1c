"""HTTP controller layer for space availability and reservations."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from condo_reservations.controllers.dependencies import get_reservation_service
from condo_reservations.domain.models import (
    WEEKDAY_NAMES,
    DayUnavailableReason,
    RejectionReason,
    ReservationRecord,
    ReservationStatus,
    day_of_week,
)
from condo_reservations.repository.data_repository import SlotTakenError
from condo_reservations.services.reservation_service import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ReservationNotFoundError,
    ReservationRejectedError,
    ReservationService,
    ReservationStateError,
    SpaceNotFoundError,
)
from condo_reservations.services.schedule_service import ScheduleConfigurationError
from condo_reservations.services.timezone_service import MalformedDateTimeError
from condo_reservations.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["reservations"])

SLOT_TAKEN = "SLOT_TAKEN"
INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"


class SpaceResponse(BaseModel):
    space_id: int = Field(gt=0)
    name: str
    space_type: str
    space_type_label: str
    requires_approval: bool


class SpaceListResponse(BaseModel):
    spaces: list[SpaceResponse]


class DayAvailabilityResponse(BaseModel):
    space_id: int = Field(gt=0)
    date: date
    weekday: int = Field(ge=0, le=6)
    weekday_name: str
    bookable: bool
    reason: Optional[DayUnavailableReason] = None


class SlotResponse(BaseModel):
    time: str
    occupied: bool
    past: bool


class SlotsResponse(BaseModel):
    space_id: int = Field(gt=0)
    date: date
    slots: list[SlotResponse]


class CalendarDayResponse(BaseModel):
    date: date
    weekday: int = Field(ge=0, le=6)
    bookable: bool
    reason: Optional[DayUnavailableReason] = None
    is_today: bool


class CalendarResponse(BaseModel):
    space_id: int = Field(gt=0)
    year: int
    month: int = Field(ge=1, le=12)
    leading_blanks: int = Field(ge=0, le=6)
    days: list[CalendarDayResponse]


class ReservationPayload(BaseModel):
    """Wall-clock inputs exactly as picked, ``YYYY-MM-DDTHH:MM``."""

    space_id: int = Field(gt=0)
    start: str = Field(min_length=1)
    end: str = Field(min_length=1)
    unit_id: Optional[str] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class ValidationResponse(BaseModel):
    accepted: bool
    reason: Optional[RejectionReason] = None
    message: str = ""


class ReservationResponse(BaseModel):
    reservation_id: int = Field(gt=0)
    space_id: int = Field(gt=0)
    status: str
    reservation_date: date
    start: str
    end: str
    unit_id: Optional[str] = None
    reason: Optional[str] = None


class ReservationListResponse(BaseModel):
    reservations: list[ReservationResponse]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total_pages: int = Field(ge=0)


def _reservation_response(record: ReservationRecord) -> ReservationResponse:
    return ReservationResponse(
        reservation_id=record.reservation_id,
        space_id=record.space_id,
        status=record.status.value,
        reservation_date=record.start.date(),
        start=record.start_instant,
        end=record.end_instant,
        unit_id=record.unit_id,
        reason=record.reason,
    )


def _rejection_detail(reason: str, message: str) -> dict[str, str]:
    return {"reason": reason, "message": message}


@router.get("/spaces", response_model=SpaceListResponse, status_code=status.HTTP_200_OK)
async def list_spaces(
    service: ReservationService = Depends(get_reservation_service),
) -> SpaceListResponse:
    return SpaceListResponse(
        spaces=[
            SpaceResponse(
                space_id=space.space_id,
                name=space.name,
                space_type=space.space_type.value,
                space_type_label=space.space_type.label,
                requires_approval=space.requires_approval,
            )
            for space in service.list_spaces()
        ]
    )


@router.get(
    "/spaces/{space_id}/availability",
    response_model=DayAvailabilityResponse,
    status_code=status.HTTP_200_OK,
)
async def day_availability(
    space_id: int,
    target_date: date = Query(alias="date"),
    service: ReservationService = Depends(get_reservation_service),
) -> DayAvailabilityResponse:
    try:
        snapshot = service.snapshot(space_id, target_date, target_date)
        reason = snapshot.calendar.unavailable_reason(target_date)
        return DayAvailabilityResponse(
            space_id=space_id,
            date=target_date,
            weekday=day_of_week(target_date),
            weekday_name=WEEKDAY_NAMES[day_of_week(target_date)],
            bookable=reason is None,
            reason=reason,
        )
    except SpaceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ScheduleConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_rejection_detail(RejectionReason.CONFIGURATION_ERROR.value, str(exc)),
        ) from exc


@router.get(
    "/spaces/{space_id}/slots",
    response_model=SlotsResponse,
    status_code=status.HTTP_200_OK,
)
async def day_slots(
    space_id: int,
    target_date: date = Query(alias="date"),
    service: ReservationService = Depends(get_reservation_service),
) -> SlotsResponse:
    try:
        slots = service.compute_slots(space_id, target_date)
        return SlotsResponse(
            space_id=space_id,
            date=target_date,
            slots=[
                SlotResponse(time=slot.label, occupied=slot.occupied, past=slot.past)
                for slot in slots
            ],
        )
    except SpaceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ScheduleConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_rejection_detail(RejectionReason.CONFIGURATION_ERROR.value, str(exc)),
        ) from exc


@router.get(
    "/spaces/{space_id}/calendar",
    response_model=CalendarResponse,
    status_code=status.HTTP_200_OK,
)
async def month_calendar(
    space_id: int,
    year: int = Query(ge=1, le=9999),
    month: int = Query(ge=1, le=12),
    service: ReservationService = Depends(get_reservation_service),
) -> CalendarResponse:
    try:
        grid = service.compute_month(space_id, year, month)
        return CalendarResponse(
            space_id=space_id,
            year=grid.year,
            month=grid.month,
            leading_blanks=grid.leading_blanks,
            days=[
                CalendarDayResponse(
                    date=day.date,
                    weekday=day.weekday,
                    bookable=day.bookable,
                    reason=day.reason,
                    is_today=day.is_today,
                )
                for day in grid.days
            ],
        )
    except SpaceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ScheduleConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_rejection_detail(RejectionReason.CONFIGURATION_ERROR.value, str(exc)),
        ) from exc


@router.post(
    "/reservations/validate",
    response_model=ValidationResponse,
    status_code=status.HTTP_200_OK,
)
async def validate_reservation(
    payload: ReservationPayload,
    service: ReservationService = Depends(get_reservation_service),
) -> ValidationResponse:
    """Advisory check; the commit endpoint re-checks inside its transaction."""
    try:
        request = service.build_request(
            space_id=payload.space_id,
            start=payload.start,
            end=payload.end,
            unit_id=payload.unit_id,
            reason=payload.reason,
        )
    except MalformedDateTimeError as exc:
        return ValidationResponse(
            accepted=False,
            reason=RejectionReason.MALFORMED_DATE_TIME,
            message=str(exc),
        )
    try:
        result = service.validate_reservation(request)
    except SpaceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ValidationResponse(
        accepted=result.accepted,
        reason=result.reason,
        message=result.message,
    )


@router.post(
    "/reservations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservation(
    payload: ReservationPayload,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponse:
    try:
        request = service.build_request(
            space_id=payload.space_id,
            start=payload.start,
            end=payload.end,
            unit_id=payload.unit_id,
            reason=payload.reason,
        )
        record = service.create_reservation(request)
        return _reservation_response(record)
    except MalformedDateTimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_rejection_detail(RejectionReason.MALFORMED_DATE_TIME.value, str(exc)),
        ) from exc
    except ReservationRejectedError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_rejection_detail(exc.result.reason.value, exc.result.message),
        ) from exc
    except SlotTakenError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_rejection_detail(SLOT_TAKEN, str(exc)),
        ) from exc
    except SpaceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected reservation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create reservation",
        ) from exc


@router.get(
    "/reservations",
    response_model=ReservationListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_reservations(
    space_id: Optional[int] = Query(default=None, gt=0),
    reservation_status: Optional[ReservationStatus] = Query(default=None, alias="status"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    unit_id: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationListResponse:
    try:
        result = service.list_reservations(
            space_id=space_id,
            status=reservation_status,
            start_date=date_from,
            end_date=date_to,
            unit_id=unit_id,
            page=page,
            limit=limit,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return ReservationListResponse(
        reservations=[_reservation_response(record) for record in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get(
    "/reservations/{reservation_id}",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
)
async def get_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponse:
    try:
        return _reservation_response(service.get_reservation(reservation_id))
    except ReservationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _apply_transition(action, reservation_id: int) -> ReservationResponse:
    try:
        return _reservation_response(action(reservation_id))
    except ReservationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ReservationStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_rejection_detail(INVALID_STATUS_TRANSITION, str(exc)),
        ) from exc
    except SlotTakenError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_rejection_detail(SLOT_TAKEN, str(exc)),
        ) from exc


@router.post(
    "/reservations/{reservation_id}/approve",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
)
async def approve_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponse:
    return _apply_transition(service.approve_reservation, reservation_id)


@router.post(
    "/reservations/{reservation_id}/reject",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
)
async def reject_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponse:
    return _apply_transition(service.reject_reservation, reservation_id)


@router.post(
    "/reservations/{reservation_id}/cancel",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
)
async def cancel_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponse:
    return _apply_transition(service.cancel_reservation, reservation_id)
