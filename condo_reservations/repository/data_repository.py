"""Repository layer responsible for all booking-store access."""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable, List, Optional

from condo_reservations.domain.models import (
    CommonSpace,
    OccupiedRange,
    ReservationRecord,
    ReservationRequest,
    ReservationStatus,
    SpaceType,
    WeeklyAvailabilityRule,
    WeeklySchedule,
    format_wall_time,
    parse_wall_time,
)
from condo_reservations.services.occupancy_service import ranges_overlap
from condo_reservations.services.schedule_service import (
    parse_schedule_payload,
    serialize_schedule_rules,
)
from condo_reservations.utils.config import Settings, get_settings
from condo_reservations.utils.logger import get_logger


logger = get_logger(__name__)

_RESERVATION_COLUMNS = (
    "id, space_id, unit_id, reservation_date, start_time, end_time, "
    "start_instant, end_instant, status, reason"
)


class SlotTakenError(Exception):
    """Raised when a commit finds an overlapping reservation inside its transaction."""

    def __init__(self, conflicting_reservation_id: int) -> None:
        super().__init__("Someone else just booked this slot")
        self.conflicting_reservation_id = conflicting_reservation_id


@dataclass(frozen=True)
class SpaceRecord:
    """Space projection including its stored schedule."""

    space: CommonSpace
    schedule_json: Optional[str]
    blocked_weekdays: frozenset[int]


def _encode_weekdays(weekdays: Iterable[int]) -> str:
    return ",".join(str(day) for day in sorted(set(weekdays)))


def _decode_weekdays(raw: Optional[str]) -> frozenset[int]:
    if not raw:
        return frozenset()
    return frozenset(int(item) for item in raw.split(",") if item.strip())


class DataRepository:
    """Encapsulates SQLite access so the engine stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS CommonSpaces (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        space_type TEXT NOT NULL,
                        requires_approval INTEGER NOT NULL DEFAULT 1
                            CHECK (requires_approval IN (0,1)),
                        active INTEGER NOT NULL DEFAULT 1 CHECK (active IN (0,1)),
                        schedule_json TEXT,
                        blocked_weekdays TEXT NOT NULL DEFAULT '',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Reservations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        space_id INTEGER NOT NULL,
                        unit_id TEXT,
                        reservation_date TEXT NOT NULL,
                        start_time TEXT NOT NULL,
                        end_time TEXT NOT NULL,
                        start_instant TEXT NOT NULL,
                        end_instant TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'PENDING',
                        reason TEXT,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        CHECK (start_time < end_time),
                        FOREIGN KEY (space_id) REFERENCES CommonSpaces(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_space_date_status
                    ON Reservations(space_id, reservation_date, status);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_spaces_if_empty(self) -> int:
        """Insert demo spaces only when no space exists; return rows inserted."""
        weekdays = range(1, 6)
        demo_spaces = [
            (
                "Salon Social Torre A",
                SpaceType.SALON_SOCIAL,
                True,
                [WeeklyAvailabilityRule(day, time(8, 0), time(22, 0)) for day in range(7)],
                {1},
            ),
            (
                "Zona BBQ",
                SpaceType.ZONA_BBQ,
                False,
                [WeeklyAvailabilityRule(day, time(10, 0), time(20, 0)) for day in (0, 5, 6)],
                set(),
            ),
            (
                "Gimnasio",
                SpaceType.GIMNASIO,
                False,
                [WeeklyAvailabilityRule(day, time(5, 30), time(21, 0)) for day in weekdays],
                set(),
            ),
            (
                "Cancha Multiple",
                SpaceType.CANCHA_DEPORTIVA,
                False,
                [WeeklyAvailabilityRule(day, time(7, 0), time(19, 0)) for day in range(7)],
                {0},
            ),
        ]
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) AS count FROM CommonSpaces;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Common spaces already present; skipping demo seed")
                    return 0

                cursor.executemany(
                    """
                    INSERT INTO CommonSpaces (
                        name,
                        space_type,
                        requires_approval,
                        schedule_json,
                        blocked_weekdays
                    )
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    [
                        (
                            name,
                            space_type.value,
                            int(requires_approval),
                            serialize_schedule_rules(rules),
                            _encode_weekdays(blocked),
                        )
                        for name, space_type, requires_approval, rules, blocked in demo_spaces
                    ],
                )
                conn.commit()
            logger.info("Demo seed completed with %s spaces", len(demo_spaces))
            return len(demo_spaces)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc

    def create_space(
        self,
        name: str,
        space_type: SpaceType,
        rules: Iterable[WeeklyAvailabilityRule] = (),
        blocked_weekdays: Iterable[int] = (),
        requires_approval: bool = True,
        active: bool = True,
        schedule_json: Optional[str] = None,
    ) -> int:
        """Insert a space and return the created id.

        ``schedule_json`` stores a raw payload as-is and takes precedence over
        ``rules``; it is how legacy or hand-edited schedules reach the store.
        """
        payload = schedule_json if schedule_json is not None else serialize_schedule_rules(rules)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO CommonSpaces (
                    name,
                    space_type,
                    requires_approval,
                    active,
                    schedule_json,
                    blocked_weekdays
                )
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    name,
                    space_type.value,
                    int(requires_approval),
                    int(active),
                    payload,
                    _encode_weekdays(blocked_weekdays),
                ),
            )
            conn.commit()
            return int(cursor.lastrowid)

    def _row_to_space_record(self, row: sqlite3.Row) -> SpaceRecord:
        return SpaceRecord(
            space=CommonSpace(
                space_id=int(row["id"]),
                name=str(row["name"]),
                space_type=SpaceType(str(row["space_type"])),
                requires_approval=bool(row["requires_approval"]),
                active=bool(row["active"]),
            ),
            schedule_json=row["schedule_json"],
            blocked_weekdays=_decode_weekdays(row["blocked_weekdays"]),
        )

    def get_space(self, space_id: int) -> Optional[SpaceRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, name, space_type, requires_approval, active,
                       schedule_json, blocked_weekdays
                FROM CommonSpaces
                WHERE id = ?;
                """,
                (space_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_space_record(row)

    def list_spaces(self, active_only: bool = True) -> List[SpaceRecord]:
        query = """
            SELECT id, name, space_type, requires_approval, active,
                   schedule_json, blocked_weekdays
            FROM CommonSpaces
        """
        if active_only:
            query += " WHERE active = 1"
        query += " ORDER BY id ASC;"
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(query)
            return [self._row_to_space_record(row) for row in cursor.fetchall()]

    def get_weekly_schedule(self, space_id: int) -> Optional[WeeklySchedule]:
        """Return the space's weekly rules and blocked weekdays, unvalidated."""
        record = self.get_space(space_id)
        if record is None:
            return None
        return parse_schedule_payload(record.schedule_json, record.blocked_weekdays)

    def get_occupied_ranges(
        self,
        space_id: int,
        start_date: date,
        end_date: date,
    ) -> dict[date, list[OccupiedRange]]:
        """Return blocking reservations grouped by date, inclusive date bounds."""
        statuses = tuple(self._settings.blocking_statuses)
        if not statuses:
            return {}
        placeholders = ",".join("?" for _ in statuses)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT reservation_date, start_time, end_time
                FROM Reservations
                WHERE space_id = ?
                  AND reservation_date >= ?
                  AND reservation_date <= ?
                  AND status IN ({placeholders})
                ORDER BY reservation_date ASC, start_time ASC;
                """,
                (space_id, start_date.isoformat(), end_date.isoformat(), *statuses),
            )
            ranges_by_date: dict[date, list[OccupiedRange]] = defaultdict(list)
            for row in cursor.fetchall():
                reserved_on = date.fromisoformat(str(row["reservation_date"]))
                ranges_by_date[reserved_on].append(
                    OccupiedRange(
                        date=reserved_on,
                        start_time=parse_wall_time(str(row["start_time"])),
                        end_time=parse_wall_time(str(row["end_time"])),
                    )
                )
            return dict(ranges_by_date)

    def _find_overlap(
        self,
        cursor: sqlite3.Cursor,
        space_id: int,
        reservation_date: str,
        start_time: time,
        end_time: time,
        exclude_id: Optional[int] = None,
    ) -> Optional[int]:
        """Return the id of a blocking reservation overlapping the range, if any."""
        statuses = tuple(self._settings.blocking_statuses)
        if not statuses:
            return None
        placeholders = ",".join("?" for _ in statuses)
        cursor.execute(
            f"""
            SELECT id, start_time, end_time
            FROM Reservations
            WHERE space_id = ?
              AND reservation_date = ?
              AND status IN ({placeholders})
              AND id != ?
            ORDER BY start_time ASC;
            """,
            (space_id, reservation_date, *statuses, exclude_id if exclude_id is not None else -1),
        )
        for row in cursor.fetchall():
            if ranges_overlap(
                start_time,
                end_time,
                parse_wall_time(str(row["start_time"])),
                parse_wall_time(str(row["end_time"])),
                inclusive=self._settings.inclusive_overlap_boundaries,
            ):
                return int(row["id"])
        return None

    def commit_reservation(
        self,
        request: ReservationRequest,
        status: ReservationStatus,
        start_instant: str,
        end_instant: str,
    ) -> ReservationRecord:
        """Insert a reservation after re-checking overlaps in the same transaction."""
        reservation_date = request.date.isoformat()
        conn = self._connect()
        try:
            # IMMEDIATE takes the write lock before the overlap read.
            conn.execute("BEGIN IMMEDIATE;")
            cursor = conn.cursor()
            conflict_id = self._find_overlap(
                cursor,
                request.space_id,
                reservation_date,
                request.start.time(),
                request.end.time(),
            )
            if conflict_id is not None:
                raise SlotTakenError(conflict_id)

            cursor.execute(
                """
                INSERT INTO Reservations (
                    space_id,
                    unit_id,
                    reservation_date,
                    start_time,
                    end_time,
                    start_instant,
                    end_instant,
                    status,
                    reason
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    request.space_id,
                    request.unit_id,
                    reservation_date,
                    format_wall_time(request.start.time()),
                    format_wall_time(request.end.time()),
                    start_instant,
                    end_instant,
                    status.value,
                    request.reason,
                ),
            )
            reservation_id = int(cursor.lastrowid)
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.info(
            "Reservation committed | reservation_id=%s | space_id=%s | date=%s | status=%s",
            reservation_id,
            request.space_id,
            reservation_date,
            status.value,
        )
        return ReservationRecord(
            reservation_id=reservation_id,
            space_id=request.space_id,
            start=request.start,
            end=request.end,
            status=status,
            start_instant=start_instant,
            end_instant=end_instant,
            unit_id=request.unit_id,
            reason=request.reason,
        )

    def _row_to_reservation(self, row: sqlite3.Row) -> ReservationRecord:
        reserved_on = date.fromisoformat(str(row["reservation_date"]))
        return ReservationRecord(
            reservation_id=int(row["id"]),
            space_id=int(row["space_id"]),
            start=datetime.combine(reserved_on, parse_wall_time(str(row["start_time"]))),
            end=datetime.combine(reserved_on, parse_wall_time(str(row["end_time"]))),
            status=ReservationStatus(str(row["status"])),
            start_instant=str(row["start_instant"]),
            end_instant=str(row["end_instant"]),
            unit_id=row["unit_id"],
            reason=row["reason"],
        )

    def get_reservation(self, reservation_id: int) -> Optional[ReservationRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_RESERVATION_COLUMNS} FROM Reservations WHERE id = ?;",
                (reservation_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_reservation(row)

    def list_reservations(
        self,
        space_id: Optional[int] = None,
        statuses: Iterable[ReservationStatus] = (),
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        unit_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[List[ReservationRecord], int]:
        """Return one page of matching reservations and the total match count.

        Every filter is optional; date bounds are inclusive. Rows come back
        ordered by date, then start time, then id.
        """
        clauses: list[str] = []
        params: list[object] = []
        if space_id is not None:
            clauses.append("space_id = ?")
            params.append(space_id)
        status_values = [status.value for status in statuses]
        if status_values:
            clauses.append(f"status IN ({','.join('?' for _ in status_values)})")
            params.extend(status_values)
        if start_date is not None:
            clauses.append("reservation_date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            clauses.append("reservation_date <= ?")
            params.append(end_date.isoformat())
        if unit_id is not None:
            clauses.append("unit_id = ?")
            params.append(unit_id)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) AS count FROM Reservations{where};", params)
            total = int(cursor.fetchone()["count"])

            query = (
                f"SELECT {_RESERVATION_COLUMNS} FROM Reservations{where} "
                "ORDER BY reservation_date ASC, start_time ASC, id ASC"
            )
            page_params = list(params)
            if limit is not None:
                query += " LIMIT ? OFFSET ?"
                page_params.extend([limit, offset])
            cursor.execute(query + ";", page_params)
            return [self._row_to_reservation(row) for row in cursor.fetchall()], total

    def transition_reservation_status(
        self,
        reservation_id: int,
        status: ReservationStatus,
        from_statuses: Iterable[ReservationStatus],
        recheck_overlap: bool = False,
    ) -> Optional[ReservationStatus]:
        """Move a reservation to ``status`` only from one of ``from_statuses``.

        Returns the status found before the update, or ``None`` when the id
        does not exist. The row is left untouched when that status is not an
        allowed origin. With ``recheck_overlap`` the range is checked against
        other blocking reservations in the same transaction and
        ``SlotTakenError`` is raised on conflict.
        """
        allowed = set(from_statuses)
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE;")
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_RESERVATION_COLUMNS} FROM Reservations WHERE id = ?;",
                (reservation_id,),
            )
            row = cursor.fetchone()
            if row is None:
                conn.rollback()
                return None
            current = ReservationStatus(str(row["status"]))
            if current not in allowed:
                conn.rollback()
                return current

            if recheck_overlap:
                conflict_id = self._find_overlap(
                    cursor,
                    int(row["space_id"]),
                    str(row["reservation_date"]),
                    parse_wall_time(str(row["start_time"])),
                    parse_wall_time(str(row["end_time"])),
                    exclude_id=reservation_id,
                )
                if conflict_id is not None:
                    raise SlotTakenError(conflict_id)

            cursor.execute(
                "UPDATE Reservations SET status = ? WHERE id = ? AND status = ?;",
                (status.value, reservation_id, current.value),
            )
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.info(
            "Reservation status changed | reservation_id=%s | from=%s | to=%s",
            reservation_id,
            current.value,
            status.value,
        )
        return current

    def count_reservations(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Reservations;")
            return int(cursor.fetchone()["count"])
