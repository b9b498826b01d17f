"""Repository layer responsible for all database access."""

from __future__ import annotations

import json
import random
import sqlite3
from datetime import date, timedelta
from pathlib import Path
from typing import Optional, Sequence

from frontdesk.domain.constraints import parse_iso_date
from frontdesk.domain.models import (
    ACTIVE_BOOKING_STATUSES,
    BOOKING_CHECKED_IN,
    BOOKING_CHECKED_OUT,
    BOOKING_CANCELLED,
    BOOKING_RESERVED,
    ROOM_AVAILABLE,
    ROOM_MAINTENANCE,
    ROOM_OCCUPIED,
    Booking,
    Purchase,
    Room,
)
from frontdesk.utils.config import Settings, get_settings
from frontdesk.utils.logger import get_logger


logger = get_logger(__name__)


_DEFAULT_ROOM_TYPES = (
    ("SGL", "Single"),
    ("DBL", "Double"),
    ("TPL", "Triple"),
    ("QUAD", "Quad"),
    ("FAM", "Family"),
    ("6PAX", "6 Pax"),
)


def _decode_room_numbers(raw: object) -> tuple[str, ...]:
    if raw is None:
        return ()
    try:
        values = json.loads(str(raw))
    except (json.JSONDecodeError, TypeError):
        logger.debug("Unreadable room_numbers payload: %r", raw)
        return ()
    if not isinstance(values, list):
        return ()
    return tuple(str(value) for value in values)


def _row_to_room(row: sqlite3.Row) -> Room:
    return Room(
        room_number=str(row["room_number"]),
        room_type=str(row["room_type"]),
        status=str(row["status"]),
        floor=int(row["floor"]),
        base_price=float(row["base_price"]),
    )


def _row_to_booking(row: sqlite3.Row) -> Booking:
    return Booking(
        booking_id=int(row["id"]),
        room_numbers=_decode_room_numbers(row["room_numbers"]),
        arrival_date=parse_iso_date(row["date_of_arrival"]),
        departure_date=parse_iso_date(row["date_of_departure"]),
        status=str(row["status"]),
        guest_name=str(row["guest_name"] or ""),
        grc_number=str(row["grc_number"] or ""),
        room_type=str(row["room_type"] or ""),
        total_room_charge=float(row["total_room_charge"] or 0.0),
        advance_payment=float(row["advance_payment"] or 0.0),
    )


def _row_to_purchase(row: sqlite3.Row) -> Purchase:
    return Purchase(
        purchase_id=int(row["id"]),
        booking_id=int(row["guest_id"]),
        item_name=str(row["item_name"]),
        category=str(row["category"]),
        quantity=int(row["quantity"]),
        unit_price=float(row["unit_price"]),
        total_price=float(row["total_price"]),
    )


class DataRepository:
    """SQLite-backed table store supplying room and booking snapshots."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

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
                    CREATE TABLE IF NOT EXISTS RoomTypes (
                        code TEXT PRIMARY KEY,
                        name TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS Rooms (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_number TEXT NOT NULL UNIQUE,
                        room_type TEXT NOT NULL,
                        floor INTEGER NOT NULL DEFAULT 1 CHECK (floor > 0),
                        base_price REAL NOT NULL DEFAULT 0 CHECK (base_price >= 0),
                        status TEXT NOT NULL DEFAULT '{ROOM_AVAILABLE}'
                            CHECK (status IN ('{ROOM_AVAILABLE}', '{ROOM_OCCUPIED}', '{ROOM_MAINTENANCE}')),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Guests (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        grc_number TEXT NOT NULL,
                        guest_name TEXT NOT NULL,
                        room_numbers TEXT NOT NULL DEFAULT '[]',
                        room_type TEXT NOT NULL DEFAULT '',
                        date_of_arrival TEXT,
                        date_of_departure TEXT,
                        status TEXT NOT NULL,
                        total_room_charge REAL NOT NULL DEFAULT 0,
                        advance_payment REAL NOT NULL DEFAULT 0,
                        created_at TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Purchases (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        guest_id INTEGER NOT NULL,
                        item_name TEXT NOT NULL,
                        category TEXT NOT NULL,
                        quantity INTEGER NOT NULL CHECK (quantity > 0),
                        unit_price REAL NOT NULL CHECK (unit_price >= 0),
                        total_price REAL NOT NULL,
                        purchase_date DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (guest_id) REFERENCES Guests(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_guests_status_arrival
                    ON Guests(status, date_of_arrival);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_purchases_guest
                    ON Purchases(guest_id);
                    """
                )

                cursor.executemany(
                    "INSERT OR IGNORE INTO RoomTypes (code, name) VALUES (?, ?);",
                    _DEFAULT_ROOM_TYPES,
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_data(self, today: date) -> None:
        """Seed a deterministic demo property only when the Rooms table is empty."""
        rng = random.Random(self._settings.demo_random_seed)
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("SELECT COUNT(*) AS count FROM Rooms;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo data already present; skipping seed")
                    return

                rooms = [
                    ("101", "SGL", 1, 8500.0),
                    ("102", "DBL", 1, 12000.0),
                    ("103", "DBL", 1, 12000.0),
                    ("104", "TPL", 1, 15500.0),
                    ("201", "DBL", 2, 12500.0),
                    ("202", "DBL", 2, 12500.0),
                    ("203", "QUAD", 2, 18000.0),
                    ("204", "FAM", 2, 21000.0),
                    ("301", "SGL", 3, 9000.0),
                    ("302", "TPL", 3, 16000.0),
                    ("303", "6PAX", 3, 26000.0),
                    ("304", "DBL", 3, 13000.0),
                ]
                cursor.executemany(
                    """
                    INSERT INTO Rooms (room_number, room_type, floor, base_price)
                    VALUES (?, ?, ?, ?);
                    """,
                    rooms,
                )

                guest_rows = []
                for index, (room_number, room_type, _, base_price) in enumerate(rooms[:8], start=1):
                    arrival = today + timedelta(days=rng.randint(-5, 20))
                    nights = rng.randint(1, 6)
                    if arrival <= today < arrival + timedelta(days=nights):
                        status = BOOKING_CHECKED_IN
                    elif arrival + timedelta(days=nights) <= today:
                        status = BOOKING_CHECKED_OUT
                    else:
                        status = BOOKING_RESERVED
                    guest_rows.append(
                        (
                            f"{self._settings.grc_prefix}-{today.strftime('%Y%m%d')}-{index:04d}",
                            f"Demo Guest {index}",
                            json.dumps([room_number]),
                            room_type,
                            arrival.isoformat(),
                            (arrival + timedelta(days=nights)).isoformat(),
                            status,
                            base_price * nights,
                            0.0,
                            today.isoformat(),
                        )
                    )
                cursor.executemany(
                    """
                    INSERT INTO Guests (
                        grc_number, guest_name, room_numbers, room_type,
                        date_of_arrival, date_of_departure, status,
                        total_room_charge, advance_payment, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    guest_rows,
                )
                occupied = [
                    (ROOM_OCCUPIED, json.loads(row[2])[0])
                    for row in guest_rows
                    if row[6] == BOOKING_CHECKED_IN
                ]
                cursor.executemany(
                    "UPDATE Rooms SET status = ? WHERE room_number = ?;",
                    occupied,
                )
                conn.commit()
            logger.info(
                "Demo seed completed | rooms=%s | guests=%s",
                len(rooms),
                len(guest_rows),
            )
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc

    # --- Rooms ---

    def list_rooms(self) -> list[Room]:
        """Return the full room inventory snapshot."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT room_number, room_type, floor, base_price, status
                FROM Rooms
                ORDER BY id ASC;
                """
            )
            return [_row_to_room(row) for row in cursor.fetchall()]

    def get_room(self, room_number: str) -> Optional[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT room_number, room_type, floor, base_price, status
                FROM Rooms
                WHERE room_number = ?;
                """,
                (room_number,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_room(row)

    def create_room(self, room: Room) -> None:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR IGNORE INTO RoomTypes (code, name) VALUES (?, ?);",
                (room.room_type, room.room_type),
            )
            cursor.execute(
                """
                INSERT INTO Rooms (room_number, room_type, floor, base_price, status)
                VALUES (?, ?, ?, ?, ?);
                """,
                (room.room_number, room.room_type, room.floor, room.base_price, room.status),
            )
            conn.commit()

    def update_room_status(self, room_numbers: Sequence[str], status: str) -> None:
        if not room_numbers:
            return
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.executemany(
                "UPDATE Rooms SET status = ? WHERE room_number = ?;",
                [(status, room_number) for room_number in room_numbers],
            )
            conn.commit()

    def delete_room(self, room_number: str) -> bool:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM Rooms WHERE room_number = ?;", (room_number,))
            conn.commit()
            return cursor.rowcount > 0

    # --- Guests / bookings ---

    def list_bookings(self) -> list[Booking]:
        """Return every guest stay, including cancelled and malformed rows."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Guests ORDER BY id ASC;")
            return [_row_to_booking(row) for row in cursor.fetchall()]

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM Guests WHERE id = ?;", (booking_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_booking(row)

    def list_guests(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Booking]:
        """Return guest stays, newest first, optionally filtered.

        ``search`` is matched case-insensitively against the GRC number, guest
        name and assigned room numbers.
        """
        clauses: list[str] = []
        params: list[object] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if search:
            term = search.strip().lower()
            clauses.append(
                "(instr(lower(grc_number), ?) > 0"
                " OR instr(lower(guest_name), ?) > 0"
                " OR instr(lower(room_numbers), ?) > 0)"
            )
            params.extend([term, term, term])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM Guests {where} ORDER BY id DESC;", params)
            return [_row_to_booking(row) for row in cursor.fetchall()]

    def list_grc_numbers(self, prefix: str) -> list[str]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT grc_number FROM Guests WHERE grc_number LIKE ?;",
                (f"{prefix}%",),
            )
            return [str(row["grc_number"]) for row in cursor.fetchall()]

    def register_booking(
        self,
        *,
        grc_number: str,
        guest_name: str,
        room_numbers: Sequence[str],
        room_type: str,
        arrival_date: date,
        departure_date: date,
        status: str,
        total_room_charge: float,
        advance_payment: float,
        created_on: date,
    ) -> int:
        """Insert the stay and flag its rooms occupied in one transaction."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Guests (
                    grc_number, guest_name, room_numbers, room_type,
                    date_of_arrival, date_of_departure, status,
                    total_room_charge, advance_payment, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    grc_number,
                    guest_name,
                    json.dumps(list(room_numbers)),
                    room_type,
                    arrival_date.isoformat(),
                    departure_date.isoformat(),
                    status,
                    total_room_charge,
                    advance_payment,
                    created_on.isoformat(),
                ),
            )
            booking_id = int(cursor.lastrowid)
            if status == BOOKING_CHECKED_IN:
                cursor.executemany(
                    "UPDATE Rooms SET status = ? WHERE room_number = ?;",
                    [(ROOM_OCCUPIED, room_number) for room_number in room_numbers],
                )
            conn.commit()
            return booking_id

    def check_out_booking(self, booking_id: int, room_numbers: Sequence[str]) -> None:
        """Mark the stay checked out and release its rooms in one transaction."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE Guests SET status = ? WHERE id = ?;",
                (BOOKING_CHECKED_OUT, booking_id),
            )
            cursor.executemany(
                "UPDATE Rooms SET status = ? WHERE room_number = ?;",
                [(ROOM_AVAILABLE, room_number) for room_number in room_numbers],
            )
            conn.commit()

    def update_booking_departure(
        self,
        booking_id: int,
        *,
        expected_departure: date,
        new_departure: date,
        new_total_room_charge: float,
    ) -> bool:
        """Move the departure date only if it still matches ``expected_departure``.

        Stored timestamps are compared on their calendar part, the same value
        the read path yields.

        Returns False when another writer changed the stay since the caller's
        snapshot was taken.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE Guests
                SET date_of_departure = ?, total_room_charge = ?
                WHERE id = ?
                  AND substr(date_of_departure, 1, 10) = ?
                  AND status NOT IN (?, ?);
                """,
                (
                    new_departure.isoformat(),
                    new_total_room_charge,
                    booking_id,
                    expected_departure.isoformat(),
                    BOOKING_CANCELLED,
                    BOOKING_CHECKED_OUT,
                ),
            )
            conn.commit()
            return cursor.rowcount == 1

    def count_active_bookings_for_room(self, room_number: str) -> int:
        """Count reserved/checked-in stays that reference the room."""
        active = [
            booking
            for booking in self.list_bookings()
            if booking.status in ACTIVE_BOOKING_STATUSES
            and room_number in booking.room_numbers
        ]
        return len(active)

    # --- Purchases ---

    def add_purchase(
        self,
        booking_id: int,
        item_name: str,
        category: str,
        quantity: int,
        unit_price: float,
    ) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Purchases (
                    guest_id, item_name, category, quantity, unit_price, total_price
                )
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    booking_id,
                    item_name,
                    category,
                    quantity,
                    unit_price,
                    round(quantity * unit_price, 2),
                ),
            )
            conn.commit()
            return int(cursor.lastrowid)

    def delete_purchase(self, booking_id: int, purchase_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM Purchases WHERE id = ? AND guest_id = ?;",
                (purchase_id, booking_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def list_purchases(self, booking_id: int) -> list[Purchase]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, guest_id, item_name, category, quantity, unit_price, total_price
                FROM Purchases
                WHERE guest_id = ?
                ORDER BY purchase_date DESC, id DESC;
                """,
                (booking_id,),
            )
            return [_row_to_purchase(row) for row in cursor.fetchall()]

    def get_purchases_revenue(self) -> float:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COALESCE(SUM(total_price), 0) AS total FROM Purchases;")
            return float(cursor.fetchone()["total"])
