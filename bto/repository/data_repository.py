"""Repository layer responsible for all database access."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from threading import RLock
from typing import Iterator, Optional

from bto.domain.models import (
    AgentRegistration,
    ApplicationStatus,
    Enquiry,
    EnquiryReply,
    EnquiryStatus,
    FlatBooking,
    FlatType,
    HousingApplication,
    MaritalStatus,
    Project,
    RegistrationStatus,
    User,
    UserRole,
)
from bto.repository.base import RepositoryError
from bto.repository.csv_loader import load_projects, load_users
from bto.utils.config import Settings, get_settings
from bto.utils.logger import get_logger


logger = get_logger(__name__)


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS Users (
        nric TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        age INTEGER NOT NULL CHECK (age > 0),
        marital_status TEXT NOT NULL,
        role TEXT NOT NULL,
        password_hash TEXT NOT NULL DEFAULT ''
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS Projects (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        neighborhood TEXT NOT NULL,
        opening_date TEXT NOT NULL,
        closing_date TEXT NOT NULL,
        manager_nric TEXT NOT NULL,
        max_agent_slots INTEGER NOT NULL CHECK (max_agent_slots > 0),
        visible INTEGER NOT NULL DEFAULT 0 CHECK (visible IN (0,1))
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS ProjectUnits (
        project_id INTEGER NOT NULL,
        flat_type TEXT NOT NULL,
        total_units INTEGER NOT NULL CHECK (total_units >= 0),
        available_units INTEGER NOT NULL
            CHECK (available_units >= 0 AND available_units <= total_units),
        PRIMARY KEY (project_id, flat_type),
        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS ProjectAgents (
        project_id INTEGER NOT NULL,
        agent_nric TEXT NOT NULL,
        position INTEGER NOT NULL,
        PRIMARY KEY (project_id, agent_nric),
        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS Applications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        applicant_nric TEXT NOT NULL,
        project_id INTEGER NOT NULL,
        applied_flat_type TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        booked_flat_type TEXT,
        booking_id INTEGER,
        withdrawal_requested INTEGER NOT NULL DEFAULT 0,
        submitted_at TEXT,
        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS Bookings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        application_id INTEGER NOT NULL UNIQUE,
        applicant_nric TEXT NOT NULL,
        project_id INTEGER NOT NULL,
        flat_type TEXT NOT NULL,
        agent_nric TEXT NOT NULL,
        booked_at TEXT NOT NULL,
        FOREIGN KEY (application_id) REFERENCES Applications(id) ON DELETE CASCADE,
        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS Registrations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        agent_nric TEXT NOT NULL,
        project_id INTEGER NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        requested_at TEXT,
        decided_at TEXT,
        UNIQUE (agent_nric, project_id),
        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS Enquiries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        submitter_nric TEXT NOT NULL,
        project_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'OPEN',
        submitted_at TEXT,
        updated_at TEXT,
        FOREIGN KEY (project_id) REFERENCES Projects(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS EnquiryReplies (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        enquiry_id INTEGER NOT NULL,
        author_nric TEXT NOT NULL,
        author_label TEXT NOT NULL,
        text TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (enquiry_id) REFERENCES Enquiries(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_applications_applicant_status
    ON Applications(applicant_nric, status);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_applications_project
    ON Applications(project_id);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_registrations_agent
    ON Registrations(agent_nric);
    """,
)


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _parse_flat_type(value: Optional[str]) -> Optional[FlatType]:
    return FlatType(value) if value else None


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic.

    Outside a unit of work each call opens its own connection and commits on
    exit. Inside `unit_of_work()` every call on the same thread shares one
    connection and the whole block commits or rolls back together.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()
        self._local = threading.local()

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        active: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        try:
            if active is not None:
                yield active
                return
            connection = self._connect()
            try:
                with connection:
                    yield connection
            finally:
                connection.close()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Database operation failed: {exc}") from exc

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        with self._lock:
            if getattr(self._local, "connection", None) is not None:
                yield
                return
            connection = self._connect()
            self._local.connection = connection
            try:
                connection.execute("BEGIN IMMEDIATE;")
                yield
                connection.commit()
            except BaseException:
                connection.rollback()
                logger.debug("Unit of work rolled back | db=%s", self._db_path)
                raise
            finally:
                self._local.connection = None
                connection.close()

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                for statement in _SCHEMA:
                    cursor.execute(statement)
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Database initialization failed: {exc}") from exc

    def seed_from_csv(self, directory: Optional[Path] = None) -> None:
        """Load users.csv and projects.csv only when the tables are empty."""
        seed_dir = Path(directory or self._settings.seed_data_dir)
        with self._session() as conn:
            user_count = int(conn.execute("SELECT COUNT(*) AS count FROM Users;").fetchone()["count"])
        if user_count > 0:
            logger.info("Seed data already present; skipping seed")
            return

        users = load_users(
            seed_dir / "users.csv",
            self._settings.default_password,
            iterations=self._settings.password_hash_iterations,
        )
        projects = load_projects(
            seed_dir / "projects.csv", max_agent_slots_limit=self._settings.max_agent_slots_limit
        )
        with self.unit_of_work():
            for user in users:
                self.put_user(user)
            for project in projects:
                self.put_project(project)
        logger.info(
            "Seed completed | users=%s | projects=%s | source=%s",
            len(users),
            len(projects),
            seed_dir,
        )

    # --- users ---

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            nric=str(row["nric"]),
            name=str(row["name"]),
            age=int(row["age"]),
            marital_status=MaritalStatus(row["marital_status"]),
            role=UserRole(row["role"]),
            password_hash=str(row["password_hash"]),
        )

    def get_user(self, nric: str) -> Optional[User]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Users WHERE nric = ?;", (nric.upper(),)).fetchone()
        return self._row_to_user(row) if row is not None else None

    def put_user(self, user: User) -> User:
        nric = user.nric.upper()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO Users (nric, name, age, marital_status, role, password_hash)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(nric) DO UPDATE SET
                    name = excluded.name,
                    age = excluded.age,
                    marital_status = excluded.marital_status,
                    role = excluded.role,
                    password_hash = excluded.password_hash;
                """,
                (
                    nric,
                    user.name,
                    user.age,
                    user.marital_status.value,
                    user.role.value,
                    user.password_hash,
                ),
            )
        return self.get_user(nric)

    def list_users(self) -> list[User]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Users ORDER BY nric ASC;").fetchall()
        return [self._row_to_user(row) for row in rows]

    # --- projects ---

    def _load_project(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Project:
        project_id = int(row["id"])
        unit_rows = conn.execute(
            "SELECT flat_type, total_units, available_units FROM ProjectUnits WHERE project_id = ?;",
            (project_id,),
        ).fetchall()
        agent_rows = conn.execute(
            "SELECT agent_nric FROM ProjectAgents WHERE project_id = ? ORDER BY position ASC;",
            (project_id,),
        ).fetchall()
        return Project(
            project_id=project_id,
            name=str(row["name"]),
            neighborhood=str(row["neighborhood"]),
            total_units={FlatType(unit["flat_type"]): int(unit["total_units"]) for unit in unit_rows},
            available_units={
                FlatType(unit["flat_type"]): int(unit["available_units"]) for unit in unit_rows
            },
            opening_date=date.fromisoformat(row["opening_date"]),
            closing_date=date.fromisoformat(row["closing_date"]),
            manager_nric=str(row["manager_nric"]),
            max_agent_slots=int(row["max_agent_slots"]),
            assigned_agents=tuple(str(agent["agent_nric"]) for agent in agent_rows),
            visible=bool(row["visible"]),
        )

    def get_project(self, project_id: int) -> Optional[Project]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Projects WHERE id = ?;", (project_id,)).fetchone()
            return self._load_project(conn, row) if row is not None else None

    def put_project(self, project: Project) -> Project:
        values = (
            project.name,
            project.neighborhood,
            project.opening_date.isoformat(),
            project.closing_date.isoformat(),
            project.manager_nric,
            project.max_agent_slots,
            int(project.visible),
        )
        with self._session() as conn:
            cursor = conn.cursor()
            exists = project.project_id is not None and cursor.execute(
                "SELECT 1 FROM Projects WHERE id = ?;", (project.project_id,)
            ).fetchone() is not None
            if exists:
                cursor.execute(
                    """
                    UPDATE Projects
                    SET name = ?, neighborhood = ?, opening_date = ?, closing_date = ?,
                        manager_nric = ?, max_agent_slots = ?, visible = ?
                    WHERE id = ?;
                    """,
                    (*values, project.project_id),
                )
                project_id = int(project.project_id)
            else:
                cursor.execute(
                    """
                    INSERT INTO Projects (
                        id, name, neighborhood, opening_date, closing_date,
                        manager_nric, max_agent_slots, visible
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (project.project_id, *values),
                )
                project_id = int(cursor.lastrowid)

            cursor.execute("DELETE FROM ProjectUnits WHERE project_id = ?;", (project_id,))
            flat_types = sorted(
                set(project.total_units) | set(project.available_units),
                key=lambda flat_type: flat_type.value,
            )
            cursor.executemany(
                """
                INSERT INTO ProjectUnits (project_id, flat_type, total_units, available_units)
                VALUES (?, ?, ?, ?);
                """,
                [
                    (project_id, flat_type.value, project.total(flat_type), project.available(flat_type))
                    for flat_type in flat_types
                ],
            )
            cursor.execute("DELETE FROM ProjectAgents WHERE project_id = ?;", (project_id,))
            cursor.executemany(
                "INSERT INTO ProjectAgents (project_id, agent_nric, position) VALUES (?, ?, ?);",
                [
                    (project_id, agent_nric, position)
                    for position, agent_nric in enumerate(project.assigned_agents)
                ],
            )
            row = cursor.execute("SELECT * FROM Projects WHERE id = ?;", (project_id,)).fetchone()
            return self._load_project(conn, row)

    def list_projects(self) -> list[Project]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Projects ORDER BY id ASC;").fetchall()
            return [self._load_project(conn, row) for row in rows]

    def delete_project_cascade(self, project_id: int) -> None:
        """Remove the project and every record that references it."""
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM Bookings WHERE project_id = ?;", (project_id,))
            cursor.execute("DELETE FROM Applications WHERE project_id = ?;", (project_id,))
            cursor.execute("DELETE FROM Registrations WHERE project_id = ?;", (project_id,))
            cursor.execute(
                """
                DELETE FROM EnquiryReplies
                WHERE enquiry_id IN (SELECT id FROM Enquiries WHERE project_id = ?);
                """,
                (project_id,),
            )
            cursor.execute("DELETE FROM Enquiries WHERE project_id = ?;", (project_id,))
            cursor.execute("DELETE FROM ProjectUnits WHERE project_id = ?;", (project_id,))
            cursor.execute("DELETE FROM ProjectAgents WHERE project_id = ?;", (project_id,))
            cursor.execute("DELETE FROM Projects WHERE id = ?;", (project_id,))

    # --- applications ---

    @staticmethod
    def _row_to_application(row: sqlite3.Row) -> HousingApplication:
        return HousingApplication(
            application_id=int(row["id"]),
            applicant_nric=str(row["applicant_nric"]),
            project_id=int(row["project_id"]),
            applied_flat_type=FlatType(row["applied_flat_type"]),
            status=ApplicationStatus(row["status"]),
            booked_flat_type=_parse_flat_type(row["booked_flat_type"]),
            booking_id=int(row["booking_id"]) if row["booking_id"] is not None else None,
            withdrawal_requested=bool(row["withdrawal_requested"]),
            submitted_at=_parse_datetime(row["submitted_at"]),
        )

    def get_application(self, application_id: int) -> Optional[HousingApplication]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM Applications WHERE id = ?;", (application_id,)
            ).fetchone()
        return self._row_to_application(row) if row is not None else None

    def put_application(self, application: HousingApplication) -> HousingApplication:
        values = (
            application.applicant_nric,
            application.project_id,
            application.applied_flat_type.value,
            application.status.value,
            application.booked_flat_type.value if application.booked_flat_type else None,
            application.booking_id,
            int(application.withdrawal_requested),
            _iso(application.submitted_at),
        )
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Applications (
                    id, applicant_nric, project_id, applied_flat_type, status,
                    booked_flat_type, booking_id, withdrawal_requested, submitted_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    applicant_nric = excluded.applicant_nric,
                    project_id = excluded.project_id,
                    applied_flat_type = excluded.applied_flat_type,
                    status = excluded.status,
                    booked_flat_type = excluded.booked_flat_type,
                    booking_id = excluded.booking_id,
                    withdrawal_requested = excluded.withdrawal_requested,
                    submitted_at = excluded.submitted_at;
                """,
                (application.application_id, *values),
            )
            application_id = application.application_id or int(cursor.lastrowid)
        return self.get_application(application_id)

    def _list_applications(self, where: str = "", params: tuple = ()) -> list[HousingApplication]:
        with self._session() as conn:
            rows = conn.execute(
                f"SELECT * FROM Applications {where} ORDER BY id ASC;", params
            ).fetchall()
        return [self._row_to_application(row) for row in rows]

    def list_applications(self) -> list[HousingApplication]:
        return self._list_applications()

    def list_applications_by_applicant(self, applicant_nric: str) -> list[HousingApplication]:
        return self._list_applications("WHERE applicant_nric = ?", (applicant_nric.upper(),))

    def list_applications_by_project(self, project_id: int) -> list[HousingApplication]:
        return self._list_applications("WHERE project_id = ?", (project_id,))

    # --- bookings ---

    @staticmethod
    def _row_to_booking(row: sqlite3.Row) -> FlatBooking:
        return FlatBooking(
            booking_id=int(row["id"]),
            application_id=int(row["application_id"]),
            applicant_nric=str(row["applicant_nric"]),
            project_id=int(row["project_id"]),
            flat_type=FlatType(row["flat_type"]),
            agent_nric=str(row["agent_nric"]),
            booked_at=datetime.fromisoformat(row["booked_at"]),
        )

    def get_booking(self, booking_id: int) -> Optional[FlatBooking]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Bookings WHERE id = ?;", (booking_id,)).fetchone()
        return self._row_to_booking(row) if row is not None else None

    def put_booking(self, booking: FlatBooking) -> FlatBooking:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Bookings (
                    id, application_id, applicant_nric, project_id, flat_type, agent_nric, booked_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    application_id = excluded.application_id,
                    applicant_nric = excluded.applicant_nric,
                    project_id = excluded.project_id,
                    flat_type = excluded.flat_type,
                    agent_nric = excluded.agent_nric,
                    booked_at = excluded.booked_at;
                """,
                (
                    booking.booking_id,
                    booking.application_id,
                    booking.applicant_nric,
                    booking.project_id,
                    booking.flat_type.value,
                    booking.agent_nric,
                    booking.booked_at.isoformat(),
                ),
            )
            booking_id = booking.booking_id or int(cursor.lastrowid)
        return self.get_booking(booking_id)

    def delete_booking(self, booking_id: int) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM Bookings WHERE id = ?;", (booking_id,))

    def list_bookings(self) -> list[FlatBooking]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Bookings ORDER BY id ASC;").fetchall()
        return [self._row_to_booking(row) for row in rows]

    # --- registrations ---

    @staticmethod
    def _row_to_registration(row: sqlite3.Row) -> AgentRegistration:
        return AgentRegistration(
            registration_id=int(row["id"]),
            agent_nric=str(row["agent_nric"]),
            project_id=int(row["project_id"]),
            status=RegistrationStatus(row["status"]),
            requested_at=_parse_datetime(row["requested_at"]),
            decided_at=_parse_datetime(row["decided_at"]),
        )

    def get_registration(self, registration_id: int) -> Optional[AgentRegistration]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM Registrations WHERE id = ?;", (registration_id,)
            ).fetchone()
        return self._row_to_registration(row) if row is not None else None

    def put_registration(self, registration: AgentRegistration) -> AgentRegistration:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Registrations (id, agent_nric, project_id, status, requested_at, decided_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    agent_nric = excluded.agent_nric,
                    project_id = excluded.project_id,
                    status = excluded.status,
                    requested_at = excluded.requested_at,
                    decided_at = excluded.decided_at;
                """,
                (
                    registration.registration_id,
                    registration.agent_nric,
                    registration.project_id,
                    registration.status.value,
                    _iso(registration.requested_at),
                    _iso(registration.decided_at),
                ),
            )
            registration_id = registration.registration_id or int(cursor.lastrowid)
        return self.get_registration(registration_id)

    def list_registrations_by_agent(self, agent_nric: str) -> list[AgentRegistration]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM Registrations WHERE agent_nric = ? ORDER BY id ASC;",
                (agent_nric.upper(),),
            ).fetchall()
        return [self._row_to_registration(row) for row in rows]

    def list_registrations_by_project(self, project_id: int) -> list[AgentRegistration]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM Registrations WHERE project_id = ? ORDER BY id ASC;",
                (project_id,),
            ).fetchall()
        return [self._row_to_registration(row) for row in rows]

    # --- enquiries ---

    def _load_enquiry(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Enquiry:
        reply_rows = conn.execute(
            "SELECT * FROM EnquiryReplies WHERE enquiry_id = ? ORDER BY id ASC;",
            (int(row["id"]),),
        ).fetchall()
        return Enquiry(
            enquiry_id=int(row["id"]),
            submitter_nric=str(row["submitter_nric"]),
            project_id=int(row["project_id"]),
            content=str(row["content"]),
            status=EnquiryStatus(row["status"]),
            replies=tuple(
                EnquiryReply(
                    author_nric=str(reply["author_nric"]),
                    author_label=str(reply["author_label"]),
                    text=str(reply["text"]),
                    created_at=datetime.fromisoformat(reply["created_at"]),
                )
                for reply in reply_rows
            ),
            submitted_at=_parse_datetime(row["submitted_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get_enquiry(self, enquiry_id: int) -> Optional[Enquiry]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Enquiries WHERE id = ?;", (enquiry_id,)).fetchone()
            return self._load_enquiry(conn, row) if row is not None else None

    def put_enquiry(self, enquiry: Enquiry) -> Enquiry:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Enquiries (id, submitter_nric, project_id, content, status, submitted_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    submitter_nric = excluded.submitter_nric,
                    project_id = excluded.project_id,
                    content = excluded.content,
                    status = excluded.status,
                    submitted_at = excluded.submitted_at,
                    updated_at = excluded.updated_at;
                """,
                (
                    enquiry.enquiry_id,
                    enquiry.submitter_nric,
                    enquiry.project_id,
                    enquiry.content,
                    enquiry.status.value,
                    _iso(enquiry.submitted_at),
                    _iso(enquiry.updated_at),
                ),
            )
            enquiry_id = enquiry.enquiry_id or int(cursor.lastrowid)
            # Replies are append-only: persist only the ones not stored yet.
            stored_count = int(
                cursor.execute(
                    "SELECT COUNT(*) AS count FROM EnquiryReplies WHERE enquiry_id = ?;",
                    (enquiry_id,),
                ).fetchone()["count"]
            )
            cursor.executemany(
                """
                INSERT INTO EnquiryReplies (enquiry_id, author_nric, author_label, text, created_at)
                VALUES (?, ?, ?, ?, ?);
                """,
                [
                    (
                        enquiry_id,
                        reply.author_nric,
                        reply.author_label,
                        reply.text,
                        reply.created_at.isoformat(),
                    )
                    for reply in enquiry.replies[stored_count:]
                ],
            )
            row = cursor.execute("SELECT * FROM Enquiries WHERE id = ?;", (enquiry_id,)).fetchone()
            return self._load_enquiry(conn, row)

    def delete_enquiry(self, enquiry_id: int) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM EnquiryReplies WHERE enquiry_id = ?;", (enquiry_id,))
            conn.execute("DELETE FROM Enquiries WHERE id = ?;", (enquiry_id,))

    def list_enquiries(self) -> list[Enquiry]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Enquiries ORDER BY id ASC;").fetchall()
            return [self._load_enquiry(conn, row) for row in rows]

    def count_rows(self, table: str) -> int:
        """Return a table's row count for diagnostics and tests."""
        if table not in {
            "Users", "Projects", "Applications", "Bookings",
            "Registrations", "Enquiries", "EnquiryReplies",
        }:
            raise ValueError(f"unknown table {table!r}")
        with self._session() as conn:
            return int(conn.execute(f"SELECT COUNT(*) AS count FROM {table};").fetchone()["count"])
