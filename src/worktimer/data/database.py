"""
Database module for WorkTimer.

Holds the peewee models for employees and their timer entries and the
EntryStore adapter the timer service talks to. The store owns all
concurrency control: the start sequence runs in one transaction guarded by
a partial unique index, and closing a timer is a conditional update.

Every EntryStore builds its own model classes bound to its own database, so
two stores in one process never share a connection.
"""
import datetime
import logging
from contextlib import contextmanager
from typing import List, Optional

from peewee import (
    Model, CharField, BooleanField, DateTimeField, AutoField,
    ForeignKeyField, IntegrityError, PeeweeException, SqliteDatabase
)
from playhouse.db_url import connect

from ..models import TimerEntry
from ..utils.errors import ConflictError, StoreError

logger = logging.getLogger(__name__)

RUNNING_INDEX_NAME = "timer_entries_one_running_per_employee"


def build_models(db):
    """
    Create the model classes bound to ``db``.

    Returns:
        (Employee, TimerEntryRecord)
    """

    class BaseModel(Model):
        class Meta:
            database = db

    class Employee(BaseModel):
        employee_id = CharField(max_length=64, primary_key=True)
        created_at = DateTimeField(default=datetime.datetime.now, null=False)

        class Meta:
            table_name = 'employees'

        def __str__(self):
            return self.employee_id

    class TimerEntryRecord(BaseModel):
        id = AutoField()
        employee = ForeignKeyField(
            Employee, backref='timer_entries', column_name='employee_id',
            field=Employee.employee_id, null=False
        )
        start_time = DateTimeField(null=False)
        end_time = DateTimeField(null=True)
        is_running = BooleanField(default=True, null=False)

        class Meta:
            table_name = 'timer_entries'
            indexes = (
                (('employee', 'start_time'), False),  # History lookups
            )

        def __str__(self):
            state = "RUNNING" if self.is_running else f"until {self.end_time}"
            return f"{self.employee_id} @ {self.start_time} ({state})"

        def to_entry(self) -> TimerEntry:
            return TimerEntry(
                id=self.id,
                employee_id=self.employee_id,
                start_time=self.start_time,
                end_time=None if self.is_running else self.end_time,
            )

    # At most one running entry per employee, enforced by the database itself.
    TimerEntryRecord.add_index(
        TimerEntryRecord.index(
            TimerEntryRecord.employee,
            unique=True,
            where=(TimerEntryRecord.is_running == True),
            name=RUNNING_INDEX_NAME,
        )
    )
    return Employee, TimerEntryRecord


def _is_running_index_violation(exc: IntegrityError) -> bool:
    message = str(exc).lower()
    return RUNNING_INDEX_NAME in message or 'timer_entries.employee_id' in message


class EntryStore:
    """Data-access adapter for employees and timer entries"""

    def __init__(self, database):
        """
        Initialize the store around an explicit database handle.

        Args:
            database: peewee Database instance (not yet connected)
        """
        self.db = database
        self.Employee, self.TimerEntryRecord = build_models(database)
        self.models = [self.Employee, self.TimerEntryRecord]

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def is_sqlite(self) -> bool:
        return isinstance(self.db, SqliteDatabase)

    def connect(self):
        """Open the connection and create tables and indexes"""
        try:
            self.db.connect(reuse_if_open=True)
            self.db.create_tables(self.models, safe=True)
            logger.info(f"Entry store ready ({type(self.db).__name__}: {self.db.database})")
        except PeeweeException as e:
            logger.error(f"Entry store initialization failed: {e}")
            raise StoreError(f"could not initialize store: {e}") from e

    def close(self):
        """Close the connection held by the calling thread"""
        if not self.db.is_closed():
            self.db.close()
            logger.info("Entry store connection closed")

    @contextmanager
    def connection(self):
        """
        Hold a connection for the calling thread for the duration of the
        block, closing it afterwards only if this block opened it.
        """
        try:
            opened = self.db.connect(reuse_if_open=True)
        except PeeweeException as e:
            logger.error(f"Failed to open database connection: {e}")
            raise StoreError(f"could not connect to store: {e}") from e
        try:
            yield self
        finally:
            if opened and not self.db.is_closed():
                self.db.close()
                logger.debug("Request connection closed")

    def _atomic(self):
        if self.is_sqlite:
            # Take the write lock up front so check-then-insert cannot interleave
            return self.db.atomic('IMMEDIATE')
        return self.db.atomic()

    # --- Contract operations ---

    def ensure_employee(self, employee_id: str):
        """Register the employee if unknown; a no-op otherwise"""
        Employee = self.Employee
        try:
            created = (Employee
                       .insert(employee_id=employee_id)
                       .on_conflict_ignore()
                       .as_rowcount()
                       .execute())
        except PeeweeException as e:
            logger.error(f"Failed to register employee {employee_id}: {e}")
            raise StoreError(f"could not register employee: {e}") from e
        if created:
            logger.info(f"Employee registered: {employee_id}")

    def count_running(self, employee_id: str) -> int:
        Record = self.TimerEntryRecord
        try:
            return Record.select().where(
                Record.employee == employee_id,
                Record.is_running == True
            ).count()
        except PeeweeException as e:
            logger.error(f"Failed to count running timers for {employee_id}: {e}")
            raise StoreError(f"could not check running timers: {e}") from e

    def insert_running_entry(self, employee_id: str, start_time: datetime.datetime) -> TimerEntry:
        """
        Create a new running entry.

        Raises:
            ConflictError: the partial unique index already holds a running
                entry for this employee
        """
        try:
            record = self.TimerEntryRecord.create(
                employee=employee_id,
                start_time=start_time,
                is_running=True
            )
        except IntegrityError as e:
            if _is_running_index_violation(e):
                raise ConflictError(f"timer already running for employee {employee_id}") from e
            logger.error(f"Failed to insert timer entry for {employee_id}: {e}")
            raise StoreError(f"could not start timer: {e}") from e
        except PeeweeException as e:
            logger.error(f"Failed to insert timer entry for {employee_id}: {e}")
            raise StoreError(f"could not start timer: {e}") from e
        return record.to_entry()

    def start_entry(self, employee_id: str, start_time: datetime.datetime) -> TimerEntry:
        """
        Register the employee, check for a running entry and insert a new one
        as a single transaction.

        Args:
            employee_id: owning employee
            start_time: timestamp of the new entry

        Returns:
            The created TimerEntry

        Raises:
            ConflictError: a running entry already exists
            StoreError: the database operation failed
        """
        try:
            with self._atomic():
                self.ensure_employee(employee_id)
                if self.count_running(employee_id) > 0:
                    raise ConflictError(f"timer already running for employee {employee_id}")
                return self.insert_running_entry(employee_id, start_time)
        except PeeweeException as e:
            # Raised by BEGIN/COMMIT themselves
            logger.error(f"Start transaction failed for {employee_id}: {e}")
            raise StoreError(f"could not start timer: {e}") from e

    def close_running_entry(self, employee_id: str, end_time: datetime.datetime,
                            entry_id: Optional[int] = None) -> int:
        """
        Close the running entry of an employee.

        The update only matches rows that are still running, so of two
        concurrent callers only one can change the row.

        Args:
            employee_id: owning employee
            end_time: timestamp recorded as the end of the interval
            entry_id: if given, only this entry may be closed

        Returns:
            Number of rows changed (0 or 1)
        """
        Record = self.TimerEntryRecord
        conditions = [
            Record.employee == employee_id,
            Record.is_running == True,
        ]
        if entry_id is not None:
            conditions.append(Record.id == entry_id)
        try:
            return Record.update(
                end_time=end_time,
                is_running=False
            ).where(*conditions).execute()
        except PeeweeException as e:
            logger.error(f"Failed to close timer entry for {employee_id}: {e}")
            raise StoreError(f"could not stop timer: {e}") from e

    def list_entries(self, employee_id: str) -> List[TimerEntry]:
        """All entries of an employee, most recent start first"""
        Record = self.TimerEntryRecord
        try:
            query = Record.select().where(
                Record.employee == employee_id
            ).order_by(Record.start_time.desc(), Record.id.desc())
            return [record.to_entry() for record in query]
        except PeeweeException as e:
            logger.error(f"Failed to list timer entries for {employee_id}: {e}")
            raise StoreError(f"could not read timer history: {e}") from e

    def get_running_entry(self, employee_id: str) -> Optional[TimerEntry]:
        Record = self.TimerEntryRecord
        try:
            record = Record.get_or_none(
                Record.employee == employee_id,
                Record.is_running == True
            )
        except PeeweeException as e:
            logger.error(f"Failed to read running timer for {employee_id}: {e}")
            raise StoreError(f"could not read running timer: {e}") from e
        return record.to_entry() if record else None


def create_database(url: str, busy_timeout: int = 5000):
    """
    Build (but do not connect) a peewee database from a connection URL.

    SQLite databases get WAL journaling and a busy timeout so concurrent
    writers wait for each other instead of failing.
    """
    if url.startswith('sqlite'):
        return connect(url, pragmas={
            'journal_mode': 'wal',
            'busy_timeout': busy_timeout,
            'foreign_keys': 1,
        })
    return connect(url)


def open_store(url: str, busy_timeout: int = 5000) -> EntryStore:
    """Create a store for the given URL and connect it"""
    store = EntryStore(create_database(url, busy_timeout=busy_timeout))
    store.connect()
    return store
