"""
SQLAlchemy Storage Implementation

DESIGN DECISION: One relational schema, reachable through any SQLAlchemy
URL. SQLite is used for local development and tests, PostgreSQL in
deployment. Nothing above this module knows which one is in use.

Consistency comes from the database, not from application locks:
- (user_id, code) is unique for accounts, so concurrent seeding cannot
  duplicate starter accounts
- Deleting a month cascades to its outgoings and transfers
- A month and its rolled-over outgoings are inserted in one transaction

TRADEOFFS:
- No retries: a failed statement surfaces immediately as StorageError
- Timestamps are stored as naive UTC
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterator, Optional, Sequence
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    event,
    select,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from budget_tracker.config import DatabaseSettings, get_settings
from budget_tracker.models.auth import SessionRecord, StoredUser, User
from budget_tracker.models.ledger import (
    Account,
    Month,
    MonthCreate,
    Outgoing,
    OutgoingCreate,
    Transfer,
    TransferCreate,
)
from budget_tracker.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    SessionStorageInterface,
    StorageError,
    UserStorageInterface,
)


MONEY = Numeric(12, 2)

# Update payloads may carry None for these columns to clear them
NULLABLE_FIELDS = frozenset({"note", "display_name"})


def utcnow() -> datetime:
    """Current time as naive UTC, the representation stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# SCHEMA
# =============================================================================

class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "app_users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class SessionRow(Base):
    __tablename__ = "app_sessions"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class AccountRow(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "code", name="uq_accounts_user_code"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class MonthRow(Base):
    __tablename__ = "month_summaries"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    month_label: Mapped[str] = mapped_column(String(100), nullable=False)
    wage: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    float_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    outgoings: Mapped[list["OutgoingRow"]] = relationship(
        back_populates="month", cascade="all, delete-orphan"
    )
    transfers: Mapped[list["TransferRow"]] = relationship(
        back_populates="month", cascade="all, delete-orphan"
    )

    @property
    def starting_point(self) -> Decimal:
        """Balance the month starts from: the wage minus the float kept aside."""
        return self.wage - self.float_amount


class OutgoingRow(Base):
    __tablename__ = "expense_items"
    __table_args__ = (
        CheckConstraint("due_day BETWEEN 1 AND 31", name="ck_expense_items_due_day"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    month_id: Mapped[UUID] = mapped_column(
        ForeignKey("month_summaries.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False)
    account_code: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    month: Mapped[MonthRow] = relationship(back_populates="outgoings")


class TransferRow(Base):
    __tablename__ = "transfer_items"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    month_id: Mapped[UUID] = mapped_column(
        ForeignKey("month_summaries.id", ondelete="CASCADE"), index=True, nullable=False
    )
    to_account_code: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    month: Mapped[MonthRow] = relationship(back_populates="transfers")


# =============================================================================
# CLIENT
# =============================================================================

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseClient:
    """
    Low-level database client wrapper.

    Owns the engine and the session factory. Pass an existing engine to
    share one database between components (tests do this).
    """

    def __init__(
        self,
        settings: Optional[DatabaseSettings] = None,
        engine: Optional[Engine] = None,
    ):
        self._settings = settings or get_settings().database
        self._engine = engine
        self._session_factory: Optional[sessionmaker] = None

    def connect(self) -> Engine:
        """
        Create the engine on first use.

        In-memory SQLite gets a StaticPool so every session sees the
        same database.
        """
        if self._engine is None:
            url = self._settings.url
            kwargs: dict[str, Any] = {"echo": self._settings.echo}
            if url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
                if url in ("sqlite://", "sqlite:///:memory:"):
                    kwargs["poolclass"] = StaticPool
            try:
                self._engine = create_engine(url, **kwargs)
            except (SQLAlchemyError, ImportError) as e:
                raise ConnectionError(f"Failed to connect to database: {e}")

        if self._engine.dialect.name == "sqlite" and not event.contains(
            self._engine, "connect", _enable_sqlite_foreign_keys
        ):
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)

        return self._engine

    def session(self) -> Session:
        """Open a new ORM session."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.connect(), expire_on_commit=False)
        return self._session_factory()

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        try:
            Base.metadata.create_all(self.connect())
        except SQLAlchemyError as e:
            raise ConnectionError(f"Failed to create database schema: {e}")

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()


def _describe(error: SQLAlchemyError) -> str:
    """Datastore message without SQLAlchemy's statement dump."""
    cause = getattr(error, "orig", None)
    return str(cause) if cause is not None else str(error)


def _apply_changes(row: Base, changes: dict[str, Any]) -> None:
    for field, value in changes.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(row, field, value)


# =============================================================================
# STORE
# =============================================================================

class SQLAlchemyStore(UserStorageInterface, SessionStorageInterface, LedgerStorageInterface):
    """
    Relational implementation of every storage interface.

    Each public method runs in its own transaction.
    """

    def __init__(self, client: DatabaseClient):
        self._client = client

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """
        Run a block in one transaction, translating datastore errors.

        Commits on success, rolls back on any exception.
        """
        try:
            with self._client.session() as session, session.begin():
                yield session
        except DBAPIError as e:
            if e.connection_invalidated:
                raise ConnectionError(_describe(e)) from e
            raise StorageError(_describe(e)) from e
        except SQLAlchemyError as e:
            raise StorageError(_describe(e)) from e

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(
        self,
        email: str,
        password_hash: str,
        display_name: Optional[str],
    ) -> User:
        with self._transaction() as session:
            row = UserRow(email=email, password_hash=password_hash, display_name=display_name)
            session.add(row)
            try:
                session.flush()
            except IntegrityError as e:
                raise DuplicateError("Email is already registered") from e
            return User.model_validate(row, from_attributes=True)

    def get_user_by_email(self, email: str) -> Optional[StoredUser]:
        with self._transaction() as session:
            row = session.scalar(select(UserRow).where(UserRow.email == email))
            return StoredUser.model_validate(row, from_attributes=True) if row else None

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._transaction() as session:
            row = session.get(UserRow, user_id)
            return User.model_validate(row, from_attributes=True) if row else None

    def update_display_name(self, user_id: UUID, display_name: Optional[str]) -> User:
        with self._transaction() as session:
            row = session.get(UserRow, user_id)
            if row is None:
                raise NotFoundError("User not found")
            row.display_name = display_name
            session.flush()
            return User.model_validate(row, from_attributes=True)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def insert_session(self, token_hash: str, user_id: UUID, expires_at: datetime) -> SessionRecord:
        with self._transaction() as session:
            row = SessionRow(token_hash=token_hash, user_id=user_id, expires_at=expires_at)
            session.add(row)
            session.flush()
            return SessionRecord.model_validate(row, from_attributes=True)

    def get_session(self, token_hash: str) -> Optional[SessionRecord]:
        with self._transaction() as session:
            row = session.get(SessionRow, token_hash)
            return SessionRecord.model_validate(row, from_attributes=True) if row else None

    def delete_session(self, token_hash: str) -> bool:
        with self._transaction() as session:
            result = session.execute(
                delete(SessionRow).where(SessionRow.token_hash == token_hash)
            )
            return result.rowcount > 0

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def _owned_account(self, session: Session, user_id: UUID, code: str) -> AccountRow:
        row = session.scalar(
            select(AccountRow).where(AccountRow.user_id == user_id, AccountRow.code == code)
        )
        if row is None:
            raise NotFoundError("Account not found")
        return row

    def list_accounts(self, user_id: UUID) -> list[Account]:
        with self._transaction() as session:
            rows = session.scalars(
                select(AccountRow)
                .where(AccountRow.user_id == user_id)
                .order_by(AccountRow.code.asc())
            )
            return [Account.model_validate(row, from_attributes=True) for row in rows]

    def insert_account(self, user_id: UUID, code: str, bank_name: str) -> Account:
        with self._transaction() as session:
            row = AccountRow(user_id=user_id, code=code, bank_name=bank_name)
            session.add(row)
            try:
                session.flush()
            except IntegrityError as e:
                raise DuplicateError("Account code already exists") from e
            return Account.model_validate(row, from_attributes=True)

    def insert_accounts_ignoring_conflicts(
        self,
        user_id: UUID,
        accounts: Sequence[tuple[str, str]],
    ) -> int:
        if not accounts:
            return 0

        now = utcnow()
        values = [
            {
                "id": uuid4(),
                "user_id": user_id,
                "code": code,
                "bank_name": bank_name,
                "created_at": now,
            }
            for code, bank_name in accounts
        ]

        with self._transaction() as session:
            dialect = session.get_bind().dialect.name
            if dialect == "sqlite":
                statement = sqlite.insert(AccountRow.__table__)
            elif dialect == "postgresql":
                statement = postgresql.insert(AccountRow.__table__)
            else:
                raise StorageError(f"Conflict-free insert is not supported on {dialect}")

            result = session.execute(
                statement.values(values).on_conflict_do_nothing(
                    index_elements=["user_id", "code"]
                )
            )
            return max(result.rowcount, 0)

    def update_account(self, user_id: UUID, code: str, bank_name: Optional[str]) -> Account:
        with self._transaction() as session:
            row = self._owned_account(session, user_id, code)
            if bank_name is not None:
                row.bank_name = bank_name
                session.flush()
            return Account.model_validate(row, from_attributes=True)

    def delete_account(self, user_id: UUID, code: str) -> str:
        with self._transaction() as session:
            row = self._owned_account(session, user_id, code)
            session.delete(row)
            return code

    # -------------------------------------------------------------------------
    # Months
    # -------------------------------------------------------------------------

    def _owned_month(self, session: Session, user_id: UUID, month_id: UUID) -> Optional[MonthRow]:
        return session.scalar(
            select(MonthRow).where(MonthRow.id == month_id, MonthRow.user_id == user_id)
        )

    def list_months(self, user_id: UUID) -> list[Month]:
        with self._transaction() as session:
            rows = session.scalars(
                select(MonthRow)
                .where(MonthRow.user_id == user_id)
                .order_by(MonthRow.created_at.desc())
            )
            return [Month.model_validate(row, from_attributes=True) for row in rows]

    def get_month(self, user_id: UUID, month_id: UUID) -> Optional[Month]:
        with self._transaction() as session:
            row = self._owned_month(session, user_id, month_id)
            return Month.model_validate(row, from_attributes=True) if row else None

    def get_latest_month(self, user_id: UUID, exclude_id: Optional[UUID] = None) -> Optional[Month]:
        with self._transaction() as session:
            query = select(MonthRow).where(MonthRow.user_id == user_id)
            if exclude_id is not None:
                query = query.where(MonthRow.id != exclude_id)
            row = session.scalars(query.order_by(MonthRow.created_at.desc()).limit(1)).first()
            return Month.model_validate(row, from_attributes=True) if row else None

    def insert_month(
        self,
        user_id: UUID,
        month: MonthCreate,
        carried_outgoings: Sequence[OutgoingCreate] = (),
        month_id: Optional[UUID] = None,
    ) -> Month:
        with self._transaction() as session:
            row = MonthRow(
                id=month_id or uuid4(),
                user_id=user_id,
                month_label=month.month_label,
                wage=month.wage,
                float_amount=month.float_amount,
            )
            session.add(row)
            session.flush()

            for item in carried_outgoings:
                session.add(OutgoingRow(
                    user_id=user_id,
                    month_id=row.id,
                    name=item.name,
                    due_day=item.due_day,
                    account_code=item.account_code,
                    amount=item.amount,
                    is_recurring=item.is_recurring,
                ))
            session.flush()

            return Month.model_validate(row, from_attributes=True)

    def update_month(self, user_id: UUID, month_id: UUID, changes: dict[str, Any]) -> Month:
        with self._transaction() as session:
            row = self._owned_month(session, user_id, month_id)
            if row is None:
                raise NotFoundError("Month not found")
            _apply_changes(row, changes)
            session.flush()
            return Month.model_validate(row, from_attributes=True)

    def delete_month(self, user_id: UUID, month_id: UUID) -> UUID:
        with self._transaction() as session:
            row = self._owned_month(session, user_id, month_id)
            if row is None:
                raise NotFoundError("Month not found")
            session.delete(row)
            return month_id

    # -------------------------------------------------------------------------
    # Outgoings
    # -------------------------------------------------------------------------

    def _owned_outgoing(self, session: Session, user_id: UUID, outgoing_id: UUID) -> OutgoingRow:
        row = session.scalar(
            select(OutgoingRow).where(OutgoingRow.id == outgoing_id, OutgoingRow.user_id == user_id)
        )
        if row is None:
            raise NotFoundError("Monthly outgoing not found")
        return row

    def list_outgoings(self, user_id: UUID, month_id: UUID) -> list[Outgoing]:
        with self._transaction() as session:
            rows = session.scalars(
                select(OutgoingRow)
                .where(OutgoingRow.user_id == user_id, OutgoingRow.month_id == month_id)
                .order_by(OutgoingRow.due_day.asc(), OutgoingRow.created_at.asc())
            )
            return [Outgoing.model_validate(row, from_attributes=True) for row in rows]

    def insert_outgoing(self, user_id: UUID, outgoing: OutgoingCreate) -> Outgoing:
        with self._transaction() as session:
            row = OutgoingRow(user_id=user_id, **outgoing.model_dump())
            session.add(row)
            session.flush()
            return Outgoing.model_validate(row, from_attributes=True)

    def update_outgoing(self, user_id: UUID, outgoing_id: UUID, changes: dict[str, Any]) -> Outgoing:
        with self._transaction() as session:
            row = self._owned_outgoing(session, user_id, outgoing_id)
            _apply_changes(row, changes)
            session.flush()
            return Outgoing.model_validate(row, from_attributes=True)

    def delete_outgoing(self, user_id: UUID, outgoing_id: UUID) -> UUID:
        with self._transaction() as session:
            row = self._owned_outgoing(session, user_id, outgoing_id)
            session.delete(row)
            return outgoing_id

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    def _owned_transfer(self, session: Session, user_id: UUID, transfer_id: UUID) -> TransferRow:
        row = session.scalar(
            select(TransferRow).where(TransferRow.id == transfer_id, TransferRow.user_id == user_id)
        )
        if row is None:
            raise NotFoundError("Transfer not found")
        return row

    def list_transfers(self, user_id: UUID, month_id: UUID) -> list[Transfer]:
        with self._transaction() as session:
            rows = session.scalars(
                select(TransferRow)
                .where(TransferRow.user_id == user_id, TransferRow.month_id == month_id)
                .order_by(TransferRow.created_at.asc())
            )
            return [Transfer.model_validate(row, from_attributes=True) for row in rows]

    def insert_transfer(self, user_id: UUID, transfer: TransferCreate) -> Transfer:
        with self._transaction() as session:
            row = TransferRow(user_id=user_id, **transfer.model_dump())
            session.add(row)
            session.flush()
            return Transfer.model_validate(row, from_attributes=True)

    def update_transfer(self, user_id: UUID, transfer_id: UUID, changes: dict[str, Any]) -> Transfer:
        with self._transaction() as session:
            row = self._owned_transfer(session, user_id, transfer_id)
            _apply_changes(row, changes)
            session.flush()
            return Transfer.model_validate(row, from_attributes=True)

    def delete_transfer(self, user_id: UUID, transfer_id: UUID) -> UUID:
        with self._transaction() as session:
            row = self._owned_transfer(session, user_id, transfer_id)
            session.delete(row)
            return transfer_id
