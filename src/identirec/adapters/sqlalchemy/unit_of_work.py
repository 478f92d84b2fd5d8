"""SQLAlchemy-backed unit of work for identity resolution."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from identirec.adapters.sqlalchemy.errors import translate_store_errors
from identirec.adapters.sqlalchemy.mappings import start_mappers
from identirec.adapters.sqlalchemy.migrations import upgrade_head
from identirec.adapters.sqlalchemy.repositories import (
    SqlAlchemyContactMergeRepository,
    SqlAlchemyContactRepository,
)
from identirec.config import get_database_config
from identirec.domain.ports.unit_of_work import ContactRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

SERIALIZABLE: Literal["SERIALIZABLE"] = "SERIALIZABLE"


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


def _sqlite_disable_pysqlite_transactions(dbapi_connection: Any, _record: object) -> None:
    # let the BEGIN listener below own transaction boundaries
    dbapi_connection.isolation_level = None


def _sqlite_begin_immediate(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN IMMEDIATE")


def configure_transactions(engine: Engine) -> Engine:
    """Make every transaction on ``engine`` serializable.

    SQLite takes the database write lock when the transaction starts
    (``BEGIN IMMEDIATE``), so resolutions run one after another. Other
    backends use ``SERIALIZABLE`` isolation and surface conflicts as errors.
    """

    if engine.dialect.name != "sqlite":
        return engine.execution_options(isolation_level=SERIALIZABLE)
    if not event.contains(engine, "connect", _sqlite_disable_pysqlite_transactions):
        event.listen(engine, "connect", _sqlite_disable_pysqlite_transactions)
    if not event.contains(engine, "begin", _sqlite_begin_immediate):
        event.listen(engine, "begin", _sqlite_begin_immediate)
    return engine


def create_contact_engine(database_uri: str | None = None, **kwargs: Any) -> Engine:
    """Create an engine with serializable transaction handling installed."""

    engine = create_engine(database_uri or get_database_config().uri, **kwargs)
    return configure_transactions(engine)


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call identirec.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=configure_transactions(self._engine),
                expire_on_commit=False,
            )
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_contact_engine(database_uri)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections.

    One session, hence one database transaction, per ``with`` block.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        with translate_store_errors():
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[ContactRepositories]):
    """Unit of work managing SQLAlchemy sessions for contact reconciliation."""

    def _build_repositories(self, session: Session) -> ContactRepositories:
        return ContactRepositories(
            contacts=SqlAlchemyContactRepository(session),
            merges=SqlAlchemyContactMergeRepository(session),
        )


if TYPE_CHECKING:
    from identirec.domain.ports.unit_of_work import ContactUnitOfWork

    _uow_check: ContactUnitOfWork = SqlAlchemyUnitOfWork()
