"""
Engine and session management.

Usage:
    db = Database("sqlite:///reviewgate.db")
    db.create_all()

    with db.session() as session:
        session.get(ProviderRecord, provider_id)

    with db.transaction() as session:
        ...  # serialized with other writers in this process
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager, nullcontext

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reviewgate.storage.models import Base

logger = logging.getLogger(__name__)


class Database:
  """Owns the engine and hands out sessions.

  An in-memory SQLite database lives on a single shared connection
  (``StaticPool``), where one session could read another's uncommitted
  writes. Every session on such a database takes the writer lock, so
  readers still never see zero or two active providers.
  """

  def __init__(self, url: str, *, echo: bool = False):
    self.url = url
    self.engine = _create_engine(url, echo=echo)
    self._session_factory = sessionmaker(self.engine, expire_on_commit=False)
    self._write_lock = threading.RLock()
    self._shared_connection = _is_memory_sqlite(url)

  def create_all(self) -> None:
    Base.metadata.create_all(self.engine)

  def dispose(self) -> None:
    self.engine.dispose()

  @contextmanager
  def session(self) -> Generator[Session, None, None]:
    """Yield a session; commit on success, roll back on error."""
    with self._write_lock if self._shared_connection else nullcontext():
      session = self._session_factory()
      try:
        yield session
        session.commit()
      except Exception:
        session.rollback()
        raise
      finally:
        session.close()

  @contextmanager
  def transaction(self) -> Generator[Session, None, None]:
    """Like session(), but serialized with other in-process writers."""
    with self._write_lock, self.session() as session:
      yield session


def _is_memory_sqlite(url: str) -> bool:
  parsed = make_url(url)
  return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def _create_engine(url: str, *, echo: bool) -> Engine:
  parsed = make_url(url)
  if parsed.get_backend_name() != "sqlite":
    logger.debug("Creating engine for %s", parsed.get_backend_name())
    return create_engine(url, echo=echo, pool_pre_ping=True)

  in_memory = _is_memory_sqlite(url)
  kwargs: dict = {"connect_args": {"check_same_thread": False}}
  if in_memory:
    kwargs["poolclass"] = StaticPool
  engine = create_engine(url, echo=echo, **kwargs)

  if not in_memory:
    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn, _record):
      cur = dbapi_conn.cursor()
      cur.execute("PRAGMA journal_mode=WAL")
      cur.execute("PRAGMA busy_timeout=5000")
      cur.close()

  return engine
