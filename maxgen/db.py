"""PostgreSQL connection helpers shared by the repositories."""
from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Callable, Iterator

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor

from .app.errors import DataLayerError
from .config import Settings

ConnectionFactory = Callable[[], PgConnection]


def connection_factory(settings: Settings) -> ConnectionFactory:
    """Return a callable opening a new connection to the hosted database."""

    return partial(
        psycopg2.connect,
        settings.database_url,
        connect_timeout=settings.db_connect_timeout,
    )


def translate_error(exc: psycopg2.Error) -> DataLayerError:
    """Convert a driver error into a :class:`DataLayerError`."""

    message = (getattr(exc, "pgerror", None) or str(exc) or exc.__class__.__name__).strip()
    caller_fault = isinstance(exc, (psycopg2.IntegrityError, psycopg2.DataError))
    return DataLayerError(message, caller_fault=caller_fault)


class PostgresRepository:
    """Base class handing out dict cursors inside a single transaction."""

    def __init__(self, conn_factory: ConnectionFactory) -> None:
        self._conn_factory = conn_factory

    @contextmanager
    def _cursor(self) -> Iterator[PgCursor]:
        try:
            connection = self._conn_factory()
        except psycopg2.Error as exc:
            raise translate_error(exc) from exc

        try:
            cursor = connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
            try:
                yield cursor
                connection.commit()
            except psycopg2.Error as exc:
                connection.rollback()
                raise translate_error(exc) from exc
            except Exception:
                connection.rollback()
                raise
            finally:
                cursor.close()
        finally:
            connection.close()
