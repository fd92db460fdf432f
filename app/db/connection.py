from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

import pg8000.dbapi as pgapi

from app.core.config import db_configured, settings
from app.db.schema import ensure_schema

logger = logging.getLogger(__name__)

APPLICATION_NAME = "raffle-tickets-api"

T = TypeVar("T")

_local = threading.local()
_schema_ready = False
_schema_lock = threading.Lock()


def _connect(autocommit: bool):
    if not db_configured():
        raise RuntimeError("Database configuration is missing")
    conn = pgapi.connect(
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
        user=settings.db_user,
        password=settings.db_password,
        application_name=APPLICATION_NAME,
    )
    conn.autocommit = autocommit
    if settings.auto_migrate:
        _ensure_schema(conn)
    return conn


def _ensure_schema(conn) -> None:
    global _schema_ready
    if _schema_ready:
        return
    with _schema_lock:
        if not _schema_ready:
            ensure_schema(conn)
            _schema_ready = True


def _is_alive(conn) -> bool:
    try:
        cur = conn.cursor()
        cur.execute("SELECT 1")
        cur.close()
    except Exception:
        logger.info("Dropping stale database connection")
        return False
    return True


def get_conn():
    """Per-thread autocommit connection for read queries."""
    conn = getattr(_local, "conn", None)
    if conn is None or not _is_alive(conn):
        conn = _connect(autocommit=True)
        _local.conn = conn
    return conn


def _rows(cur) -> list[dict]:
    columns = [col[0] for col in cur.description]
    return [dict(zip(columns, row)) for row in cur.fetchall()]


def query_all(conn, sql: str, params: tuple = ()) -> list[dict]:
    cur = conn.cursor()
    try:
        cur.execute(sql, params)
        return _rows(cur)
    finally:
        cur.close()


def query_one(conn, sql: str, params: tuple = ()) -> Optional[dict]:
    rows = query_all(conn, sql, params)
    return rows[0] if rows else None


def fetch_all(sql: str, params: tuple = ()) -> list[dict]:
    return query_all(get_conn(), sql, params)


def fetch_one(sql: str, params: tuple = ()) -> Optional[dict]:
    return query_one(get_conn(), sql, params)


def run_transaction(handler: Callable[..., T]) -> T:
    """Run ``handler(conn)`` on a dedicated connection and commit its work.

    Any exception rolls the transaction back (releasing row and advisory
    locks) and is re-raised unchanged.
    """
    conn = _connect(autocommit=False)
    try:
        result = handler(conn)
        conn.commit()
        return result
    except Exception:
        conn.rollback()
        logger.debug("Transaction rolled back", exc_info=True)
        raise
    finally:
        conn.close()
