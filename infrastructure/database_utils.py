# ============================================================================
# DATABASE UTILITIES
# ============================================================================
# STATUS: Infrastructure - Shared PostgreSQL helpers for the bootstrap stages
# PURPOSE: Qualified identifiers, transaction rollback after a failed stage,
#          SQL rendering for debug logs
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: qualified_name, rollback_quietly, render_sql
# DEPENDENCIES: psycopg
# ============================================================================

"""
Shared PostgreSQL Utilities

Small helpers used by the schema initializer, the seed loader and the
record reader. All identifiers go through psycopg.sql.Identifier; nothing
here builds SQL with string formatting.

Usage:
    from infrastructure.database_utils import qualified_name, rollback_quietly

    stmt = sql.SQL("SELECT * FROM {}").format(qualified_name("app", "users"))
"""

from typing import Any

import psycopg
from psycopg import sql

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "DatabaseUtils")


def qualified_name(namespace: str, table: str) -> sql.Composed:
    """"namespace"."table" as a composable."""
    return sql.SQL("{}.{}").format(sql.Identifier(namespace), sql.Identifier(table))


def render_sql(stmt: Any) -> str:
    """
    Render a statement for logging, without a connection.

    Identifiers are quoted; parameter placeholders stay as %s.
    """
    if isinstance(stmt, sql.Composable):
        return stmt.as_string(None)
    return str(stmt)


def rollback_quietly(conn) -> None:
    """
    Roll back the current transaction after a failed stage.

    A connection that dropped mid-statement cannot roll back; that second
    error is logged and the original failure is the one reported.
    """
    try:
        conn.rollback()
    except psycopg.Error as e:
        logger.warning(f"⚠️ Rollback failed ({type(e).__name__}): {e}")
