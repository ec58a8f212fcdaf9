"""
Record Reader.

Read-back of the seeded collection for verification. `report()` is a
generator: nothing is sent to the database until the first row is pulled,
and the sequence can be consumed once.

No ORDER BY: rows come back in whatever order the store returns them.
Callers that need a stable order sort on their side.

Exports:
    report: Lazily yield every record of a collection
    build_select: SELECT statement for a collection
"""

from typing import Any, Dict, Iterator

import psycopg
from psycopg import sql

from core.models import CollectionSpec
from exceptions import ReadError
from util_logger import LoggerFactory, ComponentType
from .database_utils import qualified_name, render_sql, rollback_quietly

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RecordReader")


def build_select(namespace: str, collection: CollectionSpec) -> sql.Composed:
    return sql.SQL("SELECT {} FROM {}").format(
        sql.SQL(", ").join(sql.Identifier(name) for name in collection.field_names),
        qualified_name(namespace, collection.name)
    )


def report(conn, namespace: str, collection: CollectionSpec) -> Iterator[Dict[str, Any]]:
    """
    Yield every record of namespace.collection as a dict keyed by field name.

    Raises (on iteration):
        ReadError: the query failed, at execute time or mid-fetch
    """
    target = f"{namespace}.{collection.name}"
    stmt = build_select(namespace, collection)
    logger.debug(f"🔍 {render_sql(stmt)}")

    count = 0
    try:
        with conn.cursor() as cur:
            cur.execute(stmt)
            for row in cur:
                count += 1
                yield {name: row[name] for name in collection.field_names}
        conn.rollback()
    except psycopg.Error as e:
        logger.error(f"❌ Reading {target} failed after {count} row(s): {type(e).__name__}: {e}")
        rollback_quietly(conn)
        raise ReadError(f"Could not read {target}", cause=e) from e

    logger.info(f"📋 Read {count} row(s) from {target}")
