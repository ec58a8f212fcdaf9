# ============================================================================
# SEED LOADER
# ============================================================================
# STATUS: Infrastructure - Duplicate-safe seed insert
# PURPOSE: Insert the seed records in one atomic multi-row statement that
#          skips rows whose natural key already exists
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: load_seed, build_insert
# DEPENDENCIES: psycopg.sql, core.models, exceptions
# PATTERNS: INSERT ... ON CONFLICT DO NOTHING, single transaction
# ============================================================================
"""
Idempotent Loader.

One statement, one transaction:

    INSERT INTO "app"."users" ("username", "email", ...)
    VALUES (%s, %s, ...), (%s, %s, ...), ...
    ON CONFLICT ("username") DO NOTHING

Existing rows are neither duplicated nor overwritten. The conflict target
is the natural key only, so any other constraint violation (NOT NULL,
value too long) still fails the whole batch, which is rolled back.

The returned count is cursor.rowcount: rows actually inserted, 0 on a
repeat run. It is informational; callers must not branch on it.
"""

from typing import Iterable, Optional

import psycopg
from psycopg import sql

from core.models import CollectionSpec, SeedDataset, SeedRecord
from exceptions import ContractViolationError, LoadError
from util_logger import LoggerFactory, ComponentType
from .database_utils import qualified_name, render_sql, rollback_quietly

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "SeedLoader")


def build_insert(namespace: str, collection: CollectionSpec, row_count: int) -> sql.Composed:
    """Multi-row INSERT with row_count placeholder tuples."""
    if row_count < 1:
        raise ValueError("build_insert needs at least one row")

    fields = collection.field_names
    row_placeholders = sql.SQL("({})").format(
        sql.SQL(", ").join(sql.Placeholder() for _ in fields)
    )

    return sql.SQL("INSERT INTO {} ({}) VALUES {} ON CONFLICT ({}) DO NOTHING").format(
        qualified_name(namespace, collection.name),
        sql.SQL(", ").join(sql.Identifier(name) for name in fields),
        sql.SQL(", ").join(row_placeholders for _ in range(row_count)),
        sql.Identifier(collection.natural_key)
    )


def load_seed(
    conn,
    namespace: str,
    dataset: Optional[SeedDataset] = None,
    *,
    collection: Optional[CollectionSpec] = None,
    records: Optional[Iterable[SeedRecord]] = None
) -> int:
    """
    Insert seed records, skipping natural keys already present.

    Pass either a validated SeedDataset, or a collection plus records
    (validated here by building the dataset).

    Returns:
        Number of rows actually inserted

    Raises:
        LoadError: the batch failed and was rolled back
    """
    if dataset is None:
        if collection is None:
            raise ContractViolationError("load_seed() needs a dataset or a collection")
        dataset = SeedDataset(collection=collection, records=tuple(records or ()))

    collection = dataset.collection
    target = f"{namespace}.{collection.name}"

    if not dataset.records:
        logger.info(f"⏭️ No seed records for {target}; nothing to insert")
        return 0

    stmt = build_insert(namespace, collection, len(dataset.records))
    params = [value for record in dataset.records for value in record.as_row(collection)]

    logger.info(f"📥 Loading {len(dataset.records)} seed records into {target}")
    logger.debug(f"   {render_sql(stmt)}")

    try:
        with conn.cursor() as cur:
            cur.execute(stmt, params)
            inserted = cur.rowcount
        conn.commit()
    except psycopg.Error as e:
        logger.error(f"❌ Seed load into {target} failed: {type(e).__name__}: {e}")
        rollback_quietly(conn)
        raise LoadError(f"Could not load seed records into {target}", cause=e) from e

    inserted = max(inserted, 0)
    skipped = len(dataset.records) - inserted
    logger.info(f"✅ Inserted {inserted} row(s) into {target} ({skipped} already present)")
    return inserted
