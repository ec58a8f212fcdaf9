# ============================================================================
# SCHEMA INITIALIZER
# ============================================================================
# STATUS: Infrastructure - Idempotent namespace and collection creation
# PURPOSE: Conditional DDL for the bootstrap target (schema + table with a
#          UNIQUE natural key) and a read-only drift check
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ensure_schema, verify_schema, build_create_schema,
#          build_create_table, column_type_sql, SQL_TYPE_MAP
# DEPENDENCIES: psycopg.sql, core.models, exceptions
# PATTERNS: Idempotent DDL (IF NOT EXISTS), single transaction
# ============================================================================
"""
Idempotent Initializer.

Creates the namespace (PostgreSQL schema) and the record collection
(table) only if they are absent. Idempotence comes from the DDL itself:

    CREATE SCHEMA IF NOT EXISTS "app"
    CREATE TABLE IF NOT EXISTS "app"."users" (
        "username" VARCHAR(64) NOT NULL,
        "email" VARCHAR(255) NOT NULL,
        ...,
        CONSTRAINT "users_username_key" UNIQUE ("username")
    )

"Already exists" errors are never caught and ignored; a failure here is a
real failure (permissions, bad type, dropped connection) and raises
SchemaError after rolling back.

IF NOT EXISTS does not compare definitions: a pre-existing table with
different columns is left as is. verify_schema() reports such drift by
reading information_schema.columns and pg_index; it never alters anything.

Usage:
    from infrastructure.schema_initializer import ensure_schema, verify_schema

    ensure_schema(conn, "app", collection)
    drift = verify_schema(conn, "app", collection)
    if drift["has_drift"]:
        ...
"""

from typing import Any, Dict, List

import psycopg
from psycopg import sql

from core.models import CollectionSpec, FieldSpec, FieldType
from exceptions import SchemaError
from util_logger import LoggerFactory, ComponentType
from .database_utils import qualified_name, render_sql, rollback_quietly

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "SchemaInitializer")


# ============================================================================
# TYPE MAPPING
# ============================================================================

SQL_TYPE_MAP = {
    FieldType.TEXT: "TEXT",
    FieldType.VARCHAR: "VARCHAR",
    FieldType.INTEGER: "INTEGER",
    FieldType.BIGINT: "BIGINT",
    FieldType.NUMERIC: "NUMERIC",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.DATE: "DATE",
    FieldType.TIMESTAMPTZ: "TIMESTAMPTZ",
}

# information_schema.columns.data_type for each field type
INFORMATION_SCHEMA_TYPES = {
    FieldType.TEXT: "text",
    FieldType.VARCHAR: "character varying",
    FieldType.INTEGER: "integer",
    FieldType.BIGINT: "bigint",
    FieldType.NUMERIC: "numeric",
    FieldType.BOOLEAN: "boolean",
    FieldType.DATE: "date",
    FieldType.TIMESTAMPTZ: "timestamp with time zone",
}


def column_type_sql(field: FieldSpec) -> str:
    """PostgreSQL type for a field, e.g. VARCHAR(64)."""
    base = SQL_TYPE_MAP[field.type]
    if field.type == FieldType.VARCHAR:
        return f"{base}({int(field.max_length)})"
    return base


# ============================================================================
# STATEMENT BUILDERS
# ============================================================================

def build_create_schema(namespace: str) -> sql.Composed:
    return sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(namespace))


def build_create_table(namespace: str, collection: CollectionSpec) -> sql.Composed:
    """
    CREATE TABLE IF NOT EXISTS with one column per field and a named
    UNIQUE constraint on the natural key.
    """
    columns = []
    for field in collection.fields:
        not_null = not field.nullable or field.name == collection.natural_key
        columns.append(sql.SQL("{} {}{}").format(
            sql.Identifier(field.name),
            sql.SQL(column_type_sql(field)),
            sql.SQL(" NOT NULL") if not_null else sql.SQL("")
        ))

    constraint = sql.SQL("CONSTRAINT {} UNIQUE ({})").format(
        sql.Identifier(f"{collection.name}_{collection.natural_key}_key"),
        sql.Identifier(collection.natural_key)
    )

    return sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
        qualified_name(namespace, collection.name),
        sql.SQL(", ").join(columns + [constraint])
    )


# ============================================================================
# OPERATIONS
# ============================================================================

def ensure_schema(conn, namespace: str, collection: CollectionSpec) -> None:
    """
    Create the namespace and collection if absent, in one transaction.

    Raises:
        SchemaError: any database error; the transaction is rolled back
    """
    target = f"{namespace}.{collection.name}"
    logger.info(f"📦 Ensuring namespace '{namespace}' and collection '{target}'")

    statements = [
        build_create_schema(namespace),
        build_create_table(namespace, collection),
    ]

    try:
        with conn.cursor() as cur:
            for stmt in statements:
                logger.debug(f"   {render_sql(stmt)}")
                cur.execute(stmt)
        conn.commit()
    except psycopg.Error as e:
        logger.error(f"❌ Schema creation for {target} failed: {type(e).__name__}: {e}")
        rollback_quietly(conn)
        raise SchemaError(f"Could not create {target}", cause=e) from e

    logger.info(f"✅ Namespace and collection ready: {target}")


def verify_schema(conn, namespace: str, collection: CollectionSpec) -> Dict[str, Any]:
    """
    Compare the live table with the collection spec.

    Read-only. Reports columns the collection declares but the table lacks,
    columns whose type differs, columns the collection does not declare,
    and a missing single-column unique index on the natural key, without
    which ON CONFLICT loads are rejected by the server.

    Returns:
        {
            "exists": bool,
            "has_drift": bool,
            "missing_columns": [...],
            "type_mismatches": {"col": {"expected": ..., "actual": ...}},
            "extra_columns": [...],
            "missing_unique_key": bool
        }

    Raises:
        SchemaError: the catalog query failed
    """
    query = sql.SQL(
        "SELECT column_name, data_type FROM information_schema.columns "
        "WHERE table_schema = %s AND table_name = %s ORDER BY ordinal_position"
    )
    # Unique constraints and plain unique indexes both satisfy ON CONFLICT;
    # partial and expression indexes do not
    unique_query = sql.SQL(
        "SELECT a.attname AS column_name FROM pg_index i "
        "JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = i.indkey[0] "
        "WHERE i.indrelid = to_regclass(%s) AND i.indisunique AND i.indnkeyatts = 1 "
        "AND i.indpred IS NULL AND i.indexprs IS NULL"
    )
    regclass = render_sql(qualified_name(namespace, collection.name))

    try:
        with conn.cursor() as cur:
            cur.execute(query, [namespace, collection.name])
            rows = cur.fetchall()
            cur.execute(unique_query, [regclass])
            unique_columns = {row["column_name"] for row in cur.fetchall()}
        conn.rollback()
    except psycopg.Error as e:
        rollback_quietly(conn)
        raise SchemaError(
            f"Could not inspect {namespace}.{collection.name}", cause=e
        ) from e

    actual = {row["column_name"]: row["data_type"] for row in rows}

    missing: List[str] = []
    mismatched: Dict[str, Dict[str, str]] = {}
    for field in collection.fields:
        if field.name not in actual:
            missing.append(field.name)
            continue
        expected_type = INFORMATION_SCHEMA_TYPES[field.type]
        if actual[field.name] != expected_type:
            mismatched[field.name] = {"expected": expected_type, "actual": actual[field.name]}

    extra = [name for name in actual if name not in collection.field_names]
    missing_unique_key = bool(actual) and collection.natural_key not in unique_columns

    report = {
        "exists": bool(actual),
        "has_drift": bool(missing or mismatched or missing_unique_key or not actual),
        "missing_columns": missing,
        "type_mismatches": mismatched,
        "extra_columns": extra,
        "missing_unique_key": missing_unique_key,
    }

    if report["has_drift"]:
        logger.warning(
            f"⚠️ {namespace}.{collection.name} does not match its collection spec: "
            f"missing={missing}, type_mismatches={list(mismatched)}, "
            f"missing_unique_key={missing_unique_key}"
        )
    elif extra:
        logger.info(f"   {namespace}.{collection.name} has extra columns: {extra}")
    else:
        logger.debug(f"   {namespace}.{collection.name} matches its spec")

    return report
