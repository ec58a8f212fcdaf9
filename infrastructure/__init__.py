"""
Infrastructure Package - Lazy Loading Implementation.

Provides the database-facing components of the bootstrap client with lazy
loading: a component module is imported, and its logger created, on first
access.

Components:
    ConnectionAcquirer   - bounded fixed-interval connect + probe
    ensure_schema        - conditional namespace/collection DDL
    verify_schema        - drift report against information_schema
    load_seed            - INSERT ... ON CONFLICT DO NOTHING batch
    report               - lazy read-back generator

Usage:
    from infrastructure import ConnectionAcquirer, ensure_schema
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import ConnectionAcquirer as _ConnectionAcquirer
    from .schema_initializer import ensure_schema as _ensure_schema
    from .seed_loader import load_seed as _load_seed
    from .record_reader import report as _report


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "ConnectionAcquirer":
        from .connection import ConnectionAcquirer
        return ConnectionAcquirer

    # Schema
    elif name == "ensure_schema":
        from .schema_initializer import ensure_schema
        return ensure_schema
    elif name == "verify_schema":
        from .schema_initializer import verify_schema
        return verify_schema

    # Data
    elif name == "load_seed":
        from .seed_loader import load_seed
        return load_seed
    elif name == "report":
        from .record_reader import report
        return report

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "ConnectionAcquirer",
    "ensure_schema",
    "verify_schema",
    "load_seed",
    "report",
]
