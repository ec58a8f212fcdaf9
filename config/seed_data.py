# ============================================================================
# SEED DATA
# ============================================================================
# STATUS: Configuration - default collection and seed records
# PURPOSE: Fixed dataset loaded on first boot, plus loader for a JSON
#          replacement given by SEED_FILE
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: USERS_COLLECTION, USERS_SEED_RECORDS, default_seed_dataset, load_seed_file
# ============================================================================
"""
Seed Data.

The default dataset is a `users` table keyed by `username` with five rows.
It is a constant: runs never compute or mutate it.

A JSON seed file may replace it at configuration time. Two shapes are
accepted:

    {"collection": {"name": ..., "natural_key": ..., "fields": [...]},
     "records": [{...}, ...]}

    [{...}, ...]      # records only, default collection

Usage:
    from config.seed_data import default_seed_dataset, load_seed_file

    dataset = default_seed_dataset()
    dataset = load_seed_file("seed/users.json")
"""

import json
from pathlib import Path

from pydantic import ValidationError

from core.models import CollectionSpec, FieldSpec, FieldType, SeedDataset, SeedRecord
from exceptions import ConfigurationError


# ============================================================================
# USERS
# ============================================================================

USERS_COLLECTION = CollectionSpec(
    name="users",
    natural_key="username",
    fields=(
        FieldSpec(name="username", type=FieldType.VARCHAR, max_length=64, nullable=False),
        FieldSpec(name="email", type=FieldType.VARCHAR, max_length=255, nullable=False),
        FieldSpec(name="full_name", type=FieldType.VARCHAR, max_length=128),
        FieldSpec(name="role", type=FieldType.VARCHAR, max_length=32, nullable=False),
        FieldSpec(name="active", type=FieldType.BOOLEAN, nullable=False),
    ),
)

USERS_SEED_RECORDS = (
    SeedRecord(values={
        "username": "alice", "email": "alice@example.com",
        "full_name": "Alice Martin", "role": "admin", "active": True,
    }),
    SeedRecord(values={
        "username": "bob", "email": "bob@example.com",
        "full_name": "Bob Chen", "role": "editor", "active": True,
    }),
    SeedRecord(values={
        "username": "carol", "email": "carol@example.com",
        "full_name": "Carol Diaz", "role": "editor", "active": True,
    }),
    SeedRecord(values={
        "username": "dave", "email": "dave@example.com",
        "full_name": "Dave Okafor", "role": "viewer", "active": True,
    }),
    SeedRecord(values={
        "username": "erin", "email": "erin@example.com",
        "full_name": None, "role": "viewer", "active": False,
    }),
)


def default_seed_dataset() -> SeedDataset:
    """The built-in users dataset."""
    return SeedDataset(collection=USERS_COLLECTION, records=USERS_SEED_RECORDS)


def load_seed_file(path: str) -> SeedDataset:
    """
    Load a seed dataset from JSON.

    Raises:
        ConfigurationError: file missing, unreadable, not UTF-8 JSON, or records not conforming
    """
    seed_path = Path(path)
    if not seed_path.is_file():
        raise ConfigurationError(f"Seed file not found: {seed_path}")

    try:
        payload = json.loads(seed_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Seed file {seed_path} could not be read: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Seed file {seed_path} is not valid JSON: {e}") from e

    if isinstance(payload, list):
        collection = USERS_COLLECTION
        records = payload
    elif isinstance(payload, dict) and "records" in payload:
        collection = payload.get("collection", USERS_COLLECTION)
        records = payload["records"]
    else:
        raise ConfigurationError(
            f"Seed file {seed_path} must be a list of records or an object with 'records'"
        )

    try:
        return SeedDataset(
            collection=collection,
            records=[SeedRecord(values=r) for r in records],
        )
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Seed file {seed_path} is invalid: {e}") from e
