"""
Randomized model factories — anti-overfitting design.

Every factory call generates randomized non-identity fields
(names, emails, table suffixes) so tests cannot rely on specific
default values.
"""

import random
import string


def _random_suffix(length: int = 6) -> str:
    """Generate random alphanumeric suffix."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def make_collection_spec(name: str = None, **overrides):
    """
    Build a CollectionSpec dict with a random table name.

    Fields: code (natural key), label (nullable), quantity.

    Returns:
        dict suitable for CollectionSpec(**result)
    """
    from core.models.enums import FieldType

    base = {
        "name": name or f"items_{_random_suffix()}",
        "natural_key": "code",
        "fields": [
            {"name": "code", "type": FieldType.VARCHAR, "max_length": 32, "nullable": False},
            {"name": "label", "type": FieldType.TEXT},
            {"name": "quantity", "type": FieldType.INTEGER, "nullable": False},
        ],
    }
    base.update(overrides)
    return base


def make_seed_record(code: str = None, **overrides):
    """
    Build values for one record of make_collection_spec().

    Returns:
        dict suitable for SeedRecord(values=result)
    """
    suffix = _random_suffix()
    base = {
        "code": code or f"c-{suffix}",
        "label": random.choice([None, f"Label {suffix}"]),
        "quantity": random.randint(0, 9999),
    }
    base.update(overrides)
    return base


def make_seed_dataset(record_count: int = 5, collection=None):
    """
    Build a validated SeedDataset with distinct natural keys.

    Returns:
        SeedDataset
    """
    from core.models import CollectionSpec, SeedDataset, SeedRecord

    spec = collection or CollectionSpec(**make_collection_spec())
    codes = [f"c{i:03d}-{_random_suffix()}" for i in range(record_count)]
    return SeedDataset(
        collection=spec,
        records=[SeedRecord(values=make_seed_record(code)) for code in codes],
    )


def make_user_values(username: str = None, **overrides):
    """
    Build values for one record of the built-in users collection.
    """
    suffix = _random_suffix()
    name = username or f"user_{suffix}"
    base = {
        "username": name,
        "email": f"{name}@example.org",
        "full_name": random.choice([None, f"User {suffix.upper()}"]),
        "role": random.choice(["admin", "editor", "viewer"]),
        "active": random.choice([True, False]),
    }
    base.update(overrides)
    return base
