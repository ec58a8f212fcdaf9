# ============================================================================
# CORE MODELS - RECORD COLLECTION
# ============================================================================
# STATUS: Core data models - collection schema and seed records
# PURPOSE: Pydantic models describing the table the bootstrap creates and
#          the fixed rows it loads
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: FieldSpec, CollectionSpec, SeedRecord, SeedDataset
# DEPENDENCIES: pydantic, core.models.enums
# ============================================================================

"""
Record Collection Models.

A CollectionSpec is the ordered, typed field list of one table plus the
name of its natural-key field. SeedRecords are the fixed rows loaded into
it; a SeedDataset pairs the two and checks that every record conforms.

All models are frozen: a spec or dataset is built once at configuration
time and never mutated during a run.

Example:
    spec = CollectionSpec(
        name="users",
        natural_key="username",
        fields=[
            FieldSpec(name="username", type=FieldType.VARCHAR, max_length=64),
            FieldSpec(name="email", type=FieldType.VARCHAR, max_length=255),
        ],
    )
    dataset = SeedDataset(collection=spec, records=[
        SeedRecord(values={"username": "alice", "email": "alice@example.com"}),
    ])
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import FieldType


# Lowercase PostgreSQL identifier, max 63 bytes
IDENTIFIER_PATTERN = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")


def _check_identifier(value: str, what: str) -> str:
    if not IDENTIFIER_PATTERN.match(value):
        raise ValueError(
            f"{what} '{value}' must be lowercase letters, digits and underscores, "
            f"start with a letter or underscore, max 63 chars"
        )
    return value


class FieldSpec(BaseModel):
    """One typed, named column of a record collection."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Column name")
    type: FieldType = Field(..., description="Column type")
    max_length: Optional[int] = Field(default=None, ge=1, description="Length for VARCHAR columns")
    nullable: bool = Field(default=True, description="Whether NULL is allowed")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_identifier(v, "Field name")

    @model_validator(mode='after')
    def validate_length(self):
        if self.type == FieldType.VARCHAR and self.max_length is None:
            raise ValueError(f"Field '{self.name}': VARCHAR requires max_length")
        if self.type != FieldType.VARCHAR and self.max_length is not None:
            raise ValueError(f"Field '{self.name}': max_length only applies to VARCHAR")
        return self


class CollectionSpec(BaseModel):
    """
    Schema of a record collection (table).

    Fields keep their declared order; that order is used for CREATE TABLE,
    INSERT column lists and the read-back projection. The natural-key
    field gets a UNIQUE NOT NULL constraint regardless of its nullable flag.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Table name within the namespace")
    fields: Tuple[FieldSpec, ...] = Field(..., min_length=1, description="Ordered column list")
    natural_key: str = Field(..., description="Field whose value identifies a record")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_identifier(v, "Collection name")

    @model_validator(mode='after')
    def validate_fields(self):
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Collection '{self.name}' declares duplicate fields: {duplicates}")
        if self.natural_key not in names:
            raise ValueError(
                f"Natural key '{self.natural_key}' is not a field of collection '{self.name}'"
            )
        return self

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)


class SeedRecord(BaseModel):
    """
    A fixed row to be loaded, keyed by field name.

    Conformance to a collection is checked by SeedDataset, not here, so the
    same record type serves any collection.
    """

    model_config = ConfigDict(frozen=True)

    values: Dict[str, Any] = Field(..., description="Field name -> value")

    def natural_key(self, collection: CollectionSpec) -> Any:
        return self.values[collection.natural_key]

    def as_row(self, collection: CollectionSpec) -> Tuple[Any, ...]:
        """Values in the collection's field order."""
        return tuple(self.values[name] for name in collection.field_names)


class SeedDataset(BaseModel):
    """
    A collection spec plus the seed records that belong in it.

    Validates:
    - every record has exactly the collection's fields
    - the natural key is present and non-null in every record
    - non-nullable fields are non-null
    - natural keys are distinct across the dataset
    """

    model_config = ConfigDict(frozen=True)

    collection: CollectionSpec
    records: Tuple[SeedRecord, ...] = Field(default=())

    @model_validator(mode='after')
    def validate_records(self):
        expected = set(self.collection.field_names)
        seen = set()
        for index, record in enumerate(self.records):
            actual = set(record.values)
            if actual != expected:
                missing = sorted(expected - actual)
                extra = sorted(actual - expected)
                raise ValueError(
                    f"Seed record {index} does not match collection '{self.collection.name}' "
                    f"(missing={missing}, unexpected={extra})"
                )
            for spec in self.collection.fields:
                required = not spec.nullable or spec.name == self.collection.natural_key
                if required and record.values[spec.name] is None:
                    raise ValueError(f"Seed record {index}: field '{spec.name}' must not be null")
            key = record.natural_key(self.collection)
            if key in seen:
                raise ValueError(
                    f"Seed record {index}: duplicate natural key "
                    f"{self.collection.natural_key}={key!r}"
                )
            seen.add(key)
        return self

    @property
    def natural_keys(self) -> List[Any]:
        return [r.natural_key(self.collection) for r in self.records]
