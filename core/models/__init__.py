"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    RunState, RunOutcome, StageStatus, FieldType: Enums
    FieldSpec, CollectionSpec, SeedRecord, SeedDataset: Collection schema and seed data
    StageResult, RunResult: Run results
"""

from .enums import (
    RunState,
    RunOutcome,
    StageStatus,
    FieldType
)

from .collection import (
    FieldSpec,
    CollectionSpec,
    SeedRecord,
    SeedDataset
)

from .results import (
    StageResult,
    RunResult
)

__all__ = [
    'RunState',
    'RunOutcome',
    'StageStatus',
    'FieldType',
    'FieldSpec',
    'CollectionSpec',
    'SeedRecord',
    'SeedDataset',
    'StageResult',
    'RunResult'
]
