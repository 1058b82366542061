"""Mapping layer package for column selection, context aggregation and row transforms."""

from .column_mapper import ColumnMapper
from .context_aggregator import (
    MAPPING_CONTEXT_COMPATIBILITY_ALIAS_KEY,
    MAPPING_CONTEXT_GENERATOR_TAG_KEY,
    MAPPING_CONTEXT_IMPORT_DATE_KEY,
    MAPPING_CONTEXT_LEGACY_DATA_KEY,
    MAPPING_CONTEXT_SUMMARY_TEXT_KEY,
    mapping_build_context_payload,
    mapping_serialize_context_payload,
)
from .interfaces import (
    CandidateRecord,
    FieldMapping,
    IdentityValidationResult,
    RawRow,
    RowRejection,
    RowTransformBatch,
    RowTransformPort,
)
from .service import (
    ROW_REJECTION_IDENTITY_TOO_SHORT,
    ROW_REJECTION_UNEXPECTED_ERROR,
    RowTransformConfig,
    RowTransformService,
)

__all__ = [
    "CandidateRecord",
    "ColumnMapper",
    "FieldMapping",
    "IdentityValidationResult",
    "MAPPING_CONTEXT_COMPATIBILITY_ALIAS_KEY",
    "MAPPING_CONTEXT_GENERATOR_TAG_KEY",
    "MAPPING_CONTEXT_IMPORT_DATE_KEY",
    "MAPPING_CONTEXT_LEGACY_DATA_KEY",
    "MAPPING_CONTEXT_SUMMARY_TEXT_KEY",
    "ROW_REJECTION_IDENTITY_TOO_SHORT",
    "ROW_REJECTION_UNEXPECTED_ERROR",
    "RawRow",
    "RowRejection",
    "RowTransformBatch",
    "RowTransformConfig",
    "RowTransformPort",
    "RowTransformService",
    "mapping_build_context_payload",
    "mapping_serialize_context_payload",
]
