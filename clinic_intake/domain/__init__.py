"""Domain models, target schema and value sanitizers shared across layers."""

from .models import HealthStatus
from .sanitizers import (
    DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH,
    domain_sanitize_date,
    domain_sanitize_is_placeholder,
    domain_sanitize_phone,
    domain_sanitize_string,
)
from .target_schema import PATIENT_TARGET_SCHEMA, TargetField, TargetFieldType, TargetSchema
from .timeline import domain_build_stage_event

__all__ = [
    "DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH",
    "HealthStatus",
    "PATIENT_TARGET_SCHEMA",
    "TargetField",
    "TargetFieldType",
    "TargetSchema",
    "domain_build_stage_event",
    "domain_sanitize_date",
    "domain_sanitize_is_placeholder",
    "domain_sanitize_phone",
    "domain_sanitize_string",
]
