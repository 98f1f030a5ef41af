from enum import Enum


class ErrorCode(str, Enum):
    # --- Validation ---
    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    PARAMETER_MISMATCH = "PARAMETER_MISMATCH"

    # --- Driver / DB ---
    DRIVER_FAILURE = "DRIVER_FAILURE"

    # --- Introspection ---
    SCHEMA_INTROSPECTION_FAILED = "SCHEMA_INTROSPECTION_FAILED"
