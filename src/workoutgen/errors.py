"""Structured errors and the stable error-code taxonomy.

Hard failures are raised as WorkoutError. Expected, recoverable outcomes
(nothing to undo, same exercise selected) are returned as result objects.
"""

from __future__ import annotations

from typing import Any, Literal

ErrorCode = Literal[
    "INVALID_PARAMETERS",
    "NO_EXERCISES_AVAILABLE",
    "GENERATION_TIMEOUT",
    "VALIDATION_FAILED",
    "INVALID_WORKOUT",
    "INVALID_POSITION",
    "INVALID_INDEX",
    "INVALID_CURRENT_EXERCISE",
    "INVALID_NEW_EXERCISE",
    "MUSCLE_GROUP_MISMATCH",
    "CONSTRAINT_VIOLATION",
    "WORKOUT_VALIDATION_FAILED",
    "DATABASE_ERROR",
    "UNEXPECTED_ERROR",
]

ErrorClass = Literal[
    "parameters",
    "generation",
    "replacement",
    "catalog",
    "other",
]

ERROR_CLASS_BY_CODE: dict[str, ErrorClass] = {
    "INVALID_PARAMETERS": "parameters",
    "INVALID_WORKOUT": "parameters",
    "INVALID_POSITION": "parameters",
    "INVALID_INDEX": "parameters",
    "INVALID_CURRENT_EXERCISE": "parameters",
    "INVALID_NEW_EXERCISE": "parameters",
    "NO_EXERCISES_AVAILABLE": "catalog",
    "DATABASE_ERROR": "catalog",
    "GENERATION_TIMEOUT": "generation",
    "VALIDATION_FAILED": "generation",
    "MUSCLE_GROUP_MISMATCH": "replacement",
    "CONSTRAINT_VIOLATION": "replacement",
    "WORKOUT_VALIDATION_FAILED": "replacement",
}


class WorkoutError(Exception):
    def __init__(
        self,
        *,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"WorkoutError(code={self.code!r}, message={self.message!r})"

    @property
    def error_class(self) -> ErrorClass:
        return classify_error_code(self.code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "class": self.error_class,
            "message": self.message,
            "details": self.details,
        }


def classify_error_code(error_code: str | None) -> ErrorClass:
    normalized = str(error_code or "").strip().upper()
    if not normalized:
        return "other"
    return ERROR_CLASS_BY_CODE.get(normalized, "other")


def is_caller_error(error_code: str | None) -> bool:
    """True when the failure stems from bad input rather than data or search."""
    return classify_error_code(error_code) in {"parameters", "replacement"}


def workout_error_taxonomy_v1() -> dict[str, object]:
    return {
        "schema_version": "workout_error_taxonomy.v1",
        "classes": ["parameters", "generation", "replacement", "catalog", "other"],
        "code_to_class": dict(ERROR_CLASS_BY_CODE),
        "caller_error_classes": ["parameters", "replacement"],
    }
