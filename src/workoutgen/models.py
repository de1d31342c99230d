"""Core data models for sequence generation and replacement."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Literal

MuscleGroup = Literal["chest", "back", "legs", "shoulders", "arms", "core"]

MUSCLE_GROUPS: tuple[MuscleGroup, ...] = (
    "chest",
    "back",
    "legs",
    "shoulders",
    "arms",
    "core",
)

MIN_WORKOUT_LENGTH = 5
MAX_WORKOUT_LENGTH = 20

# Advisory bounds used by validate_sequence (warnings, not failures)
ADVISORY_MIN_LENGTH = 5
ADVISORY_MAX_LENGTH = 25

HistoryState = Literal["idle", "can_undo", "can_redo", "can_undo_and_redo"]


def is_valid_muscle_group(value: object) -> bool:
    return isinstance(value, str) and value.lower() in MUSCLE_GROUPS


@dataclass(frozen=True)
class Exercise:
    """Catalog entry. Immutable; sequences hold snapshots of these."""

    id: str
    name: str
    muscle_group: MuscleGroup
    equipment: str | None = None
    difficulty: str | None = None

    def snapshot(self) -> Exercise:
        """Shallow copy placed into a sequence."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "muscleGroup": self.muscle_group,
        }
        if self.equipment is not None:
            data["equipment"] = self.equipment
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        return data


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    index: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def error_codes(self) -> list[str]:
        return [e.code for e in self.errors]

    @property
    def warning_codes(self) -> list[str]:
        return [w.code for w in self.warnings]

    def error_messages(self) -> str:
        return "; ".join(e.message for e in self.errors)


@dataclass(frozen=True)
class GenerationMetadata:
    generation_time_ms: int
    attempts: int
    muscle_groups_used: tuple[str, ...]
    pool_size: int
    even_distribution: bool
    exercise_count: int


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    sequence: tuple[Exercise, ...]
    metadata: GenerationMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "sequence": [ex.to_dict() for ex in self.sequence],
            "metadata": asdict(self.metadata),
        }


@dataclass(frozen=True)
class ReplacementRecord:
    position: int
    old_exercise: Exercise
    new_exercise: Exercise
    timestamp: float


@dataclass(frozen=True)
class ReplacementResult:
    success: bool
    replaced: bool
    message: str
    old_exercise: Exercise | None = None
    new_exercise: Exercise | None = None
    position: int | None = None
    history_size: int | None = None


@dataclass(frozen=True)
class HistoryStepResult:
    """Outcome of an undo or redo. Soft failures have success=False."""

    success: bool
    message: str
    restored_exercise: Exercise | None = None
    previous_exercise: Exercise | None = None
    position: int | None = None


@dataclass(frozen=True)
class HistoryStatus:
    can_undo: bool
    can_redo: bool
    size: int
    capacity: int

    @property
    def state(self) -> HistoryState:
        if self.can_undo and self.can_redo:
            return "can_undo_and_redo"
        if self.can_undo:
            return "can_undo"
        if self.can_redo:
            return "can_redo"
        return "idle"


@dataclass(frozen=True)
class ConstraintStats:
    total_exercises: int
    violations: int
    violation_positions: tuple[int, ...]
    is_valid: bool
    muscle_group_distribution: dict[str, int]
