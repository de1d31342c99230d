"""Adjacency-constraint validation.

Core constraint: no two consecutive exercises may target the same muscle
group. All functions here are pure; problems are reported as
ValidationResult data, never raised. The only exception is a sequence
argument that is not a list at all (INVALID_WORKOUT).
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence

from workoutgen.errors import WorkoutError
from workoutgen.models import (
    ADVISORY_MAX_LENGTH,
    ADVISORY_MIN_LENGTH,
    ConstraintStats,
    Exercise,
    ValidationIssue,
    ValidationResult,
    is_valid_muscle_group,
)

logger = logging.getLogger(__name__)


def _group(exercise: Exercise | None) -> str | None:
    value = getattr(exercise, "muscle_group", None)
    if not isinstance(value, str) or not value:
        return None
    return value.lower()


def _require_list(sequence: object, context: str) -> None:
    if not isinstance(sequence, (list, tuple)):
        raise WorkoutError(
            code="INVALID_WORKOUT",
            message=f"{context} must be a list of exercises",
            details={"type": type(sequence).__name__},
        )


def _structural_issues(exercise: object, index: int | None) -> list[ValidationIssue]:
    where = f"at index {index}" if index is not None else "candidate"
    issues: list[ValidationIssue] = []
    if not getattr(exercise, "id", None):
        issues.append(ValidationIssue("MISSING_ID", f"Exercise {where} is missing an id", index))
    if not getattr(exercise, "name", None):
        issues.append(ValidationIssue("MISSING_NAME", f"Exercise {where} is missing a name", index))
    group = getattr(exercise, "muscle_group", None)
    if not group:
        issues.append(
            ValidationIssue("MISSING_MUSCLE_GROUP", f"Exercise {where} is missing a muscle group", index)
        )
    elif not is_valid_muscle_group(group):
        issues.append(
            ValidationIssue(
                "INVALID_MUSCLE_GROUP",
                f"Exercise {where} has unknown muscle group {group!r}",
                index,
                {"muscle_group": group},
            )
        )
    return issues


def is_well_formed(exercise: object) -> bool:
    return not _structural_issues(exercise, None)


def can_follow(previous: Exercise | None, candidate: Exercise) -> bool:
    """True if ``candidate`` may come directly after ``previous``.

    ``previous`` is None when the sequence is empty.
    """
    if previous is None:
        return True
    return _group(previous) != _group(candidate)


def last_muscle_group(sequence: Sequence[Exercise]) -> str | None:
    _require_list(sequence, "sequence")
    if not sequence:
        return None
    return _group(sequence[-1])


def validate_sequence(sequence: Sequence[Exercise]) -> ValidationResult:
    _require_list(sequence, "sequence")
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    if not sequence:
        warnings.append(ValidationIssue("EMPTY_WORKOUT", "Workout is empty"))
        return ValidationResult(is_valid=True, warnings=tuple(warnings))

    for index, exercise in enumerate(sequence):
        errors.extend(_structural_issues(exercise, index))

    for index in range(1, len(sequence)):
        previous, current = sequence[index - 1], sequence[index]
        group = _group(current)
        if group is not None and group == _group(previous):
            errors.append(
                ValidationIssue(
                    "CONSECUTIVE_MUSCLE_GROUP",
                    (
                        f"Exercises at positions {index - 1} and {index} both target {group}: "
                        f"{getattr(previous, 'name', '?')!r} -> {getattr(current, 'name', '?')!r}"
                    ),
                    index,
                    {
                        "muscle_group": group,
                        "previous_exercise": getattr(previous, "name", None),
                        "current_exercise": getattr(current, "name", None),
                    },
                )
            )

    if len(sequence) < ADVISORY_MIN_LENGTH:
        warnings.append(
            ValidationIssue(
                "SHORT_WORKOUT",
                f"Workout has {len(sequence)} exercises (recommended minimum {ADVISORY_MIN_LENGTH})",
            )
        )
    elif len(sequence) > ADVISORY_MAX_LENGTH:
        warnings.append(
            ValidationIssue(
                "LONG_WORKOUT",
                f"Workout has {len(sequence)} exercises (recommended maximum {ADVISORY_MAX_LENGTH})",
            )
        )

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def get_valid_options(sequence: Sequence[Exercise], pool: Sequence[Exercise]) -> list[Exercise]:
    """Exercises from ``pool`` that may be appended to ``sequence``.

    Malformed pool entries are skipped with a warning.
    """
    _require_list(sequence, "sequence")
    _require_list(pool, "pool")
    previous = sequence[-1] if sequence else None

    options: list[Exercise] = []
    for candidate in pool:
        if not is_well_formed(candidate):
            logger.warning("Skipping malformed exercise in pool: %r", candidate)
            continue
        if can_follow(previous, candidate):
            options.append(candidate)
    return options


def validate_insertion(
    sequence: Sequence[Exercise],
    position: int,
    candidate: Exercise,
    *,
    replacing: bool = True,
) -> ValidationResult:
    """Two-sided neighbour check for placing ``candidate`` at ``position``.

    With ``replacing`` (the default) the candidate takes over the slot, so its
    neighbours are ``position - 1`` and ``position + 1``. Otherwise the
    candidate is inserted before the current occupant, whose element becomes
    the next neighbour.
    """
    _require_list(sequence, "sequence")
    upper = len(sequence) - 1 if replacing else len(sequence)
    if not isinstance(position, int) or isinstance(position, bool) or not 0 <= position <= upper:
        return ValidationResult(
            is_valid=False,
            errors=(
                ValidationIssue(
                    "INVALID_POSITION",
                    f"Position {position} is out of range for a workout of {len(sequence)}",
                    None,
                    {"position": position, "length": len(sequence)},
                ),
            ),
        )

    errors = _structural_issues(candidate, None)
    if errors:
        return ValidationResult(is_valid=False, errors=tuple(errors))

    previous = sequence[position - 1] if position > 0 else None
    next_index = position + 1 if replacing else position
    following = sequence[next_index] if next_index < len(sequence) else None
    group = _group(candidate)

    if previous is not None and not can_follow(previous, candidate):
        errors.append(
            ValidationIssue(
                "CONSECUTIVE_MUSCLE_GROUP",
                f"{candidate.name!r} would follow {previous.name!r}, which also targets {group}",
                position - 1,
                {"neighbor": "previous", "neighbor_exercise": previous.name, "muscle_group": group},
            )
        )
    if following is not None and not can_follow(candidate, following):
        errors.append(
            ValidationIssue(
                "CONSECUTIVE_MUSCLE_GROUP",
                f"{candidate.name!r} would precede {following.name!r}, which also targets {group}",
                next_index,
                {"neighbor": "next", "neighbor_exercise": following.name, "muscle_group": group},
            )
        )

    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def constraint_stats(sequence: Sequence[Exercise]) -> ConstraintStats:
    """Violation positions and per-group counts for a sequence."""
    _require_list(sequence, "sequence")
    positions = [
        index
        for index in range(1, len(sequence))
        if _group(sequence[index]) is not None
        and _group(sequence[index]) == _group(sequence[index - 1])
    ]
    distribution = Counter(g for g in (_group(ex) for ex in sequence) if g is not None)
    return ConstraintStats(
        total_exercises=len(sequence),
        violations=len(positions),
        violation_positions=tuple(positions),
        is_valid=not positions,
        muscle_group_distribution=dict(distribution),
    )
