"""Replacement engine: swap one exercise in a sequence for an equivalent one.

Replacements stay within the muscle group of the exercise being replaced
and are checked against both neighbours. Each engine owns its own
ReplacementHistory, so independent sequences never share undo state.
Callers must serialize replace/undo/redo calls on a given engine.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from workoutgen.errors import WorkoutError
from workoutgen.exercises import ExerciseCatalog
from workoutgen.history import ReplacementHistory
from workoutgen.models import (
    Exercise,
    HistoryStatus,
    HistoryStepResult,
    ReplacementRecord,
    ReplacementResult,
)
from workoutgen.validators import is_well_formed, validate_insertion, validate_sequence

logger = logging.getLogger(__name__)


def _require_mutable_sequence(sequence: object) -> None:
    if not isinstance(sequence, list):
        raise WorkoutError(
            code="INVALID_WORKOUT",
            message="Workout must be a list of exercises",
            details={"type": type(sequence).__name__},
        )


def _in_range(position: object, sequence: list[Exercise]) -> bool:
    return (
        isinstance(position, int)
        and not isinstance(position, bool)
        and 0 <= position < len(sequence)
    )


class ReplacementEngine:
    def __init__(
        self,
        catalog: ExerciseCatalog,
        *,
        history: ReplacementHistory | None = None,
        rng: random.Random | None = None,
    ):
        self.catalog = catalog
        self.history = history if history is not None else ReplacementHistory()
        self.rng = rng if rng is not None else random.Random()

    # --- options ---

    def get_replacement_options(
        self,
        sequence: list[Exercise],
        position: int,
        enabled_groups: Iterable[str] | None = None,
    ) -> list[Exercise]:
        """Catalog exercises that could legally take over ``sequence[position]``."""
        _require_mutable_sequence(sequence)
        if not _in_range(position, sequence):
            raise WorkoutError(
                code="INVALID_POSITION",
                message=f"Invalid position {position} (workout length: {len(sequence)})",
                details={"position": position, "length": len(sequence)},
            )

        current = sequence[position]
        if not is_well_formed(current):
            raise WorkoutError(
                code="INVALID_CURRENT_EXERCISE",
                message="Current exercise is invalid or missing muscle group",
                details={"position": position},
            )

        try:
            candidates = self.catalog.get_exercises_by_muscle_group(current.muscle_group)
        except Exception as exc:
            raise WorkoutError(
                code="DATABASE_ERROR",
                message=f"Database error getting replacement options: {exc}",
                details={"original_error": str(exc)},
            ) from exc

        if enabled_groups:
            allowed = {g.lower() for g in enabled_groups}
            candidates = [c for c in candidates if c.muscle_group.lower() in allowed]

        return [
            c
            for c in candidates
            if c.id != current.id and validate_insertion(sequence, position, c).is_valid
        ]

    def random_replacement(
        self,
        sequence: list[Exercise],
        position: int,
        exclude_ids: Iterable[str] = (),
    ) -> Exercise | None:
        """A random legal replacement, or None when there is none."""
        excluded = set(exclude_ids)
        options = [
            ex
            for ex in self.get_replacement_options(sequence, position)
            if ex.id not in excluded
        ]
        if not options:
            return None
        return self.rng.choice(options)

    # --- replace ---

    def replace(
        self,
        sequence: list[Exercise],
        position: int,
        new_exercise: Exercise,
        *,
        track_history: bool = True,
        validate_constraints: bool = True,
    ) -> ReplacementResult:
        """Replace ``sequence[position]`` in place.

        Raises WorkoutError on hard failures. Selecting the exercise already
        at ``position`` is a successful no-op with ``replaced=False``.
        """
        _require_mutable_sequence(sequence)
        if not _in_range(position, sequence):
            raise WorkoutError(
                code="INVALID_INDEX",
                message=f"Invalid index {position} (workout length: {len(sequence)})",
                details={"position": position, "length": len(sequence)},
            )
        if not getattr(new_exercise, "id", None) or not getattr(new_exercise, "muscle_group", None):
            raise WorkoutError(
                code="INVALID_NEW_EXERCISE",
                message="New exercise must have valid muscle group and id",
            )

        old_exercise = sequence[position]
        if not is_well_formed(old_exercise):
            raise WorkoutError(
                code="INVALID_CURRENT_EXERCISE",
                message="Current exercise is invalid or missing muscle group",
                details={"position": position},
            )
        if old_exercise.id == new_exercise.id:
            return ReplacementResult(
                success=True,
                replaced=False,
                message="Same exercise selected - no change needed",
                old_exercise=old_exercise,
                new_exercise=new_exercise,
                position=position,
                history_size=self.history.size,
            )

        if old_exercise.muscle_group.lower() != new_exercise.muscle_group.lower():
            raise WorkoutError(
                code="MUSCLE_GROUP_MISMATCH",
                message=(
                    f"Muscle group mismatch: cannot replace {old_exercise.muscle_group} "
                    f"exercise with {new_exercise.muscle_group} exercise"
                ),
                details={
                    "position": position,
                    "expected": old_exercise.muscle_group,
                    "actual": new_exercise.muscle_group,
                },
            )

        if validate_constraints:
            check = validate_insertion(sequence, position, new_exercise)
            if not check.is_valid:
                raise WorkoutError(
                    code="CONSTRAINT_VIOLATION",
                    message=f"Replacement would violate constraints: {check.error_messages()}",
                    details={"validation_errors": [e.message for e in check.errors]},
                )

        sequence[position] = new_exercise.snapshot()
        if validate_constraints:
            full = validate_sequence(sequence)
            if not full.is_valid:
                sequence[position] = old_exercise
                raise WorkoutError(
                    code="WORKOUT_VALIDATION_FAILED",
                    message="Replacement caused workout constraint violations - reverted",
                    details={"workout_errors": [e.message for e in full.errors]},
                )

        # recorded only once the replacement sticks; add() drops the redo tail
        if track_history:
            self.history.add(position, old_exercise, new_exercise)

        logger.debug("Replaced position %d: %s -> %s", position, old_exercise.id, new_exercise.id)
        return ReplacementResult(
            success=True,
            replaced=True,
            message=f'Successfully replaced "{old_exercise.name}" with "{new_exercise.name}"',
            old_exercise=old_exercise,
            new_exercise=new_exercise,
            position=position,
            history_size=self.history.size,
        )

    # --- undo / redo ---

    def _restore(
        self,
        sequence: list[Exercise],
        record: ReplacementRecord,
        exercise: Exercise,
        verb: str,
    ) -> HistoryStepResult:
        previous = sequence[record.position]
        sequence[record.position] = exercise.snapshot()
        return HistoryStepResult(
            success=True,
            message=f'{verb} replacement: restored "{exercise.name}"',
            restored_exercise=exercise,
            previous_exercise=previous,
            position=record.position,
        )

    def undo(self, sequence: list[Exercise]) -> HistoryStepResult:
        _require_mutable_sequence(sequence)
        record = self.history.peek_undo()
        if record is None:
            return HistoryStepResult(success=False, message="No replacements to undo")
        if not _in_range(record.position, sequence):
            return HistoryStepResult(
                success=False,
                message="Undo position out of bounds - workout may have changed",
                position=record.position,
            )
        self.history.step_back()
        return self._restore(sequence, record, record.old_exercise, "Undid")

    def redo(self, sequence: list[Exercise]) -> HistoryStepResult:
        _require_mutable_sequence(sequence)
        record = self.history.peek_redo()
        if record is None:
            return HistoryStepResult(success=False, message="No replacements to redo")
        if not _in_range(record.position, sequence):
            return HistoryStepResult(
                success=False,
                message="Redo position out of bounds - workout may have changed",
                position=record.position,
            )
        self.history.step_forward()
        return self._restore(sequence, record, record.new_exercise, "Redid")

    def clear_history(self) -> None:
        self.history.clear()

    def history_status(self) -> HistoryStatus:
        return self.history.status()
