"""Sequence generator: randomized restart search over a shuffled pool.

Each attempt builds the sequence front to back, picking a random exercise
that may legally follow the previous one. A dead end discards the whole
attempt instead of backtracking a single step; after half the attempt
budget is spent, the pool is reshuffled before every further attempt.
"""

from __future__ import annotations

import logging
import math
import random
import time
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from workoutgen.errors import WorkoutError
from workoutgen.exercises import ExerciseCatalog
from workoutgen.models import (
    MAX_WORKOUT_LENGTH,
    MIN_WORKOUT_LENGTH,
    Exercise,
    GenerationMetadata,
    GenerationResult,
    is_valid_muscle_group,
)
from workoutgen.validators import get_valid_options, validate_sequence

logger = logging.getLogger(__name__)

MAX_RETRY_ATTEMPTS = 100
MIN_MUSCLE_GROUPS_REQUIRED = 2

T = TypeVar("T")


def shuffled(items: Iterable[T], rng: random.Random) -> list[T]:
    """Return a shuffled copy; the input is left untouched."""
    result = list(items)
    rng.shuffle(result)
    return result


def filter_by_enabled_groups(
    exercises: Iterable[Exercise], enabled_groups: Iterable[str]
) -> list[Exercise]:
    groups = {g.lower() for g in enabled_groups}
    return [ex for ex in exercises if ex.muscle_group.lower() in groups]


def unique_muscle_groups(exercises: Iterable[Exercise]) -> list[str]:
    """Distinct muscle groups in first-seen order."""
    return list(dict.fromkeys(ex.muscle_group for ex in exercises))


def distribute_evenly(
    pool: Sequence[Exercise], length: int, rng: random.Random
) -> list[Exercise]:
    """Take up to ceil(length / groups) shuffled exercises from every group."""
    groups = unique_muscle_groups(pool)
    if not groups:
        return []
    per_group = math.ceil(length / len(groups))

    distributed: list[Exercise] = []
    for group in groups:
        members = shuffled((ex for ex in pool if ex.muscle_group == group), rng)
        distributed.extend(members[:per_group])
    return shuffled(distributed, rng)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SequenceGenerator:
    """Builds adjacency-safe exercise sequences from a catalog."""

    def __init__(
        self,
        catalog: ExerciseCatalog,
        *,
        rng: random.Random | None = None,
        max_retries: int = MAX_RETRY_ATTEMPTS,
    ):
        self.catalog = catalog
        self.rng = rng if rng is not None else random.Random()
        self.max_retries = max_retries

    def _all_exercises(self) -> list[Exercise]:
        try:
            return self.catalog.get_all_exercises()
        except Exception as exc:
            raise WorkoutError(
                code="DATABASE_ERROR",
                message=f"Exercise catalog failed: {exc}",
                details={"original_error": str(exc)},
            ) from exc

    def validate_generation_params(self, length: Any, enabled_groups: Any) -> list[str]:
        """Return every precondition violation; empty when generation may start."""
        errors: list[str] = []
        length_ok = _is_int(length) and MIN_WORKOUT_LENGTH <= length <= MAX_WORKOUT_LENGTH
        if not length_ok:
            errors.append(
                f"Workout length must be an integer between {MIN_WORKOUT_LENGTH} and {MAX_WORKOUT_LENGTH}"
            )

        if not isinstance(enabled_groups, (list, tuple, set, frozenset)):
            errors.append("Enabled groups must be a list of muscle groups")
            return errors
        if not enabled_groups:
            errors.append("At least one muscle group must be enabled")
            return errors
        unknown = [g for g in enabled_groups if not is_valid_muscle_group(g)]
        if unknown:
            errors.append(f"Unknown muscle group(s): {', '.join(map(str, unknown))}")
            return errors
        if len({g.lower() for g in enabled_groups}) == 1 and (not _is_int(length) or length > 1):
            errors.append(
                "Cannot create multi-exercise workout with only one muscle group (constraint violation)"
            )

        available = filter_by_enabled_groups(self._all_exercises(), enabled_groups)
        if not available:
            errors.append("No exercises available for selected muscle groups")
        elif len(unique_muscle_groups(available)) < MIN_MUSCLE_GROUPS_REQUIRED and (
            not _is_int(length) or length > 1
        ):
            errors.append(
                f"Need at least {MIN_MUSCLE_GROUPS_REQUIRED} muscle groups with exercises "
                "for multi-exercise workouts"
            )
        return errors

    def _attempt(self, length: int, pool: Sequence[Exercise]) -> list[Exercise] | None:
        sequence: list[Exercise] = []
        for _ in range(length):
            options = get_valid_options(sequence, pool)
            if not options:
                return None
            sequence.append(self.rng.choice(options).snapshot())
        return sequence

    def _search(
        self, length: int, pool: list[Exercise], max_retries: int
    ) -> tuple[list[Exercise], int] | None:
        attempts = 0
        while attempts < max_retries:
            attempts += 1
            sequence = self._attempt(length, pool)
            if sequence is not None and validate_sequence(sequence).is_valid:
                return sequence, attempts

            if attempts > max_retries / 2:
                logger.debug("Attempt %d failed, reshuffling pool", attempts)
                pool = shuffled(pool, self.rng)
        return None

    def generate(
        self,
        length: int,
        enabled_groups: Sequence[str],
        *,
        even_distribution: bool = True,
        max_retries: int | None = None,
    ) -> GenerationResult:
        """Generate a sequence of ``length`` exercises from ``enabled_groups``.

        Raises WorkoutError on any failure; never returns a partial sequence.
        """
        started = time.perf_counter()
        retries = self.max_retries if max_retries is None else max_retries
        if not _is_int(retries) or retries < 1:
            raise WorkoutError(
                code="INVALID_PARAMETERS",
                message="max_retries must be a positive integer",
                details={"max_retries": retries},
            )

        errors = self.validate_generation_params(length, enabled_groups)
        if errors:
            no_pool = "No exercises available for selected muscle groups"
            code = "NO_EXERCISES_AVAILABLE" if errors == [no_pool] else "INVALID_PARAMETERS"
            raise WorkoutError(code=code, message="; ".join(errors), details={"errors": errors})

        pool = filter_by_enabled_groups(self._all_exercises(), enabled_groups)
        if not pool:
            raise WorkoutError(
                code="NO_EXERCISES_AVAILABLE",
                message="No exercises available for selected muscle groups",
                details={"enabled_groups": list(enabled_groups)},
            )

        if even_distribution and len(pool) > length:
            pool = distribute_evenly(pool, length, self.rng)
        else:
            pool = shuffled(pool, self.rng)

        found = self._search(length, pool, retries)
        if found is None:
            logger.warning(
                "Generation gave up after %d attempts (length=%d, groups=%s)",
                retries,
                length,
                list(enabled_groups),
            )
            raise WorkoutError(
                code="GENERATION_TIMEOUT",
                message=f"Failed to generate valid workout after {retries} attempts",
                details={
                    "attempts": retries,
                    "max_retries": retries,
                    "enabled_groups": list(enabled_groups),
                    "target_length": length,
                },
            )

        sequence, attempts = found
        final = validate_sequence(sequence)
        if not final.is_valid:
            raise WorkoutError(
                code="VALIDATION_FAILED",
                message="Generated workout failed final validation",
                details={"validation_errors": final.error_messages()},
            )

        elapsed_ms = round((time.perf_counter() - started) * 1000)
        logger.info(
            "Generated workout of %d exercises in %d attempt(s)",
            length,
            attempts,
            extra={"workoutgen_attempts": attempts, "workoutgen_duration_ms": elapsed_ms},
        )
        return GenerationResult(
            success=True,
            sequence=tuple(sequence),
            metadata=GenerationMetadata(
                generation_time_ms=elapsed_ms,
                attempts=attempts,
                muscle_groups_used=tuple(unique_muscle_groups(sequence)),
                pool_size=len(pool),
                even_distribution=even_distribution,
                exercise_count=len(sequence),
            ),
        )

    def probe_capabilities(self) -> dict[str, Any]:
        """Try a fixed set of requests against the current catalog and report.

        Failures are recorded in the report rather than raised.
        """
        groups = self.catalog.get_all_muscle_groups()
        capabilities: dict[str, dict[str, Any]] = {}

        for length in (5, 10, 15, 20):
            try:
                result = self.generate(length, groups, max_retries=50)
                capabilities[f"length_{length}"] = {
                    "possible": True,
                    "attempts": result.metadata.attempts,
                    "generation_time_ms": result.metadata.generation_time_ms,
                }
            except WorkoutError as exc:
                capabilities[f"length_{length}"] = {"possible": False, "error": exc.message}

        for count in (2, 3, 4):
            subset = groups[:count]
            try:
                result = self.generate(10, subset, max_retries=30)
                capabilities[f"groups_{count}"] = {
                    "possible": True,
                    "muscle_groups": subset,
                    "attempts": result.metadata.attempts,
                }
            except WorkoutError as exc:
                capabilities[f"groups_{count}"] = {
                    "possible": False,
                    "muscle_groups": subset,
                    "error": exc.message,
                }

        return {
            "catalog": {
                "total_exercises": len(self.catalog.get_all_exercises()),
                "muscle_groups": len(groups),
                "exercises_per_group": self.catalog.get_exercise_counts(),
            },
            "capabilities": capabilities,
            "recommendations": {
                "optimal_length": 10 if capabilities["length_10"]["possible"] else None,
                "min_muscle_groups": MIN_MUSCLE_GROUPS_REQUIRED,
            },
        }
