"""Exercise library and the catalog capability consumed by the core.

The built-in library holds 66 exercises across the six muscle groups, with
ids of the form ``<group>_NNN``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Protocol

from workoutgen.models import MUSCLE_GROUPS, Exercise, MuscleGroup, is_valid_muscle_group

logger = logging.getLogger(__name__)

# (name, equipment) per muscle group, in id order
_LIBRARY: dict[MuscleGroup, tuple[tuple[str, str], ...]] = {
    "chest": (
        ("Push-ups", "bodyweight"),
        ("Bench Press", "barbell"),
        ("Incline Push-ups", "bodyweight"),
        ("Dips", "bodyweight"),
        ("Incline Bench Press", "barbell"),
        ("Decline Push-ups", "bodyweight"),
        ("Chest Flyes", "dumbbell"),
        ("Diamond Push-ups", "bodyweight"),
        ("Wide-Grip Push-ups", "bodyweight"),
        ("Chest Press Machine", "machine"),
    ),
    "back": (
        ("Pull-ups", "bodyweight"),
        ("Bent-over Rows", "barbell"),
        ("Lat Pulldowns", "cable"),
        ("Deadlifts", "barbell"),
        ("T-Bar Rows", "barbell"),
        ("Seated Cable Rows", "cable"),
        ("Chin-ups", "bodyweight"),
        ("One-Arm Dumbbell Rows", "dumbbell"),
        ("Inverted Rows", "bodyweight"),
        ("Romanian Deadlifts", "barbell"),
        ("Reverse Flyes", "dumbbell"),
    ),
    "legs": (
        ("Squats", "bodyweight"),
        ("Lunges", "bodyweight"),
        ("Leg Press", "machine"),
        ("Calf Raises", "bodyweight"),
        ("Bulgarian Split Squats", "dumbbell"),
        ("Leg Curls", "machine"),
        ("Leg Extensions", "machine"),
        ("Step-ups", "bodyweight"),
        ("Wall Sits", "bodyweight"),
        ("Jump Squats", "bodyweight"),
        ("Single-Leg Glute Bridges", "bodyweight"),
        ("Walking Lunges", "bodyweight"),
    ),
    "shoulders": (
        ("Overhead Press", "barbell"),
        ("Lateral Raises", "dumbbell"),
        ("Front Raises", "dumbbell"),
        ("Rear Delt Flyes", "dumbbell"),
        ("Arnold Press", "dumbbell"),
        ("Pike Push-ups", "bodyweight"),
        ("Upright Rows", "barbell"),
        ("Handstand Push-ups", "bodyweight"),
        ("Shoulder Shrugs", "dumbbell"),
        ("Face Pulls", "cable"),
    ),
    "arms": (
        ("Bicep Curls", "dumbbell"),
        ("Tricep Dips", "bodyweight"),
        ("Hammer Curls", "dumbbell"),
        ("Tricep Extensions", "dumbbell"),
        ("Close-Grip Push-ups", "bodyweight"),
        ("Concentration Curls", "dumbbell"),
        ("Tricep Kickbacks", "dumbbell"),
        ("Preacher Curls", "barbell"),
        ("Overhead Tricep Extension", "dumbbell"),
        ("Cable Curls", "cable"),
        ("Tricep Pushdowns", "cable"),
    ),
    "core": (
        ("Planks", "bodyweight"),
        ("Crunches", "bodyweight"),
        ("Mountain Climbers", "bodyweight"),
        ("Russian Twists", "bodyweight"),
        ("Bicycle Crunches", "bodyweight"),
        ("Dead Bug", "bodyweight"),
        ("Leg Raises", "bodyweight"),
        ("Side Planks", "bodyweight"),
        ("Flutter Kicks", "bodyweight"),
        ("Hollow Body Hold", "bodyweight"),
        ("V-ups", "bodyweight"),
        ("Bear Crawl", "bodyweight"),
    ),
}


def _build_library() -> dict[str, Exercise]:
    library: dict[str, Exercise] = {}
    for group, entries in _LIBRARY.items():
        for number, (name, equipment) in enumerate(entries, start=1):
            exercise_id = f"{group}_{number:03d}"
            library[exercise_id] = Exercise(
                id=exercise_id,
                name=name,
                muscle_group=group,
                equipment=equipment,
            )
    return library


EXERCISES: dict[str, Exercise] = _build_library()


class ExerciseCatalog(Protocol):
    """Read-only exercise source the generator and replacement engine query."""

    def get_all_exercises(self) -> list[Exercise]: ...

    def get_exercises_by_muscle_group(self, group: str) -> list[Exercise]: ...

    def get_all_muscle_groups(self) -> list[str]: ...

    def get_exercise_counts(self) -> dict[str, int]: ...


class InMemoryCatalog:
    """ExerciseCatalog backed by an in-memory list.

    Every accessor returns a fresh list, so callers cannot mutate the catalog.
    """

    def __init__(self, exercises: Iterable[Exercise]):
        self._by_id: dict[str, Exercise] = {}
        self._by_group: dict[str, list[Exercise]] = {group: [] for group in MUSCLE_GROUPS}
        for ex in exercises:
            if ex.id in self._by_id:
                raise ValueError(f"Duplicate exercise id: {ex.id}")
            if not is_valid_muscle_group(ex.muscle_group):
                raise ValueError(f"Unknown muscle group {ex.muscle_group!r} for {ex.id}")
            self._by_id[ex.id] = ex
            self._by_group[ex.muscle_group.lower()].append(ex)

    def __len__(self) -> int:
        return len(self._by_id)

    def get_all_exercises(self) -> list[Exercise]:
        return [ex for group in MUSCLE_GROUPS for ex in self._by_group[group]]

    def get_exercises_by_muscle_group(self, group: str) -> list[Exercise]:
        if not is_valid_muscle_group(group):
            logger.warning("Unknown muscle group requested: %r", group)
            return []
        return list(self._by_group[group.lower()])

    def get_all_muscle_groups(self) -> list[str]:
        return list(MUSCLE_GROUPS)

    def get_exercise_counts(self) -> dict[str, int]:
        return {group: len(self._by_group[group]) for group in MUSCLE_GROUPS}

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        """Look up by id; None on miss."""
        return self._by_id.get(exercise_id)


def default_catalog() -> InMemoryCatalog:
    return InMemoryCatalog(EXERCISES.values())


def get_exercise(exercise_id: str) -> Exercise:
    """Get a built-in exercise by ID, raises KeyError if not found."""
    return EXERCISES[exercise_id]


_ID_PATTERN = re.compile(r"^(?P<group>[a-z]+)_\d{3}$")


def validate_catalog(exercises: Iterable[Exercise]) -> list[str]:
    """Return human-readable problems with a set of catalog entries.

    Checks unique ids, non-empty names, closed-set muscle groups and the
    ``<group>_NNN`` id convention.
    """
    problems: list[str] = []
    seen: set[str] = set()
    for ex in exercises:
        if not ex.id:
            problems.append(f"Exercise {ex.name!r} has no id")
            continue
        if ex.id in seen:
            problems.append(f"Duplicate exercise id: {ex.id}")
        seen.add(ex.id)
        if not ex.name or not ex.name.strip():
            problems.append(f"Exercise {ex.id} has an empty name")
        if not is_valid_muscle_group(ex.muscle_group):
            problems.append(f"Exercise {ex.id} has unknown muscle group {ex.muscle_group!r}")
            continue
        match = _ID_PATTERN.match(ex.id)
        if match is None or match.group("group") != ex.muscle_group:
            problems.append(
                f"Exercise id {ex.id} does not follow '{ex.muscle_group}_NNN' convention"
            )
    return problems
