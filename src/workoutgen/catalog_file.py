"""Exercise catalog file contract v1.

A catalog file is a JSON array of exercise records::

    [{"id": "chest_001", "name": "Push-ups", "muscleGroup": "chest"}, ...]

``muscle_group`` is accepted as an alias for ``muscleGroup``. Records are
validated before they reach the core; a file that fails validation is
reported as DATABASE_ERROR.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from workoutgen.errors import WorkoutError
from workoutgen.exercises import InMemoryCatalog, validate_catalog
from workoutgen.models import MUSCLE_GROUPS, Exercise, MuscleGroup

logger = logging.getLogger(__name__)

CATALOG_CONTRACT_VERSION_V1 = "exercise_catalog.v1"


class ExerciseRecordV1(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    muscle_group: MuscleGroup = Field(alias="muscleGroup")
    equipment: str | None = None
    difficulty: str | None = None

    @field_validator("id", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("muscle_group", mode="before")
    @classmethod
    def normalize_group(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in MUSCLE_GROUPS:
                raise ValueError(f"muscle group must be one of {', '.join(MUSCLE_GROUPS)}")
        return v

    def to_exercise(self) -> Exercise:
        return Exercise(
            id=self.id,
            name=self.name,
            muscle_group=self.muscle_group,
            equipment=self.equipment,
            difficulty=self.difficulty,
        )


def parse_catalog_records(payload: Any) -> list[Exercise]:
    """Validate decoded JSON and convert it into exercises."""
    if not isinstance(payload, list):
        raise WorkoutError(
            code="DATABASE_ERROR",
            message="Catalog file must contain a JSON array of exercises",
        )

    exercises: list[Exercise] = []
    for index, raw in enumerate(payload):
        try:
            record = ExerciseRecordV1.model_validate(raw)
        except ValidationError as exc:
            raise WorkoutError(
                code="DATABASE_ERROR",
                message=f"Invalid exercise record at index {index}",
                details={"index": index, "errors": exc.errors(include_url=False)},
            ) from exc
        exercises.append(record.to_exercise())
    return exercises


def load_catalog(path: str | Path) -> InMemoryCatalog:
    """Load and validate a catalog from a JSON file."""
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise WorkoutError(
            code="DATABASE_ERROR",
            message=f"Could not read catalog file {path}: {exc}",
            details={"path": str(path)},
        ) from exc

    exercises = parse_catalog_records(payload)
    for problem in validate_catalog(exercises):
        logger.warning("Catalog %s: %s", path.name, problem)

    try:
        catalog = InMemoryCatalog(exercises)
    except ValueError as exc:
        raise WorkoutError(
            code="DATABASE_ERROR",
            message=str(exc),
            details={"path": str(path)},
        ) from exc

    logger.info(
        "Loaded catalog",
        extra={"workoutgen_catalog_path": str(path), "workoutgen_exercise_count": len(catalog)},
    )
    return catalog
