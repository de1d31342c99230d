"""Tests for the sequence generator."""

import random
from collections import Counter

import pytest

import workoutgen.generator as generator_module
from workoutgen.errors import WorkoutError
from workoutgen.exercises import InMemoryCatalog, default_catalog
from workoutgen.generator import (
    SequenceGenerator,
    distribute_evenly,
    filter_by_enabled_groups,
    shuffled,
    unique_muscle_groups,
)
from workoutgen.models import MUSCLE_GROUPS, Exercise, ValidationIssue, ValidationResult


def _ex(exercise_id: str, group: str, name: str | None = None) -> Exercise:
    return Exercise(id=exercise_id, name=name if name is not None else exercise_id, muscle_group=group)


def _small_catalog() -> InMemoryCatalog:
    return InMemoryCatalog([
        _ex("chest_001", "chest"),
        _ex("chest_002", "chest"),
        _ex("back_001", "back"),
        _ex("back_002", "back"),
        _ex("legs_001", "legs"),
        _ex("legs_002", "legs"),
    ])


def _make_generator(catalog=None, seed: int = 7, **kwargs) -> SequenceGenerator:
    return SequenceGenerator(catalog or default_catalog(), rng=random.Random(seed), **kwargs)


def _assert_rotation(sequence) -> None:
    for i in range(1, len(sequence)):
        assert sequence[i].muscle_group != sequence[i - 1].muscle_group, f"repeat at {i}"


class _BrokenCatalog:
    def get_all_exercises(self):
        raise RuntimeError("storage offline")

    def get_exercises_by_muscle_group(self, group):
        raise RuntimeError("storage offline")

    def get_all_muscle_groups(self):
        return list(MUSCLE_GROUPS)

    def get_exercise_counts(self):
        return {}


class TestGenerate:
    def test_three_groups_ten_exercises(self):
        result = _make_generator(_small_catalog()).generate(10, ["chest", "back", "legs"])
        assert result.success
        assert len(result.sequence) == 10
        _assert_rotation(result.sequence)

    def test_only_enabled_groups_used(self):
        result = _make_generator().generate(12, ["arms", "core"])
        assert {ex.muscle_group for ex in result.sequence} <= {"arms", "core"}
        _assert_rotation(result.sequence)

    def test_all_groups(self):
        result = _make_generator().generate(20, list(MUSCLE_GROUPS))
        assert len(result.sequence) == 20
        _assert_rotation(result.sequence)

    def test_metadata(self):
        result = _make_generator().generate(8, ["chest", "back", "legs"])
        meta = result.metadata
        assert meta.attempts >= 1
        assert meta.exercise_count == 8
        assert set(meta.muscle_groups_used) <= {"chest", "back", "legs"}
        assert meta.generation_time_ms >= 0
        assert meta.even_distribution is True

    def test_even_distribution_limits_pool(self):
        result = _make_generator().generate(5, list(MUSCLE_GROUPS))
        # ceil(5 / 6) = 1 exercise per group
        assert result.metadata.pool_size == 6

    def test_without_even_distribution_uses_full_pool(self):
        catalog = default_catalog()
        result = _make_generator(catalog).generate(5, list(MUSCLE_GROUPS), even_distribution=False)
        assert result.metadata.pool_size == len(catalog)
        assert result.metadata.even_distribution is False

    def test_sequence_holds_snapshots(self):
        catalog = default_catalog()
        result = _make_generator(catalog).generate(5, ["chest", "back"])
        first = result.sequence[0]
        original = catalog.get_exercise(first.id)
        assert first == original
        assert first is not original

    def test_same_seed_same_sequence(self):
        first = _make_generator(seed=42).generate(15, list(MUSCLE_GROUPS))
        second = _make_generator(seed=42).generate(15, list(MUSCLE_GROUPS))
        assert [ex.id for ex in first.sequence] == [ex.id for ex in second.sequence]

    def test_result_serializes(self):
        data = _make_generator().generate(5, ["chest", "back"]).to_dict()
        assert data["success"] is True
        assert len(data["sequence"]) == 5
        assert "muscleGroup" in data["sequence"][0]
        assert data["metadata"]["exercise_count"] == 5


class TestPreconditions:
    @pytest.mark.parametrize("length", [4, 21, 0, -3])
    def test_length_out_of_range(self, length):
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(length, ["chest", "back"])
        assert exc_info.value.code == "INVALID_PARAMETERS"

    @pytest.mark.parametrize("length", ["10", 10.0, True])
    def test_length_must_be_int(self, length):
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(length, ["chest", "back"])
        assert exc_info.value.code == "INVALID_PARAMETERS"

    def test_single_group_rejected_without_search(self, monkeypatch):
        generator = _make_generator()

        def _no_search(*args, **kwargs):
            raise AssertionError("search must not run")

        monkeypatch.setattr(generator, "_search", _no_search)
        with pytest.raises(WorkoutError) as exc_info:
            generator.generate(10, ["chest"])
        assert exc_info.value.code == "INVALID_PARAMETERS"
        assert "only one muscle group" in exc_info.value.message

    def test_empty_groups_rejected(self):
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(10, [])
        assert exc_info.value.code == "INVALID_PARAMETERS"

    def test_unknown_group_rejected(self):
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(10, ["chest", "neck"])
        assert exc_info.value.code == "INVALID_PARAMETERS"
        assert "neck" in exc_info.value.message

    def test_groups_must_be_a_collection(self):
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(10, "chest")
        assert exc_info.value.code == "INVALID_PARAMETERS"

    def test_only_one_group_reachable(self):
        catalog = InMemoryCatalog([_ex("chest_001", "chest"), _ex("chest_002", "chest")])
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator(catalog).generate(5, ["chest", "back"])
        assert exc_info.value.code == "INVALID_PARAMETERS"

    def test_no_exercises_available(self):
        catalog = InMemoryCatalog([_ex("legs_001", "legs")])
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator(catalog).generate(5, ["chest", "back"])
        assert exc_info.value.code == "NO_EXERCISES_AVAILABLE"

    def test_catalog_failure_is_database_error(self):
        with pytest.raises(WorkoutError) as exc_info:
            SequenceGenerator(_BrokenCatalog()).generate(5, ["chest", "back"])
        assert exc_info.value.code == "DATABASE_ERROR"
        assert "storage offline" in exc_info.value.message

    def test_max_retries_must_be_positive(self):
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(5, ["chest", "back"], max_retries=0)
        assert exc_info.value.code == "INVALID_PARAMETERS"

    def test_all_errors_collected(self):
        errors = _make_generator().validate_generation_params(30, ["chest"])
        assert len(errors) >= 2


class TestSearchFailures:
    def test_timeout_when_every_attempt_dead_ends(self):
        # back entries have no name, so they are never offered after a chest exercise
        catalog = InMemoryCatalog([
            _ex("chest_001", "chest"),
            _ex("back_001", "back", name=""),
        ])
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator(catalog).generate(5, ["chest", "back"], max_retries=10)
        err = exc_info.value
        assert err.code == "GENERATION_TIMEOUT"
        assert err.details["attempts"] == 10
        assert err.details["target_length"] == 5
        assert err.details["enabled_groups"] == ["chest", "back"]

    def test_reshuffles_only_after_half_the_budget(self, monkeypatch):
        generator = _make_generator()
        attempts: list[int] = []
        reshuffled_at: list[int] = []

        def _dead_end(length, pool):
            attempts.append(len(attempts) + 1)
            return None

        def _spy(items, rng):
            reshuffled_at.append(len(attempts))
            return list(items)

        monkeypatch.setattr(generator, "_attempt", _dead_end)
        monkeypatch.setattr(generator_module, "shuffled", _spy)

        pool = [_ex("chest_001", "chest"), _ex("back_001", "back")]
        assert generator._search(5, pool, 10) is None
        assert len(attempts) == 10
        assert reshuffled_at == [6, 7, 8, 9, 10]

    def test_final_validation_failure(self, monkeypatch):
        verdicts = iter([
            ValidationResult(is_valid=True),
            ValidationResult(
                is_valid=False,
                errors=(ValidationIssue("CONSECUTIVE_MUSCLE_GROUP", "boom", 1),),
            ),
        ])
        monkeypatch.setattr(generator_module, "validate_sequence", lambda seq: next(verdicts))
        with pytest.raises(WorkoutError) as exc_info:
            _make_generator().generate(5, ["chest", "back"])
        assert exc_info.value.code == "VALIDATION_FAILED"


class TestHelpers:
    def test_shuffled_leaves_input_untouched(self):
        items = list(range(20))
        result = shuffled(items, random.Random(1))
        assert items == list(range(20))
        assert sorted(result) == items

    def test_filter_by_enabled_groups(self):
        catalog = _small_catalog()
        filtered = filter_by_enabled_groups(catalog.get_all_exercises(), ["legs"])
        assert [ex.id for ex in filtered] == ["legs_001", "legs_002"]

    def test_unique_muscle_groups_keeps_order(self):
        exercises = [_ex("a", "legs"), _ex("b", "chest"), _ex("c", "legs")]
        assert unique_muscle_groups(exercises) == ["legs", "chest"]

    def test_distribute_evenly(self):
        pool = default_catalog().get_all_exercises()
        pool = [ex for ex in pool if ex.muscle_group in ("chest", "back", "legs")]
        distributed = distribute_evenly(pool, 6, random.Random(3))
        counts = Counter(ex.muscle_group for ex in distributed)
        assert counts == {"chest": 2, "back": 2, "legs": 2}

    def test_distribute_evenly_small_group(self):
        pool = [_ex("chest_001", "chest")] + [_ex(f"back_{i:03d}", "back") for i in range(1, 9)]
        distributed = distribute_evenly(pool, 10, random.Random(3))
        counts = Counter(ex.muscle_group for ex in distributed)
        assert counts == {"chest": 1, "back": 5}


class TestProbeCapabilities:
    def test_default_catalog_supports_everything(self):
        report = _make_generator().probe_capabilities()
        assert report["catalog"]["total_exercises"] == 66
        assert report["catalog"]["muscle_groups"] == 6
        for key in ("length_5", "length_10", "length_15", "length_20", "groups_2", "groups_3", "groups_4"):
            assert report["capabilities"][key]["possible"], key
        assert report["recommendations"]["optimal_length"] == 10

    def test_failures_are_reported(self):
        catalog = InMemoryCatalog([_ex("chest_001", "chest")])
        report = _make_generator(catalog).probe_capabilities()
        assert report["capabilities"]["length_10"]["possible"] is False
        assert "error" in report["capabilities"]["length_10"]
        assert report["recommendations"]["optimal_length"] is None
