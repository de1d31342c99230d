"""CLI interface for the workout sequence generator."""

from __future__ import annotations

import json
import logging
import random
import sys
from pathlib import Path

import click

from workoutgen.catalog_file import load_catalog
from workoutgen.config import Config
from workoutgen.errors import WorkoutError, is_caller_error, workout_error_taxonomy_v1
from workoutgen.exercises import InMemoryCatalog, default_catalog
from workoutgen.generator import SequenceGenerator
from workoutgen.history import ReplacementHistory
from workoutgen.logging import setup_logging
from workoutgen.models import MAX_WORKOUT_LENGTH, MIN_WORKOUT_LENGTH, MUSCLE_GROUPS, Exercise
from workoutgen.replacement import ReplacementEngine
from workoutgen.validators import validate_sequence

logger = logging.getLogger(__name__)

catalog_option = click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Load exercises from a JSON catalog file instead of the built-in library.",
)


def _fail(exc: WorkoutError) -> None:
    """Report a WorkoutError and exit: 2 for bad input, 1 for everything else."""
    caller_error = is_caller_error(exc.code)
    logger.log(
        logging.INFO if caller_error else logging.ERROR,
        "Command failed",
        exc_info=exc,
        extra={"workoutgen_error_code": exc.code},
    )
    click.echo(f"Error [{exc.code}] ({exc.error_class}): {exc.message}", err=True)
    sys.exit(2 if caller_error else 1)


def _load_catalog(config: Config, catalog_path: Path | None) -> InMemoryCatalog:
    path = catalog_path or config.catalog_path
    if path is None:
        return default_catalog()
    try:
        return load_catalog(path)
    except WorkoutError as exc:
        _fail(exc)


def _resolve_ids(catalog: InMemoryCatalog, exercise_ids: tuple[str, ...]) -> list[Exercise]:
    sequence: list[Exercise] = []
    for ex_id in exercise_ids:
        ex = catalog.get_exercise(ex_id)
        if ex is None:
            click.echo(f"Error: Unknown exercise id {ex_id!r}.", err=True)
            sys.exit(1)
        sequence.append(ex.snapshot())
    return sequence


def _print_sequence(sequence) -> None:
    for i, ex in enumerate(sequence, start=1):
        click.echo(f"{i:>3}. {ex.name:<28} {ex.muscle_group:<10} ({ex.id})")


@click.group()
@click.pass_context
def main(ctx: click.Context):
    """Workout sequence generator with muscle-group rotation."""
    try:
        config = Config.from_env()
    except RuntimeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    setup_logging(config.log_format, config.log_level)
    ctx.obj = config


@main.command()
@click.option(
    "--length", "-n",
    type=click.IntRange(MIN_WORKOUT_LENGTH, MAX_WORKOUT_LENGTH),
    default=10,
    show_default=True,
    help="Number of exercises.",
)
@click.option(
    "--group", "-g", "groups",
    type=click.Choice(MUSCLE_GROUPS),
    multiple=True,
    help="Enable a muscle group (repeatable). Defaults to all groups.",
)
@click.option("--no-even", is_flag=True, help="Skip even distribution across groups.")
@click.option("--max-retries", type=click.IntRange(min=1), help="Attempt budget for the search.")
@click.option("--seed", type=int, help="Seed the random source for a reproducible sequence.")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@catalog_option
@click.pass_obj
def generate(
    config: Config,
    length: int,
    groups: tuple[str, ...],
    no_even: bool,
    max_retries: int | None,
    seed: int | None,
    as_json: bool,
    catalog_path: Path | None,
):
    """Generate a workout with no muscle group repeated back to back."""
    catalog = _load_catalog(config, catalog_path)
    seed = seed if seed is not None else config.seed
    generator = SequenceGenerator(
        catalog,
        rng=random.Random(seed),
        max_retries=max_retries or config.max_retries,
    )
    enabled = list(groups) if groups else catalog.get_all_muscle_groups()

    try:
        result = generator.generate(length, enabled, even_distribution=not no_even)
    except WorkoutError as exc:
        _fail(exc)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _print_sequence(result.sequence)
    meta = result.metadata
    click.echo()
    click.echo(
        f"{meta.exercise_count} exercises, {len(meta.muscle_groups_used)} muscle groups, "
        f"{meta.attempts} attempt(s), {meta.generation_time_ms} ms"
    )


@main.command("groups")
@catalog_option
@click.pass_obj
def list_groups(config: Config, catalog_path: Path | None):
    """List muscle groups and how many exercises each has."""
    catalog = _load_catalog(config, catalog_path)
    for group, count in catalog.get_exercise_counts().items():
        click.echo(f"{group:<10} {count}")


@main.command()
@click.argument("exercise_ids", nargs=-1, required=True)
@catalog_option
@click.pass_obj
def check(config: Config, exercise_ids: tuple[str, ...], catalog_path: Path | None):
    """Validate a sequence of exercise ids against the rotation constraint."""
    catalog = _load_catalog(config, catalog_path)
    result = validate_sequence(_resolve_ids(catalog, exercise_ids))

    for warning in result.warnings:
        click.echo(f"warning [{warning.code}]: {warning.message}")
    for error in result.errors:
        click.echo(f"error [{error.code}]: {error.message}", err=True)

    if not result.is_valid:
        sys.exit(1)
    click.echo("OK")


@main.command()
@click.argument("exercise_ids", nargs=-1, required=True)
@click.option("--position", "-p", type=int, required=True, help="0-based slot to replace.")
@catalog_option
@click.pass_obj
def alternatives(
    config: Config,
    exercise_ids: tuple[str, ...],
    position: int,
    catalog_path: Path | None,
):
    """List legal replacements for one slot of a sequence."""
    catalog = _load_catalog(config, catalog_path)
    sequence = _resolve_ids(catalog, exercise_ids)
    engine = ReplacementEngine(catalog, history=ReplacementHistory(config.history_size))

    try:
        options = engine.get_replacement_options(sequence, position)
    except WorkoutError as exc:
        _fail(exc)

    if not options:
        click.echo("No alternatives available.")
        return
    for ex in options:
        click.echo(f"{ex.id:<16} {ex.name}")


@main.command()
@catalog_option
@click.pass_obj
def capabilities(config: Config, catalog_path: Path | None):
    """Probe which requests the catalog can satisfy."""
    catalog = _load_catalog(config, catalog_path)
    generator = SequenceGenerator(catalog, rng=random.Random(config.seed))
    click.echo(json.dumps(generator.probe_capabilities(), indent=2))


@main.command()
@click.argument("exercise_ids", nargs=-1, required=True)
@click.option("--position", "-p", type=int, required=True, help="0-based slot to replace.")
@click.option("--with", "replacement_id", required=True, help="Id of the replacement exercise.")
@catalog_option
@click.pass_obj
def swap(
    config: Config,
    exercise_ids: tuple[str, ...],
    position: int,
    replacement_id: str,
    catalog_path: Path | None,
):
    """Replace one exercise in a sequence and print the result."""
    catalog = _load_catalog(config, catalog_path)
    sequence = _resolve_ids(catalog, exercise_ids)
    (replacement,) = _resolve_ids(catalog, (replacement_id,))
    engine = ReplacementEngine(catalog, history=ReplacementHistory(config.history_size))

    try:
        result = engine.replace(sequence, position, replacement)
    except WorkoutError as exc:
        _fail(exc)

    _print_sequence(sequence)
    click.echo()
    click.echo(result.message)


@main.command("errors")
def list_errors():
    """Print the error-code taxonomy as JSON."""
    click.echo(json.dumps(workout_error_taxonomy_v1(), indent=2))
