import os
from dataclasses import dataclass

from workoutgen.generator import MAX_RETRY_ATTEMPTS
from workoutgen.history import DEFAULT_MAX_HISTORY
from workoutgen.logging import LOG_FORMATS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int_env(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Config:
    max_retries: int = MAX_RETRY_ATTEMPTS
    history_size: int = DEFAULT_MAX_HISTORY
    log_format: str = "text"
    log_level: str = "WARNING"
    seed: int | None = None
    catalog_path: str | None = None

    @classmethod
    def from_env(cls) -> "Config":
        max_retries = _int_env("WORKOUTGEN_MAX_RETRIES", MAX_RETRY_ATTEMPTS)
        history_size = _int_env("WORKOUTGEN_HISTORY_SIZE", DEFAULT_MAX_HISTORY)
        if max_retries < 1:
            raise RuntimeError("WORKOUTGEN_MAX_RETRIES must be at least 1")
        if history_size < 1:
            raise RuntimeError("WORKOUTGEN_HISTORY_SIZE must be at least 1")

        log_level = os.environ.get("WORKOUTGEN_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise RuntimeError(f"WORKOUTGEN_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        log_format = os.environ.get("WORKOUTGEN_LOG_FORMAT", "text").lower()
        if log_format not in LOG_FORMATS:
            raise RuntimeError(f"WORKOUTGEN_LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}")

        return cls(
            max_retries=max_retries,
            history_size=history_size,
            log_format=log_format,
            log_level=log_level,
            seed=_int_env("WORKOUTGEN_SEED", None),
            catalog_path=os.environ.get("WORKOUTGEN_CATALOG") or None,
        )
