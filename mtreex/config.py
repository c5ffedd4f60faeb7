from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

_SUPPORTED_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


def _bool_from_env(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_optional_int(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value '{raw}'") from exc


def _normalise_log_level(value: str | None) -> str:
    if value is None:
        return "INFO"
    value = value.strip().upper()
    if value not in _SUPPORTED_LOG_LEVELS:
        raise ValueError(f"Unsupported log level '{value}'. Expected one of {_SUPPORTED_LOG_LEVELS}.")
    return value


def _normalise_metric(value: str | None) -> str:
    if value is None or value.strip() == "":
        return "euclidean"
    return value.strip().lower()


@dataclass(frozen=True)
class RuntimeConfig:
    metric: str
    enable_numba: bool
    log_level: str
    seed: int | None
    check_invariants: bool

    @property
    def deterministic(self) -> bool:
        return self.seed is not None


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("mtreex")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)


@lru_cache(maxsize=None)
def runtime_config() -> RuntimeConfig:
    metric = _normalise_metric(os.getenv("MTREEX_METRIC"))
    enable_numba = _bool_from_env(os.getenv("MTREEX_ENABLE_NUMBA"), default=False)
    log_level = _normalise_log_level(os.getenv("MTREEX_LOG_LEVEL"))
    seed = _parse_optional_int(os.getenv("MTREEX_SEED"))
    check_invariants = _bool_from_env(os.getenv("MTREEX_CHECK_INVARIANTS"), default=False)

    config = RuntimeConfig(
        metric=metric,
        enable_numba=enable_numba,
        log_level=log_level,
        seed=seed,
        check_invariants=check_invariants,
    )
    _configure_logging(config.log_level)
    return config


def reset_runtime_config_cache() -> None:
    runtime_config.cache_clear()
