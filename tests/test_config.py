import pytest

from mtreex import config as mx_config


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in [
        "MTREEX_METRIC",
        "MTREEX_ENABLE_NUMBA",
        "MTREEX_LOG_LEVEL",
        "MTREEX_SEED",
        "MTREEX_CHECK_INVARIANTS",
    ]:
        monkeypatch.delenv(key, raising=False)


def test_runtime_config_defaults(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    mx_config.reset_runtime_config_cache()

    runtime = mx_config.runtime_config()

    assert runtime.metric == "euclidean"
    assert runtime.enable_numba is False
    assert runtime.log_level == "INFO"
    assert runtime.seed is None
    assert runtime.deterministic is False
    assert runtime.check_invariants is False


def test_runtime_config_is_cached(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    mx_config.reset_runtime_config_cache()

    first = mx_config.runtime_config()
    monkeypatch.setenv("MTREEX_SEED", "5")
    assert mx_config.runtime_config() is first

    mx_config.reset_runtime_config_cache()
    assert mx_config.runtime_config().seed == 5


def test_boolean_flags(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("MTREEX_CHECK_INVARIANTS", "yes")
    monkeypatch.setenv("MTREEX_ENABLE_NUMBA", "garbage")
    mx_config.reset_runtime_config_cache()

    runtime = mx_config.runtime_config()

    assert runtime.check_invariants is True
    assert runtime.enable_numba is False


def test_seed_parsing(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("MTREEX_SEED", "123")
    mx_config.reset_runtime_config_cache()

    runtime = mx_config.runtime_config()
    assert runtime.seed == 123
    assert runtime.deterministic is True


def test_invalid_seed(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("MTREEX_SEED", "not-a-number")
    mx_config.reset_runtime_config_cache()

    with pytest.raises(ValueError):
        mx_config.runtime_config()


def test_invalid_log_level(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("MTREEX_LOG_LEVEL", "chatty")
    mx_config.reset_runtime_config_cache()

    with pytest.raises(ValueError):
        mx_config.runtime_config()


def test_metric_name_is_normalised(monkeypatch: pytest.MonkeyPatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("MTREEX_METRIC", "  Euclidean ")
    mx_config.reset_runtime_config_cache()

    assert mx_config.runtime_config().metric == "euclidean"
