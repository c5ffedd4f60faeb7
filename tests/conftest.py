import pytest

from mtreex import config as mx_config


@pytest.fixture(autouse=True)
def _fresh_runtime_config():
    mx_config.reset_runtime_config_cache()
    yield
    mx_config.reset_runtime_config_cache()
