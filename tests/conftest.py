import pytest

from tests.helpers import FakeViewRingConfig
from tests.utils import config_data, write_config

from viewring.bootstrap import deps
from viewring.bootstrap.config import loader


@pytest.fixture
def config_file(tmp_path):
    return write_config(tmp_path / "viewring.yaml", config_data())


@pytest.fixture
def view_config(config_file, monkeypatch) -> FakeViewRingConfig:
    monkeypatch.setenv("TEST_VIEWRINGCONFIG", str(config_file))
    return FakeViewRingConfig()


@pytest.fixture
def clear_caches():
    cached = (
        loader.get_cli_args,
        loader.get_configfile,
        deps.get_config,
        deps.get_topology,
        deps.get_resolver,
        deps.get_renderer,
    )
    for func in cached:
        func.cache_clear()
    yield
    for func in cached:
        func.cache_clear()
