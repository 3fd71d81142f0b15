import pytest
from pydantic import ValidationError

from tests.helpers import FakeViewRingConfig
from tests.utils import config_data, write_config

from viewring.bootstrap.deps import build_topology
from viewring.core.models.topology import NodePhase
from viewring.core.space.hashspace import HashSpace


def load(tmp_path, monkeypatch, data) -> FakeViewRingConfig:
    file = write_config(tmp_path / "viewring.yaml", data)
    monkeypatch.setenv("TEST_VIEWRINGCONFIG", str(file))
    return FakeViewRingConfig()


@pytest.mark.ut
def test_config_is_loaded_from_yaml(view_config):
    assert view_config.node.id == "node-a"
    assert view_config.topology.keyspaces == {"ks": {"dc1": 2}}
    assert [m.id for m in view_config.topology.nodes] == ["node-a", "node-b", "node-c"]
    assert all(m.phase is NodePhase.ready for m in view_config.topology.nodes)


@pytest.mark.ut
def test_phase_is_parsed(tmp_path, monkeypatch):
    data = config_data()
    data["topology"]["nodes"].append(
        {"id": "node-d", "datacenter": "dc1", "tokens": [150], "phase": "joining"}
    )

    config = load(tmp_path, monkeypatch, data)

    assert config.topology.nodes[-1].phase is NodePhase.joining


@pytest.mark.ut
def test_local_node_must_be_declared(tmp_path, monkeypatch):
    with pytest.raises(ValidationError):
        load(tmp_path, monkeypatch, config_data(local="node-z"))


@pytest.mark.ut
def test_replication_factor_must_be_positive(tmp_path, monkeypatch):
    with pytest.raises(ValidationError):
        load(tmp_path, monkeypatch, config_data(keyspaces={"ks": {"dc1": 0}}))


@pytest.mark.ut
def test_keyspace_needs_a_datacenter(tmp_path, monkeypatch):
    with pytest.raises(ValidationError):
        load(tmp_path, monkeypatch, config_data(keyspaces={"ks": {}}))


@pytest.mark.ut
def test_tokens_must_fit_hash_space(tmp_path, monkeypatch):
    nodes = [{"id": "node-a", "datacenter": "dc1", "tokens": [HashSpace.MAX]}]

    with pytest.raises(ValidationError):
        load(tmp_path, monkeypatch, config_data(nodes=nodes))


@pytest.mark.ut
def test_node_ids_must_be_unique(tmp_path, monkeypatch):
    nodes = [
        {"id": "node-a", "datacenter": "dc1", "tokens": [1]},
        {"id": "node-a", "datacenter": "dc2", "tokens": [2]},
    ]

    with pytest.raises(ValidationError):
        load(tmp_path, monkeypatch, config_data(nodes=nodes))


@pytest.mark.ut
def test_build_topology_from_settings(view_config):
    topology = build_topology(view_config.topology)

    assert topology.natural_endpoints("ks", 150) == ["node-b", "node-c"]
    assert topology.datacenter_of("node-a") == "dc1"
    assert topology.in_transition is False
