import yaml
from pathlib import Path

from viewring.core.models.topology import NodePhase, NodeSpec
from viewring.core.service.resolver import ReplicaCorrespondenceResolver
from viewring.core.service.topology import TopologySnapshot


def make_node(node_id, datacenter="dc1", tokens=(1,), phase=NodePhase.ready):
    return NodeSpec(
        node_id=node_id,
        datacenter=datacenter,
        tokens=tuple(tokens),
        phase=phase,
    )


def make_resolver(topology, local_endpoint):
    return ReplicaCorrespondenceResolver(
        replicas=topology,
        datacenters=topology,
        pending=topology,
        local_endpoint=local_endpoint,
    )


def two_dc_snapshot() -> TopologySnapshot:
    """
    Six nodes alternating between two datacenters, two replicas per
    datacenter.
    """
    nodes = [
        make_node("a1", "dc1", [10]),
        make_node("b2", "dc2", [20]),
        make_node("c1", "dc1", [30]),
        make_node("d2", "dc2", [40]),
        make_node("e1", "dc1", [50]),
        make_node("f2", "dc2", [60]),
    ]
    return TopologySnapshot(nodes, {"ks": {"dc1": 2, "dc2": 2}})


def config_data(local="node-a", **overrides) -> dict:
    data = {
        "node": {"id": local},
        "topology": {
            "keyspaces": {"ks": {"dc1": 2}},
            "nodes": [
                {"id": "node-a", "datacenter": "dc1", "tokens": [100]},
                {"id": "node-b", "datacenter": "dc1", "tokens": [200]},
                {"id": "node-c", "datacenter": "dc1", "tokens": [300]},
            ],
        },
    }
    data["topology"].update(overrides)
    return data


def write_config(path: Path, data: dict) -> Path:
    path.write_text(yaml.dump(data))
    return path
