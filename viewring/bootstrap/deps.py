import json
from functools import lru_cache

from pydantic import ValidationError

from viewring.bootstrap.config.loader import get_cli_args
from viewring.bootstrap.config.settings import TopologySettings, ViewRingConfig
from viewring.core.models.topology import NodeSpec
from viewring.core.ports.render import Renderer
from viewring.core.service.resolver import ReplicaCorrespondenceResolver
from viewring.core.service.topology import TopologySnapshot
from viewring.infra.format_renderer import RENDERERS


def build_topology(settings: TopologySettings) -> TopologySnapshot:
    nodes = [
        NodeSpec(
            node_id=member.id,
            datacenter=member.datacenter,
            tokens=tuple(member.tokens),
            phase=member.phase,
        )
        for member in settings.nodes
    ]
    return TopologySnapshot(nodes, settings.keyspaces)


@lru_cache
def get_topology() -> TopologySnapshot:
    return build_topology(get_config().topology)


@lru_cache
def get_resolver() -> ReplicaCorrespondenceResolver:
    topology = get_topology()
    return ReplicaCorrespondenceResolver(
        replicas=topology,
        datacenters=topology,
        pending=topology,
        local_endpoint=get_config().node.id,
    )


@lru_cache
def get_renderer() -> Renderer:
    return RENDERERS[get_cli_args().output]()


@lru_cache
def get_config() -> ViewRingConfig:
    try:
        return ViewRingConfig()  # type: ignore[call-arg]
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(map(str, err['loc']))}: {err['msg']}")
        raise SystemExit("\n".join(msg))
