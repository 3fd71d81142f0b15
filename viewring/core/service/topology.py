import logging
from collections.abc import Iterable, Mapping

from viewring.core.models.topology import Endpoint, NodePhase, NodeSpec, Token
from viewring.core.space.ring import Ring
from viewring.core.space.vnode import VNode


class TopologySnapshot:
    """
    An immutable picture of the cluster's shape at one point in time.

    The snapshot answers the three questions the view replica resolver asks
    about the cluster: which endpoints replicate a token, which datacenter
    hosts an endpoint, and which endpoints are about to become replicas of a
    token. It plays the part of the replication strategy, the snitch and the
    pending range tracker for one ring epoch.

    Two consistent-hash rings are built:
    - the natural ring holds the vnodes of ready and draining nodes, that is
      the nodes owning tokens right now,
    - the future ring is the ring the in-flight topology change leads to:
      joining nodes are woven in and draining nodes are removed.

    An endpoint is pending for a token when the future ring selects it as a
    replica and the natural ring does not. When no node is joining or
    draining both rings are the same object and nothing is ever pending.

    Rebuilding a snapshot is the only way to change the topology, so a
    caller holding a snapshot reads base and view replicas from the same
    epoch.
    """

    def __init__(
        self,
        nodes: Iterable[NodeSpec],
        keyspaces: Mapping[str, Mapping[str, int]],
    ) -> None:
        self._nodes: dict[Endpoint, NodeSpec] = {n.node_id: n for n in nodes}
        self._keyspaces = {name: dict(factors) for name, factors in keyspaces.items()}
        self._logger = logging.getLogger("core.service.topology")

        natural: list[VNode] = []
        joining: list[VNode] = []
        draining: set[Endpoint] = set()
        for node in self._nodes.values():
            vnodes = VNode.vnodes_for(node.node_id, node.tokens)
            if node.phase is NodePhase.joining:
                joining.extend(vnodes)
            else:
                natural.extend(vnodes)
                if node.phase is NodePhase.draining:
                    draining.add(node.node_id)

        self._ring = Ring(natural)
        future = self._ring.add_vnodes(joining)
        if draining:
            future = future.drop_nodes(draining)
        self._future_ring = future

        self._logger.info(
            f"Topology snapshot built with {len(self._nodes)} nodes, "
            f"{len(self._ring)} vnodes, {len(joining)} joining vnodes "
            f"and {len(draining)} draining nodes"
        )

    @property
    def nodes(self) -> dict[Endpoint, NodeSpec]:
        return self._nodes.copy()

    @property
    def ring(self) -> Ring:
        return self._ring

    @property
    def future_ring(self) -> Ring:
        return self._future_ring

    @property
    def in_transition(self) -> bool:
        """Reports whether a join or a decommission is in flight."""
        return self._future_ring is not self._ring

    def replication(self, keyspace: str) -> dict[str, int]:
        """Return the per-datacenter replication factors of `keyspace`."""
        if keyspace not in self._keyspaces:
            raise KeyError(f"Keyspace {keyspace} is not defined")
        return self._keyspaces[keyspace].copy()

    def natural_endpoints(self, keyspace: str, token: Token) -> list[Endpoint]:
        factors = self.replication(keyspace)
        return self._ring.replicas_for(token, factors, self.datacenter_of)

    def datacenter_of(self, endpoint: Endpoint) -> str:
        node = self._nodes.get(endpoint)
        if node is None:
            raise KeyError(f"Node {endpoint} is not registered")
        return node.datacenter

    def pending_endpoints(self, token: Token, keyspace: str) -> set[Endpoint]:
        factors = self.replication(keyspace)
        if not self.in_transition:
            return set()

        natural = set(self._ring.replicas_for(token, factors, self.datacenter_of))
        future = self._future_ring.replicas_for(token, factors, self.datacenter_of)
        return {endpoint for endpoint in future if endpoint not in natural}
