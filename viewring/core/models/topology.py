from dataclasses import dataclass, field
from enum import StrEnum

Endpoint = str
Token = int


class NodePhase(StrEnum):
    """
    Describes the lifecycle phase of a node within the ring.

    Only ready and draining nodes own tokens today. A joining node will own
    tokens once its bootstrap completes, and a draining node will give its
    tokens up once decommission completes; the difference between the two
    states is what makes an endpoint *pending* for a token.
    """
    ready = "ready"
    joining = "joining"
    draining = "draining"


@dataclass(frozen=True, slots=True)
class NodeSpec:
    """
    Static description of one node of the cluster.
    """
    node_id: Endpoint
    """
    A stable identifier for the node within the cluster. It is the endpoint
    value the resolver compares and returns.
    """

    datacenter: str
    """
    Name of the datacenter hosting the node, as a snitch would report it.
    """

    tokens: tuple[Token, ...] = field(default_factory=tuple)
    """
    The 128-bit tokens placing the node's vnodes on the ring.
    """

    phase: NodePhase = NodePhase.ready
