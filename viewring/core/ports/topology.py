from typing import Protocol

from viewring.core.models.topology import Endpoint, Token


class ReplicaSetProvider(Protocol):
    """
    Exposes the placement decided by a keyspace's replication strategy.

    Implementations must be deterministic for a given ring snapshot: two
    calls for the same token return the same endpoints in the same order.
    The order is significant, the first endpoint being the first replica
    for the token, the second endpoint the second replica, and so on.
    """

    def natural_endpoints(self, keyspace: str, token: Token) -> list[Endpoint]:
        """
        Return the ordered natural replicas of `token` under the replication
        strategy of `keyspace`.
        """


class DatacenterResolver(Protocol):
    """
    Maps an endpoint to the datacenter hosting it.
    """

    def datacenter_of(self, endpoint: Endpoint) -> str:
        """Return the datacenter name of `endpoint`."""


class PendingReplicaProvider(Protocol):
    """
    Reports the endpoints about to become replicas of a token while a
    topology change (bootstrap, decommission) is in flight.
    """

    def pending_endpoints(self, token: Token, keyspace: str) -> set[Endpoint]:
        """
        Return the pending endpoints for `token` in `keyspace`. The set is
        empty when the ring is stable.
        """
