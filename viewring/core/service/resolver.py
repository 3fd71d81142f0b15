import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from typing import Self

from viewring.core.errors import NotAReplicaError, ReplicationInvariantViolation
from viewring.core.models.topology import Endpoint, Token
from viewring.core.ports.topology import (
    DatacenterResolver,
    PendingReplicaProvider,
    ReplicaSetProvider,
)


def locality_filter(
    endpoints: Iterable[Endpoint],
    local_dc: str,
    datacenter_of: Callable[[Endpoint], str],
) -> list[Endpoint]:
    """Keep the endpoints hosted in `local_dc`, in their original order."""
    return [e for e in endpoints if datacenter_of(e) == local_dc]


def prune_shared(
    local_base: Sequence[Endpoint],
    view_replicas: Iterable[Endpoint],
    local_dc: str,
    datacenter_of: Callable[[Endpoint], str],
) -> tuple[list[Endpoint], list[Endpoint]]:
    """
    Remove the endpoints replicating both tokens from both sides.

    An endpoint that is a replica of the base token and of the view token
    writes the view mutation to itself, so it takes no part in the rank
    correspondence. The view replicas are walked in order: a view replica
    still present on the base side consumes one base occurrence; any other
    view replica of the local datacenter is kept for the view side.

    Returns the pruned local base list and the local view list, both in
    replica order.
    """
    remaining = Counter(local_base)
    removed: Counter[Endpoint] = Counter()
    local_view: list[Endpoint] = []

    for endpoint in view_replicas:
        if remaining[endpoint] > 0:
            remaining[endpoint] -= 1
            removed[endpoint] += 1
        elif datacenter_of(endpoint) == local_dc:
            local_view.append(endpoint)

    pruned_base: list[Endpoint] = []
    for endpoint in local_base:
        # removal by value drops the first occurrences
        if removed[endpoint] > 0:
            removed[endpoint] -= 1
        else:
            pruned_base.append(endpoint)

    return pruned_base, local_view


def correspond_by_rank(
    pruned_base: Sequence[Endpoint],
    local_view: Sequence[Endpoint],
    endpoint: Endpoint,
) -> Endpoint | None:
    """
    Return the view replica holding the same rank as `endpoint` among the
    base replicas, or None when `endpoint` is not a base replica.

    Raises ReplicationInvariantViolation when the two lists differ in
    length: they come from the same strategy and the same keyspace, so they
    must carry the same number of local replicas.
    """
    if len(pruned_base) != len(local_view):
        raise ReplicationInvariantViolation(list(pruned_base), list(local_view))

    try:
        idx = pruned_base.index(endpoint)
    except ValueError:
        return None

    return local_view[idx]


class ReplicaCorrespondenceResolver:
    """
    Chooses the view replica a base replica forwards its view mutation to.

    The view natural endpoint is the endpoint which has the same cardinality
    as the local node in the replication factor. The cardinality is the rank
    at which a node stores a piece of data for a token.

    For example, with the ring A, T1 -> B, T2 -> C, T3 -> A and a base row at
    T1 whose view row sits at T3, the pairing is:

        A writes to C (A's cardinality is 1 for T1, C's cardinality is 1 for T3)
        B writes to A (B's cardinality is 2 for T1, A's cardinality is 2 for T3)
        C writes to B (C's cardinality is 3 for T1, B's cardinality is 3 for T3)

    Only replicas of the local datacenter take part in the pairing, and any
    endpoint replicating both tokens is removed from both sides before ranks
    are compared. A node which is itself a view replica always writes to
    itself.

    The resolver holds no state besides its collaborators and the local
    endpoint. Every call reads the topology afresh, which means the
    collaborators must answer the base and the view lookups of one call from
    the same ring snapshot.
    """

    def __init__(
        self,
        replicas: ReplicaSetProvider,
        datacenters: DatacenterResolver,
        pending: PendingReplicaProvider,
        local_endpoint: Endpoint,
    ) -> None:
        self._replicas = replicas
        self._datacenters = datacenters
        self._pending = pending
        self._local_endpoint = local_endpoint
        self._logger = logging.getLogger("core.service.resolver")

    @property
    def local_endpoint(self) -> Endpoint:
        return self._local_endpoint

    def with_local_endpoint(self, endpoint: Endpoint) -> Self:
        """Return a resolver sharing the collaborators, seen from `endpoint`."""
        return type(self)(self._replicas, self._datacenters, self._pending, endpoint)

    def resolve_view_endpoint(
        self,
        keyspace: str,
        base_token: Token,
        view_token: Token,
    ) -> Endpoint:
        """
        Return the view replica the local node must write to.

        When the local node is not a base replica but a topology change is
        in flight for the view token, the local node itself is returned; the
        caller is expected to also write the mutation to its batch log since
        the definitive owner cannot be resolved yet.

        Raises NotAReplicaError when the local node does not replicate
        `base_token` and no endpoint is pending for `view_token`.
        """
        local = self._local_endpoint
        base_replicas = self._replicas.natural_endpoints(keyspace, base_token)
        view_replicas = self._replicas.natural_endpoints(keyspace, view_token)

        if local in view_replicas:
            self._logger.debug(
                f"{local} replicates view token {view_token}, writing to itself"
            )
            return local

        datacenter_of = self._datacenters.datacenter_of
        local_dc = datacenter_of(local)
        local_base = locality_filter(base_replicas, local_dc, datacenter_of)
        pruned_base, local_view = prune_shared(
            local_base, view_replicas, local_dc, datacenter_of
        )

        target = correspond_by_rank(pruned_base, local_view, local)
        if target is not None:
            self._logger.debug(
                f"{local} pairs with {target} for base token {base_token} "
                f"and view token {view_token} in {local_dc}"
            )
            return target

        if self._pending.pending_endpoints(view_token, keyspace):
            self._logger.warning(
                f"{local} is not a base replica of {base_token} but endpoints are "
                f"pending for view token {view_token}, using itself as view replica"
            )
            return local

        raise NotAReplicaError(keyspace, base_token, local)

    def pairings(
        self,
        keyspace: str,
        base_token: Token,
        view_token: Token,
    ) -> dict[Endpoint, Endpoint]:
        """
        Resolve the view endpoint from the point of view of every base
        replica of the local datacenter.

        On a stable ring the values are pairwise distinct, except for the
        endpoints replicating both tokens which map to themselves.
        """
        datacenter_of = self._datacenters.datacenter_of
        base_replicas = self._replicas.natural_endpoints(keyspace, base_token)
        local_base = locality_filter(
            base_replicas, datacenter_of(self._local_endpoint), datacenter_of
        )

        return {
            endpoint: self.with_local_endpoint(endpoint).resolve_view_endpoint(
                keyspace, base_token, view_token
            )
            for endpoint in local_base
        }
