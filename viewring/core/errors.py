from viewring.core.models.topology import Endpoint, Token


class NotAReplicaError(RuntimeError):
    """
    Raised when the local node is asked for the view endpoint of a base token
    it does not replicate, while no topology change is in flight for the
    view token.

    This is never a transient condition: the caller routed a base write to a
    node that does not own it.
    """

    def __init__(self, keyspace: str, base_token: Token, endpoint: Endpoint) -> None:
        self.keyspace = keyspace
        self.base_token = base_token
        self.endpoint = endpoint
        super().__init__(
            f"Trying to get the view natural endpoint on a non-data replica: "
            f"{endpoint} does not replicate token {base_token} of keyspace {keyspace!r}"
        )


class ReplicationInvariantViolation(AssertionError):
    """
    Raised when the local base and view replica lists do not have the same
    length once shared endpoints are removed.

    Base and view belong to the same keyspace, hence to the same replication
    strategy and the same per-datacenter replication factor. A mismatch means
    the replica sets were produced by an inconsistent strategy or from two
    different ring snapshots.
    """

    def __init__(self, local_base: list[Endpoint], local_view: list[Endpoint]) -> None:
        self.local_base = local_base
        self.local_view = local_view
        super().__init__(
            "Replication strategy should have the same number of endpoints "
            f"for the base and the view: base={local_base} view={local_view}"
        )
