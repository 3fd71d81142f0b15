import argparse
from collections.abc import Callable

from viewring.core.models.topology import Token
from viewring.core.service.resolver import ReplicaCorrespondenceResolver
from viewring.core.service.topology import TopologySnapshot
from viewring.core.space.hashspace import HashSpace

Command = Callable[
    [argparse.Namespace, ReplicaCorrespondenceResolver, TopologySnapshot],
    dict
]


def token_from(token: Token | None, key: str | None) -> Token:
    """Return the explicit token, or hash the partition key into one."""
    if token is not None:
        return token
    return HashSpace.hash(key.encode("utf-8"))


def cmd_resolve(
    namespace: argparse.Namespace,
    resolver: ReplicaCorrespondenceResolver,
    topology: TopologySnapshot,
) -> dict:
    if namespace.node is not None:
        resolver = resolver.with_local_endpoint(namespace.node)

    base_token = token_from(namespace.base_token, namespace.base_key)
    view_token = token_from(namespace.view_token, namespace.view_key)
    endpoint = resolver.resolve_view_endpoint(namespace.keyspace, base_token, view_token)

    return {
        "keyspace": namespace.keyspace,
        "base_token": base_token,
        "view_token": view_token,
        "local_endpoint": resolver.local_endpoint,
        "view_endpoint": endpoint,
        "pending": topology.pending_endpoints(view_token, namespace.keyspace),
    }


def cmd_plan(
    namespace: argparse.Namespace,
    resolver: ReplicaCorrespondenceResolver,
    topology: TopologySnapshot,
) -> dict:
    base_token = token_from(namespace.base_token, namespace.base_key)
    view_token = token_from(namespace.view_token, namespace.view_key)

    return {
        "keyspace": namespace.keyspace,
        "datacenter": topology.datacenter_of(resolver.local_endpoint),
        "base_token": base_token,
        "view_token": view_token,
        "pairings": resolver.pairings(namespace.keyspace, base_token, view_token),
    }


def cmd_replicas(
    namespace: argparse.Namespace,
    resolver: ReplicaCorrespondenceResolver,
    topology: TopologySnapshot,
) -> dict:
    _ = resolver
    token = token_from(namespace.token, namespace.key)

    return {
        "keyspace": namespace.keyspace,
        "token": token,
        "natural": topology.natural_endpoints(namespace.keyspace, token),
        "pending": topology.pending_endpoints(token, namespace.keyspace),
    }


COMMANDS: dict[str, Command] = {
    "resolve": cmd_resolve,
    "plan": cmd_plan,
    "replicas": cmd_replicas,
}
