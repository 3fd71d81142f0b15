import bisect
from collections import Counter
from collections.abc import Callable, Generator, Iterator, Mapping
from typing import Self

from viewring.core.space.vnode import VNode


class Ring:
    """
    Represents a consistent‑hashing ring composed of virtual nodes (vnodes).

    The ring maintains an ordered list of VNode instances, each defined by a
    (node_id, token) pair. The list is sorted in ascending order of vnode.token,
    forming a circular token space. This ordering enables efficient successor
    lookups and deterministic replica selection.

    Key properties:
        - The ring is immutable: operations such as adding or removing vnodes
          return a new Ring instance rather than mutating the existing one.
        - VNode ordering is based solely on the token value. The node_id is
          carried as metadata but does not influence ordering or placement.
        - Successor lookups use `bisect_right` with a key function that extracts
          vnode.token, providing O(log n) lookup performance.
        - The ring wraps around at the end of the token space, preserving the
          circular structure required by consistent hashing.

    Because a ring never changes once built, every replica list computed from
    the same instance reflects the same topology epoch. This is what keeps the
    base and view replica lists of a single resolution comparable.
    """
    def __init__(self, vnodes: list[VNode] = None, *, _sorted: bool = False) -> None:
        vnodes = vnodes or []
        self._vnodes = vnodes if _sorted else sorted(vnodes, key=lambda v: v.token)

    def find_successor(self, token: int) -> VNode:
        """
        Return the vnode responsible for the given token.

        Because the vnode list is sorted by vnode.token, the bisect operation
        returns the index of the first vnode whose token is strictly greater
        than the search token. If the token is greater than or equal to the
        last vnode's token, the search wraps around to index 0, preserving the
        circular nature of the ring.

        Complexity: O(log n)
        """
        idx = bisect.bisect_right(self._vnodes, token, key=lambda v: v.token)
        if idx == len(self._vnodes):
            idx = 0  # wrap-around
        return self._vnodes[idx]

    def add_vnodes(self, vnodes: list[VNode]) -> Self:
        """
        Return a new Ring containing the existing vnodes plus the provided ones.

        The method sorts the new vnodes locally and merges them with the
        existing sorted list using a linear-time merge step.

        Complexity:
            - local sort: O(k log k)
            - merge: O(n + k)
        """
        if not vnodes:
            return self

        new_vnodes = sorted(vnodes, key=lambda v: v.token)
        sorted_vnodes = self._merge_sorted(self._vnodes, new_vnodes)
        return type(self)(sorted_vnodes, _sorted=True)

    def drop_nodes(self, node_ids: set[str]) -> Self:
        """
        Return a new Ring with all vnodes belonging to the given node_ids removed.

        This is used to project the ring a decommission will leave behind.
        The resulting ring preserves sorted order.
        """
        remaining = [v for v in self._vnodes if v.node_id not in node_ids]
        return type(self)(remaining, _sorted=True)

    def iter_from(self, vnode: VNode) -> Generator[VNode, None, None]:
        """
        Yield vnodes in ring order starting from the given vnode.

        The iteration wraps around at the end of the vnode list, ensuring
        full traversal of the ring.
        """
        start = self._vnodes.index(vnode)
        for i in range(len(self._vnodes)):
            yield self._vnodes[(start + i) % len(self._vnodes)]

    def replicas_for(
        self,
        token: int,
        factors: Mapping[str, int],
        datacenter_of: Callable[[str], str],
    ) -> list[str]:
        """
        Return the ordered replica endpoints of `token`.

        The walk starts at the successor of the token and visits the ring in
        order. Each physical node is considered once, at its first vnode, and
        is selected while its datacenter still needs replicas according to
        `factors` (datacenter name -> replication factor). The walk stops as
        soon as every datacenter is satisfied, or when the ring is exhausted.

        The position of an endpoint in the returned list is its cardinality
        for the token.
        """
        if not self._vnodes:
            return []

        wanted = sum(factors.values())
        selected: Counter[str] = Counter()
        seen: set[str] = set()
        result: list[str] = []

        for vnode in self.iter_from(self.find_successor(token)):
            if len(result) == wanted:
                break
            if vnode.node_id in seen:
                continue
            seen.add(vnode.node_id)

            datacenter = datacenter_of(vnode.node_id)
            if selected[datacenter] < factors.get(datacenter, 0):
                selected[datacenter] += 1
                result.append(vnode.node_id)

        return result

    def __getitem__(self, i: int) -> VNode:
        return self._vnodes[i]

    def __len__(self) -> int:
        return len(self._vnodes)

    def __iter__(self) -> Iterator[VNode]:
        return iter(self._vnodes)

    @staticmethod
    def _merge_sorted(a: list[VNode], b: list[VNode]) -> list[VNode]:
        """
        Merge two sorted lists of vnodes.
        Equivalent to a manual merge step in merge sort.
        """
        i = j = 0
        merged: list[VNode] = []
        len_a, len_b = len(a), len(b)

        while i < len_a and j < len_b:
            if a[i].token <= b[j].token:
                merged.append(a[i])
                i += 1
            else:
                merged.append(b[j])
                j += 1

        if i < len_a:
            merged.extend(a[i:])
        if j < len_b:
            merged.extend(b[j:])

        return merged
