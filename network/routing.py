"""Static next-hop routing."""

from typing import Dict, Iterable, Mapping, Optional

from common.errors import RoutingError


class RoutingTable:
    """
    Static map from final destination node to next-hop node.

    The table must cover every node the deployment talks to. A missing
    destination is a configuration error, reported when the table is built
    (if ``nodes`` is given) or on lookup.
    """

    def __init__(self, next_hops: Mapping[int, int], nodes: Optional[Iterable[int]] = None):
        self._next_hops: Dict[int, int] = dict(next_hops)
        if nodes is not None:
            missing = sorted(set(nodes) - set(self._next_hops))
            if missing:
                listed = ", ".join(f"{node:#04x}" for node in missing)
                raise RoutingError(f"routing table has no entry for {listed}")

    def next_hop(self, dest_node: int) -> int:
        try:
            return self._next_hops[dest_node]
        except KeyError:
            raise RoutingError(f"no route to node {dest_node:#04x}") from None

    def __contains__(self, dest_node: int) -> bool:
        return dest_node in self._next_hops

    def __repr__(self) -> str:
        routes = ", ".join(f"{d:#04x}->{h:#04x}" for d, h in sorted(self._next_hops.items()))
        return f"RoutingTable({routes})"
