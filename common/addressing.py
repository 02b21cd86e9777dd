"""Static address resolution for CubeNet nodes.

Ports are globally unique across the network, so a port id alone is enough
to find the node that owns it. Node ids are in turn mapped to the physical
address the frame transport understands.
"""

from typing import Dict, Mapping

from common.config import Config
from common.errors import AddressResolutionError


class AddressResolver:
    """Resolve node ids to link addresses and port ids to node ids."""

    def __init__(
        self,
        link_addresses: Mapping[int, int],
        port_nodes: Mapping[int, int],
    ):
        self._link_addresses: Dict[int, int] = dict(link_addresses)
        self._port_nodes: Dict[int, int] = dict(port_nodes)

    @classmethod
    def from_config(cls, config: Config) -> "AddressResolver":
        return cls(config.link_addresses, config.port_nodes)

    def resolve_link_address(self, node_id: int) -> int:
        """Physical frame-transport address of ``node_id``."""
        try:
            return self._link_addresses[node_id]
        except KeyError:
            raise AddressResolutionError(f"no link address for node {node_id:#04x}") from None

    def resolve_network_address(self, port_id: int) -> int:
        """Node id that owns ``port_id``."""
        try:
            return self._port_nodes[port_id]
        except KeyError:
            raise AddressResolutionError(f"no node owns port {port_id:#04x}") from None
