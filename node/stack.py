"""Assemble the link, network and transport layers for one node."""

from common.addressing import AddressResolver
from common.config import Config
from common.errors import ConfigError
from framing.link import LinkLayer
from network.router import NetworkRouter
from network.routing import RoutingTable
from reliability.session import TransportSession
from transport.base import FrameTransport
from transport.memory import InMemoryRadio, InMemoryRadioBus


def build_session(config: Config, transport: FrameTransport) -> TransportSession:
    """
    Build the protocol stack for ``config`` on top of ``transport``.

    Raises:
        ConfigError: If the transport's frame size differs from the config's
        RoutingError: If a node owning a port has no route
    """
    if transport.frame_size != config.frame_size:
        raise ConfigError(
            f"transport carries {transport.frame_size}-byte frames, "
            f"config expects {config.frame_size}"
        )
    remote_nodes = set(config.port_nodes.values()) - {config.node_address}
    routing = RoutingTable(config.routes, nodes=remote_nodes)
    resolver = AddressResolver.from_config(config)
    link = LinkLayer(transport)
    router = NetworkRouter(link, config.node_address, routing, resolver)
    return TransportSession(router, resolver, config.port, config)


def build_simulated_radio(config: Config, bus: InMemoryRadioBus) -> InMemoryRadio:
    """In-memory radio listening on this node's own link address."""
    try:
        address = config.link_addresses[config.node_address]
    except KeyError:
        raise ConfigError(
            f"node {config.node_address:#04x} has no link address of its own"
        ) from None
    return InMemoryRadio(address, bus, frame_size=config.frame_size)


def build_simulated_session(config: Config, bus: InMemoryRadioBus) -> TransportSession:
    """Stack for ``config`` attached to a simulated radio bus."""
    return build_session(config, build_simulated_radio(config, bus))
