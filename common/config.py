"""Configuration management for CubeNet nodes.

A node is described by a ``Config``. Deployed nodes ship as JSON profiles in
the ``nodes/`` directory; ``load_node_config`` turns a profile into a
validated ``Config``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from typing_extensions import TypedDict

from common.errors import ConfigError

# Smallest frame that still carries one byte of message data:
# frame length byte + packet header + DATA segment header + 1 byte.
MIN_FRAME_SIZE = 1 + 3 + 7 + 1

# The frame length field is a single byte.
MAX_FRAME_SIZE = 256


def _default_nodes() -> Dict[int, int]:
    return {node: node for node in (0x0A, 0x0B, 0x0C, 0x0D)}


def _default_link_addresses() -> Dict[int, int]:
    # nRF24-style 32-bit pipe addresses: 0x0A -> 0x0A0A0A0A
    return {node: node * 0x01010101 for node in (0x0A, 0x0B, 0x0C, 0x0D)}


@dataclass
class Config:
    """Configuration settings for one CubeNet node."""

    # Identity of this node
    name: str = "cube"
    node_address: int = 0x0A
    port: int = 0x0A

    # Radio payload width (bytes per frame)
    frame_size: int = 32

    # Static tables: destination node -> next hop node,
    # node -> physical link address, port -> node
    routes: Dict[int, int] = field(default_factory=_default_nodes)
    link_addresses: Dict[int, int] = field(default_factory=_default_link_addresses)
    port_nodes: Dict[int, int] = field(default_factory=_default_nodes)

    # Transport timing (milliseconds)
    ack_timeout_ms: int = 1500
    ack_delay_ms: int = 250
    segment_spacing_ms: int = 250
    retry_delay_ms: int = 250
    attempt_limit: int = 10

    # Receive buffer capacity for one message
    max_message_len: int = 256

    # Radio settings
    serial_port: Optional[str] = None
    modem_preset: Optional[str] = None
    simulate_radio: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def validate(self) -> "Config":
        """
        Check the configuration for consistency.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigError: If any setting is out of range or a table is incomplete
        """
        if not MIN_FRAME_SIZE <= self.frame_size <= MAX_FRAME_SIZE:
            raise ConfigError(
                f"frame_size must be {MIN_FRAME_SIZE}-{MAX_FRAME_SIZE}, got {self.frame_size}"
            )
        for label, value in (("node_address", self.node_address), ("port", self.port)):
            _check_byte(label, value)
        if self.attempt_limit < 1:
            raise ConfigError(f"attempt_limit must be at least 1, got {self.attempt_limit}")
        if not 0 <= self.max_message_len <= 0xFFFF:
            raise ConfigError(f"max_message_len must be 0-65535, got {self.max_message_len}")
        for label in ("ack_timeout_ms", "ack_delay_ms", "segment_spacing_ms", "retry_delay_ms"):
            if getattr(self, label) < 0:
                raise ConfigError(f"{label} must not be negative")

        for dest, hop in self.routes.items():
            _check_byte("route destination", dest)
            _check_byte("next hop", hop)
            if hop not in self.link_addresses:
                raise ConfigError(f"next hop {hop:#04x} for {dest:#04x} has no link address")
        for port, node in self.port_nodes.items():
            _check_byte("port", port)
            if node != self.node_address and node not in self.routes:
                raise ConfigError(f"port {port:#04x} maps to unroutable node {node:#04x}")
        return self


def _check_byte(label: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ConfigError(f"{label} must be 0-255, got {value}")


class NodeProfile(TypedDict, total=False):
    """Shape of a node profile loaded from JSON."""

    name: str
    node_address: Union[int, str]
    port: Union[int, str]
    frame_size: int
    routes: Dict[str, Union[int, str]]
    link_addresses: Dict[str, Union[int, str]]
    port_nodes: Dict[str, Union[int, str]]
    ack_timeout_ms: int
    ack_delay_ms: int
    segment_spacing_ms: int
    retry_delay_ms: int
    attempt_limit: int
    max_message_len: int
    serial_port: str
    modem_preset: str
    log_level: str


_ADDRESS_KEYS = {"node_address", "port"}
_TABLE_KEYS = {"routes", "link_addresses", "port_nodes"}


def _parse_int(value: Union[int, str]) -> int:
    """Accept ints and strings such as ``"0x0B"`` (JSON has no hex literals)."""
    if isinstance(value, int):
        return value
    try:
        return int(value, 0)
    except (TypeError, ValueError):
        raise ConfigError(f"not an integer: {value!r}") from None


def _parse_table(table: Dict[str, Any]) -> Dict[int, int]:
    return {_parse_int(key): _parse_int(val) for key, val in table.items()}


def _nodes_dir() -> Path:
    root = Path(__file__).resolve()
    while root != root.parent and not (root / "nodes").exists():
        root = root.parent
    return root / "nodes"


def config_from_profile(profile: NodeProfile, **overrides: Any) -> Config:
    """Build a validated Config from a profile dict plus keyword overrides."""
    known = {f.name for f in fields(Config)}
    values: Dict[str, Any] = {}
    for key, raw in {**profile, **overrides}.items():
        if key not in known:
            raise ConfigError(f"unknown configuration key: {key}")
        if raw is None:
            continue
        if key in _ADDRESS_KEYS:
            values[key] = _parse_int(raw)
        elif key in _TABLE_KEYS:
            values[key] = _parse_table(raw)
        else:
            values[key] = raw
    return Config(**values).validate()


def load_node_config(name_or_path: str, **overrides: Any) -> Config:
    """
    Load a node profile by name or path.

    A bare name resolves to ``<name>.json`` in the nodes directory.
    """
    path = Path(name_or_path)
    if not path.suffix:
        path = _nodes_dir() / f"{name_or_path}.json"
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as e:
        raise ConfigError(f"cannot read node profile {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Node file {path} did not contain an object")
    return config_from_profile(data, **overrides)  # type: ignore[arg-type]


def list_nodes() -> Iterable[str]:
    """Return available node profile names (without .json)."""
    for entry in sorted(_nodes_dir().iterdir()):
        if entry.name.endswith(".json"):
            yield entry.name.rsplit(".", 1)[0]
