"""Common utilities for the CubeNet radio stack."""

from common.config import Config, load_node_config
from common.errors import AddressResolutionError, ConfigError, RoutingError
from common.logging_setup import setup_logging, get_logger

__all__ = [
    "Config",
    "load_node_config",
    "AddressResolutionError",
    "ConfigError",
    "RoutingError",
    "setup_logging",
    "get_logger",
]
