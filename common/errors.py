"""Configuration and decoding errors for the CubeNet stack."""


class ConfigError(ValueError):
    """Raised when a node configuration is invalid."""
    pass


class RoutingError(KeyError):
    """Raised when a destination has no entry in the static routing table."""
    pass


class AddressResolutionError(KeyError):
    """Raised when a node or port id has no physical/network mapping."""
    pass
