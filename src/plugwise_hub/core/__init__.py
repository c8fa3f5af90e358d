"""Core module - configuration, exceptions, and utilities."""

from .config import (
    Config,
    DiscoveryConfig,
    GatewayConfig,
    HubCredential,
    get_config,
    load_hub_credentials,
    set_config,
)
from .exceptions import (
    AuthenticationError,
    ConnectionError,
    DomainError,
    NotConnectedError,
    ParseError,
    PlugwiseHubError,
    StorageError,
    ValidationError,
)
from .utils import (
    detect_local_network,
    get_interfaces,
    network_hosts,
    validate_ip,
    validate_network,
)

__all__ = [
    "Config",
    "GatewayConfig",
    "DiscoveryConfig",
    "HubCredential",
    "get_config",
    "set_config",
    "load_hub_credentials",
    "PlugwiseHubError",
    "AuthenticationError",
    "ConnectionError",
    "ParseError",
    "DomainError",
    "NotConnectedError",
    "ValidationError",
    "StorageError",
    "validate_ip",
    "validate_network",
    "network_hosts",
    "get_interfaces",
    "detect_local_network",
]
