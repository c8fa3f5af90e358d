"""Hub discovery - concurrent network probing, hub registry and persistence.

Example usage:
    >>> from plugwise_hub.core import HubCredential
    >>> from plugwise_hub.discovery import DiscoveryEngine
    >>>
    >>> engine = DiscoveryEngine()
    >>> result = engine.scan([HubCredential("abcdefgh")], network="192.168.1.0/24")
    >>> for hub in result.discovered:
    ...     print(hub.name, hub.ip)
"""

from .engine import DiscoveryEngine, add_hub
from .models import DeviceCapabilities, DiscoveredHub, ScanResult, StoredDevice
from .registry import HubRegistry
from .storage import DeviceStore, HubStore

__all__ = [
    "DiscoveryEngine",
    "add_hub",
    "DiscoveredHub",
    "ScanResult",
    "DeviceCapabilities",
    "StoredDevice",
    "HubRegistry",
    "HubStore",
    "DeviceStore",
]
