"""Hub discovery records, scan results and stored device records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..gateway.models import Entity


@dataclass
class DiscoveredHub:
    """A hub found on the network.

    The password is the hub's identity; ``ip`` is only where it was last seen.
    """

    name: str
    ip: str
    password: str
    model: str | None = None
    firmware: str | None = None
    discovered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to the persisted record shape."""
        return {
            "name": self.name,
            "ip": self.ip,
            "password": self.password,
            "model": self.model,
            "firmware": self.firmware,
            "discoveredAt": self.discovered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DiscoveredHub":
        """Build from a persisted record; raises KeyError/ValueError if malformed."""
        discovered_at = datetime.fromisoformat(data["discoveredAt"].replace("Z", "+00:00"))
        if discovered_at.tzinfo is None:
            discovered_at = discovered_at.replace(tzinfo=timezone.utc)
        return cls(
            name=data.get("name") or data["password"],
            ip=data["ip"],
            password=data["password"],
            model=data.get("model"),
            firmware=data.get("firmware"),
            discovered_at=discovered_at,
        )


@dataclass
class ScanResult:
    """Outcome of one discovery scan."""

    discovered: list[DiscoveredHub] = field(default_factory=list)
    scanned_count: int = 0
    network: str | None = None
    cancelled: bool = False

    @property
    def found_count(self) -> int:
        return len(self.discovered)

    def to_dict(self) -> dict:
        return {
            "network": self.network,
            "scanned_count": self.scanned_count,
            "found_count": self.found_count,
            "cancelled": self.cancelled,
            "discovered": [h.to_dict() for h in self.discovered],
        }


@dataclass
class DeviceCapabilities:
    """What a stored device can be asked for or told to do."""

    has_temperature: bool = False
    has_switch: bool = False
    has_presets: bool = False
    has_sensors: bool = False

    @classmethod
    def from_entity(cls, entity: Entity) -> "DeviceCapabilities":
        return cls(
            has_temperature=entity.thermostat is not None or "temperature" in entity.sensors,
            has_switch=bool(entity.switches),
            has_presets=entity.active_preset is not None,
            has_sensors=bool(entity.sensors),
        )

    def to_dict(self) -> dict:
        return {
            "hasTemperature": self.has_temperature,
            "hasSwitch": self.has_switch,
            "hasPresets": self.has_presets,
            "hasSensors": self.has_sensors,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceCapabilities":
        return cls(
            has_temperature=bool(data.get("hasTemperature")),
            has_switch=bool(data.get("hasSwitch")),
            has_presets=bool(data.get("hasPresets")),
            has_sensors=bool(data.get("hasSensors")),
        )


@dataclass
class StoredDevice:
    """Last-seen summary of one entity of a hub, kept for offline listing."""

    id: str
    name: str
    dev_class: str
    hub: str
    location: str | None = None
    model: str | None = None
    available: bool = True
    capabilities: DeviceCapabilities = field(default_factory=DeviceCapabilities)

    @classmethod
    def from_entity(cls, entity: Entity, hub: str) -> "StoredDevice":
        return cls(
            id=entity.id,
            name=entity.name,
            dev_class=entity.dev_class,
            hub=hub,
            location=entity.location,
            model=entity.model,
            available=entity.available,
            capabilities=DeviceCapabilities.from_entity(entity),
        )

    def to_dict(self) -> dict:
        """Convert to the persisted record shape."""
        return {
            "id": self.id,
            "name": self.name,
            "dev_class": self.dev_class,
            "hub": self.hub,
            "location": self.location,
            "model": self.model,
            "available": self.available,
            "capabilities": self.capabilities.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StoredDevice":
        """Build from a persisted record; raises KeyError if malformed."""
        return cls(
            id=data["id"],
            name=data.get("name") or data["id"],
            dev_class=data.get("dev_class") or "unknown",
            hub=data["hub"],
            location=data.get("location"),
            model=data.get("model"),
            available=data.get("available", True),
            capabilities=DeviceCapabilities.from_dict(data.get("capabilities") or {}),
        )
