"""Typed entities produced from a gateway document."""

from dataclasses import dataclass, field
from enum import Enum


class GatewayType(Enum):
    """Gateway families, classified from model id and firmware string."""

    THERMOSTAT = "thermostat"
    POWER = "power"
    STRETCH = "stretch"
    UNKNOWN = "unknown"


@dataclass
class GatewayInfo:
    """Identity of the gateway a client is connected to."""

    hostname: str
    name: str
    model: str
    type: GatewayType
    version: str
    model_id: str | None = None
    hw_version: str | None = None
    mac_address: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "hostname": self.hostname,
            "name": self.name,
            "model": self.model,
            "model_id": self.model_id,
            "type": self.type.value,
            "version": self.version,
            "hw_version": self.hw_version,
            "mac_address": self.mac_address,
        }


@dataclass
class ActuatorData:
    """Setpoint and limits of a thermostat or offset actuator."""

    setpoint: float | None = None
    lower_bound: float | None = None
    upper_bound: float | None = None
    resolution: float | None = None

    def to_dict(self) -> dict:
        return {
            "setpoint": self.setpoint,
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "resolution": self.resolution,
        }


@dataclass
class Entity:
    """A device (appliance) or zone (location) in a snapshot."""

    id: str
    name: str
    dev_class: str
    available: bool = True
    model: str | None = None
    vendor: str | None = None
    firmware: str | None = None
    hardware: str | None = None
    mac_address: str | None = None
    location: str | None = None
    sensors: dict[str, float] = field(default_factory=dict)
    switches: dict[str, bool] = field(default_factory=dict)
    thermostat: ActuatorData | None = None
    temperature_offset: ActuatorData | None = None
    active_preset: str | None = None
    control_state: str | None = None
    climate_mode: str | None = None

    @property
    def is_zone(self) -> bool:
        return self.dev_class == "zone"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "dev_class": self.dev_class,
            "available": self.available,
            "model": self.model,
            "vendor": self.vendor,
            "firmware": self.firmware,
            "hardware": self.hardware,
            "mac_address": self.mac_address,
            "location": self.location,
            "sensors": dict(self.sensors),
            "switches": dict(self.switches),
            "thermostat": self.thermostat.to_dict() if self.thermostat else None,
            "temperature_offset": (
                self.temperature_offset.to_dict() if self.temperature_offset else None
            ),
            "active_preset": self.active_preset,
            "control_state": self.control_state,
            "climate_mode": self.climate_mode,
        }


@dataclass
class GatewaySnapshot:
    """Full state of one gateway at the time of a single fetch."""

    gateway_id: str
    heater_id: str
    gateway_info: GatewayInfo
    entities: dict[str, Entity] = field(default_factory=dict)

    def zones(self) -> list[Entity]:
        return [e for e in self.entities.values() if e.is_zone]

    def devices(self) -> list[Entity]:
        return [e for e in self.entities.values() if not e.is_zone]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "gateway_id": self.gateway_id,
            "heater_id": self.heater_id,
            "gateway_info": self.gateway_info.to_dict(),
            "entities": {eid: e.to_dict() for eid, e in self.entities.items()},
        }
