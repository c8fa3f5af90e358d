"""Translate typed document nodes into entities.

Each translator handles one node kind. Failures are contained per entity: a
node that cannot be translated is logged and left out of the snapshot, never
aborting the rest of it.
"""

import logging

from .document import (
    ApplianceNode,
    DomainObjects,
    GatewayNode,
    LocationNode,
    LogCategory,
    LogNode,
    OffsetNode,
    RelayNode,
    ThermostatNode,
)
from .models import ActuatorData, Entity, GatewayInfo, GatewayType

logger = logging.getLogger(__name__)

THERMOSTAT_MODEL_MARKERS = ("159", "143")  # Adam, Anna
POWER_FIRMWARE_MARKER = "smile_v"  # Smile P1
STRETCH_FIRMWARE_MARKER = "stretch_v"

GATEWAY_APPLIANCE = "gateway"
HEATER_APPLIANCE = "heater_central"
CONTROL_STATE_LOG = "control_state"


def parse_number(value: str | None) -> float | None:
    """Parse a numeric string, returning None for anything unparsable."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return number


def parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in ("true", "1", "on")


def classify_gateway(model: str | None, firmware: str | None) -> GatewayType:
    """Best-effort gateway family from substrings of model id and firmware.

    Unrecognized hardware falls back to GatewayType.UNKNOWN.
    """
    model = model if isinstance(model, str) else ""
    firmware = firmware if isinstance(firmware, str) else ""

    if any(marker in model for marker in THERMOSTAT_MODEL_MARKERS):
        return GatewayType.THERMOSTAT
    if POWER_FIRMWARE_MARKER in firmware:
        return GatewayType.POWER
    if STRETCH_FIRMWARE_MARKER in firmware:
        return GatewayType.STRETCH
    return GatewayType.UNKNOWN


class GatewayTranslator:
    """Gateway node to GatewayInfo, plus gateway/heater appliance ids."""

    def translate(self, node: GatewayNode) -> GatewayInfo:
        return GatewayInfo(
            hostname=node.hostname or "unknown",
            name=node.name or "Plugwise Gateway",
            model=node.vendor_model or "Unknown",
            model_id=node.vendor_model,
            type=classify_gateway(node.vendor_model, node.firmware_version),
            version=node.firmware_version or "0.0.0",
            hw_version=node.hardware_version,
            mac_address=node.mac_address,
        )

    def extract_ids(self, appliances: list[ApplianceNode]) -> tuple[str, str]:
        """Return (gateway_id, heater_id); empty strings when absent."""
        gateway_id = ""
        heater_id = ""
        for appliance in appliances:
            if appliance.type == GATEWAY_APPLIANCE and appliance.id:
                gateway_id = appliance.id
            elif appliance.type == HEATER_APPLIANCE and appliance.id:
                heater_id = appliance.id
        return gateway_id, heater_id


class MeasurementTranslator:
    """Log entries to numeric sensors.

    Cumulative and interval readings get a suffix so they never overwrite the
    point reading of the same quantity.
    """

    def translate(self, logs: list[LogNode], entity: Entity) -> None:
        for log in logs:
            if not log.type:
                continue
            value = parse_number(log.measurement)
            if value is None:
                continue
            entity.sensors[self.sensor_key(log)] = value

    @staticmethod
    def sensor_key(log: LogNode) -> str:
        return f"{log.type}{log.category.value}"


class ActuatorTranslator:
    """Relay, thermostat and temperature-offset actuators."""

    def translate(self, node: ApplianceNode, entity: Entity) -> None:
        relay_seen = False
        for actuator in node.actuators:
            match actuator:
                case RelayNode(state=state, lock=lock) if state is not None:
                    # only the first relay with a state counts
                    if relay_seen:
                        continue
                    relay_seen = True
                    entity.switches["relay"] = state == "on"
                    if lock is not None:
                        entity.switches["lock"] = parse_bool(lock)
                case ThermostatNode():
                    if entity.thermostat is None:
                        entity.thermostat = ActuatorData()
                    self._apply(
                        entity.thermostat,
                        actuator.setpoint,
                        actuator.lower_bound,
                        actuator.upper_bound,
                        actuator.resolution,
                    )
                case OffsetNode():
                    if entity.temperature_offset is None:
                        entity.temperature_offset = ActuatorData()
                    self._apply(
                        entity.temperature_offset,
                        actuator.offset,
                        actuator.lower_bound,
                        actuator.upper_bound,
                        actuator.resolution,
                    )

    @staticmethod
    def _apply(
        data: ActuatorData,
        setpoint: str | None,
        lower_bound: str | None,
        upper_bound: str | None,
        resolution: str | None,
    ) -> None:
        for name, raw in (
            ("setpoint", setpoint),
            ("lower_bound", lower_bound),
            ("upper_bound", upper_bound),
            ("resolution", resolution),
        ):
            value = parse_number(raw)
            if value is not None:
                setattr(data, name, value)


class ApplianceTranslator:
    """One Entity per appliance node."""

    def __init__(
        self,
        measurements: MeasurementTranslator | None = None,
        actuators: ActuatorTranslator | None = None,
    ):
        self.measurements = measurements or MeasurementTranslator()
        self.actuators = actuators or ActuatorTranslator()

    def translate(self, node: ApplianceNode) -> Entity | None:
        if not node.id:
            logger.warning("Skipping appliance without id (name=%s)", node.name)
            return None

        entity = Entity(
            id=node.id,
            name=node.name or "Unknown Device",
            dev_class=node.type or "unknown",
            available=True,
            model=node.vendor_model,
            vendor=node.vendor_name,
            firmware=node.firmware_version,
            hardware=node.hardware_version,
            mac_address=node.mac_address,
            location=node.location_id,
        )
        self.measurements.translate(node.logs, entity)
        self.actuators.translate(node, entity)
        return entity


class LocationTranslator:
    """One zone Entity per location node."""

    def __init__(self, measurements: MeasurementTranslator | None = None):
        self.measurements = measurements or MeasurementTranslator()

    def translate(self, node: LocationNode) -> Entity | None:
        if not node.id:
            logger.warning("Skipping location without id (name=%s)", node.name)
            return None

        entity = Entity(
            id=node.id,
            name=node.name or "Unknown Location",
            dev_class="zone",
            available=True,
            active_preset=node.preset,
            climate_mode=node.climate_mode,
        )
        self.measurements.translate(node.logs, entity)

        for log in node.logs:
            if (
                log.category is LogCategory.POINT
                and log.type == CONTROL_STATE_LOG
                and log.measurement
                and parse_number(log.measurement) is None
            ):
                entity.control_state = log.measurement
                break

        return entity


class DocumentTranslator:
    """Builds the entity map of a whole document."""

    def __init__(self):
        measurements = MeasurementTranslator()
        self.gateway = GatewayTranslator()
        self.appliances = ApplianceTranslator(measurements, ActuatorTranslator())
        self.locations = LocationTranslator(measurements)

    def translate_entities(self, doc: DomainObjects) -> dict[str, Entity]:
        entities: dict[str, Entity] = {}

        for node in [*doc.appliances, *doc.locations]:
            try:
                match node:
                    case ApplianceNode():
                        entity = self.appliances.translate(node)
                    case LocationNode():
                        entity = self.locations.translate(node)
                    case _:
                        entity = None
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping %s %s: %s", type(node).__name__, node.id, e)
                continue

            if entity is None:
                continue
            if entity.id in entities:
                logger.warning("Duplicate entity id %s, keeping the first", entity.id)
                continue
            entities[entity.id] = entity

        return entities
