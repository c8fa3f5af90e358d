"""Gateway client.

One GatewayClient talks to one gateway. ``connect()`` fetches and classifies
the gateway; every later read is a full re-fetch of the document and every
write is a single request that is not read back.

Example usage:
    >>> client = GatewayClient("192.168.1.20", "abcdefgh")
    >>> info = client.connect()
    >>> snapshot = client.get_devices()
    >>> client.set_temperature("f2bf9048bef64cc5b6d5110154e33c81", setpoint=20.5)
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

from ..core.config import GatewayConfig
from ..core.exceptions import DomainError, NotConnectedError, ParseError, PlugwiseHubError, ValidationError
from ..core.exceptions import ConnectionError as GatewayConnectionError
from .document import DomainObjects, parse_document
from .fetcher import DocumentFetcher
from .models import GatewayInfo, GatewaySnapshot
from .translators import DocumentTranslator

logger = logging.getLogger(__name__)

DOMAIN_OBJECTS = "/core/domain_objects"
LOCATION_URI = "/core/locations;id={location_id}"
THERMOSTAT_URI = "/core/locations;id={location_id}/thermostat"
RELAY_URI = "/core/appliances;id={appliance_id}/relay"
OFFSET_URI = "/core/appliances;id={appliance_id}/offset;type=temperature_offset"
GATEWAY_MODE_URI = "/core/appliances;id={gateway_id}/gateway_mode_control"
DHW_MODE_URI = "/core/appliances;type=heater_central/domestic_hot_water_mode_control"
REGULATION_MODE_URI = "/core/appliances;type=gateway/regulation_mode_control"
NOTIFICATIONS_URI = "/core/notifications"
REBOOT_URI = "/core/gateways;@reboot"

GATEWAY_MODES = ("home", "away", "vacation")
DHW_MODES = ("auto", "boost", "comfort", "off")
REGULATION_MODES = ("heating", "off", "bleeding_cold", "bleeding_hot")
SWITCH_MODELS = ("relay", "lock")

AWAY_VALID_TO = "2037-04-21T08:00:53.000Z"
BLEEDING_DURATION = "300"


def _fragment(tag: str, *children: tuple[str, str], attrib: dict | None = None) -> ET.Element:
    element = ET.Element(tag, attrib or {})
    for child_tag, text in children:
        ET.SubElement(element, child_tag).text = text
    return element


def _serialize(element: ET.Element) -> str:
    return ET.tostring(element, encoding="unicode")


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(float(value))


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GatewayClient:
    """Per-connection facade over fetcher, parser and translators.

    The client keeps no lock; concurrent mutating calls against the same
    gateway are serialized by the gateway itself, in no guaranteed order.
    """

    def __init__(
        self,
        host: str,
        password: str,
        config: GatewayConfig | None = None,
        timeout: float | None = None,
        fetcher: DocumentFetcher | None = None,
    ):
        self.config = config or GatewayConfig()
        self.host = host
        self.fetcher = fetcher or DocumentFetcher(
            host,
            password,
            username=self.config.username,
            port=self.config.port,
            timeout=timeout if timeout is not None else self.config.request_timeout,
        )
        self.translator = DocumentTranslator()

        self.connected = False
        self.gateway_id = ""
        self.heater_id = ""
        self.gateway_info: GatewayInfo | None = None

    def _fetch_document(self) -> DomainObjects:
        return parse_document(self.fetcher.request(DOMAIN_OBJECTS))

    def _require_connected(self, operation: str) -> None:
        if not self.connected:
            raise NotConnectedError(operation)

    def connect(self) -> GatewayInfo:
        """Fetch the document, identify the gateway and mark the client connected.

        Returns:
            Fresh GatewayInfo, replacing any previous one.

        Raises:
            AuthenticationError: If the credential is rejected.
            ConnectionError: If the gateway cannot be reached.
            ParseError: If the document has no gateway node.
        """
        try:
            doc = self._fetch_document()
            if doc.gateway is None:
                raise ParseError("No gateway information found", self.host)

            info = self.translator.gateway.translate(doc.gateway)
            self.gateway_id, self.heater_id = self.translator.gateway.extract_ids(doc.appliances)
        except PlugwiseHubError:
            self.connected = False
            raise
        except Exception as e:
            self.connected = False
            raise GatewayConnectionError("Failed to connect", str(e)) from e

        self.gateway_info = info
        self.connected = True
        logger.debug("Connected to %s (%s, %s)", self.host, info.name, info.type.value)
        return info

    def get_devices(self) -> GatewaySnapshot:
        """Re-fetch the document and build a fresh snapshot of all entities."""
        self._require_connected("get_devices")
        doc = self._fetch_document()
        entities = self.translator.translate_entities(doc)
        return GatewaySnapshot(
            gateway_id=self.gateway_id,
            heater_id=self.heater_id,
            gateway_info=self.gateway_info,
            entities=entities,
        )

    def set_temperature(
        self,
        location_id: str,
        setpoint: float | None = None,
        setpoint_low: float | None = None,
        setpoint_high: float | None = None,
    ) -> float:
        """Set a zone's thermostat setpoint; returns the value sent."""
        self._require_connected("set_temperature")

        if setpoint is not None:
            temperature = setpoint
        elif setpoint_low is not None:
            temperature = setpoint_low
        elif setpoint_high is not None:
            temperature = setpoint_high
        else:
            raise ValidationError("No temperature setpoint provided")

        data = _fragment("thermostat_functionality", ("setpoint", _format_number(temperature)))
        self.fetcher.request(THERMOSTAT_URI.format(location_id=location_id), "PUT", _serialize(data))
        return temperature

    def set_temperature_offset(self, appliance_id: str, offset: float) -> None:
        """Set a thermostat's temperature calibration offset."""
        self._require_connected("set_temperature_offset")
        data = _fragment("offset_functionality", ("offset", _format_number(offset)))
        self.fetcher.request(OFFSET_URI.format(appliance_id=appliance_id), "PUT", _serialize(data))

    def set_preset(self, location_id: str, preset: str) -> None:
        """Activate a preset on a zone.

        The location's current name and type are read from the gateway first
        because the gateway expects them in the same request.
        """
        self._require_connected("set_preset")

        doc = self._fetch_document()
        location = next((loc for loc in doc.locations if loc.id == location_id), None)
        if location is None:
            raise DomainError(f"Location {location_id} not found")

        inner = _fragment(
            "location",
            ("name", location.name or "Unknown"),
            ("type", location.type or "room"),
            ("preset", preset),
            attrib={"id": location_id},
        )
        data = ET.Element("locations")
        data.append(inner)
        self.fetcher.request(LOCATION_URI.format(location_id=location_id), "PUT", _serialize(data))

    def set_switch_state(self, appliance_id: str, state: str, model: str = "relay") -> bool:
        """Switch a relay (or its lock) on or off; returns the requested state."""
        self._require_connected("set_switch_state")

        if state not in ("on", "off"):
            raise ValidationError(f"Invalid switch state: {state}", "expected 'on' or 'off'")
        if model not in SWITCH_MODELS:
            raise ValidationError(f"Invalid switch model: {model}")

        if model == "lock":
            data = _fragment("relay_functionality", ("lock", "true" if state == "on" else "false"))
        else:
            data = _fragment("relay_functionality", ("state", state))

        self.fetcher.request(RELAY_URI.format(appliance_id=appliance_id), "PUT", _serialize(data))
        return state == "on"

    def set_gateway_mode(self, mode: str) -> None:
        """Set the gateway mode (home, away, vacation)."""
        self._require_connected("set_gateway_mode")

        if mode not in GATEWAY_MODES:
            raise ValidationError(f"Invalid gateway mode: {mode}")
        if not self.gateway_id:
            raise DomainError("Gateway mode is not supported", "no gateway appliance found")

        children = [("mode", mode)]
        if mode in ("away", "vacation"):
            children += [("valid_from", _utc_now_iso()), ("valid_to", AWAY_VALID_TO)]

        data = _fragment("gateway_mode_control_functionality", *children)
        self.fetcher.request(GATEWAY_MODE_URI.format(gateway_id=self.gateway_id), "PUT", _serialize(data))

    def set_dhw_mode(self, mode: str) -> None:
        """Set the domestic hot water mode."""
        self._require_connected("set_dhw_mode")

        if mode not in DHW_MODES:
            raise ValidationError(f"Invalid DHW mode: {mode}")

        data = _fragment("domestic_hot_water_mode_control_functionality", ("mode", mode))
        self.fetcher.request(DHW_MODE_URI, "PUT", _serialize(data))

    def set_regulation_mode(self, mode: str) -> None:
        self._require_connected("set_regulation_mode")

        if mode not in REGULATION_MODES:
            raise ValidationError(f"Invalid regulation mode: {mode}")

        children = [("mode", mode)]
        if "bleeding" in mode:
            children.insert(0, ("duration", BLEEDING_DURATION))

        data = _fragment("regulation_mode_control_functionality", *children)
        self.fetcher.request(REGULATION_MODE_URI, "PUT", _serialize(data))

    def delete_notification(self) -> None:
        self._require_connected("delete_notification")
        self.fetcher.request(NOTIFICATIONS_URI, "DELETE")

    def reboot_gateway(self) -> None:
        self._require_connected("reboot_gateway")
        self.fetcher.request(REBOOT_URI, "POST")
