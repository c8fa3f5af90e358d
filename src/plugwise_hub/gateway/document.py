"""Gateway document parsing.

The gateway serves its whole state as one ``<domain_objects>`` XML document
in which any element may repeat. Parsing happens in two steps:

1. ``parse_xml`` turns the XML into a normalized tree where every child tag
   maps to a *list* of values, so one appliance and twenty appliances have
   the same shape. Attributes are merged into the same mapping and the text
   of an element that also has attributes or children is kept under ``"_"``.
2. ``parse_document`` lifts that tree into typed node variants
   (``ApplianceNode``, ``LocationNode``, ``LogNode``, actuator nodes) which
   the translators consume.

Example:
    >>> doc = parse_document(xml_text)
    >>> [a.type for a in doc.appliances]
    ['gateway', 'thermostat']
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..core.exceptions import ParseError

logger = logging.getLogger(__name__)

ROOT_TAG = "domain_objects"
TEXT_KEY = "_"

Tree = dict[str, list[Union["Tree", str]]]


class LogCategory(Enum):
    """Measurement log categories; the value is the sensor key suffix."""

    POINT = ""
    CUMULATIVE = "_cumulative"
    INTERVAL = "_interval"


LOG_TAGS = {
    "point_log": LogCategory.POINT,
    "cumulative_log": LogCategory.CUMULATIVE,
    "interval_log": LogCategory.INTERVAL,
}


@dataclass
class LogNode:
    category: LogCategory
    type: str | None
    measurement: str | None


@dataclass
class RelayNode:
    state: str | None
    lock: str | None = None


@dataclass
class ThermostatNode:
    setpoint: str | None = None
    lower_bound: str | None = None
    upper_bound: str | None = None
    resolution: str | None = None


@dataclass
class OffsetNode:
    offset: str | None = None
    lower_bound: str | None = None
    upper_bound: str | None = None
    resolution: str | None = None


ActuatorNode = RelayNode | ThermostatNode | OffsetNode


@dataclass
class GatewayNode:
    id: str | None
    name: str | None
    hostname: str | None
    vendor_model: str | None
    firmware_version: str | None
    hardware_version: str | None
    mac_address: str | None


@dataclass
class ApplianceNode:
    id: str | None
    name: str | None
    type: str | None
    vendor_model: str | None = None
    vendor_name: str | None = None
    firmware_version: str | None = None
    hardware_version: str | None = None
    mac_address: str | None = None
    location_id: str | None = None
    logs: list[LogNode] = field(default_factory=list)
    actuators: list[ActuatorNode] = field(default_factory=list)


@dataclass
class LocationNode:
    id: str | None
    name: str | None
    type: str | None = None
    preset: str | None = None
    climate_mode: str | None = None
    logs: list[LogNode] = field(default_factory=list)


@dataclass
class DomainObjects:
    gateway: GatewayNode | None
    appliances: list[ApplianceNode] = field(default_factory=list)
    locations: list[LocationNode] = field(default_factory=list)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def element_to_tree(element: ET.Element) -> Tree | str:
    """Normalize an element; leaves without attributes collapse to their text."""
    children = list(element)
    text = (element.text or "").strip()

    if not children and not element.attrib:
        return text

    tree: Tree = {}
    for key, value in element.attrib.items():
        tree.setdefault(_local_name(key), []).append(value)
    for child in children:
        tree.setdefault(_local_name(child.tag), []).append(element_to_tree(child))
    if text:
        tree.setdefault(TEXT_KEY, []).append(text)
    return tree


def parse_xml(xml_text: str) -> Tree:
    """Parse a document into a normalized tree rooted at ``domain_objects``."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ParseError("Failed to parse XML", str(e)) from e

    if _local_name(root.tag) != ROOT_TAG:
        raise ParseError("Unexpected document root", _local_name(root.tag))

    return as_tree(element_to_tree(root))


def as_tree(value: Tree | str | None) -> Tree:
    return value if isinstance(value, dict) else {}


def first(tree: Tree, key: str) -> Tree | str | None:
    values = tree.get(key)
    return values[0] if values else None


def text_of(value: Tree | str | None) -> str | None:
    """Text content of a normalized value, None when empty."""
    if isinstance(value, dict):
        value = first(value, TEXT_KEY)
    if isinstance(value, str):
        return value or None
    return None


def child_text(tree: Tree, key: str) -> str | None:
    return text_of(first(tree, key))


def _id_of(tree: Tree) -> str | None:
    return child_text(tree, "id")


def _parse_logs(tree: Tree) -> list[LogNode]:
    logs: list[LogNode] = []
    for logs_tree in tree.get("logs", []):
        logs_tree = as_tree(logs_tree)
        for tag, category in LOG_TAGS.items():
            for entry in logs_tree.get(tag, []):
                entry = as_tree(entry)
                period = as_tree(first(entry, "period"))
                source = first(period, "measurement") if "measurement" in period else first(entry, "measurement")
                logs.append(LogNode(category, child_text(entry, "type"), text_of(source)))
    return logs


def _parse_actuators(tree: Tree) -> list[ActuatorNode]:
    actuators: list[ActuatorNode] = []
    for funcs in tree.get("actuator_functionalities", []):
        funcs = as_tree(funcs)
        for relay in funcs.get("relay_functionality", []):
            relay = as_tree(relay)
            actuators.append(RelayNode(child_text(relay, "state"), child_text(relay, "lock")))
        for thermostat in funcs.get("thermostat_functionality", []):
            thermostat = as_tree(thermostat)
            actuators.append(
                ThermostatNode(
                    setpoint=child_text(thermostat, "setpoint"),
                    lower_bound=child_text(thermostat, "lower_bound"),
                    upper_bound=child_text(thermostat, "upper_bound"),
                    resolution=child_text(thermostat, "resolution"),
                )
            )
        for offset in funcs.get("temperature_offset_functionality", []):
            offset = as_tree(offset)
            actuators.append(
                OffsetNode(
                    offset=child_text(offset, "offset"),
                    lower_bound=child_text(offset, "lower_bound"),
                    upper_bound=child_text(offset, "upper_bound"),
                    resolution=child_text(offset, "resolution"),
                )
            )
    return actuators


def _parse_gateway(tree: Tree) -> GatewayNode:
    return GatewayNode(
        id=_id_of(tree),
        name=child_text(tree, "name"),
        hostname=child_text(tree, "hostname"),
        vendor_model=child_text(tree, "vendor_model"),
        firmware_version=child_text(tree, "firmware_version"),
        hardware_version=child_text(tree, "hardware_version"),
        mac_address=child_text(tree, "mac_address"),
    )


def _parse_appliance(tree: Tree) -> ApplianceNode:
    location = first(tree, "location")
    location_id = _id_of(location) if isinstance(location, dict) else text_of(location)
    return ApplianceNode(
        id=_id_of(tree),
        name=child_text(tree, "name"),
        type=child_text(tree, "type"),
        vendor_model=child_text(tree, "vendor_model"),
        vendor_name=child_text(tree, "vendor_name"),
        firmware_version=child_text(tree, "firmware_version"),
        hardware_version=child_text(tree, "hardware_version"),
        mac_address=child_text(tree, "mac_address"),
        location_id=location_id,
        logs=_parse_logs(tree),
        actuators=_parse_actuators(tree),
    )


def _parse_location(tree: Tree) -> LocationNode:
    return LocationNode(
        id=_id_of(tree),
        name=child_text(tree, "name"),
        type=child_text(tree, "type"),
        preset=child_text(tree, "preset"),
        climate_mode=child_text(tree, "climate_mode"),
        logs=_parse_logs(tree),
    )


def build_domain_objects(tree: Tree) -> DomainObjects:
    """Lift a normalized ``domain_objects`` tree into typed nodes."""
    gateway_tree = first(tree, "gateway")
    gateway = _parse_gateway(gateway_tree) if isinstance(gateway_tree, dict) else None

    return DomainObjects(
        gateway=gateway,
        appliances=[_parse_appliance(as_tree(a)) for a in tree.get("appliance", [])],
        locations=[_parse_location(as_tree(loc)) for loc in tree.get("location", [])],
    )


def parse_document(xml_text: str) -> DomainObjects:
    """Parse a raw gateway document into typed nodes.

    Raises:
        ParseError: If the text is not XML or not a ``domain_objects`` document.
    """
    return build_domain_objects(parse_xml(xml_text))
