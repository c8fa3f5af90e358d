"""Gateway access - HTTP fetcher, document parser, entity translators, client."""

from .client import GatewayClient
from .document import DomainObjects, parse_document, parse_xml
from .fetcher import DocumentFetcher
from .models import ActuatorData, Entity, GatewayInfo, GatewaySnapshot, GatewayType
from .translators import DocumentTranslator, classify_gateway

__all__ = [
    "GatewayClient",
    "DocumentFetcher",
    "DomainObjects",
    "parse_document",
    "parse_xml",
    "DocumentTranslator",
    "classify_gateway",
    "GatewayType",
    "GatewayInfo",
    "ActuatorData",
    "Entity",
    "GatewaySnapshot",
]
