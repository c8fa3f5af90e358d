"""Utility functions for the Plugwise hub toolkit."""

import logging
from ipaddress import IPv4Address, IPv4Network, ip_address, ip_network

import psutil

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


def validate_ip(ip_str: str) -> IPv4Address:
    """Validate and parse an IP address string."""
    try:
        ip = ip_address(ip_str)
    except ValueError as e:
        raise ValidationError(f"Invalid IP address: {ip_str}", str(e)) from e
    if ip.version == 6:
        raise ValidationError(f"IPv6 address not supported: {ip_str}")
    return ip


def validate_network(network_str: str) -> IPv4Network:
    """Validate and parse a network CIDR string."""
    try:
        net = ip_network(network_str, strict=False)
    except ValueError as e:
        raise ValidationError(f"Invalid network: {network_str}", str(e)) from e
    if net.version == 6:
        raise ValidationError(f"IPv6 networks are not supported: {network_str}")
    return net


def network_hosts(network: IPv4Network, max_hosts: int) -> list[str]:
    """List host addresses of a network, refusing ranges above max_hosts."""
    if network.num_addresses > max_hosts + 2:
        raise ValidationError(
            f"Network {network} is too large to scan",
            f"limit is {max_hosts} addresses",
        )
    if network.prefixlen >= 31:
        return [str(ip) for ip in network]
    return [str(ip) for ip in network.hosts()]


def get_interfaces() -> dict[str, dict[str, str | bool | None]]:
    """Get available network interfaces with their IPv4 addresses."""
    interfaces: dict[str, dict[str, str | bool | None]] = {}
    stats = psutil.net_if_stats()

    for name, addrs in psutil.net_if_addrs().items():
        interface_info: dict[str, str | bool | None] = {
            "ipv4": None,
            "netmask": None,
            "mac": None,
        }

        for addr in addrs:
            if addr.family.name == "AF_INET":
                interface_info["ipv4"] = addr.address
                interface_info["netmask"] = addr.netmask
            elif addr.family.name == "AF_PACKET" or addr.family.name == "AF_LINK":
                interface_info["mac"] = addr.address

        stat = stats.get(name)
        interface_info["is_up"] = bool(stat and stat.isup)
        interfaces[name] = interface_info

    return interfaces


def detect_local_network(fallback: str = "192.168.1.0/24") -> str:
    """Return the /24 of the first up, non-loopback IPv4 interface."""
    try:
        interfaces = get_interfaces()
    except OSError as e:
        logger.debug("Interface lookup failed: %s", e)
        return fallback

    for name, info in interfaces.items():
        ipv4 = info.get("ipv4")
        if not info.get("is_up") or not ipv4 or name.startswith("lo"):
            continue
        if str(ipv4).startswith("127.") or str(ipv4).startswith("169.254."):
            continue
        return str(ip_network(f"{ipv4}/24", strict=False))

    return fallback
