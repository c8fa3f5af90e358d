"""Concurrent hub discovery.

Hubs are found by logging in to candidate addresses with every configured
password. Two strategies are combined in one scan:

- Known-IP fast path: each credential that carries a last-known IP is probed
  at that address.
- Full-range probe: every host of the target network is tried with every
  password. Runs when a network is given explicitly or when some credential
  is still unresolved after the fast path. Without a network the local /24
  is used.

All probes run on a bounded thread pool and the scan returns only once every
probe has settled.

Example usage:
    >>> engine = DiscoveryEngine()
    >>> result = engine.scan([HubCredential("abcdefgh", ip="192.168.1.20")])
    >>> print(f"Found {result.found_count} hub(s) in {result.scanned_count} addresses")
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from ipaddress import IPv4Network
from typing import TYPE_CHECKING

from ..core.config import DiscoveryConfig, GatewayConfig, HubCredential
from ..core.exceptions import PlugwiseHubError, ValidationError
from ..core.utils import detect_local_network, network_hosts, validate_ip, validate_network
from ..gateway.client import GatewayClient
from .models import DiscoveredHub, ScanResult
from .registry import HubRegistry

if TYPE_CHECKING:
    from .storage import HubStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], GatewayClient]


class _ScanState:
    """Per-scan bookkeeping shared by probe workers."""

    def __init__(self, cancel_event: threading.Event | None = None):
        self._lock = threading.Lock()
        self._cancel_event = cancel_event
        self.found: dict[str, DiscoveredHub] = {}
        self.probed: set[str] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def should_probe(self, ip: str) -> bool:
        """False once the scan is cancelled or the address already has a hub."""
        if self.cancelled:
            return False
        with self._lock:
            if ip in self.found:
                return False
            self.probed.add(ip)
            return True

    def record(self, hub: DiscoveredHub) -> bool:
        """Keep the first hub found at an address; later ones are ignored."""
        with self._lock:
            if hub.ip in self.found:
                return False
            self.found[hub.ip] = hub
            return True

    def found_passwords(self) -> set[str]:
        with self._lock:
            return {h.password for h in self.found.values()}

    def probed_count(self) -> int:
        with self._lock:
            return len(self.probed)


class DiscoveryEngine:
    """Locates gateways by probing IP x credential combinations.

    Args:
        config: Probe timeout, pool width and range limits.
        gateway_config: Username and port used for probes.
        registry: Where found hubs are registered (a new one if omitted).
        client_factory: Builds the client used for one probe; defaults to a
            GatewayClient with the short probe timeout.
    """

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        gateway_config: GatewayConfig | None = None,
        registry: HubRegistry | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self.config = config or DiscoveryConfig()
        self.gateway_config = gateway_config or GatewayConfig()
        self.registry = registry if registry is not None else HubRegistry()
        self._client_factory = client_factory or self._default_client

    def _default_client(self, ip: str, password: str) -> GatewayClient:
        return GatewayClient(ip, password, config=self.gateway_config, timeout=self.config.probe_timeout)

    def probe(self, ip: str, password: str) -> DiscoveredHub | None:
        """Try one password against one address.

        Failures are expected during a scan and only logged at debug level.

        Returns:
            The hub found, or None if nothing answered or the login failed.
        """
        client = self._client_factory(ip, password)
        try:
            info = client.connect()
        except PlugwiseHubError as e:
            logger.debug("No hub at %s: %s", ip, e)
            return None

        return DiscoveredHub(
            name=info.name or "Unknown",
            ip=ip,
            password=password,
            model=info.model,
            firmware=info.version,
        )

    def resolve_network(self, network: str | None = None) -> IPv4Network:
        """The network to scan: the one given, or the detected local /24."""
        if network is None:
            network = detect_local_network(self.config.fallback_network)
        return validate_network(network)

    def _probe_job(self, ip: str, password: str, state: _ScanState) -> None:
        if not state.should_probe(ip):
            return

        hub = self.probe(ip, password)
        if hub is None:
            return

        if state.record(hub):
            self.registry.add(hub)
            logger.info("Found hub at %s: %s", ip, hub.name)

    def _run_probes(self, jobs: list[tuple[str, str]], state: _ScanState) -> None:
        """Run probe jobs on the bounded pool and wait for all of them."""
        if not jobs:
            return

        workers = max(1, min(self.config.max_workers, len(jobs)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hub-probe") as executor:
            futures = {
                executor.submit(self._probe_job, ip, password, state): ip
                for ip, password in jobs
            }

            for future in as_completed(futures):
                try:
                    future.result()
                except Exception as e:
                    logger.warning("Probe of %s failed: %s", futures[future], e)

    def _range_jobs(
        self,
        target: IPv4Network,
        passwords: list[str],
        state: _ScanState,
    ) -> list[tuple[str, str]]:
        hosts = network_hosts(target, self.config.max_hosts)
        return [(ip, password) for ip in hosts if ip not in state.found for password in passwords]

    def scan(
        self,
        credentials: list[HubCredential],
        network: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ScanResult:
        """Scan for hubs with a pool of credentials.

        Args:
            credentials: Passwords to try, with optional last-known IPs.
            network: CIDR to scan; the local /24 when omitted.
            cancel_event: Set it to stop starting new probes. Probes already
                running still settle before the scan returns.

        Returns:
            Hubs found in this scan and the number of addresses probed.

        Raises:
            ValidationError: If the pool is empty, a known IP is malformed or
                the network is invalid.
        """
        if not credentials:
            raise ValidationError("No hub credentials configured", "add at least one hub password")
        for credential in credentials:
            if credential.ip:
                validate_ip(credential.ip)

        state = _ScanState(cancel_event)
        result = ScanResult()

        known = [c for c in credentials if c.ip]
        if known:
            logger.info("Testing %d known hub IP(s)", len(known))
            self._run_probes([(c.ip, c.password) for c in known], state)
            result.scanned_count += state.probed_count()

        found_passwords = state.found_passwords()
        unresolved = [c for c in credentials if c.password not in found_passwords]

        if (network is not None or unresolved) and not state.cancelled:
            target = self.resolve_network(network)
            result.network = str(target)
            passwords = list(dict.fromkeys(c.password for c in credentials))
            logger.info("Scanning network %s with %d credential(s)", target, len(passwords))

            range_state = _ScanState(cancel_event)
            range_state.found.update(state.found)
            self._run_probes(self._range_jobs(target, passwords, range_state), range_state)

            result.scanned_count += range_state.probed_count()
            state = range_state

        result.discovered = list(state.found.values())
        result.cancelled = state.cancelled
        return result

    def scan_for_credential(self, password: str, network: str | None = None) -> DiscoveredHub | None:
        """Scan a network for the hub that accepts one specific password."""
        target = self.resolve_network(network)
        logger.info("Scanning network %s for hub %s", target, password)

        state = _ScanState()
        self._run_probes(self._range_jobs(target, [password], state), state)
        return next(iter(state.found.values()), None)


def add_hub(
    password: str,
    engine: DiscoveryEngine,
    store: "HubStore",
    network: str | None = None,
) -> DiscoveredHub | None:
    """Locate a single hub by password and persist it.

    A stored record is verified at its saved IP first; otherwise, or if that
    fails, the network is scanned for the password.
    """
    existing = store.load(password)
    if existing is not None:
        engine.registry.add(existing)
        hub = engine.registry.verify(existing, engine, network=network)
    else:
        hub = engine.scan_for_credential(password, network=network)

    if hub is not None:
        store.save(hub)
    return hub
