"""Thread-safe registry of discovered hubs, keyed by IP."""

import logging
import threading
from datetime import timedelta
from typing import TYPE_CHECKING

from .models import DiscoveredHub

if TYPE_CHECKING:
    from .engine import DiscoveryEngine

logger = logging.getLogger(__name__)


class HubRegistry:
    """In-memory hub records shared by discovery workers and callers.

    Writes are serialized with a lock so parallel probes can register hubs
    directly. IP is only an index: a hub's stable identity is its password,
    and ``verify`` may move a hub to a new IP.
    """

    def __init__(self, hubs: list[DiscoveredHub] | None = None):
        self._hubs: dict[str, DiscoveredHub] = {}
        self._lock = threading.Lock()
        for hub in hubs or []:
            self.add(hub)

    def add(self, hub: DiscoveredHub) -> DiscoveredHub | None:
        """Add or overwrite the record for ``hub.ip``.

        ``discovered_at`` is kept strictly increasing per IP, so a re-scan is
        always visible as newer even on a coarse clock.

        Returns:
            The record that was replaced, if any.
        """
        with self._lock:
            previous = self._hubs.get(hub.ip)
            if (
                previous is not None
                and previous is not hub
                and hub.discovered_at <= previous.discovered_at
            ):
                hub.discovered_at = previous.discovered_at + timedelta(microseconds=1)
            self._hubs[hub.ip] = hub
        return previous

    def get(self, ip: str) -> DiscoveredHub | None:
        with self._lock:
            return self._hubs.get(ip)

    def remove(self, ip: str) -> DiscoveredHub | None:
        with self._lock:
            return self._hubs.pop(ip, None)

    def list(self) -> list[DiscoveredHub]:
        with self._lock:
            return list(self._hubs.values())

    def first(self) -> DiscoveredHub | None:
        """Any registered hub, for auto-connect when the caller does not care which."""
        with self._lock:
            return next(iter(self._hubs.values()), None)

    def find_by_credential(self, password: str) -> DiscoveredHub | None:
        with self._lock:
            return next((h for h in self._hubs.values() if h.password == password), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hubs)

    def __contains__(self, ip: object) -> bool:
        with self._lock:
            return ip in self._hubs

    def verify(
        self,
        hub: DiscoveredHub,
        engine: "DiscoveryEngine",
        network: str | None = None,
    ) -> DiscoveredHub | None:
        """Confirm a hub is still reachable, following it to a new IP if needed.

        The hub's last known IP is probed first. If that fails, the network is
        scanned for the hub's password; when found elsewhere, the old IP entry
        is dropped and ``hub.ip`` is updated in place.

        Returns:
            The (possibly moved) hub, or None if it could not be found.
        """
        confirmed = engine.probe(hub.ip, hub.password)
        if confirmed is not None:
            self._refresh(hub, confirmed)
            return hub

        logger.info("Hub %s not reachable at %s, scanning for it", hub.name, hub.ip)
        found = engine.scan_for_credential(hub.password, network=network)
        if found is None:
            return None

        old_ip = hub.ip
        with self._lock:
            if self._hubs.get(old_ip) is hub:
                del self._hubs[old_ip]
        hub.ip = found.ip
        self._refresh(hub, found)
        if old_ip != hub.ip:
            logger.info("Hub %s moved from %s to %s", hub.name, old_ip, hub.ip)
        return hub

    def _refresh(self, hub: DiscoveredHub, probed: DiscoveredHub) -> None:
        hub.name = probed.name
        hub.model = probed.model
        hub.firmware = probed.firmware
        hub.discovered_at = probed.discovered_at
        self.add(hub)
