"""JSON file storage for hub and device records, one file per hub named after its password."""

import json
import logging
from pathlib import Path

from ..core.exceptions import StorageError, ValidationError
from ..gateway.models import Entity
from .models import DiscoveredHub, StoredDevice

logger = logging.getLogger(__name__)


def _record_path(directory: Path, password: str) -> Path:
    if not password or "/" in password or "\\" in password or password.startswith("."):
        raise ValidationError(f"Invalid hub password for storage: {password!r}")
    return directory / f"{password}.json"


def _write_json(directory: Path, path: Path, data: dict | list, what: str) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise StorageError(f"Failed to save {what}", str(e)) from e


class HubStore:
    """Persists DiscoveredHub records so hubs can be reconnected at start-up."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, password: str) -> Path:
        return _record_path(self.directory, password)

    def save(self, hub: DiscoveredHub) -> Path:
        """Write a hub record, replacing any previous one for the same password."""
        path = self._path(hub.password)
        _write_json(self.directory, path, hub.to_dict(), f"hub {hub.name}")
        logger.debug("Saved hub %s to %s", hub.name, path)
        return path

    def load(self, password: str) -> DiscoveredHub | None:
        """Load one hub record; None if missing or unreadable."""
        path = self._path(password)
        if not path.exists():
            return None
        return self._read(path)

    def _read(self, path: Path) -> DiscoveredHub | None:
        try:
            with open(path) as f:
                return DiscoveredHub.from_dict(json.load(f))
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Ignoring unreadable hub file %s: %s", path, e)
            return None

    def load_all(self) -> list[DiscoveredHub]:
        """Load every readable hub record in the directory."""
        if not self.directory.is_dir():
            return []

        hubs: list[DiscoveredHub] = []
        for path in sorted(self.directory.glob("*.json")):
            hub = self._read(path)
            if hub is not None:
                hubs.append(hub)
        return hubs

    def exists(self, password: str) -> bool:
        return self._path(password).exists()

    def delete(self, password: str) -> bool:
        """Remove a hub record; returns False if there was none."""
        path = self._path(password)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete hub {password}", str(e)) from e
        return True


class DeviceStore:
    """Last-seen device records per hub, for listing devices without a gateway round trip.

    Records are written after a live read and never consulted by
    GatewayClient; every read of live state still fetches the document.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def save_devices(self, password: str, entities: dict[str, Entity]) -> list[StoredDevice]:
        """Replace the stored devices of one hub with the given entities."""
        path = _record_path(self.directory, password)
        devices = [StoredDevice.from_entity(entity, password) for entity in entities.values()]
        _write_json(self.directory, path, [d.to_dict() for d in devices], f"devices of hub {password}")
        logger.debug("Saved %d devices to %s", len(devices), path)
        return devices

    def load_devices(self, password: str) -> list[StoredDevice]:
        path = _record_path(self.directory, password)
        if not path.exists():
            return []
        return self._read(path)

    def _read(self, path: Path) -> list[StoredDevice]:
        try:
            with open(path) as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable device file %s: %s", path, e)
            return []

        devices: list[StoredDevice] = []
        for record in records if isinstance(records, list) else []:
            try:
                devices.append(StoredDevice.from_dict(record))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed device record in %s: %s", path, e)
        return devices

    def load_all(self) -> list[StoredDevice]:
        """Every readable device record, across all hubs."""
        if not self.directory.is_dir():
            return []

        devices: list[StoredDevice] = []
        for path in sorted(self.directory.glob("*.json")):
            devices.extend(self._read(path))
        return devices

    def get(self, device_id: str) -> StoredDevice | None:
        return next((d for d in self.load_all() if d.id == device_id), None)
