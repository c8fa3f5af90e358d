"""Tests for hub and device record persistence."""

import json
from datetime import datetime, timezone

import pytest

from plugwise_hub.core.exceptions import ValidationError
from plugwise_hub.discovery import DeviceCapabilities, DeviceStore, DiscoveredHub, HubStore, StoredDevice
from plugwise_hub.gateway.models import ActuatorData, Entity


class TestDiscoveredHub:
    """Test hub record serialization."""

    def test_to_dict_keys(self):
        """Test the persisted record shape."""
        stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        data = DiscoveredHub("Adam", "10.0.0.5", "pw1", "159", "3.0.15", stamp).to_dict()
        assert data == {
            "name": "Adam",
            "ip": "10.0.0.5",
            "password": "pw1",
            "model": "159",
            "firmware": "3.0.15",
            "discoveredAt": "2024-05-01T12:00:00+00:00",
        }

    def test_from_dict_zulu_and_naive(self):
        """Test Z suffixes and naive timestamps are read as UTC."""
        zulu = DiscoveredHub.from_dict(
            {"name": "A", "ip": "10.0.0.5", "password": "pw1", "discoveredAt": "2024-05-01T12:00:00.000Z"}
        )
        naive = DiscoveredHub.from_dict(
            {"ip": "10.0.0.5", "password": "pw1", "discoveredAt": "2024-05-01T12:00:00"}
        )
        assert zulu.discovered_at == naive.discovered_at
        assert naive.discovered_at.tzinfo is timezone.utc
        assert naive.name == "pw1"


class TestHubStore:
    """Test the JSON hub store."""

    def test_save_and_load(self, tmp_path):
        """Test a saved hub loads back."""
        store = HubStore(tmp_path / "hubs")
        hub = DiscoveredHub("Adam", "10.0.0.5", "pw1", "159", "3.0.15")

        path = store.save(hub)

        assert path == tmp_path / "hubs" / "pw1.json"
        assert store.exists("pw1")
        assert store.load("pw1") == hub

    def test_load_missing(self, tmp_path):
        """Test a missing record loads as None."""
        assert HubStore(tmp_path).load("pw1") is None

    def test_load_all_skips_corrupt_files(self, tmp_path):
        """Test unreadable files are skipped."""
        store = HubStore(tmp_path)
        store.save(DiscoveredHub("A", "10.0.0.5", "pw1"))
        store.save(DiscoveredHub("B", "10.0.0.6", "pw2"))
        (tmp_path / "broken.json").write_text("{not json")
        (tmp_path / "partial.json").write_text(json.dumps({"name": "C"}))

        hubs = store.load_all()

        assert [h.password for h in hubs] == ["pw1", "pw2"]

    def test_load_all_missing_directory(self, tmp_path):
        """Test a missing directory holds no hubs."""
        assert HubStore(tmp_path / "nope").load_all() == []

    def test_delete(self, tmp_path):
        """Test deleting records."""
        store = HubStore(tmp_path)
        store.save(DiscoveredHub("A", "10.0.0.5", "pw1"))
        assert store.delete("pw1") is True
        assert store.delete("pw1") is False

    @pytest.mark.parametrize("password", ["", "../etc", "a/b", ".hidden"])
    def test_invalid_password(self, tmp_path, password):
        """Test passwords that cannot name a file are refused."""
        with pytest.raises(ValidationError):
            HubStore(tmp_path).load(password)


def _entities() -> dict[str, Entity]:
    thermostat = Entity(
        "tstat1",
        "Lisa",
        "zone_thermostat",
        location="loc1",
        sensors={"temperature": 20.5},
        thermostat=ActuatorData(setpoint=21.0),
    )
    plug = Entity("plug1", "Circle", "refrigerator", switches={"relay": True})
    zone = Entity("loc1", "Living room", "zone", active_preset="home")
    return {e.id: e for e in (thermostat, plug, zone)}


class TestDeviceCapabilities:
    """Test capability flags derived from entities."""

    def test_from_entity(self):
        """Test each flag follows the entity's data."""
        entities = _entities()
        assert DeviceCapabilities.from_entity(entities["tstat1"]) == DeviceCapabilities(
            has_temperature=True, has_switch=False, has_presets=False, has_sensors=True
        )
        assert DeviceCapabilities.from_entity(entities["plug1"]) == DeviceCapabilities(has_switch=True)
        assert DeviceCapabilities.from_entity(entities["loc1"]) == DeviceCapabilities(has_presets=True)

    def test_record_shape(self):
        """Test the persisted capability keys."""
        record = StoredDevice.from_entity(_entities()["plug1"], "pw1").to_dict()
        assert record["hub"] == "pw1"
        assert record["capabilities"] == {
            "hasTemperature": False,
            "hasSwitch": True,
            "hasPresets": False,
            "hasSensors": False,
        }


class TestDeviceStore:
    """Test the per-hub device record store."""

    def test_save_and_load(self, tmp_path):
        """Test saved devices load back per hub."""
        store = DeviceStore(tmp_path)
        saved = store.save_devices("pw1", _entities())

        loaded = store.load_devices("pw1")

        assert loaded == saved
        assert [d.id for d in loaded] == ["tstat1", "plug1", "loc1"]
        assert loaded[0].location == "loc1"

    def test_save_replaces_previous(self, tmp_path):
        """Test a later save replaces the hub's earlier records."""
        store = DeviceStore(tmp_path)
        store.save_devices("pw1", _entities())
        store.save_devices("pw1", {"x": Entity("x", "X", "lamp")})
        assert [d.id for d in store.load_devices("pw1")] == ["x"]

    def test_load_all_and_get(self, tmp_path):
        """Test lookups across hubs."""
        store = DeviceStore(tmp_path)
        store.save_devices("pw1", _entities())
        store.save_devices("pw2", {"x": Entity("x", "X", "lamp")})

        assert len(store.load_all()) == 4
        assert store.get("x").hub == "pw2"
        assert store.get("missing") is None

    def test_unreadable_records_skipped(self, tmp_path):
        """Test corrupt files and malformed records are skipped."""
        store = DeviceStore(tmp_path)
        store.save_devices("pw1", {"x": Entity("x", "X", "lamp")})
        (tmp_path / "broken.json").write_text("[{")
        (tmp_path / "pw2.json").write_text(json.dumps([{"name": "no id"}, {"id": "y", "hub": "pw2"}]))

        assert sorted(d.id for d in store.load_all()) == ["x", "y"]

    def test_missing_hub(self, tmp_path):
        """Test a hub without records has no devices."""
        assert DeviceStore(tmp_path / "nope").load_devices("pw1") == []
        assert DeviceStore(tmp_path / "nope").load_all() == []

    def test_invalid_password(self, tmp_path):
        """Test passwords that cannot name a file are refused."""
        with pytest.raises(ValidationError):
            DeviceStore(tmp_path).save_devices("../x", {})
