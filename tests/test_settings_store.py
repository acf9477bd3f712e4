"""Tests for PropertySettingsStore and its storage backends."""

import logging

import pytest
import yaml

from typedprops.errors import ContractViolationError, SettingsError
from typedprops.settings import MemoryStorage, PropertySettingsStore, YamlStorage
from typedprops.types.currency import CurrencySettings
from typedprops.types.measurement import MeasurementSettings


class TestGetSet:
    def test_missing_record_yields_defaults(self, store):
        assert store.get("price", "currency") == {"default_currency": None}
        assert store.get("height", "measurement") == {"units": [], "default_unit": None}
        assert not store.has("price", "currency")

    def test_set_replaces_whole_record(self, store):
        store.set("height", "measurement", {"units": [{"name": "Meter", "shorthand": "m"}], "default_unit": "Meter"})
        store.set("height", "measurement", {"units": []})

        assert store.get("height", "measurement") == {"units": [], "default_unit": None}

    def test_set_returns_copy(self, store):
        stored = store.set("price", "currency", {"default_currency": "EUR"})
        stored["default_currency"] = "GBP"
        assert store.get("price", "currency")["default_currency"] == "EUR"

    def test_set_accepts_model(self, store):
        store.set("price", "currency", CurrencySettings(default_currency="JPY"))
        assert store.get_model("price", "currency").default_currency == "JPY"

    def test_invalid_record_raises(self, store):
        with pytest.raises(SettingsError) as exc_info:
            store.set("height", "unit", {"decimal_places": -1})
        assert exc_info.value.type_key == "unit"
        assert exc_info.value.property_path == "height"

    def test_malformed_stored_record_uses_defaults(self, caplog):
        storage = MemoryStorage({"properties": {"height": {"types": {"measurement": {"units": "not a list"}}}}})
        store = PropertySettingsStore(storage)
        store.register_schema("measurement", MeasurementSettings)
        store.load()

        with caplog.at_level(logging.WARNING):
            record = store.get("height", "measurement")

        assert record == {"units": [], "default_unit": None}
        assert "Malformed" in caplog.text

    def test_unregistered_type_is_stored_verbatim(self, store):
        store.set("x", "typedprops:rating", {"max": 5})
        assert store.get("x", "typedprops:rating") == {"max": 5}

    def test_get_model_without_schema_raises(self, store):
        with pytest.raises(ContractViolationError):
            store.get_model("x", "typedprops:rating")

    def test_records_are_per_property(self, store):
        store.set("a", "currency", {"default_currency": "EUR"})
        assert store.get("b", "currency")["default_currency"] is None
        assert store.properties() == ["a"]
        assert store.type_keys("a") == ["currency"]


class TestGeneralSettings:
    def test_general_defaults(self, store):
        general = store.get_general("size.width")
        assert general.custom_property_type is None
        assert general.hidden is False

    def test_unknown_host_fields_round_trip(self, store):
        store.set_general("title", {"icon": "lucide-star", "pinned": True})
        general = store.get_general("title")
        assert general.icon == "lucide-star"
        assert general.model_dump()["pinned"] is True


class TestPersistenceAndEvents:
    def test_auto_save(self, store, storage):
        store.set("price", "currency", {"default_currency": "EUR"})
        assert storage.save_count == 1
        assert storage.data["properties"]["price"]["types"]["currency"] == {"default_currency": "EUR"}

    def test_manual_save(self, storage):
        store = PropertySettingsStore(storage, auto_save=False)
        store.load()
        store.set("price", "currency", {"default_currency": "EUR"})
        assert storage.save_count == 0
        store.save()
        assert storage.save_count == 1

    def test_change_listener(self, store):
        events = []
        unsubscribe = store.on_change(lambda prop, key, record: events.append((prop, key, record)))

        store.set("price", "currency", {"default_currency": "EUR"})
        unsubscribe()
        store.set("price", "currency", {"default_currency": "GBP"})

        assert events == [("price", "currency", {"default_currency": "EUR"})]

    def test_failing_listener_does_not_block_others(self, store):
        seen = []

        def broken(*args):
            raise RuntimeError("boom")

        store.on_change(broken)
        store.on_change(lambda *args: seen.append(args[1]))
        store.set("price", "currency", {"default_currency": "EUR"})

        assert seen == ["currency"]

    def test_closed_store_rejects_writes(self, store):
        store.close()
        with pytest.raises(ContractViolationError):
            store.set("price", "currency", {"default_currency": "EUR"})


class TestYamlStorage:
    def test_round_trip_keeps_dotted_paths(self, tmp_path):
        path = tmp_path / "nested" / "settings.yaml"
        storage = YamlStorage(path)
        store = PropertySettingsStore(storage)
        store.load()
        store.set_general("size.width", {"custom_property_type": "measurement"})

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["properties"]["size.width"]["general"]["custom_property_type"] == "measurement"

        reloaded = PropertySettingsStore(YamlStorage(path))
        reloaded.load()
        assert reloaded.get_general("size.width").custom_property_type == "measurement"

    def test_missing_file_is_empty(self, tmp_path):
        assert YamlStorage(tmp_path / "missing.yaml").load() == {}

    def test_broken_yaml_is_empty(self, tmp_path, caplog):
        path = tmp_path / "broken.yaml"
        path.write_text("properties: [unclosed", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert YamlStorage(path).load() == {}
        assert "Failed to load" in caplog.text
