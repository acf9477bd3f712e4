"""End-to-end tests of the plugin wiring with headless controls."""

import asyncio
import logging

import pytest

from typedprops.host import InMemoryPropertyHost, InMemoryTypeManager
from typedprops.plugin import PropertyTypesPlugin
from typedprops.settings import MemoryStorage
from typedprops.types import TypeDescriptor
from typedprops.config import Config, WidgetConfig
from typedprops.widgets import AsyncioScheduler, InitState, ManualScheduler, WidgetState


class TestRendering:
    def test_currency_property(self, plugin, host, type_manager):
        host.set_value("price", {"value": 1234567, "currency": "USD"})
        type_manager.set_type("price", "currency")

        widget = plugin.render_property("price")

        assert widget.type_key == "currency"
        assert widget.display_text() == "$1.23M"

    def test_edit_writes_back_to_host(self, plugin, host, type_manager):
        type_manager.set_type("price", "currency")
        widget = plugin.render_property("price")
        number, choice = widget.layout.controls

        widget.activate()
        number.type_text("50")
        choice.select("EUR")
        number.press_enter()

        assert host.get_value("price") == {"value": 50, "currency": "EUR"}
        assert widget.display_text() == "€50"

    def test_empty_commit_clears_host_value(self, plugin, host, type_manager):
        host.set_value("price", {"value": 5, "currency": "USD"})
        type_manager.set_type("price", "currency")
        widget = plugin.render_property("price")

        widget.activate()
        widget.layout.primary.type_text("")

        assert host.get_value("price") is None
        assert "price" not in host.values

    def test_sub_property_value_is_written_nested(self, plugin, host):
        host.set_value("size.width", 3)
        plugin.switch_type("size.width", "code")
        widget = plugin.render_property("size.width")
        widget.activate()
        widget.layout.primary.type_text("x = 1")
        assert host.values == {"size": {"width": "x = 1"}}

    def test_unassigned_property_renders_plain_read_only(self, plugin, host):
        host.set_value("notes", ["a", "b"])
        widget = plugin.render_property("notes")
        assert widget.type_key == "plain"
        assert widget.display_text() == "a, b"
        widget.activate()
        assert widget.state == WidgetState.DISPLAY

    def test_unknown_type_falls_back_to_plain(self, plugin, type_manager, caplog):
        type_manager.set_type("score", "typedprops:gone")
        with caplog.at_level(logging.WARNING):
            widget = plugin.render_property("score", value=4)
        assert widget.type_key == "plain"
        assert widget.display_text() == "4"
        assert "typedprops:gone" in caplog.text

    def test_host_native_type_is_left_to_host(self, plugin, type_manager):
        type_manager.set_type("title", "text")
        assert plugin.render_property("title") is None

    def test_failing_widget_factory_falls_back(self, plugin, type_manager):
        def explode(ctx):
            raise RuntimeError("no widget")

        plugin.register_type(
            TypeDescriptor(key="rating", display_name=lambda: "Rating", render_widget=explode),
            extension=True,
        )
        type_manager.set_type("score", "typedprops:rating")
        assert plugin.render_property("score", value=3).type_key == "plain"

    def test_notify_value_changed(self, plugin, host, type_manager):
        type_manager.set_type("price", "currency")
        widget = plugin.render_property("price", value=1)
        plugin.notify_value_changed("price", {"value": 2, "currency": "GBP"})
        assert widget.display_text() == "£2"


class TestMeasurementSeeding:
    def test_widget_seeds_defaults_without_prompt(self, plugin, type_manager):
        type_manager.set_type("height", "measurement")
        widget = plugin.render_property("height", value="12")

        assert widget.init_state == InitState.READY
        assert plugin.store.get("height", "measurement")["units"]
        assert widget.get_value().unit == "Millimeter"

    @pytest.mark.asyncio
    async def test_widget_waits_for_preset(self):
        prompts = []

        async def prompt(presets):
            prompts.append(presets)
            await asyncio.sleep(0)
            return "length"

        host = InMemoryPropertyHost({"height": 12})
        manager = InMemoryTypeManager({"height": "measurement"})
        plugin = PropertyTypesPlugin(host, manager, storage=MemoryStorage(), prompt=prompt)
        plugin.load()

        first = plugin.render_property("height")
        second = plugin.render_property("height")
        assert first.init_state == InitState.AWAITING_PRESET

        for _ in range(20):
            if first.init_state == second.init_state == InitState.READY:
                break
            await asyncio.sleep(0)

        assert len(prompts) == 1
        assert first.init_state == InitState.READY
        assert second.init_state == InitState.READY
        assert first.display_text() == "12mm"
        plugin.unload()


class TestSettingsAndRerender:
    def test_open_settings_for_assigned_type(self, plugin, type_manager):
        type_manager.set_type("price", "currency")
        panel = plugin.open_settings("price")
        assert panel.default_currency == "USD"

    def test_no_settings_for_code(self, plugin):
        assert plugin.open_settings("snippet", "code") is None

    def test_settings_change_requests_rerender(self, plugin, type_manager):
        rerendered = []
        plugin.on_rerender(rerendered.append)
        type_manager.set_type("price", "currency")

        plugin.open_settings("price").set_default_currency("EUR")

        assert "price" in rerendered

    def test_rerender_rebuilds_widgets_with_new_settings(self, plugin, host, type_manager):
        host.set_value("price", 10)
        type_manager.set_type("price", "currency")
        old = plugin.render_property("price")

        plugin.open_settings("price").set_default_currency("EUR")
        (new,) = plugin.rerender("price")

        assert new is not old
        assert new.display_text() == "€10"
        assert plugin.widgets_for("price") == [new]

    def test_sub_property_switch_requests_rerender(self, plugin):
        rerendered = []
        plugin.on_rerender(rerendered.append)
        plugin.switch_type("size.width", "unit")
        assert rerendered == ["size.width"]

    def test_extension_listeners_registered_after_load(self, plugin):
        calls = []

        def register(ctx):
            calls.append(ctx)
            return []

        plugin.register_type(
            TypeDescriptor(key="rating", display_name=lambda: "Rating", register_listeners=register),
            extension=True,
        )
        assert len(calls) == 1


class TestLifecycle:
    def test_unload_tears_down_widgets(self, host, type_manager, storage, config, controls, scheduler):
        plugin = PropertyTypesPlugin(host, type_manager, storage=storage, config=config,
                                     controls=controls, scheduler=scheduler)
        plugin.load()
        type_manager.set_type("price", "currency")
        widget = plugin.render_property("price")
        number = widget.layout.primary

        plugin.unload()

        assert not plugin.is_loaded
        assert number.listener_count == 0
        assert plugin.widgets_for("price") == []

    def test_settings_persist_across_sessions(self, host, type_manager, storage, config):
        first = PropertyTypesPlugin(host, type_manager, storage=storage, config=config)
        first.load()
        first.switch_type("size.width", "measurement")
        first.unload()

        second = PropertyTypesPlugin(host, type_manager, storage=storage, config=config)
        second.load()
        assert second.resolver.assigned_type("size.width") == "measurement"
        second.unload()


class TestDefaultScheduler:
    def test_without_loop_falls_back_to_manual(self, host, type_manager, caplog):
        with caplog.at_level(logging.WARNING):
            plugin = PropertyTypesPlugin(host, type_manager, storage=MemoryStorage())
        assert isinstance(plugin.scheduler, ManualScheduler)
        assert "ManualScheduler.advance" in caplog.text

    @pytest.mark.asyncio
    async def test_running_loop_settles_blur(self):
        host = InMemoryPropertyHost({"price": 5})
        manager = InMemoryTypeManager({"price": "currency"})
        config = Config(widget=WidgetConfig(blur_settle_ms=10))
        plugin = PropertyTypesPlugin(host, manager, storage=MemoryStorage(), config=config)
        plugin.load()
        assert isinstance(plugin.scheduler, AsyncioScheduler)

        widget = plugin.render_property("price")
        widget.activate()
        plugin.controls.focus_model.blur()
        assert widget.is_editing

        for _ in range(50):
            if not widget.is_editing:
                break
            await asyncio.sleep(0.01)

        assert widget.state == WidgetState.DISPLAY
        plugin.unload()
