"""Tests for the display/edit state machine."""

import logging

import pytest

from typedprops.types.code import CodeCodec
from typedprops.types.currency import CurrencyCodec, CurrencyValue
from typedprops.types.measurement import make_codec as make_measurement_codec
from typedprops.types.presets import UNKNOWN_UNIT
from typedprops.widgets import AmountLayout, InitState, TextLayout, TypedFieldWidget, WidgetState, fit_width
from typedprops.types.formatting import format_plain_number


class Sink:
    def __init__(self):
        self.writes = []

    def __call__(self, raw):
        self.writes.append(raw)

    @property
    def last(self):
        return self.writes[-1]


@pytest.fixture
def sink():
    return Sink()


def currency_widget(controls, scheduler, sink, initial=None, **kwargs):
    number = controls.text(numeric=True, placeholder="0")
    choice = controls.dropdown()
    layout = AmountLayout(
        number,
        choice,
        "currency",
        options=[("USD", "USD"), ("EUR", "EUR")],
        default_choice="USD",
        format_number=format_plain_number,
    )
    widget = TypedFieldWidget(
        type_key="currency",
        codec=CurrencyCodec("USD"),
        layout=layout,
        display=controls.display(),
        write=sink,
        scheduler=scheduler,
        initial=initial,
        **kwargs,
    )
    return widget, number, choice


def measurement_widget(controls, scheduler, sink, initial=None, ready=True):
    codec = make_measurement_codec({"units": [{"name": "Meter", "shorthand": "m"}, {"name": "Foot", "shorthand": "ft"}]})
    number = controls.text(numeric=True)
    choice = controls.dropdown()
    layout = AmountLayout(
        number,
        choice,
        "unit",
        options=codec.options() if ready else [],
        default_choice=codec.default_unit if ready else None,
        placeholder=(UNKNOWN_UNIT, "Unit"),
        format_number=format_plain_number,
    )
    widget = TypedFieldWidget(
        type_key="measurement",
        codec=codec,
        layout=layout,
        display=controls.display(),
        write=sink,
        scheduler=scheduler,
        initial=initial,
        live_display=True,
        ready=ready,
    )
    return widget, number, choice


class TestDisplayMode:
    def test_initial_state(self, controls, scheduler, sink):
        widget, number, choice = currency_widget(controls, scheduler, sink, {"value": 1234567, "currency": "USD"})

        assert widget.state == WidgetState.DISPLAY
        assert widget.display.text() == "$1.23M"
        assert widget.display.visible
        assert not number.visible and not choice.visible
        assert number.get_value() == "1234567"
        assert sink.writes == []

    def test_empty_value_displays_nothing(self, controls, scheduler, sink):
        widget, number, choice = currency_widget(controls, scheduler, sink)
        assert widget.display_text() == ""
        assert choice.get_value() == "USD"


class TestTransitions:
    def test_activate_enters_edit_and_focuses_primary(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)

        widget.display.click()

        assert widget.state == WidgetState.EDITING
        assert number.has_focus()
        assert number.visible and not widget.display.visible

    def test_external_focus_enters_edit(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)
        widget.focus()
        assert widget.is_editing
        assert number.has_focus()

    def test_moving_between_siblings_stays_in_edit(self, controls, scheduler, sink):
        widget, number, choice = currency_widget(controls, scheduler, sink, 50)
        widget.activate()

        choice.focus()
        scheduler.advance(100)

        assert widget.is_editing

    def test_leaving_all_controls_exits_after_settle(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50, settle_ms=100)
        widget.activate()

        controls.focus_model.blur()
        scheduler.advance(99)
        assert widget.is_editing

        scheduler.advance(1)
        assert widget.state == WidgetState.DISPLAY
        assert widget.display.visible

    def test_enter_exits_edit(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)
        widget.activate()
        number.press_enter()
        assert widget.state == WidgetState.DISPLAY

    def test_exit_normalizes_controls(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink)
        widget.activate()
        number.type_text(" 12.50 ")
        number.press_enter()

        assert number.get_value() == "12.5"
        assert widget.display.text() == "$12.5"

    def test_read_only_widget_never_edits(self, controls, scheduler, sink):
        layout = TextLayout(controls.text())
        widget = TypedFieldWidget(
            type_key="plain",
            codec=CodeCodec(),
            layout=layout,
            display=controls.display(),
            write=sink,
            scheduler=scheduler,
            initial="x",
            editable=False,
        )
        widget.activate()
        assert widget.state == WidgetState.DISPLAY


class TestCommit:
    def test_every_change_commits_dumped_value(self, controls, scheduler, sink):
        widget, number, choice = currency_widget(controls, scheduler, sink)
        widget.activate()

        number.type_text("50")
        assert sink.last == {"value": 50, "currency": "USD"}

        choice.select("EUR")
        assert sink.last == {"value": 50, "currency": "EUR"}
        assert widget.get_value() == CurrencyValue(50, "EUR")

    def test_empty_edit_writes_none(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)
        widget.activate()

        number.type_text("")

        assert sink.last is None
        assert widget.get_value() is None

    def test_display_frozen_while_editing(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)
        widget.activate()
        number.type_text("75")
        assert widget.display.text() == "$50"

        number.press_enter()
        assert widget.display.text() == "$75"

    def test_live_display_updates_while_editing(self, controls, scheduler, sink):
        widget, number, _ = measurement_widget(controls, scheduler, sink, {"value": 1, "unit": "Meter"})
        widget.activate()
        number.type_text("3")
        assert widget.display.text() == "3m"


class TestExternalSync:
    def test_set_value_in_display_updates_everything(self, controls, scheduler, sink):
        widget, number, choice = currency_widget(controls, scheduler, sink, 50)
        widget.set_value({"value": 9, "currency": "EUR"})

        assert number.get_value() == "9"
        assert choice.get_value() == "EUR"
        assert widget.display.text() == "€9"
        assert sink.writes == []

    def test_controls_win_while_editing(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)
        widget.activate()
        number.type_text("60")

        widget.set_value({"value": 1, "currency": "USD"})
        assert number.get_value() == "60"

        number.press_enter()
        assert widget.display.text() == "$60"

    def test_deferred_value_applies_when_user_made_no_change(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 50)
        widget.activate()
        widget.set_value({"value": 1, "currency": "USD"})

        number.press_enter()

        assert widget.display.text() == "$1"
        assert number.get_value() == "1"


class TestInitialization:
    def test_awaiting_widget_completes_with_options(self, controls, scheduler, sink):
        widget, number, choice = measurement_widget(controls, scheduler, sink, {"value": 2, "unit": "Foot"}, ready=False)
        assert widget.init_state == InitState.AWAITING_PRESET

        codec = make_measurement_codec({"units": [{"name": "Foot", "shorthand": "ft"}]})
        widget.apply_options(codec.options(), codec.default_unit, codec=codec)

        assert widget.init_state == InitState.READY
        assert choice.get_value() == "Foot"
        assert widget.display.text() == "2ft"

    def test_options_after_teardown_are_ignored(self, controls, scheduler, sink):
        widget, number, choice = measurement_widget(controls, scheduler, sink, {"value": 2, "unit": "Foot"}, ready=False)
        shown = widget.display.text()
        offered = choice.options()
        widget.teardown()

        codec = make_measurement_codec({"units": [{"name": "Foot", "shorthand": "ft"}]})
        widget.apply_options(codec.options(), codec.default_unit, codec=codec)

        assert widget.init_state == InitState.AWAITING_PRESET
        assert widget.codec is not codec
        assert choice.options() == offered
        assert widget.display.text() == shown

    def test_stored_unit_missing_from_options_is_kept(self, controls, scheduler, sink):
        widget, number, choice = measurement_widget(controls, scheduler, sink, {"value": 2, "unit": "Cubit"})
        assert choice.get_value() == "Cubit"
        assert ("Cubit", "Cubit") in choice.options()


class TestWidthFitting:
    def test_fit_width_clamps(self):
        assert fit_width(40, 18) == 58
        assert fit_width(10, 18, min_width=50) == 50
        assert fit_width(400, 18, max_width=100) == 100

    def test_numeric_input_is_sized_on_edit(self, controls, scheduler, sink):
        widget, number, _ = currency_widget(controls, scheduler, sink, 12345, width_padding=10)
        widget.activate()
        assert number.width == 5 * 8.0 + 10

        number.type_text("1")
        assert number.width == 8.0 + 10


class TestRobustness:
    def test_codec_errors_become_empty(self, controls, scheduler, sink, caplog):
        class BrokenCodec(CodeCodec):
            def parse(self, raw):
                raise ValueError("bad")

        widget = TypedFieldWidget(
            type_key="broken",
            codec=BrokenCodec(),
            layout=TextLayout(controls.text()),
            display=controls.display(),
            write=sink,
            scheduler=scheduler,
            initial="x",
        )
        with caplog.at_level(logging.WARNING):
            widget.set_value("y")

        assert widget.get_value() is None
        assert "parse failed" in caplog.text

    def test_teardown_cancels_timers_and_detaches(self, controls, scheduler, sink):
        widget, number, choice = currency_widget(controls, scheduler, sink, 50)
        widget.activate()
        controls.focus_model.blur()
        assert scheduler.pending == 1

        widget.teardown()

        assert scheduler.pending == 0
        assert number.listener_count == 0
        assert choice.listener_count == 0
        number.type_text("99")
        assert sink.writes == []
