"""Display/edit state machine shared by every property type widget.

A ``TypedFieldWidget`` composes a codec, a control layout, a display surface,
a value sink and a scheduler. Concrete types never subclass it; they only
choose the codec and the layout.

States:
    DISPLAY  - formatted text is shown; activating it starts editing.
    EDITING  - controls are shown; every user change commits to the host.
               Editing ends when all controls have lost focus (after a settle
               delay) or Enter is pressed.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from .controls import Cleanup, DisplaySurface, Option, Scheduler
from .focus import CompositeFocusTracker
from .layouts import ControlLayout

if TYPE_CHECKING:
    from ..types.base import Codec, WidgetContext

logger = logging.getLogger(__name__)


class WidgetState(Enum):
    DISPLAY = "display"
    EDITING = "editing"


class InitState(Enum):
    """Whether the widget's choice options are available yet."""

    READY = "ready"
    AWAITING_PRESET = "awaiting_preset"


def fit_width(text_width: float, padding: float, min_width: float = 0.0, max_width: Optional[float] = None) -> float:
    """Width for an input showing text of ``text_width`` pixels."""
    width = max(text_width + padding, min_width)
    if max_width is not None:
        width = min(width, max_width)
    return width


class TypedFieldWidget:
    """Generic display/edit widget for one property value.

    Example:
        widget = TypedFieldWidget(
            type_key="currency",
            codec=CurrencyCodec("USD"),
            layout=AmountLayout(number, dropdown, "currency", options),
            display=controls.display(),
            write=lambda raw: host.set_value("price", raw),
            scheduler=AsyncioScheduler(),
            initial={"value": 1234567, "currency": "USD"},
        )
        widget.display_text()   # "$1.23M"
    """

    def __init__(
        self,
        *,
        type_key: str,
        codec: "Codec",
        layout: ControlLayout,
        display: DisplaySurface,
        write: Callable[[Any], None],
        scheduler: Scheduler,
        initial: Any = None,
        settle_ms: int = 100,
        live_display: bool = False,
        editable: bool = True,
        ready: bool = True,
        width_padding: float = 18.0,
        min_width: float = 0.0,
        max_width: Optional[float] = None,
    ):
        self.type_key = type_key
        self._codec = codec
        self._layout = layout
        self._display = display
        self._write = write
        self.live_display = live_display
        self.editable = editable
        self._width_padding = width_padding
        self._min_width = min_width
        self._max_width = max_width

        self._state = WidgetState.DISPLAY
        self._init_state = InitState.READY if ready else InitState.AWAITING_PRESET
        self._raw = initial
        self._value = self._parse(initial)
        # External value received while editing
        self._deferred: Optional[Any] = None
        self._has_deferred = False
        self._committed_this_session = False
        self._torn_down = False

        self._tracker = CompositeFocusTracker(scheduler, settle_ms, self.exit_edit)
        self._cleanups: List[Cleanup] = [display.on_activate(self.activate)]
        for control in layout.controls:
            self._tracker.attach(control)
            self._cleanups.append(control.on_change(self._on_control_changed))
            self._cleanups.append(control.on_enter(self.exit_edit))

        layout.set_visible(False)
        display.set_visible(True)
        layout.write_raw(self._value)
        self._render_display()

    @classmethod
    def from_context(
        cls,
        ctx: "WidgetContext",
        type_key: str,
        codec: "Codec",
        layout: ControlLayout,
        live_display: bool = False,
        ready: bool = True,
    ) -> "TypedFieldWidget":
        """Build a widget using the plugin-provided context and config."""
        widget_config = ctx.config.widget
        return cls(
            type_key=type_key,
            codec=codec,
            layout=layout,
            display=ctx.controls.display(),
            write=ctx.write,
            scheduler=ctx.scheduler,
            initial=ctx.value,
            settle_ms=widget_config.blur_settle_ms,
            live_display=live_display,
            ready=ready,
            width_padding=widget_config.width_padding_px,
            min_width=widget_config.min_input_width_px,
            max_width=widget_config.max_input_width_px,
        )

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def state(self) -> WidgetState:
        return self._state

    @property
    def init_state(self) -> InitState:
        return self._init_state

    @property
    def is_editing(self) -> bool:
        return self._state == WidgetState.EDITING

    @property
    def codec(self) -> "Codec":
        return self._codec

    @property
    def layout(self) -> ControlLayout:
        return self._layout

    @property
    def display(self) -> DisplaySurface:
        return self._display

    def get_value(self) -> Any:
        """Current typed value (None when empty)."""
        return self._value

    def display_text(self) -> str:
        return self._format(self._value)

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    def activate(self) -> None:
        """Pointer activation of the display surface."""
        self.enter_edit()

    def focus(self) -> None:
        """External focus request."""
        self.enter_edit()

    def enter_edit(self) -> None:
        if self._torn_down or not self.editable or self._state == WidgetState.EDITING:
            return
        if self._init_state != InitState.READY:
            logger.debug(f"Editing {self.type_key} widget before its options are available")

        self._state = WidgetState.EDITING
        self._committed_this_session = False
        self._display.set_visible(False)
        self._layout.set_visible(True)
        self._layout.primary.focus()
        self.fit_width()

    def exit_edit(self) -> None:
        """Leave edit mode, normalizing the controls to canonical form."""
        if self._state != WidgetState.EDITING:
            return
        self._tracker.reset()

        if self._has_deferred and not self._committed_this_session:
            self._raw = self._deferred
            self._value = self._parse(self._deferred)
        else:
            self._value = self._parse(self._layout.read_raw())
        self._has_deferred = False
        self._deferred = None

        self._layout.write_raw(self._value)
        self.fit_width()

        self._state = WidgetState.DISPLAY
        self._layout.set_visible(False)
        self._display.set_visible(True)
        self._render_display()

    def commit(self) -> None:
        """Parse the controls and write the result to the host."""
        self._value = self._parse(self._layout.read_raw())
        self._committed_this_session = True

        if self._is_empty(self._value):
            self._raw = None
        else:
            self._raw = self._dump(self._value)
        self._write(self._raw)

        if self._state == WidgetState.DISPLAY or self.live_display:
            self._render_display()

    # ─────────────────────────────────────────────────────────────────
    # External updates
    # ─────────────────────────────────────────────────────────────────

    def set_value(self, raw: Any) -> None:
        """Sync a value changed outside this widget.

        While editing the controls stay authoritative: the value is kept and
        only applied on exit if the user made no change meanwhile.
        """
        if self._state == WidgetState.EDITING:
            logger.debug(f"Deferring external {self.type_key} value while editing")
            self._deferred = raw
            self._has_deferred = True
            return

        self._raw = raw
        self._value = self._parse(raw)
        self._layout.write_raw(self._value)
        self.fit_width()
        self._render_display()

    def apply_options(
        self,
        options: Sequence[Option],
        default_choice: Optional[str] = None,
        codec: Optional["Codec"] = None,
    ) -> None:
        """Install choice options (and optionally a reconfigured codec).

        Completes initialization of a widget awaiting a preset.
        """
        if self._torn_down:
            logger.debug(f"Ignoring options for released {self.type_key} widget")
            return
        if codec is not None:
            self._codec = codec
        self._layout.set_options(options, default_choice)
        self._init_state = InitState.READY

        if self._state == WidgetState.EDITING:
            return
        self._value = self._parse(self._raw)
        self._layout.write_raw(self._value)
        self._render_display()

    def fit_width(self) -> None:
        """Size a numeric primary input to its content."""
        primary = self._layout.primary
        if not getattr(primary, "numeric", False):
            return
        text = primary.get_value() or getattr(primary, "placeholder", "") or "0"
        lower = max(primary.min_width(), self._min_width)
        upper = primary.max_width()
        if self._max_width is not None:
            upper = self._max_width if upper is None else min(upper, self._max_width)
        primary.set_width(fit_width(primary.measure_text(text), self._width_padding, lower, upper))

    def teardown(self) -> None:
        """Cancel timers and detach every control callback."""
        if self._torn_down:
            return
        self._torn_down = True
        self._tracker.detach_all()
        for cleanup in self._cleanups:
            cleanup()
        self._cleanups.clear()

    # ─────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────

    def _on_control_changed(self, _text: str = "") -> None:
        if self._torn_down:
            return
        self.fit_width()
        self.commit()

    def _render_display(self) -> None:
        self._display.set_text(self.display_text())

    def _parse(self, raw: Any) -> Any:
        try:
            return self._codec.parse(raw)
        except Exception as e:
            logger.warning(f"{type(self._codec).__name__}.parse failed, using empty value: {e}")
            return None

    def _format(self, value: Any) -> str:
        try:
            return self._codec.format(value)
        except Exception as e:
            logger.warning(f"{type(self._codec).__name__}.format failed: {e}")
            return ""

    def _dump(self, value: Any) -> Any:
        try:
            return self._codec.dump(value)
        except Exception as e:
            logger.warning(f"{type(self._codec).__name__}.dump failed: {e}")
            return None

    def _is_empty(self, value: Any) -> bool:
        try:
            return self._codec.is_empty(value)
        except Exception as e:
            logger.warning(f"{type(self._codec).__name__}.is_empty failed: {e}")
            return value is None
