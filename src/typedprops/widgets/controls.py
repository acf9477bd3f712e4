"""Capabilities the widget state machine consumes from a UI toolkit.

The state machine never touches toolkit objects directly. A host supplies a
``ControlFactory`` producing text inputs, dropdowns and a display surface;
``typedprops.widgets.headless`` and ``typedprops.ui.qt`` are the two
implementations shipped here.
"""

import logging
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

Cleanup = Callable[[], None]
# (value, label)
Option = Tuple[str, str]


class CallbackList:
    """Subscriber list whose ``add`` returns an unsubscribe function."""

    def __init__(self, name: str = "callback"):
        self._name = name
        self._callbacks: List[Callable[..., None]] = []

    def add(self, callback: Callable[..., None]) -> Cleanup:
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def emit(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception as e:
                logger.warning(f"Error in {self._name} handler: {e}")

    def clear(self) -> None:
        self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)


class Control(Protocol):
    """A single form control.

    ``set_value`` is programmatic and must not fire ``on_change``; only user
    edits do.
    """

    def get_value(self) -> str: ...

    def set_value(self, value: str) -> None: ...

    def focus(self) -> None: ...

    def has_focus(self) -> bool: ...

    def set_visible(self, visible: bool) -> None: ...

    def on_change(self, callback: Callable[[str], None]) -> Cleanup: ...

    def on_focus(self, callback: Callable[[], None]) -> Cleanup: ...

    def on_blur(self, callback: Callable[[], None]) -> Cleanup: ...

    def on_enter(self, callback: Callable[[], None]) -> Cleanup: ...


class TextControl(Control, Protocol):
    """Text input, optionally numeric, with width fitting support."""

    numeric: bool
    placeholder: str

    def measure_text(self, text: str) -> float: ...

    def set_width(self, width: float) -> None: ...

    def min_width(self) -> float: ...

    def max_width(self) -> Optional[float]: ...


class DropdownControl(Control, Protocol):
    """Single-choice dropdown."""

    def set_options(self, options: Sequence[Option], placeholder: Optional[Option] = None) -> None: ...

    def options(self) -> List[Option]: ...


class DisplaySurface(Protocol):
    """Read-only text shown in display mode; activating it starts editing."""

    def set_text(self, text: str) -> None: ...

    def text(self) -> str: ...

    def set_visible(self, visible: bool) -> None: ...

    def on_activate(self, callback: Callable[[], None]) -> Cleanup: ...


class ControlFactory(Protocol):
    """Creates the controls of one property widget."""

    def text(self, numeric: bool = False, placeholder: str = "") -> TextControl: ...

    def dropdown(self) -> DropdownControl: ...

    def display(self) -> DisplaySurface: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Deferred callbacks (blur settle delay)."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...
