"""Pure-Python controls for headless hosts and tests.

Focus is simulated through a shared ``FocusModel``: focusing a control first
blurs the previously focused one, like a browser or Qt focus chain does.
User interaction is simulated with ``type_text``, ``select``,
``press_enter`` and ``click``.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .controls import CallbackList, Cleanup, Option

logger = logging.getLogger(__name__)


class FocusModel:
    """Tracks which headless control currently holds focus."""

    def __init__(self):
        self.active: Optional["_HeadlessControl"] = None

    def focus(self, control: "_HeadlessControl") -> None:
        if self.active is control:
            return
        self.blur()
        self.active = control
        control._focus_callbacks.emit()

    def blur(self) -> None:
        previous, self.active = self.active, None
        if previous is not None:
            previous._blur_callbacks.emit()


class _HeadlessControl:
    def __init__(self, focus_model: FocusModel):
        self._focus_model = focus_model
        self._value = ""
        self.visible = True
        self._change_callbacks = CallbackList("change")
        self._focus_callbacks = CallbackList("focus")
        self._blur_callbacks = CallbackList("blur")
        self._enter_callbacks = CallbackList("enter")

    def get_value(self) -> str:
        return self._value

    def set_value(self, value: str) -> None:
        self._value = value

    def focus(self) -> None:
        self._focus_model.focus(self)

    def blur(self) -> None:
        if self.has_focus():
            self._focus_model.blur()

    def has_focus(self) -> bool:
        return self._focus_model.active is self

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        if not visible:
            self.blur()

    def on_change(self, callback: Callable[[str], None]) -> Cleanup:
        return self._change_callbacks.add(callback)

    def on_focus(self, callback: Callable[[], None]) -> Cleanup:
        return self._focus_callbacks.add(callback)

    def on_blur(self, callback: Callable[[], None]) -> Cleanup:
        return self._blur_callbacks.add(callback)

    def on_enter(self, callback: Callable[[], None]) -> Cleanup:
        return self._enter_callbacks.add(callback)

    @property
    def listener_count(self) -> int:
        return sum(
            len(callbacks)
            for callbacks in (
                self._change_callbacks,
                self._focus_callbacks,
                self._blur_callbacks,
                self._enter_callbacks,
            )
        )


class HeadlessTextControl(_HeadlessControl):
    """Text input; width is tracked but not rendered."""

    def __init__(
        self,
        focus_model: FocusModel,
        numeric: bool = False,
        placeholder: str = "",
        char_width: float = 8.0,
        min_width: float = 0.0,
        max_width: Optional[float] = None,
    ):
        super().__init__(focus_model)
        self.numeric = numeric
        self.placeholder = placeholder
        self.width: Optional[float] = None
        self._char_width = char_width
        self._min_width = min_width
        self._max_width = max_width

    def type_text(self, text: str) -> None:
        """Simulate the user replacing the input's text."""
        self.focus()
        self._value = text
        self._change_callbacks.emit(text)

    def press_enter(self) -> None:
        self._enter_callbacks.emit()

    def measure_text(self, text: str) -> float:
        return len(text) * self._char_width

    def set_width(self, width: float) -> None:
        self.width = width

    def min_width(self) -> float:
        return self._min_width

    def max_width(self) -> Optional[float]:
        return self._max_width


class HeadlessDropdownControl(_HeadlessControl):
    """Dropdown; ``get_value`` is "" when nothing valid is selected."""

    def __init__(self, focus_model: FocusModel):
        super().__init__(focus_model)
        self._options: List[Option] = []
        self.placeholder: Optional[Option] = None

    def set_options(self, options: Sequence[Option], placeholder: Optional[Option] = None) -> None:
        self._options = list(options)
        self.placeholder = placeholder
        if self._value not in self._values():
            self._value = ""

    def options(self) -> List[Option]:
        return list(self._options)

    def set_value(self, value: str) -> None:
        self._value = value if value in self._values() else ""

    def select(self, value: str) -> None:
        """Simulate the user picking an option."""
        if value not in self._values():
            raise ValueError(f"Option not available: {value!r}")
        self.focus()
        self._value = value
        self._change_callbacks.emit(value)

    def _values(self) -> List[str]:
        values = [value for value, _ in self._options]
        if self.placeholder is not None:
            values.insert(0, self.placeholder[0])
        return values


class HeadlessDisplay:
    """Display surface holding the formatted text."""

    def __init__(self):
        self._text = ""
        self.visible = True
        self._activate_callbacks = CallbackList("activate")

    def set_text(self, text: str) -> None:
        self._text = text

    def text(self) -> str:
        return self._text

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    def on_activate(self, callback: Callable[[], None]) -> Cleanup:
        return self._activate_callbacks.add(callback)

    def click(self) -> None:
        self._activate_callbacks.emit()


class HeadlessControlFactory:
    """Creates headless controls sharing one focus model.

    ``created`` keeps every control in creation order for inspection.
    """

    def __init__(self, focus_model: Optional[FocusModel] = None, char_width: float = 8.0):
        self.focus_model = focus_model or FocusModel()
        self._char_width = char_width
        self.created: List[object] = []

    def text(self, numeric: bool = False, placeholder: str = "") -> HeadlessTextControl:
        control = HeadlessTextControl(self.focus_model, numeric, placeholder, self._char_width)
        self.created.append(control)
        return control

    def dropdown(self) -> HeadlessDropdownControl:
        control = HeadlessDropdownControl(self.focus_model)
        self.created.append(control)
        return control

    def display(self) -> HeadlessDisplay:
        surface = HeadlessDisplay()
        self.created.append(surface)
        return surface
