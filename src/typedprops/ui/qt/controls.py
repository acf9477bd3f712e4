"""PySide6 implementations of the control capabilities.

QLineEdit, QComboBox and QLabel wrapped so the widget state machine can drive
them. Only user edits fire change callbacks: ``textEdited`` and ``activated``
are used instead of ``textChanged``/``currentIndexChanged``.
"""

import logging
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtGui import QFontMetrics
from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QLineEdit, QWidget

from ...widgets.controls import CallbackList, Cleanup, Option

logger = logging.getLogger(__name__)

# Qt's QWIDGETSIZE_MAX
_UNBOUNDED_WIDTH = 16777215


class _FocusFilter(QObject):
    """Forwards focus in/out events of a watched widget."""

    def __init__(self, on_focus_in: Callable[[], None], on_focus_out: Callable[[], None], parent=None):
        super().__init__(parent)
        self._on_focus_in = on_focus_in
        self._on_focus_out = on_focus_out

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if event.type() in (QEvent.Type.FocusIn, QEvent.Type.FocusOut):
            # Combo box popup opening or closing
            if event.reason() == Qt.FocusReason.PopupFocusReason:
                return False
        if event.type() == QEvent.Type.FocusIn:
            self._on_focus_in()
        elif event.type() == QEvent.Type.FocusOut:
            self._on_focus_out()
        return False


class _QtControl:
    def __init__(self, widget: QWidget):
        self.widget = widget
        self._change_callbacks = CallbackList("change")
        self._focus_callbacks = CallbackList("focus")
        self._blur_callbacks = CallbackList("blur")
        self._enter_callbacks = CallbackList("enter")
        self._focus_filter = _FocusFilter(self._focus_callbacks.emit, self._blur_callbacks.emit, widget)
        widget.installEventFilter(self._focus_filter)

    def focus(self) -> None:
        self.widget.setFocus(Qt.FocusReason.OtherFocusReason)

    def has_focus(self) -> bool:
        return self.widget.hasFocus()

    def set_visible(self, visible: bool) -> None:
        self.widget.setVisible(visible)

    def on_change(self, callback: Callable[[str], None]) -> Cleanup:
        return self._change_callbacks.add(callback)

    def on_focus(self, callback: Callable[[], None]) -> Cleanup:
        return self._focus_callbacks.add(callback)

    def on_blur(self, callback: Callable[[], None]) -> Cleanup:
        return self._blur_callbacks.add(callback)

    def on_enter(self, callback: Callable[[], None]) -> Cleanup:
        return self._enter_callbacks.add(callback)


class QtTextControl(_QtControl):
    """QLineEdit-backed text input."""

    def __init__(
        self,
        numeric: bool = False,
        placeholder: str = "",
        min_width: float = 0.0,
        max_width: Optional[float] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(QLineEdit(parent))
        self.numeric = numeric
        self._min_width = min_width
        self._max_width = max_width
        self.widget.setPlaceholderText(placeholder)
        if numeric:
            self.widget.setInputMethodHints(Qt.InputMethodHint.ImhFormattedNumbersOnly)
            self.widget.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.widget.textEdited.connect(self._change_callbacks.emit)
        self.widget.returnPressed.connect(self._enter_callbacks.emit)

    @property
    def placeholder(self) -> str:
        return self.widget.placeholderText()

    def get_value(self) -> str:
        return self.widget.text()

    def set_value(self, value: str) -> None:
        # setText does not emit textEdited
        self.widget.setText(value)

    def measure_text(self, text: str) -> float:
        return float(QFontMetrics(self.widget.font()).horizontalAdvance(text))

    def set_width(self, width: float) -> None:
        self.widget.setFixedWidth(int(round(width)))

    def min_width(self) -> float:
        return self._min_width

    def max_width(self) -> Optional[float]:
        return self._max_width


class QtDropdownControl(_QtControl):
    """QComboBox-backed dropdown; option values live in item data."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(QComboBox(parent))
        self._options: List[Option] = []
        self.widget.activated.connect(lambda _index: self._change_callbacks.emit(self.get_value()))

    def set_options(self, options: Sequence[Option], placeholder: Optional[Option] = None) -> None:
        current = self.get_value()
        self._options = list(options)
        self.widget.blockSignals(True)
        try:
            self.widget.clear()
            if placeholder is not None:
                self.widget.addItem(placeholder[1], placeholder[0])
            for value, label in self._options:
                self.widget.addItem(label, value)
            index = self.widget.findData(current)
            self.widget.setCurrentIndex(index if index >= 0 else -1)
        finally:
            self.widget.blockSignals(False)

    def options(self) -> List[Option]:
        return list(self._options)

    def get_value(self) -> str:
        data = self.widget.currentData()
        return data if isinstance(data, str) else ""

    def set_value(self, value: str) -> None:
        self.widget.blockSignals(True)
        try:
            self.widget.setCurrentIndex(self.widget.findData(value))
        finally:
            self.widget.blockSignals(False)


class _ClickFilter(QObject):
    def __init__(self, on_click: Callable[[], None], parent=None):
        super().__init__(parent)
        self._on_click = on_click

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if event.type() == QEvent.Type.MouseButtonRelease:
            self._on_click()
            return True
        return False


class QtDisplaySurface:
    """QLabel showing the formatted value; a click activates editing."""

    def __init__(self, parent: Optional[QWidget] = None):
        self.widget = QLabel(parent)
        self.widget.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.widget.setCursor(Qt.CursorShape.IBeamCursor)
        self._activate_callbacks = CallbackList("activate")
        self._click_filter = _ClickFilter(self._activate_callbacks.emit, self.widget)
        self.widget.installEventFilter(self._click_filter)

    def set_text(self, text: str) -> None:
        self.widget.setText(text)

    def text(self) -> str:
        return self.widget.text()

    def set_visible(self, visible: bool) -> None:
        self.widget.setVisible(visible)

    def on_activate(self, callback: Callable[[], None]) -> Cleanup:
        return self._activate_callbacks.add(callback)


class QtControlFactory:
    """Creates Qt controls inside one row container.

    Example:
        factory = QtControlFactory()
        widget = descriptor.render_widget(ctx_with(controls=factory, scheduler=QtScheduler()))
        layout.addWidget(factory.container)
    """

    def __init__(self, parent: Optional[QWidget] = None, min_width: float = 0.0, max_width: Optional[float] = None):
        self.container = QWidget(parent)
        self._layout = QHBoxLayout(self.container)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(4)
        self._min_width = min_width
        self._max_width = max_width

    def text(self, numeric: bool = False, placeholder: str = "") -> QtTextControl:
        control = QtTextControl(numeric, placeholder, self._min_width, self._max_width, self.container)
        self._layout.addWidget(control.widget)
        return control

    def dropdown(self) -> QtDropdownControl:
        control = QtDropdownControl(self.container)
        self._layout.addWidget(control.widget)
        return control

    def display(self) -> QtDisplaySurface:
        surface = QtDisplaySurface(self.container)
        self._layout.addWidget(surface.widget)
        return surface


class _QtTimerHandle:
    def __init__(self, timer: QTimer, on_done: Callable[["_QtTimerHandle"], None]):
        self._timer = timer
        self._on_done = on_done

    def cancel(self) -> None:
        self._timer.stop()
        self._on_done(self)


class QtScheduler:
    """Single-shot QTimer per callback."""

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent
        self._active: List[_QtTimerHandle] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        handle = _QtTimerHandle(timer, self._forget)

        def fire() -> None:
            self._forget(handle)
            callback()

        timer.timeout.connect(fire)
        self._active.append(handle)
        timer.start(max(delay_ms, 0))
        return handle

    @property
    def pending(self) -> int:
        return len(self._active)

    def _forget(self, handle: _QtTimerHandle) -> None:
        if handle in self._active:
            self._active.remove(handle)
