"""Control layouts: how a typed value maps onto concrete controls."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from .controls import Control, DropdownControl, Option, TextControl


class ControlLayout(ABC):
    """Arrangement of the controls editing one value.

    ``read_raw`` returns what the codec parses; ``write_raw`` shows a parsed
    value (or None) in canonical form.
    """

    @property
    @abstractmethod
    def controls(self) -> List[Control]:
        ...

    @property
    @abstractmethod
    def primary(self) -> TextControl:
        """Control that receives focus when editing starts."""

    @abstractmethod
    def read_raw(self) -> Any:
        ...

    @abstractmethod
    def write_raw(self, value: Any) -> None:
        ...

    def set_options(self, options: Sequence[Option], default_choice: Optional[str] = None) -> None:
        """Replace choice options. No-op for layouts without a choice."""

    def set_visible(self, visible: bool) -> None:
        for control in self.controls:
            control.set_visible(visible)


class TextLayout(ControlLayout):
    """A single text input holding the value as text."""

    def __init__(self, text: TextControl, to_text: Callable[[Any], str] = str):
        self._text = text
        self._to_text = to_text

    @property
    def controls(self) -> List[Control]:
        return [self._text]

    @property
    def primary(self) -> TextControl:
        return self._text

    def read_raw(self) -> str:
        return self._text.get_value()

    def write_raw(self, value: Any) -> None:
        self._text.set_value("" if value is None else self._to_text(value))


class AmountLayout(ControlLayout):
    """Numeric input plus a choice dropdown (currency, unit).

    Reads ``{"value": <text>, <secondary_key>: <choice>}``.
    """

    def __init__(
        self,
        number: TextControl,
        choice: DropdownControl,
        secondary_key: str,
        options: Sequence[Option] = (),
        default_choice: Optional[str] = None,
        placeholder: Optional[Option] = None,
        format_number: Callable[[Any], str] = str,
    ):
        self._number = number
        self._choice = choice
        self.secondary_key = secondary_key
        self._placeholder = placeholder
        self._format_number = format_number
        self._options: List[Option] = []
        self.default_choice = default_choice
        self.set_options(options, default_choice)

    @property
    def controls(self) -> List[Control]:
        return [self._number, self._choice]

    @property
    def primary(self) -> TextControl:
        return self._number

    @property
    def options(self) -> List[Option]:
        return list(self._options)

    def read_raw(self) -> Dict[str, str]:
        return {"value": self._number.get_value(), self.secondary_key: self._choice.get_value()}

    def write_raw(self, value: Any) -> None:
        if value is None:
            self._number.set_value("")
            self._select(self.default_choice or (self._placeholder[0] if self._placeholder else ""))
            return
        self._number.set_value(self._format_number(value.value))
        self._select(getattr(value, self.secondary_key))

    def set_options(self, options: Sequence[Option], default_choice: Optional[str] = None) -> None:
        self._options = list(options)
        if default_choice is not None:
            self.default_choice = default_choice
        self._choice.set_options(self._options, self._placeholder)

    def _select(self, choice: str) -> None:
        known = {value for value, _ in self._options}
        if self._placeholder:
            known.add(self._placeholder[0])
        # Keep a stored choice that is no longer configured selectable
        if choice and choice not in known:
            self._options.append((choice, choice))
            self._choice.set_options(self._options, self._placeholder)
        self._choice.set_value(choice)
