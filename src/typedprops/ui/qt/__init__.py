"""PySide6 adapters: controls, scheduler, menus and prompts."""

from .controls import (
    QtControlFactory,
    QtDisplaySurface,
    QtDropdownControl,
    QtScheduler,
    QtTextControl,
)
from .menus import build_qmenu
from .prompts import make_preset_prompt

__all__ = [
    "QtControlFactory",
    "QtTextControl",
    "QtDropdownControl",
    "QtDisplaySurface",
    "QtScheduler",
    "build_qmenu",
    "make_preset_prompt",
]
