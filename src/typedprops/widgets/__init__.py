"""Display/edit widget machinery.

Example usage:
    from typedprops.widgets import HeadlessControlFactory, ManualScheduler

    controls = HeadlessControlFactory()
    scheduler = ManualScheduler()
    widget = descriptor.render_widget(WidgetContext(..., controls=controls, scheduler=scheduler))
"""

from .controls import (
    CallbackList,
    Control,
    ControlFactory,
    DisplaySurface,
    DropdownControl,
    Scheduler,
    TextControl,
)
from .focus import AsyncioScheduler, CompositeFocusTracker, ManualScheduler
from .headless import (
    FocusModel,
    HeadlessControlFactory,
    HeadlessDisplay,
    HeadlessDropdownControl,
    HeadlessTextControl,
)
from .layouts import AmountLayout, ControlLayout, TextLayout
from .state import InitState, TypedFieldWidget, WidgetState, fit_width

__all__ = [
    # Capabilities
    "Control",
    "TextControl",
    "DropdownControl",
    "DisplaySurface",
    "ControlFactory",
    "Scheduler",
    "CallbackList",
    # Focus and scheduling
    "CompositeFocusTracker",
    "ManualScheduler",
    "AsyncioScheduler",
    # Layouts
    "ControlLayout",
    "TextLayout",
    "AmountLayout",
    # State machine
    "TypedFieldWidget",
    "WidgetState",
    "InitState",
    "fit_width",
    # Headless controls
    "FocusModel",
    "HeadlessControlFactory",
    "HeadlessTextControl",
    "HeadlessDropdownControl",
    "HeadlessDisplay",
]
