"""Qt preset picker used when seeding a measurement's unit list."""

import logging
from typing import List, Optional

from PySide6.QtWidgets import QInputDialog, QWidget

from ...settings import PresetPrompt
from ...types.presets import PRESET_LABELS

logger = logging.getLogger(__name__)


def make_preset_prompt(parent: Optional[QWidget] = None) -> PresetPrompt:
    """Build an async prompt showing a modal preset picker.

    Resolves to the chosen preset key, or None when the dialog is cancelled.
    """

    async def prompt(presets: List[str]) -> Optional[str]:
        labels = [PRESET_LABELS.get(key, key) for key in presets]
        label, accepted = QInputDialog.getItem(
            parent, "Measurement units", "Start with which units?", labels, 0, False
        )
        if not accepted:
            logger.debug("Unit preset selection cancelled")
            return None
        return presets[labels.index(label)]

    return prompt
