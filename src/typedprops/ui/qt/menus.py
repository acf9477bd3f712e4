"""Translate toolkit-neutral menus into QMenu instances."""

from typing import Optional

from PySide6.QtWidgets import QMenu, QWidget

from ...menu import Menu


def build_qmenu(menu: Menu, parent: Optional[QWidget] = None, title: str = "") -> QMenu:
    """Create a QMenu mirroring ``menu``; sections become separators."""
    qmenu = QMenu(title, parent)
    section = None
    for item in menu.items:
        if section is not None and item.section != section:
            qmenu.addSeparator()
        section = item.section

        if item.submenu is not None:
            qmenu.addMenu(build_qmenu(item.submenu, qmenu, item.title))
            continue

        action = qmenu.addAction(item.title)
        action.setCheckable(item.checked)
        action.setChecked(item.checked)
        action.setEnabled(not item.disabled)
        if item.on_click is not None:
            action.triggered.connect(lambda _checked=False, item=item: item.click())
    return qmenu
