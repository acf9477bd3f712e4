"""Menu building blocks and the property context menu.

``Menu``/``MenuItem`` are toolkit-neutral; a host translates them into its
own menu widgets (``typedprops.ui.qt.menus`` does so for Qt).
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Sequence

from .config.settings import MenuConfig

if TYPE_CHECKING:
    from .resolver import TypeAssignmentResolver

logger = logging.getLogger(__name__)

SECTION_TYPE = "type"
SECTION_ACTION = "action"
SECTION_DANGER = "danger"
SECTION_ORDER = (SECTION_TYPE, SECTION_ACTION, SECTION_DANGER)


@dataclass
class MenuItem:
    """One menu entry; an entry with a ``submenu`` opens it instead of acting."""

    title: str
    icon: Optional[str] = None
    section: Optional[str] = None
    on_click: Optional[Callable[[], None]] = None
    checked: bool = False
    disabled: bool = False
    warning: bool = False
    submenu: Optional["Menu"] = None
    is_extension: bool = False

    def click(self) -> bool:
        """Run the action.

        Returns:
            False if the item is disabled or has no action.
        """
        if self.disabled or self.on_click is None:
            return False
        self.on_click()
        return True


@dataclass
class Menu:
    items: List[MenuItem] = field(default_factory=list)

    def add_item(self, item: MenuItem) -> MenuItem:
        self.items.append(item)
        return item

    def find(self, title: str) -> Optional[MenuItem]:
        for item in self.items:
            if item.title == title:
                return item
        return None

    def titles(self) -> List[str]:
        return [item.title for item in self.items]

    def sort_sections(self, order: Sequence[str] = SECTION_ORDER) -> None:
        """Stable sort by section; unknown sections go last."""

        def rank(item: MenuItem) -> int:
            return order.index(item.section) if item.section in order else len(order)

        self.items.sort(key=rank)


class PropertyActions(Protocol):
    """Host-provided dialogs and commands the menu triggers."""

    def open_settings(self, property_path: str) -> None: ...

    def open_rename(self, property_path: str) -> None: ...

    def open_icon_picker(self, property_path: str) -> None: ...

    def confirm_delete(self, property_path: str, on_confirm: Callable[[], None]) -> None: ...

    def delete_property(self, property_path: str) -> None: ...


class PropertyMenuBuilder:
    """Fills a property's context menu.

    Adds the type submenu, settings, rename, icon and delete entries. Rename
    and delete apply to top-level properties only; sub-properties are owned
    by their parent.
    """

    def __init__(
        self,
        resolver: "TypeAssignmentResolver",
        actions: PropertyActions,
        config: Optional[MenuConfig] = None,
    ):
        self._resolver = resolver
        self._actions = actions
        self._config = config or MenuConfig()

    def build(self, property_path: str, menu: Optional[Menu] = None) -> Menu:
        menu = menu if menu is not None else Menu()
        top_level = not self._resolver.is_sub_property(property_path)

        menu.add_item(
            MenuItem(
                title="Type",
                icon="lucide-shapes",
                section=SECTION_TYPE,
                submenu=self._resolver.build_type_menu(property_path),
            )
        )
        menu.add_item(
            MenuItem(
                title="Settings",
                icon="lucide-settings",
                section=SECTION_ACTION,
                on_click=lambda: self._actions.open_settings(property_path),
            )
        )
        if top_level:
            menu.add_item(
                MenuItem(
                    title="Rename",
                    icon="lucide-pencil",
                    section=SECTION_ACTION,
                    on_click=lambda: self._actions.open_rename(property_path),
                )
            )
        menu.add_item(
            MenuItem(
                title="Icon",
                icon="lucide-image",
                section=SECTION_ACTION,
                on_click=lambda: self._actions.open_icon_picker(property_path),
            )
        )
        if top_level:
            menu.add_item(
                MenuItem(
                    title="Delete",
                    icon="lucide-trash-2",
                    section=SECTION_DANGER,
                    warning=True,
                    on_click=lambda: self._delete(property_path),
                )
            )

        menu.sort_sections()
        return menu

    def _delete(self, property_path: str) -> None:
        if self._config.confirm_property_delete:
            self._actions.confirm_delete(property_path, lambda: self._actions.delete_property(property_path))
        else:
            logger.info(f"Deleting property {property_path!r} without confirmation")
            self._actions.delete_property(property_path)
