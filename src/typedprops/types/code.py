"""Code snippet property type."""

import logging
from typing import Any, Dict, Optional

from ..config.settings import TypesConfig
from ..settings import TypeSettingsModel
from ..widgets.layouts import TextLayout
from ..widgets.state import TypedFieldWidget
from .base import Codec, TypeDescriptor, WidgetContext
from .formatting import format_plain_number

logger = logging.getLogger(__name__)

CODE_KEY = "code"


class CodeSettings(TypeSettingsModel):
    """Code properties have no settings yet."""


class CodeCodec(Codec[str]):
    """Text stored verbatim; blank text is empty."""

    def parse(self, raw: Any) -> Optional[str]:
        if raw is None:
            return None
        if isinstance(raw, str):
            return raw if raw.strip() else None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return format_plain_number(raw)
        logger.warning(f"Cannot parse {type(raw).__name__} as code")
        return None

    def format(self, value: Optional[str]) -> str:
        return value or ""


def make_codec(settings: Dict[str, Any], types_config: Optional[TypesConfig] = None) -> CodeCodec:
    return CodeCodec()


def is_code_shape(value: Any) -> bool:
    return value is None or (isinstance(value, (str, int, float)) and not isinstance(value, bool))


def render_widget(ctx: WidgetContext) -> TypedFieldWidget:
    codec = make_codec(ctx.store.get(ctx.property_path, CODE_KEY))
    layout = TextLayout(ctx.controls.text(numeric=False))
    return TypedFieldWidget.from_context(ctx, CODE_KEY, codec, layout)


CODE_TYPE = TypeDescriptor(
    key=CODE_KEY,
    display_name=lambda: "Code",
    icon="lucide-code",
    validate=is_code_shape,
    codec_factory=make_codec,
    settings_model=CodeSettings,
    render_widget=render_widget,
)
