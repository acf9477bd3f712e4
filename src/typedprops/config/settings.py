"""Configuration models using Pydantic."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class WidgetConfig(BaseModel):
    """Display/edit widget behaviour."""
    blur_settle_ms: int = Field(default=100, ge=0)  # Wait before leaving edit mode
    width_padding_px: float = 18.0
    min_input_width_px: float = 0.0
    max_input_width_px: Optional[float] = None  # None = unbounded


class TypesConfig(BaseModel):
    """Built-in property type defaults."""
    extension_prefix: str = "typedprops:"  # Namespace for third-party type keys
    default_currency: str = "USD"
    fallback_unit_preset: str = "length"
    prompt_for_unit_preset: bool = True


class MenuConfig(BaseModel):
    """Property context menu settings."""
    confirm_property_delete: bool = True


class StorageConfig(BaseModel):
    """Settings persistence."""
    settings_path: str = "./data/property-settings.yaml"
    auto_save: bool = True


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(extra="ignore")  # Ignore unknown fields in config file

    widget: WidgetConfig = Field(default_factory=WidgetConfig)
    types: TypesConfig = Field(default_factory=TypesConfig)
    menu: MenuConfig = Field(default_factory=MenuConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
