"""Command line inspection of property types and their stored settings.

Usage:
    typedprops types
    typedprops format currency 1234567
    typedprops format measurement "{value: 12}" --property height
    typedprops settings height
    typedprops assign size.width measurement
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .config import Config, load_config
from .errors import TypedPropsError
from .host import HOST_NATIVE_TYPES
from .registry import TypeRegistry
from .resolver import is_sub_property
from .settings import PropertySettingsStore, YamlStorage
from .types import register_builtin_types

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def _build_registry(config: Config) -> TypeRegistry:
    registry = TypeRegistry(config.types.extension_prefix)
    for descriptor in HOST_NATIVE_TYPES:
        registry.register(descriptor)
    register_builtin_types(registry)
    return registry


def _open_store(args: argparse.Namespace, config: Config, registry: TypeRegistry) -> PropertySettingsStore:
    path = args.settings_file or Path(config.storage.settings_path)
    store = PropertySettingsStore(YamlStorage(path), auto_save=True)
    for descriptor in registry:
        store.register_schema(descriptor.key, descriptor.settings_model)
    store.load()
    return store


def _dump(data) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip()


# ─────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────


def cmd_types(args: argparse.Namespace, config: Config) -> int:
    registry = _build_registry(config)
    assignable = {d.key for d in registry.list_assignable()}
    for descriptor in registry:
        marker = "*" if descriptor.key in assignable else " "
        print(f"{marker} {descriptor.key:<14} {descriptor.name}")
    return 0


def cmd_format(args: argparse.Namespace, config: Config) -> int:
    registry = _build_registry(config)
    descriptor = registry.get(args.type)

    try:
        raw = yaml.safe_load(args.value)
    except yaml.YAMLError:
        raw = args.value

    settings = {}
    if args.property:
        settings = _open_store(args, config, registry).get(args.property, descriptor.key)
    codec = descriptor.make_codec(settings, config.types)

    value = codec.parse(raw)
    stored = None if codec.is_empty(value) else codec.dump(value)
    print(_dump({"stored": stored, "display": codec.format(value)}))
    return 0


def cmd_settings(args: argparse.Namespace, config: Config) -> int:
    registry = _build_registry(config)
    store = _open_store(args, config, registry)

    type_keys = [args.type] if args.type else store.type_keys(args.property)
    output = {
        "general": store.get_general(args.property).model_dump(exclude_defaults=True),
        "types": {key: store.get(args.property, key) for key in type_keys},
    }
    print(_dump(output))
    return 0


def cmd_assign(args: argparse.Namespace, config: Config) -> int:
    if not is_sub_property(args.property):
        print(
            f"{args.property!r} is a top-level property; its type is managed by the host",
            file=sys.stderr,
        )
        return 1

    registry = _build_registry(config)
    registry.get(args.type)
    store = _open_store(args, config, registry)
    general = store.get_general(args.property)
    general.custom_property_type = args.type
    store.set_general(args.property, general)
    print(f"{args.property} -> {args.type}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typedprops",
        description="Inspect property types and their per-property settings",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config file (default: $TYPEDPROPS_CONFIG or config/typedprops.yaml)")
    parser.add_argument("--settings-file", type=Path, default=None, help="Settings document (default: from config)")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    commands = parser.add_subparsers(dest="command", required=True)

    types_parser = commands.add_parser("types", help="List registered types (* = assignable)")
    types_parser.set_defaults(handler=cmd_types)

    format_parser = commands.add_parser("format", help="Parse and format a raw value")
    format_parser.add_argument("type", help="Type key")
    format_parser.add_argument("value", help="Raw value as YAML (e.g. 12 or '{value: 50, currency: EUR}')")
    format_parser.add_argument("--property", help="Use this property's stored settings")
    format_parser.set_defaults(handler=cmd_format)

    settings_parser = commands.add_parser("settings", help="Show stored settings of a property")
    settings_parser.add_argument("property")
    settings_parser.add_argument("--type", help="Only this type key")
    settings_parser.set_defaults(handler=cmd_settings)

    assign_parser = commands.add_parser("assign", help="Assign a type to a sub-property")
    assign_parser.add_argument("property")
    assign_parser.add_argument("type")
    assign_parser.set_defaults(handler=cmd_assign)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        _configure_logging(args.log_level or config.log_level)
        return args.handler(args, config)
    except TypedPropsError as e:
        logger.debug(f"Command failed: {e.details}")
        print(f"error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
