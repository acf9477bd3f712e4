import os

import pytest

# Qt adapter tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from typedprops.config import Config, reset_config  # noqa: E402
from typedprops.host import InMemoryPropertyHost, InMemoryTypeManager  # noqa: E402
from typedprops.plugin import PropertyTypesPlugin  # noqa: E402
from typedprops.settings import MemoryStorage, PropertySettingsStore  # noqa: E402
from typedprops.types import BUILTIN_TYPES  # noqa: E402
from typedprops.widgets import HeadlessControlFactory, ManualScheduler  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Keep the module-level config from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """Loaded settings store with every built-in schema registered."""
    store = PropertySettingsStore(storage)
    for descriptor in BUILTIN_TYPES:
        store.register_schema(descriptor.key, descriptor.settings_model)
    store.load()
    return store


@pytest.fixture
def controls():
    return HeadlessControlFactory()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def host():
    return InMemoryPropertyHost()


@pytest.fixture
def type_manager():
    return InMemoryTypeManager()


@pytest.fixture
def plugin(host, type_manager, storage, config, controls, scheduler):
    plugin = PropertyTypesPlugin(
        host,
        type_manager,
        storage=storage,
        config=config,
        controls=controls,
        scheduler=scheduler,
    )
    plugin.load()
    yield plugin
    plugin.unload()
