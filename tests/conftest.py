import pytest

from enum_behavior.engine.registry import EnumFieldRegistry
from enum_behavior.i18n import clear_i18n_cache


@pytest.fixture()
def registry():
    # identity translator keeps expectations independent of the catalogs
    return EnumFieldRegistry(translator=lambda text: text)


@pytest.fixture()
def i18n_cache():
    clear_i18n_cache()
    yield
    clear_i18n_cache()
