"""Tests for catalog preloading and the translate() service."""

from typing import Mapping

from enum_behavior.engine.registry import EnumFieldRegistry
from enum_behavior.engine.rules import MESSAGE_TEMPLATE
from enum_behavior.i18n import get_i18n_resource, preload_i18n_resources, translate


def test_preload_reports_statistics(i18n_cache):
    stats = preload_i18n_resources(locales=("en", "id"))
    assert stats == {"loaded_count": 2, "failed_count": 0, "cache_size": 2}

    again = preload_i18n_resources(locales=("en", "id"))
    assert again["loaded_count"] == 0


def test_resources_are_cached_and_read_only(i18n_cache):
    first = get_i18n_resource("messages", "id")
    second = get_i18n_resource("messages", "id")
    assert first is second
    assert isinstance(first, Mapping)
    assert first["Active"] == "Aktif"


def test_translate_known_and_unknown_text(i18n_cache):
    assert translate("Active", "id") == "Aktif"
    assert translate("Unlisted Label", "id") == "Unlisted Label"
    assert translate("Active", "en") == "Active"


def test_unknown_locale_falls_back(i18n_cache):
    assert translate("Active", "fr") == "Active"


def test_registry_messages_in_indonesian(i18n_cache):
    registry = EnumFieldRegistry(translator=lambda text: translate(text, "id"))
    registry.register("User", {"state": {1: "active", 2: "inactive"}})
    (rule,) = registry.validation_rules("User")["state"]
    assert rule.message == "Silakan pilih salah satu nilai berikut : Aktif, Tidak Aktif"
    assert registry.all_label_sets("User") == {"states": {1: "Aktif", 2: "Tidak Aktif"}}
    assert translate(MESSAGE_TEMPLATE, "en") == MESSAGE_TEMPLATE
