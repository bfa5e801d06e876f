"""Message catalogs used to translate enum labels and validation messages.

This module provides:
1. In-memory preloading of catalogs at startup
2. Locale fallback mechanism (id -> en -> default)
3. Zero disk I/O per lookup after preload
4. ``translate()``, the translation service handed to the enum registry

Usage:
    >>> from enum_behavior.i18n import translate
    >>> translate("Active", "id")
    'Aktif'
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import RLock
from types import MappingProxyType
from typing import Any, Callable, Mapping

import yaml

from enum_behavior.core.config import settings

__all__ = [
    "preload_i18n_resources",
    "get_i18n_resource",
    "clear_i18n_cache",
    "translate",
]

logger = logging.getLogger(__name__)

_resource_cache: dict[tuple[str, str], Mapping[str, Any]] = {}
_cache_lock = RLock()

_LOCALE_FALLBACK: dict[str, list[str]] = {
    "id": ["id", "en"],
    "en": ["en", "id"],
}
_RESOURCE_SUFFIXES: tuple[str, ...] = (".yaml", ".yml", ".json")


def _load_json_data(filepath: Path) -> Any:
    with open(filepath, "r", encoding="utf-8") as file_obj:
        return json.load(file_obj)


def _load_yaml_data(filepath: Path) -> Any:
    with open(filepath, "r", encoding="utf-8") as file_obj:
        return yaml.safe_load(file_obj)


_STRUCTURED_LOADERS: dict[str, Callable[[Path], Any]] = {
    ".json": _load_json_data,
    ".yaml": _load_yaml_data,
    ".yml": _load_yaml_data,
}


def _get_i18n_directory() -> Path:
    """Return the i18n directory path."""
    return Path(__file__).parent


def _load_structured_file(filepath: Path) -> Mapping[str, Any] | None:
    """Load JSON/YAML resource, returning immutable mapping when successful."""

    loader = _STRUCTURED_LOADERS.get(filepath.suffix.lower())
    if not loader:
        logger.debug("Unsupported i18n file suffix: %s", filepath.suffix)
        return None
    try:
        data = loader(filepath)
    except FileNotFoundError:
        logger.debug("i18n file not found: %s", filepath)
        return None
    except (json.JSONDecodeError, yaml.YAMLError, ValueError) as exc:
        logger.warning("Failed to parse i18n file %s: %s", filepath, exc)
        return None

    if data is None:
        logger.warning("Empty i18n file: %s", filepath)
        return None
    if not isinstance(data, Mapping):
        logger.warning("i18n file %s must contain a mapping root", filepath)
        return None
    return MappingProxyType(dict(data))


def _load_resource_with_fallback(
    resource_type: str,
    locale: str,
) -> Mapping[str, Any] | None:
    """Load resource with locale fallback mechanism."""
    i18n_dir = _get_i18n_directory()

    def _try_load(base_name: str) -> Mapping[str, Any] | None:
        for suffix in _RESOURCE_SUFFIXES:
            candidate = i18n_dir / f"{base_name}{suffix}"
            if candidate.exists():
                data = _load_structured_file(candidate)
                if data is not None:
                    logger.debug(
                        "Loaded i18n resource: type=%s base=%s file=%s",
                        resource_type,
                        base_name,
                        candidate.name,
                    )
                    return data
        return None

    fallback_locales = list(_LOCALE_FALLBACK.get(locale, [locale]))
    if settings.default_locale not in fallback_locales:
        fallback_locales.append(settings.default_locale)
    for fallback_locale in fallback_locales:
        resource = _try_load(f"{fallback_locale}_{resource_type}")
        if resource is not None:
            return resource

    resource = _try_load(resource_type)
    if resource is not None:
        return resource

    logger.warning(
        "No i18n resource found: type=%s, locale=%s, fallbacks=%s",
        resource_type,
        locale,
        fallback_locales,
    )
    return None


def preload_i18n_resources(
    *,
    resource_types: tuple[str, ...] = ("messages",),
    locales: tuple[str, ...] = ("en", "id"),
) -> dict[str, int]:
    """Preload catalogs into memory at application startup.

    Returns:
        Dict with preload statistics (loaded_count, failed_count, cache_size)
    """
    loaded_count = 0
    failed_count = 0

    with _cache_lock:
        for resource_type in resource_types:
            for locale in locales:
                cache_key = (resource_type, locale)
                if cache_key in _resource_cache:
                    continue
                resource = _load_resource_with_fallback(resource_type, locale)
                if resource is not None:
                    _resource_cache[cache_key] = resource
                    loaded_count += 1
                else:
                    failed_count += 1
        cache_size = len(_resource_cache)

    logger.info(
        "i18n preload complete: loaded=%s, failed=%s, cache_size=%s",
        loaded_count,
        failed_count,
        cache_size,
    )
    return {
        "loaded_count": loaded_count,
        "failed_count": failed_count,
        "cache_size": cache_size,
    }


@lru_cache(maxsize=128)
def get_i18n_resource(
    resource_type: str,
    locale: str,
) -> Mapping[str, Any]:
    """Get a catalog from cache, loading it with fallback on a miss.

    Raises:
        KeyError: If resource not found even after fallback attempts
    """
    cache_key = (resource_type, locale)
    with _cache_lock:
        if cache_key in _resource_cache:
            return _resource_cache[cache_key]

    logger.info("i18n cache miss, loading on-demand: type=%s, locale=%s", resource_type, locale)
    resource = _load_resource_with_fallback(resource_type, locale)
    if resource is not None:
        with _cache_lock:
            _resource_cache[cache_key] = resource
        return resource

    raise KeyError(f"i18n resource not found: type={resource_type}, locale={locale}")


def clear_i18n_cache() -> None:
    """Clear the catalog cache; mostly for tests."""
    with _cache_lock:
        _resource_cache.clear()
    get_i18n_resource.cache_clear()


def translate(text: str, locale: str | None = None) -> str:
    """Return the catalog entry for ``text``, or ``text`` itself when absent."""

    try:
        catalog = get_i18n_resource("messages", locale or settings.default_locale)
    except KeyError:
        return text
    translated = catalog.get(text)
    if translated is None:
        return text
    return str(translated)
