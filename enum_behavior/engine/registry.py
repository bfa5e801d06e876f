from __future__ import annotations

"""Registry of enum field declarations per model.

The registry is an explicit object owned by whatever composes the models
(usually the application factory) and handed to each model when it is set
up. A model is registered once, read many times, and disposed when the
application shuts down or reloads its configuration.

Key Classes:
    RegistryEntry: Immutable declarations and rules of one model
    EnumFieldRegistry: Registration, lookups and label sets

Usage:
    >>> registry = EnumFieldRegistry()
    >>> registry.register("Article", {"state": {1: "draft", 2: "published"}})
    >>> registry.lookup_value_for_key("Article", "state", 2)
    'published'
    >>> registry.all_label_sets("Article")
    {'states': {1: 'Draft', 2: 'Published'}}
"""

from collections.abc import Hashable
from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Tuple

from enum_behavior.core.errors import ConfigurationError, UnknownFieldError
from enum_behavior.core.inflector import humanize, presentation_name
from enum_behavior.core.logging import get_logger
from enum_behavior.core.sentinels import NOT_FOUND
from enum_behavior.engine.declarations import (
    EnumDeclaration,
    EnumKey,
    EnumLabel,
    coerce_key,
    parse_declaration,
)
from enum_behavior.engine.rules import ValidationRuleSpec, derive_rules
from enum_behavior.i18n import translate

__all__ = [
    "RegistryEntry",
    "EnumFieldRegistry",
]

logger = get_logger("enum_behavior.engine.registry", component="engine")

ModelId = Hashable


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """Immutable container holding one model's enum configuration.

    Attributes:
        model_id: Identity under which the model registered.
        declarations: Field name to resolved declaration, in registration order.
        rules: Field name to the validation rules attached to it. Fields
            declared with ``validate=False`` have no entry.
    """

    model_id: ModelId
    declarations: Mapping[str, EnumDeclaration] = field(default_factory=lambda: MappingProxyType({}))
    rules: Mapping[str, Tuple[ValidationRuleSpec, ...]] = field(default_factory=lambda: MappingProxyType({}))


class EnumFieldRegistry:
    """Per-model store of enum declarations.

    Collaborators are injectable so display names and labels can be produced
    by the host application's own services:

    Args:
        translator: ``translate(text) -> text`` for labels and messages.
        humanizer: ``humanize(token) -> text`` applied to labels first.
        namer: ``namer(field) -> presentation name`` for ``all_label_sets``.
    """

    def __init__(
        self,
        *,
        translator: Callable[[str], str] = translate,
        humanizer: Callable[[object], str] = humanize,
        namer: Callable[[str], str] = presentation_name,
    ) -> None:
        self._entries: Dict[ModelId, RegistryEntry] = {}
        self._lock = RLock()
        self._translator = translator
        self._humanizer = humanizer
        self._namer = namer

    def label_text(self, label: object) -> str:
        """Display text of a raw label."""
        return self._translator(self._humanizer(label))

    def register(
        self,
        model_id: ModelId,
        field_configurations: Mapping[str, object],
        column_nullability: Mapping[str, bool] | None = None,
    ) -> None:
        """Register the enum fields of a model.

        Each field is parsed and stored independently. A malformed field is
        left out while the others are registered; once every field has been
        processed a ``ConfigurationError`` listing the failures is raised.
        Two fields whose presentation names coincide (``user_role`` and
        ``userRole``) would share one label set, so the later one is rejected.

        Args:
            model_id: Identity of the model.
            field_configurations: Field name to raw declaration.
            column_nullability: Field name to "column allows NULL", as
                reported by schema introspection. Missing fields count as
                nullable.

        Raises:
            ConfigurationError: If one or more declarations are malformed.
        """
        nullability = column_nullability or {}
        declarations: Dict[str, EnumDeclaration] = {}
        rules: Dict[str, Tuple[ValidationRuleSpec, ...]] = {}
        failures: Dict[str, str] = {}
        presented_as: Dict[str, str] = {}

        for field_name, raw in field_configurations.items():
            try:
                declaration = parse_declaration(field_name, raw)
            except ConfigurationError as exc:
                failures[field_name] = exc.message
                continue
            name = self._namer(field_name)
            if name in presented_as:
                failures[field_name] = (
                    f"label set name '{name}' is already used by field '{presented_as[name]}'"
                )
                continue
            presented_as[name] = field_name
            declarations[field_name] = declaration
            if declaration.should_validate:
                rules[field_name] = derive_rules(
                    declaration,
                    nullable=nullability.get(field_name),
                    label_text=self.label_text,
                    translator=self._translator,
                )

        entry = RegistryEntry(
            model_id=model_id,
            declarations=MappingProxyType(declarations),
            rules=MappingProxyType(rules),
        )
        with self._lock:
            replaced = model_id in self._entries
            self._entries[model_id] = entry

        log = logger.bind(model=str(model_id))
        log.info(
            "enum_model_registered",
            fields=list(declarations),
            validated_fields=list(rules),
            replaced=replaced,
        )
        if failures:
            log.warning("enum_declarations_rejected", failures=failures)
            raise ConfigurationError(
                (
                    f"Invalid enum declarations for {model_id}: "
                    + "; ".join(f"{name}: {reason}" for name, reason in failures.items())
                ),
                detail={"model": str(model_id), "failures": failures},
            )

    def is_registered(self, model_id: ModelId) -> bool:
        with self._lock:
            return model_id in self._entries

    def entry(self, model_id: ModelId) -> RegistryEntry:
        """Return the entry of ``model_id``, empty when never registered."""
        with self._lock:
            return self._entries.get(model_id) or RegistryEntry(model_id=model_id)

    def fields(self, model_id: ModelId) -> Tuple[str, ...]:
        return tuple(self.entry(model_id).declarations)

    def declaration(self, model_id: ModelId, field_name: str) -> EnumDeclaration:
        """Return the declaration of a field.

        Raises:
            UnknownFieldError: If the field was never registered for the model.
        """
        entry = self.entry(model_id)
        try:
            return entry.declarations[field_name]
        except KeyError:
            raise UnknownFieldError(model_id, field_name, entry.declarations) from None

    def validation_rules(self, model_id: ModelId) -> Mapping[str, Tuple[ValidationRuleSpec, ...]]:
        return self.entry(model_id).rules

    def lookup_key_for_value(self, model_id: ModelId, field_name: str, value: object) -> EnumKey | object:
        """Return the first key whose label equals ``value``, else ``NOT_FOUND``."""
        declaration = self.declaration(model_id, field_name)
        for key, label in declaration.values.items():
            if label == value and type(label) is type(value):
                return key
        return NOT_FOUND

    def lookup_value_for_key(self, model_id: ModelId, field_name: str, key: object) -> EnumLabel | object:
        """Return the label stored under ``key``, else ``NOT_FOUND``.

        Keys are compared by their string form, so ``1`` and ``"1"`` address
        the same entry.
        """
        declaration = self.declaration(model_id, field_name)
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            return NOT_FOUND
        wanted = coerce_key(key)
        for candidate, label in declaration.values.items():
            if coerce_key(candidate) == wanted:
                return label
        return NOT_FOUND

    def all_label_sets(self, model_id: ModelId) -> Dict[str, Dict[EnumKey, str]]:
        """Return display labels of every non-empty enum, keyed by presentation name."""
        result: Dict[str, Dict[EnumKey, str]] = {}
        for field_name, declaration in self.entry(model_id).declarations.items():
            if not declaration.values:
                continue
            result[self._namer(field_name)] = {
                key: self.label_text(label) for key, label in declaration.values.items()
            }
        return result

    def snapshot(self) -> Mapping[ModelId, RegistryEntry]:
        with self._lock:
            return MappingProxyType(dict(self._entries))

    def dispose(self, model_id: ModelId) -> bool:
        """Forget a model. Returns False if it was not registered."""
        with self._lock:
            removed = self._entries.pop(model_id, None) is not None
        if removed:
            logger.info("enum_model_disposed", model=str(model_id))
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
