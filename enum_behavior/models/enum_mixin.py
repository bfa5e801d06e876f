from __future__ import annotations

"""Declarative mixin giving SQLAlchemy models enum fields.

Example::

    class Article(EnumMixin, Base):
        __tablename__ = "articles"
        __enums__ = {
            "state": {1: "draft", 2: "published"},
            "kind": {"values": {"news": "news", "blog": "blog"}, "validate": False},
        }

        id: Mapped[int] = mapped_column(primary_key=True)
        state: Mapped[int] = mapped_column(Integer, nullable=False)
        kind: Mapped[Optional[str]] = mapped_column(String(20))

    Article.setup_enums(registry)          # at application startup
    Article.enum_key_to_value("state", 2)  # 'published'
    Article.enum_values()                   # {"states": {...}, "kinds": {...}}
    Article.teardown_enums()               # at shutdown
"""

from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import event

from enum_behavior.core.config import settings
from enum_behavior.core.errors import ConfigurationError
from enum_behavior.db.introspection import column_nullability
from enum_behavior.engine.declarations import EnumKey
from enum_behavior.engine.registry import EnumFieldRegistry
from enum_behavior.engine.rules import Phase, ValidationRuleSpec
from enum_behavior.services.validation import ensure_valid, submitted_values, validate_values

__all__ = ["EnumMixin"]


def _validate_before_insert(mapper, connection, target) -> None:
    target._enforce_enums("create")


def _validate_before_update(mapper, connection, target) -> None:
    target._enforce_enums("update")


_HOOKS: Tuple[Tuple[str, Any], ...] = (
    ("before_insert", _validate_before_insert),
    ("before_update", _validate_before_update),
)


class EnumMixin:
    """Adds enum lookups, label sets and save-time validation to a model."""

    __enums__: ClassVar[Mapping[str, Any]] = {}
    __enum_registry__: ClassVar[Optional[EnumFieldRegistry]] = None

    @classmethod
    def enum_model_id(cls) -> str:
        if settings.enum_model_id_strategy == "table_name":
            table_name = getattr(cls, "__tablename__", None)
            if table_name:
                return str(table_name)
        return cls.__name__

    @classmethod
    def _enum_registry(cls) -> EnumFieldRegistry:
        registry = cls.__dict__.get("__enum_registry__")
        if registry is None:
            raise ConfigurationError(
                f"{cls.__name__}.setup_enums(registry) must be called before using enum fields"
            )
        return registry

    @classmethod
    def setup_enums(cls, registry: EnumFieldRegistry) -> None:
        """Register ``__enums__`` with ``registry`` and install save hooks.

        Hooks are installed for the fields that registered even when some
        declarations were rejected; the ``ConfigurationError`` is re-raised.
        """
        config = dict(cls.__enums__)
        nullability = column_nullability(cls, config)
        try:
            registry.register(cls.enum_model_id(), config, nullability)
        finally:
            cls.__enum_registry__ = registry
            for identifier, hook in _HOOKS:
                if not event.contains(cls, identifier, hook):
                    event.listen(cls, identifier, hook)

    @classmethod
    def teardown_enums(cls) -> None:
        registry = cls.__dict__.get("__enum_registry__")
        for identifier, hook in _HOOKS:
            if event.contains(cls, identifier, hook):
                event.remove(cls, identifier, hook)
        if registry is not None:
            registry.dispose(cls.enum_model_id())
            cls.__enum_registry__ = None

    @classmethod
    def enum_value_to_key(cls, field: str, value: Any) -> EnumKey | object:
        """Key whose label is ``value``, or ``NOT_FOUND``."""
        return cls._enum_registry().lookup_key_for_value(cls.enum_model_id(), field, value)

    @classmethod
    def enum_key_to_value(cls, field: str, key: Any) -> Any:
        """Label stored under ``key``, or ``NOT_FOUND``."""
        return cls._enum_registry().lookup_value_for_key(cls.enum_model_id(), field, key)

    @classmethod
    def enum_values(cls) -> Dict[str, Dict[EnumKey, str]]:
        """Display labels of every enum field, ready for a select control."""
        return cls._enum_registry().all_label_sets(cls.enum_model_id())

    @classmethod
    def enum_rules(cls) -> Mapping[str, Tuple[ValidationRuleSpec, ...]]:
        return cls._enum_registry().validation_rules(cls.enum_model_id())

    def validate_enums(self, phase: Phase = "create") -> Dict[str, List[str]]:
        """Check the pending values without flushing; empty dict when valid."""
        rules = self.enum_rules()
        return validate_values(rules, submitted_values(self, rules, phase), phase)

    def _enforce_enums(self, phase: Phase) -> None:
        cls = type(self)
        if cls.__dict__.get("__enum_registry__") is None:
            return
        rules = cls.enum_rules()
        if rules:
            ensure_valid(cls.enum_model_id(), rules, submitted_values(self, rules, phase), phase)
