from __future__ import annotations

"""Parsing of enum field declarations.

A declaration comes in one of two shapes:

* bare, a plain ``{key: label}`` mapping which always validates::

      {1: "value_1", "key": "value_2"}

* wrapped, ``{"values": {key: label}, "validate": bool}`` which lets the
  model opt out of validation while keeping the lookups.

``parse_declaration`` decides the shape once, at configuration time, and
returns a ``BareEnum`` or a ``WrappedEnum``. Everything downstream works on
those two types only.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from numbers import Real
from types import MappingProxyType
from typing import Any, Union

from enum_behavior.core.errors import ConfigurationError

__all__ = [
    "EnumKey",
    "EnumLabel",
    "BareEnum",
    "WrappedEnum",
    "EnumDeclaration",
    "RESERVED_KEYS",
    "coerce_key",
    "parse_declaration",
]

EnumKey = Union[str, int]
EnumLabel = Union[str, int, float, None]

RESERVED_KEYS: frozenset[str] = frozenset({"values", "validate"})


def coerce_key(key: EnumKey) -> str:
    """String form of a key as compared by the validation engine."""
    return str(key)


@dataclass(frozen=True, slots=True)
class BareEnum:
    """Shorthand declaration; validation is always attached."""

    values: Mapping[EnumKey, EnumLabel]

    @property
    def validate(self) -> bool | None:
        return None

    @property
    def should_validate(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class WrappedEnum:
    """Declaration carrying an explicit ``validate`` flag.

    ``validate`` is tri-state: ``None`` (absent) and ``True`` both validate,
    ``False`` registers the enum for lookups only.
    """

    values: Mapping[EnumKey, EnumLabel]
    validate: bool | None = None

    @property
    def should_validate(self) -> bool:
        return self.validate is not False


EnumDeclaration = Union[BareEnum, WrappedEnum]


def _check_values(field: str, values: Mapping[Any, Any]) -> Mapping[EnumKey, EnumLabel]:
    seen: dict[str, EnumKey] = {}
    for key, label in values.items():
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise ConfigurationError(
                f"Enum key {key!r} of field '{field}' must be a string or an integer",
                detail={"field": field, "key": repr(key)},
            )
        if label is not None and (isinstance(label, bool) or not isinstance(label, (str, Real))):
            raise ConfigurationError(
                f"Enum label for key {key!r} of field '{field}' must be a string, a number or None",
                detail={"field": field, "key": repr(key)},
            )
        coerced = coerce_key(key)
        if coerced in seen:
            raise ConfigurationError(
                f"Enum keys {seen[coerced]!r} and {key!r} of field '{field}' collide as '{coerced}'",
                detail={"field": field, "key": coerced},
            )
        seen[coerced] = key
    return MappingProxyType(dict(values))


def parse_declaration(field: str, raw: object) -> EnumDeclaration:
    """Decode the raw configuration of ``field`` into a declaration.

    Raises:
        ConfigurationError: if ``raw`` is not a mapping, if it uses the
            reserved ``values``/``validate`` keys in a way that could also
            be read as a bare enum, or if keys or labels are malformed.
    """
    if isinstance(raw, (BareEnum, WrappedEnum)):
        return raw
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"Enum declaration of field '{field}' must be a mapping, got {type(raw).__name__}",
            detail={"field": field},
        )

    keys = set(raw.keys())
    if keys == RESERVED_KEYS:
        values = raw["values"]
        validate = raw["validate"]
        if not isinstance(values, Mapping) or not (validate is None or isinstance(validate, bool)):
            raise ConfigurationError(
                (
                    f"Ambiguous enum declaration for field '{field}': keys 'values' and "
                    "'validate' are reserved for the wrapped form, which expects a mapping "
                    "and a boolean"
                ),
                detail={"field": field},
            )
        return WrappedEnum(values=_check_values(field, values), validate=validate)

    if keys == {"values"} and isinstance(raw["values"], Mapping):
        return WrappedEnum(values=_check_values(field, raw["values"]))

    if isinstance(raw.get("validate"), bool):
        if "values" not in keys:
            message = f"Wrapped enum declaration of field '{field}' is missing 'values'"
        else:
            extra = sorted(str(key) for key in keys - RESERVED_KEYS)
            message = f"Wrapped enum declaration of field '{field}' has unexpected keys: {', '.join(extra)}"
        raise ConfigurationError(message, detail={"field": field})

    return BareEnum(values=_check_values(field, raw))
