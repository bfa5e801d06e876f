from __future__ import annotations

"""Evaluation of enum validation rules against submitted model data."""

from typing import Any, Dict, Iterable, List, Mapping, Tuple

from sqlalchemy import inspect as sa_inspect

from enum_behavior.core.errors import EnumValidationError
from enum_behavior.core.logging import get_logger
from enum_behavior.core.sentinels import GENERATED, NOT_FOUND
from enum_behavior.db.introspection import column_default
from enum_behavior.engine.rules import Phase, ValidationRuleSpec

__all__ = [
    "coerce_value",
    "check_rule",
    "validate_values",
    "submitted_values",
    "ensure_valid",
]

logger = get_logger("enum_behavior.services.validation", component="service")

RuleSet = Mapping[str, Tuple[ValidationRuleSpec, ...]]


def coerce_value(value: Any) -> str:
    """String form of a submitted value, as compared against allowed keys.

    Booleans follow PHP string casting: ``True`` is ``"1"`` and ``False`` is
    ``""``.
    """

    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def check_rule(rule: ValidationRuleSpec, value: Any) -> bool:
    if value is GENERATED:
        return True
    if value is None or value == "":
        if rule.allow_empty:
            return True
        if value is None:
            return False
    return coerce_value(value) in rule.allowed
def validate_values(rules: RuleSet, data: Mapping[str, Any], phase: Phase) -> Dict[str, List[str]]:
    """Return failing messages per field; an empty dict means valid.

    A field missing from ``data`` only fails when an applicable rule is
    ``required``.
    """
    errors: Dict[str, List[str]] = {}
    for field_name, field_rules in rules.items():
        for rule in field_rules:
            if not rule.applies_to(phase):
                continue
            if field_name not in data:
                ok = not rule.required
            else:
                ok = check_rule(rule, data[field_name])
            if not ok and rule.message not in errors.get(field_name, ()):
                errors.setdefault(field_name, []).append(rule.message)
    return errors


def submitted_values(instance: object, fields: Iterable[str], phase: Phase) -> Dict[str, Any]:
    """Collect the values an ORM instance submits for ``fields``.

    On create these are the attributes set on the instance, completed with
    the column defaults the INSERT will apply (``GENERATED`` stands for a
    default computed at flush time). On update, the mapped attributes with
    pending changes.
    """
    state = sa_inspect(instance)
    data: Dict[str, Any] = {}
    for name in fields:
        if phase == "create":
            if name in state.dict:
                data[name] = state.dict[name]
                continue
            default = column_default(state.mapper, name)
            if default is not NOT_FOUND:
                data[name] = default
            continue
        if name not in state.mapper.attrs:
            continue
        attr = state.attrs[name]
        if attr.history.has_changes():
            data[name] = attr.value
    return data


def ensure_valid(model_id: object, rules: RuleSet, data: Mapping[str, Any], phase: Phase) -> None:
    """Raise ``EnumValidationError`` when ``data`` breaks any rule."""

    errors = validate_values(rules, data, phase)
    if not errors:
        return
    logger.info("enum_validation_failed", model=str(model_id), phase=phase, fields=sorted(errors))
    raise EnumValidationError(
        f"Enum validation failed for {model_id}: " + ", ".join(sorted(errors)),
        detail={"model": str(model_id), "phase": phase, "fields": errors},
    )
