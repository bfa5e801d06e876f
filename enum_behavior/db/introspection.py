from __future__ import annotations

from typing import Iterable

from sqlalchemy import Column, inspect
from sqlalchemy.exc import NoInspectionAvailable

from enum_behavior.core.sentinels import GENERATED, NOT_FOUND

__all__ = ["column_nullability", "column_default"]


def _single_column(model: object, name: str) -> Column | None:
    try:
        mapper = inspect(model)
    except NoInspectionAvailable:
        return None
    mapper = getattr(mapper, "mapper", mapper)
    prop = mapper.column_attrs.get(name)
    if prop is None or len(prop.columns) != 1:
        return None
    return prop.columns[0]


def column_nullability(model: type, fields: Iterable[str]) -> dict[str, bool]:
    """Report whether the column behind each field accepts NULL.

    Fields that are not mapped to exactly one column are left out, which
    the registry reads as "nullable".
    """
    result: dict[str, bool] = {}
    for name in fields:
        column = _single_column(model, name)
        if column is not None:
            result[name] = bool(column.nullable)
    return result


def column_default(model: object, name: str) -> object:
    """Value the INSERT will use for ``name`` when the caller leaves it unset.

    Scalar ``default=`` values are returned as is. Callable and sequence
    defaults and ``server_default`` yield ``GENERATED``; ``NOT_FOUND`` when
    the column has no default at all.
    """
    column = _single_column(model, name)
    if column is None:
        return NOT_FOUND
    default = column.default
    if default is not None:
        return default.arg if default.is_scalar else GENERATED
    if column.server_default is not None:
        return GENERATED
    return NOT_FOUND
