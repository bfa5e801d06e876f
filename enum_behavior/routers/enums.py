from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from enum_behavior.core.errors import ConfigurationError, EnumKeyNotFoundError, ModelNotRegisteredError
from enum_behavior.core.logging import get_logger
from enum_behavior.core.sentinels import NOT_FOUND
from enum_behavior.engine.registry import EnumFieldRegistry

router = APIRouter(prefix="/enums", tags=["enums"])
logger = get_logger("enum_behavior.routers.enums", component="router")


def get_enum_registry(request: Request) -> EnumFieldRegistry:
    registry = getattr(request.app.state, "enum_registry", None)
    if registry is None:
        raise ConfigurationError("No enum registry bound to the application")
    return registry


def _require_model(registry: EnumFieldRegistry, model_id: str) -> None:
    if not registry.is_registered(model_id):
        raise ModelNotRegisteredError(
            f"Model has no registered enum fields: {model_id}",
            detail={"model": model_id},
        )


@router.get("/{model_id}")
def list_label_sets(model_id: str, registry: EnumFieldRegistry = Depends(get_enum_registry)) -> dict[str, Any]:
    """Label sets of every enum field of a model, keyed by presentation name."""
    _require_model(registry, model_id)
    return {"model": model_id, "enums": registry.all_label_sets(model_id)}


@router.get("/{model_id}/{field}/{key}")
def get_label(
    model_id: str,
    field: str,
    key: str,
    registry: EnumFieldRegistry = Depends(get_enum_registry),
) -> dict[str, Any]:
    _require_model(registry, model_id)
    label = registry.lookup_value_for_key(model_id, field, key)
    if label is NOT_FOUND:
        logger.debug("enum_key_not_found", model=model_id, field=field, key=key)
        raise EnumKeyNotFoundError(
            f"No label for key '{key}' in {model_id}.{field}",
            detail={"model": model_id, "field": field, "key": key},
        )
    return {"field": field, "key": key, "value": label, "label": registry.label_text(label)}
