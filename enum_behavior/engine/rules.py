from __future__ import annotations

"""Validation rules derived from enum declarations.

The registry only describes rules; ``enum_behavior.services.validation``
evaluates them when a model is saved.
"""

from dataclasses import dataclass, replace
from typing import Callable, Literal, Optional, Tuple

from enum_behavior.engine.declarations import EnumDeclaration, coerce_key

__all__ = [
    "Phase",
    "ValidationRuleSpec",
    "MESSAGE_TEMPLATE",
    "derive_rules",
]

Phase = Literal["create", "update"]

MESSAGE_TEMPLATE = "Please choose one of the following values : {values}"


@dataclass(frozen=True, slots=True)
class ValidationRuleSpec:
    """One ``inList`` rule attached to an enum field.

    Attributes:
        name: Rule name within the field's rule set.
        allowed: String-coerced keys accepted by the rule.
        message: Human readable error listing the allowed labels.
        allow_empty: ``None`` and ``""`` pass without a key match.
        required: The field must be present in the submitted data.
        on: Phase the rule applies to; ``None`` for both.
    """

    name: str
    allowed: Tuple[str, ...]
    message: str
    allow_empty: bool = False
    required: bool = False
    on: Optional[Phase] = None
    rule: str = "inList"

    def applies_to(self, phase: Phase) -> bool:
        return self.on is None or self.on == phase


def derive_rules(
    declaration: EnumDeclaration,
    *,
    nullable: bool | None,
    label_text: Callable[[object], str],
    translator: Callable[[str], str],
) -> Tuple[ValidationRuleSpec, ...]:
    """Build the rules enforcing ``declaration``.

    ``label_text`` turns a raw label into display text (humanize then
    translate). A column that is known to be NOT NULL gets a create rule
    that requires the field and an update rule that does not; anything
    else gets a single optional rule.
    """
    labels = list(declaration.values.values())
    base = ValidationRuleSpec(
        name="allowedValues",
        allowed=tuple(coerce_key(key) for key in declaration.values),
        message=translator(MESSAGE_TEMPLATE).format(
            values=", ".join(label_text(label) for label in labels)
        ),
        # Labels, not keys, are inspected here.
        allow_empty=any(label is None or label == "" for label in labels),
    )
    if nullable is False:
        return (
            replace(base, name="allowedValuesCreate", required=True, on="create"),
            replace(base, name="allowedValuesUpdate", on="update"),
        )
    return (base,)
