from __future__ import annotations

from typing import Final


class Sentinel:
    """Named marker compared by identity only."""

    __slots__ = ("_label",)

    def __init__(self, label: str) -> None:
        self._label = label

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:  # pragma: no cover - repr logic trivial
        return f"<Sentinel:{self._label}>"

    def __reduce__(self) -> str:
        return self._label


NOT_FOUND: Final = Sentinel("NOT_FOUND")
# Column default computed at flush time (callable, sequence or server side).
GENERATED: Final = Sentinel("GENERATED")

__all__ = ["GENERATED", "NOT_FOUND", "Sentinel"]
