"""Cell records and the safety check applied to sheets the fast path skips."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

__all__ = ["CellRecord", "FastPathViolation", "assert_skipped_safely"]


@dataclass(frozen=True)
class CellRecord:
    """One searchable text value taken from a cell, a formula or a comment."""

    sheet: str
    cell: str
    layer: Any
    text: str


class FastPathViolation(AssertionError):
    """A sheet was skipped although one of its cells matches the pattern."""


def _is_match(pattern: Any, text: str) -> bool:
    is_match = getattr(pattern, "is_match", None)
    if is_match is not None:
        return bool(is_match(text))
    return pattern.search(text) is not None


def _raw(pattern: Any) -> str:
    raw = getattr(pattern, "raw", None)
    if callable(raw):
        raw = raw()
    if raw is None:
        raw = getattr(pattern, "pattern", pattern)
    return str(raw)


def assert_skipped_safely(
    sheet_name: str, fallback_cells: Iterable[CellRecord], pattern: Any
) -> None:
    """Raise FastPathViolation if any of ``fallback_cells`` matches ``pattern``."""
    for record in fallback_cells:
        if _is_match(pattern, record.text):
            raise FastPathViolation(
                f"fast-path silently skipped sheet {sheet_name!r} but cell "
                f"{record.cell} (layer {record.layer!r}) text {record.text!r} "
                f"matches pattern {_raw(pattern)!r}"
            )