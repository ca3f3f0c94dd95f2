"""Detection of hidden rows and columns from a worksheet's XML markers."""

from __future__ import annotations

import re

from xgrep.zip_index import SearchError, ZipIndex

__all__ = ["detect"]

_ROW_RE = re.compile(r'<row[^>]*r="(\d+)"[^>]*hidden="1"')
_COL_RE = re.compile(r'<col[^>]*min="(\d+)"[^>]*max="(\d+)"[^>]*hidden="1"')
_U32_MAX = 0xFFFFFFFF


def detect(index: ZipIndex, sheet_xml_path: str) -> tuple[set[int], set[int]]:
    """Return ``(hidden_rows, hidden_cols)`` as 0-based index sets.

    Detection is best-effort: a missing or unreadable part yields empty sets,
    which at worst keeps cells that should have been hidden.
    """
    hidden_rows: set[int] = set()
    hidden_cols: set[int] = set()
    try:
        xml = index.read_text(sheet_xml_path)
    except SearchError:
        return hidden_rows, hidden_cols
    if xml is None:
        return hidden_rows, hidden_cols

    for match in _ROW_RE.finditer(xml):
        n = int(match.group(1))
        if n <= _U32_MAX:
            hidden_rows.add(max(n - 1, 0))

    for match in _COL_RE.finditer(xml):
        lo = int(match.group(1))
        if lo > _U32_MAX:
            lo = 1
        hi = int(match.group(2))
        if hi > _U32_MAX:
            hi = lo
        hidden_cols.update(max(c - 1, 0) for c in range(lo, hi + 1))

    return hidden_rows, hidden_cols