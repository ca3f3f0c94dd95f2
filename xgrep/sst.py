"""Shared-strings parsing and the set of string indices a pattern matches."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from xgrep.xml_scan import iter_tags, xml_unescape
from xgrep.zip_index import ZipIndex

__all__ = [
    "HitSet",
    "parse",
    "build_hit_set",
    "parse_with_early_abort",
    "parse_xml_with_early_abort",
]

SHARED_STRINGS = "xl/sharedStrings.xml"


def _is_match(pattern: Any, text: str) -> bool:
    is_match = getattr(pattern, "is_match", None)
    if is_match is not None:
        return bool(is_match(text))
    return pattern.search(text) is not None


class HitSet:
    """A fixed-size set of shared-string indices."""

    def __init__(self, n: int) -> None:
        self._len = n
        self._bits = 0

    def insert(self, i: int) -> None:
        """Mark index ``i``; indices outside the set's size are ignored."""
        if 0 <= i < self._len:
            self._bits |= 1 << i

    def contains(self, i: int) -> bool:
        """Return True if index ``i`` is marked."""
        if not 0 <= i < self._len:
            return False
        return bool((self._bits >> i) & 1)

    __contains__ = contains

    def is_empty(self) -> bool:
        """Return True if no index is marked."""
        return self._bits == 0

    def __len__(self) -> int:
        """Return the number of shared strings the set was sized for."""
        return self._len

    def __iter__(self) -> Iterator[int]:
        bits = self._bits
        while bits:
            low = bits & -bits
            yield low.bit_length() - 1
            bits ^= low

    def count(self) -> int:
        """Return the number of marked indices."""
        return self._bits.bit_count()

    def __repr__(self) -> str:
        return f"HitSet(len={self._len}, hits={list(self)})"


def _si_texts(xml: bytes | str) -> Iterator[str]:
    for _attrs, body in iter_tags(xml, "si"):
        yield "".join(xml_unescape(t_body) for _t_attrs, t_body in iter_tags(body, "t"))


def parse(index: ZipIndex) -> list[str]:
    """Return the shared strings in ``<si>`` order (rich-text runs joined)."""
    xml = index.read_bytes(SHARED_STRINGS)
    if xml is None:
        return []
    return list(_si_texts(xml))


def build_hit_set(sst: Iterable[str], pattern: Any) -> HitSet:
    """Mark the indices of ``sst`` whose text matches ``pattern``.

    With no pattern the returned set is empty but sized to ``sst``.
    """
    strings = list(sst)
    hits = HitSet(len(strings))
    if pattern is not None:
        for i, text in enumerate(strings):
            if _is_match(pattern, text):
                hits.insert(i)
    return hits


def parse_xml_with_early_abort(
    xml: bytes | str, pattern: Any, abort_threshold: int
) -> tuple[int, HitSet, bool]:
    """Scan shared-strings XML, stopping once hits exceed ``abort_threshold``.

    Returns ``(sst_size, hit_set, aborted)``. When aborted, ``sst_size`` and
    the hit set cover only the entries scanned before stopping and must not
    be used to skip sheets.
    """
    sst_size = 0
    hit_indices: list[int] = []
    aborted = False
    for idx, text in enumerate(_si_texts(xml)):
        sst_size = idx + 1
        if pattern is not None and _is_match(pattern, text):
            hit_indices.append(idx)
            if len(hit_indices) > abort_threshold:
                aborted = True
                break
    hits = HitSet(sst_size)
    for i in hit_indices:
        hits.insert(i)
    return sst_size, hits, aborted


def parse_with_early_abort(
    index: ZipIndex, pattern: Any, abort_threshold: int
) -> tuple[int, HitSet, bool]:
    """Read the archive's shared strings and run the early-abort scan."""
    xml = index.read_bytes(SHARED_STRINGS)
    if xml is None:
        return 0, HitSet(0), False
    return parse_xml_with_early_abort(xml, pattern, abort_threshold)