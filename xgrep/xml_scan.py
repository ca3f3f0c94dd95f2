"""Byte-level scanner for the small XML subset found inside xlsx parts.

Covers ``<si>...<t>...</t>...</si>`` bodies, ``<comment ref="..."/>`` and
``<Relationship Target="..."/>`` elements without a full XML parser.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

__all__ = ["iter_tags", "iter_self_closing_tags", "attr", "xml_unescape"]

_BOUNDARY = frozenset(b" \t\n\r>/")
_WHITESPACE = frozenset(b" \t\n\r")
_ENTITY_RE = re.compile(rb"&(amp|lt|gt|quot|apos);")
_ENTITIES = {
    b"amp": b"&",
    b"lt": b"<",
    b"gt": b">",
    b"quot": b'"',
    b"apos": b"'",
}


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _open_tags(xml: bytes, tag: bytes) -> Iterator[tuple[int, int]]:
    """Yield ``(boundary_index, gt_index)`` for each ``<tag`` open marker.

    The tag name must be followed by whitespace, ``>`` or ``/``. Scanning
    stops for good once an open marker has no closing ``>``.
    """
    size = len(xml)
    pos = 0
    while pos < size:
        lt = xml.find(b"<", pos)
        if lt < 0:
            return
        after_lt = lt + 1
        boundary_idx = after_lt + len(tag)
        if boundary_idx > size:
            return
        if xml[after_lt:boundary_idx] != tag or boundary_idx >= size or xml[boundary_idx] not in _BOUNDARY:
            pos = lt + 1
            continue
        gt = xml.find(b">", boundary_idx)
        if gt < 0:
            return
        # The caller decides where scanning resumes.
        pos = yield boundary_idx, gt


def iter_tags(xml: bytes | str, tag: str) -> Iterator[tuple[bytes, bytes]]:
    """Yield ``(attrs, body)`` for each ``<tag ...>body</tag>`` element.

    Self-closing ``<tag/>`` forms are skipped. With nested same-name tags the
    first ``</tag>`` closes the element. Bodies are returned raw (not
    unescaped). An element without a closing marker ends the scan.
    """
    data = _as_bytes(xml)
    tag_bytes = tag.encode("utf-8")
    close_marker = b"</" + tag_bytes + b">"
    scanner = _open_tags(data, tag_bytes)
    try:
        found = next(scanner)
        while True:
            boundary_idx, gt = found
            if data[gt - 1] == ord("/"):
                found = scanner.send(gt + 1)
                continue
            body_start = gt + 1
            close = data.find(close_marker, body_start)
            if close < 0:
                return
            yield data[boundary_idx:gt], data[body_start:close]
            found = scanner.send(close + len(close_marker))
    except StopIteration:
        return


def iter_self_closing_tags(xml: bytes | str, tag: str) -> Iterator[bytes]:
    """Yield the attribute bytes of each self-closing ``<tag .../>`` element."""
    data = _as_bytes(xml)
    scanner = _open_tags(data, tag.encode("utf-8"))
    try:
        found = next(scanner)
        while True:
            boundary_idx, gt = found
            if data[gt - 1] == ord("/"):
                yield data[boundary_idx : gt - 1]
            found = scanner.send(gt + 1)
    except StopIteration:
        return


def attr(attrs: bytes | str, name: str) -> bytes | None:
    """Return the value of a double-quoted ``name="..."`` attribute, or None.

    The name must start the input or follow whitespace, so ``name`` does not
    match inside ``name_full``. An unterminated value yields None.
    """
    data = _as_bytes(attrs)
    needle = name.encode("utf-8") + b'="'
    start = 0
    while True:
        i = data.find(needle, start)
        if i < 0:
            return None
        if i == 0 or data[i - 1] in _WHITESPACE:
            value_start = i + len(needle)
            value_end = data.find(b'"', value_start)
            if value_end < 0:
                return None
            return data[value_start:value_end]
        start = i + 1


def xml_unescape(data: bytes | str) -> str:
    """Decode UTF-8 bytes, replacing the five predefined XML entities.

    Other entity references, numeric ones included, pass through verbatim.
    """
    raw = _as_bytes(data)
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1)], raw).decode("utf-8")