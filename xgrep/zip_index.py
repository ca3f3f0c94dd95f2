"""Single-open access to an xlsx archive.

The workbook part and its relationships are read once when the archive is
opened; other entries are read on demand.
"""

from __future__ import annotations

import os
import re
import zipfile
import zlib
from dataclasses import dataclass

__all__ = ["SearchError", "SheetEntry", "ZipIndex"]

_SHEET_RE = re.compile(r'<sheet[^>]*name="([^"]+)"[^>]*r:id="(rId\d+)"')
_SHEET_ALT_RE = re.compile(r'<sheet[^>]*r:id="(rId\d+)"[^>]*name="([^"]+)"')
_REL_RE = re.compile(r'<Relationship[^>]*Id="(rId\d+)"[^>]*Target="([^"]+)"')


class SearchError(Exception):
    """A file could not be opened, read or parsed."""


@dataclass(frozen=True)
class SheetEntry:
    """A worksheet name and the archive path of its XML part."""

    name: str
    xml_path: str


class ZipIndex:
    """An open xlsx archive with its sheet list resolved."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        try:
            self._archive = zipfile.ZipFile(path)
        except zipfile.BadZipFile as exc:
            raise SearchError(f"zip: {exc}") from exc
        except OSError as exc:
            raise SearchError(str(exc)) from exc
        try:
            self._sheets = self._parse_sheets()
        except BaseException:
            self._archive.close()
            raise

    def close(self) -> None:
        """Close the underlying archive."""
        self._archive.close()

    def __enter__(self) -> ZipIndex:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def sheets(self) -> list[SheetEntry]:
        """Return the sheets in workbook order."""
        return list(self._sheets)

    def read_bytes(self, entry: str) -> bytes | None:
        """Return the raw bytes of an entry, or None if it does not exist."""
        try:
            return self._archive.read(entry)
        except KeyError:
            return None
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError) as exc:
            raise SearchError(f"zip entry {entry}: {exc}") from exc
        except OSError as exc:
            raise SearchError(str(exc)) from exc

    def read_text(self, entry: str) -> str | None:
        """Return an entry decoded as UTF-8, or None if it does not exist."""
        data = self.read_bytes(entry)
        if data is None:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SearchError(f"zip entry {entry}: {exc}") from exc

    def _parse_sheets(self) -> list[SheetEntry]:
        workbook = self.read_text("xl/workbook.xml")
        if workbook is None:
            raise SearchError("workbook.xml: specified file not found in archive")

        rids = [(m.group(1), m.group(2)) for m in _SHEET_RE.finditer(workbook)]
        if not rids:
            rids = [(m.group(2), m.group(1)) for m in _SHEET_ALT_RE.finditer(workbook)]

        rels = self.read_text("xl/_rels/workbook.xml.rels") or ""
        targets = {m.group(1): m.group(2) for m in _REL_RE.finditer(rels)}

        return [
            SheetEntry(name=name, xml_path="xl/" + targets[rid].lstrip("/"))
            for name, rid in rids
            if rid in targets
        ]