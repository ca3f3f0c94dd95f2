"""Benchmark fixture generation: synthetic xlsx workbooks from a TOML spec."""

from __future__ import annotations

import argparse
import os
import sys
import tomllib
import zipfile
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

__all__ = [
    "FixtureSpec",
    "parse_fixtures",
    "load_fixtures",
    "write_single",
    "gen_benches",
    "list_fixtures",
    "main",
]

DEFAULT_FIXTURES = Path("benches") / "fixtures.toml"
DEFAULT_OUT = Path("target") / "bench-fixtures"
USAGE = "usage: benchgen <gen-benches|list-fixtures>"

_MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
_CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
_XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'


@dataclass(frozen=True)
class FixtureSpec:
    """Shape of one benchmark workbook (or directory of workbooks)."""

    name: str
    rows: int = 0
    sheets: int = 1
    shared_strings: int = 0
    formula_pct: float = 0.0
    inline_strings_pct: float = 0.0
    hit_density: float = 0.0
    files: int = 0
    description: str = ""


_INT_FIELDS = ("rows", "sheets", "shared_strings", "files")
_FLOAT_FIELDS = ("formula_pct", "inline_strings_pct", "hit_density")


def _spec_from_table(table: object) -> FixtureSpec:
    if not isinstance(table, dict):
        raise ValueError("fixture entry must be a table")
    name = table.get("name")
    if not isinstance(name, str):
        raise ValueError("fixture entry is missing a string `name`")
    values: dict[str, object] = {"name": name}
    for key in _INT_FIELDS:
        if key in table:
            value = table[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"fixture {name}: `{key}` must be a non-negative integer")
            values[key] = value
    for key in _FLOAT_FIELDS:
        if key in table:
            value = table[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"fixture {name}: `{key}` must be a number")
            values[key] = float(value)
    if "description" in table:
        if not isinstance(table["description"], str):
            raise ValueError(f"fixture {name}: `description` must be a string")
        values["description"] = table["description"]
    return FixtureSpec(**values)  # type: ignore[arg-type]


def parse_fixtures(text: str) -> list[FixtureSpec]:
    """Parse the ``[[fixture]]`` tables of a fixtures TOML document."""
    data = tomllib.loads(text)
    entries = data.get("fixture")
    if not isinstance(entries, list):
        raise ValueError("missing field `fixture`")
    return [_spec_from_table(entry) for entry in entries]


def load_fixtures(path: str | os.PathLike[str]) -> list[FixtureSpec]:
    """Read and parse a fixtures TOML file."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        return parse_fixtures(text)
    except (tomllib.TOMLDecodeError, ValueError) as exc:
        raise ValueError(f"parse {path}: {exc}") from exc


def _number_text(value: float) -> str:
    return str(int(value)) if value.is_integer() else repr(value)


def _is_numeric(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


class _SharedStrings:
    def __init__(self) -> None:
        self._index: dict[str, int] = {}
        self.total = 0

    def add(self, text: str) -> int:
        self.total += 1
        return self._index.setdefault(text, len(self._index))

    def __len__(self) -> int:
        return len(self._index)

    def xml(self) -> str:
        items = "".join(f"<si><t>{escape(text)}</t></si>" for text in self._index)
        return (
            f'{_XML_DECL}<sst xmlns="{_MAIN_NS}" count="{self.total}" '
            f'uniqueCount="{len(self._index)}">{items}</sst>'
        )


def _sheet_xml(spec: FixtureSpec, pool: list[str], strings: _SharedStrings) -> str:
    rows: list[str] = []
    for r in range(spec.rows):
        n = r + 1
        fraction = r / spec.rows
        cells = [f'<c r="A{n}"><v>{_number_text(r * 1.5)}</v></c>']
        idx = strings.add(pool[r % len(pool)])
        cells.append(f'<c r="B{n}" t="s"><v>{idx}</v></c>')
        if spec.inline_strings_pct > 0.0 and fraction < spec.inline_strings_pct:
            idx = strings.add(f"inline-{r}")
            cells.append(f'<c r="C{n}" t="s"><v>{idx}</v></c>')
        if spec.formula_pct > 0.0 and fraction < spec.formula_pct:
            result = f"{r * 2.5:.1f}"
            kind = "" if _is_numeric(result) else ' t="str"'
            cells.append(f'<c r="D{n}"{kind}><f>A1+B1</f><v>{escape(result)}</v></c>')
        rows.append(f'<row r="{n}">{"".join(cells)}</row>')
    data = "".join(rows)
    sheet_data = f"<sheetData>{data}</sheetData>" if data else "<sheetData/>"
    return f'{_XML_DECL}<worksheet xmlns="{_MAIN_NS}" xmlns:r="{_REL_NS}">{sheet_data}</worksheet>'


_STYLES = (
    f'{_XML_DECL}<styleSheet xmlns="{_MAIN_NS}">'
    '<fonts count="1"><font><sz val="11"/><name val="Calibri"/></font></fonts>'
    '<fills count="1"><fill><patternFill patternType="none"/></fill></fills>'
    '<borders count="1"><border/></borders>'
    '<cellStyleXfs count="1"><xf numFmtId="0" fontId="0" fillId="0" borderId="0"/></cellStyleXfs>'
    '<cellXfs count="1"><xf numFmtId="0" fontId="0" fillId="0" borderId="0" xfId="0"/></cellXfs>'
    "</styleSheet>"
)


def write_single(spec: FixtureSpec, out: str | os.PathLike[str]) -> None:
    """Write one xlsx workbook shaped by ``spec`` to ``out``.

    Column A holds numbers, B strings from a pool whose first
    ``hit_density`` share start with ``HIT-``, C optional extra strings and
    D optional formulas with cached results.
    """
    sst_size = spec.shared_strings if spec.shared_strings > 0 else max(spec.rows // 10, 10)
    hit_cut = int(sst_size * spec.hit_density)
    pool = [f"HIT-row-{i}" if i < hit_cut else f"row-{i}" for i in range(sst_size)]

    strings = _SharedStrings()
    sheet_parts = [_sheet_xml(spec, pool, strings) for _ in range(spec.sheets)]
    names = [f"Sheet{s + 1}" for s in range(spec.sheets)]

    workbook_sheets = "".join(
        f"<sheet name={quoteattr(name)} sheetId=\"{i}\" r:id=\"rId{i}\"/>"
        for i, name in enumerate(names, start=1)
    )
    workbook = (
        f'{_XML_DECL}<workbook xmlns="{_MAIN_NS}" xmlns:r="{_REL_NS}">'
        f"<sheets>{workbook_sheets}</sheets></workbook>"
    )
    rels = [
        f'<Relationship Id="rId{i}" Type="{_REL_NS}/worksheet" '
        f'Target="worksheets/sheet{i}.xml"/>'
        for i in range(1, len(names) + 1)
    ]
    rels.append(f'<Relationship Id="rId{len(names) + 1}" Type="{_REL_NS}/styles" Target="styles.xml"/>')
    if len(strings):
        rels.append(
            f'<Relationship Id="rId{len(names) + 2}" Type="{_REL_NS}/sharedStrings" '
            'Target="sharedStrings.xml"/>'
        )
    workbook_rels = f'{_XML_DECL}<Relationships xmlns="{_PKG_REL_NS}">{"".join(rels)}</Relationships>'

    sheet_ct = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
    overrides = [
        '<Override PartName="/xl/workbook.xml" ContentType="application/'
        'vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"/>',
        '<Override PartName="/xl/styles.xml" ContentType="application/'
        'vnd.openxmlformats-officedocument.spreadsheetml.styles+xml"/>',
    ]
    overrides += [
        f'<Override PartName="/xl/worksheets/sheet{i}.xml" ContentType="{sheet_ct}"/>'
        for i in range(1, len(names) + 1)
    ]
    if len(strings):
        overrides.append(
            '<Override PartName="/xl/sharedStrings.xml" ContentType="application/'
            'vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"/>'
        )
    content_types = (
        f'{_XML_DECL}<Types xmlns="{_CT_NS}">'
        '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        f'{"".join(overrides)}</Types>'
    )
    root_rels = (
        f'{_XML_DECL}<Relationships xmlns="{_PKG_REL_NS}">'
        f'<Relationship Id="rId1" Type="{_REL_NS}/officeDocument" Target="xl/workbook.xml"/>'
        "</Relationships>"
    )

    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(out_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", content_types)
        archive.writestr("_rels/.rels", root_rels)
        archive.writestr("xl/workbook.xml", workbook)
        archive.writestr("xl/_rels/workbook.xml.rels", workbook_rels)
        archive.writestr("xl/styles.xml", _STYLES)
        for i, part in enumerate(sheet_parts, start=1):
            archive.writestr(f"xl/worksheets/sheet{i}.xml", part)
        if len(strings):
            archive.writestr("xl/sharedStrings.xml", strings.xml())


def _fixture_path(spec: FixtureSpec, root: Path) -> Path:
    return root / spec.name if spec.files > 0 else root / f"{spec.name}.xlsx"


def gen_benches(
    fixtures: Iterable[FixtureSpec], root: str | os.PathLike[str]
) -> list[Path]:
    """Generate every fixture under ``root`` that does not exist yet.

    Prints one progress line per fixture and returns the files written.
    """
    root_path = Path(root)
    root_path.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for spec in fixtures:
        if spec.files > 0:
            directory = root_path / spec.name
            directory.mkdir(parents=True, exist_ok=True)
            for i in range(spec.files):
                path = directory / f"file_{i:03}.xlsx"
                if path.exists():
                    continue
                write_single(spec, path)
                written.append(path)
            print(f"gen {spec.name} -> {directory} ({spec.files} files)")
            continue
        path = root_path / f"{spec.name}.xlsx"
        if path.exists():
            print(f"ok {spec.name} (cached)")
            continue
        print(f"gen {spec.name} -> {path}")
        write_single(spec, path)
        written.append(path)
    return written


def list_fixtures(
    fixtures: Iterable[FixtureSpec], root: str | os.PathLike[str]
) -> list[str]:
    """Return a table of fixtures with their on-disk size, or MISSING."""
    root_path = Path(root)
    lines = [f"{'name':<24} {'size':>12}  path", "-" * 70]
    for spec in fixtures:
        path = _fixture_path(spec, root_path)
        if not path.exists():
            size = "MISSING"
        elif spec.files > 0:
            total = sum(entry.stat().st_size for entry in path.iterdir())
            size = f"{total // 1024} KB"
        else:
            size = f"{path.stat().st_size // 1024} KB"
        lines.append(f"{spec.name:<24} {size:>12}  {path}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Run the fixture tool; returns the process exit status."""
    parser = argparse.ArgumentParser(prog="benchgen", description="Generate benchmark workbooks.")
    parser.add_argument("--fixtures", type=Path, default=DEFAULT_FIXTURES, help="fixtures TOML file")
    parser.add_argument("--out", type=Path, default=DEFAULT_OUT, help="output directory")
    parser.add_argument("command", nargs="?", help="gen-benches or list-fixtures")
    args = parser.parse_args(argv)

    if args.command is None:
        print(f"error: {USAGE}", file=sys.stderr)
        return 1
    if args.command not in ("gen-benches", "list-fixtures"):
        print(f"error: unknown subcommand: {args.command}", file=sys.stderr)
        return 1
    try:
        fixtures = load_fixtures(args.fixtures)
        if args.command == "gen-benches":
            gen_benches(fixtures, args.out)
        else:
            for line in list_fixtures(fixtures, args.out):
                print(line)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())