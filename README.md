# xgrep

Building blocks for searching spreadsheet files: `.xlsx`, `.xlsm`, `.csv`
and `.tsv`. The package opens workbook archives directly, scans their XML
with a small tag scanner, works out which shared strings match a pattern,
and finds the hidden rows and columns of a sheet. It has no third-party
dependencies and needs Python 3.11 or later.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `xgrep.xml_scan`: a byte-level scanner for the small XML subset found in
  workbooks. Every function accepts `bytes` or `str`.
  - `iter_tags(xml, tag)` yields `(attrs, body)` byte pairs for each
    `<tag ...>body</tag>` element. Self-closing `<tag/>` forms are skipped,
    the first `</tag>` closes an element, and `<tag` must be followed by
    whitespace, `>` or `/` (so `<sst>` is not taken for `<s>`).
  - `iter_self_closing_tags(xml, tag)` yields the attribute bytes of each
    `<tag .../>` element.
  - `attr(attrs, name)` returns the value of a double-quoted `name="..."`
    attribute, or `None`. The name must start the input or follow
    whitespace, so `name` does not match inside `name_full`.
  - `xml_unescape(data)` decodes UTF-8 and replaces `&amp;`, `&lt;`, `&gt;`,
    `&quot;` and `&apos;`; any other entity passes through unchanged.
- `xgrep.zip_index`: `ZipIndex(path)` opens a workbook once and is a context
  manager. `sheets()` lists `SheetEntry` objects (sheet `name` and the
  `xml_path` of its part) in workbook order; `read_bytes(entry)` and
  `read_text(entry)` return an entry's contents, or `None` if it does not
  exist. A file that cannot be opened or read raises `SearchError`.
- `xgrep.sst`: shared strings.
  - `parse(index)` returns the shared strings in order, with rich-text runs
    joined.
  - `build_hit_set(sst, pattern)` returns a `HitSet` marking the entries that
    match. `HitSet` supports `insert`, `contains` (and `in`), `is_empty`,
    `count`, `len()` (the number of strings it was sized for) and iteration
    over the marked indices.
  - `parse_xml_with_early_abort(xml, pattern, abort_threshold)` and
    `parse_with_early_abort(index, pattern, abort_threshold)` scan the
    shared strings one entry at a time and stop once the number of hits
    exceeds the threshold. They return `(sst_size, hit_set, aborted)`; when
    `aborted` is true the result covers only the entries scanned so far.

  A pattern is any object with an `is_match(text)` method, or a compiled
  `re` pattern.
- `xgrep.hidden`: `detect(index, sheet_xml_path)` returns
  `(hidden_rows, hidden_cols)`, both sets of zero-based indices, read from
  the sheet's `<row ... hidden="1">` and `<col ... hidden="1">` markers. A
  missing or unreadable part gives empty sets.
- `xgrep.oracle`: `CellRecord` holds one searchable value (`sheet`, `cell`,
  `layer`, `text`). `assert_skipped_safely(sheet_name, fallback_cells,
  pattern)` raises `FastPathViolation` (an `AssertionError`) if any record
  in a skipped sheet matches the pattern.
- `xgrep.walker`: `walk_supported(roots, file_glob=None)` returns the
  `.xlsx`, `.xlsm`, `.csv` and `.tsv` files under the given roots, in sorted
  order per directory. Entries whose names start with `.` are skipped;
  `.ignore` files are honoured everywhere, `.gitignore` and
  `.git/info/exclude` inside git work trees. Roots that do not exist are
  skipped, and a root that is itself a supported file is returned as is.
  `file_glob` is matched against the whole path (`*` crosses directory
  separators; `?`, `[...]` and `{a,b}` are supported); an invalid glob
  raises `ValueError`.
- `xgrep.benchgen`: synthetic benchmark workbooks. `FixtureSpec` describes
  one fixture; `parse_fixtures(text)` and `load_fixtures(path)` read the
  `[[fixture]]` tables of a TOML file; `write_single(spec, out)` writes one
  workbook; `gen_benches(fixtures, root)` writes every fixture not yet on
  disk; `list_fixtures(fixtures, root)` returns a table of fixtures and
  their sizes.

## Example

```python
import re

from xgrep.hidden import detect
from xgrep.sst import build_hit_set, parse
from xgrep.zip_index import ZipIndex

with ZipIndex("report.xlsx") as index:
    strings = parse(index)
    hits = build_hit_set(strings, re.compile("alpha"))
    print(f"{hits.count()} of {len(hits)} shared strings match")

    for sheet in index.sheets():
        rows, cols = detect(index, sheet.xml_path)
        print(sheet.name, sorted(rows), sorted(cols))
```

## Benchmark fixtures

The `xgrep-benchgen` command builds the synthetic workbooks used for
benchmarking and reports on them:

```
xgrep-benchgen gen-benches
xgrep-benchgen list-fixtures
```

Fixtures are read from `benches/fixtures.toml` and written to
`target/bench-fixtures`; `--fixtures PATH` and `--out DIR` change these.
Each fixture takes a `name` and optionally `rows`, `sheets` (default 1),
`shared_strings`, `formula_pct`, `inline_strings_pct`, `hit_density`,
`files` and `description`. A fixture with `files` greater than zero becomes
a directory of `file_000.xlsx`, `file_001.xlsx`, and so on.

`gen-benches` writes every fixture that does not exist yet; `list-fixtures`
shows each fixture with its size on disk, or `MISSING` if it has not been
generated. The command exits with status 1 on an unknown subcommand or an
unreadable fixtures file.

## What the package does not do

There is no search command and no output printer: the package does not
turn a pattern and a set of files into reported matches. It does not read
cell values, formulas or comments out of a worksheet, and it has no CSV or
TSV reader; `walk_supported` only finds such files. Those parts are left to
the program that uses these building blocks.