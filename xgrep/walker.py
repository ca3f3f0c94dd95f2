"""Discovery of searchable files (xlsx, xlsm, csv, tsv) under given roots.

Hidden entries are skipped, ``.ignore`` files are honoured everywhere and
``.gitignore`` / ``.git/info/exclude`` inside git work trees. An optional
glob, matched against the whole path, narrows the result further.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

__all__ = ["walk_supported"]

SUPPORTED_EXTENSIONS = frozenset({".xlsx", ".xlsm", ".csv", ".tsv"})


def _class_end(glob: str, start: int) -> int:
    """Return the index of the ``]`` closing a class opened at ``start``, or -1."""
    j = start + 1
    if j < len(glob) and glob[j] in "!^":
        j += 1
    if j < len(glob) and glob[j] == "]":
        j += 1
    return glob.find("]", j)


def _class_regex(body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]
    escaped = body.replace("\\", "\\\\").replace("[", "\\[")
    return "[" + ("^" if negate else "") + escaped + "]"


def _compile_glob(glob: str) -> re.Pattern[str]:
    """Compile a glob where ``*`` may cross path separators."""
    out: list[str] = []
    depth = 0
    i = 0
    while i < len(glob):
        c = glob[i]
        if c == "*":
            while i < len(glob) and glob[i] == "*":
                i += 1
            out.append(".*")
            continue
        if c == "?":
            out.append(".")
        elif c == "[":
            end = _class_end(glob, i)
            if end < 0:
                raise ValueError(f"invalid glob {glob!r}: unclosed character class")
            out.append(_class_regex(glob[i + 1 : end]))
            i = end
        elif c == "{":
            depth += 1
            out.append("(?:")
        elif c == "}" and depth:
            depth -= 1
            out.append(")")
        elif c == "," and depth:
            out.append("|")
        elif c == "\\" and i + 1 < len(glob):
            i += 1
            out.append(re.escape(glob[i]))
        else:
            out.append(re.escape(c))
        i += 1
    if depth:
        raise ValueError(f"invalid glob {glob!r}: unclosed alternate group")
    return re.compile("".join(out), re.DOTALL)


@dataclass(frozen=True)
class _IgnoreRule:
    base: str
    regex: re.Pattern[str]
    negate: bool
    dir_only: bool

    def matches(self, abs_path: str, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        rel = os.path.relpath(abs_path, self.base)
        if rel == os.curdir or rel.startswith(os.pardir):
            return False
        return self.regex.fullmatch(rel.replace(os.sep, "/")) is not None


def _translate_ignore(pattern: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if pattern.startswith("**", i):
            at_segment_start = i == 0 or pattern[i - 1] == "/"
            if at_segment_start and pattern.startswith("**/", i):
                out.append("(?:.*/)?")
                i += 3
                continue
            out.append(".*")
            i += 2
            continue
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = _class_end(pattern, i)
            if end < 0:
                out.append(re.escape(c))
            else:
                out.append(_class_regex(pattern[i + 1 : end]))
                i = end
        elif c == "\\" and i + 1 < len(pattern):
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def _parse_ignore_line(line: str, base: str) -> _IgnoreRule | None:
    line = line.rstrip("\r\n")
    if not line.endswith("\\ "):
        line = line.rstrip(" ")
    if not line or line.startswith("#"):
        return None
    negate = False
    if line.startswith("!"):
        negate = True
        line = line[1:]
    elif line.startswith(("\\!", "\\#")):
        line = line[1:]
    dir_only = line.endswith("/")
    line = line.rstrip("/")
    if not line:
        return None
    anchored = "/" in line
    line = line.lstrip("/")
    body = _translate_ignore(line)
    if not anchored:
        body = "(?:.*/)?" + body
    try:
        regex = re.compile(body, re.DOTALL)
    except re.error:
        return None
    return _IgnoreRule(base=base, regex=regex, negate=negate, dir_only=dir_only)


def _read_rules(file_path: str, base: str) -> list[_IgnoreRule]:
    try:
        with open(file_path, encoding="utf-8", errors="replace") as handle:
            lines = handle.readlines()
    except OSError:
        return []
    return [rule for line in lines if (rule := _parse_ignore_line(line, base))]


def _find_repo(abs_dir: str) -> str | None:
    current = abs_dir
    while True:
        if os.path.exists(os.path.join(current, ".git")):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _dir_rules(abs_dir: str, repo: str | None) -> list[_IgnoreRule]:
    rules: list[_IgnoreRule] = []
    inside_repo = repo is not None and (
        abs_dir == repo or abs_dir.startswith(repo.rstrip(os.sep) + os.sep)
    )
    if inside_repo:
        if abs_dir == repo:
            rules += _read_rules(os.path.join(repo, ".git", "info", "exclude"), repo)
        rules += _read_rules(os.path.join(abs_dir, ".gitignore"), abs_dir)
    rules += _read_rules(os.path.join(abs_dir, ".ignore"), abs_dir)
    return rules


def _is_ignored(rules: list[_IgnoreRule], abs_path: str, is_dir: bool) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(abs_path, is_dir):
            ignored = not rule.negate
    return ignored


def _walk_dir(
    shown_dir: str, abs_dir: str, rules: list[_IgnoreRule], repo: str | None
) -> Iterator[Path]:
    rules = rules + _dir_rules(abs_dir, repo)
    try:
        with os.scandir(abs_dir) as scan:
            entries = sorted(scan, key=lambda e: e.name)
    except OSError:
        return
    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            continue
        abs_child = os.path.join(abs_dir, entry.name)
        if _is_ignored(rules, abs_child, is_dir):
            continue
        shown_child = os.path.join(shown_dir, entry.name)
        if is_dir:
            yield from _walk_dir(shown_child, abs_child, rules, repo)
        elif is_file:
            yield Path(shown_child)


def _walk_root(root: str) -> Iterator[Path]:
    if os.path.isfile(root):
        yield Path(root)
        return
    if not os.path.isdir(root):
        return
    abs_root = os.path.abspath(root)
    repo = _find_repo(abs_root)
    ancestors: list[str] = []
    current = os.path.dirname(abs_root)
    while True:
        ancestors.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    parent_rules: list[_IgnoreRule] = []
    for ancestor in reversed(ancestors):
        parent_rules += _dir_rules(ancestor, repo)
    yield from _walk_dir(root, abs_root, parent_rules, repo)


def walk_supported(
    roots: Iterable[str | os.PathLike[str]], file_glob: str | None = None
) -> list[Path]:
    """Return the supported files found under ``roots``.

    Roots that do not exist are skipped. ``file_glob`` is matched against the
    full path; an invalid glob raises ValueError.
    """
    root_list = [os.fspath(r) for r in roots]
    if not root_list:
        return []
    matcher = _compile_glob(file_glob) if file_glob is not None else None
    found: list[Path] = []
    for root in root_list:
        for path in _walk_root(root):
            if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                continue
            if matcher is not None and matcher.fullmatch(str(path)) is None:
                continue
            found.append(path)
    return found