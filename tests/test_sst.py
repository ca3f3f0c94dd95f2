import re
import zipfile

from xgrep.sst import (
    HitSet,
    build_hit_set,
    parse,
    parse_with_early_abort,
    parse_xml_with_early_abort,
)
from xgrep.zip_index import ZipIndex


def p(s):
    return re.compile(s)


def write_sst_demo(path, with_sst=True):
    workbook = '<workbook><sheets><sheet name="Sheet1" sheetId="1" r:id="rId1"/></sheets></workbook>'
    rels = (
        '<Relationships><Relationship Id="rId1" Type="worksheet" '
        'Target="worksheets/sheet1.xml"/></Relationships>'
    )
    sheet = (
        "<worksheet><sheetData>"
        '<row r="1"><c r="A1" t="s"><v>0</v></c></row>'
        '<row r="2"><c r="A2" t="s"><v>1</v></c></row>'
        '<row r="3"><c r="A3" t="s"><v>2</v></c></row>'
        '<row r="4"><c r="A4" t="s"><v>0</v></c></row>'
        "</sheetData></worksheet>"
    )
    sst = (
        '<sst count="4" uniqueCount="3">'
        "<si><t>alpha</t></si><si><t>beta</t></si><si><t>alphabet</t></si>"
        "</sst>"
    )
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("xl/workbook.xml", workbook)
        zf.writestr("xl/_rels/workbook.xml.rels", rels)
        zf.writestr("xl/worksheets/sheet1.xml", sheet)
        if with_sst:
            zf.writestr("xl/sharedStrings.xml", sst)
    return path


class _MatcherObject:
    def __init__(self, needle):
        self.needle = needle

    def is_match(self, text):
        return self.needle in text


def test_hitset_basic_insert_contains():
    hs = HitSet(130)
    hs.insert(0)
    hs.insert(64)
    hs.insert(129)
    assert hs.contains(0)
    assert hs.contains(64)
    assert hs.contains(129)
    assert not hs.contains(1)
    assert not hs.contains(65)
    assert not hs.contains(128)
    assert hs.count() == 3
    assert not hs.is_empty()


def test_hitset_empty_has_no_bits():
    hs = HitSet(10)
    assert hs.is_empty()
    assert hs.count() == 0
    assert list(hs) == []


def test_hitset_ignores_out_of_range_and_reports_len():
    hs = HitSet(5)
    hs.insert(5)
    hs.insert(100)
    assert hs.is_empty()
    assert not hs.contains(5)
    assert len(hs) == 5


def test_hitset_iterates_in_ascending_order():
    hs = HitSet(200)
    for i in (150, 3, 64):
        hs.insert(i)
    assert list(hs) == [3, 64, 150]
    assert 64 in hs


def test_build_hit_set_marks_matching_indices():
    hs = build_hit_set(["foo", "bar", "foobar"], p("foo"))
    assert hs.contains(0)
    assert not hs.contains(1)
    assert hs.contains(2)
    assert hs.count() == 2


def test_build_hit_set_no_pattern_yields_empty():
    hs = build_hit_set(["foo", "bar"], None)
    assert hs.is_empty()
    assert len(hs) == 2


def test_build_hit_set_empty_when_no_matches():
    hs = build_hit_set(["alpha", "beta"], p("zeta"))
    assert hs.is_empty()


def test_build_hit_set_accepts_is_match_objects():
    hs = build_hit_set(["foo", "bar"], _MatcherObject("ar"))
    assert list(hs) == [1]


def test_parse_xml_with_early_abort_no_abort_below_threshold():
    xml = "<sst>"
    xml += "".join(f"<si><t>hit-{i}</t></si>" for i in range(5))
    xml += "".join(f"<si><t>miss-{i}</t></si>" for i in range(5))
    xml += "</sst>"
    sst_size, hs, aborted = parse_xml_with_early_abort(xml, p("hit"), 10)
    assert not aborted
    assert sst_size == 10
    assert hs.count() == 5


def test_parse_xml_with_early_abort_aborts_at_threshold():
    xml = "<sst>" + "".join(f"<si><t>hit-{i}</t></si>" for i in range(50)) + "</sst>"
    sst_size, _hs, aborted = parse_xml_with_early_abort(xml, p("hit"), 10)
    assert aborted
    assert sst_size <= 12


def test_parse_xml_with_early_abort_no_pattern_never_aborts():
    xml = "<sst>" + "".join(f"<si><t>x-{i}</t></si>" for i in range(100)) + "</sst>"
    sst_size, hs, aborted = parse_xml_with_early_abort(xml, None, 1)
    assert not aborted
    assert sst_size == 100
    assert hs.is_empty()


def test_parse_xml_with_early_abort_empty_xml_returns_empty():
    sst_size, hs, aborted = parse_xml_with_early_abort("", p("foo"), 10)
    assert not aborted
    assert sst_size == 0
    assert hs.is_empty()


def test_parse_xml_with_early_abort_no_stale_content():
    xml = (
        "<sst>"
        "<si><t>verylongstringthatwillstayinbuffer</t></si>"
        "<si><t>x</t></si>"
        "<si><t>verylongstringthatwillstayinbuffer</t></si>"
        "</sst>"
    )
    sst_size, hs, _aborted = parse_xml_with_early_abort(xml, p("^x$"), 10)
    assert sst_size == 3
    assert list(hs) == [1]


def test_parse_xml_with_early_abort_handles_xml_entities():
    xml = "<sst><si><t>a&amp;b</t></si><si><t>plain</t></si></sst>"
    sst_size, hs, _aborted = parse_xml_with_early_abort(xml, p("a&b"), 10)
    assert sst_size == 2
    assert list(hs) == [0]


def test_parse_xml_rich_text_runs_are_joined():
    xml = "<sst><si><r><t>hel</t></r><r><t>lo</t></r></si></sst>"
    _size, hs, _aborted = parse_xml_with_early_abort(xml, p("^hello$"), 10)
    assert list(hs) == [0]


def test_parse_returns_unique_strings_in_workbook_order(tmp_path):
    path = write_sst_demo(tmp_path / "sst.xlsx")
    with ZipIndex(path) as idx:
        sst = parse(idx)
    assert "alpha" in sst
    assert "beta" in sst
    assert "alphabet" in sst
    assert len(sst) == 3


def test_hit_set_with_alpha_pattern_marks_alpha_and_alphabet(tmp_path):
    path = write_sst_demo(tmp_path / "sst.xlsx")
    with ZipIndex(path) as idx:
        sst = parse(idx)
    hs = build_hit_set(sst, p("alpha"))
    assert hs.count() == 2


def test_parse_without_shared_strings_is_empty(tmp_path):
    path = write_sst_demo(tmp_path / "nosst.xlsx", with_sst=False)
    with ZipIndex(path) as idx:
        assert parse(idx) == []
        size, hs, aborted = parse_with_early_abort(idx, p("alpha"), 10)
    assert (size, len(hs), aborted) == (0, 0, False)


def test_parse_with_early_abort_reads_archive(tmp_path):
    path = write_sst_demo(tmp_path / "sst.xlsx")
    with ZipIndex(path) as idx:
        size, hs, aborted = parse_with_early_abort(idx, p("alpha"), 10)
    assert size == 3
    assert not aborted
    assert list(hs) == [0, 2]