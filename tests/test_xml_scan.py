from itertools import islice

from xgrep.xml_scan import attr, iter_self_closing_tags, iter_tags, xml_unescape


def test_xml_unescape_passes_through_plain_ascii():
    assert xml_unescape(b"hello world") == "hello world"


def test_xml_unescape_passes_through_utf8_multibyte():
    s = "你好 héllo"
    assert xml_unescape(s.encode("utf-8")) == s


def test_xml_unescape_handles_all_five_known_entities():
    assert xml_unescape(b"&amp;") == "&"
    assert xml_unescape(b"&lt;") == "<"
    assert xml_unescape(b"&gt;") == ">"
    assert xml_unescape(b"&quot;") == '"'
    assert xml_unescape(b"&apos;") == "'"


def test_xml_unescape_mixes_entities_and_plain_text():
    assert xml_unescape(b"a&amp;b&lt;c&gt;d") == "a&b<c>d"


def test_xml_unescape_is_single_pass():
    assert xml_unescape(b"&amp;lt;") == "&lt;"


def test_xml_unescape_leaves_unknown_entities_verbatim():
    assert xml_unescape(b"&xyz;") == "&xyz;"
    assert xml_unescape(b"&#x20;") == "&#x20;"


def test_xml_unescape_handles_bare_ampersand():
    assert xml_unescape(b"a & b") == "a & b"
    assert xml_unescape(b"&") == "&"


def test_attr_finds_value_by_name():
    assert attr(b'x="1" y="2"', "x") == b"1"
    assert attr(b'x="1" y="2"', "y") == b"2"


def test_attr_returns_none_when_absent():
    assert attr(b'x="1"', "z") is None
    assert attr(b"", "x") is None


def test_attr_does_not_match_substring_of_another_attr_name():
    assert attr(b'name_full="a"', "name") is None
    assert attr(b'name_full="a" name="b"', "name") == b"b"


def test_attr_requires_whitespace_prefix():
    assert attr(b'xname="a"', "name") is None


def test_attr_handles_leading_whitespace_before_attribute():
    assert attr(b'  x="1"', "x") == b"1"


def test_attr_value_may_contain_special_chars_except_double_quote():
    assert attr(b'Target="../sharedStrings.xml"', "Target") == b"../sharedStrings.xml"


def test_attr_returns_none_on_malformed_attribute():
    assert attr(b'x="unterminated', "x") is None


def test_iter_tags_finds_single_element():
    assert list(iter_tags(b"<a>body</a>", "a")) == [(b"", b"body")]


def test_iter_tags_returns_attrs_slice():
    assert list(iter_tags(b'<a x="1" y="2">b</a>', "a")) == [(b' x="1" y="2"', b"b")]


def test_iter_tags_finds_multiple_elements():
    bodies = [body for _, body in iter_tags(b"<a>1</a><a>2</a><a>3</a>", "a")]
    assert bodies == [b"1", b"2", b"3"]


def test_iter_tags_stopping_early_yields_only_consumed_elements():
    taken = list(islice(iter_tags(b"<a>1</a><a>2</a><a>3</a>", "a"), 2))
    assert [body for _, body in taken] == [b"1", b"2"]


def test_iter_tags_handles_nested_elements_with_lazy_close():
    hits = [body for _, body in iter_tags(b"<a><a>inner</a></a>", "a")]
    assert hits == [b"<a>inner"]


def test_iter_tags_does_not_collide_with_prefix_match():
    hits = list(iter_tags(b"<sst><s>1</s></sst>", "s"))
    assert hits == [(b"", b"1")]


def test_iter_tags_empty_input_yields_nothing():
    assert list(iter_tags(b"", "a")) == []


def test_iter_tags_missing_close_yields_nothing_no_panic():
    assert list(iter_tags(b"<a>body never closed", "a")) == []


def test_iter_tags_skips_self_closing_form():
    assert list(iter_tags(b"<a/><a>body</a>", "a")) == [(b"", b"body")]


def test_iter_tags_handles_empty_body():
    assert [body for _, body in iter_tags(b"<a></a>", "a")] == [b""]


def test_iter_tags_accepts_str_input():
    assert list(iter_tags("<t>你好</t>", "t")) == [(b"", "你好".encode("utf-8"))]


def test_iter_tags_recursion_finds_t_inside_si():
    xml = b"<si><r><t>hello</t></r></si>"
    t_bodies = [
        t_body
        for _, si_body in iter_tags(xml, "si")
        for _, t_body in iter_tags(si_body, "t")
    ]
    assert t_bodies == [b"hello"]


def test_iter_tags_rich_text_concatenates_multiple_t_per_si():
    xml = b"<si><r><t>hel</t></r><r><t>lo</t></r></si>"
    concat = "".join(
        t_body.decode("utf-8")
        for _, body in iter_tags(xml, "si")
        for _, t_body in iter_tags(body, "t")
    )
    assert concat == "hello"


def test_iter_self_closing_tags_finds_simple_element():
    assert list(iter_self_closing_tags(b'<a x="1"/>', "a")) == [b' x="1"']


def test_iter_self_closing_tags_skips_non_self_closing():
    assert list(iter_self_closing_tags(b"<a>body</a>", "a")) == []


def test_iter_self_closing_tags_finds_multiple_relationships():
    xml = b"""<Relationships>
<Relationship Id="rId1" Target="../theme.xml" Type="theme"/>
<Relationship Id="rId2" Target="../comments1.xml" Type="comments"/>
</Relationships>"""
    targets = [
        value.decode("utf-8")
        for attrs in iter_self_closing_tags(xml, "Relationship")
        if (value := attr(attrs, "Target")) is not None
    ]
    assert targets == ["../theme.xml", "../comments1.xml"]


def test_iter_self_closing_tags_stopping_early():
    taken = list(islice(iter_self_closing_tags(b"<a/><a/><a/>", "a"), 2))
    assert taken == [b"", b""]


def test_iter_self_closing_tags_empty_input_yields_nothing():
    assert list(iter_self_closing_tags(b"", "a")) == []


def test_iter_self_closing_tags_missing_gt_yields_nothing_no_panic():
    assert list(iter_self_closing_tags(b'<a x="unterm', "a")) == []


def test_iter_self_closing_tags_does_not_collide_with_prefix_match():
    assert list(iter_self_closing_tags(b"<ab/><a/>", "a")) == [b""]