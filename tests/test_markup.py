"""Tests for parsing and serialization helpers."""

from bs4.element import Tag

from mailview.markup import (
    defuse_unterminated,
    element_name,
    escape_attr,
    escape_text,
    is_markup_node,
    is_valid_attr_name,
    is_valid_tag_name,
    parse,
    render_start,
    repair_entities,
    walk,
)


def _events(source, **kwargs):
    events = []
    for node, closing in walk(parse(source), **kwargs):
        if isinstance(node, Tag):
            events.append(("/" if closing else "") + node.name)
        elif not is_markup_node(node):
            events.append(str(node))
    return events


class TestParse:
    def test_names_lowercased(self):
        tag = parse('<IMG SRC="a.png">').find("img")
        assert tag.name == "img"
        assert tag.get("src") == "a.png"

    def test_class_not_split(self):
        tag = parse('<p class="a  b">x</p>').find("p")
        assert tag.get("class") == "a  b"

    def test_quoted_greater_than(self):
        tag = parse('<img alt="a > b" src="x.png">').find("img")
        assert tag.get("alt") == "a > b"

    def test_bare_attribute_is_empty(self):
        tag = parse("<iframe allowfullscreen></iframe>").find("iframe")
        assert tag.get("allowfullscreen") == ""

    def test_attribute_entities_decoded(self):
        tag = parse('<a href="?a=1&amp;b=2&copy=3">q</a>').find("a")
        assert tag.get("href") == "?a=1&b=2&copy=3"

    def test_script_content_is_text(self):
        tag = parse("<script>if (a < b) { x('<img>') }</script><p>").find("script")
        assert tag.string == "if (a < b) { x('<img>') }"


class TestRepairEntities:
    def test_known_references_kept(self):
        text = "&amp; &nbsp; &#169; &#xA9; &copy;"
        assert repair_entities(text) == text

    def test_bare_and_unknown_escaped(self):
        assert repair_entities("AT&T &bogus; a & b") == "AT&amp;T &amp;bogus; a &amp; b"

    def test_missing_semicolon_escaped(self):
        assert repair_entities("?a=1&copy=2") == "?a=1&amp;copy=2"


class TestDefuseUnterminated:
    def test_trailing_tag_opener(self):
        assert defuse_unterminated('ok <b>x</b> <img src="x"') == 'ok <b>x</b> &lt;img src="x"'

    def test_trailing_comment_opener(self):
        assert defuse_unterminated("<p>a</p><!--a> b") == "<p>a</p>&lt;!--a> b"

    def test_every_opener_escaped(self):
        assert defuse_unterminated("<a " * 3) == "&lt;a " * 3

    def test_complete_markup_untouched(self):
        source = "<p>a</p><!-- c --><![CDATA[x]]>"
        assert defuse_unterminated(source) == source


class TestWalk:
    def test_open_and_close_events(self):
        assert _events("<p>a<b>b</b></p>c") == ["p", "a", "b", "b", "/b", "/p", "c"]

    def test_opaque_content_skipped(self):
        assert _events("<script>x()</script><p>y</p>") == ["script", "/script", "p", "y", "/p"]

    def test_custom_opaque(self):
        assert _events("<div><p>y</p></div>", opaque={"div"}) == ["div", "/div"]

    def test_markup_nodes_reported(self):
        nodes = [node for node, _ in walk(parse("<!DOCTYPE html><!-- c -->x"))]
        assert [is_markup_node(node) for node in nodes] == [True, True, False]

    def test_deep_nesting(self):
        events = _events("<div>" * 2000)
        assert len(events) == 4000
        assert events[0] == "div"
        assert events[-1] == "/div"


class TestNames:
    def test_image_alias(self):
        assert element_name(parse("<image src=x>").find("image")) == "img"
        assert element_name(parse("<imgx src=x>").find("imgx")) == "imgx"

    def test_tag_names(self):
        assert is_valid_tag_name("p")
        assert is_valid_tag_name("o:p")
        assert not is_valid_tag_name("scr<script")
        assert not is_valid_tag_name("1p")

    def test_attr_names(self):
        assert is_valid_attr_name("data-x")
        assert is_valid_attr_name("xml:lang")
        assert not is_valid_attr_name('"onclick')
        assert not is_valid_attr_name("a<b")


class TestSerialize:
    def test_escape_text(self):
        assert escape_text('<b> & "q" \xa0') == '&lt;b&gt; &amp; "q" &nbsp;'

    def test_escape_attr(self):
        assert escape_attr('"><script>') == "&quot;&gt;&lt;script&gt;"

    def test_render_start(self):
        result = render_start("iframe", [("src", "https://x.com/?a=1&b=2"), ("allowfullscreen", None)])
        assert result == '<iframe src="https://x.com/?a=1&amp;b=2" allowfullscreen>'

    def test_render_start_no_attrs(self):
        assert render_start("br", []) == "<br>"
