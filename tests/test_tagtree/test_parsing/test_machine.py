"""Tests for the single-pass tag parser."""

import pytest

from tagtree.parsing import (
    MalformedAttribute,
    MalformedTag,
    NestingTooDeep,
    ParseError,
    ParseResult,
    ParserState,
    Span,
    TagTreeParser,
    UnexpectedEndOfInput,
    UnmatchedClosingTag,
)
from tagtree.shared import DiagnosticSeverity, ParserConfig, TailTextPolicy


def parse(text, **config):
    return TagTreeParser(ParserConfig(**config) if config else None).parse(text)


def shape(node):
    """Reduce a subtree to (name, attributes, inner_text, children) tuples."""
    return (
        node.name,
        [(a.key, a.value) for a in node.element.attributes],
        node.element.inner_text,
        [shape(child) for child in node.children],
    )


class TestSpan:
    """Test buffer spans."""

    def test_text(self):
        assert Span(1, 3).text("abcd") == "bc"
        assert len(Span(2, 2)) == 0

    def test_invalid(self):
        with pytest.raises(ValueError):
            Span(3, 1)
        with pytest.raises(ValueError):
            Span(-1, 0)


class TestWellFormedInput:
    """Test trees built from valid markup."""

    def test_single_element_with_attributes(self):
        """Test name, attribute order and inner text."""
        result = parse('<a x="1" y="2">hi</a>')

        assert result.success
        assert result.error is None
        assert result.is_balanced
        assert result.current is result.root
        assert shape(result.root) == (
            "root", [], None, [("a", [("x", "1"), ("y", "2")], "hi", [])]
        )

    def test_nested_elements(self):
        """Test that inner text stops at the first child."""
        result = parse("<a>hello<b>world</b></a>")

        a = result.root.children[0]
        b = a.children[0]
        assert a.element.inner_text == "hello"
        assert b.element.inner_text == "world"
        assert b.parent is a
        assert a.parent is result.root

    def test_siblings_keep_document_order(self):
        """Test that children are ordered by their opening tags."""
        result = parse("<l><i>1</i><i>2</i><i>3</i></l>")
        items = result.root.children[0].children
        assert [item.element.inner_text for item in items] == ["1", "2", "3"]

    def test_top_level_siblings(self):
        """Test several top-level elements under the synthetic root."""
        result = parse("<a>1</a><b>2</b>")
        assert [child.name for child in result.root.children] == ["a", "b"]

    def test_empty_input(self):
        """Test that empty input yields an empty root."""
        result = parse("")
        assert result.success
        assert result.root.children == []
        assert result.element_count == 0
        assert result.max_depth == 0

    def test_text_only_input(self):
        """Test that text outside any tag is skipped."""
        result = parse("just text")
        assert result.success
        assert result.root.children == []

    def test_empty_inner_text(self):
        """Test an element with nothing between its tags."""
        result = parse("<a></a>")
        assert result.root.children[0].element.inner_text == ""

    def test_element_with_only_children_has_empty_inner_text(self):
        result = parse("<a><b></b></a>")
        assert result.root.children[0].element.inner_text == ""

    def test_attribute_value_is_literal(self):
        """Test that markup characters inside quotes are kept verbatim."""
        result = parse('<a t="<b> = /">x</a>')
        assert result.root.children[0].element.get_attribute("t") == "<b> = /"

    def test_empty_attribute_value(self):
        result = parse('<a k="">x</a>')
        assert result.root.children[0].element.get_attribute("k") == ""

    def test_duplicate_attributes_kept(self):
        """Test that repeated keys are all stored in order."""
        result = parse('<a k="1" k="2"></a>')
        element = result.root.children[0].element
        assert element.get_attributes("k") == ["1", "2"]

    def test_close_angle_inside_inner_text(self):
        result = parse("<a>1 > 0</a>")
        assert result.root.children[0].element.inner_text == "1 > 0"

    @pytest.mark.parametrize("separator", [" ", "\t", "\n", "\r\n", "   "])
    def test_whitespace_separators(self, separator):
        """Test that any whitespace separates the name and attributes."""
        result = parse(f'<a{separator}x="1"{separator}y="2"{separator}>t</a>')
        element = result.root.children[0].element
        assert element.name == "a"
        assert [(at.key, at.value) for at in element.attributes] == [("x", "1"), ("y", "2")]

    def test_closing_tag_name_not_checked(self):
        """Test that the closing tag closes the current element regardless of name."""
        result = parse("<a><b>x</c></d>")
        assert result.success
        assert result.is_balanced
        assert result.root.children[0].children[0].name == "b"

    def test_source_offsets(self):
        """Test that elements remember where their tag started."""
        result = parse("<a>x<b>y</b></a>")
        assert result.root.children[0].element.source_offset == 0
        assert result.root.find("b").element.source_offset == 4


class TestSelfClosingElements:
    """Test '/>' handling."""

    def test_self_closing_without_attributes(self):
        result = parse("<a><br/>x</a>")
        br = result.root.find("br")
        assert br.element.inner_text == ""
        assert br.children == []
        assert br.parent is result.root.children[0]
        assert result.is_balanced

    def test_self_closing_with_attributes(self):
        result = parse('<img src="a.png" />')
        img = result.root.children[0]
        assert img.element.get_attribute("src") == "a.png"
        assert img.element.inner_text == ""
        assert result.is_balanced

    def test_siblings_after_self_closing(self):
        result = parse("<l><i/><i/></l>")
        assert len(result.root.children[0].children) == 2


class TestTailText:
    """Test text following a child's closing tag."""

    def test_tail_dropped_by_default(self):
        """Test that text after a child is discarded and inner text unchanged."""
        result = parse("<a>x<b>y</b>z</a>")
        a = result.root.children[0]
        assert a.element.inner_text == "x"
        assert a.children[0].element.tail is None
        assert "z" not in str(result.root.to_dict())

    def test_tail_captured_when_enabled(self):
        """Test that the tail is stored on the element that just closed."""
        result = parse("<a>x<b>y</b>z</a>", tail_text=TailTextPolicy.TAIL)
        a = result.root.children[0]
        b = a.children[0]
        assert a.element.inner_text == "x"
        assert b.element.tail == "z"
        assert a.element.tail is None

    def test_tail_after_self_closing(self):
        result = parse("<a>x<b/>y</a>", tail_text="tail")
        assert result.root.find("b").element.tail == "y"

    def test_tail_between_siblings(self):
        result = parse("<a><b>1</b>, <c>2</c>.</a>", tail_text="tail")
        assert result.root.find("b").element.tail == ", "
        assert result.root.find("c").element.tail == "."

    def test_top_level_tail(self):
        result = parse("<a>1</a> after", tail_text="tail")
        assert result.root.children[0].element.tail == " after"

    def test_no_empty_tail(self):
        """Test that adjacent tags produce no tail."""
        result = parse("<a><b></b><c></c></a>", tail_text="tail")
        assert result.root.find("b").element.tail is None


class TestMalformedInput:
    """Test error reporting and partial trees."""

    def test_unclosed_opening_tag(self):
        """Test input ending inside an opening tag."""
        result = parse('<a x="1" y="2">')

        assert not result.success
        assert isinstance(result.error, UnexpectedEndOfInput)
        assert result.error.offset == 15
        a = result.root.children[0]
        assert [(at.key, at.value) for at in a.element.attributes] == [("x", "1"), ("y", "2")]
        assert a.element.inner_text is None

    def test_end_inside_tag_name(self):
        result = parse("<a")
        assert isinstance(result.error, UnexpectedEndOfInput)
        assert result.error.offset == 2
        assert result.root.children == []

    def test_end_inside_inner_text(self):
        result = parse("<a>hi")
        assert isinstance(result.error, UnexpectedEndOfInput)
        assert result.error.offset == 5

    def test_closing_tag_at_root(self):
        """Test a closing tag with nothing open."""
        result = parse("</a>")
        assert isinstance(result.error, UnmatchedClosingTag)
        assert result.error.offset == 0

    def test_extra_closing_tag(self):
        result = parse("<a></a></b>")
        assert isinstance(result.error, UnmatchedClosingTag)
        assert result.error.offset == 7
        assert result.root.children[0].name == "a"

    def test_missing_quote(self):
        result = parse("<a x=1>t</a>")
        assert isinstance(result.error, MalformedAttribute)
        assert result.error.offset == 5

    def test_key_without_equals(self):
        result = parse("<a x>t</a>")
        assert isinstance(result.error, MalformedAttribute)
        assert result.error.offset == 4
        assert "'x'" in result.error.message

    def test_space_before_equals(self):
        result = parse('<a x ="1">t</a>')
        assert isinstance(result.error, MalformedAttribute)

    def test_unterminated_value(self):
        result = parse('<a x="1')
        assert isinstance(result.error, MalformedAttribute)
        assert result.error.offset == 7

    def test_end_inside_key(self):
        result = parse("<a xy")
        assert isinstance(result.error, MalformedAttribute)
        assert result.error.offset == 5

    @pytest.mark.parametrize("text", ["<>", "< a>", "</>x", "<a><>"])
    def test_empty_name(self, text):
        result = parse(text)
        if text == "</>x":
            assert isinstance(result.error, UnmatchedClosingTag)
        else:
            assert isinstance(result.error, MalformedTag)
            assert result.error.offset == text.rindex("<")

    def test_error_diagnostic(self):
        """Test that the error is mirrored as an ERROR diagnostic."""
        result = parse("<a")
        errors = result.get_diagnostics_by_severity(DiagnosticSeverity.ERROR)
        assert len(errors) == 1
        assert errors[0].position == {"offset": 2}
        assert errors[0].details["kind"] == "UnexpectedEndOfInput"
        assert errors[0].details["state"] == ParserState.READ_ELEMENT_NAME.name
        assert result.has_errors()

    def test_error_string_includes_offset(self):
        result = parse("</a>")
        assert str(result.error) == "Closing tag without an open element (offset 0)"
        assert result.error.to_dict() == {
            "kind": "UnmatchedClosingTag",
            "message": "Closing tag without an open element",
            "offset": 0,
        }

    def test_all_errors_share_base_class(self):
        for error_class in (
            UnexpectedEndOfInput, UnmatchedClosingTag, MalformedAttribute,
            MalformedTag, NestingTooDeep,
        ):
            assert issubclass(error_class, ParseError)


class TestUnbalancedInput:
    """Test input that ends with elements still open."""

    def test_unclosed_element_warns(self):
        result = parse("<a><b></b>")
        assert result.success
        assert not result.is_balanced
        assert result.current is result.root.children[0]
        warnings = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)
        assert len(warnings) == 1
        assert warnings[0].message == "Input ended with 1 unclosed element(s)"
        assert not result.has_errors()

    def test_warning_can_be_disabled(self):
        result = parse("<a><b></b>", warn_on_unbalanced=False)
        assert result.success
        assert result.diagnostics == []


class TestNestingLimit:
    """Test the depth guard."""

    def test_within_limit(self):
        result = parse("<a><b></b></a>", max_depth=2)
        assert result.success
        assert result.max_depth == 2

    def test_exceeds_limit(self):
        result = parse("<a><b><c></c></b></a>", max_depth=2)
        assert isinstance(result.error, NestingTooDeep)
        assert result.error.offset == 6
        assert result.error.max_depth == 2
        assert result.element_count == 2

    def test_deep_input_with_default_limit(self):
        """Test that deep nesting is parsed without recursion."""
        depth = 900
        result = parse("<n>" * depth + "</n>" * depth)
        assert result.success
        assert result.max_depth == depth


class TestParserBehavior:
    """Test parser reuse, hooks and result reporting."""

    def test_parser_is_reusable(self):
        """Test that state does not leak between parses."""
        parser = TagTreeParser()
        first = parser.parse("<a>1</a>")
        failed = parser.parse("<b")
        again = parser.parse("<a>1</a>")

        assert not failed.success
        assert shape(first.root) == shape(again.root)
        assert first.root is not again.root

    def test_deterministic(self):
        text = '<a k="v">t<b>u</b></a>'
        assert parse(text).to_dict()["root"] == parse(text).to_dict()["root"]

    def test_non_string_input(self):
        with pytest.raises(TypeError):
            TagTreeParser().parse(b"<a></a>")

    def test_null_character_rejected(self):
        with pytest.raises(ValueError, match="null characters"):
            TagTreeParser().parse("<a>\x00</a>")

    def test_step_hook_sees_every_character(self):
        """Test that the hook is called once per consumed step."""
        calls = []
        parser = TagTreeParser(step_hook=lambda *args: calls.append(args))
        parser.parse('<a k="v">t</a>')

        offsets = [offset for offset, _, _, _ in calls]
        # '="' is consumed in one step
        assert 5 not in offsets
        assert offsets[0] == 0
        assert offsets[-1] == len('<a k="v">t</a>') - 1
        assert calls[0][2] is ParserState.LOOK_FOR_ELEMENT

    def test_statistics(self):
        result = parse('<a x="1"><b y="2" z="3">t</b></a>')
        assert result.element_count == 2
        assert result.attribute_count == 3
        assert [node.name for node in result.elements] == ["a", "b"]
        assert result.performance.characters_processed == len('<a x="1"><b y="2" z="3">t</b></a>')
        assert result.performance.tokens_emitted > 0
        assert result.source_length == result.performance.characters_processed

    def test_summary_and_to_dict(self):
        result = parse("<a>1</a>")
        summary = result.summary()
        assert summary["success"] is True
        assert summary["balanced"] is True
        assert summary["error"] is None

        data = result.to_dict()
        assert data["root"]["children"][0]["inner_text"] == "1"
        assert data["diagnostics"] == []

    def test_correlation_id_propagates(self):
        result = parse("<a", correlation_id="req-7")
        assert result.correlation_id == "req-7"
        assert result.diagnostics[0].correlation_id == "req-7"

    def test_held_node_outlives_result(self):
        """Test that a node taken from a dropped result keeps its ancestors."""
        b = TagTreeParser().parse("<a><b>x</b></a>").root.find("b")
        assert b.parent.name == "a"
        assert b.depth == 2
        assert b.element.inner_text == "x"

    def test_default_result(self):
        result = ParseResult()
        assert result.root.name == "root"
        assert result.is_balanced
