#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_lark_markdown_renderer.py
"""Unit tests for MarkdownRenderer.

Tests cover:
- Rendering every node type to markdown
- GFM and CommonMark flavors
- Render options (emphasis symbol, underline/highlight modes, front matter)
- Asset references rendered before and after URL binding

"""

from io import BytesIO, StringIO

import pytest

from lark2md.assets import FileRef, ImageRef
from lark2md.ast import (
    Attachment,
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Emphasis,
    Grid,
    GridColumn,
    Heading,
    Highlight,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    MathInline,
    Paragraph,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    Underline,
)
from lark2md.exceptions import InvalidOptionsError, OutputWriteError, RenderingError
from lark2md.options import LarkOptions, MarkdownRendererOptions
from lark2md.renderers import MarkdownRenderer


def _render(*children, **options) -> str:
    renderer = MarkdownRenderer(MarkdownRendererOptions(**options))
    return renderer.render_to_string(Document(children=list(children)))


def _p(*content) -> Paragraph:
    return Paragraph(content=[Text(content=c) if isinstance(c, str) else c for c in content])


def _item(*children, task_status=None) -> ListItem:
    return ListItem(children=list(children), task_status=task_status)


def _table(header: list[str], *rows: list[str]) -> Table:
    def row(values, is_header=False):
        return TableRow(cells=[TableCell(content=[Text(content=v)]) for v in values], is_header=is_header)

    return Table(header=row(header, True), rows=[row(r) for r in rows], alignments=[None] * len(header))


@pytest.mark.unit
class TestBasicRendering:
    """Tests for basic block rendering."""

    def test_render_empty_document(self):
        """Test rendering an empty document."""
        assert _render() == ""

    def test_heading_and_paragraphs(self):
        """Test blocks are separated by blank lines."""
        result = _render(Heading(level=2, content=[Text(content="Title")]), _p("one"), _p("two"))
        assert result == "## Title\n\none\n\ntwo"

    def test_thematic_break(self):
        """Test thematic break rendering."""
        assert _render(_p("a"), ThematicBreak(), _p("b")) == "a\n\n---\n\nb"

    def test_hard_line_break(self):
        """Test hard breaks inside paragraphs use trailing spaces."""
        assert _render(_p("one", LineBreak(), "two")) == "one  \ntwo"

    def test_code_block(self):
        """Test fenced code blocks with a language."""
        assert _render(CodeBlock(content="print(1)", language="python")) == "```python\nprint(1)\n```"

    def test_code_block_with_backticks(self):
        """Test the fence grows past backtick runs in the content."""
        result = _render(CodeBlock(content="```\ninner\n```"))
        assert result == "````\n```\ninner\n```\n````"

    def test_block_quote(self):
        """Test every quoted line carries the marker."""
        assert _render(BlockQuote(children=[_p("a"), _p("b")])) == "> a\n>\n> b"

    def test_grid_columns_sequential(self):
        """Test grid columns are rendered one after another."""
        grid = Grid(columns=[GridColumn(children=[_p("left")]), GridColumn(children=[_p("right")])])
        assert _render(grid) == "left\n\nright"


@pytest.mark.unit
class TestListRendering:
    """Tests for list rendering."""

    def test_bullet_list(self):
        """Test a flat bullet list."""
        assert _render(List(ordered=False, items=[_item(_p("a")), _item(_p("b"))])) == "- a\n- b"

    def test_ordered_list_start(self):
        """Test ordered lists number from their start value."""
        result = _render(List(ordered=True, start=3, items=[_item(_p("x")), _item(_p("y"))]))
        assert result == "3. x\n4. y"

    def test_nested_list(self):
        """Test nested lists are indented under their parent marker."""
        nested = List(ordered=False, items=[_item(_p("kid"))])
        result = _render(List(ordered=False, items=[_item(_p("parent"), nested)]))
        assert result == "- parent\n  * kid"

    def test_task_list_gfm(self):
        """Test task items render checkboxes under GFM."""
        items = [_item(_p("done"), task_status="checked"), _item(_p("open"), task_status="unchecked")]
        lst = List(ordered=False, items=items)
        assert _render(lst) == "- [x] done\n- [ ] open"

    def test_task_list_commonmark(self):
        """Test CommonMark drops the checkbox."""
        lst = List(ordered=False, items=[_item(_p("done"), task_status="checked")])
        assert _render(lst, flavor="commonmark") == "- done"


@pytest.mark.unit
class TestTableRendering:
    """Tests for table rendering."""

    def test_gfm_pipe_table(self):
        """Test GFM renders a pipe table."""
        result = _render(_table(["A", "B"], ["1", "2"]))
        assert result == "| A | B |\n|---|---|\n| 1 | 2 |"

    def test_pipe_escaped_in_cell(self):
        """Test pipes inside cells are escaped."""
        result = _render(_table(["a|b"]))
        assert "a\\|b" in result

    def test_line_break_in_cell(self):
        """Test hard breaks inside cells become <br>."""
        table = Table(
            header=TableRow(cells=[TableCell(content=[Text(content="x"), LineBreak(), Text(content="y")])]),
            alignments=[None],
        )
        assert _render(table).splitlines()[0] == "| x<br>y |"

    def test_commonmark_html_table(self):
        """Test CommonMark falls back to an HTML table."""
        result = _render(_table(["A"], ["1"]), flavor="commonmark")
        assert result.startswith("<table>")
        assert "<th>A</th>" in result
        assert "<td>1</td>" in result

    def test_html_table_spans(self):
        """Test merged cells keep their spans in the HTML fallback."""
        cell = TableCell(content=[Text(content="wide")], metadata={"row_span": 1, "col_span": 2})
        table = Table(header=TableRow(cells=[cell], is_header=True), alignments=[None, None])
        assert '<th colspan="2">wide</th>' in _render(table, flavor="commonmark")


@pytest.mark.unit
class TestInlineRendering:
    """Tests for inline node rendering."""

    def test_escaping(self):
        """Test control characters are escaped but snake_case survives."""
        assert _render(_p("*star* and snake_case")) == "\\*star\\* and snake_case"

    def test_no_escape_option(self):
        """Test escaping can be disabled."""
        assert _render(_p("*star*"), escape_special=False) == "*star*"

    def test_emphasis_and_strong(self):
        """Test emphasis symbols follow the option."""
        para = _p(Emphasis(content=[Text(content="e")]), " ", Strong(content=[Text(content="s")]))
        assert _render(para) == "*e* **s**"
        assert _render(para, emphasis_symbol="_") == "_e_ __s__"

    def test_strikethrough_by_flavor(self):
        """Test strikethrough uses tildes in GFM and <del> in CommonMark."""
        para = _p(Strikethrough(content=[Text(content="x")]))
        assert _render(para) == "~~x~~"
        assert _render(para, flavor="commonmark") == "<del>x</del>"

    @pytest.mark.parametrize("mode,expected", [("html", "<u>x</u>"), ("markdown", "__x__"), ("ignore", "x")])
    def test_underline_modes(self, mode, expected):
        """Test the underline mode option."""
        assert _render(_p(Underline(content=[Text(content="x")])), underline_mode=mode) == expected

    def test_highlight_modes(self):
        """Test highlight as <mark> with colour, or ==text==."""
        para = _p(Highlight(content=[Text(content="x")], color="light-red"))
        assert _render(para) == '<mark data-color="light-red">x</mark>'
        assert _render(para, highlight_mode="markdown") == "==x=="
        assert _render(para, highlight_mode="ignore") == "x"

    def test_inline_code_with_backtick(self):
        """Test the code delimiter is longer than any backtick run inside."""
        assert _render(_p(Code(content="a`b"))) == "``a`b``"

    def test_link_with_title(self):
        """Test links with and without titles."""
        assert _render(_p(Link(url="https://x.test", content=[Text(content="x")]))) == "[x](https://x.test)"
        link = Link(url="https://x.test", content=[Text(content="x")], title="X")
        assert _render(_p(link)) == '[x](https://x.test "X")'

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://x.test/my doc", "[x](<https://x.test/my doc>)"),
            ("https://x.test/a_(b)", "[x](<https://x.test/a_(b)>)"),
            ("https://x.test/a)b", "[x](<https://x.test/a)b>)"),
            ("https://x.test/<a> b", "[x](<https://x.test/\\<a\\> b>)"),
            ("https://x.test/a\nb c", "[x](<https://x.test/a%0Ab c>)"),
        ],
    )
    def test_link_destination_with_spaces_or_parentheses(self, url, expected):
        """Test decoded URLs with spaces or parentheses use an angle-bracket destination."""
        assert _render(_p(Link(url=url, content=[Text(content="x")]))) == expected

    def test_image_and_attachment_destinations(self):
        """Test image and attachment targets are bracketed the same way."""
        image = Image(url="https://cdn.test/a b.png", alt_text="a")
        attachment = Attachment(name="spec", url="https://cdn.test/spec (1).pdf")
        assert _render(_p(image)) == "![a](<https://cdn.test/a b.png>)"
        assert _render(_p(attachment)) == "[spec](<https://cdn.test/spec (1).pdf>)"

    def test_math_by_flavor(self):
        """Test inline math is $...$ in GFM and a code span in CommonMark."""
        para = _p(MathInline(content="a^2"))
        assert _render(para) == "$a^2$"
        assert _render(para, flavor="commonmark") == "`a^2`"


@pytest.mark.unit
class TestAssetRendering:
    """Tests for images and attachments."""

    def test_unbound_image_uses_token(self):
        """Test an image without url targets its asset token."""
        image = Image(alt_text="chart", data=ImageRef(block_id="i", token="t1"))
        assert _render(Paragraph(content=[image])) == "![chart](t1)"

    def test_bound_image_uses_url(self):
        """Test a bound image uses its url."""
        image = Image(url="https://cdn.test/t1.png", data=ImageRef(block_id="i", token="t1"))
        assert _render(Paragraph(content=[image])) == "![](https://cdn.test/t1.png)"

    def test_attachment(self):
        """Test an attachment renders as a link to the file."""
        attachment = Attachment(name="report.pdf", data=FileRef(block_id="f", token="ft"))
        assert _render(Paragraph(content=[attachment])) == "[report.pdf](ft)"


@pytest.mark.unit
class TestFrontMatterAndOutput:
    """Tests for front matter and output destinations."""

    def test_yaml_front_matter(self):
        """Test YAML front matter precedes the body when enabled."""
        doc = Document(children=[_p("body")], metadata={"title": "Plan", "document_id": "doxc1"})
        result = MarkdownRenderer(MarkdownRendererOptions(metadata_frontmatter=True)).render_to_string(doc)
        assert result == "---\ntitle: Plan\ndocument_id: doxc1\n---\n\nbody"

    def test_toml_front_matter(self):
        """Test TOML front matter uses +++ delimiters."""
        doc = Document(children=[_p("body")], metadata={"title": "Plan"})
        options = MarkdownRendererOptions(metadata_frontmatter=True, metadata_format="toml")
        assert MarkdownRenderer(options).render_to_string(doc).startswith('+++\ntitle = "Plan"\n+++')

    def test_front_matter_off_by_default(self):
        """Test metadata is not rendered unless requested."""
        doc = Document(children=[_p("body")], metadata={"title": "Plan"})
        assert MarkdownRenderer().render_to_string(doc) == "body"

    def test_render_to_text_stream(self):
        """Test rendering to a text stream."""
        buffer = StringIO()
        MarkdownRenderer().render(Document(children=[_p("hi")]), buffer)
        assert buffer.getvalue() == "hi"

    def test_render_to_binary_stream(self):
        """Test rendering to a binary stream writes UTF-8."""
        buffer = BytesIO()
        MarkdownRenderer().render(Document(children=[_p("héllo")]), buffer)
        assert buffer.getvalue().decode("utf-8") == "héllo"

    def test_render_to_path(self, temp_dir):
        """Test rendering to a file path."""
        target = temp_dir / "out.md"
        MarkdownRenderer().render(Document(children=[_p("hi")]), target)
        assert target.read_text(encoding="utf-8") == "hi"

    def test_unwritable_path(self, temp_dir):
        """Test an unwritable destination raises OutputWriteError."""
        with pytest.raises(OutputWriteError):
            MarkdownRenderer().render(Document(children=[_p("hi")]), temp_dir / "missing" / "out.md")

    def test_wrong_options_type(self):
        """Test transformer options are rejected by the renderer."""
        with pytest.raises(InvalidOptionsError):
            MarkdownRenderer(LarkOptions())  # type: ignore[arg-type]

    def test_stack_exhaustion_raises_rendering_error(self, monkeypatch):
        """Test a RecursionError while rendering surfaces as RenderingError."""

        def overflow(self, node):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr(MarkdownRenderer, "visit_paragraph", overflow)
        with pytest.raises(RenderingError) as exc_info:
            MarkdownRenderer().render_to_string(Document(children=[_p("hi")]))
        assert isinstance(exc_info.value.original_error, RecursionError)
