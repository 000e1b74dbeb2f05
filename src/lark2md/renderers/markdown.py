#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/renderers/markdown.py
"""Markdown rendering from AST.

This module provides the MarkdownRenderer class which converts AST nodes
to Markdown text. The renderer supports the GFM and CommonMark flavors and
keeps traversal context (indentation, list nesting, table cells) while
walking the tree.

Constructs the target flavor cannot express are rendered as inline HTML:
tables and strikethrough under CommonMark, and underline and highlight
when their mode is "html".
"""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path
from typing import IO, Union

from lark2md.ast.nodes import (
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
    Node,
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
from lark2md.ast.visitors import NodeVisitor
from lark2md.constants import MIN_CODE_FENCE_LENGTH, TABLE_CELL_LINE_BREAK
from lark2md.exceptions import RenderingError
from lark2md.options.markdown import MarkdownRendererOptions
from lark2md.renderers.base import BaseRenderer, InlineContentMixin
from lark2md.utils.flavors import MarkdownFlavor, get_flavor
from lark2md.utils.metadata import format_frontmatter

logger = logging.getLogger(__name__)


def _longest_run(text: str, char: str) -> int:
    longest = current = 0
    for c in text:
        if c == char:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def _link_destination(url: str) -> str:
    """Return ``url`` as a link destination, in ``<...>`` form when it holds spaces or parentheses.

    Link targets are percent-decoded on load and may contain either.
    """
    if not re.search(r"[\s()<>]", url):
        return url
    url = url.replace("\r", "%0D").replace("\n", "%0A")
    return "<" + url.replace("<", "\\<").replace(">", "\\>") + ">"


class MarkdownRenderer(NodeVisitor, InlineContentMixin, BaseRenderer):
    """Render AST nodes to Markdown text.

    Parameters
    ----------
    options : MarkdownRendererOptions or None, default = None
        Markdown formatting options

    Examples
    --------
        >>> from lark2md.ast import Document, Heading, Text
        >>> doc = Document(children=[Heading(level=1, content=[Text(content="Title")])])
        >>> print(MarkdownRenderer(MarkdownRendererOptions(flavor="gfm")).render_to_string(doc))
        # Title

    """

    def __init__(self, options: MarkdownRendererOptions | None = None):
        """Initialize the Markdown renderer with options."""
        BaseRenderer._validate_options_type(options, MarkdownRendererOptions, "markdown")
        options = options or MarkdownRendererOptions()
        BaseRenderer.__init__(self, options)
        self.options: MarkdownRendererOptions = options
        self._flavor: MarkdownFlavor = get_flavor(self.options.flavor)
        self._output: list[str] = []
        self._indent_level: int = 0
        self._in_list: bool = False
        self._in_table_cell: bool = False
        self._list_marker_stack: list[str] = []
        self._marker_width_stack: list[int] = []

    def render_to_string(self, document: Document) -> str:
        """Render a document AST to a Markdown string."""
        self._output = []
        self._indent_level = 0
        self._in_list = False
        self._in_table_cell = False
        self._list_marker_stack = []
        self._marker_width_stack = []

        try:
            document.accept(self)
        except RecursionError as e:
            raise RenderingError(
                "Document is nested too deeply to render", rendering_stage="render", original_error=e
            ) from e

        result = "".join(self._output)
        self._output.clear()
        return self._cleanup_output(result)

    def render(self, doc: Document, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Render AST to Markdown and write it to a path or stream."""
        self.write_text_output(self.render_to_string(doc), output)

    def _cleanup_output(self, text: str) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = re.sub(r"\n{3,}", "\n\n", text)
        return text.rstrip()

    def _escape_markdown(self, text: str) -> str:
        """Escape Markdown control characters with context awareness.

        ``#`` is only escaped at the start of text and ``_`` only at word
        boundaries, so ``snake_case`` and ``issue #3`` stay readable.
        """
        if not self.options.escape_special:
            return text

        always_escape = r"\`*{}[]"

        escaped_chars = []
        for i, char in enumerate(text):
            if char in always_escape:
                escaped_chars.append("\\")
                escaped_chars.append(char)
            elif char == "#" and i == 0:
                escaped_chars.append("\\#")
            elif char == "_":
                prev_alnum = i > 0 and text[i - 1].isalnum()
                next_alnum = i < len(text) - 1 and text[i + 1].isalnum()
                if not (prev_alnum and next_alnum):
                    escaped_chars.append("\\")
                escaped_chars.append(char)
            elif char in "<>" and self._in_table_cell:
                escaped_chars.append(html.escape(char))
            else:
                escaped_chars.append(char)

        return "".join(escaped_chars)

    def _current_indent(self) -> str:
        if self._marker_width_stack:
            return " " * sum(self._marker_width_stack)
        return " " * (self._indent_level * self.options.list_indent_width)

    def _get_bullet_symbol(self, depth: int) -> str:
        symbols = self.options.bullet_symbols
        return symbols[depth % len(symbols)]

    def _append_indented(self, text: str) -> None:
        """Append a block, indenting every line to the current list depth."""
        indent = self._current_indent()
        if indent:
            text = "\n".join(indent + line if line else line for line in text.split("\n"))
        self._output.append(text)

    def _render_blocks(self, children: list[Node]) -> None:
        for i, child in enumerate(children):
            child.accept(self)
            if i < len(children) - 1:
                self._output.append("\n\n")

    # ------------------------------------------------------------------
    # Block nodes
    # ------------------------------------------------------------------

    def visit_document(self, node: Document) -> None:
        """Render a Document node, with front matter when enabled."""
        if self.options.metadata_frontmatter:
            filtered = self._prepare_metadata(node.metadata)
            if filtered:
                self._output.append(format_frontmatter(filtered, self.options.metadata_format, self.metadata_policy))
        self._render_blocks(node.children)

    def visit_heading(self, node: Heading) -> None:
        """Render a Heading node as an ATX heading."""
        content = self._render_inline_content(node.content)
        level = max(1, min(6, node.level))
        self._append_indented(f"{'#' * level} {content}")

    def visit_paragraph(self, node: Paragraph) -> None:
        """Render a Paragraph node."""
        self._append_indented(self._render_inline_content(node.content))

    def visit_code_block(self, node: CodeBlock) -> None:
        """Render a CodeBlock node as a fenced block.

        The fence is lengthened when the content itself contains backtick runs.
        """
        fence = "`" * max(MIN_CODE_FENCE_LENGTH, _longest_run(node.content, "`") + 1)
        body = node.content if node.content.endswith("\n") or not node.content else node.content + "\n"
        self._append_indented(f"{fence}{node.language or ''}\n{body}{fence}")

    def visit_block_quote(self, node: BlockQuote) -> None:
        """Render a BlockQuote node, prefixing every line with ``>``."""
        saved_output = self._output
        saved_stack = self._marker_width_stack
        saved_indent_level = self._indent_level
        self._output = []
        self._marker_width_stack = []
        self._indent_level = 0

        self._render_blocks(node.children)
        lines = "".join(self._output).split("\n")

        self._output = saved_output
        self._marker_width_stack = saved_stack
        self._indent_level = saved_indent_level
        self._append_indented("\n".join(f"> {line}" if line else ">" for line in lines))

    def visit_list(self, node: List) -> None:
        """Render a List node."""
        was_in_list = self._in_list
        if self._in_list:
            self._indent_level += 1
        self._in_list = True

        for i, item in enumerate(node.items):
            if node.ordered:
                marker = f"{node.start + i}. "
            else:
                marker = f"{self._get_bullet_symbol(len(self._list_marker_stack))} "

            self._list_marker_stack.append(marker)
            item.accept(self)
            self._list_marker_stack.pop()

            if i < len(node.items) - 1:
                self._output.append("\n" if node.tight else "\n\n")

        self._in_list = was_in_list
        if was_in_list:
            self._indent_level -= 1

    def visit_list_item(self, node: ListItem) -> None:
        """Render a ListItem node; the first child shares the marker line."""
        indent = self._current_indent()
        marker = self._list_marker_stack[-1] if self._list_marker_stack else "- "

        if node.task_status and self._flavor.supports_task_lists():
            checkbox = "[x]" if node.task_status == "checked" else "[ ]"
            marker = f"{marker}{checkbox} "

        self._output.append(f"{indent}{marker}")
        marker_width = len(marker)

        for i, child in enumerate(node.children):
            if i == 0:
                saved_output = self._output
                saved_stack = self._marker_width_stack.copy()
                saved_indent_level = self._indent_level
                saved_in_list = self._in_list
                self._output = []
                self._marker_width_stack.clear()
                self._indent_level = 0
                self._in_list = False

                child.accept(self)

                self._marker_width_stack = saved_stack
                self._indent_level = saved_indent_level
                self._in_list = saved_in_list
                first = "".join(self._output)
                self._output = saved_output

                # Continuation lines of the first child align under its text.
                continuation = " " * (len(indent) + marker_width)
                self._output.append(first.replace("\n", "\n" + continuation))
            else:
                if i == 1:
                    self._marker_width_stack.append(len(indent) + marker_width - sum(self._marker_width_stack))
                self._output.append("\n")
                child.accept(self)

        if len(node.children) > 1:
            self._marker_width_stack.pop()

    def visit_table(self, node: Table) -> None:
        """Render a Table node.

        GFM gets a pipe table; CommonMark has no tables and gets HTML.
        """
        rows = ([node.header] if node.header else []) + list(node.rows)
        if not rows:
            return

        if not self._flavor.supports_tables():
            self._render_table_as_html(node)
            return

        num_cols = max(len(row.cells) for row in rows)
        rendered_rows = [self._render_cells(row) for row in rows]

        lines: list[str] = []
        for i, cells in enumerate(rendered_rows):
            cells = cells + [""] * (num_cols - len(cells))
            lines.append("| " + " | ".join(cells) + " |")
            if i == 0:
                lines.append(self._alignment_row(node, num_cols))
        self._append_indented("\n".join(lines))

    def _render_cells(self, row: TableRow) -> list[str]:
        self._in_table_cell = True
        try:
            return [self._render_inline_content(cell.content).replace("|", "\\|") for cell in row.cells]
        finally:
            self._in_table_cell = False

    @staticmethod
    def _alignment_row(node: Table, num_cols: int) -> str:
        markers = []
        for j in range(num_cols):
            alignment = node.alignments[j] if j < len(node.alignments) else None
            if alignment == "center":
                markers.append(":---:")
            elif alignment == "right":
                markers.append("---:")
            elif alignment == "left":
                markers.append(":---")
            else:
                markers.append("---")
        return "|" + "|".join(markers) + "|"

    def _render_table_as_html(self, node: Table) -> None:
        def cell_html(cell: TableCell, tag: str) -> str:
            attrs = ""
            if cell.metadata.get("row_span", 1) > 1:
                attrs += f' rowspan="{cell.metadata["row_span"]}"'
            if cell.metadata.get("col_span", 1) > 1:
                attrs += f' colspan="{cell.metadata["col_span"]}"'
            self._in_table_cell = True
            try:
                content = self._render_inline_content(cell.content)
            finally:
                self._in_table_cell = False
            return f"<{tag}{attrs}>{content}</{tag}>"

        parts = ["<table>"]
        if node.header:
            parts.append("  <thead>")
            parts.append("    <tr>" + "".join(cell_html(c, "th") for c in node.header.cells) + "</tr>")
            parts.append("  </thead>")
        if node.rows:
            parts.append("  <tbody>")
            for row in node.rows:
                parts.append("    <tr>" + "".join(cell_html(c, "td") for c in row.cells) + "</tr>")
            parts.append("  </tbody>")
        parts.append("</table>")
        self._append_indented("\n".join(parts))

    def visit_table_row(self, node: TableRow) -> None:
        """Rows are rendered by ``visit_table``."""
        pass

    def visit_table_cell(self, node: TableCell) -> None:
        """Cells are rendered by ``visit_table``."""
        pass

    def visit_thematic_break(self, node: ThematicBreak) -> None:
        """Render a ThematicBreak node."""
        self._append_indented("---")

    def visit_grid(self, node: Grid) -> None:
        """Render a Grid node; Markdown has no columns, so they follow one another."""
        columns = [column for column in node.columns if column.children]
        self._render_blocks(columns)  # type: ignore[arg-type]

    def visit_grid_column(self, node: GridColumn) -> None:
        """Render a GridColumn node as its child blocks."""
        self._render_blocks(node.children)

    # ------------------------------------------------------------------
    # Inline nodes
    # ------------------------------------------------------------------

    def visit_text(self, node: Text) -> None:
        """Render a Text node."""
        self._output.append(self._escape_markdown(node.content))

    def visit_emphasis(self, node: Emphasis) -> None:
        """Render an Emphasis node."""
        content = self._render_inline_content(node.content)
        symbol = self.options.emphasis_symbol
        self._output.append(f"{symbol}{content}{symbol}")

    def visit_strong(self, node: Strong) -> None:
        """Render a Strong node."""
        content = self._render_inline_content(node.content)
        symbol = self.options.emphasis_symbol * 2
        self._output.append(f"{symbol}{content}{symbol}")

    def visit_strikethrough(self, node: Strikethrough) -> None:
        """Render a Strikethrough node, as ``<del>`` when the flavor lacks ``~~``."""
        content = self._render_inline_content(node.content)
        if self._flavor.supports_strikethrough():
            self._output.append(f"~~{content}~~")
        else:
            self._output.append(f"<del>{content}</del>")

    def visit_underline(self, node: Underline) -> None:
        """Render an Underline node according to ``underline_mode``."""
        content = self._render_inline_content(node.content)
        mode = self.options.underline_mode
        if mode == "html":
            self._output.append(f"<u>{content}</u>")
        elif mode == "markdown":
            self._output.append(f"__{content}__")
        else:
            self._output.append(content)

    def visit_highlight(self, node: Highlight) -> None:
        """Render a Highlight node according to ``highlight_mode``."""
        content = self._render_inline_content(node.content)
        mode = self.options.highlight_mode
        if mode == "html":
            if node.color:
                self._output.append(f'<mark data-color="{html.escape(node.color)}">{content}</mark>')
            else:
                self._output.append(f"<mark>{content}</mark>")
        elif mode == "markdown":
            self._output.append(f"=={content}==")
        else:
            self._output.append(content)

    def visit_code(self, node: Code) -> None:
        """Render a Code node, choosing a delimiter longer than any backtick run inside."""
        delimiter = "`" * (_longest_run(node.content, "`") + 1)
        content = node.content
        if content.startswith("`") or content.endswith("`"):
            content = f" {content} "
        self._output.append(f"{delimiter}{content}{delimiter}")

    def visit_link(self, node: Link) -> None:
        """Render a Link node inline."""
        content = self._render_inline_content(node.content)
        if node.title:
            title = node.title.replace('"', '\\"')
            self._output.append(f'[{content}]({_link_destination(node.url)} "{title}")')
        else:
            self._output.append(f"[{content}]({_link_destination(node.url)})")

    def visit_image(self, node: Image) -> None:
        """Render an Image node.

        Until a URL is bound, the asset token stands in as the target.
        """
        alt = node.alt_text.replace("[", "\\[").replace("]", "\\]")
        url = node.url or (node.data.token if node.data is not None else "")
        if node.title:
            self._output.append(f'![{alt}]({_link_destination(url)} "{node.title}")')
        else:
            self._output.append(f"![{alt}]({_link_destination(url)})")

    def visit_attachment(self, node: Attachment) -> None:
        """Render an Attachment node as a link to the file."""
        name = self._escape_markdown(node.name)
        url = node.url or (node.data.token if node.data is not None else "")
        self._output.append(f"[{name}]({_link_destination(url)})")

    def visit_math_inline(self, node: MathInline) -> None:
        """Render a MathInline node as ``$...$``, or inline code when the flavor lacks math."""
        if self._flavor.supports_math():
            self._output.append(f"${node.content}$")
        else:
            self.visit_code(Code(content=node.content))

    def visit_line_break(self, node: LineBreak) -> None:
        """Render a LineBreak node; hard breaks inside table cells become ``<br>``."""
        if self._in_table_cell:
            self._output.append(" " if node.soft else TABLE_CELL_LINE_BREAK)
        elif node.soft:
            self._output.append("\n")
        else:
            self._output.append("  \n")
