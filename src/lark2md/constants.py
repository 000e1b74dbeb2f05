#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/constants.py
"""Constants and default values for the lark2md library.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Transformer Defaults - feature flags and traversal bounds
3. Lark Block Payload Tables - language, colour and widget identifiers
4. Markdown Rendering Defaults
5. Asset Resolution Defaults
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

EmphasisSymbol = Literal["*", "_"]
UnderlineMode = Literal["html", "markdown", "ignore"]
HighlightMode = Literal["html", "markdown", "ignore"]
FlavorType = Literal["gfm", "commonmark"]
MetadataFormatType = Literal["yaml", "toml", "json"]
AssetFetchKind = Literal["blob", "sources"]

# =============================================================================
# Transformer Defaults
# =============================================================================

DEFAULT_WHITEBOARD = False
DEFAULT_DIAGRAM = False
DEFAULT_FILE = False
DEFAULT_HIGHLIGHT = False
DEFAULT_FLAT_GRID = True

# Nesting bound for a single traversal; deeper subtrees are dropped.
DEFAULT_MAX_BLOCK_DEPTH = 256

# Upper bound for max_depth; deeper traversals would exceed the interpreter recursion limit.
MAX_BLOCK_DEPTH_LIMIT = 256

# Ordered list items carry this sequence value when numbering continues.
ORDERED_SEQUENCE_AUTO = "auto"

# =============================================================================
# Lark Block Payload Tables
# =============================================================================

# Lark code block ``style.language`` values mapped to fenced code info strings.
# An empty string means "no language tag".
CODE_LANGUAGES: dict[int, str] = {
    1: "",
    2: "abap",
    3: "ada",
    4: "apache",
    5: "apex",
    6: "assembly",
    7: "bash",
    8: "csharp",
    9: "cpp",
    10: "c",
    11: "cobol",
    12: "css",
    13: "coffeescript",
    14: "d",
    15: "dart",
    16: "delphi",
    17: "django",
    18: "dockerfile",
    19: "erlang",
    20: "fortran",
    21: "foxpro",
    22: "go",
    23: "groovy",
    24: "html",
    25: "htmlbars",
    26: "http",
    27: "haskell",
    28: "json",
    29: "java",
    30: "javascript",
    31: "julia",
    32: "kotlin",
    33: "latex",
    34: "lisp",
    35: "logo",
    36: "lua",
    37: "matlab",
    38: "makefile",
    39: "markdown",
    40: "nginx",
    41: "objectivec",
    42: "openedgeabl",
    43: "php",
    44: "perl",
    45: "postscript",
    46: "powershell",
    47: "prolog",
    48: "protobuf",
    49: "python",
    50: "r",
    51: "rpg",
    52: "ruby",
    53: "rust",
    54: "sas",
    55: "scss",
    56: "sql",
    57: "scala",
    58: "scheme",
    59: "scratch",
    60: "shell",
    61: "swift",
    62: "thrift",
    63: "typescript",
    64: "vbscript",
    65: "vbnet",
    66: "xml",
    67: "yaml",
    68: "cmake",
    69: "diff",
    70: "gherkin",
    71: "graphql",
    72: "glsl",
    73: "properties",
    74: "solidity",
    75: "toml",
}

# Lark ``text_element_style.background_color`` values.
HIGHLIGHT_COLORS: dict[int, str] = {
    1: "light-red",
    2: "light-orange",
    3: "light-yellow",
    4: "light-green",
    5: "light-blue",
    6: "light-purple",
    7: "light-gray",
    8: "dark-red",
    9: "dark-orange",
    10: "dark-yellow",
    11: "dark-green",
    12: "dark-blue",
    13: "dark-purple",
    14: "dark-gray",
    15: "dark-slate-gray",
}

# Lark ``diagram.diagram_type`` values.
DIAGRAM_KINDS: dict[int, str] = {1: "flowchart", 2: "uml"}

# ISV (third-party widget) component type ids.
ISV_TEXT_DRAWING = "blk_631fefbbae02400430b8f9f4"
ISV_TIMELINE = "blk_6358a421bca0001c22536e4c"

ISV_COMPONENT_NAMES: dict[str, str] = {
    ISV_TEXT_DRAWING: "TextDrawing",
    ISV_TIMELINE: "Timeline",
}

# Lark ``iframe.component.iframe_type`` values.
IFRAME_KINDS: dict[int, str] = {
    1: "bilibili",
    2: "xigua",
    3: "youku",
    4: "airtable",
    5: "baidu_map",
    6: "amap",
    8: "figma",
    9: "modao",
    10: "canva",
    11: "codepen",
    12: "feishu_survey",
    13: "jinshuju",
    14: "google_map",
    15: "youtube",
    99: "other",
}

# =============================================================================
# Markdown Rendering Defaults
# =============================================================================

DEFAULT_FLAVOR: FlavorType = "gfm"
DEFAULT_EMPHASIS_SYMBOL: EmphasisSymbol = "*"
DEFAULT_BULLET_SYMBOLS = "-*+"
DEFAULT_LIST_INDENT_WIDTH = 4
DEFAULT_ESCAPE_SPECIAL = True
DEFAULT_UNDERLINE_MODE: UnderlineMode = "html"
DEFAULT_HIGHLIGHT_MODE: HighlightMode = "html"
DEFAULT_INCLUDE_METADATA_FRONTMATTER = False
DEFAULT_METADATA_FORMAT: MetadataFormatType = "yaml"
MIN_CODE_FENCE_LENGTH = 3
TABLE_CELL_LINE_BREAK = "<br>"

# =============================================================================
# Asset Resolution Defaults
# =============================================================================

DEFAULT_MAX_CONCURRENT_FETCHES = 4
DEFAULT_ASSET_FETCH_TIMEOUT: float | None = None

# Link schemes rejected by strict AST validation.
DANGEROUS_SCHEMES: tuple[str, ...] = ("javascript:", "vbscript:", "data:text/html")
