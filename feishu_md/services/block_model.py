from __future__ import annotations

from enum import IntEnum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class RendererError(RuntimeError):
    pass


class MissingRootError(RendererError):
    pass


class BlockType(IntEnum):
    PAGE = 1
    TEXT = 2
    HEADING1 = 3
    HEADING2 = 4
    HEADING3 = 5
    HEADING4 = 6
    HEADING5 = 7
    HEADING6 = 8
    HEADING7 = 9
    HEADING8 = 10
    HEADING9 = 11
    BULLET = 12
    ORDERED = 13
    CODE = 14
    QUOTE = 15
    MENTION_DOC = 16
    TODO = 17
    BITABLE = 18
    CALLOUT = 19
    CHAT_CARD = 20
    DIAGRAM = 21
    DIVIDER = 22
    FILE = 23
    GRID = 24
    GRID_COLUMN = 25
    IFRAME = 26
    IMAGE = 27
    WIDGET = 28
    MIND_NOTE = 29
    SHEET = 30
    TABLE = 31
    TABLE_CELL = 32
    VIEW = 33
    QUOTE_CONTAINER = 34
    BOARD = 43
    SYNCED_BLOCK = 999


HEADING_TYPES = frozenset(range(BlockType.HEADING1, BlockType.HEADING9 + 1))


def heading_level(block_type: int) -> int:
    return block_type - BlockType.HEADING1 + 1


def block_type_name(block_type: int) -> str:
    try:
        return BlockType(block_type).name
    except ValueError:
        return str(block_type)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


# --- inline text ---


class TextLink(_Payload):
    url: str = ""


class TextElementStyle(_Payload):
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    inline_code: bool = False
    background_color: int | None = None
    text_color: int | None = None
    link: TextLink | None = None


class TextRun(_Payload):
    content: str = ""
    text_element_style: TextElementStyle | None = None


class MentionDoc(_Payload):
    token: str = ""
    obj_type: int | None = None
    url: str = ""
    title: str = ""
    text_element_style: TextElementStyle | None = None


class InlineFile(_Payload):
    file_token: str = ""
    source_block_id: str = ""
    text_element_style: TextElementStyle | None = None


class TextElement(_Payload):
    text_run: TextRun | None = None
    file: InlineFile | None = None
    equation: TextRun | None = None
    mention_doc: MentionDoc | None = None


class TextStyle(_Payload):
    align: int | None = None
    done: bool = False
    folded: bool = False
    language: int | None = None
    wrap: bool = False


class TextBlock(_Payload):
    style: TextStyle = Field(default_factory=TextStyle)
    elements: list[TextElement] = Field(default_factory=list)


# --- leaf / container payloads ---


class ImageBlock(_Payload):
    token: str = ""
    width: int | None = None
    height: int | None = None
    align: int | None = None


class TableMergeInfo(_Payload):
    row_span: int = 1
    col_span: int = 1


class TableProperty(_Payload):
    row_size: int = 0
    column_size: int = 0
    column_width: list[int] = Field(default_factory=list)
    header_row: bool = False
    header_column: bool = False
    merge_info: list[TableMergeInfo] = Field(default_factory=list)


class TableBlock(_Payload):
    cells: list[str] = Field(default_factory=list)
    property: TableProperty = Field(default_factory=TableProperty)


class CalloutBlock(_Payload):
    background_color: int | None = None
    border_color: int | None = None
    text_color: int | None = None
    emoji_id: str = ""


class GridBlock(_Payload):
    column_size: int = 1


class GridColumnBlock(_Payload):
    width_ratio: int | None = None


class IframeComponent(_Payload):
    iframe_type: int | None = None
    url: str = ""


class IframeBlock(_Payload):
    component: IframeComponent = Field(default_factory=IframeComponent)


class FileBlock(_Payload):
    token: str = ""
    name: str = ""


class EmptyPayload(_Payload):
    pass


class UnsupportedPayload(_Payload):
    pass


Payload = Union[
    TextBlock,
    ImageBlock,
    TableBlock,
    CalloutBlock,
    GridBlock,
    GridColumnBlock,
    IframeBlock,
    FileBlock,
    EmptyPayload,
    UnsupportedPayload,
]

_TEXT_FIELDS: dict[int, str] = {
    BlockType.PAGE: "page",
    BlockType.TEXT: "text",
    BlockType.BULLET: "bullet",
    BlockType.ORDERED: "ordered",
    BlockType.CODE: "code",
    BlockType.QUOTE: "quote",
    BlockType.TODO: "todo",
    BlockType.TABLE_CELL: "table_cell",
    **{block_type: f"heading{heading_level(block_type)}" for block_type in HEADING_TYPES},
}

_PAYLOAD_FIELDS: dict[int, tuple[str, type[_Payload]]] = {
    **{block_type: (field, TextBlock) for block_type, field in _TEXT_FIELDS.items()},
    BlockType.IMAGE: ("image", ImageBlock),
    BlockType.BOARD: ("board", ImageBlock),
    BlockType.TABLE: ("table", TableBlock),
    BlockType.CALLOUT: ("callout", CalloutBlock),
    BlockType.GRID: ("grid", GridBlock),
    BlockType.GRID_COLUMN: ("grid_column", GridColumnBlock),
    BlockType.IFRAME: ("iframe", IframeBlock),
    BlockType.FILE: ("file", FileBlock),
    BlockType.DIVIDER: ("divider", EmptyPayload),
    BlockType.QUOTE_CONTAINER: ("quote_container", EmptyPayload),
    BlockType.VIEW: ("view", EmptyPayload),
    BlockType.SYNCED_BLOCK: ("synced_block", EmptyPayload),
}


class Block(BaseModel):
    """文档树中的一个节点，按 block_type 携带唯一的 payload。"""

    model_config = ConfigDict(frozen=True)

    block_id: str
    block_type: int
    parent_id: str = ""
    children: tuple[str, ...] = ()
    payload: Payload = Field(default_factory=UnsupportedPayload)
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Block":
        block_type = int(raw.get("block_type") or 0)
        entry = _PAYLOAD_FIELDS.get(block_type)
        if entry is None:
            payload: _Payload = UnsupportedPayload()
        else:
            field, model = entry
            payload = model.model_validate(raw.get(field) or {})
        return cls(
            block_id=str(raw.get("block_id") or ""),
            block_type=block_type,
            parent_id=str(raw.get("parent_id") or ""),
            children=tuple(str(child) for child in raw.get("children") or ()),
            payload=payload,
            raw=raw,
        )

    @property
    def text(self) -> TextBlock | None:
        return self.payload if isinstance(self.payload, TextBlock) else None


class BlockTree:
    def __init__(self, blocks: list[Block]) -> None:
        self._blocks = {block.block_id: block for block in blocks if block.block_id}
        self._root = next(
            (block for block in blocks if block.block_type == BlockType.PAGE), None
        )

    @classmethod
    def from_api(cls, items: list[dict[str, Any]]) -> "BlockTree":
        return cls([Block.from_api(item) for item in items])

    @property
    def root(self) -> Block:
        if self._root is None:
            raise MissingRootError("未找到文档根节点（Page Block）")
        return self._root

    def get(self, block_id: str) -> Block | None:
        return self._blocks.get(block_id)

    def children(self, block: Block) -> list[Block]:
        return [child for child_id in block.children if (child := self.get(child_id))]

    def parent_of(self, block: Block) -> Block | None:
        if not block.parent_id:
            return None
        return self.get(block.parent_id)

    def __len__(self) -> int:
        return len(self._blocks)


CODE_LANGUAGES: tuple[str, ...] = (
    "PlainText", "ABAP", "Ada", "Apache", "Apex", "AssemblyLanguage", "Bash",
    "CSharp", "CPlusPlus", "C", "COBOL", "CSS", "CoffeeScript", "D", "Dart",
    "Delphi", "Django", "Dockerfile", "Erlang", "Fortran", "FoxPro", "Go",
    "Groovy", "HTML", "HTMLBars", "HTTP", "Haskell", "JSON", "Java",
    "JavaScript", "Julia", "Kotlin", "LateX", "Lisp", "Logo", "Lua", "MATLAB",
    "Makefile", "Markdown", "Nginx", "ObjectiveC", "OpenEdgeABL", "PHP", "Perl",
    "PostScript", "PowerShell", "Prolog", "ProtoBuf", "Python", "R", "RPG",
    "Ruby", "Rust", "SAS", "SCSS", "SQL", "Scala", "Scheme", "Scratch", "Shell",
    "Swift", "Thrift", "TypeScript", "VBScript", "VisualBasic", "XML", "YAML",
    "CMake", "Diff", "Gherkin", "GraphQL", "OpenGLShadingLanguage",
    "Properties", "Solidity", "TOML",
)

_CODE_LANGUAGE_ALIASES = {
    "PlainText": "text",
    "AssemblyLanguage": "assembly",
    "CPlusPlus": "cpp",
    "CSharp": "csharp",
    "CoffeeScript": "coffee",
    "Dockerfile": "docker",
    "ObjectiveC": "objectivec",
    "VisualBasic": "vb",
}


def code_language(language: int | None) -> str:
    # 语言编号从 1（PlainText）开始
    if not language or language < 1 or language > len(CODE_LANGUAGES):
        return ""
    name = CODE_LANGUAGES[language - 1]
    return _CODE_LANGUAGE_ALIASES.get(name, name.lower())


def align_style(align: int | None) -> str:
    return {2: "center", 3: "right"}.get(align or 1, "left")


CALLOUT_BACKGROUND_COLORS: dict[int, str] = {
    1: "#fef2f2",
    2: "#fff7ed",
    3: "#fefce8",
    4: "#f0fdf4",
    5: "#eff6ff",
    6: "#faf5ff",
    7: "#f9fafb",
    8: "#fecaca",
    9: "#fed7aa",
    10: "#fef08a",
    11: "#bbf7d0",
    12: "#bfdbfe",
    13: "#e9d5ff",
    14: "#e5e7eb",
}

CALLOUT_BORDER_COLORS: dict[int, str] = {
    1: "#fecaca",
    2: "#fed7aa",
    3: "#fef08a",
    4: "#bbf7d0",
    5: "#bfdbfe",
    6: "#e9d5ff",
    7: "#e5e7eb",
}

FONT_COLORS: dict[int, str] = {
    1: "#ef4444",
    2: "#f97316",
    3: "#eab308",
    4: "#22c55e",
    5: "#3b82f6",
    6: "#a855f7",
    7: "#6b7280",
}


__all__ = [
    "Block",
    "BlockTree",
    "BlockType",
    "CALLOUT_BACKGROUND_COLORS",
    "CALLOUT_BORDER_COLORS",
    "CalloutBlock",
    "FONT_COLORS",
    "FileBlock",
    "GridBlock",
    "GridColumnBlock",
    "HEADING_TYPES",
    "IframeBlock",
    "ImageBlock",
    "InlineFile",
    "MentionDoc",
    "MissingRootError",
    "RendererError",
    "TableBlock",
    "TableMergeInfo",
    "TableProperty",
    "TextBlock",
    "TextElement",
    "TextElementStyle",
    "TextRun",
    "TextStyle",
    "UnsupportedPayload",
    "align_style",
    "block_type_name",
    "code_language",
    "heading_level",
]
