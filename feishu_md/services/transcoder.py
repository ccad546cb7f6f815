from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Iterable
from urllib.parse import unquote

import emoji
from loguru import logger

from feishu_md.services.block_model import (
    CALLOUT_BACKGROUND_COLORS,
    CALLOUT_BORDER_COLORS,
    FONT_COLORS,
    HEADING_TYPES,
    Block,
    BlockTree,
    BlockType,
    CalloutBlock,
    FileBlock,
    GridBlock,
    GridColumnBlock,
    IframeBlock,
    ImageBlock,
    TableBlock,
    align_style,
    block_type_name,
    code_language,
    heading_level,
)
from feishu_md.services.html_bridge import markdown_to_html
from feishu_md.services.inline_text import render_text_block, title_text
from feishu_md.services.media_tokens import (
    FileKind,
    FileToken,
    MediaTokenCollector,
    replace_file_tokens,
)
from feishu_md.services.table_renderer import TableRenderer
from feishu_md.services.text_buffer import TextBuffer, trim_last_newline

MAX_MARKDOWN_HEADING = 6

# 文本类 Block 会在正文后继续渲染自身的子块
_TEXT_WITH_CHILDREN = {BlockType.TEXT, *HEADING_TYPES}


@dataclass(frozen=True)
class RenderOptions:
    show_unsupported: bool = False
    clamp_headings: bool = False


@dataclass(frozen=True)
class RenderContext:
    indent: int = 0
    next_block: Block | None = None
    current: Block | None = None

    def nested(self, indent: int | None = None, next_block: Block | None = None) -> "RenderContext":
        return replace(
            self,
            indent=self.indent if indent is None else indent,
            next_block=next_block,
        )

    @property
    def verbatim(self) -> bool:
        return self.current is not None and self.current.block_type == BlockType.CODE


@dataclass
class RenderResult:
    markdown: str
    title: str = ""
    file_tokens: list[FileToken] = field(default_factory=list)


class _RenderPass:
    """一次渲染调用的状态：块索引、选项与收集到的媒体 token。"""

    def __init__(self, tree: BlockTree, options: RenderOptions) -> None:
        self.tree = tree
        self.options = options
        self.tokens = MediaTokenCollector()
        self.title = ""
        self._handlers: dict[int, Callable[[Block, RenderContext], str]] = {
            BlockType.PAGE: self._page,
            BlockType.TEXT: self._text,
            BlockType.BULLET: self._bullet,
            BlockType.ORDERED: self._ordered,
            BlockType.CODE: self._code,
            BlockType.QUOTE: self._quote,
            BlockType.TODO: self._todo,
            BlockType.DIVIDER: self._divider,
            BlockType.IMAGE: self._image,
            BlockType.BOARD: self._board,
            BlockType.TABLE_CELL: self._passthrough,
            BlockType.TABLE: self._table,
            BlockType.QUOTE_CONTAINER: self._quote_container,
            BlockType.VIEW: self._passthrough,
            BlockType.FILE: self._file,
            BlockType.GRID: self._grid,
            BlockType.GRID_COLUMN: self._passthrough,
            BlockType.CALLOUT: self._callout,
            BlockType.IFRAME: self._iframe,
            BlockType.SYNCED_BLOCK: self._passthrough,
            **{block_type: self._heading for block_type in HEADING_TYPES},
        }

    def render(self, block: Block, ctx: RenderContext) -> str:
        ctx = replace(ctx, current=block)
        buf = TextBuffer()
        buf.write_indent(ctx.indent)
        handler = self._handlers.get(block.block_type, self._unsupported)
        buf.write(handler(block, ctx))
        return buf.getvalue()

    def render_children(self, block: Block, indent: int = 0) -> Iterable[str]:
        for child in self.tree.children(block):
            yield self.render(child, RenderContext(indent=indent))

    # --- text blocks ---

    def _text_block(self, block: Block, ctx: RenderContext) -> str:
        text = render_text_block(block.text, verbatim=ctx.verbatim)
        if block.block_type not in _TEXT_WITH_CHILDREN:
            return text
        buf = TextBuffer()
        buf.write(text)
        for child in self.tree.children(block):
            buf.write(self.render(child, ctx.nested()))
        return buf.getvalue()

    def _page(self, block: Block, ctx: RenderContext) -> str:
        buf = TextBuffer()
        self.title = title_text(block.text)
        # 标题为空时不输出 "# " 行
        if self.title:
            buf.write("# ")
            buf.write(self._text_block(block, ctx))
            buf.write("\n")

        child_ids = block.children
        for index, child_id in enumerate(child_ids):
            child = self.tree.get(child_id)
            if child is None:
                continue
            next_block = self.tree.get(child_ids[index + 1]) if index + 1 < len(child_ids) else None
            child_text = self.render(child, RenderContext(indent=0, next_block=next_block))
            if child_text:
                buf.write(child_text)
                buf.write("\n")
        return buf.getvalue()

    def _text(self, block: Block, ctx: RenderContext) -> str:
        return self._text_block(block, ctx)

    def _heading(self, block: Block, ctx: RenderContext) -> str:
        level = heading_level(block.block_type)
        if self.options.clamp_headings:
            level = min(level, MAX_MARKDOWN_HEADING)
        return f"{'#' * level} {self._text_block(block, ctx).lstrip()}"

    def _code(self, block: Block, ctx: RenderContext) -> str:
        language = code_language(block.text.style.language if block.text else None)
        content = render_text_block(block.text, verbatim=True).strip()
        return f"```{language}\n{content}\n```\n"

    def _quote(self, block: Block, ctx: RenderContext) -> str:
        return f"> {self._text_block(block, ctx)}"

    def _todo(self, block: Block, ctx: RenderContext) -> str:
        done = bool(block.text and block.text.style.done)
        return f"- [{'x' if done else ' '}] {self._text_block(block, ctx)}"

    def _divider(self, block: Block, ctx: RenderContext) -> str:
        return "---\n"

    # --- lists ---

    def _is_compact(self, block: Block, ctx: RenderContext) -> bool:
        following = ctx.next_block
        return (
            following is not None
            and following.block_type == block.block_type
            and following.parent_id == block.parent_id
            and not block.children
        )

    def _list_item(self, block: Block, ctx: RenderContext, marker: str) -> str:
        buf = TextBuffer()
        buf.write(marker)
        item_text = self._text_block(block, ctx)
        if self._is_compact(block, ctx):
            item_text = trim_last_newline(item_text)
        buf.write(item_text)
        for child_text in self.render_children(block, indent=ctx.indent + 1):
            buf.write(child_text)
        return buf.getvalue()

    def _bullet(self, block: Block, ctx: RenderContext) -> str:
        return self._list_item(block, ctx, "- ")

    def _ordered(self, block: Block, ctx: RenderContext) -> str:
        return self._list_item(block, ctx, f"{self.ordinal(block)}. ")

    def ordinal(self, block: Block) -> int:
        parent = self.tree.parent_of(block)
        if parent is None:
            return 1
        siblings = parent.children
        try:
            position = siblings.index(block.block_id)
        except ValueError:
            return 1
        order = 1
        for sibling_id in reversed(siblings[:position]):
            sibling = self.tree.get(sibling_id)
            if sibling is None or sibling.block_type != BlockType.ORDERED:
                break
            order += 1
        return order

    # --- media ---

    def _img_tag(self, image: ImageBlock) -> str:
        attrs = [f'src="{image.token}"']
        if image.width:
            attrs.append(f'src-width="{image.width}"')
        if image.height:
            attrs.append(f'src-height="{image.height}"')
        align = align_style(image.align)
        if align != "left":
            attrs.append(f'align="{align}"')
        return f"<img {' '.join(attrs)} />\n"

    def _media(self, block: Block, kind: FileKind) -> str:
        image = block.payload
        if not isinstance(image, ImageBlock) or not image.token:
            return ""
        self.tokens.add(kind, image.token)
        return self._img_tag(image)

    def _image(self, block: Block, ctx: RenderContext) -> str:
        return self._media(block, "image")

    def _board(self, block: Block, ctx: RenderContext) -> str:
        return self._media(block, "board")

    def _file(self, block: Block, ctx: RenderContext) -> str:
        file_block = block.payload
        if not isinstance(file_block, FileBlock) or not file_block.token:
            return ""
        self.tokens.add("file", file_block.token)
        return f"[{file_block.name}]({file_block.token})\n"

    def _iframe(self, block: Block, ctx: RenderContext) -> str:
        iframe = block.payload
        if not isinstance(iframe, IframeBlock) or not iframe.component.url:
            return ""
        return f'<iframe src="{unquote(iframe.component.url)}"></iframe>\n'

    # --- containers ---

    def _passthrough(self, block: Block, ctx: RenderContext) -> str:
        return "".join(self.render_children(block))

    def _quote_container(self, block: Block, ctx: RenderContext) -> str:
        return "".join(f"> {child_text}" for child_text in self.render_children(block))

    def _table(self, block: Block, ctx: RenderContext) -> str:
        table = block.payload
        if not isinstance(table, TableBlock):
            return ""

        def render_cell(cell_id: str) -> str | None:
            cell = self.tree.get(cell_id)
            if cell is None:
                return None
            return self.render(cell, RenderContext())

        return TableRenderer(render_cell).render(table)

    def _html_children(self, block: Block) -> str:
        return markdown_to_html("\n".join(self.render_children(block)))

    def _grid(self, block: Block, ctx: RenderContext) -> str:
        grid = block.payload
        column_size = grid.column_size if isinstance(grid, GridBlock) else 1
        buf = TextBuffer()
        buf.writeln(
            '<div class="grid" style="display: grid; '
            f'grid-template-columns: repeat({column_size or 1}, 1fr); gap: 16px;">'
        )
        for column in self.tree.children(block):
            buf.write(self._grid_column(column))
        buf.writeln("</div>")
        return buf.getvalue()

    def _grid_column(self, block: Block) -> str:
        column = block.payload
        ratio = column.width_ratio if isinstance(column, GridColumnBlock) else None
        buf = TextBuffer()
        buf.writeln(f'<div class="grid-column" style="flex: {ratio or 1};">')
        buf.write(self._html_children(block))
        buf.writeln("</div>")
        return buf.getvalue()

    def _callout(self, block: Block, ctx: RenderContext) -> str:
        callout = block.payload if isinstance(block.payload, CalloutBlock) else CalloutBlock()
        styles: list[str] = []
        class_names = ["callout"]

        if callout.background_color:
            background = CALLOUT_BACKGROUND_COLORS.get(callout.background_color)
            if background:
                styles.append(f"background: {background}")
            class_names.append(f"callout-bg-{callout.background_color}")
        if callout.border_color:
            border = CALLOUT_BORDER_COLORS.get(callout.border_color)
            if border:
                styles.append(f"border: 1px solid {border}")
            class_names.append(f"callout-border-{callout.border_color}")
        if callout.text_color:
            styles.append(f"color: {FONT_COLORS.get(callout.text_color, '#222')}")
            class_names.append(f"callout-color-{callout.text_color}")

        style_attr = f' style="{"; ".join(styles)}"' if styles else ""
        buf = TextBuffer()
        buf.writeln(f'<div class="{" ".join(class_names)}"{style_attr}>')
        emoji_char = emoji_from_id(callout.emoji_id)
        if emoji_char:
            buf.writeln(f'<span class="callout-emoji">{emoji_char}</span>')
        buf.write(self._html_children(block))
        buf.writeln("</div>")
        return buf.getvalue()

    # --- fallback ---

    def _unsupported(self, block: Block, ctx: RenderContext) -> str:
        logger.debug(
            "跳过不支持的块: block_id={} type={}",
            block.block_id,
            block_type_name(block.block_type),
        )
        if not self.options.show_unsupported:
            return ""
        dump = json.dumps(block.raw or block.model_dump(mode="json"), ensure_ascii=False, indent=2)
        return f"```\n// [Unsupported] {block_type_name(block.block_type)}\n{dump}\n```\n"


def emoji_from_id(emoji_id: str) -> str:
    if not emoji_id:
        return ""
    alias = f":{emoji_id}:"
    rendered = emoji.emojize(alias, language="alias")
    return "" if rendered == alias else rendered


class MarkdownRenderer:
    """将文档的扁平块列表渲染为 Markdown，并收集媒体 token。"""

    def __init__(self, options: RenderOptions | None = None) -> None:
        self._options = options or RenderOptions()

    def render(self, blocks: Iterable[Block | dict[str, Any]]) -> RenderResult:
        tree = BlockTree(
            [block if isinstance(block, Block) else Block.from_api(block) for block in blocks]
        )
        render_pass = _RenderPass(tree, self._options)
        output = render_pass.render(tree.root, RenderContext())
        logger.debug(
            "渲染完成: blocks={} media={}", len(tree), len(render_pass.tokens)
        )
        return RenderResult(
            markdown=output.strip() + "\n",
            title=render_pass.title,
            file_tokens=render_pass.tokens.tokens,
        )


@dataclass
class TranscodeResult:
    markdown: str
    title: str
    file_tokens: list[FileToken]
    resolved: dict[str, str] = field(default_factory=dict)


class DocxTranscoder:
    def __init__(
        self,
        renderer: MarkdownRenderer | None = None,
        downloader: Any | None = None,
    ) -> None:
        self._renderer = renderer or MarkdownRenderer()
        self._downloader = downloader

    async def to_markdown(
        self,
        blocks: list[dict[str, Any]],
        *,
        output_dir: Path | None = None,
        download_media: bool = True,
    ) -> TranscodeResult:
        rendered = self._renderer.render(blocks)
        resolved: dict[str, str] = {}
        markdown = rendered.markdown
        if (
            download_media
            and rendered.file_tokens
            and self._downloader is not None
            and output_dir is not None
        ):
            resolved = await self._downloader.download_all(rendered.file_tokens, output_dir)
            markdown = replace_file_tokens(markdown, resolved)
        return TranscodeResult(
            markdown=markdown,
            title=rendered.title,
            file_tokens=rendered.file_tokens,
            resolved=resolved,
        )


__all__ = [
    "DocxTranscoder",
    "MarkdownRenderer",
    "RenderContext",
    "RenderOptions",
    "RenderResult",
    "TranscodeResult",
    "emoji_from_id",
]
