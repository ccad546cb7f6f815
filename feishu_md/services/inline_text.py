from __future__ import annotations

import re
from urllib.parse import unquote

from feishu_md.services.block_model import (
    MentionDoc,
    TextBlock,
    TextElement,
    TextRun,
    TextElementStyle,
)
from feishu_md.services.text_buffer import TextBuffer, escape_html_tags

# 部分 Markdown 引擎无法正确解析以冒号结尾的强调，改用 HTML 标签
_TRAILING_COLON = re.compile(r"[:：]$")


def _run_wrapper(style: TextElementStyle | None) -> tuple[str, str, bool]:
    """返回 (前缀, 后缀, 是否转义)，多个样式同时存在时只取优先级最高的一个。"""
    if style is None:
        return "", "", True
    if style.bold:
        return "**", "**", True
    if style.italic:
        return "*", "*", True
    if style.strikethrough:
        return "~~", "~~", True
    if style.underline:
        return "<u>", "</u>", True
    if style.inline_code:
        return "`", "`", False
    if style.link and style.link.url:
        return "[", f"]({unquote(style.link.url)})", True
    return "", "", True


def _html_wrapper(style: TextElementStyle | None) -> tuple[str, str] | None:
    if style is None:
        return None
    if style.bold:
        return "<b>", "</b>"
    if style.italic:
        return "<i>", "</i>"
    if style.strikethrough:
        return "<s>", "</s>"
    return None


Wrapper = tuple[str, str]


def write_text_run(
    buf: TextBuffer,
    text_run: TextRun,
    *,
    verbatim: bool = False,
    previous: Wrapper | None = None,
) -> Wrapper:
    """写入一个文本片段，返回其 (前缀, 后缀)；与上一片段样式相同时合并。"""
    style = text_run.text_element_style
    pre, post, escape = _run_wrapper(style)

    content = text_run.content or ""
    if escape and not verbatim:
        content = escape_html_tags(content)

    if _TRAILING_COLON.search(content):
        html = _html_wrapper(style)
        if html:
            pre, post = html

    wrapper = (pre, post)
    # 仅当上一片段是同样式的文本片段时合并
    if not (pre and previous == wrapper and buf.trim_last_if_ends_with(post)):
        buf.write(pre)
    buf.write(content)
    buf.write(post)
    return wrapper


def write_equation(buf: TextBuffer, equation: TextRun, *, inline: bool) -> None:
    symbol = "$" if inline else "$$"
    buf.write(symbol)
    buf.write((equation.content or "").rstrip())
    buf.write(symbol)


def write_mention_doc(buf: TextBuffer, mention: MentionDoc) -> None:
    buf.write(f"[{mention.title}]({unquote(mention.token)})")


def write_text_element(
    buf: TextBuffer,
    element: TextElement,
    *,
    inline: bool,
    verbatim: bool = False,
    previous: Wrapper | None = None,
) -> Wrapper | None:
    """写入一个行内元素；返回文本片段的样式包裹，其它元素返回 None。"""
    if element.text_run is not None:
        return write_text_run(buf, element.text_run, verbatim=verbatim, previous=previous)
    if element.equation is not None:
        write_equation(buf, element.equation, inline=inline)
    elif element.mention_doc is not None:
        write_mention_doc(buf, element.mention_doc)
    return None


def render_elements(elements: list[TextElement], *, verbatim: bool = False) -> str:
    buf = TextBuffer()
    inline = len(elements) > 1
    previous: Wrapper | None = None
    for element in elements:
        previous = write_text_element(
            buf, element, inline=inline, verbatim=verbatim, previous=previous
        )
    return buf.getvalue()


def render_text_block(text_block: TextBlock | None, *, verbatim: bool = False) -> str:
    if text_block is None or not text_block.elements:
        return ""
    text = render_elements(text_block.elements, verbatim=verbatim)
    return f"{text}\n" if text else ""


def title_text(text_block: TextBlock | None) -> str:
    if text_block is None:
        return ""
    return render_elements(text_block.elements).strip()


__all__ = [
    "title_text",
    "render_elements",
    "render_text_block",
    "write_equation",
    "write_mention_doc",
    "write_text_element",
    "write_text_run",
]
