from __future__ import annotations

from functools import lru_cache

from markdown_it import MarkdownIt


@lru_cache(maxsize=1)
def _markdown_parser() -> MarkdownIt:
    parser = MarkdownIt(
        "commonmark",
        {"html": True, "breaks": True, "xhtmlOut": True, "linkify": False},
    )
    parser.enable("table")
    parser.enable("strikethrough")
    return parser


def markdown_to_html(markdown: str) -> str:
    """Markdown 片段转 HTML，用于嵌入 callout、分栏等 HTML 容器。"""
    if not markdown.strip():
        return ""
    return _markdown_parser().render(markdown)


__all__ = ["markdown_to_html"]
