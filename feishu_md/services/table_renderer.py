from __future__ import annotations

from typing import Callable

from feishu_md.services.block_model import TableBlock, TableMergeInfo
from feishu_md.services.html_bridge import markdown_to_html
from feishu_md.services.text_buffer import TextBuffer, trim_last_newline

# 列宽超过该值时改用 HTML 表格以保留宽度
COMPLEX_COLUMN_WIDTH = 100

CellRenderer = Callable[[str], "str | None"]


def is_complex_table(table: TableBlock) -> bool:
    prop = table.property
    has_merge = any(info.row_span > 1 or info.col_span > 1 for info in prop.merge_info)
    has_wide_column = any(width > COMPLEX_COLUMN_WIDTH for width in prop.column_width)
    return has_merge or has_wide_column


def covered_cells(merge_info: list[TableMergeInfo], column_size: int) -> set[int]:
    """被合并单元格覆盖（不单独输出）的单元格下标。"""
    covered: set[int] = set()
    for index, info in enumerate(merge_info):
        if info.row_span <= 1 and info.col_span <= 1:
            continue
        for row_offset in range(max(info.row_span, 1)):
            for col_offset in range(max(info.col_span, 1)):
                if row_offset == 0 and col_offset == 0:
                    continue
                covered.add(index + row_offset * column_size + col_offset)
    return covered


def _span_attrs(info: TableMergeInfo | None) -> str:
    if info is None:
        return ""
    attrs: list[str] = []
    if info.row_span > 1:
        attrs.append(f'rowspan="{info.row_span}"')
    if info.col_span > 1:
        attrs.append(f'colspan="{info.col_span}"')
    return f" {' '.join(attrs)}" if attrs else ""


class TableRenderer:
    def __init__(
        self,
        render_cell: CellRenderer,
        to_html: Callable[[str], str] = markdown_to_html,
    ) -> None:
        self._render_cell = render_cell
        self._to_html = to_html

    def render(self, table: TableBlock) -> str:
        if table.property.column_size <= 0:
            return ""
        if is_complex_table(table):
            return self.render_html(table)
        return self.render_markdown(table)

    def _collect_rows(self, table: TableBlock, format_cell: Callable[[str], str]) -> list[list[str]]:
        column_size = table.property.column_size
        rows: list[list[str]] = []
        for index, cell_id in enumerate(table.cells):
            rendered = self._render_cell(cell_id)
            if rendered is None:
                continue
            row_index = index // column_size
            while len(rows) <= row_index:
                rows.append([])
            rows[row_index].append(format_cell(rendered))
        return rows

    def render_markdown(self, table: TableBlock) -> str:
        prop = table.property
        rows = self._collect_rows(
            table, lambda text: trim_last_newline(text).replace("\n", " ")
        )

        head: list[str] = []
        if prop.header_row and rows:
            head = rows.pop(0)

        buf = TextBuffer()
        buf.write("|")
        for index in range(prop.column_size):
            buf.write(head[index] if index < len(head) and head[index] else " ")
            buf.write("|")
        buf.write("\n")

        buf.write("|")
        buf.write("---|" * prop.column_size)
        buf.write("\n")

        for row in rows:
            buf.write("|")
            for cell in row:
                buf.write(cell)
                buf.write("|")
            buf.write("\n")
        return buf.getvalue()

    def render_html(self, table: TableBlock) -> str:
        prop = table.property
        rows = self._collect_rows(table, lambda text: self._to_html(text).strip())
        merge_info = prop.merge_info
        covered = covered_cells(merge_info, prop.column_size)

        attrs: list[str] = []
        if prop.header_column:
            attrs.append('header_column="1"')
        if prop.header_row:
            attrs.append('header_row="1"')
        attr_html = f" {' '.join(attrs)}" if attrs else ""

        buf = TextBuffer()
        buf.writeln(f"<table{attr_html}>")
        buf.writeln("  <colgroup>")
        for index in range(prop.column_size):
            width = prop.column_width[index] if index < len(prop.column_width) else 0
            width_attr = f' width="{width}"' if width else ""
            buf.writeln(f"    <col{width_attr} />")
        buf.writeln("  </colgroup>")

        cell_index = 0

        def write_cell(cell: str, tag: str) -> None:
            nonlocal cell_index
            if cell_index not in covered:
                info = merge_info[cell_index] if cell_index < len(merge_info) else None
                buf.write(f"<{tag}{_span_attrs(info)}>{cell}</{tag}>")
            cell_index += 1

        if prop.header_row:
            head = rows.pop(0) if rows else []
            buf.writeln("  <thead>")
            buf.write("    <tr>")
            for index in range(prop.column_size):
                write_cell(head[index] if index < len(head) else "", "th")
            buf.writeln("</tr>")
            buf.writeln("  </thead>")

        buf.writeln("  <tbody>")
        for row in rows:
            buf.write("    <tr>")
            for cell in row:
                write_cell(cell, "td")
            buf.writeln("</tr>")
        buf.writeln("  </tbody>")
        buf.writeln("</table>")
        return buf.getvalue()


__all__ = [
    "COMPLEX_COLUMN_WIDTH",
    "TableRenderer",
    "covered_cells",
    "is_complex_table",
]
