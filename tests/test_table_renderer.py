from feishu_md.services.block_model import TableBlock, TableMergeInfo
from feishu_md.services.table_renderer import TableRenderer, covered_cells, is_complex_table


def _table(**prop) -> TableBlock:
    cells = prop.pop("cells")
    return TableBlock.model_validate({"cells": cells, "property": prop})


def _renderer(contents: dict[str, str]) -> TableRenderer:
    return TableRenderer(lambda cell_id: contents.get(cell_id), to_html=lambda text: text.strip())


def test_is_complex_table_detects_merge_and_width() -> None:
    assert not is_complex_table(_table(cells=[], column_size=1, column_width=[100]))
    assert is_complex_table(_table(cells=[], column_size=1, column_width=[101]))
    assert is_complex_table(
        _table(cells=[], column_size=2, merge_info=[{"row_span": 1, "col_span": 2}])
    )


def test_covered_cells_cover_full_rectangle() -> None:
    merge_info = [TableMergeInfo(row_span=2, col_span=2)] + [TableMergeInfo()] * 8

    assert covered_cells(merge_info, column_size=3) == {1, 3, 4}


def test_markdown_table_joins_multiline_cells() -> None:
    renderer = _renderer({"a": "第一行\n第二行\n", "b": "B\n"})
    table = _table(cells=["a", "b"], column_size=2)

    assert renderer.render(table) == "| | |\n|---|---|\n|第一行 第二行|B|\n"


def test_missing_cells_are_skipped() -> None:
    renderer = _renderer({"a": "A\n", "b": "B\n"})
    table = _table(cells=["a", "b", "ghost"], column_size=3, header_row=True)

    assert renderer.render(table) == "|A|B| |\n|---|---|---|\n"


def test_zero_columns_render_nothing() -> None:
    renderer = _renderer({"a": "A\n"})

    assert renderer.render(_table(cells=["a"], column_size=0)) == ""


def test_html_table_skips_cells_under_column_span() -> None:
    renderer = _renderer({"a": "A", "b": "B", "c": "C", "d": "D"})
    table = _table(
        cells=["a", "b", "c", "d"],
        column_size=2,
        header_column=True,
        merge_info=[
            {"row_span": 1, "col_span": 2},
            {"row_span": 1, "col_span": 1},
            {"row_span": 1, "col_span": 1},
            {"row_span": 1, "col_span": 1},
        ],
    )

    html = renderer.render(table)

    assert html.startswith('<table header_column="1">\n')
    assert "    <col />\n    <col />\n" in html
    assert '    <tr><td colspan="2">A</td></tr>\n' in html
    assert "    <tr><td>C</td><td>D</td></tr>\n" in html
    assert ">B<" not in html
