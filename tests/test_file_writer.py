from pathlib import Path

from feishu_md.services.file_writer import FileWriter


def test_write_markdown_creates_parent_and_keeps_lf(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "doc.md"
    content = "# 标题\n\n正文\n"

    FileWriter.write_markdown(target, content)

    assert target.read_bytes() == content.encode("utf-8")


def test_write_bytes_creates_parent(tmp_path: Path) -> None:
    target = tmp_path / "images" / "a.png"

    FileWriter.write_bytes(target, b"png")

    assert target.read_bytes() == b"png"


def test_write_document_uses_sanitized_title(tmp_path: Path) -> None:
    target = FileWriter.write_document(tmp_path / "out", "周报: 第1周", "# 周报\n")

    assert target == tmp_path / "out" / "周报__第1周.md"
    assert target.read_bytes() == "# 周报\n".encode("utf-8")
