from __future__ import annotations

from pathlib import Path

from loguru import logger

from feishu_md.services.path_sanitizer import markdown_filename


class FileWriter:
    @staticmethod
    def write_document(output_dir: Path, title: str, markdown: str) -> Path:
        """按文档标题生成文件名并写入输出目录，返回写入路径。"""
        target = Path(output_dir) / markdown_filename(title)
        FileWriter.write_markdown(target, markdown)
        logger.debug("写入 Markdown: {} ({} 字符)", target, len(markdown))
        return target

    @staticmethod
    def write_markdown(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # 各平台统一输出 LF 换行
        with path.open("w", encoding="utf-8", newline="\n") as handle:
            handle.write(content)

    @staticmethod
    def write_bytes(path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
