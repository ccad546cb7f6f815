from __future__ import annotations

INDENT_UNIT = "   "


class TextBuffer:
    def __init__(self) -> None:
        self._parts: list[str] = []

    def __len__(self) -> int:
        return sum(len(part) for part in self._parts)

    def __str__(self) -> str:
        return self.getvalue()

    def write(self, content: "str | TextBuffer") -> None:
        self._parts.append(str(content))

    def writeln(self, content: str) -> None:
        self._parts.append(f"{content}\n")

    def write_indent(self, level: int) -> None:
        if level > 0:
            self._parts.append(INDENT_UNIT * level)

    def trim_last_if_ends_with(self, suffix: str) -> bool:
        """若缓冲区以 suffix 结尾则去掉它，返回是否去掉。"""
        if not suffix or not self._parts:
            return False
        current = "".join(self._parts)
        if not current.endswith(suffix):
            return False
        self._parts = [current[: -len(suffix)]]
        return True

    def getvalue(self, indent: int = 0) -> str:
        result = "".join(self._parts)
        if indent <= 0:
            return result
        prefix = INDENT_UNIT * indent
        return "\n".join(
            f"{prefix}{line}" if line.strip() else line for line in result.split("\n")
        )


def trim_last_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def escape_html_tags(text: str) -> str:
    return text.replace("<", "&lt;").replace(">", "&gt;")


__all__ = ["INDENT_UNIT", "TextBuffer", "escape_html_tags", "trim_last_newline"]
