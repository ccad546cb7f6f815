from __future__ import annotations

import re

INVALID_FILENAME_CHARS = set('<>:"/\\|?*')
WINDOWS_RESERVED_NAMES = {
    "CON",
    "PRN",
    "AUX",
    "NUL",
    *{f"COM{i}" for i in range(1, 10)},
    *{f"LPT{i}" for i in range(1, 10)},
}
_WHITESPACE = re.compile(r"\s+")


def sanitize_filename(name: str, *, replacement: str = "_") -> str:
    """将文档标题转换为各平台都合法的文件名。"""
    sanitized = "".join(
        replacement if (ord(ch) < 32 or ch in INVALID_FILENAME_CHARS) else ch
        for ch in str(name).strip()
    )
    sanitized = _WHITESPACE.sub(replacement, sanitized)
    sanitized = sanitized.rstrip(" .")
    if sanitized in {"", ".", ".."}:
        sanitized = replacement
    if sanitized.upper() in WINDOWS_RESERVED_NAMES:
        sanitized = f"{sanitized}_"
    return sanitized


def markdown_filename(title: str) -> str:
    return f"{sanitize_filename(title)}.md"


__all__ = [
    "INVALID_FILENAME_CHARS",
    "WINDOWS_RESERVED_NAMES",
    "markdown_filename",
    "sanitize_filename",
]
