from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal, Mapping

FileKind = Literal["image", "file", "board"]


@dataclass(frozen=True)
class FileToken:
    token: str
    kind: FileKind

    @property
    def is_image(self) -> bool:
        return self.kind in ("image", "board")


class MediaTokenCollector:
    def __init__(self) -> None:
        self._tokens: list[FileToken] = []

    def add(self, kind: FileKind, token: str) -> None:
        if token:
            self._tokens.append(FileToken(token=token, kind=kind))

    @property
    def tokens(self) -> list[FileToken]:
        return list(self._tokens)

    def __iter__(self) -> Iterator[FileToken]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)


def replace_file_tokens(markdown: str, token_to_path: Mapping[str, str]) -> str:
    """将已下载的本地路径替换回 <img src> 与 Markdown 链接中。"""
    result = markdown
    for token, local_path in token_to_path.items():
        result = result.replace(f'src="{token}"', f'src="{local_path}"')
        result = result.replace(f"]({token})", f"]({local_path})")
    return result


__all__ = ["FileKind", "FileToken", "MediaTokenCollector", "replace_file_tokens"]
