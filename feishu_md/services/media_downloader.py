from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Iterable

import httpx
from loguru import logger

from feishu_md.services.api_counter import ApiCallCounter
from feishu_md.services.feishu_client import FeishuClient
from feishu_md.services.file_writer import FileWriter
from feishu_md.services.media_tokens import FileKind, FileToken

IMAGES_DIR_NAME = "images"
FILES_DIR_NAME = "files"

_IMAGE_EXTENSIONS = (
    ("png", ".png"),
    ("gif", ".gif"),
    ("webp", ".webp"),
    ("svg", ".svg"),
)


def media_extension(kind: FileKind, content_type: str | None = None) -> str:
    if kind == "image":
        lowered = (content_type or "").lower()
        for marker, extension in _IMAGE_EXTENSIONS:
            if marker in lowered:
                return extension
        return ".jpg"
    if kind == "board":
        return ".png"
    return ""


class MediaDownloader:
    def __init__(
        self,
        client: FeishuClient,
        writer: FileWriter | None = None,
        base_url: str = "https://open.feishu.cn",
        counter: ApiCallCounter | None = None,
    ) -> None:
        self._client = client
        self._writer = writer or FileWriter()
        self._base_url = base_url.rstrip("/")
        self._counter = counter or ApiCallCounter()

    async def download(self, file_token: FileToken, output_dir: Path) -> str | None:
        """下载单个媒体文件，返回相对 output_dir 的路径；失败返回 None。"""
        await self._client.throttle()
        url = f"{self._base_url}/open-apis/drive/v1/medias/{file_token.token}/download"
        logger.debug("下载 {}: {}", file_token.kind, url)
        self._counter.increment("media")
        response = await self._client.request("GET", url)
        if response.status_code >= 400:
            logger.warning("下载失败 ({}): HTTP {}", file_token.token, response.status_code)
            return None

        extension = media_extension(file_token.kind, response.headers.get("content-type"))
        sub_dir = IMAGES_DIR_NAME if file_token.is_image else FILES_DIR_NAME
        relative = PurePosixPath(sub_dir) / f"{file_token.token}{extension}"
        self._writer.write_bytes(output_dir / sub_dir / relative.name, response.content)
        return relative.as_posix()

    async def download_all(
        self, file_tokens: Iterable[FileToken], output_dir: Path
    ) -> dict[str, str]:
        tokens = list(file_tokens)
        token_to_path: dict[str, str] = {}
        failed = 0
        for index, file_token in enumerate(tokens, start=1):
            if file_token.token in token_to_path:
                continue
            try:
                local_path = await self.download(file_token, output_dir)
            except httpx.HTTPError as exc:
                logger.warning("下载异常 ({}): {}", file_token.token, exc)
                local_path = None
            if local_path is None:
                failed += 1
            else:
                token_to_path[file_token.token] = local_path
            logger.debug("下载进度: {}/{}", index, len(tokens))
        if failed:
            logger.warning("媒体下载完成，失败 {} 个", failed)
        return token_to_path


__all__ = [
    "FILES_DIR_NAME",
    "IMAGES_DIR_NAME",
    "MediaDownloader",
    "media_extension",
]
