from pathlib import Path

import httpx
import pytest

from feishu_md.services.api_counter import ApiCallCounter
from feishu_md.services.media_downloader import MediaDownloader, media_extension
from feishu_md.services.media_tokens import FileToken


class FakeClient:
    def __init__(self, responses: dict[str, httpx.Response | Exception]) -> None:
        self._responses = responses
        self.requests: list[tuple[str, str]] = []
        self.throttled = 0

    async def throttle(self) -> None:
        self.throttled += 1

    async def request(self, method: str, url: str, **kwargs):
        self.requests.append((method, url))
        token = url.split("/")[-2]
        response = self._responses[token]
        if isinstance(response, Exception):
            raise response
        return response


def test_media_extension() -> None:
    assert media_extension("image", "image/png") == ".png"
    assert media_extension("image", "image/webp") == ".webp"
    assert media_extension("image", None) == ".jpg"
    assert media_extension("board", "application/octet-stream") == ".png"
    assert media_extension("file", "application/pdf") == ""


@pytest.mark.asyncio
async def test_download_writes_image_under_images_dir(tmp_path: Path) -> None:
    client = FakeClient(
        {"img-1": httpx.Response(200, content=b"png-bytes", headers={"content-type": "image/png"})}
    )
    counter = ApiCallCounter()
    downloader = MediaDownloader(client, counter=counter)  # type: ignore[arg-type]

    relative = await downloader.download(FileToken(token="img-1", kind="image"), tmp_path)

    assert relative == "images/img-1.png"
    assert (tmp_path / "images" / "img-1.png").read_bytes() == b"png-bytes"
    assert client.requests == [
        ("GET", "https://open.feishu.cn/open-apis/drive/v1/medias/img-1/download")
    ]
    assert client.throttled == 1
    assert counter.snapshot()["media"] == 1


@pytest.mark.asyncio
async def test_download_all_skips_failures_and_duplicates(tmp_path: Path) -> None:
    client = FakeClient(
        {
            "img-1": httpx.Response(200, content=b"a", headers={"content-type": "image/gif"}),
            "file-1": httpx.Response(200, content=b"b"),
            "gone": httpx.Response(404, content=b""),
            "broken": httpx.ConnectError("reset"),
        }
    )
    downloader = MediaDownloader(client)  # type: ignore[arg-type]
    tokens = [
        FileToken(token="img-1", kind="image"),
        FileToken(token="img-1", kind="image"),
        FileToken(token="file-1", kind="file"),
        FileToken(token="gone", kind="image"),
        FileToken(token="broken", kind="board"),
    ]

    mapping = await downloader.download_all(tokens, tmp_path)

    assert mapping == {"img-1": "images/img-1.gif", "file-1": "files/file-1"}
    assert (tmp_path / "files" / "file-1").read_bytes() == b"b"
    assert len(client.requests) == 4
