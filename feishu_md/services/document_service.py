from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from feishu_md.services.api_counter import ApiCallCounter
from feishu_md.services.feishu_client import FeishuApiError, FeishuClient

BLOCK_PAGE_SIZE = 500


@dataclass(frozen=True)
class WikiNode:
    node_token: str
    obj_token: str
    obj_type: str
    title: str
    space_id: str = ""


@dataclass(frozen=True)
class DocumentInfo:
    document_id: str
    title: str
    revision_id: int | None = None


class DocumentService:
    def __init__(
        self,
        client: FeishuClient,
        base_url: str = "https://open.feishu.cn",
        counter: ApiCallCounter | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._counter = counter or ApiCallCounter()

    async def get_wiki_node(self, node_token: str) -> WikiNode:
        """将知识库 node_token 解析为实际文档的 obj_token。"""
        self._counter.increment("wiki")
        data = await self._client.get_json(
            f"{self._base_url}/open-apis/wiki/v2/spaces/get_node",
            params={"token": node_token},
        )
        node = data.get("node")
        if not isinstance(node, dict):
            raise FeishuApiError("知识库节点响应缺少 node")
        return WikiNode(
            node_token=str(node.get("node_token") or node_token),
            obj_token=str(node.get("obj_token") or ""),
            obj_type=str(node.get("obj_type") or ""),
            title=str(node.get("title") or ""),
            space_id=str(node.get("space_id") or ""),
        )

    async def get_document_info(self, document_id: str) -> DocumentInfo:
        self._counter.increment("doc")
        data = await self._client.get_json(
            f"{self._base_url}/open-apis/docx/v1/documents/{document_id}"
        )
        document = data.get("document") or {}
        revision = document.get("revision_id")
        return DocumentInfo(
            document_id=str(document.get("document_id") or document_id),
            title=str(document.get("title") or ""),
            revision_id=revision if isinstance(revision, int) else None,
        )

    async def list_blocks(self, document_id: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page_token: str | None = None
        page_num = 1
        while True:
            logger.debug("获取文档块（第 {} 页）...", page_num)
            params: dict[str, Any] = {
                "page_size": BLOCK_PAGE_SIZE,
                "document_revision_id": -1,
            }
            if page_token:
                params["page_token"] = page_token
            self._counter.increment("blocks")
            data = await self._client.get_json(
                f"{self._base_url}/open-apis/docx/v1/documents/{document_id}/blocks",
                params=params,
            )
            page_items = data.get("items", [])
            if isinstance(page_items, list):
                items.extend(page_items)
            if not data.get("has_more"):
                break
            page_token = data.get("page_token")
            if not page_token:
                break
            page_num += 1
        logger.debug("共获取到 {} 个文档块", len(items))
        return items


__all__ = ["BLOCK_PAGE_SIZE", "DocumentInfo", "DocumentService", "WikiNode"]
