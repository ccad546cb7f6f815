from __future__ import annotations

import asyncio
from typing import Any

import httpx
from loguru import logger

from feishu_md.services.auth_service import AuthService

# 飞书频控错误码
FREQUENCY_LIMIT_CODES = {99991400, 1061045}
# 飞书 API 限制每分钟 100 次请求
DEFAULT_REQUEST_DELAY = 0.35


class FeishuApiError(RuntimeError):
    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class FeishuClient:
    def __init__(
        self,
        auth_service: AuthService,
        max_retries: int = 5,
        backoff_base: float = 0.5,
        backoff_factor: float = 2.0,
        request_delay: float = DEFAULT_REQUEST_DELAY,
    ) -> None:
        self._auth_service = auth_service
        self._client = httpx.AsyncClient(timeout=30.0)
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._backoff_factor = backoff_factor
        self._request_delay = request_delay

    async def throttle(self) -> None:
        if self._request_delay > 0:
            await asyncio.sleep(self._request_delay)

    async def request(self, method: str, url: str, **kwargs):
        token = await self._auth_service.get_valid_access_token()
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {token}"
        return await self._client.request(method, url, headers=headers, **kwargs)

    async def request_with_retry(self, method: str, url: str, **kwargs):
        max_retries = kwargs.pop("max_retries", self._max_retries)
        for attempt in range(max_retries):
            response = await self.request(method, url, **kwargs)
            if response.status_code == 429:
                await self._sleep_backoff(attempt, response)
                continue
            try:
                payload = response.json()
            except ValueError:
                return response
            if isinstance(payload, dict) and payload.get("code") in FREQUENCY_LIMIT_CODES:
                await self._sleep_backoff(attempt, response)
                continue
            return response
        return response

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        await self.throttle()
        logger.debug("GET {} params={}", url, params)
        response = await self.request_with_retry("GET", url, params=params)
        if response.status_code >= 400:
            raise FeishuApiError(f"飞书 API 请求失败: HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise FeishuApiError(f"飞书 API 响应不是 JSON: {response.text[:200]}") from exc
        if not isinstance(payload, dict):
            raise FeishuApiError("飞书 API 响应格式错误")
        code = payload.get("code", 0)
        if code != 0:
            raise FeishuApiError(f"飞书 API 错误: [{code}] {payload.get('msg')}", code=code)
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    async def close(self) -> None:
        await self._client.aclose()

    async def _sleep_backoff(self, attempt: int, response: httpx.Response) -> None:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                delay = float(retry_after)
                if delay > 0:
                    await asyncio.sleep(delay)
                    return
            except ValueError:
                pass
        delay = self._backoff_base * (self._backoff_factor**attempt)
        logger.debug("触发频控，{} 秒后重试 (attempt={})", delay, attempt + 1)
        await asyncio.sleep(delay)


__all__ = ["DEFAULT_REQUEST_DELAY", "FeishuApiError", "FeishuClient"]
