from __future__ import annotations

import httpx
from loguru import logger

from feishu_md.core.config import AppConfig
from feishu_md.services.api_counter import ApiCallCounter

TENANT_TOKEN_PATH = "/open-apis/auth/v3/tenant_access_token/internal"


class AuthError(RuntimeError):
    pass


class AuthService:
    """每次运行获取一次 tenant_access_token 并复用。"""

    def __init__(
        self,
        config: AppConfig,
        counter: ApiCallCounter | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._counter = counter or ApiCallCounter()
        self._http_client = http_client
        self._token: str | None = None

    @staticmethod
    def _require_config(value: str, label: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise AuthError(f"{label} 未配置")
        return cleaned

    async def get_valid_access_token(self) -> str:
        if self._token is None:
            self._token = await self.fetch_tenant_access_token()
        return self._token

    async def fetch_tenant_access_token(self) -> str:
        app_id = self._require_config(self._config.app_id, "app_id")
        app_secret = self._require_config(self._config.app_secret, "app_secret")
        url = f"{self._config.endpoint.rstrip('/')}{TENANT_TOKEN_PATH}"
        payload = {"app_id": app_id, "app_secret": app_secret}
        logger.debug("POST {}", url)

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=15.0) as client:
                    response = await client.post(url, json=payload)
        except httpx.RequestError as exc:
            raise AuthError(f"获取 tenant_access_token 失败: {exc}") from exc
        self._counter.increment("auth")

        if response.status_code >= 400:
            raise AuthError(
                f"获取 tenant_access_token 失败: HTTP {response.status_code} {response.reason_phrase}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise AuthError(f"Token 响应不是 JSON：{response.text[:200]}") from exc

        code = data.get("code") if isinstance(data, dict) else None
        if code != 0:
            message = data.get("msg") if isinstance(data, dict) else data
            raise AuthError(f"获取 tenant_access_token 失败: [{code}] {message}")
        token = data.get("tenant_access_token")
        if not isinstance(token, str) or not token:
            raise AuthError("Token 响应缺少 tenant_access_token")
        logger.debug("tenant_access_token 有效期 {} 秒", data.get("expire"))
        return token


__all__ = ["AuthError", "AuthService", "TENANT_TOKEN_PATH"]
