import httpx
import pytest

from feishu_md.core.config import AppConfig
from feishu_md.services.api_counter import ApiCallCounter
from feishu_md.services.auth_service import TENANT_TOKEN_PATH, AuthError, AuthService


class FakeAsyncClient:
    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None):
        self._response = response
        self._exc = exc
        self.posts: list[tuple[str, dict[str, str]]] = []

    async def post(self, url: str, json: dict[str, str]):
        self.posts.append((url, json))
        if self._exc:
            raise self._exc
        return self._response


def _config(**overrides) -> AppConfig:
    values = {"app_id": "cli_app", "app_secret": "secret", "endpoint": "https://open.feishu.cn/"}
    values.update(overrides)
    return AppConfig(**values)


@pytest.mark.asyncio
async def test_tenant_token_is_fetched_once_and_cached() -> None:
    http_client = FakeAsyncClient(
        httpx.Response(200, json={"code": 0, "tenant_access_token": "t-123", "expire": 7200})
    )
    counter = ApiCallCounter()
    service = AuthService(_config(), counter=counter, http_client=http_client)  # type: ignore[arg-type]

    assert await service.get_valid_access_token() == "t-123"
    assert await service.get_valid_access_token() == "t-123"

    assert len(http_client.posts) == 1
    url, payload = http_client.posts[0]
    assert url == f"https://open.feishu.cn{TENANT_TOKEN_PATH}"
    assert payload == {"app_id": "cli_app", "app_secret": "secret"}
    assert counter.snapshot()["auth"] == 1


@pytest.mark.asyncio
async def test_missing_credentials_raise_before_request() -> None:
    http_client = FakeAsyncClient(httpx.Response(200, json={"code": 0}))
    service = AuthService(_config(app_id=" "), http_client=http_client)  # type: ignore[arg-type]

    with pytest.raises(AuthError):
        await service.get_valid_access_token()
    assert http_client.posts == []


@pytest.mark.asyncio
async def test_error_code_raises_auth_error() -> None:
    http_client = FakeAsyncClient(httpx.Response(200, json={"code": 10003, "msg": "invalid param"}))
    service = AuthService(_config(), http_client=http_client)  # type: ignore[arg-type]

    with pytest.raises(AuthError, match="10003"):
        await service.fetch_tenant_access_token()


@pytest.mark.asyncio
async def test_http_failure_raises_auth_error() -> None:
    http_client = FakeAsyncClient(httpx.Response(503, text="unavailable"))
    service = AuthService(_config(), http_client=http_client)  # type: ignore[arg-type]

    with pytest.raises(AuthError, match="HTTP 503"):
        await service.fetch_tenant_access_token()


@pytest.mark.asyncio
async def test_network_error_is_wrapped() -> None:
    http_client = FakeAsyncClient(exc=httpx.ConnectError("boom"))
    service = AuthService(_config(), http_client=http_client)  # type: ignore[arg-type]

    with pytest.raises(AuthError, match="boom"):
        await service.fetch_tenant_access_token()


@pytest.mark.asyncio
async def test_missing_token_field_raises() -> None:
    http_client = FakeAsyncClient(httpx.Response(200, json={"code": 0}))
    service = AuthService(_config(), http_client=http_client)  # type: ignore[arg-type]

    with pytest.raises(AuthError):
        await service.fetch_tenant_access_token()
