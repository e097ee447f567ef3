"""远程模板库客户端.

对接模板库 HTTP 接口：

- ``GET  {base_url}``            → 模板数组
- ``POST {base_url}`` 模板文档    → 更新后的集合
- ``DELETE {base_url}`` {"id"}   → 更新后的集合

响应可以是裸数组，也可以是 ``{"success": true, "templates": [...]}``。
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from post_composer.models.template import Template
from post_composer.services.template_store import parse_collection
from post_composer.utils.constants import TEMPLATE_STORE_MAX_RETRIES, TEMPLATE_STORE_TIMEOUT
from post_composer.utils.exceptions import TemplateSyncError
from post_composer.utils.logger import setup_logger
from post_composer.utils.retry import retry

logger = setup_logger(__name__)


class HttpTemplateStore:
    """远程模板库.

    连接错误和超时会按配置重试，最终失败或服务端返回非 2xx 时抛出
    TemplateSyncError。

    Example:
        >>> store = HttpTemplateStore("https://example.com/api/templates")
        >>> templates = store.list_templates()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = TEMPLATE_STORE_TIMEOUT,
        max_retries: int = TEMPLATE_STORE_MAX_RETRIES,
        retry_delay: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """初始化客户端.

        Args:
            base_url: 模板库接口地址
            timeout: 请求超时（秒）
            max_retries: 连接失败时的重试次数
            retry_delay: 首次重试前的等待（秒）
            transport: 自定义传输层（测试用）
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def client(self) -> httpx.Client:
        """获取 HTTP 客户端（延迟初始化）."""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout, transport=self._transport)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpTemplateStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _send(self, method: str, json_body: Any = None) -> httpx.Response:
        send = retry(
            max_retries=self._max_retries,
            delay=self._retry_delay,
            exceptions=(httpx.ConnectError, httpx.TimeoutException),
        )(self.client.request)
        try:
            return send(method, self._base_url, json=json_body)
        except httpx.TimeoutException as e:
            raise TemplateSyncError(f"模板库请求超时: {e}") from e
        except httpx.HTTPError as e:
            raise TemplateSyncError(f"模板库连接失败: {e}") from e

    def _request(self, method: str, json_body: Any = None) -> list[Template]:
        """发送请求并解析返回的模板集合.

        Raises:
            TemplateSyncError: 网络错误、非 2xx 响应或响应不是 JSON
        """
        response = self._send(method, json_body)

        if not response.is_success:
            logger.error(f"模板库返回错误: {method} {response.status_code}")
            raise TemplateSyncError(
                f"模板库返回错误: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TemplateSyncError(f"模板库响应不是有效的 JSON: {e}") from e

        if isinstance(data, dict):
            if data.get("success") is False:
                raise TemplateSyncError(f"模板库操作失败: {data.get('error', '未知错误')}")
            data = data.get("templates")

        # 缺少模板集合的响应不能当作空集合，否则会清空本地列表
        if not isinstance(data, list):
            logger.error(f"模板库响应缺少模板集合: {method}")
            raise TemplateSyncError("模板库响应缺少模板集合")

        return parse_collection(data)

    def list_templates(self) -> list[Template]:
        templates = self._request("GET")
        logger.debug(f"远程模板库: {len(templates)} 个模板")
        return templates

    def upsert_template(self, template: Template) -> list[Template]:
        return self._request("POST", template.to_document())

    def delete_template(self, template_id: str) -> list[Template]:
        return self._request("DELETE", {"id": template_id})
