"""远程模板库客户端单元测试."""

import json

import httpx
import pytest

from post_composer.models.template import Template
from post_composer.services.template_client import HttpTemplateStore
from post_composer.services.template_store import TemplateStore
from post_composer.utils.exceptions import TemplateSyncError

BASE_URL = "https://templates.example.com/api/templates"


class FakeTemplateServer:
    """内存中的模板库接口."""

    def __init__(self, wrap: bool = False):
        self.documents: list[dict] = []
        self.wrap = wrap
        self.requests: list[httpx.Request] = []

    def _reply(self) -> httpx.Response:
        body = {"success": True, "templates": self.documents} if self.wrap else self.documents
        return httpx.Response(200, json=body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return self._reply()
        payload = json.loads(request.content)
        if request.method == "POST":
            self.documents = [d for d in self.documents if d["id"] != payload["id"]] + [payload]
            return self._reply()
        if request.method == "DELETE":
            self.documents = [d for d in self.documents if d["id"] != payload["id"]]
            return self._reply()
        return httpx.Response(405)


def make_store(handler, **kwargs) -> HttpTemplateStore:
    return HttpTemplateStore(
        BASE_URL,
        transport=httpx.MockTransport(handler),
        retry_delay=0,
        **kwargs,
    )


class TestHttpTemplateStore:
    """HttpTemplateStore 测试类."""

    def test_protocol(self):
        assert isinstance(make_store(FakeTemplateServer()), TemplateStore)

    @pytest.mark.parametrize("wrap", [False, True])
    def test_get_post_get(self, wrap):
        """测试空集合保存一个模板后读取到一个."""
        server = FakeTemplateServer(wrap=wrap)
        with make_store(server) as store:
            assert store.list_templates() == []

            template = Template(name="促销")
            returned = store.upsert_template(template)

            assert [t.id for t in returned] == [template.id]
            assert [t.id for t in store.list_templates()] == [template.id]

    def test_post_overwrites_by_id(self):
        server = FakeTemplateServer()
        store = make_store(server)
        template = Template(name="促销")
        store.upsert_template(template)
        store.upsert_template(template.model_copy(update={"name": "新名称"}))

        templates = store.list_templates()
        assert [t.name for t in templates] == ["新名称"]

    def test_delete_sends_id(self):
        server = FakeTemplateServer()
        store = make_store(server)
        template = Template(name="促销")
        store.upsert_template(template)

        assert store.delete_template(template.id) == []
        assert json.loads(server.requests[-1].content) == {"id": template.id}
        assert server.requests[-1].method == "DELETE"

    def test_base_url_trailing_slash(self):
        server = FakeTemplateServer()
        store = make_store(server)
        assert HttpTemplateStore(BASE_URL + "/").base_url == BASE_URL
        store.list_templates()
        assert str(server.requests[0].url) == BASE_URL

    def test_error_status(self):
        store = make_store(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(TemplateSyncError) as exc_info:
            store.list_templates()
        assert exc_info.value.status_code == 500

    def test_not_json(self):
        store = make_store(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(TemplateSyncError):
            store.list_templates()

    def test_success_false(self):
        store = make_store(lambda request: httpx.Response(200, json={"success": False, "error": "x"}))
        with pytest.raises(TemplateSyncError):
            store.upsert_template(Template(name="促销"))

    @pytest.mark.parametrize("body", [{"success": True}, {"templates": None}, None, "ok"])
    def test_missing_collection(self, body):
        """测试响应缺少模板集合时抛出同步错误而不是返回空集合."""
        store = make_store(lambda request: httpx.Response(200, json=body))
        with pytest.raises(TemplateSyncError):
            store.upsert_template(Template(name="促销"))
        with pytest.raises(TemplateSyncError):
            store.delete_template("tpl-1")

    def test_invalid_items_skipped(self):
        documents = [Template(name="有效").to_document(), {"broken": True}]
        store = make_store(lambda request: httpx.Response(200, json=documents))
        assert [t.name for t in store.list_templates()] == ["有效"]

    def test_connect_error_retried(self):
        """测试连接失败重试后仍失败时抛出同步错误."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        store = make_store(handler, max_retries=2)
        with pytest.raises(TemplateSyncError):
            store.list_templates()
        assert len(calls) == 3

    def test_recovers_after_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=[])

        store = make_store(handler, max_retries=1)
        assert store.list_templates() == []
        assert len(calls) == 2

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        store = make_store(handler, max_retries=0)
        with pytest.raises(TemplateSyncError):
            store.list_templates()

    def test_close(self):
        store = make_store(FakeTemplateServer())
        store.list_templates()
        store.close()
        store.close()
