"""JSON 模板库单元测试."""

import json
import threading

import pytest

from post_composer.models.template import Template
from post_composer.services.template_store import (
    JsonTemplateStore,
    TemplateStore,
    parse_collection,
    remove,
    upsert,
)
from post_composer.utils.exceptions import TemplateStoreError


@pytest.fixture
def store(tmp_path):
    return JsonTemplateStore(tmp_path / "templates.json")


class TestParseCollection:
    """集合解析测试类."""

    @pytest.mark.parametrize("data", [None, {}, "text", 42])
    def test_non_list(self, data):
        assert parse_collection(data) == []

    def test_skips_invalid_items(self):
        valid = Template(name="有效").to_document()
        templates = parse_collection([valid, {"name": ""}, "junk"])
        assert [t.name for t in templates] == ["有效"]


class TestCollectionHelpers:
    """集合辅助函数测试类."""

    def test_upsert_replaces_by_id(self):
        a = Template(name="A")
        b = Template(name="B")
        a2 = a.model_copy(update={"name": "A2"})

        result = upsert([a, b], a2)

        assert [t.name for t in result] == ["A2", "B"]

    def test_upsert_appends(self):
        a = Template(name="A")
        original = [a]
        result = upsert(original, Template(name="B"))
        assert len(result) == 2
        assert original == [a]

    def test_remove_missing(self):
        a = Template(name="A")
        assert remove([a], "tpl-missing") == [a]


class TestJsonTemplateStore:
    """JsonTemplateStore 测试类."""

    def test_protocol(self, store):
        assert isinstance(store, TemplateStore)

    def test_missing_file(self, store):
        assert store.list_templates() == []

    def test_get_post_get(self, store):
        """测试空集合保存一个模板后读取到一个."""
        assert store.list_templates() == []
        template = Template(name="促销")

        returned = store.upsert_template(template)

        assert returned == [template]
        assert store.list_templates() == [template]

    def test_overwrite_by_id(self, store):
        template = Template(name="促销")
        store.upsert_template(template)
        store.upsert_template(template.model_copy(update={"name": "新名称"}))

        templates = store.list_templates()
        assert len(templates) == 1
        assert templates[0].name == "新名称"

    def test_delete(self, store):
        a, b = Template(name="A"), Template(name="B")
        store.upsert_template(a)
        store.upsert_template(b)

        assert store.delete_template(a.id) == [b]
        assert store.delete_template("tpl-missing") == [b]

    def test_corrupt_file(self, store):
        store.path.write_text("{broken", encoding="utf-8")
        assert store.list_templates() == []

    @pytest.mark.parametrize("content", [b"\xff\xfe", b"[\xff\xfe garbage"])
    def test_invalid_encoding(self, store, content):
        """测试非 UTF-8 内容按空集合处理."""
        store.path.write_bytes(content)
        assert store.list_templates() == []

    def test_upsert_over_invalid_encoding(self, store):
        """测试损坏的文件在保存时被有效集合替换."""
        store.path.write_bytes(b"\xff\xfe")
        template = Template(name="促销")

        assert store.upsert_template(template) == [template]
        assert store.delete_template(template.id) == []

    def test_non_array_file(self, store):
        store.path.write_text(json.dumps({"templates": []}), encoding="utf-8")
        assert store.list_templates() == []

    def test_file_is_json_array(self, store):
        store.upsert_template(Template(name="促销"))
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert data[0]["name"] == "促销"

    def test_creates_parent_dir(self, tmp_path):
        store = JsonTemplateStore(tmp_path / "nested" / "dir" / "templates.json")
        store.upsert_template(Template(name="促销"))
        assert store.path.exists()

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        store = JsonTemplateStore(blocker / "templates.json")

        with pytest.raises(TemplateStoreError):
            store.upsert_template(Template(name="促销"))

    def test_replace_all(self, store):
        store.upsert_template(Template(name="旧"))
        new = [Template(name="A"), Template(name="B")]
        store.replace_all(new)
        assert store.list_templates() == new

    def test_no_temp_files_left(self, store):
        store.upsert_template(Template(name="A"))
        store.upsert_template(Template(name="B"))
        assert [p.name for p in store.path.parent.iterdir()] == ["templates.json"]

    def test_concurrent_upserts(self, store):
        """测试多个线程同时保存时所有模板都被写入."""
        templates = [Template(name=f"T{i}") for i in range(40)]
        barrier = threading.Barrier(len(templates))
        errors = []

        def save(template):
            barrier.wait()
            try:
                store.upsert_template(template)
            except TemplateStoreError as e:
                errors.append(e)

        threads = [threading.Thread(target=save, args=(t,)) for t in templates]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert {t.id for t in store.list_templates()} == {t.id for t in templates}
