"""模板库存储.

模板集合以一个 JSON 数组整体存放：

- 读取：文件不存在或内容损坏时返回空列表，不向调用方报错
- 保存：按 ID 覆盖，不存在则追加，写回整个集合并返回更新后的集合
- 删除：按 ID 删除（不存在时不做修改），写回并返回更新后的集合
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable, Protocol, runtime_checkable

from pydantic import ValidationError

from post_composer.models.template import Template
from post_composer.utils.exceptions import TemplateStoreError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


@runtime_checkable
class TemplateStore(Protocol):
    """模板库接口."""

    def list_templates(self) -> list[Template]:
        ...

    def upsert_template(self, template: Template) -> list[Template]:
        ...

    def delete_template(self, template_id: str) -> list[Template]:
        ...


def parse_collection(data: Any) -> list[Template]:
    """解析模板集合文档.

    不是数组时视为空集合；单个无效模板被跳过。
    """
    if not isinstance(data, list):
        if data is not None:
            logger.warning(f"模板集合格式无效: {type(data).__name__}")
        return []

    templates = []
    for item in data:
        try:
            templates.append(Template.from_document(item))
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"跳过无效模板: {e}")
    return templates


def dump_collection(templates: Iterable[Template]) -> list[dict[str, Any]]:
    return [t.to_document() for t in templates]


def upsert(templates: list[Template], template: Template) -> list[Template]:
    """按 ID 覆盖或追加，返回新列表."""
    result = list(templates)
    for i, existing in enumerate(result):
        if existing.id == template.id:
            result[i] = template
            return result
    result.append(template)
    return result


def remove(templates: list[Template], template_id: str) -> list[Template]:
    """按 ID 删除，返回新列表."""
    return [t for t in templates if t.id != template_id]


class JsonTemplateStore:
    """基于 JSON 文件的模板库.

    Example:
        >>> store = JsonTemplateStore(Path("templates.json"))
        >>> store.list_templates()
        []
        >>> store.upsert_template(Template(name="促销"))
        [Template(...)]
    """

    def __init__(self, path: Path | str) -> None:
        """初始化.

        Args:
            path: 模板集合文件路径
        """
        self._path = Path(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> list[Template]:
        if not self._path.exists():
            return []
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            # ValueError 包括 JSON 语法错误和非 UTF-8 内容
            logger.warning(f"模板库文件无法读取，按空集合处理: {self._path}, {e}")
            return []
        return parse_collection(data)

    def _write(self, templates: list[Template]) -> None:
        """写回整个集合（先写临时文件再替换）.

        Raises:
            TemplateStoreError: 写入失败
        """
        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(dump_collection(templates), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            logger.error(f"保存模板库失败: {self._path}, {e}")
            raise TemplateStoreError(f"保存模板库失败: {e}") from e

    def list_templates(self) -> list[Template]:
        with self._lock:
            return self._read()

    def upsert_template(self, template: Template) -> list[Template]:
        """保存模板（按 ID 覆盖或追加）.

        Raises:
            TemplateStoreError: 写入失败
        """
        with self._lock:
            templates = upsert(self._read(), template)
            self._write(templates)
        logger.info(f"模板已保存: {template.name} ({template.id})")
        return templates

    def delete_template(self, template_id: str) -> list[Template]:
        """删除模板.

        Raises:
            TemplateStoreError: 写入失败
        """
        with self._lock:
            templates = remove(self._read(), template_id)
            self._write(templates)
        logger.info(f"模板已删除: {template_id}")
        return templates

    def replace_all(self, templates: list[Template]) -> None:
        """整体覆盖集合（本地缓存同步用）."""
        with self._lock:
            self._write(list(templates))
