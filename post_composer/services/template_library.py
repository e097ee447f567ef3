"""模板列表管理.

编辑器使用的模板列表，以全局模板库为准，本地缓存作为降级备份：

- 刷新时优先读取全局模板库，失败则回退到本地缓存
- 保存、删除总是先作用于内存列表和本地缓存，再同步到全局模板库；
  同步失败时改动保留在本地，并返回提示
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from post_composer.models.layout import LayoutModel
from post_composer.models.template import Template
from post_composer.services.template_codec import to_template
from post_composer.services.template_store import JsonTemplateStore, TemplateStore, remove, upsert
from post_composer.utils.error_messages import Notice
from post_composer.utils.exceptions import InvalidInputError, TemplateStoreError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class SyncOutcome:
    """一次模板操作的结果.

    Attributes:
        synced: 是否已同步到全局模板库
        notice: 给用户的提示
        templates: 操作后的模板列表
    """

    synced: bool
    notice: Notice
    templates: list[Template] = field(default_factory=list)


class TemplateLibrary:
    """模板列表.

    Example:
        >>> library = TemplateLibrary(HttpTemplateStore(url), JsonTemplateStore(cache_path))
        >>> library.refresh()
        >>> template = library.create_template(layout, "春季促销")
        >>> outcome = library.save(template)
        >>> outcome.synced
        True
    """

    def __init__(
        self,
        remote: TemplateStore,
        cache: Optional[JsonTemplateStore] = None,
    ) -> None:
        """初始化.

        Args:
            remote: 全局模板库
            cache: 本地缓存，为 None 时只保留在内存
        """
        self._remote = remote
        self._cache = cache
        self._templates: list[Template] = []
        # 保存、删除、刷新可能在不同的后台线程执行，依次进行
        self._lock = threading.RLock()

    @property
    def templates(self) -> list[Template]:
        with self._lock:
            return list(self._templates)

    def get(self, template_id: str) -> Optional[Template]:
        with self._lock:
            for template in self._templates:
                if template.id == template_id:
                    return template
        return None

    def _write_cache(self) -> None:
        if self._cache is None:
            return
        try:
            self._cache.replace_all(self._templates)
        except TemplateStoreError as e:
            logger.warning(f"本地模板缓存写入失败: {e}")

    def refresh(self) -> SyncOutcome:
        """从全局模板库重新加载，失败时使用本地缓存."""
        with self._lock:
            try:
                self._templates = self._remote.list_templates()
            except TemplateStoreError as e:
                logger.warning(f"全局模板库读取失败，使用本地缓存: {e}")
                self._templates = self._cache.list_templates() if self._cache else []
                return SyncOutcome(
                    synced=False,
                    notice=Notice.warning("模板库同步失败", "已加载本地缓存的模板"),
                    templates=self.templates,
                )

            self._write_cache()
            logger.info(f"已加载 {len(self._templates)} 个模板")
            return SyncOutcome(
                synced=True,
                notice=Notice.info("模板已加载", f"共 {len(self._templates)} 个模板"),
                templates=self.templates,
            )

    def create_template(
        self,
        layout: LayoutModel,
        name: str,
        background_image: Optional[str] = None,
        product_image: Optional[str] = None,
        template_id: Optional[str] = None,
    ) -> Template:
        """从版面创建模板.

        template_id 对应已有模板时沿用其ID和创建时间（覆盖保存）。

        Raises:
            InvalidInputError: 名称为空
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("请输入模板名称", field="name")

        existing = self.get(template_id) if template_id else None
        return to_template(
            layout,
            name,
            background_image=background_image,
            product_image=product_image,
            template_id=existing.id if existing else None,
            created_at=existing.created_at if existing else None,
        )

    def save(self, template: Template) -> SyncOutcome:
        """保存模板（按 ID 覆盖或追加）."""
        with self._lock:
            self._templates = upsert(self._templates, template)
            self._write_cache()

            try:
                self._templates = self._remote.upsert_template(template)
            except TemplateStoreError as e:
                logger.warning(f"模板同步失败，仅保存在本地: {template.name}, {e}")
                return SyncOutcome(
                    synced=False,
                    notice=Notice.warning("全局同步失败", f"模板“{template.name}”已保存在本地"),
                    templates=self.templates,
                )

            self._write_cache()
            logger.info(f"模板已保存: {template.name}")
            return SyncOutcome(
                synced=True,
                notice=Notice.success("模板已保存", f"模板“{template.name}”已同步"),
                templates=self.templates,
            )

    def delete(self, template_id: str) -> SyncOutcome:
        """删除模板."""
        with self._lock:
            template = self.get(template_id)
            name = template.name if template else template_id
            self._templates = remove(self._templates, template_id)
            self._write_cache()

            try:
                self._templates = self._remote.delete_template(template_id)
            except TemplateStoreError as e:
                logger.warning(f"模板删除同步失败，仅在本地删除: {name}, {e}")
                return SyncOutcome(
                    synced=False,
                    notice=Notice.warning("全局同步失败", f"模板“{name}”仅在本地删除"),
                    templates=self.templates,
                )

            self._write_cache()
            logger.info(f"模板已删除: {name}")
            return SyncOutcome(
                synced=True,
                notice=Notice.success("模板已删除", f"模板“{name}”已删除"),
                templates=self.templates,
            )
