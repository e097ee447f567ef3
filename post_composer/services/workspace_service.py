"""工作区持久化.

- 工作区状态：只保存一份版面快照（不含图片），仅在用户点击「保存状态」时覆盖
- 最近使用的商品图：按内容去重，最新的在前，超出上限时淘汰最旧的
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from post_composer.models.database import RecentImageRecord, WorkspaceStateRecord
from post_composer.models.layout import LayoutModel
from post_composer.services.database_service import DatabaseService
from post_composer.utils.constants import RECENT_GALLERY_SIZE
from post_composer.utils.image_utils import content_hash, data_url_to_bytes
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

WORKSPACE_KEY = "current"


class WorkspaceRepository:
    """工作区状态存储."""

    def __init__(self, db: DatabaseService) -> None:
        self._db = db

    def save_layout(self, layout: LayoutModel) -> None:
        """覆盖保存版面.

        Raises:
            DatabaseError: 写入失败
        """
        with self._db.session_scope("保存工作区") as session:
            record = session.get(WorkspaceStateRecord, WORKSPACE_KEY)
            if record is None:
                record = WorkspaceStateRecord(key=WORKSPACE_KEY)
                session.add(record)
            record.layout_json = layout.to_json()
            record.updated_at = datetime.now()
        logger.info("工作区已保存")

    def load_layout(self) -> Optional[LayoutModel]:
        """读取上次保存的版面，不存在或内容损坏时返回 None."""
        try:
            with self._db.get_session() as session:
                record = session.get(WorkspaceStateRecord, WORKSPACE_KEY)
                layout_json = record.layout_json if record else None
        except SQLAlchemyError as e:
            logger.warning(f"读取工作区失败: {e}")
            return None

        if not layout_json:
            return None
        try:
            return LayoutModel.from_json(layout_json)
        except (ValidationError, ValueError) as e:
            logger.warning(f"工作区数据损坏，使用默认版面: {e}")
            return None


@dataclass(frozen=True)
class RecentImage:
    """最近使用的图片."""

    content_hash: str
    name: str
    data_url: str
    used_at: datetime


class RecentImageGallery:
    """最近使用的商品图.

    Example:
        >>> gallery = RecentImageGallery(db, max_size=8)
        >>> gallery.add(data_url, "filter.png")
        >>> [image.name for image in gallery.recent()]
        ['filter.png']
    """

    def __init__(self, db: DatabaseService, max_size: int = RECENT_GALLERY_SIZE) -> None:
        self._db = db
        self._max_size = max(1, max_size)

    @property
    def max_size(self) -> int:
        return self._max_size

    def add(self, data_url: str, name: str = "") -> list[RecentImage]:
        """记录一次使用.

        Raises:
            ImageDecodeError: data URL 无效
            DatabaseError: 写入失败
        """
        digest = content_hash(data_url_to_bytes(data_url))
        with self._db.session_scope("记录最近使用的图片") as session:
            latest = session.scalar(select(func.max(RecentImageRecord.used_seq))) or 0
            record = session.scalar(
                select(RecentImageRecord).where(RecentImageRecord.content_hash == digest)
            )
            if record is None:
                record = RecentImageRecord(content_hash=digest, data_url=data_url)
                session.add(record)
            if name:
                record.name = name
            record.used_seq = latest + 1
            record.used_at = datetime.now()
            session.flush()

            stale = session.scalars(
                select(RecentImageRecord)
                .order_by(RecentImageRecord.used_seq.desc())
                .offset(self._max_size)
            ).all()
            for old in stale:
                session.delete(old)

        return self.recent()

    def recent(self) -> list[RecentImage]:
        """最近使用的图片，最新的在前."""
        try:
            with self._db.get_session() as session:
                records = session.scalars(
                    select(RecentImageRecord)
                    .order_by(RecentImageRecord.used_seq.desc())
                    .limit(self._max_size)
                ).all()
                return [
                    RecentImage(
                        content_hash=r.content_hash,
                        name=r.name or "",
                        data_url=r.data_url,
                        used_at=r.used_at,
                    )
                    for r in records
                ]
        except SQLAlchemyError as e:
            logger.warning(f"读取最近使用的图片失败: {e}")
            return []

    def clear(self) -> None:
        """清空记录.

        Raises:
            DatabaseError: 写入失败
        """
        with self._db.session_scope("清空最近使用的图片") as session:
            session.execute(delete(RecentImageRecord))
