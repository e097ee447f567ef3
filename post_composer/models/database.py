"""数据库 ORM 模型."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class WorkspaceStateRecord(Base):
    """工作区状态表（只保存一条版面快照，不含图片）."""

    __tablename__ = "workspace_state"

    key = Column(String(50), primary_key=True)
    layout_json = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self) -> str:
        return f"<WorkspaceStateRecord(key={self.key})>"


class RecentImageRecord(Base):
    """最近使用的商品图."""

    __tablename__ = "recent_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_hash = Column(String(40), nullable=False, unique=True)
    name = Column(String(255), default="")
    data_url = Column(Text, nullable=False)
    used_seq = Column(Integer, nullable=False, default=0)  # 越大越新
    used_at = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self) -> str:
        return f"<RecentImageRecord(name={self.name}, used_at={self.used_at})>"
