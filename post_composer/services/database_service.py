"""工作区数据库.

SQLite 文件保存工作区快照和最近使用的商品图。写操作通过
session_scope() 进行：正常结束时提交，出错时回滚并抛出 DatabaseError。
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from post_composer.models.database import Base
from post_composer.utils.constants import DATABASE_PATH
from post_composer.utils.exceptions import DatabaseError
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)


def _enable_wal(dbapi_connection, connection_record) -> None:
    # 解码线程和界面线程可能同时读写
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


class DatabaseService:
    """工作区数据库.

    Attributes:
        db_path: 数据库文件路径
        engine: SQLAlchemy 引擎

    Example:
        >>> with DatabaseService(path) as db:
        ...     db.init_db()
        ...     with db.session_scope("保存工作区") as session:
        ...         session.add(record)
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """初始化.

        Args:
            db_path: 数据库文件路径，默认 ~/.post-composer/workspace.db
        """
        self.db_path = Path(db_path or DATABASE_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
        event.listen(self.engine, "connect", _enable_wal)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.debug(f"工作区数据库: {self.db_path}")

    def init_db(self) -> None:
        """创建缺失的表."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"数据库初始化失败: {self.db_path}, {e}")
            raise DatabaseError(f"数据库初始化失败: {e}") from e
        logger.info("数据库表初始化完成")

    def get_session(self) -> Session:
        """只读查询用的会话，调用方负责关闭."""
        return self._session_factory()

    @contextmanager
    def session_scope(self, action: str = "写入数据库") -> Iterator[Session]:
        """事务会话.

        Args:
            action: 出错时日志和异常中使用的操作名称

        Raises:
            DatabaseError: 执行或提交失败（已回滚）
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"{action}失败: {e}")
            raise DatabaseError(f"{action}失败: {e}") from e
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()
        logger.debug("数据库连接已关闭")

    def __enter__(self) -> "DatabaseService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
