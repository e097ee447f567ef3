"""工作区持久化单元测试."""

import pytest

from post_composer.models.layout import AspectPreset, LayoutModel
from post_composer.services.database_service import DatabaseService
from post_composer.services.workspace_service import RecentImageGallery, WorkspaceRepository
from post_composer.utils.exceptions import ImageDecodeError
from post_composer.utils.image_utils import bytes_to_data_url


@pytest.fixture
def db(tmp_path):
    service = DatabaseService(tmp_path / "workspace.db")
    service.init_db()
    yield service
    service.close()


def data_url(index: int) -> str:
    return bytes_to_data_url(f"image-{index}".encode())


class TestWorkspaceRepository:
    """工作区状态测试类."""

    def test_empty(self, db):
        assert WorkspaceRepository(db).load_layout() is None

    def test_save_and_load(self, db, layout):
        repo = WorkspaceRepository(db)
        layout.aspect_preset = AspectPreset.STORY
        layout.frame.move_to(12, 34)

        repo.save_layout(layout)
        restored = repo.load_layout()

        assert restored == layout

    def test_save_overwrites(self, db):
        repo = WorkspaceRepository(db)
        repo.save_layout(LayoutModel.default())
        second = LayoutModel()
        repo.save_layout(second)

        assert repo.load_layout() == second

    def test_corrupt_record(self, db):
        from post_composer.models.database import WorkspaceStateRecord
        from post_composer.services.workspace_service import WORKSPACE_KEY

        with db.get_session() as session:
            session.add(WorkspaceStateRecord(key=WORKSPACE_KEY, layout_json="{broken"))
            session.commit()

        assert WorkspaceRepository(db).load_layout() is None


class TestRecentImageGallery:
    """最近使用的商品图测试类."""

    def test_newest_first(self, db):
        gallery = RecentImageGallery(db)
        gallery.add(data_url(1), "a.png")
        gallery.add(data_url(2), "b.png")

        assert [image.name for image in gallery.recent()] == ["b.png", "a.png"]

    def test_dedup_moves_to_front(self, db):
        """测试重复使用同一张图只保留一条并移到最前."""
        gallery = RecentImageGallery(db)
        gallery.add(data_url(1), "a.png")
        gallery.add(data_url(2), "b.png")
        images = gallery.add(data_url(1))

        assert [image.name for image in images] == ["a.png", "b.png"]

    def test_evicts_oldest(self, db):
        gallery = RecentImageGallery(db, max_size=3)
        for i in range(5):
            gallery.add(data_url(i), f"{i}.png")

        names = [image.name for image in gallery.recent()]
        assert names == ["4.png", "3.png", "2.png"]

    def test_invalid_data_url(self, db):
        with pytest.raises(ImageDecodeError):
            RecentImageGallery(db).add("not a data url")

    def test_clear(self, db):
        gallery = RecentImageGallery(db)
        gallery.add(data_url(1))
        gallery.clear()
        assert gallery.recent() == []

    def test_persists_across_instances(self, db):
        RecentImageGallery(db).add(data_url(1), "a.png")
        assert RecentImageGallery(db).recent()[0].data_url == data_url(1)
