"""后台任务单元测试."""

import pytest

from post_composer.core.background_worker import BackgroundRunner
from post_composer.services.image_loader import DecodeRequest, ImageSlot


@pytest.fixture
def runner(qapp):
    instance = BackgroundRunner()
    yield instance
    instance.shutdown()


class TestBackgroundRunner:
    """BackgroundRunner 测试类."""

    def test_decode(self, runner, qtbot, red_data_url):
        request = DecodeRequest(ImageSlot.PRODUCT, 1, red_data_url)

        with qtbot.waitSignal(runner.decode_ready, timeout=5000) as blocker:
            runner.decode([request])

        result = blocker.args[0]
        assert result.ok
        assert result.slot == ImageSlot.PRODUCT

    def test_decode_failure_delivered(self, runner, qtbot):
        request = DecodeRequest(ImageSlot.BACKGROUND, 1, "data:image/png;base64,AAAA")

        with qtbot.waitSignal(runner.decode_ready, timeout=5000) as blocker:
            runner.decode([request])

        assert not blocker.args[0].ok

    def test_decode_empty(self, runner):
        runner.decode([])
        assert runner.active_count == 0

    def test_submit_success(self, runner, qtbot):
        results = []
        runner.submit(lambda: 42, on_success=results.append)

        qtbot.waitUntil(lambda: results == [42], timeout=5000)

    def test_submit_failure(self, runner, qtbot):
        errors = []

        def fail():
            raise RuntimeError("boom")

        runner.submit(fail, on_failure=errors.append)

        qtbot.waitUntil(lambda: len(errors) == 1, timeout=5000)
        assert isinstance(errors[0], RuntimeError)

    def test_threads_cleaned_up(self, runner, qtbot):
        runner.submit(lambda: None)
        qtbot.waitUntil(lambda: runner.active_count == 0, timeout=5000)
