"""后台任务.

图片解码和模板库读写在 Qt 工作线程中执行，结果通过信号回到主线程，
指针事件的处理不会被阻塞。

Features:
    - 解码线程内运行独立的 asyncio 事件循环
    - 每个解码结果单独通过信号送回
    - 普通任务完成后在主线程回调
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from post_composer.services.image_loader import DecodeRequest, ImageDecoder
from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[Exception], None]


class DecodeWorker(QObject):
    """图片解码工作器.

    Signals:
        result_ready: 单个解码结果 (DecodeResult)
        finished: 全部完成
    """

    result_ready = pyqtSignal(object)
    finished = pyqtSignal()

    def __init__(
        self,
        requests: list[DecodeRequest],
        decoder: Optional[ImageDecoder] = None,
    ) -> None:
        super().__init__()
        self._requests = list(requests)
        self._decoder = decoder or ImageDecoder()

    @pyqtSlot()
    def run(self) -> None:
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(self._run())
        finally:
            loop.close()
            self.finished.emit()

    async def _run(self) -> None:
        tasks = [asyncio.ensure_future(self._decoder.decode(r)) for r in self._requests]
        for future in asyncio.as_completed(tasks):
            self.result_ready.emit(await future)


class TaskWorker(QObject):
    """通用任务工作器.

    Signals:
        succeeded: (task_id, 返回值)
        failed: (task_id, 异常)
        finished: 结束
    """

    succeeded = pyqtSignal(int, object)
    failed = pyqtSignal(int, object)
    finished = pyqtSignal()

    def __init__(self, task_id: int, func: Callable[[], Any]) -> None:
        super().__init__()
        self._task_id = task_id
        self._func = func

    @pyqtSlot()
    def run(self) -> None:
        try:
            result = self._func()
        except Exception as e:
            logger.exception(f"后台任务失败: {e}")
            self.failed.emit(self._task_id, e)
        else:
            self.succeeded.emit(self._task_id, result)
        finally:
            self.finished.emit()


class BackgroundRunner(QObject):
    """后台任务调度.

    为每个任务创建一个工作线程，任务结束后自动回收。

    Signals:
        decode_ready: 解码结果 (DecodeResult)

    Example:
        >>> runner = BackgroundRunner(window)
        >>> runner.decode_ready.connect(on_decoded)
        >>> runner.decode([request])
        >>> runner.submit(library.refresh, on_success=show_templates)
    """

    decode_ready = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._threads: dict[int, tuple[QThread, QObject]] = {}
        self._callbacks: dict[int, tuple[Optional[SuccessCallback], Optional[FailureCallback]]] = {}
        self._ids = itertools.count(1)

    @property
    def active_count(self) -> int:
        return len(self._threads)

    def _start(self, key: int, worker: QObject) -> None:
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(thread.quit)
        thread.finished.connect(self._on_thread_finished)
        self._threads[key] = (thread, worker)
        thread.start()

    @pyqtSlot()
    def _on_thread_finished(self) -> None:
        thread = self.sender()
        for key, (known, worker) in list(self._threads.items()):
            if known is thread:
                del self._threads[key]
                worker.deleteLater()
                known.deleteLater()
                break

    def decode(self, requests: list[DecodeRequest]) -> None:
        """在后台解码，结果通过 decode_ready 送回."""
        if not requests:
            return
        worker = DecodeWorker(requests)
        worker.result_ready.connect(self._on_decoded)
        self._start(next(self._ids), worker)

    def submit(
        self,
        func: Callable[[], Any],
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> int:
        """在后台执行函数，回调在主线程中调用.

        Returns:
            任务ID
        """
        task_id = next(self._ids)
        self._callbacks[task_id] = (on_success, on_failure)
        worker = TaskWorker(task_id, func)
        worker.succeeded.connect(self._on_task_succeeded)
        worker.failed.connect(self._on_task_failed)
        self._start(task_id, worker)
        return task_id

    @pyqtSlot(object)
    def _on_decoded(self, result: object) -> None:
        self.decode_ready.emit(result)

    @pyqtSlot(int, object)
    def _on_task_succeeded(self, task_id: int, result: object) -> None:
        on_success, _ = self._callbacks.pop(task_id, (None, None))
        if on_success:
            on_success(result)

    @pyqtSlot(int, object)
    def _on_task_failed(self, task_id: int, error: object) -> None:
        _, on_failure = self._callbacks.pop(task_id, (None, None))
        if on_failure:
            on_failure(error)  # type: ignore[arg-type]

    def shutdown(self, timeout_ms: int = 5000) -> None:
        """等待所有线程结束."""
        for thread, _ in list(self._threads.values()):
            thread.quit()
            thread.wait(timeout_ms)
        self._threads.clear()
        self._callbacks.clear()
