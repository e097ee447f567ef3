"""重试机制模块.

提供同步函数的重试装饰器，用于模板库等网络请求。
"""

from __future__ import annotations

import functools
import time
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from post_composer.utils.logger import setup_logger

logger = setup_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry(
    max_retries: int = 3,
    delay: float = 0.5,
    backoff: float = 2.0,
    max_delay: float = 10.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> Callable[[F], F]:
    """重试装饰器.

    Args:
        max_retries: 最大重试次数（不含首次调用）
        delay: 初始延迟（秒）
        backoff: 退避乘数
        max_delay: 最大延迟（秒）
        exceptions: 需要重试的异常类型
        on_retry: 重试回调 (attempt, exception)

    Returns:
        装饰器函数

    Example:
        >>> @retry(max_retries=2, exceptions=(httpx.ConnectError,))
        ... def fetch():
        ...     ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            current_delay = delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            f"函数 {func.__name__} 重试 {max_retries} 次后仍然失败: {e}"
                        )
                        raise

                    logger.warning(
                        f"函数 {func.__name__} 执行失败 (尝试 {attempt + 1}/{max_retries + 1}): {e}"
                    )
                    if on_retry:
                        on_retry(attempt + 1, e)

                    if current_delay > 0:
                        time.sleep(current_delay)
                    current_delay = min(current_delay * backoff, max_delay)

        return wrapper  # type: ignore

    return decorator
